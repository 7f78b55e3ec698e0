"""
Metrics exporters.
"""
