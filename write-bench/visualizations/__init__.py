"""
Sample log analysis and plots.
"""
