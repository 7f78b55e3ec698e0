"""
Sample records and their on-disk log.
"""
