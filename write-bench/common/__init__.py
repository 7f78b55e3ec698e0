"""
Common utilities for the disk-write benchmark.
"""

from .errors import BenchmarkError, ConfigurationError, WriteError

__all__ = ['BenchmarkError', 'ConfigurationError', 'WriteError']
