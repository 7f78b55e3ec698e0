"""
Exception types raised by the disk-write benchmark.
"""


class BenchmarkError(Exception):
    """Base class for benchmark failures."""


class ConfigurationError(BenchmarkError, ValueError):
    """Invalid command-line or runtime configuration."""


class WriteError(BenchmarkError):
    """The write syscall failed; the run cannot continue."""

    def __init__(self, path: str, cause: OSError):
        super().__init__(f"Error writing to {path}: {cause}")
        self.path = path
        self.cause = cause
