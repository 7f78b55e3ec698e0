"""
Shared utilities for benchmark metrics calculations: throughput and unit conversions.
"""

from configuration import BYTES_PER_MIB, MILLISECONDS_PER_SECOND


def calculate_throughput_mibps(total_bytes: float, duration_ms: float) -> float:
    """
    Calculate throughput in mebibytes per second (MiB/s) from bytes and duration.

    A zero or negative duration (clock resolution, very short interval) yields
    0.0 rather than a division error.

    Args:
        total_bytes: Total bytes written
        duration_ms: Duration in milliseconds

    Returns:
        Throughput in MiB/s
    """
    if duration_ms <= 0:
        return 0.0
    bytes_per_second = total_bytes * MILLISECONDS_PER_SECOND / duration_ms
    return bytes_per_second / BYTES_PER_MIB


def calculate_throughput_mibps_from_seconds(total_bytes: float, duration_seconds: float) -> float:
    """Same as calculate_throughput_mibps() for a duration in seconds."""
    return calculate_throughput_mibps(total_bytes, duration_seconds * MILLISECONDS_PER_SECOND)


def bytes_to_mib(total_bytes: float) -> float:
    """
    Convert bytes to mebibytes (MiB).

    Args:
        total_bytes: Total bytes

    Returns:
        Size in MiB
    """
    return total_bytes / BYTES_PER_MIB

