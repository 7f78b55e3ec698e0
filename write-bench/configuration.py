"""
Configuration constants for the disk-write benchmark.

This module contains all configuration parameters including:
- Write loop defaults (chunk size, sync behaviour)
- Sampling defaults (interval, log naming)
- Unit conversion factors
- Analysis and plotting parameters

It also defines BenchmarkConfig, the immutable per-run configuration built
from the command line.
"""

import os
from dataclasses import dataclass

from common.errors import ConfigurationError

# =============================================================================
# WRITE LOOP CONFIGURATION
# =============================================================================

DEFAULT_CHUNK_SIZE: int = int(os.getenv("WRITE_BENCH_CHUNK_SIZE", "65536"))  # Bytes per write
DEFAULT_SYNC: bool = os.getenv("WRITE_BENCH_SYNC", "true").lower() in ("1", "true", "yes", "on")
OUTPUT_FILE_MODE: int = 0o644  # Permissions for a freshly created output file
FILL_BYTE: bytes = b"\x00"  # Content of the chunk buffer

# =============================================================================
# SAMPLING CONFIGURATION
# =============================================================================

DEFAULT_INTERVAL_MS: int = int(os.getenv("WRITE_BENCH_INTERVAL_MS", "250"))
DEFAULT_LOG_DIR: str = os.getenv("WRITE_BENCH_LOG_DIR", ".")
LOG_FILE_EXTENSION: str = ".csv"
TIMESTAMP_FORMAT: str = "%Y-%m-%d_%H-%M-%S"  # Used for log names and the timestamp column
FINAL_ROW_MARKER: str = "End"

# =============================================================================
# OBSERVABILITY
# =============================================================================

LOG_LEVEL: str = os.getenv("WRITE_BENCH_LOG_LEVEL", "INFO")
LOG_FORMAT: str = "%(asctime)s - %(levelname)s - %(message)s"
DEFAULT_PROMETHEUS_PORT: int = int(os.getenv("WRITE_BENCH_PROMETHEUS_PORT", "0"))  # 0 = disabled

# =============================================================================
# FILE SIZE CONSTANTS
# =============================================================================

BYTES_PER_MIB: int = 1024 * 1024
MILLISECONDS_PER_SECOND: int = 1000

# =============================================================================
# ANALYSIS CONFIGURATION
# =============================================================================

MOVING_AVERAGE_WINDOW: int = 10  # Samples per moving-average window
DEFAULT_PLOTS_DIR: str = "plots"
PLOT_DPI: int = 150


@dataclass(frozen=True)
class BenchmarkConfig:
    """Per-run benchmark configuration, fixed for the lifetime of the run.

    Attributes:
        output_path: File or device the benchmark writes to
        chunk_size: Bytes per write operation
        interval_ms: Sampling interval in milliseconds
        sync: Force a durability flush after every write
        log_dir: Directory in which the timestamp-named sample log is created
        prometheus_port: Port for the metrics exporter (0 disables it)
    """

    output_path: str
    chunk_size: int = DEFAULT_CHUNK_SIZE
    interval_ms: int = DEFAULT_INTERVAL_MS
    sync: bool = DEFAULT_SYNC
    log_dir: str = DEFAULT_LOG_DIR
    prometheus_port: int = DEFAULT_PROMETHEUS_PORT

    def __post_init__(self):
        if not self.output_path:
            raise ConfigurationError("Output path must not be empty")
        if self.chunk_size <= 0:
            raise ConfigurationError(f"Chunk size must be positive, got {self.chunk_size}")
        if self.interval_ms <= 0:
            raise ConfigurationError(f"Interval must be positive, got {self.interval_ms} ms")
        if not 0 <= self.prometheus_port <= 65535:
            raise ConfigurationError(f"Invalid Prometheus port: {self.prometheus_port}")

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / MILLISECONDS_PER_SECOND
