"""
Write loop for the disk-write benchmark.
"""

import os
import errno
import threading
import logging
from typing import Optional

from configuration import FILL_BYTE, OUTPUT_FILE_MODE
from common.errors import WriteError
from common.running_totals import RunningTotals

logger = logging.getLogger(__name__)


def open_output(path: str) -> int:
    """Open the benchmark target for writing.

    The target is appended to if it exists and created otherwise.

    Args:
        path: Output file or device path

    Returns:
        Low-level file descriptor

    Raises:
        OSError: If the target cannot be opened or created
    """
    return os.open(path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, OUTPUT_FILE_MODE)


class Writer:
    """Writes a fixed chunk to the output as fast as storage accepts it."""

    def __init__(
        self,
        fd: int,
        totals: RunningTotals,
        chunk_size: int,
        sync: bool = True,
        path: str = "",
        metrics=None,
    ):
        """Initialize the writer.

        Args:
            fd: File descriptor of the output target
            totals: Shared counters updated after every write
            chunk_size: Bytes per write
            sync: Call fsync after every successful write
            path: Output path, used in messages
            metrics: Optional exporter with a record_write(written, requested) method
        """
        if chunk_size <= 0:
            raise ValueError(f"Chunk size must be positive, got {chunk_size}")

        self.fd = fd
        self.totals = totals
        self.chunk_size = chunk_size
        self.sync = sync
        self.path = path
        self.metrics = metrics
        self.buffer = FILL_BYTE * chunk_size
        self.writes = 0
        self.short_writes = 0
        self._stop = threading.Event()

        logger.info(
            f"Initialized writer: {chunk_size} byte chunks, sync={'on' if sync else 'off'}"
        )

    def write_once(self) -> int:
        """Write one chunk and account for it.

        Returns:
            Number of bytes the write call accepted

        Raises:
            WriteError: If the write or the sync fails
        """
        try:
            written = os.write(self.fd, self.buffer)
        except OSError as e:
            raise WriteError(self.path, e) from e

        if self.sync:
            self._sync()

        if written != self.chunk_size:
            self.short_writes += 1
            logger.warning(f"Could only write {written} of {self.chunk_size} bytes "
                           f"({self.chunk_size - written} missing)")

        self.totals.add(written)
        self.writes += 1
        if self.metrics is not None:
            self.metrics.record_write(written, self.chunk_size)
        return written

    def _sync(self) -> None:
        try:
            os.fsync(self.fd)
        except OSError as e:
            # Character devices such as /dev/null cannot be synced
            if e.errno != errno.EINVAL:
                raise WriteError(self.path, e) from e
            logger.warning(f"{self.path or 'Output'} does not support sync, continuing without it")
            self.sync = False

    def run(self, max_writes: Optional[int] = None) -> int:
        """Write until stopped.

        Blocks the calling thread; the orchestrator runs it in an executor.

        Args:
            max_writes: Stop after this many writes (None = until stop() is called)

        Returns:
            Number of writes performed by this call

        Raises:
            WriteError: On the first failed write
        """
        performed = 0
        while not self._stop.is_set():
            if max_writes is not None and performed >= max_writes:
                break
            try:
                self.write_once()
            except WriteError as e:
                logger.error(str(e))
                raise
            performed += 1

        logger.debug(f"Writer stopped after {performed} writes ({self.short_writes} short)")
        return performed

    def stop(self) -> None:
        """Ask the loop to exit after the write in progress."""
        self._stop.set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()
