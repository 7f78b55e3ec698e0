"""
Thread-safe byte counters shared by the writer and the sampler.
"""

import threading
import time
from typing import Callable, Optional, Tuple

from configuration import MILLISECONDS_PER_SECOND


class RunningTotals:
    """Byte counters for the current sampling interval and the whole run.

    The writer thread calls add() after every write while the sampler and
    reporter read from the event loop thread, so every access goes through
    a single lock. Times come from a monotonic clock.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """Initialize the counters and start the run clock.

        Args:
            clock: Monotonic time source in seconds (injectable for tests)
        """
        self.clock = clock
        self._lock = threading.Lock()
        self._interval_bytes = 0
        self._lifetime_bytes = 0
        self.start_time: float = clock()
        self._last_sample_time: float = self.start_time

    def add(self, written: int) -> None:
        """Account for bytes accepted by one write.

        Args:
            written: Number of bytes the write call accepted
        """
        if written < 0:
            raise ValueError(f"Byte count must not be negative: {written}")
        with self._lock:
            self._interval_bytes += written
            self._lifetime_bytes += written

    def snapshot_and_reset(self, now: Optional[float] = None) -> Tuple[int, float]:
        """Read and reset the interval counter in one step.

        Args:
            now: Current clock reading (defaults to the clock)

        Returns:
            Tuple of (bytes written since the previous reset, elapsed milliseconds)
        """
        if now is None:
            now = self.clock()
        with self._lock:
            interval_bytes = self._interval_bytes
            elapsed_ms = (now - self._last_sample_time) * MILLISECONDS_PER_SECOND
            self._interval_bytes = 0
            self._last_sample_time = now
        return interval_bytes, elapsed_ms

    def lifetime(self, now: Optional[float] = None) -> Tuple[int, float]:
        """Get lifetime bytes and seconds elapsed since the run started."""
        if now is None:
            now = self.clock()
        with self._lock:
            return self._lifetime_bytes, now - self.start_time

    def elapsed_seconds(self, now: Optional[float] = None) -> float:
        if now is None:
            now = self.clock()
        return now - self.start_time

    @property
    def interval_bytes(self) -> int:
        with self._lock:
            return self._interval_bytes

    @property
    def lifetime_bytes(self) -> int:
        with self._lock:
            return self._lifetime_bytes
