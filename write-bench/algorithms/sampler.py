"""
Periodic throughput sampling for the disk-write benchmark.
"""

import asyncio
import logging
from concurrent.futures import Executor
from datetime import datetime
from typing import Callable, Optional

from common.metrics_utils import calculate_throughput_mibps
from common.running_totals import RunningTotals
from persistence.csv_log import CsvSampleLog
from persistence.record import SampleRecord

logger = logging.getLogger(__name__)


class Sampler:
    """Turns the writer's interval counter into one log row per interval."""

    def __init__(
        self,
        totals: RunningTotals,
        sample_log: CsvSampleLog,
        interval_seconds: float,
        metrics=None,
        wall_clock: Callable[[], datetime] = datetime.now,
        log_executor: Optional[Executor] = None,
    ):
        if interval_seconds <= 0:
            raise ValueError(f"Interval must be positive, got {interval_seconds}s")

        self.totals = totals
        self.sample_log = sample_log
        self.interval_seconds = interval_seconds
        self.metrics = metrics
        self.wall_clock = wall_clock
        # Log rows are fsynced, so run() appends them off the event loop
        self.log_executor = log_executor
        self.samples_taken = 0

        logger.info(f"Initialized sampler: every {interval_seconds * 1000:.0f} ms")

    def take_sample(self, now: Optional[float] = None) -> SampleRecord:
        """Read and reset the interval counter and print the throughput.

        Args:
            now: Monotonic clock reading (defaults to the counters' clock)

        Returns:
            The record to append to the log
        """
        if now is None:
            now = self.totals.clock()
        interval_bytes, elapsed_ms = self.totals.snapshot_and_reset(now)
        throughput = calculate_throughput_mibps(interval_bytes, elapsed_ms)
        if elapsed_ms <= 0:
            logger.debug("Zero-length sampling interval, reporting 0 MByte/s")

        print(f"{throughput:f} MByte/s", flush=True)

        return SampleRecord(
            timestamp=self.wall_clock(),
            elapsed_seconds=self.totals.elapsed_seconds(now),
            throughput_mibps=throughput,
        )

    def record_sample(self, record: SampleRecord) -> None:
        """Append a sample to the log and publish it."""
        self.sample_log.append(record)
        self.samples_taken += 1

        if self.metrics is not None:
            self.metrics.update_throughput(record.throughput_mibps)

    def sample_once(self, now: Optional[float] = None) -> SampleRecord:
        """Take one sample and append it to the log on the calling thread."""
        record = self.take_sample(now)
        self.record_sample(record)
        return record

    async def run(self, stop_event: asyncio.Event) -> int:
        """Sample once per interval until stop_event is set.

        Scheduling is fixed-delay: each sleep starts after the previous sample
        has been written. The counter is read on the event loop; the blocking
        log append runs in the log executor.

        Returns:
            Number of samples taken
        """
        loop = asyncio.get_running_loop()
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.interval_seconds)
                break
            except asyncio.TimeoutError:
                pass
            record = self.take_sample()
            await loop.run_in_executor(self.log_executor, self.record_sample, record)

        logger.debug(f"Sampler stopped after {self.samples_taken} samples")
        return self.samples_taken
