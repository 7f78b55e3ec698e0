"""
Final lifetime report for the disk-write benchmark.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from common.metrics_utils import bytes_to_mib, calculate_throughput_mibps_from_seconds
from common.running_totals import RunningTotals
from persistence.csv_log import CsvSampleLog
from persistence.record import SampleRecord

logger = logging.getLogger(__name__)


class Reporter:
    """Writes the single summary row once the write and sample loops have stopped."""

    def __init__(
        self,
        totals: RunningTotals,
        sample_log: CsvSampleLog,
        wall_clock: Callable[[], datetime] = datetime.now,
    ):
        self.totals = totals
        self.sample_log = sample_log
        self.wall_clock = wall_clock
        self.reported: Optional[SampleRecord] = None

    def report(self, now: Optional[float] = None) -> SampleRecord:
        """Compute lifetime average throughput and append the final row.

        Args:
            now: Monotonic clock reading (defaults to the counters' clock)

        Returns:
            The final record

        Raises:
            RuntimeError: If called more than once
        """
        if self.reported is not None:
            raise RuntimeError("Final report already written")

        lifetime_bytes, elapsed_seconds = self.totals.lifetime(now)
        throughput = calculate_throughput_mibps_from_seconds(lifetime_bytes, elapsed_seconds)

        print(f"Total: {throughput:f} MByte/s", flush=True)
        logger.info(
            f"Wrote {bytes_to_mib(lifetime_bytes):.1f} MiB in {elapsed_seconds:.1f}s"
        )

        record = SampleRecord(
            timestamp=self.wall_clock(),
            elapsed_seconds=elapsed_seconds,
            throughput_mibps=throughput,
            is_final=True,
        )
        self.sample_log.append(record)
        self.reported = record
        return record
