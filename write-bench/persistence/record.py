"""
Basic data structures for the disk-write benchmark.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Sequence

from configuration import TIMESTAMP_FORMAT, FINAL_ROW_MARKER

PERIODIC_ROW_FIELDS = 3
FINAL_ROW_FIELDS = 4


@dataclass(frozen=True)
class SampleRecord:
    """One row of the sample log.

    Attributes:
        timestamp: Wall-clock time the sample was taken
        elapsed_seconds: Seconds since the run started
        throughput_mibps: Throughput in MiB/s (interval for periodic rows,
            lifetime average for the final row)
        is_final: True only for the summary row written at shutdown
    """

    timestamp: datetime
    elapsed_seconds: float
    throughput_mibps: float
    is_final: bool = False

    def to_row(self) -> List[str]:
        """Render the record as CSV fields."""
        row = [
            self.timestamp.strftime(TIMESTAMP_FORMAT),
            f"{self.elapsed_seconds:f}",
            f"{self.throughput_mibps:f}",
        ]
        if self.is_final:
            row.append(FINAL_ROW_MARKER)
        return row

    @classmethod
    def from_row(cls, row: Sequence[str]) -> "SampleRecord":
        """Parse CSV fields produced by to_row().

        Raises:
            ValueError: If the row has the wrong shape or unparseable fields
        """
        if len(row) == PERIODIC_ROW_FIELDS:
            is_final = False
        elif len(row) == FINAL_ROW_FIELDS and row[3] == FINAL_ROW_MARKER:
            is_final = True
        else:
            raise ValueError(f"Malformed sample row: {list(row)!r}")

        return cls(
            timestamp=datetime.strptime(row[0], TIMESTAMP_FORMAT),
            elapsed_seconds=float(row[1]),
            throughput_mibps=float(row[2]),
            is_final=is_final,
        )
