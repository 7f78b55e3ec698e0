"""
CSV persistence for benchmark samples.
"""

import csv
import os
import logging
from datetime import datetime
from typing import List, Optional

from configuration import LOG_FILE_EXTENSION, TIMESTAMP_FORMAT
from persistence.record import SampleRecord

logger = logging.getLogger(__name__)


def log_file_name(started_at: datetime) -> str:
    """Build the log file name for a run started at the given time."""
    return f"{started_at.strftime(TIMESTAMP_FORMAT)}{LOG_FILE_EXTENSION}"


class CsvSampleLog:
    """Append-only CSV log of benchmark samples.

    Every appended row is flushed and synced so that the samples of an
    interrupted run survive on disk.

    Attributes:
        path: Location of the log file
    """

    def __init__(self, log_dir: str = ".", started_at: Optional[datetime] = None):
        """Create a fresh log file named after the run start time.

        Args:
            log_dir: Directory for the log file (default: current directory)
            started_at: Run start time (defaults to now)

        Raises:
            OSError: If the log file cannot be created
        """
        started_at = started_at or datetime.now()
        self.path: str = os.path.join(log_dir, log_file_name(started_at))
        self._file = open(self.path, "w", newline="")
        self._writer = csv.writer(self._file)
        self.rows_written = 0

        logger.info(f"Writing samples to {self.path}")

    def append(self, record: SampleRecord) -> None:
        """Append one record and flush it to storage.

        Args:
            record: Sample to store
        """
        self._writer.writerow(record.to_row())
        self._file.flush()
        os.fsync(self._file.fileno())
        self.rows_written += 1

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()
            logger.debug(f"Closed sample log {self.path} after {self.rows_written} rows")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def read_records(path: str) -> List[SampleRecord]:
    """Load all records from a sample log.

    Args:
        path: Path to a log written by CsvSampleLog

    Returns:
        Records in file order

    Raises:
        ValueError: If a row does not match the log schema
    """
    with open(path, newline="") as f:
        return [SampleRecord.from_row(row) for row in csv.reader(f) if row]
