"""
CSV report generator for documenting migration outcomes.

This module is responsible for:
- Creating a CSV report with one row per home folder
- Streaming writes to keep memory low
- Recording run parameters for traceability
- Generating summary statistics
"""

import csv
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, TextIO, Union

from .types import ReportEntry, ReportStatus, UnitResult

logger = logging.getLogger(__name__)

# CSV column headers in order
REPORT_COLUMNS = [
    "timestamp",
    "account_id",
    "status",
    "source_path",
    "dest_path",
    "message",
]


class ReportWriter:
    """
    Streaming CSV report writer for migration results.

    Use as a context manager so the file is closed even if the run fails.
    """

    def __init__(
        self,
        report_path: Union[str, Path],
        include_header: bool = True
    ):
        """
        Initialize the report writer.

        Args:
            report_path: Path where the CSV report will be written
            include_header: Whether to write header row (default: True)
        """
        self.report_path = Path(report_path)
        self.include_header = include_header

        self._file: Optional[TextIO] = None
        self._writer = None
        self._row_count = 0
        self._stats: Dict[str, int] = {}

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def open(self) -> None:
        """Open the report file for writing."""
        if self._file is not None:
            return

        self.report_path.parent.mkdir(parents=True, exist_ok=True)

        logger.info(f"Opening report file: {self.report_path}")
        self._file = open(self.report_path, "w", newline="", encoding="utf-8")
        self._writer = csv.writer(self._file, quoting=csv.QUOTE_MINIMAL)

        if self.include_header:
            self._writer.writerow(REPORT_COLUMNS)

    def close(self) -> None:
        """Close the report file."""
        if self._file is not None:
            self._file.close()
            self._file = None
            self._writer = None
            logger.info(
                f"Report closed: {self._row_count} rows written to {self.report_path}"
            )

    def _ensure_open(self) -> None:
        if self._file is None:
            self.open()

    def _get_timestamp(self) -> str:
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    def write_parameters(self, params: Dict[str, str]) -> None:
        """
        Write run parameters as rows with status "PARAMETER".

        Empty values are omitted. A separator row closes the block.
        """
        self._ensure_open()
        timestamp = self._get_timestamp()

        for key, value in params.items():
            if value:
                self._writer.writerow([timestamp, "", "PARAMETER", "", "", f"{key}={value}"])
                self._row_count += 1

        self._writer.writerow([timestamp, "", "PARAMETER", "", "", "--- END PARAMETERS ---"])
        self._row_count += 1
        self._file.flush()

    def write_entry(self, entry: ReportEntry) -> None:
        """Write a single report entry to the CSV."""
        self._ensure_open()

        self._writer.writerow([
            entry.timestamp,
            entry.account_id,
            entry.status,
            entry.source_path,
            entry.dest_path,
            entry.message,
        ])
        self._row_count += 1
        self._stats[entry.status] = self._stats.get(entry.status, 0) + 1

        # Flush periodically for safety
        if self._row_count % 100 == 0:
            self._file.flush()

    def write_unit_result(
        self,
        result: UnitResult,
        timestamp: Optional[str] = None
    ) -> None:
        """
        Write a UnitResult to the report.

        Args:
            result: The UnitResult to record
            timestamp: Optional timestamp (defaults to current time)
        """
        entry = ReportEntry(
            timestamp=timestamp or self._get_timestamp(),
            account_id=result.account_id,
            status=ReportStatus.from_unit_status(result.status).value,
            source_path=result.source_path,
            dest_path=result.dest_path or "",
            message=result.message,
        )
        self.write_entry(entry)

    def get_stats(self) -> Dict[str, int]:
        """Get a copy of the status -> count statistics."""
        return dict(self._stats)
