"""CSV report output for enrichment results.

Rows are written as records are produced so that an interrupted run keeps
every row completed so far.
"""

import csv
import logging
import os
from collections.abc import Iterable
from pathlib import Path
from types import TracebackType
from typing import Optional, TextIO

from cws_enricher.config import CSV_COLUMNS
from cws_enricher.models import EnrichmentRecord, RunSummary

logger = logging.getLogger(__name__)


class CsvReportWriter:
    """
    Incremental CSV writer for enrichment records.

    The header row is written when the writer is opened and each record is
    flushed to disk as soon as it is written.
    """

    def __init__(self, output_file: str) -> None:
        self.output_path = Path(output_file)
        self.rows_written = 0
        self._handle: Optional[TextIO] = None
        self._writer: Optional[csv.DictWriter] = None

    def open(self) -> "CsvReportWriter":
        # Ensure parent directory exists
        self.output_path.parent.mkdir(parents=True, exist_ok=True)

        self._handle = open(self.output_path, "w", encoding="utf-8", newline="")
        self._writer = csv.DictWriter(self._handle, fieldnames=CSV_COLUMNS)
        self._writer.writeheader()
        self._handle.flush()
        return self

    def write(self, record: EnrichmentRecord) -> None:
        if self._writer is None or self._handle is None:
            raise RuntimeError("Report writer is not open")

        self._writer.writerow(record.to_row())
        self._handle.flush()
        self.rows_written += 1

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
            self._writer = None

    def __enter__(self) -> "CsvReportWriter":
        return self.open()

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()


def write_report(records: Iterable[EnrichmentRecord], output_file: str) -> int:
    """
    Write a complete sequence of records to a CSV report.

    Args:
        records: Enrichment records in output order.
        output_file: Destination CSV path.

    Returns:
        int: Number of data rows written.
    """
    with CsvReportWriter(output_file) as writer:
        for record in records:
            writer.write(record)

    logger.info(f"Successfully saved {writer.rows_written} records to {output_file}")
    return writer.rows_written


def write_github_output(summary: RunSummary, output_file: str) -> None:
    """
    Append run counts to GitHub Actions output variables for CI/CD integration.

    Does nothing outside GitHub Actions or when ``GITHUB_OUTPUT`` is unset.

    Args:
        summary: Final run summary.
        output_file: Path of the written CSV report.
    """
    if os.getenv("GITHUB_ACTIONS") != "true":
        return

    github_output = os.getenv("GITHUB_OUTPUT")
    if not github_output:
        return

    with open(github_output, "a", encoding="utf-8") as f:
        f.write(f"output_file={output_file}\n")
        f.write(f"total_items={summary.total}\n")
        f.write(f"active_items={summary.active}\n")
        f.write(f"removed_items={summary.removed}\n")
        f.write(f"unknown_items={summary.unknown}\n")
        f.write(f"error_items={summary.error}\n")
