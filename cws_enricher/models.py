"""Typed records produced by the enrichment run.

This module defines the status classification, the per-extension result
record, progress notifications, and the derived run summary.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum


class Status(str, Enum):
    """Availability classification of a store listing."""

    ACTIVE = "Active"
    REMOVED = "Removed"
    UNKNOWN = "Unknown"
    ERROR = "Error"


@dataclass(frozen=True)
class EnrichmentRecord:
    """Enriched metadata for a single extension identifier."""

    identifier: str
    name: str
    status: Status
    listing_url: str

    def to_row(self) -> dict[str, str]:
        """
        Convert the record into a CSV report row.

        Returns:
            dict[str, str]: Row keyed by the report column names.
        """
        return {
            "ExtensionID": self.identifier,
            "ExtensionName": self.name,
            "Status": self.status.value,
            "ChromeStoreURL": self.listing_url,
        }


@dataclass(frozen=True)
class ProgressEvent:
    """Notification emitted once per processed identifier."""

    index: int
    total: int
    percent: float
    identifier: str
    name: str


@dataclass(frozen=True)
class RunSummary:
    """Counts of records by status, derived from a finished run."""

    total: int = 0
    active: int = 0
    removed: int = 0
    unknown: int = 0
    error: int = 0

    @property
    def unavailable(self) -> int:
        """Records whose listing could not be resolved to a name."""
        return self.unknown + self.error

    @classmethod
    def from_records(cls, records: Iterable[EnrichmentRecord]) -> "RunSummary":
        counts = {status: 0 for status in Status}
        total = 0
        for record in records:
            counts[record.status] += 1
            total += 1

        return cls(
            total=total,
            active=counts[Status.ACTIVE],
            removed=counts[Status.REMOVED],
            unknown=counts[Status.UNKNOWN],
            error=counts[Status.ERROR],
        )
