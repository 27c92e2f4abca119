"""Core Chrome Web Store extension enrichment engine.

This module contains the main application logic for enriching extension
identifiers with store metadata, including performance monitoring, sequential
rate-limited fetching, status classification, and report output.
"""

import logging
import os
import sys
import time
from collections.abc import Iterable, Iterator
from typing import Callable, Optional

import psutil
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from cws_enricher.config import (
    DEFAULT_DELAY_BETWEEN_REQUESTS,
    DEFAULT_LOG_FORMAT,
    DEFAULT_LOG_LEVEL,
    DEFAULT_REQUEST_TIMEOUT,
    ERROR_NAME,
    GITHUB_ACTIONS_LOG_FORMAT,
    REMOVED_NAME,
    RETRY_TOTAL,
    STORE_BASE_URL,
    UNKNOWN_NAME,
)
from cws_enricher.loader import load_identifiers
from cws_enricher.models import EnrichmentRecord, ProgressEvent, RunSummary, Status
from cws_enricher.report import CsvReportWriter, write_github_output
from cws_enricher.utils import build_listing_url, extract_title, is_not_found_page

ProgressCallback = Callable[[ProgressEvent], None]


class PerformanceMonitor:
    """
    Performance monitoring and statistics collection for the application.

    This class tracks execution time, memory usage, listing request timings,
    time spent pausing between listings, and listing outcomes by status for
    an enrichment run.
    """

    def __init__(self):
        """Initialize performance monitoring with baseline metrics."""
        self.start_time = time.time()
        self.process = psutil.Process()
        self.start_memory = self.process.memory_info().rss
        self.request_times = []
        self.sleep_times = []
        self.status_counts = {status: 0 for status in Status}

    def record_request_time(self, duration: float) -> None:
        """
        Record HTTP request execution time.

        Args:
            duration: Request duration in seconds.
        """
        self.request_times.append(duration)

    def record_sleep_time(self, duration: float) -> None:
        """Record time spent pausing between listing requests."""
        self.sleep_times.append(duration)

    def record_status(self, status: Status) -> None:
        """Count a classified listing outcome."""
        self.status_counts[status] += 1

    def get_memory_usage(self) -> dict[str, float]:
        """
        Get current memory usage statistics in megabytes.

        Returns:
            dict[str, float]: Current resident memory and increase from baseline.
        """
        memory_info = self.process.memory_info()
        return {
            "current_mb": memory_info.rss / 1024 / 1024,
            "increase_mb": (memory_info.rss - self.start_memory) / 1024 / 1024,
        }

    def get_request_stats(self) -> dict[str, float]:
        """
        Get HTTP request timing statistics.

        Returns:
            dict[str, float]: Request count and average, minimum, and maximum
                execution times.
        """
        if not self.request_times:
            return {"count": 0, "avg": 0.0, "min": 0.0, "max": 0.0}

        return {
            "count": len(self.request_times),
            "avg": sum(self.request_times) / len(self.request_times),
            "min": min(self.request_times),
            "max": max(self.request_times),
        }

    def get_elapsed_time(self) -> float:
        """Get total elapsed execution time in seconds."""
        return time.time() - self.start_time

    def get_time_breakdown(self) -> dict[str, float]:
        """
        Split elapsed time into fetching, pausing, and everything else.

        Returns:
            dict[str, float]: Seconds spent fetching listings, sleeping
                between them, and on other work such as parsing and writing.
        """
        elapsed_time = self.get_elapsed_time()
        fetching = sum(self.request_times)
        sleeping = sum(self.sleep_times)
        return {
            "fetching": fetching,
            "sleeping": sleeping,
            "other": max(elapsed_time - fetching - sleeping, 0.0),
        }

    def log_performance_summary(self, logger: logging.Logger) -> None:
        """
        Log run timings and listing outcomes to the provided logger.

        Args:
            logger: Logger instance to write performance metrics to.
        """
        elapsed_time = self.get_elapsed_time()
        memory_usage = self.get_memory_usage()
        request_statistics = self.get_request_stats()
        breakdown = self.get_time_breakdown()

        logger.info("=" * 60)
        logger.info("PERFORMANCE SUMMARY")
        logger.info("=" * 60)
        logger.info(f"Total execution time: {elapsed_time:.2f} seconds")
        logger.info(
            f"Time fetching: {breakdown['fetching']:.2f}s, "
            f"pausing: {breakdown['sleeping']:.2f}s, "
            f"other: {breakdown['other']:.2f}s"
        )
        logger.info(
            f"Memory usage: {memory_usage['current_mb']:.1f} MB "
            f"(increase: {memory_usage['increase_mb']:.1f} MB)"
        )
        logger.info("-" * 40)
        logger.info(f"Listing requests: {request_statistics['count']}")
        if request_statistics["count"] > 0:
            logger.info(
                f"Request timing - Avg: {request_statistics['avg']:.3f}s, "
                f"Min: {request_statistics['min']:.3f}s, "
                f"Max: {request_statistics['max']:.3f}s"
            )
            logger.info(
                "Listings by status - "
                + ", ".join(
                    f"{status.value}: {count}"
                    for status, count in self.status_counts.items()
                )
            )
        logger.info("=" * 60)


def setup_logging() -> None:
    """
    Configure application logging for different environments.

    Reads the level from ``LOG_LEVEL`` and switches to a simplified format
    when running under GitHub Actions.
    """
    log_level = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()

    log_format = DEFAULT_LOG_FORMAT
    if os.getenv("GITHUB_ACTIONS") == "true":
        log_format = GITHUB_ACTIONS_LOG_FORMAT

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format=log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def create_session() -> requests.Session:
    """
    Create an HTTP session that makes exactly one attempt per request.

    Returns:
        requests.Session: Session with retries disabled for http and https.
    """
    session = requests.Session()

    adapter = HTTPAdapter(max_retries=Retry(total=RETRY_TOTAL, read=False))
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    return session


def describe_failure(error: Exception) -> str:
    """
    Tag a listing failure with its cause for logging.

    The public record status stays ``Error`` whatever the cause.

    Args:
        error: Exception raised while fetching or parsing a listing.

    Returns:
        str: One of ``timeout``, ``tls``, ``connection``, ``http`` or ``parse``.
    """
    if isinstance(error, requests.Timeout):
        return "timeout"
    if isinstance(error, requests.exceptions.SSLError):
        return "tls"
    if isinstance(error, requests.ConnectionError):
        return "connection"
    if isinstance(error, requests.RequestException):
        return "http"
    return "parse"


class ExtensionEnricher:
    """
    Chrome Web Store extension metadata enrichment system.

    This class fetches the store listing of each extension identifier one at
    a time, classifies its availability, extracts its display name, and
    reports progress after every identifier.
    """

    def __init__(
        self,
        store_base_url: str = STORE_BASE_URL,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        delay: float = DEFAULT_DELAY_BETWEEN_REQUESTS,
        session: Optional[requests.Session] = None,
        progress_callback: Optional[ProgressCallback] = None,
        sleep: Callable[[float], None] = time.sleep,
        performance: Optional[PerformanceMonitor] = None,
    ) -> None:
        """
        Initialize the enrichment engine.

        Args:
            store_base_url: Base URL that identifiers are appended to.
            request_timeout: HTTP request timeout duration in seconds.
            delay: Pause between consecutive identifiers in seconds.
            session: HTTP session to use; a single-attempt session by default.
            progress_callback: Called once per processed identifier.
            sleep: Function used to pause between identifiers.
            performance: Monitor receiving request timings.
        """
        self.store_base_url = store_base_url
        self.request_timeout = request_timeout
        self.delay = delay
        self.session = session or create_session()
        self.progress_callback = progress_callback
        self.sleep = sleep
        self.performance = performance
        self.logger = logging.getLogger(__name__)

    def _fetch(self, url: str) -> requests.Response:
        start_time = time.time()
        try:
            return self.session.get(url, timeout=self.request_timeout)
        finally:
            if self.performance is not None:
                self.performance.record_request_time(time.time() - start_time)

    def classify_response(self, response: requests.Response) -> tuple[Status, str]:
        """
        Classify a listing response into a status and display name.

        Args:
            response: Listing page response.

        Returns:
            tuple[Status, str]: Record status and resolved name.
        """
        if not 200 <= response.status_code < 300:
            return Status.REMOVED, REMOVED_NAME

        body = response.text
        if is_not_found_page(body):
            return Status.REMOVED, REMOVED_NAME

        title = extract_title(body)
        if title is None:
            return Status.UNKNOWN, UNKNOWN_NAME

        return Status.ACTIVE, title

    def enrich_identifier(self, identifier: str) -> EnrichmentRecord:
        """
        Fetch and classify the listing of a single identifier.

        Any failure while fetching or parsing yields an ``Error`` record
        instead of propagating.

        Args:
            identifier: Extension identifier.

        Returns:
            EnrichmentRecord: Fully populated record for the identifier.

        Raises:
            ValueError: If the identifier is blank.
        """
        identifier = identifier.strip()
        if not identifier:
            raise ValueError("Extension identifier must not be blank")

        listing_url = build_listing_url(self.store_base_url, identifier)

        try:
            self.logger.debug(f"Fetching listing: {listing_url}")
            response = self._fetch(listing_url)
            status, name = self.classify_response(response)
        except Exception as e:
            self.logger.warning(
                f"Failed to enrich {identifier} ({describe_failure(e)}): {e}"
            )
            status, name = Status.ERROR, ERROR_NAME

        if self.performance is not None:
            self.performance.record_status(status)

        return EnrichmentRecord(
            identifier=identifier,
            name=name,
            status=status,
            listing_url=listing_url,
        )

    def _pause(self) -> None:
        start_time = time.time()
        self.sleep(self.delay)
        if self.performance is not None:
            self.performance.record_sleep_time(time.time() - start_time)

    def _report_progress(self, event: ProgressEvent) -> None:
        self.logger.info(
            f"[{event.index}/{event.total}] ({event.percent:.2f}%) "
            f"{event.identifier} -> {event.name}"
        )
        if self.progress_callback is not None:
            self.progress_callback(event)

    def enrich(self, identifiers: Iterable[str]) -> Iterator[EnrichmentRecord]:
        """
        Enrich identifiers sequentially, yielding one record per identifier.

        Blank identifiers are skipped. Records are yielded in input order, a
        progress notification follows every record, and the configured delay
        separates consecutive requests.

        Args:
            identifiers: Extension identifiers in processing order.

        Yields:
            EnrichmentRecord: Record for each identifier.
        """
        identifiers = [identifier for identifier in identifiers if identifier.strip()]
        total = len(identifiers)

        for index, identifier in enumerate(identifiers, 1):
            record = self.enrich_identifier(identifier)
            yield record

            self._report_progress(
                ProgressEvent(
                    index=index,
                    total=total,
                    percent=round(index / total * 100, 2),
                    identifier=record.identifier,
                    name=record.name,
                )
            )

            # Respect rate limits
            if index < total:
                self._pause()

    def enrich_all(self, identifiers: Iterable[str]) -> list[EnrichmentRecord]:
        """Enrich identifiers and return all records as a list."""
        return list(self.enrich(identifiers))


def log_summary(summary: RunSummary, logger: logging.Logger) -> None:
    """
    Log enrichment counts broken down by status.

    Args:
        summary: Final run summary.
        logger: Logger instance to write the summary to.
    """
    logger.info("=" * 60)
    logger.info("ENRICHMENT SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Total extensions processed: {summary.total}")
    logger.info(f"Active: {summary.active}")
    logger.info(f"Removed: {summary.removed}")
    logger.info(f"Unknown/Error: {summary.unavailable}")
    logger.info("=" * 60)


class ExtensionEnricherApp:
    """
    End-to-end enrichment run: load identifiers, enrich, and write the report.

    The output file is only created after the identifier source loaded
    successfully; rows are then written as each record is produced.
    """

    def __init__(
        self,
        source: str,
        output_file: str,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        delay: float = DEFAULT_DELAY_BETWEEN_REQUESTS,
        store_base_url: str = STORE_BASE_URL,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize the enrichment run.

        Args:
            source: Local file path or http(s) URL listing identifiers.
            output_file: Path for the output CSV report.
            request_timeout: Listing request timeout in seconds.
            delay: Pause between consecutive identifiers in seconds.
            store_base_url: Base URL that identifiers are appended to.
            session: HTTP session shared by the loader and the enricher.
            sleep: Function used to pause between identifiers.
        """
        self.source = source
        self.output_file = output_file
        self.session = session or create_session()
        self.performance = PerformanceMonitor()
        self.logger = logging.getLogger(__name__)
        self.enricher = ExtensionEnricher(
            store_base_url=store_base_url,
            request_timeout=request_timeout,
            delay=delay,
            session=self.session,
            sleep=sleep,
            performance=self.performance,
        )

    def run(self) -> RunSummary:
        """
        Execute the complete enrichment process.

        Returns:
            RunSummary: Counts of the written records by status.

        Raises:
            SourceError: If the identifier source cannot be loaded.
        """
        self.logger.info("🚀 Starting Chrome Web Store extension enrichment...")

        identifiers = load_identifiers(self.source, session=self.session)
        if not identifiers:
            self.logger.warning("No extension identifiers found in source")

        records = []
        try:
            with CsvReportWriter(self.output_file) as writer:
                for record in self.enricher.enrich(identifiers):
                    writer.write(record)
                    records.append(record)
        finally:
            self.logger.info(f"Saved {len(records)} records to {self.output_file}")
            self.performance.log_performance_summary(self.logger)

        summary = RunSummary.from_records(records)
        log_summary(summary, self.logger)
        write_github_output(summary, self.output_file)

        return summary
