from unittest.mock import MagicMock, PropertyMock

import pytest
import requests

from cws_enricher.config import STORE_BASE_URL
from cws_enricher.core import (
    ExtensionEnricher,
    PerformanceMonitor,
    create_session,
    describe_failure,
)
from cws_enricher.models import EnrichmentRecord, ProgressEvent, Status

ACTIVE_BODY = "<html><head><title>Cool Tool - Chrome Web Store</title></head></html>"


def _mock_resp(status_code: int = 200, text: str = ACTIVE_BODY) -> MagicMock:
    """Return a mock requests.Response."""
    mock = MagicMock()
    mock.status_code = status_code
    mock.text = text
    return mock


def _make_enricher(session: MagicMock, **kwargs) -> ExtensionEnricher:
    kwargs.setdefault("sleep", MagicMock())
    return ExtensionEnricher(session=session, **kwargs)


def _session_returning(*responses) -> MagicMock:
    session = MagicMock()
    session.get.side_effect = list(responses)
    return session


def test_active_listing_uses_cleaned_title() -> None:
    enricher = _make_enricher(_session_returning(_mock_resp()))

    record = enricher.enrich_identifier("abc123")

    assert record == EnrichmentRecord(
        identifier="abc123",
        name="Cool Tool",
        status=Status.ACTIVE,
        listing_url=f"{STORE_BASE_URL}/abc123",
    )


def test_not_found_status_is_removed() -> None:
    enricher = _make_enricher(_session_returning(_mock_resp(404, "Not Found")))

    record = enricher.enrich_identifier("abc123")

    assert record.status is Status.REMOVED
    assert record.name == "Removed/NotFound"


def test_not_found_marker_in_ok_page_is_removed() -> None:
    body = "<title>Chrome Web Store</title><p>This item is not available</p>"
    enricher = _make_enricher(_session_returning(_mock_resp(200, body)))

    record = enricher.enrich_identifier("abc123")

    assert record.status is Status.REMOVED
    assert record.name == "Removed/NotFound"


def test_ok_page_without_title_is_unknown() -> None:
    enricher = _make_enricher(_session_returning(_mock_resp(200, "<html></html>")))

    record = enricher.enrich_identifier("abc123")

    assert record.status is Status.UNKNOWN
    assert record.name == "Unknown"


def test_timeout_is_error() -> None:
    session = MagicMock()
    session.get.side_effect = requests.Timeout("read timed out")
    enricher = _make_enricher(session)

    record = enricher.enrich_identifier("abc123")

    assert record.status is Status.ERROR
    assert record.name == "Error/Unavailable"
    assert record.listing_url == f"{STORE_BASE_URL}/abc123"


def test_parse_failure_is_error() -> None:
    response = MagicMock()
    response.status_code = 200
    type(response).text = PropertyMock(side_effect=ValueError("bad body"))
    enricher = _make_enricher(_session_returning(response))

    record = enricher.enrich_identifier("abc123")

    assert record.status is Status.ERROR


def test_request_uses_listing_url_and_timeout() -> None:
    session = _session_returning(_mock_resp())
    enricher = _make_enricher(session, request_timeout=10)

    enricher.enrich_identifier("  abc123  ")

    session.get.assert_called_once_with(f"{STORE_BASE_URL}/abc123", timeout=10)


def test_custom_store_base_url() -> None:
    enricher = _make_enricher(
        _session_returning(_mock_resp()), store_base_url="https://store.example/detail"
    )

    record = enricher.enrich_identifier("abc")

    assert record.listing_url == "https://store.example/detail/abc"


def test_enrich_preserves_order_and_totality() -> None:
    session = _session_returning(
        _mock_resp(),
        requests.ConnectionError("connection reset"),
        _mock_resp(404, ""),
        _mock_resp(200, "<html></html>"),
    )
    enricher = _make_enricher(session)
    identifiers = ["abc123", "def456", "abc123", "ghi789"]

    records = enricher.enrich_all(identifiers)

    assert [record.identifier for record in records] == identifiers
    assert [record.status for record in records] == [
        Status.ACTIVE,
        Status.ERROR,
        Status.REMOVED,
        Status.UNKNOWN,
    ]
    assert all(record.name for record in records)
    assert all(
        record.listing_url == f"{STORE_BASE_URL}/{record.identifier}" for record in records
    )


def test_enrich_reports_progress_once_per_identifier() -> None:
    events: list[ProgressEvent] = []
    session = _session_returning(_mock_resp(), _mock_resp(404, ""), _mock_resp())
    enricher = _make_enricher(session, progress_callback=events.append)

    enricher.enrich_all(["a", "b", "c"])

    assert [event.index for event in events] == [1, 2, 3]
    assert all(event.total == 3 for event in events)
    assert [event.percent for event in events] == [33.33, 66.67, 100.0]
    assert [event.name for event in events] == ["Cool Tool", "Removed/NotFound", "Cool Tool"]


def test_enrich_pauses_between_identifiers() -> None:
    sleep = MagicMock()
    session = _session_returning(_mock_resp(), _mock_resp(), _mock_resp())
    enricher = _make_enricher(session, delay=0.5, sleep=sleep)

    enricher.enrich_all(["a", "b", "c"])

    assert sleep.call_count == 2
    sleep.assert_called_with(0.5)


def test_enrich_empty_input() -> None:
    session = MagicMock()
    enricher = _make_enricher(session)

    assert enricher.enrich_all([]) == []
    session.get.assert_not_called()


def test_classification_is_repeatable() -> None:
    session = MagicMock()
    session.get.return_value = _mock_resp()
    enricher = _make_enricher(session)

    first = enricher.enrich_identifier("abc123")
    second = enricher.enrich_identifier("abc123")

    assert first == second


def test_request_times_recorded() -> None:
    performance = PerformanceMonitor()
    session = MagicMock()
    session.get.side_effect = [_mock_resp(), requests.Timeout("slow")]
    enricher = _make_enricher(session, performance=performance)

    enricher.enrich_all(["a", "b"])

    assert performance.get_request_stats()["count"] == 2


@pytest.mark.parametrize(
    "error, expected",
    [
        (requests.Timeout("t"), "timeout"),
        (requests.exceptions.SSLError("s"), "tls"),
        (requests.ConnectionError("c"), "connection"),
        (requests.TooManyRedirects("r"), "http"),
        (ValueError("v"), "parse"),
    ],
)
def test_describe_failure(error: Exception, expected: str) -> None:
    assert describe_failure(error) == expected


def test_create_session_disables_retries() -> None:
    session = create_session()

    adapter = session.get_adapter("https://chromewebstore.google.com/detail/abc")
    assert adapter.max_retries.total == 0


def test_blank_identifier_rejected() -> None:
    session = MagicMock()
    enricher = _make_enricher(session)

    with pytest.raises(ValueError):
        enricher.enrich_identifier("   ")
    session.get.assert_not_called()


def test_enrich_skips_blank_identifiers() -> None:
    events: list[ProgressEvent] = []
    session = _session_returning(_mock_resp(), _mock_resp())
    enricher = _make_enricher(session, progress_callback=events.append)

    records = enricher.enrich_all(["abc123", "", "  ", "def456"])

    assert [record.identifier for record in records] == ["abc123", "def456"]
    assert [event.total for event in events] == [2, 2]


def test_performance_tracks_statuses_and_pauses() -> None:
    performance = PerformanceMonitor()
    sleep = MagicMock()
    session = _session_returning(_mock_resp(), _mock_resp(404, ""), requests.Timeout("slow"))
    enricher = _make_enricher(session, performance=performance, sleep=sleep)

    enricher.enrich_all(["a", "b", "c"])

    assert performance.status_counts[Status.ACTIVE] == 1
    assert performance.status_counts[Status.REMOVED] == 1
    assert performance.status_counts[Status.ERROR] == 1
    assert performance.status_counts[Status.UNKNOWN] == 0
    assert len(performance.sleep_times) == 2
    assert set(performance.get_time_breakdown()) == {"fetching", "sleeping", "other"}
