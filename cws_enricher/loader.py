"""Extension identifier loading from local files and remote lists.

This module reads newline-delimited extension identifiers from either a local
file or an http(s) URL and normalizes them into an ordered list.
"""

import logging
from pathlib import Path
from typing import Optional

import requests

from cws_enricher.config import SOURCE_REQUEST_TIMEOUT
from cws_enricher.utils import is_remote_source

logger = logging.getLogger(__name__)


class SourceError(Exception):
    """Base error for an identifier source that cannot be loaded."""


class SourceNotFoundError(SourceError, FileNotFoundError):
    """Raised when a local identifier file does not exist."""


class SourceUnavailableError(SourceError):
    """Raised when an identifier source exists but cannot be read."""


def parse_identifiers(text: str) -> list[str]:
    """
    Split raw text into trimmed, non-blank identifiers.

    Args:
        text: Newline-delimited identifier list.

    Returns:
        list[str]: Identifiers in input order, duplicates preserved.
    """
    # Drop a leading byte order mark
    if text.startswith("\ufeff"):
        text = text[1:]

    return [line.strip() for line in text.split("\n") if line.strip()]


def _load_remote(
    url: str, session: Optional[requests.Session], timeout: float
) -> list[str]:
    client = session or requests
    try:
        logger.debug(f"Fetching identifier list: {url}")
        response = client.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise SourceUnavailableError(f"Failed to fetch identifier list {url}: {e}") from e

    return parse_identifiers(response.text)


def _load_local(path_str: str) -> list[str]:
    path = Path(path_str)
    if not path.is_file():
        raise SourceNotFoundError(f"Identifier file not found: {path_str}")

    try:
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceUnavailableError(f"Failed to read identifier file {path_str}: {e}") from e

    return parse_identifiers(text)


def load_identifiers(
    source: str,
    session: Optional[requests.Session] = None,
    timeout: float = SOURCE_REQUEST_TIMEOUT,
) -> list[str]:
    """
    Load extension identifiers from a local file or a remote URL.

    Sources starting with ``http://`` or ``https://`` are fetched with a
    single GET request; anything else is treated as a local file path.

    Args:
        source: Local file path or http(s) URL.
        session: Optional HTTP session used for remote sources.
        timeout: Request timeout in seconds for remote sources.

    Returns:
        list[str]: Trimmed, non-blank identifiers in source order.

    Raises:
        SourceNotFoundError: If a local path does not point to a file.
        SourceUnavailableError: If the source cannot be fetched or read.
    """
    source = source.strip()
    if is_remote_source(source):
        identifiers = _load_remote(source, session, timeout)
    else:
        identifiers = _load_local(source)

    logger.info(f"Loaded {len(identifiers)} extension identifiers from {source}")
    return identifiers
