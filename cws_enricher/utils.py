"""Utility functions for Chrome Web Store listing processing.

This module provides utility functions for listing URL construction, page
title extraction, not-found detection, and filename and URL validation used
throughout the application.
"""

import urllib.parse
from pathlib import Path
from typing import Optional

import validators
from bs4 import BeautifulSoup

from cws_enricher.config import NOT_FOUND_MARKERS, STORE_NAME, STORE_TITLE_SUFFIXES


def sanitize_filename(filename: str) -> str:
    """
    Sanitize the file name part of an output path.

    Replaces characters that are invalid on common filesystems and strips
    control characters while keeping the parent directory intact.

    Args:
        filename: Raw output path to sanitize.

    Returns:
        str: Output path with a filesystem-safe file name.
    """
    path = Path(filename)
    name = path.name

    # Remove or replace invalid characters
    invalid_chars = '<>:"/\\|?*'
    for char in invalid_chars:
        name = name.replace(char, "_")

    # Remove control characters
    name = "".join(char for char in name if ord(char) >= 32)

    # Limit length and ensure not empty
    name = name[:255].strip()
    if not name:
        name = "output"

    return str(path.with_name(name))


def is_remote_source(source: str) -> bool:
    """Return True when the source descriptor is an http(s) URL."""
    return source.startswith(("http://", "https://"))


def build_listing_url(store_base_url: str, identifier: str) -> str:
    """
    Build the store listing URL for an extension identifier.

    The identifier is trimmed and appended verbatim; no URL encoding is
    applied.

    Args:
        store_base_url: Base URL of the store detail pages.
        identifier: Extension identifier.

    Returns:
        str: Listing URL in the form ``<base>/<identifier>``.
    """
    return f"{store_base_url}/{identifier.strip()}"


def strip_store_suffix(title: str) -> str:
    """Remove a trailing storefront name such as " - Chrome Web Store"."""
    for suffix in STORE_TITLE_SUFFIXES:
        if title.endswith(suffix):
            return title[: -len(suffix)].strip()
    return title


def extract_title(body: str) -> Optional[str]:
    """
    Extract the extension name from a listing page.

    Parses the HTML content, reads the ``<title>`` element and removes the
    storefront suffix to get the clean extension name.

    Args:
        body: Listing page HTML.

    Returns:
        The clean extension name, or None if the page has no usable title.
    """
    soup = BeautifulSoup(body, "html.parser")

    if not soup.title or not soup.title.string:
        return None

    title = strip_store_suffix(soup.title.string.strip())

    # The bare storefront name means the page is not an item listing
    if not title or title == STORE_NAME:
        return None

    return title


def is_not_found_page(body: str) -> bool:
    """Return True when the page body carries a store not-found marker."""
    return any(marker in body for marker in NOT_FOUND_MARKERS)


def validate_url(url: str) -> bool:
    """
    Validate URL format for use as a store base URL.

    Args:
        url: URL string to validate.

    Returns:
        bool: True if URL is a well-formed http or https URL, False otherwise.
    """
    if not url or not isinstance(url, str):
        return False

    # Check basic URL format
    if not validators.url(url):
        return False

    return urllib.parse.urlparse(url).scheme in ("http", "https")
