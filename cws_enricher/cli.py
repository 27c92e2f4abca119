"""Command line interface for Chrome Web Store Extension Enricher.

This module provides command line argument parsing and validation for the
extension enrichment application, including parameter validation, environment
variable support, and timestamped default output names.
"""

import argparse
import os
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from cws_enricher.config import (
    DEFAULT_DELAY_BETWEEN_REQUESTS,
    DEFAULT_OUTPUT_PREFIX,
    DEFAULT_REQUEST_TIMEOUT,
    OUTPUT_TIMESTAMP_FORMAT,
    STORE_BASE_URL,
)
from cws_enricher.utils import sanitize_filename, validate_url


def _parse_bounded_number(value: str, cast: Callable[[str], float], allow_zero: bool):
    """
    Convert a CLI value with ``cast`` and reject negatives (and zero unless allowed).

    Raises:
        argparse.ArgumentTypeError: If the value does not convert or is out of range.
    """
    try:
        number = cast(value)
    except ValueError as exc:
        kind = "integer" if cast is int else "number"
        raise argparse.ArgumentTypeError(f"'{value}' is not a valid {kind}") from exc

    if number < 0 or (number == 0 and not allow_zero):
        bound = "non-negative" if allow_zero else "positive"
        raise argparse.ArgumentTypeError(f"'{value}' must be {bound}")
    return number


def validate_timeout(value: str) -> int:
    """Parse a request timeout in whole seconds, which must be above zero."""
    return _parse_bounded_number(value, int, allow_zero=False)


def validate_delay(value: str) -> float:
    """Parse a delay in seconds; zero disables the pause between listings."""
    return _parse_bounded_number(value, float, allow_zero=True)


def validate_output_file(value: str) -> str:
    """
    Validate and sanitize output file path.

    Ensures the output file path is safe, writable, and has the CSV
    extension.

    Args:
        value: Output file path string to validate.

    Returns:
        str: Validated and sanitized file path with .csv extension.

    Raises:
        argparse.ArgumentTypeError: If path is empty or not writable.
    """
    if not value:
        raise argparse.ArgumentTypeError("Output file path cannot be empty")

    sanitized_path = sanitize_filename(value)

    if not sanitized_path.lower().endswith(".csv"):
        sanitized_path += ".csv"

    # Verify parent directory is writable (if it exists)
    parent_directory = Path(sanitized_path).parent
    if parent_directory.exists() and not os.access(parent_directory, os.W_OK):
        raise argparse.ArgumentTypeError(
            f"Directory '{parent_directory}' is not writable"
        )

    return sanitized_path


def validate_store_url(value: str) -> str:
    """
    Validate the store base URL.

    Args:
        value: Base URL string to validate.

    Returns:
        str: Base URL without a trailing slash.

    Raises:
        argparse.ArgumentTypeError: If value is not an http or https URL.
    """
    if not validate_url(value):
        raise argparse.ArgumentTypeError(f"'{value}' is not a valid http(s) URL")
    return value.rstrip("/")


def default_output_file(now: Optional[datetime] = None) -> str:
    """
    Build a timestamped default report name.

    Args:
        now: Timestamp to use; the current local time by default.

    Returns:
        str: File name such as ``extensions_20250101_120000.csv``.
    """
    now = now or datetime.now()
    return f"{DEFAULT_OUTPUT_PREFIX}_{now.strftime(OUTPUT_TIMESTAMP_FORMAT)}.csv"


def prompt_for_source(input_func: Optional[Callable[[str], str]] = None) -> str:
    """
    Ask the operator for the identifier source.

    Args:
        input_func: Function reading a line of user input; the builtin ``input`` by default.

    Returns:
        str: Trimmed source descriptor.

    Raises:
        ValueError: If the operator enters nothing or input is closed.
    """
    input_func = input_func or input
    try:
        source = input_func("Path or URL of the extension ID list: ").strip()
    except EOFError as exc:
        raise ValueError("No identifier source provided") from exc

    if not source:
        raise ValueError("No identifier source provided")
    return source


def parse_arguments(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """
    Parse and validate command line arguments.

    Args:
        argv: Argument list; ``sys.argv[1:]`` by default.

    Returns:
        argparse.Namespace: Parsed and validated command line arguments.
    """
    parser = argparse.ArgumentParser(
        description="Enrich Chrome extension IDs with their Chrome Web Store names and status",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "source",
        nargs="?",
        default=os.getenv("SOURCE"),
        help="Local file or http(s) URL listing one extension ID per line "
        "(prompted for when omitted)",
    )

    parser.add_argument(
        "-o",
        "--output",
        type=validate_output_file,
        default=os.getenv("OUTPUT_FILE"),
        help="Output CSV file path (timestamped name when omitted)",
    )

    parser.add_argument(
        "--timeout",
        type=validate_timeout,
        default=int(os.getenv("REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT)),
        help="HTTP request timeout in seconds",
    )

    parser.add_argument(
        "--delay",
        type=validate_delay,
        default=float(os.getenv("REQUEST_DELAY", DEFAULT_DELAY_BETWEEN_REQUESTS)),
        help="Delay between listing requests in seconds",
    )

    parser.add_argument(
        "--store-url",
        type=validate_store_url,
        default=os.getenv("STORE_BASE_URL", STORE_BASE_URL),
        help="Base URL of store listing pages",
    )

    parser.add_argument(
        "--version", action="version", version="Chrome Web Store Extension Enricher 1.0.0"
    )

    args = parser.parse_args(argv)
    if args.output is None:
        args.output = default_output_file()

    return args

