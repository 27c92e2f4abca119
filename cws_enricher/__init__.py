"""Package initialization for Chrome Web Store Extension Enricher.

This module initializes the enricher package and exports the main
application components for easy importing and usage.
"""

from cws_enricher.cli import parse_arguments
from cws_enricher.core import ExtensionEnricher, ExtensionEnricherApp
from cws_enricher.loader import load_identifiers

__all__ = [
    "ExtensionEnricher",
    "ExtensionEnricherApp",
    "load_identifiers",
    "parse_arguments",
]
