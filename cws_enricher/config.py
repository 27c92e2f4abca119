"""Configuration constants and settings for Chrome Web Store Extension Enricher.

This module contains all configuration constants used throughout the application,
including default values, store URLs, classification markers, and logging
configuration.
"""

# Application default configuration values
DEFAULT_OUTPUT_PREFIX = "extensions"
OUTPUT_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
DEFAULT_REQUEST_TIMEOUT = 10
DEFAULT_DELAY_BETWEEN_REQUESTS = 0.5
SOURCE_REQUEST_TIMEOUT = 30

# Chrome Web Store constants
STORE_BASE_URL = "https://chromewebstore.google.com/detail"
STORE_NAME = "Chrome Web Store"
STORE_TITLE_SUFFIXES = (
    " - Chrome Web Store",
    " - Chrome 网上应用店",
)
NOT_FOUND_MARKERS = (
    "This item is not available",
    "The requested URL was not found",
)

# Placeholder names for records without a scraped title
UNKNOWN_NAME = "Unknown"
REMOVED_NAME = "Removed/NotFound"
ERROR_NAME = "Error/Unavailable"

# HTTP request retry configuration (single attempt per request)
RETRY_TOTAL = 0

# CSV report layout
CSV_COLUMNS = ["ExtensionID", "ExtensionName", "Status", "ChromeStoreURL"]

# Application logging configuration
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
GITHUB_ACTIONS_LOG_FORMAT = "%(levelname)s: %(message)s"
