#!/usr/bin/env python3
"""Main entry point for Chrome Web Store Extension Enricher application.

This module serves as the primary entry point for the extension enrichment
application, providing a simple interface to the CLI functionality with error
handling and user feedback.
"""

import sys

from cws_enricher import ExtensionEnricherApp, parse_arguments
from cws_enricher.cli import prompt_for_source
from cws_enricher.core import setup_logging
from cws_enricher.loader import SourceError


def main() -> None:
    """
    Main entry point for the extension enrichment application.

    This function wraps the CLI module and maps failure scenarios to a
    non-zero exit status with user-friendly feedback.
    """
    try:
        # Parse command line arguments
        args = parse_arguments()
        source = args.source or prompt_for_source()

        setup_logging()

        # Load identifiers, enrich them, and write the CSV report
        app = ExtensionEnricherApp(
            source=source,
            output_file=args.output,
            request_timeout=args.timeout,
            delay=args.delay,
            store_base_url=args.store_url,
        )
        app.run()

    except KeyboardInterrupt:
        print("\n⚠️ Operation interrupted by user", file=sys.stderr)
        sys.exit(1)
    except SourceError as e:
        print(f"❌ Cannot load extension IDs: {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"❌ Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
