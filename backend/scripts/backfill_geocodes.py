#!/usr/bin/env python3
"""
Geocode properties whose geocode column is still null.

Uses the Google Geocoding API when GOOGLE_MAPS_API_KEY is set and Nominatim
otherwise. Each row is committed on its own; failures are logged and left
for the next run.

Usage:
    python scripts/backfill_geocodes.py [--limit N]

Requires DATABASE_URL environment variable.
"""

import argparse
import logging
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from listings.core.database import connection_scope, get_engine
from listings.core.exceptions import ConfigurationError
from listings.migrations.cli import (
    EXIT_FAILURE,
    EXIT_MISSING_CONFIG,
    EXIT_OK,
    configure_logging,
)
from listings.services.geocode_backfill import backfill_geocodes
from listings.services.geocoding import GeocodingService

logger = logging.getLogger("backfill_geocodes")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--limit", type=int, default=None, help="Only process the first N properties")
    args = parser.parse_args(argv)

    try:
        engine = get_engine()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_MISSING_CONFIG

    geocoder = GeocodingService()
    with connection_scope(engine) as conn:
        stats = backfill_geocodes(conn, geocoder, limit=args.limit)

    print("\n" + "=" * 60)
    print("COMPLETE!")
    print(f"  Updated: {stats['updated']}")
    print(f"  Failed:  {stats['failed']}")
    print(f"  Total:   {stats['total']}")
    return EXIT_OK if stats["failed"] == 0 else EXIT_FAILURE


if __name__ == "__main__":
    configure_logging()
    sys.exit(main())
