#!/usr/bin/env python3
"""
Rebuild one property's search document and upsert it into the read model.

Usage:
    python scripts/sync_property.py PROPERTY_ID

Requires DATABASE_URL and MONGODB_URI environment variables.
"""

import argparse
import logging
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from listings.core.database import connection_scope, get_engine
from listings.core.exceptions import ConfigurationError, PropertyNotFoundError
from listings.migrations.cli import (
    EXIT_FAILURE,
    EXIT_MISSING_CONFIG,
    EXIT_OK,
    configure_logging,
)
from listings.services.property_sync import sync_property
from listings.services.read_model import get_document_store

logger = logging.getLogger("sync_property")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("property_id", help="Property to sync")
    args = parser.parse_args(argv)

    try:
        engine = get_engine()
        store = get_document_store()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_MISSING_CONFIG

    with connection_scope(engine) as conn:
        try:
            document = sync_property(conn, args.property_id, store)
        except PropertyNotFoundError as e:
            logger.error(str(e))
            return EXIT_FAILURE

    logger.info(f"Synced {document.id}: {len(document.images)} images, {len(document.features)} features")
    return EXIT_OK


if __name__ == "__main__":
    configure_logging()
    sys.exit(main())
