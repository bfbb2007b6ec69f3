#!/usr/bin/env python3
"""
Assign the placeholder seller (DEFAULT_SELLER_ID) to ownerless properties.

Usage:
    python scripts/backfill_seller_ids.py

Requires DATABASE_URL environment variable.
"""

import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from listings.migrations import catalog, cli


if __name__ == "__main__":
    cli.main(__doc__, catalog.seller_placeholder_steps)
