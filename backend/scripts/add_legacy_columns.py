#!/usr/bin/env python3
"""
Add and backfill the legacy type/room/status text columns on properties.

Usage:
    python scripts/add_legacy_columns.py

Requires DATABASE_URL environment variable.
"""

import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from listings.migrations import catalog, cli


if __name__ == "__main__":
    cli.main(__doc__, catalog.legacy_column_steps)
