#!/usr/bin/env python3
"""
Create every application table and seed the lookup data.

Safe to re-run: existing tables are left alone and seed rows are upserted
by name.

Usage:
    python scripts/setup_database.py

Requires DATABASE_URL environment variable.
"""

import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from listings.migrations import catalog, cli


if __name__ == "__main__":
    cli.main(__doc__, catalog.setup_database_steps)
