#!/usr/bin/env python3
"""
DESTRUCTIVE: drop every application table, legacy tables included.

Requires --confirm (or typing YES at the prompt).

Usage:
    python scripts/drop_all_tables.py --confirm

Requires DATABASE_URL environment variable.
"""

import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from listings.migrations import catalog, cli


if __name__ == "__main__":
    cli.main(__doc__, catalog.drop_all_tables_steps)
