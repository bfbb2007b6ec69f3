#!/usr/bin/env python3
"""
DESTRUCTIVE: delete every row from the application tables.

The schema is kept. Requires --confirm (or typing YES at the prompt).

Usage:
    python scripts/clear_database.py --confirm

Requires DATABASE_URL environment variable.
"""

import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from listings.migrations import catalog, cli


if __name__ == "__main__":
    cli.main(__doc__, catalog.clear_database_steps)
