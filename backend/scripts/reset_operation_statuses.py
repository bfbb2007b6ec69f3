#!/usr/bin/env python3
"""
DESTRUCTIVE: rebuild the operation status table from the seed set.

Properties pointing at unknown statuses are moved to sale (id 1) first.
Requires --confirm (or typing YES at the prompt).

Usage:
    python scripts/reset_operation_statuses.py --confirm

Requires DATABASE_URL environment variable.
"""

import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from listings.migrations import catalog, cli


if __name__ == "__main__":
    cli.main(__doc__, catalog.reset_operation_status_steps)
