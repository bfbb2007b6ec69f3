#!/usr/bin/env python3
"""
Ensure the sale/rent/buy/lease operation statuses exist with their colors.

Properties without an operation status are set to sale (id 1). If the
table holds the seed names under different ids the run fails and rolls
back; use reset_operation_statuses.py for that case.

Usage:
    python scripts/seed_operation_statuses.py

Requires DATABASE_URL environment variable.
"""

import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from listings.migrations import catalog, cli


if __name__ == "__main__":
    cli.main(__doc__, catalog.operation_status_steps)
