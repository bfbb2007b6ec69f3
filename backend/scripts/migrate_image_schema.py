#!/usr/bin/env python3
"""
Bring property_images up to the current schema.

Adds upload metadata columns, ordering indexes and checks, then demotes
duplicate covers and enforces a single cover image per property.

Usage:
    python scripts/migrate_image_schema.py

Requires DATABASE_URL environment variable.
"""

import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from listings.migrations import catalog, cli


if __name__ == "__main__":
    cli.main(__doc__, catalog.image_schema_steps)
