#!/usr/bin/env python3
"""
Dry run of the read-model sync on a built-in fixture.

Prints the document that would be upserted and the cache entries that would
be invalidated. Nothing is written and no connection is opened.

Usage:
    python scripts/sync_property_dryrun.py [--property-id ID]
"""

import argparse
import json
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from listings.services.property_sync import DRY_RUN_PROPERTY, dry_run_sync


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--property-id", default=DRY_RUN_PROPERTY["id"])
    args = parser.parse_args(argv)

    print("Running dry-run of the sync pipeline")
    result = dry_run_sync({**DRY_RUN_PROPERTY, "id": args.property_id})

    print("[DRY] document:")
    print(json.dumps(result["document"], indent=2))
    print(f"[DRY] cache delete -> {result['delete_key']}")
    for pattern in result["invalidate_patterns"]:
        print(f"[DRY] cache invalidate -> {pattern}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
