#!/usr/bin/env python3
"""
Move every listing owned by one seller to another seller.

Usage:
    python scripts/reassign_properties.py FROM_SELLER_ID TO_SELLER_ID

Requires DATABASE_URL environment variable.
"""

import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from listings.migrations import catalog, cli


def add_arguments(parser):
    parser.add_argument("from_seller", help="Current seller id")
    parser.add_argument("to_seller", help="New seller id")


def steps(args):
    return catalog.reassign_seller_steps(args.from_seller, args.to_seller)


if __name__ == "__main__":
    cli.main(__doc__, steps, add_arguments=add_arguments)
