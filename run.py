#!/usr/bin/env python3
"""
CLI entry point for the Midnight Tracker booking sync.

    python run.py                  # periodic sync (scheduled every 6 hours)
    python run.py --mode backfill  # one-off, from the start of the tax year
"""
import sys
import os

# Make the project root importable when run from a checkout
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from midnight_tracker.main import main

if __name__ == "__main__":
    main()
