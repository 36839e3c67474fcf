#!/usr/bin/env python3
"""
Generate Verification Stats
===========================

Counts full and partial matches per chain in the verification database and
publishes stats.json and manifest.json into the v1 and v2 repositories.

Configuration comes from the environment (or a .env file):
    POSTGRES_HOST, POSTGRES_PORT, POSTGRES_DATABASE, POSTGRES_USER,
    POSTGRES_PASSWORD, REPOV1_PATH, REPOV2_PATH, NODE_LOG_LEVEL, NODE_ENV

Usage:
    python scripts/run_statsgen.py
"""
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from statsgen.runner import main


if __name__ == "__main__":
    sys.exit(main())
