#!/usr/bin/env python3
"""Convenience runner for the journey map pipeline.

Usage:
    python run.py [--start-date 2023-01-01T00:00:00Z] [--output journey.json]
"""
import logging
import sys

from journey_map.main import main

if __name__ == "__main__":
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    sys.exit(main())
