#!/usr/bin/env python
"""
Seed the local store with demo clients, materials, inks and orders.

Usage:
    python scripts/seed_demo.py
"""
import logging
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from signshop.services.seed import seed_demo_data
from signshop.state import AppState


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    state = AppState.create()
    print(f"Data directory: {state.settings.data_dir}")

    if seed_demo_data(state):
        print("✅ Demo data created")
    else:
        print("Demo data already exists, nothing to do")


if __name__ == "__main__":
    main()
