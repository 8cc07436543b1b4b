#!/usr/bin/env python
"""
Run the Streamlit sign shop dashboard.

Usage:
    python scripts/run_app.py [--seed] [--port 8501]

--seed fills an empty store with demo data before starting.
"""
import argparse
import subprocess
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
DASHBOARD = PROJECT_ROOT / 'src' / 'signshop' / 'ui' / 'app_streamlit.py'


def main():
    parser = argparse.ArgumentParser(description="Sign Shop Manager dashboard")
    parser.add_argument('--seed', action='store_true', help="Load demo data into an empty store first")
    parser.add_argument('--port', type=int, default=8501)
    args = parser.parse_args()

    if not DASHBOARD.exists():
        print(f"ERROR: dashboard not found at {DASHBOARD}")
        sys.exit(1)

    if args.seed:
        subprocess.run([sys.executable, str(PROJECT_ROOT / 'scripts' / 'seed_demo.py')],
                       cwd=str(PROJECT_ROOT), check=True)

    cmd = [sys.executable, '-m', 'streamlit', 'run', str(DASHBOARD), '--server.port', str(args.port)]
    print(f"Starting dashboard on port {args.port}")

    try:
        subprocess.run(cmd, cwd=str(PROJECT_ROOT))
    except KeyboardInterrupt:
        print("\nDashboard stopped.")


if __name__ == "__main__":
    main()
