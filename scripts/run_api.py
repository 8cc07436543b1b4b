#!/usr/bin/env python
"""
Run the sign shop HTTP API with uvicorn.

Usage:
    python scripts/run_api.py [--host 0.0.0.0] [--port 8000] [--no-reload]
"""
import argparse
import os
import sys
from pathlib import Path

import uvicorn


def main():
    parser = argparse.ArgumentParser(description="Sign Shop Manager API")
    parser.add_argument('--host', default='0.0.0.0')
    parser.add_argument('--port', type=int, default=8000)
    parser.add_argument('--no-reload', action='store_true', help="Disable auto-reload")
    args = parser.parse_args()

    project_root = Path(__file__).parent.parent
    src_path = str(project_root / 'src')
    os.chdir(project_root)
    if src_path not in sys.path:
        sys.path.insert(0, src_path)

    print(f"Starting Sign Shop Manager API on http://{args.host}:{args.port}")
    uvicorn.run(
        "signshop.api.main:app",
        host=args.host,
        port=args.port,
        reload=not args.no_reload,
        reload_dirs=[src_path] if not args.no_reload else None,
    )


if __name__ == "__main__":
    main()
