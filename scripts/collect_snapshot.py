#!/usr/bin/env python3
"""
Build the canonical site-config document from a session-storage dump.

The dump is what the browser console gives for JSON.stringify(sessionStorage).
By default the display form (logo data masked) is printed; --save writes
the full document to a site-config-<ms>.json file instead.

Usage:
    python -m scripts.collect_snapshot SNAPSHOT.json [--save] [--out-dir DIR] [--filename NAME]
"""
import os
import sys
import argparse

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from utils.collector import download_as_json, get_formatted_json
from utils.snapshot import load_snapshot


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Collect a site-config document from a session snapshot")
    parser.add_argument("snapshot", help="JSON file holding the session-storage key/values")
    parser.add_argument("--save", action="store_true", help="Write the full document to disk")
    parser.add_argument("--out-dir", default=".", help="Directory for --save")
    parser.add_argument("--filename", default=None, help="File name for --save")
    args = parser.parse_args(argv)

    try:
        snapshot = load_snapshot(args.snapshot)
    except Exception as ex:
        print(f"✗ Could not read snapshot: {ex}", file=sys.stderr)
        return 2

    if args.save:
        path = download_as_json(snapshot, filename=args.filename, directory=args.out_dir)
        print(f"✓ Saved {path}")
    else:
        print(get_formatted_json(snapshot))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
