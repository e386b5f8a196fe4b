#!/usr/bin/env python3
"""
Validate example site-config documents against the site-config JSON Schema.
Compiles the schema once and reports [OK]/[FAIL] per file.

Usage:
    python -m scripts.validate_config [--schema PATH] [FILE ...]

Exits with status 1 if any file fails validation.
"""
import os
import sys
import argparse
import json

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.config import SITE_SCHEMA_FILE, SITE_EXAMPLE_FILES
from utils.site_schema import compile_schema, collect_errors, load_json


def validate_files(schema_path: str, files) -> int:
    """Validate each file; return the number of failures."""
    validator = compile_schema(load_json(schema_path))
    failures = 0
    for path in files:
        name = os.path.basename(path)
        try:
            errors = collect_errors(validator, load_json(path))
        except (OSError, ValueError) as ex:
            errors = [{"path": "", "message": f"could not load file: {ex}", "keyword": "load"}]
        if not errors:
            print(f"[OK] {name} conforms to schema")
            continue
        failures += 1
        print(f"[FAIL] {name} has validation errors:", file=sys.stderr)
        print(json.dumps(errors, indent=2), file=sys.stderr)
    return failures


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Validate site-config documents against the JSON Schema")
    parser.add_argument("files", nargs="*", help="Documents to check (defaults to the bundled examples)")
    parser.add_argument("--schema", default=SITE_SCHEMA_FILE, help="Schema file path")
    args = parser.parse_args(argv)

    files = args.files or SITE_EXAMPLE_FILES
    return 1 if validate_files(args.schema, files) else 0


if __name__ == "__main__":
    raise SystemExit(main())
