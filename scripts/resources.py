#!/usr/bin/env python3
"""
Command-line import/export of language resources in the resources.json
format (one JSON array of resource objects).
"""

import argparse
import json
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.core.dao import StoreUnavailableError, export_resources, import_resources


def import_command(args) -> int:
    source = Path(args.path)
    if not source.exists():
        print(f"ERROR: File not found: {source}")
        return 1

    try:
        with open(source, 'r', encoding='utf-8') as f:
            records = json.load(f)
    except json.JSONDecodeError as e:
        print(f"ERROR: Invalid JSON file: {e}")
        return 1

    if not isinstance(records, list):
        print("ERROR: Expected a JSON array of resources")
        return 1

    if args.dry_run:
        print(f"DRY RUN - {len(records)} records found in {source}")
        return 0

    result = import_resources(records, replace=args.replace)
    print(f"Imported: {result['imported']}")
    print(f"Skipped: {len(result['skipped'])}")
    if args.verbose:
        for item in result['skipped']:
            print(f"  - #{item['index']} {item['key'] or '(no key)'}: {item['error']}")

    return 0 if not result['skipped'] or not args.strict else 1


def export_command(args) -> int:
    records = export_resources()
    payload = json.dumps(records, ensure_ascii=False, indent=2)

    if args.path == "-":
        print(payload)
    else:
        target = Path(args.path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(payload + "\n", encoding='utf-8')
        print(f"Exported {len(records)} resources to {target}")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Import or export language resources as a JSON array",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s import resources.json             # Add resources, keeping existing ones
  %(prog)s import resources.json --replace   # Replace the whole store
  %(prog)s export backup/resources.json      # Write the store to a file
  %(prog)s export -                          # Print the store to stdout

Environment variables:
- DB_PATH=./data/resources.db (target database)
        """
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser("import", help="Load resources from a JSON file")
    import_parser.add_argument("path", help="Path to the resources JSON file")
    import_parser.add_argument(
        "--replace", "-r",
        action="store_true",
        help="Delete existing resources before importing"
    )
    import_parser.add_argument(
        "--dry-run", "-n",
        action="store_true",
        help="Parse the file without writing to the store"
    )
    import_parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with an error if any record was skipped"
    )
    import_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="List skipped records"
    )
    import_parser.set_defaults(func=import_command)

    export_parser = subparsers.add_parser("export", help="Write all resources to a JSON file")
    export_parser.add_argument("path", help="Output path, or - for stdout")
    export_parser.set_defaults(func=export_command)

    args = parser.parse_args(argv)

    try:
        return args.func(args)
    except StoreUnavailableError as e:
        print(f"ERROR: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
