#!/usr/bin/env python3
"""
Extract the contents of an All-in-One WP Migration ``.wpress`` backup.

Usage:
  python scripts/extract_wpress.py --input backup.wpress --out-dir wp-backup
  python scripts/extract_wpress.py --input backup.wpress --database-only

``database.sql`` is written to the root of the output directory; uploads keep
their relative paths.  Themes, plugins and other entries are skipped.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Allows importing wp_importer/ when executed as a script
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from wp_importer.extractors.wpress_archive import extract_archive, extract_database  # noqa: E402


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Extract database.sql and uploads from a .wpress backup")
    p.add_argument("--input", required=True, help="Path to the .wpress file")
    p.add_argument("--out-dir", default="wp-backup", help="Output directory (default: wp-backup)")
    p.add_argument("--database-only", action="store_true", help="Extract only database.sql")
    p.add_argument("--no-uploads", action="store_true", help="Skip wp-content/uploads entries")
    return p.parse_args()


def main() -> None:
    args = parse_args()
    try:
        if args.database_only:
            sql_path = extract_database(args.input, args.out_dir)
            if not sql_path:
                print(f"[ERROR] No database.sql found in {args.input}", file=sys.stderr)
                sys.exit(1)
            print(f"[INFO] Database extracted to {sql_path}")
            return

        result = extract_archive(args.input, args.out_dir, include_uploads=not args.no_uploads)
    except FileNotFoundError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        sys.exit(1)

    print(f"[INFO] Extracted: {result['extracted']} | Skipped: {result['skipped']}")
    print(f"[INFO] Output directory: {args.out_dir}")


if __name__ == "__main__":
    main()
