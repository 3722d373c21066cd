#!/usr/bin/env python3
"""
Export the rows of one table from a WordPress SQL dump to CSV.

Useful to inspect what the tokenizer sees before running an import:

  python scripts/dump_table_to_csv.py --sql wp-backup/database.sql --table posts
  python scripts/dump_table_to_csv.py --sql dump.sql --table wp_options --raw-name

Known WordPress tables get their mapped column names; other columns are
named ``col_<index>``.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Allows importing wp_importer/ when executed as a script
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from wp_importer.extractors.wordpress_extractor import table_name  # noqa: E402
from wp_importer.parsers.sql_dump import parse_table_rows  # noqa: E402
from wp_importer.utils.export import known_column_names, rows_to_frame  # noqa: E402


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Dump one table of a WordPress SQL file to CSV")
    p.add_argument("--sql", required=True, help="Path to the SQL dump")
    p.add_argument("--table", required=True, help="Table name without prefix (e.g. posts)")
    p.add_argument("--prefix", default="SERVMASK_PREFIX_", help="Table prefix (default: SERVMASK_PREFIX_)")
    p.add_argument("--raw-name", action="store_true", help="Use --table as the full table name")
    p.add_argument("--output", default=None, help="CSV output path (default: reports/<table>.csv)")
    return p.parse_args()


def main() -> None:
    args = parse_args()
    full_name = args.table if args.raw_name else table_name(args.prefix, args.table)
    output = Path(args.output or Path("reports") / f"{args.table}.csv")

    with open(args.sql, "r", encoding="utf-8", errors="replace") as f:
        sql = f.read()

    rows = parse_table_rows(sql, full_name)
    if not rows:
        print(f"[WARNING] No INSERT rows found for `{full_name}`")
        return

    df = rows_to_frame(rows, known_column_names(args.table))
    output.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output, index=False)
    print(f"[INFO] {len(df)} rows x {len(df.columns)} columns written to {output}")


if __name__ == "__main__":
    main()
