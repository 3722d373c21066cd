#!/usr/bin/env python3
"""
Backfill featured images of posts that were already imported.

Reads the same configuration as ``main.py``, parses the dump again and sets
``featured_image`` for every portal post whose slug matches a WordPress post
with a ``_thumbnail_id``.  Posts that already have an image are left alone
unless ``--overwrite`` is given.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

# Allows importing wp_importer/ when executed as a script
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from wp_importer.migration_tool import WordPressImportTool  # noqa: E402
from wp_importer.migrators.portal_store import PortalStore  # noqa: E402
from wp_importer.utils.pre_flight_checks import PreFlightCheckError, run_pre_flight_checks  # noqa: E402


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Set featured images on already imported posts")
    p.add_argument("--config", default="config/import_config.json", help="Path to the JSON configuration file")
    p.add_argument("--sql", default=None, help="SQL dump (overrides source.sql_path)")
    p.add_argument("--db", default=None, help="Portal DuckDB file (overrides portal.db_path)")
    p.add_argument("--overwrite", action="store_true", help="Replace images already set")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    tool = WordPressImportTool(config_file=args.config)
    if args.sql:
        tool.config["source"]["sql_path"] = args.sql
    if args.db:
        tool.config["portal"]["db_path"] = args.db
    if args.overwrite:
        tool.config["migration"]["overwrite_featured_images"] = True

    try:
        run_pre_flight_checks(tool.config)
        dump = tool.parse_dump(tool.load_dump())
    except PreFlightCheckError as e:
        tool.log_message(str(e), level="ERROR")
        return 1
    except OSError as e:
        tool.log_message(f"Could not read input: {e}", level="ERROR")
        return 1

    with PortalStore(tool.config["portal"]["db_path"]) as store:
        store.ensure_schema()
        tool.update_featured_images(dump, store)
    return 0


if __name__ == "__main__":
    sys.exit(main())
