"""
Entry point for the WordPress to portal import tool.
"""

import argparse
import sys
from typing import List, Optional

from wp_importer.migration_tool import WordPressImportTool
from wp_importer.utils.pre_flight_checks import PreFlightCheckError

CONFIG_FILE = "config/import_config.json"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Import a WordPress SQL dump (or .wpress backup) into the portal database")
    p.add_argument("--config", default=CONFIG_FILE, help="Path to the JSON configuration file")
    p.add_argument("--sql", default=None, help="SQL dump to import (overrides source.sql_path)")
    p.add_argument("--wpress", default=None, help=".wpress archive to extract database.sql from")
    p.add_argument("--prefix", default=None, help="WordPress table prefix (default: SERVMASK_PREFIX_)")
    p.add_argument("--db", default=None, help="Portal DuckDB file (overrides portal.db_path)")
    p.add_argument("--limit", type=int, default=None, help="Import at most N posts")
    # Tri-state: --dry-run / --no-dry-run. Neither given -> decided by the config
    p.add_argument("--dry-run", dest="dry_run", action="store_true", help="Parse and log, write nothing")
    p.add_argument("--no-dry-run", dest="dry_run", action="store_false", help="Force a real import")
    p.set_defaults(dry_run=None)
    return p.parse_args(argv)


def build_tool(args: argparse.Namespace) -> WordPressImportTool:
    tool = WordPressImportTool(config_file=args.config)
    source = tool.config["source"]
    if args.sql:
        source["sql_path"] = args.sql
    if args.wpress:
        source["wpress_path"] = args.wpress
    if args.prefix:
        source["table_prefix"] = args.prefix
    if args.db:
        tool.config["portal"]["db_path"] = args.db
    if args.limit is not None:
        tool.config["migration"]["limit"] = args.limit
    if args.dry_run is not None:
        tool.config["migration"]["dry_run"] = args.dry_run
    return tool


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function to run the WordPress import.
    """
    args = parse_args(argv)
    tool = build_tool(args)
    tool.log_message("Starting WordPress import.")

    try:
        tool.run()
    except PreFlightCheckError as e:
        tool.log_message(str(e), level="ERROR")
        return 1
    except OSError as e:
        tool.log_message(f"Could not read input: {e}", level="ERROR")
        return 1

    tool.log_message("Import process finished.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
