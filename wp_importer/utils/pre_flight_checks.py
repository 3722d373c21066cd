import os

import duckdb


class PreFlightCheckError(Exception):
    """Custom exception for pre-flight check failures."""
    pass


def run_pre_flight_checks(config: dict, *, check_database: bool = True) -> None:
    """
    Verifies that the import environment is usable before any parsing starts.

    Args:
        config: The application configuration dictionary.
        check_database: Also verify the portal database can be opened.
            Disabled for dry runs, which never write.

    Raises:
        PreFlightCheckError: If any check fails.
    """
    print("[INFO] Running pre-flight checks...")

    source = config.get("source", {})
    sql_path = source.get("sql_path") or ""
    wpress_path = source.get("wpress_path") or ""

    # Check 1: a dump, or an archive it can be extracted from
    if wpress_path:
        if not os.path.isfile(wpress_path):
            raise PreFlightCheckError(f"WPress archive not found: {wpress_path}")
    elif not sql_path:
        raise PreFlightCheckError("No SQL dump configured (source.sql_path or WP_SQL_PATH).")
    elif not os.path.isfile(sql_path):
        raise PreFlightCheckError(f"SQL file not found: {sql_path}")
    elif not os.access(sql_path, os.R_OK):
        raise PreFlightCheckError(f"SQL file is not readable: {sql_path}")

    # Check 2: portal database reachable
    if check_database:
        db_path = config.get("portal", {}).get("db_path") or ""
        if not db_path:
            raise PreFlightCheckError("Portal database path is not configured (portal.db_path or PORTAL_DB_PATH).")
        try:
            if db_path != ":memory:":
                os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
            con = duckdb.connect(database=db_path, read_only=False)
            try:
                con.execute("SELECT 1").fetchone()
            finally:
                con.close()
        except (duckdb.Error, OSError) as e:
            raise PreFlightCheckError(f"Portal database is not reachable at {db_path}: {e}")

    print("[INFO] Pre-flight checks passed successfully.")
