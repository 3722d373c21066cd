import os
import sys

# Ensure project root is on sys.path for imports when running tests directly
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest

from wp_importer.utils.pre_flight_checks import PreFlightCheckError, run_pre_flight_checks


def _config(sql_path="", wpress_path="", db_path=""):
    return {
        "source": {"sql_path": sql_path, "wpress_path": wpress_path},
        "portal": {"db_path": db_path},
    }


def test_missing_sql_file(tmp_path):
    with pytest.raises(PreFlightCheckError, match="SQL file not found"):
        run_pre_flight_checks(_config(sql_path=str(tmp_path / "missing.sql")), check_database=False)


def test_no_source_configured():
    with pytest.raises(PreFlightCheckError, match="No SQL dump configured"):
        run_pre_flight_checks(_config(), check_database=False)


def test_missing_wpress_archive(tmp_path):
    with pytest.raises(PreFlightCheckError, match="WPress archive not found"):
        run_pre_flight_checks(_config(wpress_path=str(tmp_path / "site.wpress")), check_database=False)


def test_database_path_required(sample_sql_file):
    with pytest.raises(PreFlightCheckError, match="not configured"):
        run_pre_flight_checks(_config(sql_path=str(sample_sql_file)))


def test_passes_and_creates_database(tmp_path, sample_sql_file):
    db_path = tmp_path / "data" / "portal.duckdb"
    run_pre_flight_checks(_config(sql_path=str(sample_sql_file), db_path=str(db_path)))
    assert db_path.exists()


def test_dry_run_skips_database(tmp_path, sample_sql_file):
    db_path = tmp_path / "data" / "portal.duckdb"
    run_pre_flight_checks(_config(sql_path=str(sample_sql_file), db_path=str(db_path)), check_database=False)
    assert not db_path.exists()
