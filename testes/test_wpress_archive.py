import os
import sys

# Ensure project root is on sys.path for imports when running tests directly
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest

from conftest import build_wpress, wpress_header

from wp_importer.extractors.wpress_archive import (
    HEADER_SIZE,
    extract_archive,
    extract_database,
    iter_entries,
)

SQL = b"INSERT INTO `SERVMASK_PREFIX_terms` VALUES (1,'News','news');\n"
IMAGE = b"\x89PNG fake image"


def _archive(tmp_path, entries, name="backup.wpress", prefix=b""):
    path = tmp_path / name
    path.write_bytes(prefix + build_wpress(entries))
    return str(path)


def _default_entries():
    return [
        ("package.json", "", b'{"SiteURL": "http://old.test"}'),
        ("database.sql", "", SQL),
        ("a.png", "wp-content/uploads/2024/03", IMAGE),
        ("plugin.php", "wp-content/plugins/akismet", b"<?php"),
    ]


def test_iter_entries_reads_headers(tmp_path):
    archive = _archive(tmp_path, _default_entries())
    entries = list(iter_entries(archive))
    assert [e.name for e in entries] == ["package.json", "database.sql", "a.png", "plugin.php"]
    assert entries[1].size == len(SQL)
    assert entries[2].path == "wp-content/uploads/2024/03"
    assert entries[0].offset == HEADER_SIZE


def test_extract_archive_writes_database_uploads_and_package(tmp_path):
    archive = _archive(tmp_path, _default_entries())
    out = tmp_path / "out"
    counts = extract_archive(archive, str(out))
    assert counts == {"extracted": 3, "skipped": 1}
    assert (out / "database.sql").read_bytes() == SQL
    assert (out / "wp-content" / "uploads" / "2024" / "03" / "a.png").read_bytes() == IMAGE
    assert (out / "wp-package.json").exists()
    assert not (out / "wp-content" / "plugins").exists()


def test_extract_archive_without_uploads(tmp_path):
    archive = _archive(tmp_path, _default_entries())
    counts = extract_archive(archive, str(tmp_path / "out"), include_uploads=False)
    assert counts == {"extracted": 2, "skipped": 2}


def test_extract_archive_refuses_path_traversal(tmp_path):
    archive = _archive(tmp_path, [("evil.txt", "wp-content/uploads/../../../../tmp", b"x")])
    counts = extract_archive(archive, str(tmp_path / "out"))
    assert counts == {"extracted": 0, "skipped": 1}


def test_extract_database_only(tmp_path):
    archive = _archive(tmp_path, _default_entries())
    path = extract_database(archive, str(tmp_path / "db"))
    assert path == os.path.join(str(tmp_path / "db"), "database.sql")
    with open(path, "rb") as f:
        assert f.read() == SQL
    assert not (tmp_path / "db" / "wp-content").exists()


def test_extract_database_missing_entry(tmp_path):
    archive = _archive(tmp_path, [("a.png", "wp-content/uploads", IMAGE)])
    assert extract_database(archive, str(tmp_path / "db")) is None


def test_truncated_entry_stops_iteration(tmp_path):
    path = tmp_path / "truncated.wpress"
    path.write_bytes(
        wpress_header("database.sql", len(SQL), "") + SQL
        + wpress_header("big.png", 1000, "wp-content/uploads") + b"short"
    )
    assert [e.name for e in iter_entries(str(path))] == ["database.sql"]


def test_resynchronizes_after_leading_garbage(tmp_path):
    archive = _archive(tmp_path, [("database.sql", "", SQL)], prefix=b"X")
    assert [e.name for e in iter_entries(archive)] == ["database.sql"]


def test_missing_archive_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        list(iter_entries(str(tmp_path / "nope.wpress")))
