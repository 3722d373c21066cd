import os
import sys

# Ensure project root is on sys.path for imports when running tests directly
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest


def post_row(post_id, title, name, *, content="", excerpt="", status="publish", author=1,
             post_type="post", guid="", date="2024-03-05 10:30:00"):
    """One ``wp_posts`` tuple with all 23 columns, values already SQL-escaped."""
    return (
        f"({post_id},{author},'{date}','{date}','{content}','{title}','{excerpt}','{status}',"
        f"'open','open','','{name}','','','{date}','{date}','',0,'{guid}',0,'{post_type}','',0)"
    )


def build_sample_sql(prefix="wp_"):
    posts = ",".join([
        post_row(
            10, "Election Day", "election-day",
            content=r"<!-- wp:paragraph -->\n<p class=\"intro\">O\'Brien wins, (again)</p>\n<!-- /wp:paragraph -->",
            guid="http://old.example.com/?p=10",
        ),
        post_row(
            11, "Plain Story", "plain-story",
            content=r"First line\nsecond line\n\nNext paragraph",
            author=2,
            guid="http://old.example.com/?p=11",
        ),
        post_row(12, "Draft Post", "draft-post", status="draft"),
        post_row(
            20, "photo", "photo",
            status="inherit",
            post_type="attachment",
            guid="http://old.example.com/wp-content/uploads/2024/03/photo.jpg",
        ),
    ])
    return "\n".join([
        "-- MySQL dump 10.13",
        f"DROP TABLE IF EXISTS `{prefix}users`;",
        f"INSERT INTO `{prefix}users` VALUES "
        "(1,'admin','$P$hash','admin','admin@example.com','','2020-01-01 00:00:00','',0,'Site Admin'),"
        "(2,'nomail','$P$x','nomail','','','2020-01-01 00:00:00','',0,'No Mail');",
        f"INSERT INTO `{prefix}terms` VALUES (1,'Uncategorized','uncategorized',0),"
        "(2,'Politics','politics',0),(3,'Elections','elections',0);",
        f"INSERT INTO `{prefix}term_taxonomy` VALUES (1,1,'category','',0,1),"
        "(2,2,'category','Political news',0,1),(3,3,'post_tag','',0,1);",
        f"INSERT INTO `{prefix}term_relationships` VALUES (10,2,0),(10,3,0),(10,3,0),(11,1,0);",
        f"INSERT INTO `{prefix}posts` VALUES {posts};",
        f"INSERT INTO `{prefix}postmeta` VALUES (1,10,'_thumbnail_id','20'),"
        "(2,11,'_edit_lock','1709630000:1'),(3,'abc','_broken','x');",
        "",
    ])


def wpress_header(name, size, path="", mtime=1700000000):
    return (
        name.encode("utf-8").ljust(255, b"\0")
        + str(size).encode("ascii").ljust(14, b"\0")
        + str(mtime).encode("ascii").ljust(12, b"\0")
        + path.encode("utf-8").ljust(4096, b"\0")
    )


def build_wpress(entries):
    """``entries`` is a list of ``(name, path, content_bytes)``."""
    blob = b""
    for name, path, content in entries:
        blob += wpress_header(name, len(content), path) + content
    return blob + b"\0" * 4377


@pytest.fixture
def sample_sql():
    return build_sample_sql()


@pytest.fixture
def sample_sql_file(tmp_path):
    path = tmp_path / "database.sql"
    path.write_text(build_sample_sql(), encoding="utf-8")
    return path


@pytest.fixture
def in_tmp_dir(tmp_path, monkeypatch):
    """Run the test from ``tmp_path`` so ``reports/`` is written there."""
    monkeypatch.chdir(tmp_path)
    return tmp_path
