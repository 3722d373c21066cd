"""
Destination store for imported content.

The portal keeps its content in six tables: ``users``, ``categories``,
``tags``, ``posts`` and the ``post_categories`` / ``post_tags`` join tables.
:class:`PortalStore` wraps a DuckDB connection to that database and exposes
the get-or-create and insert operations the import needs.  Every write is
idempotent on the table's natural key (email for users, slug for the rest),
so running an import twice does not duplicate content.
"""

from __future__ import annotations

import os
import uuid
from datetime import datetime
from typing import Optional

import duckdb

from models.news_post import NewsPost

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id VARCHAR PRIMARY KEY,
        email VARCHAR UNIQUE NOT NULL,
        username VARCHAR,
        name VARCHAR,
        password VARCHAR,
        role VARCHAR DEFAULT 'AUTHOR',
        created_at TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS categories (
        id VARCHAR PRIMARY KEY,
        name VARCHAR NOT NULL,
        slug VARCHAR UNIQUE NOT NULL,
        description VARCHAR
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tags (
        id VARCHAR PRIMARY KEY,
        name VARCHAR NOT NULL,
        slug VARCHAR UNIQUE NOT NULL,
        created_at TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS posts (
        id VARCHAR PRIMARY KEY,
        title VARCHAR NOT NULL,
        slug VARCHAR UNIQUE NOT NULL,
        content VARCHAR,
        excerpt VARCHAR,
        featured_image VARCHAR,
        author_id VARCHAR,
        status VARCHAR DEFAULT 'DRAFT',
        view_count INTEGER DEFAULT 0,
        published_at TIMESTAMP,
        is_pinned BOOLEAN DEFAULT FALSE,
        pinned_order INTEGER DEFAULT 0,
        created_at TIMESTAMP,
        updated_at TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS post_categories (
        post_id VARCHAR NOT NULL,
        category_id VARCHAR NOT NULL,
        PRIMARY KEY (post_id, category_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS post_tags (
        post_id VARCHAR NOT NULL,
        tag_id VARCHAR NOT NULL,
        PRIMARY KEY (post_id, tag_id)
    )
    """,
]

TABLES = ("users", "categories", "tags", "posts", "post_categories", "post_tags")


def new_id() -> str:
    return uuid.uuid4().hex


class PortalStore:
    """DuckDB-backed access to the portal tables.  Use as a context manager."""

    def __init__(self, db_path: str, *, read_only: bool = False) -> None:
        self.db_path = db_path
        self.read_only = read_only
        self.con: Optional[duckdb.DuckDBPyConnection] = None

    def connect(self) -> "PortalStore":
        if self.con is None:
            if self.db_path != ":memory:":
                os.makedirs(os.path.dirname(self.db_path) or ".", exist_ok=True)
            self.con = duckdb.connect(database=self.db_path, read_only=self.read_only)
        return self

    def close(self) -> None:
        if self.con is not None:
            self.con.close()
            self.con = None

    def __enter__(self) -> "PortalStore":
        return self.connect()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _fetch_value(self, query: str, params: list) -> Optional[str]:
        row = self.con.execute(query, params).fetchone()
        return row[0] if row else None

    def ensure_schema(self) -> None:
        for statement in SCHEMA:
            self.con.execute(statement)

    def count(self, table: str) -> int:
        if table not in TABLES:
            raise ValueError(f"Unknown table: {table}")
        return self.con.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]

    # Users -----------------------------------------------------------------

    def get_admin_user_id(self) -> Optional[str]:
        return self._fetch_value(
            "SELECT id FROM users WHERE role = 'ADMIN' ORDER BY created_at LIMIT 1", []
        )

    def find_user_id_by_email(self, email: str) -> Optional[str]:
        return self._fetch_value("SELECT id FROM users WHERE email = ?", [email])

    def upsert_user(
        self, email: str, username: str, name: str, password: str, role: str = "AUTHOR"
    ) -> str:
        existing = self.find_user_id_by_email(email)
        if existing:
            return existing
        user_id = new_id()
        self.con.execute(
            "INSERT INTO users (id, email, username, name, password, role, created_at) VALUES (?, ?, ?, ?, ?, ?, ?)",
            [user_id, email, username, name, password, role, datetime.now()],
        )
        return user_id

    # Taxonomies ------------------------------------------------------------

    def find_category_id(self, slug: str) -> Optional[str]:
        return self._fetch_value("SELECT id FROM categories WHERE slug = ?", [slug])

    def upsert_category(self, name: str, slug: str, description: Optional[str] = None) -> str:
        existing = self.find_category_id(slug)
        if existing:
            return existing
        category_id = new_id()
        self.con.execute(
            "INSERT INTO categories (id, name, slug, description) VALUES (?, ?, ?, ?)",
            [category_id, name, slug, description or None],
        )
        return category_id

    def find_tag_id(self, slug: str) -> Optional[str]:
        return self._fetch_value("SELECT id FROM tags WHERE slug = ?", [slug])

    def upsert_tag(self, name: str, slug: str) -> str:
        existing = self.find_tag_id(slug)
        if existing:
            return existing
        tag_id = new_id()
        self.con.execute(
            "INSERT INTO tags (id, name, slug, created_at) VALUES (?, ?, ?, ?)",
            [tag_id, name, slug, datetime.now()],
        )
        return tag_id

    # Posts -----------------------------------------------------------------

    def find_post_id_by_slug(self, slug: str) -> Optional[str]:
        return self._fetch_value("SELECT id FROM posts WHERE slug = ?", [slug])

    def insert_post(self, post: NewsPost) -> str:
        """
        Insert ``post`` with its category and tag links; returns the new id.

        The row and its links are written in one transaction, so a failed
        link leaves no post behind for a later run to mistake as imported.
        """
        post_id = new_id()
        row = post.to_row()
        columns = ["id", *row.keys()]
        placeholders = ", ".join("?" for _ in columns)
        self.con.begin()
        try:
            self.con.execute(
                f"INSERT INTO posts ({', '.join(columns)}) VALUES ({placeholders})",
                [post_id, *row.values()],
            )
            for category_id in post.category_ids:
                self.link_post_category(post_id, category_id)
            for tag_id in post.tag_ids:
                self.link_post_tag(post_id, tag_id)
        except Exception:
            self.con.rollback()
            raise
        self.con.commit()
        return post_id

    def link_post_category(self, post_id: str, category_id: str) -> bool:
        """Attach a category; returns ``False`` when the link already existed."""
        if self._fetch_value(
            "SELECT post_id FROM post_categories WHERE post_id = ? AND category_id = ?",
            [post_id, category_id],
        ):
            return False
        self.con.execute(
            "INSERT INTO post_categories (post_id, category_id) VALUES (?, ?)", [post_id, category_id]
        )
        return True

    def link_post_tag(self, post_id: str, tag_id: str) -> bool:
        if self._fetch_value(
            "SELECT post_id FROM post_tags WHERE post_id = ? AND tag_id = ?", [post_id, tag_id]
        ):
            return False
        self.con.execute("INSERT INTO post_tags (post_id, tag_id) VALUES (?, ?)", [post_id, tag_id])
        return True

    def set_featured_image(self, slug: str, url: str, *, overwrite: bool = False) -> bool:
        """Set the featured image of the post ``slug``; existing images are kept unless ``overwrite``."""
        row = self.con.execute("SELECT id, featured_image FROM posts WHERE slug = ?", [slug]).fetchone()
        if row is None:
            return False
        post_id, current = row
        if current and not overwrite:
            return False
        self.con.execute("UPDATE posts SET featured_image = ? WHERE id = ?", [url, post_id])
        return True
