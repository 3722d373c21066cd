"""
Column mapping from raw dump rows to typed WordPress records.

The tokenizer in :mod:`wp_importer.parsers.sql_dump` returns rows as plain
lists of strings.  This module is the one place that knows which column
position holds which field for the WordPress core tables, and it turns each
row into a record from :mod:`models.wordpress`.

Rows are never rejected with an exception.  Each row produces a
:class:`RowResult` that is either parsed (``record`` is set) or skipped with a
human readable ``reason``.  Optional columns that are missing or unparsable
fall back to ``""`` or ``0``; a missing or non-numeric *required* column
skips the row.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Type

from pydantic import ValidationError

from models.wordpress import (
    WPPost,
    WPPostMeta,
    WPRecord,
    WPTerm,
    WPTermRelationship,
    WPTermTaxonomy,
    WPUser,
)
from wp_importer.parsers.sql_dump import (
    Row,
    is_sql_null,
    parse_table_rows,
    unescape_sql_string,
)


class Column(NamedTuple):
    index: int
    kind: str = "text"  # text | int
    required: bool = False


TABLE_COLUMNS: Dict[str, Dict[str, Column]] = {
    "users": {
        "id": Column(0, "int", True),
        "user_login": Column(1, "text", True),
        "user_email": Column(4),
        "display_name": Column(9),
    },
    "posts": {
        "id": Column(0, "int", True),
        "post_author": Column(1, "int"),
        "post_date": Column(2),
        "post_content": Column(4),
        "post_title": Column(5),
        "post_excerpt": Column(6),
        "post_status": Column(7),
        "post_name": Column(11),
        "post_modified": Column(14),
        "guid": Column(18),
        "post_type": Column(20),
    },
    "terms": {
        "term_id": Column(0, "int", True),
        "name": Column(1, "text", True),
        "slug": Column(2),
    },
    "term_taxonomy": {
        "term_taxonomy_id": Column(0, "int", True),
        "term_id": Column(1, "int", True),
        "taxonomy": Column(2, "text", True),
        "description": Column(3),
        "count": Column(5, "int"),
    },
    "term_relationships": {
        "object_id": Column(0, "int", True),
        "term_taxonomy_id": Column(1, "int", True),
    },
    "postmeta": {
        "meta_id": Column(0, "int", True),
        "post_id": Column(1, "int", True),
        "meta_key": Column(2),
        "meta_value": Column(3),
    },
}

TABLE_MODELS: Dict[str, Type[WPRecord]] = {
    "users": WPUser,
    "posts": WPPost,
    "terms": WPTerm,
    "term_taxonomy": WPTermTaxonomy,
    "term_relationships": WPTermRelationship,
    "postmeta": WPPostMeta,
}


@dataclass
class RowResult:
    """Outcome of mapping one raw row: a record, or the reason it was skipped."""

    table: str
    index: int
    record: Optional[WPRecord] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.record is not None


@dataclass
class WordPressDump:
    """All mapped tables of one dump, plus the rows that could not be mapped."""

    users: List[WPUser] = field(default_factory=list)
    posts: List[WPPost] = field(default_factory=list)
    terms: List[WPTerm] = field(default_factory=list)
    term_taxonomy: List[WPTermTaxonomy] = field(default_factory=list)
    term_relationships: List[WPTermRelationship] = field(default_factory=list)
    postmeta: List[WPPostMeta] = field(default_factory=list)
    skipped: List[RowResult] = field(default_factory=list)

    def counts(self) -> Dict[str, int]:
        return {table: len(getattr(self, table)) for table in TABLE_COLUMNS}


def table_name(prefix: str, name: str) -> str:
    """Full dump table name, e.g. ``table_name("wps9_", "posts") -> "wps9_posts"``."""
    return f"{prefix or ''}{name}"


def _to_int(value: str) -> Optional[int]:
    try:
        return int(value.strip())
    except (ValueError, AttributeError):
        return None


def map_row(row: Row, table: str, index: int = 0) -> RowResult:
    """Map one raw ``row`` of ``table`` (unprefixed name, e.g. ``"posts"``)."""
    columns = TABLE_COLUMNS[table]
    values: Dict[str, Any] = {}
    for name, column in columns.items():
        raw = row[column.index] if column.index < len(row) else None
        if raw is None:
            if column.required:
                return RowResult(table, index, reason=f"missing column {column.index} ({name}), row has {len(row)} fields")
            values[name] = 0 if column.kind == "int" else ""
            continue

        if column.kind == "int":
            number = _to_int(raw)
            if number is None:
                if column.required:
                    return RowResult(table, index, reason=f"non-numeric {name}: {raw[:40]!r}")
                number = 0
            values[name] = number
        else:
            values[name] = "" if is_sql_null(raw) else unescape_sql_string(raw)

    try:
        record = TABLE_MODELS[table](**values)
    except ValidationError as e:
        return RowResult(table, index, reason=f"invalid row: {e.errors()[0].get('msg', e)}")
    return RowResult(table, index, record=record)


def map_rows(rows: Iterable[Row], table: str) -> List[RowResult]:
    """Map every raw row of ``table``, keeping file order."""
    return [map_row(row, table, index) for index, row in enumerate(rows)]


def extract_wordpress_dump(sql: str, prefix: str = "wp_", tables: Optional[Iterable[str]] = None) -> WordPressDump:
    """
    Parse and map the WordPress core tables found in ``sql``.

    Args:
        sql: The full text of the dump.
        prefix: Table prefix used by the dump producer (``wp_``, ``wps9_``,
            ``SERVMASK_PREFIX_`` for All-in-One WP Migration backups ...).
        tables: Restrict to these unprefixed table names.  Defaults to all of
            :data:`TABLE_COLUMNS`.

    Returns:
        A :class:`WordPressDump`.  Tables that are absent from the dump are
        simply empty.
    """
    dump = WordPressDump()
    for table in tables or TABLE_COLUMNS:
        rows = parse_table_rows(sql, table_name(prefix, table))
        target = getattr(dump, table)
        for result in map_rows(rows, table):
            if result.ok:
                target.append(result.record)
            else:
                dump.skipped.append(result)
    return dump
