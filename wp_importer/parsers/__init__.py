"""
Parsers used by the import pipeline.

* :mod:`wp_importer.parsers.sql_dump` – row tokenizer for MySQL ``INSERT`` dumps
* :mod:`wp_importer.parsers.content` – WordPress HTML cleanup, excerpts, slugs
"""

from .sql_dump import parse_insert_values, parse_table_rows, unescape_sql_string
from .content import clean_content, generate_excerpt, slugify

__all__ = [
    "parse_insert_values",
    "parse_table_rows",
    "unescape_sql_string",
    "clean_content",
    "generate_excerpt",
    "slugify",
]
