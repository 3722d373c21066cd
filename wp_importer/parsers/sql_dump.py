"""
Row tokenizer for MySQL ``INSERT`` dumps.

WordPress backups (plain ``mysqldump`` output or the ``database.sql`` inside a
``.wpress`` archive) store every table as one or more statements of the form::

    INSERT INTO `wp_posts` VALUES (1,'a','b'),(2,'c','d');

Field values may contain commas, parentheses and escaped quotes, so a naive
split corrupts the data.  The scanner below walks the text one character at a
time, tracking string and parenthesis state, and returns each row-tuple as a
list of raw field strings.

Three layers are exposed:

``find_insert_statements``
    Locate every ``INSERT INTO `<table>` VALUES`` occurrence.

``parse_insert_values``
    Scan the row-tuples of one statement.

``parse_table_rows``
    Combine both and return every row of a table in file order.

The tokenizer never raises for malformed input; it returns whatever rows it
could complete.  Field strings keep their backslash escapes so that
``unescape_sql_string`` can be applied as a separate pass.
"""

from __future__ import annotations

import re
from typing import Generator, List, Optional, Tuple

Row = List[str]

QUOTE_CHARS = ("'", '"')

# Backslash sequences produced by mysqldump's string escaping
_UNESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "0": "\0",
    "Z": "\x1a",
    "'": "'",
    '"': '"',
    "\\": "\\",
}
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


def _insert_pattern(table_name: str) -> "re.Pattern[str]":
    return re.compile(
        r"(?i:INSERT\s+INTO)\s+`" + re.escape(table_name) + r"`\s+(?i:VALUES)\s*"
    )


def find_insert_statements(
    sql: str, table_name: str, start: int = 0
) -> Generator[int, Optional[int], None]:
    """Yield the offset where row data begins for each ``INSERT`` of ``table_name``.

    The ``INSERT INTO`` and ``VALUES`` keywords match case-insensitively; the
    table name must match exactly, prefix included.  The match is lexical, so
    an ``INSERT`` text inside a string literal of another statement would be
    found too.

    Callers can ``send()`` the offset where the previous statement's row data
    ended; the next search resumes from there instead of from the end of the
    previous match.
    """
    pattern = _insert_pattern(table_name)
    pos = start
    while True:
        match = pattern.search(sql, pos)
        if match is None:
            return
        resume = yield match.end()
        pos = max(resume, match.end()) if resume is not None else match.end()


def parse_insert_values(sql: str, start_pos: int) -> Tuple[List[Row], int]:
    """Scan the row-tuples of one ``VALUES`` list starting at ``start_pos``.

    Returns the parsed rows and the offset just past the terminating ``;``.
    When the statement is truncated the rows completed so far are returned
    together with the offset where scanning stopped.
    """
    rows: List[Row] = []
    pos = start_pos
    length = len(sql)
    depth = 0
    in_string = False
    quote_char = ""
    escaped = False
    current_row: Row = []
    current_value: List[str] = []
    row_started = False

    while pos < length:
        char = sql[pos]

        if escaped:
            current_value.append(char)
            escaped = False
            pos += 1
            continue

        if char == "\\":
            # The backslash stays in the value; unescape_sql_string folds it later
            escaped = True
            current_value.append(char)
            pos += 1
            continue

        if not in_string and char in QUOTE_CHARS:
            in_string = True
            quote_char = char
            pos += 1
            continue

        if in_string and char == quote_char:
            if pos + 1 < length and sql[pos + 1] == quote_char:
                current_value.append(quote_char)
                pos += 2
                continue
            in_string = False
            pos += 1
            continue

        if in_string:
            current_value.append(char)
            pos += 1
            continue

        if char == "(":
            if depth == 0:
                row_started = True
                current_row = []
                current_value = []
            else:
                current_value.append(char)
            depth += 1
            pos += 1
            continue

        if char == ")":
            depth -= 1
            if depth == 0 and row_started:
                current_row.append("".join(current_value).strip())
                rows.append(current_row)
                row_started = False
                current_value = []

                next_pos = pos + 1
                while next_pos < length and sql[next_pos].isspace():
                    next_pos += 1
                if next_pos < length and sql[next_pos] == ";":
                    return rows, next_pos + 1
            elif depth < 0:
                return rows, pos
            else:
                current_value.append(char)
            pos += 1
            continue

        if char == "," and depth == 1:
            current_row.append("".join(current_value).strip())
            current_value = []
            pos += 1
            continue

        if row_started:
            current_value.append(char)
        pos += 1

    return rows, pos


def parse_table_rows(sql: str, table_name: str) -> List[Row]:
    """Return every row of ``table_name`` across all its ``INSERT`` statements."""
    all_rows: List[Row] = []
    locator = find_insert_statements(sql, table_name)
    try:
        offset = next(locator)
        while True:
            rows, end_pos = parse_insert_values(sql, offset)
            all_rows.extend(rows)
            offset = locator.send(end_pos)
    except StopIteration:
        pass
    return all_rows


def unescape_sql_string(value: str) -> str:
    """Apply mysqldump backslash escapes (``\\n``, ``\\'``, ``\\\\`` ...) to ``value``.

    ``\\%`` and ``\\_`` keep their backslash; any other unknown sequence keeps
    only the escaped character, as MySQL reads string literals.
    """
    if not value or "\\" not in value:
        return value
    return _ESCAPE_RE.sub(_unescape_match, value)


def _unescape_match(match: "re.Match[str]") -> str:
    char = match.group(1)
    if char in ("%", "_"):
        return match.group(0)
    return _UNESCAPES.get(char, char)


def is_sql_null(value: str) -> bool:
    """True when a raw field is the unquoted ``NULL`` keyword."""
    return value.upper() == "NULL"
