from __future__ import annotations

from typing import List, Optional, Sequence

import pandas as pd

from wp_importer.extractors.wordpress_extractor import TABLE_COLUMNS


def rows_to_frame(rows: List[List[str]], columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """
    Build a DataFrame from raw dump rows.

    Short rows are padded with empty strings.  Columns are named ``col_0``,
    ``col_1`` ... unless ``columns`` is given; extra names are ignored and
    missing names fall back to the positional form.
    """
    width = max((len(r) for r in rows), default=0)
    padded = [list(r) + [""] * (width - len(r)) for r in rows]
    names = [f"col_{i}" for i in range(width)]
    for i, name in enumerate(list(columns or [])[:width]):
        names[i] = name
    return pd.DataFrame(padded, columns=names)


def known_column_names(table: str) -> List[str]:
    """Positional column names of a WordPress table, where the mapping knows them."""
    columns = TABLE_COLUMNS.get(table)
    if not columns:
        return []
    width = max(c.index for c in columns.values()) + 1
    names = [f"col_{i}" for i in range(width)]
    for name, column in columns.items():
        names[column.index] = name
    return names
