"""
JSON Lines reports of what the import did to each item.

Every per-item outcome is appended to ``reports/import/errors.jsonl`` or
``reports/import/success.jsonl`` as one JSON object per line, so a run can be
audited (or a retry list built) after the fact.  Items are described by a
small dict; the keys read are ``wp_id``, ``slug``, ``title`` and, for skipped
dump rows, ``reason``.

Event codes live in :data:`ERRORS`.  A code missing from the table is used
as its own message.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

ERRORS: Dict[str, str] = {
    "ROW_SKIPPED": "Dump row could not be mapped",
    "USER_NO_EMAIL": "WordPress user has no email",
    "USER_IMPORT": "Failed to import user",
    "CATEGORY_IMPORT": "Failed to import category",
    "TAG_IMPORT": "Failed to import tag",
    "MISSING_SLUG": "Post has no slug and none could be derived",
    "MISSING_AUTHOR": "No author found for post",
    "POST_IMPORT": "Failed to import post",
    "MEDIA_DOWNLOAD": "Failed to download featured image",
    "POST_EXISTS": "Post already exists",
    "POST_IMPORTED": "Post imported successfully",
    "FEATURED_IMAGE_SET": "Featured image updated",
}

REPORT_DIR = os.path.join("reports", "import")


def _append(name: str, entry: Dict[str, Any]) -> None:
    os.makedirs(REPORT_DIR, exist_ok=True)
    with open(os.path.join(REPORT_DIR, name), "a", encoding="utf-8") as f:
        f.write(json.dumps(entry, ensure_ascii=False, default=str) + "\n")


def _entry(code: str, item: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "code": code,
        "message": ERRORS.get(code, code),
        "wp_id": item.get("wp_id"),
        "slug": item.get("slug"),
        "title": item.get("title"),
    }


def report_error(code: str, item: Dict[str, Any], exc: Optional[Exception] = None) -> None:
    """Record a failure for ``item``; ``exc``, when given, is stored as ``error``."""
    entry = _entry(code, item)
    if item.get("reason"):
        entry["reason"] = item["reason"]
    if exc is not None:
        entry["error"] = str(exc)
    print(f"[ERROR] {entry['message']} - {item.get('slug') or item.get('wp_id') or ''}")
    _append("errors.jsonl", entry)


def report_ok(code: str, item: Dict[str, Any], extra: Optional[Dict[str, Any]] = None) -> None:
    """Record a success for ``item``, merging ``extra`` into the entry."""
    entry = _entry(code, item)
    entry.update(extra or {})
    print(f"[OK] {entry['message']} - {item.get('slug', '')}")
    _append("success.jsonl", entry)
