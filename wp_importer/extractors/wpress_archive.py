"""
Reader for All-in-One WP Migration ``.wpress`` backups.

A ``.wpress`` file is a flat sequence of entries, each made of a fixed
4377-byte header followed by the raw file content::

    offset    size   field
    0         255    file name, NUL padded
    255       14     content size in bytes, ASCII decimal, NUL padded
    269       12     modification time, ASCII decimal, NUL padded
    281       4096   directory path inside the site, NUL padded

An all-NUL header marks the end of the archive.  The database export is the
entry named ``database.sql``; uploaded media live under ``wp-content/uploads``.
"""

from __future__ import annotations

import os
from typing import Dict, Iterator, NamedTuple, Optional

HEADER_SIZE = 4377
NAME_END = 255
SIZE_END = 269
MTIME_END = 281

DATABASE_FILE = "database.sql"
UPLOADS_MARKER = "wp-content/uploads"

_CHUNK = 1024 * 1024


class WpressEntry(NamedTuple):
    name: str
    path: str
    size: int
    offset: int  # where the content starts


def _field(header: bytes, start: int, end: int) -> str:
    raw = header[start:end]
    nul = raw.find(b"\0")
    if nul >= 0:
        raw = raw[:nul]
    return raw.decode("utf-8", errors="replace").strip()


def iter_entries(archive_path: str) -> Iterator[WpressEntry]:
    """
    Yield the entries of ``archive_path`` in archive order.

    Headers that cannot be read (empty name, non-numeric size) are skipped by
    moving forward one byte, so a damaged region does not end the scan.  An
    entry whose content would run past the end of the file stops iteration.

    Raises:
        FileNotFoundError: If the archive does not exist.
    """
    if not os.path.exists(archive_path):
        raise FileNotFoundError(f"Archive not found: {archive_path}")

    total = os.path.getsize(archive_path)
    with open(archive_path, "rb") as f:
        offset = 0
        while offset + HEADER_SIZE <= total:
            f.seek(offset)
            header = f.read(HEADER_SIZE)
            if not header.strip(b"\0"):
                return

            name = _field(header, 0, NAME_END)
            size_text = _field(header, NAME_END, SIZE_END)
            if not name or not size_text.isdigit():
                offset += 1
                continue

            size = int(size_text)
            content_offset = offset + HEADER_SIZE
            if content_offset + size > total:
                print(f"[WARNING] Entry {name} exceeds archive size, stopping.")
                return

            yield WpressEntry(name, _field(header, MTIME_END, HEADER_SIZE), size, content_offset)
            offset = content_offset + size


def _copy_content(src, entry: WpressEntry, dest_path: str) -> None:
    os.makedirs(os.path.dirname(dest_path) or ".", exist_ok=True)
    src.seek(entry.offset)
    remaining = entry.size
    with open(dest_path, "wb") as out:
        while remaining > 0:
            chunk = src.read(min(_CHUNK, remaining))
            if not chunk:
                break
            out.write(chunk)
            remaining -= len(chunk)


def _output_path(entry: WpressEntry, output_dir: str, include_uploads: bool) -> Optional[str]:
    if entry.name == DATABASE_FILE:
        return os.path.join(output_dir, DATABASE_FILE)
    if entry.name == "package.json" and entry.path in ("", "."):
        return os.path.join(output_dir, "wp-package.json")
    if include_uploads and UPLOADS_MARKER in entry.path:
        root = os.path.abspath(output_dir)
        target = os.path.abspath(os.path.join(root, entry.path, entry.name))
        # Entries must stay inside the output directory
        if os.path.commonpath([root, target]) != root:
            return None
        return target
    return None


def extract_archive(archive_path: str, output_dir: str, *, include_uploads: bool = True) -> Dict[str, int]:
    """
    Extract ``database.sql`` (and uploaded media unless ``include_uploads`` is
    false) from ``archive_path`` into ``output_dir``.

    Returns:
        Counts of ``extracted`` and ``skipped`` entries.
    """
    print(f"[INFO] Extracting {archive_path} to {output_dir}...")
    os.makedirs(output_dir, exist_ok=True)
    counts = {"extracted": 0, "skipped": 0}
    with open(archive_path, "rb") as src:
        for entry in iter_entries(archive_path):
            dest = _output_path(entry, output_dir, include_uploads)
            if dest is None:
                counts["skipped"] += 1
                continue
            _copy_content(src, entry, dest)
            counts["extracted"] += 1
            if entry.name == DATABASE_FILE:
                print(f"[INFO] Found {DATABASE_FILE} ({entry.size} bytes)")
            elif counts["extracted"] % 50 == 0:
                print(f"[INFO] [{counts['extracted']}] Extracted: {entry.name} ({entry.size} bytes)")
    print(f"[INFO] Extraction complete: {counts['extracted']} extracted, {counts['skipped']} skipped")
    return counts


def extract_database(archive_path: str, output_dir: str) -> Optional[str]:
    """Extract only ``database.sql``; returns its path, or ``None`` if the archive has none."""
    with open(archive_path, "rb") as src:
        for entry in iter_entries(archive_path):
            if entry.name == DATABASE_FILE:
                dest = os.path.join(output_dir, DATABASE_FILE)
                _copy_content(src, entry, dest)
                return dest
    return None
