from __future__ import annotations

from datetime import datetime
import re
import unicodedata
from typing import Optional

from bs4 import BeautifulSoup

# Gutenberg block delimiters, e.g. <!-- wp:image {"id":12} --> and <!-- /wp:image -->
_BLOCK_COMMENT_RE = re.compile(r"<!--\s*/?wp:.*?-->", re.DOTALL)
_NEXTPAGE_RE = re.compile(r"<!--\s*nextpage\s*-->", re.IGNORECASE)
_MORE_RE = re.compile(r"<!--\s*more.*?-->", re.IGNORECASE | re.DOTALL)
_HTML_TAG_RE = re.compile(r"<[^>]+>")

_CLASSLESS_TAGS = ["p", "h1", "h2", "h3", "h4", "h5", "h6"]

_STATUS_MAP = {
    "publish": "PUBLISHED",
    "draft": "DRAFT",
    "pending": "DRAFT",
    "auto-draft": "DRAFT",
    "future": "SCHEDULED",
    "trash": "TRASH",
}


def clean_content(content: str) -> str:
    """
    Turn WordPress post content into the HTML stored by the portal.

    - Drops Gutenberg block comments and the ``<!--more-->`` marker
    - Converts ``<!--nextpage-->`` page breaks to ``<hr/>``
    - Removes ``class`` attributes from paragraphs and headings
    - Wraps plain text (no tags at all) into ``<p>`` paragraphs, single
      newlines becoming ``<br>``

    ``content`` is expected to be already unescaped from its SQL form.
    """
    if not content:
        return ""

    text = content.replace("\r", "")
    text = _BLOCK_COMMENT_RE.sub("", text)
    text = _MORE_RE.sub("", text)
    text = _NEXTPAGE_RE.sub("<hr/>", text)
    text = text.strip()

    if not _HTML_TAG_RE.search(text):
        paragraphs = [p.strip() for p in re.split(r"\n\s*\n", text) if p.strip()]
        return "\n".join("<p>" + p.replace("\n", "<br>") + "</p>" for p in paragraphs)

    soup = BeautifulSoup(text, "html.parser")
    for tag in soup.find_all(_CLASSLESS_TAGS):
        tag.attrs.pop("class", None)
    return str(soup).strip()


def strip_html(html: str) -> str:
    """Return the text of ``html`` with whitespace collapsed."""
    if not html:
        return ""
    text = BeautifulSoup(html, "html.parser").get_text(" ")
    return re.sub(r"\s+", " ", text).strip()


def generate_excerpt(html: str, max_length: int = 160) -> str:
    """Plain-text excerpt of at most ``max_length`` characters, cut on a word boundary."""
    text = strip_html(html)
    if len(text) <= max_length:
        return text
    cut = re.sub(r"\s+\S*$", "", text[:max_length])
    return cut + "..."


def slugify(text: str) -> str:
    """Lowercase, accent-free slug with ``-`` separators."""
    if not text:
        return ""
    value = unicodedata.normalize("NFD", text.lower())
    value = "".join(c for c in value if not unicodedata.combining(c))
    value = re.sub(r"[^a-z0-9]+", "-", value)
    return value.strip("-")


def map_post_status(wp_status: str) -> str:
    """Map a WordPress ``post_status`` to the portal's status enum."""
    return _STATUS_MAP.get((wp_status or "").strip(), "DRAFT")


def parse_wp_datetime(value: str) -> Optional[datetime]:
    # WordPress stores 0000-00-00 00:00:00 for "never"
    if not value or value.startswith("0000-00-00"):
        return None
    for fmt in ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d"):
        try:
            return datetime.strptime(value.strip(), fmt)
        except ValueError:
            continue
    return None
