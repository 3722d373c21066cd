from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Mapping, NamedTuple, Optional, Sequence, TypeVar

from models.wordpress import WPPost, WPTerm
from .wordpress_extractor import WordPressDump

T = TypeVar("T")


class PostTerms(NamedTuple):
    """term_taxonomy ids attached to a post, split by taxonomy."""

    categories: List[int]
    tags: List[int]


def index_by(records: Iterable[T], key: Callable[[T], int]) -> Dict[int, T]:
    """Build ``{key(record): record}``; later duplicates win."""
    return {key(r): r for r in records}


def taxonomy_terms(dump: WordPressDump, taxonomy: str) -> Dict[int, WPTerm]:
    """Terms of ``taxonomy`` (``category``, ``post_tag`` ...) keyed by term_taxonomy_id."""
    terms = index_by(dump.terms, lambda t: t.term_id)
    result: Dict[int, WPTerm] = {}
    for tax in dump.term_taxonomy:
        if tax.taxonomy != taxonomy:
            continue
        term = terms.get(tax.term_id)
        if term is not None:
            result[tax.term_taxonomy_id] = term
    return result


def taxonomy_descriptions(dump: WordPressDump) -> Dict[int, str]:
    return {t.term_taxonomy_id: t.description for t in dump.term_taxonomy}


def post_terms(dump: WordPressDump) -> Dict[int, PostTerms]:
    """Category and tag term_taxonomy ids of every post id, deduplicated in file order."""
    kinds = {t.term_taxonomy_id: t.taxonomy for t in dump.term_taxonomy}
    result: Dict[int, PostTerms] = {}
    for rel in dump.term_relationships:
        kind = kinds.get(rel.term_taxonomy_id)
        if kind == "category":
            bucket = result.setdefault(rel.object_id, PostTerms([], [])).categories
        elif kind == "post_tag":
            bucket = result.setdefault(rel.object_id, PostTerms([], [])).tags
        else:
            continue
        if rel.term_taxonomy_id not in bucket:
            bucket.append(rel.term_taxonomy_id)
    return result


def rewrite_url(url: str, url_rewrites: Optional[Mapping[str, str]] = None) -> str:
    """Replace the first matching old base URL prefix with its new value."""
    for old, new in (url_rewrites or {}).items():
        if old and url.startswith(old):
            return new + url[len(old):]
    return url


def featured_images(dump: WordPressDump, url_rewrites: Optional[Mapping[str, str]] = None) -> Dict[int, str]:
    """
    Map post id -> featured image URL.

    WordPress stores the featured image as a ``_thumbnail_id`` postmeta row
    pointing at an ``attachment`` post whose ``guid`` is the file URL.
    """
    attachments = {
        p.id: p.guid for p in dump.posts if p.post_type == "attachment" and p.guid
    }
    result: Dict[int, str] = {}
    for meta in dump.postmeta:
        if meta.meta_key != "_thumbnail_id":
            continue
        try:
            attachment_id = int(meta.meta_value)
        except ValueError:
            continue
        url = attachments.get(attachment_id)
        if url:
            result[meta.post_id] = rewrite_url(url, url_rewrites)
    return result


def select_posts(dump: WordPressDump, statuses: Sequence[str] = ("publish",)) -> List[WPPost]:
    """Articles worth importing: ``post`` type, wanted status, non-empty title."""
    return [
        p
        for p in dump.posts
        if p.post_type == "post"
        and p.post_status != "auto-draft"
        and p.post_status in statuses
        and p.post_title.strip()
    ]


def map_category_slug(slug: str, mapping: Optional[Mapping[str, str]] = None, default: str = "") -> str:
    """
    Translate a WordPress category slug into the portal's category slug.

    Without a mapping the slug is kept.  With one, unmapped slugs go to
    ``default`` when given, and are kept otherwise.
    """
    if not mapping:
        return slug
    return mapping.get(slug) or default or slug
