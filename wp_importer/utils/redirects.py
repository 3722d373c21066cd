"""
Redirect map for the portal's 301 rules.

Each imported post gets one ``OldURL,NewURL`` row so links to the old
WordPress site keep working.  The old URL is ``<old_domain>/<slug>`` when the
legacy domain is known (WordPress "post name" permalinks); otherwise the
post's ``guid`` is used, which is what ``?p=<id>`` links resolve to.
"""

from __future__ import annotations

import csv
import os
from typing import Dict, Iterable, Optional


def _old_url(post: Dict[str, str], old_domain: str) -> Optional[str]:
    slug = post.get("Slug", "")
    if old_domain:
        base = old_domain.rstrip("/")
        return f"{base}/{slug}" if slug else base
    return post.get("Permalink") or None


def generate_redirects_csv(
    posts: Iterable[Dict[str, str]], *, old_domain: str, new_base: str, out_path: str = "reports/redirect_map.csv"
) -> str:
    """
    Write the redirect CSV for ``posts`` and return its path.

    ``posts`` are dicts with ``Slug`` and optionally ``Permalink`` and
    ``NewURL``.  Without ``NewURL`` the target is ``<new_base>/<slug>``, the
    portal's article route.  Posts with no resolvable old URL are left out.
    """
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["OldURL", "NewURL"])
        for post in posts:
            old_url = _old_url(post, old_domain)
            if not old_url:
                continue
            writer.writerow([old_url, post.get("NewURL") or f"{new_base.rstrip('/')}/{post.get('Slug', '')}"])
    return out_path
