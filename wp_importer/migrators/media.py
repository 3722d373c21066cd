"""
Download of WordPress media into the portal's uploads directory.

Featured images of imported posts still point at the old WordPress host.
When ``migration.download_media`` is enabled the import copies each file
into ``portal.uploads_dir`` and stores the public URL instead.  Requests go
through a simple rate limiter and a retry wrapper that backs off on 429
and 5xx responses, honouring ``Retry-After`` when present.
"""

from __future__ import annotations

import mimetypes
import os
import re
import time
from typing import Callable, Optional
from urllib.parse import unquote, urlparse

import requests

###############################################################################
# Rate limiting and retry utilities
###############################################################################

class RateLimiter:
    """
    Simple time-based rate limiter.  Ensures that no more than ``rpm``
    requests are dispatched per minute, so a bulk import does not hammer
    the old WordPress host.
    """

    def __init__(self, rpm: int = 120) -> None:
        self.rpm = max(1, rpm)
        self.interval = 60.0 / float(self.rpm)
        self._last = 0.0

    def wait(self, time_fn: Callable[[], float] = time.time, sleep_fn: Callable[[float], None] = time.sleep) -> None:
        now = time_fn()
        dt = now - self._last
        if dt < self.interval:
            sleep_fn(self.interval - dt)
        self._last = time_fn()


def with_retries(
    fn: Callable[[], requests.Response],
    *,
    max_attempts: int = 4,
    base_delay: float = 0.7,
    sleep_fn: Callable[[float], None] = time.sleep,
) -> requests.Response:
    """
    Execute a function returning a ``requests.Response``, retrying on
    transient HTTP errors (429 and 5xx) and network errors with
    exponential backoff.

    :raises requests.HTTPError: if all attempts fail or the status is not retryable.
    """
    attempt = 0
    while True:
        try:
            resp = fn()
            resp.raise_for_status()
            return resp
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else 0
            if status not in (429, 500, 502, 503, 504) or attempt >= max_attempts - 1:
                raise
            retry_after = e.response.headers.get("Retry-After")
            try:
                wait = float(retry_after) if retry_after else base_delay * (2 ** attempt)
            except ValueError:
                wait = base_delay * (2 ** attempt)
            sleep_fn(wait)
            attempt += 1
        except requests.RequestException:
            if attempt >= max_attempts - 1:
                raise
            sleep_fn(base_delay * (2 ** attempt))
            attempt += 1


_limiter = RateLimiter()

_UPLOADS_MARKER = "/wp-content/uploads/"


def local_filename(url: str, content_type: Optional[str] = None) -> str:
    """
    File name for ``url``, sanitized, with an extension guessed if missing.

    The folders below ``wp-content/uploads/`` become part of the name
    (``2024/05/photo.jpg`` -> ``2024-05-photo.jpg``), since WordPress reuses
    base names across its month folders.  Other URLs keep their whole path.
    """
    path = unquote(urlparse(url).path)
    if _UPLOADS_MARKER in path:
        path = path.split(_UPLOADS_MARKER, 1)[1]
    name = re.sub(r"[^A-Za-z0-9._-]+", "-", path.strip("/")).strip("-.") or "image"
    if not os.path.splitext(name)[1] and content_type:
        ext = mimetypes.guess_extension(content_type.split(";")[0].strip())
        if ext:
            name += ext
    return name


def _fetch(http: requests.Session, url: str, limiter: RateLimiter) -> requests.Response:
    def do_request() -> requests.Response:
        limiter.wait()
        return http.get(url, timeout=30)

    return with_retries(do_request)


def download_image(
    url: str,
    uploads_dir: str,
    *,
    public_prefix: str = "/uploads",
    session: Optional[requests.Session] = None,
    limiter: Optional[RateLimiter] = None,
) -> Optional[str]:
    """
    Download ``url`` into ``uploads_dir/wp`` and return its public URL.

    An already downloaded file with the same name is reused.  Returns ``None``
    when the download fails; the caller keeps the original URL in that case.
    Without a ``session`` a short-lived one is opened for this request.
    """
    if not url:
        return None
    target_dir = os.path.join(uploads_dir, "wp")
    name = local_filename(url)
    if os.path.exists(os.path.join(target_dir, name)):
        return f"{public_prefix.rstrip('/')}/wp/{name}"

    try:
        if session is None:
            with requests.Session() as http:
                resp = _fetch(http, url, limiter or _limiter)
        else:
            resp = _fetch(session, url, limiter or _limiter)
    except requests.RequestException as e:
        print(f"[ERROR] Failed to download {url}: {e}")
        return None

    name = local_filename(url, resp.headers.get("Content-Type"))
    os.makedirs(target_dir, exist_ok=True)
    with open(os.path.join(target_dir, name), "wb") as f:
        f.write(resp.content)
    return f"{public_prefix.rstrip('/')}/wp/{name}"
