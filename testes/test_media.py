import os
import sys

# Ensure project root is on sys.path for imports when running tests directly
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest
import requests

from wp_importer.migrators.media import RateLimiter, download_image, local_filename, with_retries


class FakeResponse:
    def __init__(self, status_code=200, content=b"", headers=None):
        self.status_code = status_code
        self.content = content
        self.headers = headers or {}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append(url)
        return self.responses.pop(0)


def _no_wait_limiter():
    limiter = RateLimiter(rpm=60000)
    limiter.wait = lambda *a, **k: None
    return limiter


def test_local_filename():
    assert local_filename("http://old.test/wp-content/uploads/a%20b.jpg") == "a-b.jpg"
    assert local_filename("http://old.test/wp-content/uploads/2024/05/photo.jpg") == "2024-05-photo.jpg"
    assert local_filename("http://old.test/img/photo", "image/png") == "img-photo.png"
    assert local_filename("http://old.test/") == "image"


def test_download_image_writes_file(tmp_path):
    session = FakeSession([FakeResponse(200, b"JPEGDATA", {"Content-Type": "image/jpeg"})])
    url = download_image(
        "http://old.test/wp-content/uploads/photo.jpg",
        str(tmp_path),
        session=session,
        limiter=_no_wait_limiter(),
    )
    assert url == "/uploads/wp/photo.jpg"
    assert (tmp_path / "wp" / "photo.jpg").read_bytes() == b"JPEGDATA"


def test_download_image_reuses_existing_file(tmp_path):
    (tmp_path / "wp").mkdir()
    (tmp_path / "wp" / "photo.jpg").write_bytes(b"old")
    session = FakeSession([])
    url = download_image("http://old.test/photo.jpg", str(tmp_path), public_prefix="/media/", session=session)
    assert url == "/media/wp/photo.jpg"
    assert session.calls == []


def test_download_image_not_found_returns_none(tmp_path):
    session = FakeSession([FakeResponse(404)])
    url = download_image("http://old.test/gone.jpg", str(tmp_path), session=session, limiter=_no_wait_limiter())
    assert url is None
    assert not (tmp_path / "wp" / "gone.jpg").exists()


def test_download_image_retries_on_503(tmp_path):
    session = FakeSession([
        FakeResponse(503, headers={"Retry-After": "0"}),
        FakeResponse(200, b"OK"),
    ])
    url = download_image("http://old.test/busy.jpg", str(tmp_path), session=session, limiter=_no_wait_limiter())
    assert url == "/uploads/wp/busy.jpg"
    assert len(session.calls) == 2


def test_with_retries_honours_retry_after():
    responses = [FakeResponse(429, headers={"Retry-After": "2"}), FakeResponse(200)]
    sleeps = []
    resp = with_retries(lambda: responses.pop(0), sleep_fn=sleeps.append)
    assert resp.status_code == 200
    assert sleeps == [2.0]


def test_with_retries_gives_up_after_max_attempts():
    sleeps = []
    with pytest.raises(requests.HTTPError):
        with_retries(lambda: FakeResponse(500), max_attempts=3, base_delay=0.5, sleep_fn=sleeps.append)
    assert sleeps == [0.5, 1.0]


def test_rate_limiter_sleeps_for_remaining_interval():
    limiter = RateLimiter(rpm=60)
    clock = iter([100.0, 100.0, 100.25, 101.0])
    sleeps = []
    limiter.wait(time_fn=lambda: next(clock), sleep_fn=sleeps.append)
    limiter.wait(time_fn=lambda: next(clock), sleep_fn=sleeps.append)
    assert sleeps == [0.75]


def test_same_base_name_in_different_upload_folders(tmp_path):
    session = FakeSession([FakeResponse(200, b"JANUARY"), FakeResponse(200, b"MAY")])
    limiter = _no_wait_limiter()
    first = download_image(
        "http://old.test/wp-content/uploads/2023/01/photo.jpg", str(tmp_path), session=session, limiter=limiter
    )
    second = download_image(
        "http://old.test/wp-content/uploads/2024/05/photo.jpg", str(tmp_path), session=session, limiter=limiter
    )
    assert first == "/uploads/wp/2023-01-photo.jpg"
    assert second == "/uploads/wp/2024-05-photo.jpg"
    assert len(session.calls) == 2
    assert (tmp_path / "wp" / "2023-01-photo.jpg").read_bytes() == b"JANUARY"
    assert (tmp_path / "wp" / "2024-05-photo.jpg").read_bytes() == b"MAY"


def test_download_image_closes_its_own_session(tmp_path, monkeypatch):
    opened = []

    class ClosingSession(FakeSession):
        closed = False

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            self.closed = True

    def make_session():
        s = ClosingSession([FakeResponse(200, b"DATA")])
        opened.append(s)
        return s

    monkeypatch.setattr(requests, "Session", make_session)
    url = download_image("http://old.test/own.jpg", str(tmp_path), limiter=_no_wait_limiter())
    assert url == "/uploads/wp/own.jpg"
    assert len(opened) == 1
    assert opened[0].closed
