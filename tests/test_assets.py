import base64
from pathlib import Path
import tempfile

import pytest
import requests

from sponsorship_reports.docgen import assets
from sponsorship_reports.docgen.assets import fallback_image_bytes, get_image_bytes, read_embedded_logo

# 1x1 GIF
GIF_BASE64 = "R0lGODlhAQABAIAAAAAAAP///yH5BAEAAAAALAAAAAABAAEAAAIBRAA7"
GIF_BYTES = base64.b64decode(GIF_BASE64)


class DummyResponse:
    def __init__(self, status_code, content):
        self.status_code = status_code
        self.content = content


class DummyHttp:
    def __init__(self, responses):
        self._responses = list(responses)
        self.calls = 0

    def get(self, url, timeout=None):
        self.calls += 1
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def sleeps(monkeypatch):
    calls = []
    monkeypatch.setattr(assets.time, "sleep", lambda s: calls.append(s))
    return calls


def test_failing_url_returns_fallback_after_two_attempts(sleeps):
    http = DummyHttp([requests.ConnectionError("down"), requests.ConnectionError("down")])
    data = get_image_bytes("https://logo.invalid/x.png", embedded="", http=http)
    assert data == fallback_image_bytes()
    assert http.calls == 2
    assert sleeps == [0.5]


def test_non_success_status_counts_as_failure(sleeps):
    http = DummyHttp([DummyResponse(404, b""), DummyResponse(503, b"")])
    assert get_image_bytes("https://logo.invalid/x.png", embedded="", http=http) == fallback_image_bytes()
    assert http.calls == 2


def test_non_image_body_counts_as_failure(sleeps):
    http = DummyHttp([DummyResponse(200, b"<html>proxy error</html>"), DummyResponse(200, b"")])
    assert get_image_bytes("https://logo.invalid/x.png", embedded="", http=http) == fallback_image_bytes()


def test_second_attempt_succeeds(sleeps):
    http = DummyHttp([requests.Timeout("slow"), DummyResponse(200, GIF_BYTES)])
    assert get_image_bytes("https://logo.example/x.gif", embedded="", http=http) == GIF_BYTES
    assert http.calls == 2


def test_embedded_logo_skips_network(sleeps):
    http = DummyHttp([])
    data = get_image_bytes("https://logo.example/x.gif", embedded="data:image/png;base64," + GIF_BASE64, http=http)
    assert data == GIF_BYTES
    assert http.calls == 0


def test_malformed_embedded_logo_falls_through_to_network(sleeps):
    http = DummyHttp([DummyResponse(200, GIF_BYTES)])
    assert get_image_bytes("https://logo.example/x.gif", embedded="not base64 !!", http=http) == GIF_BYTES
    assert http.calls == 1


def test_fallback_is_a_png():
    assert fallback_image_bytes().startswith(b"\x89PNG")


def test_line_wrapped_logo_file_skips_network(sleeps):
    # `base64 logo.png > logo.b64` wraps at 76 columns
    blob = GIF_BYTES * 3
    with tempfile.TemporaryDirectory() as d:
        path = Path(d) / "logo.b64"
        path.write_bytes(base64.encodebytes(blob))
        embedded = read_embedded_logo(str(path))
        assert "\n" in embedded

        http = DummyHttp([])
        assert get_image_bytes("https://logo.example/x.gif", embedded=embedded, http=http) == blob
        assert http.calls == 0
        assert sleeps == []
