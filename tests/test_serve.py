from __future__ import annotations

import threading
import urllib.error
import urllib.request
from pathlib import Path

import pytest

from studiosite.config import SiteConfig
from studiosite.serve import content_type_for, make_server, resolve_request_path


@pytest.fixture
def output_dir(tmp_path):
    root = tmp_path / "site"
    files = {
        "index.html": "home",
        "games/lantern/index.html": "lantern",
        "about.html": "about",
        "main.css": "body {}",
    }
    for rel, text in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    (tmp_path / "secret.txt").write_text("secret", encoding="utf-8")
    return root


@pytest.mark.parametrize(
    "request_path, expected",
    [
        ("/", "index.html"),
        ("/games/lantern/", "games/lantern/index.html"),
        ("/games/lantern", "games/lantern/index.html"),
        ("/about", "about.html"),
        ("/main.css?v=2", "main.css"),
        ("/%61bout.html", "about.html"),
    ],
)
def test_resolve_request_path(output_dir, request_path, expected):
    assert resolve_request_path(output_dir, request_path) == (output_dir / expected).resolve()


@pytest.mark.parametrize("request_path", ["/missing", "/games/", "/../secret.txt", "/main.js"])
def test_resolve_request_path_misses(output_dir, request_path):
    assert resolve_request_path(output_dir, request_path) is None


def test_content_type_for():
    assert content_type_for(Path("index.html")) == "text/html"
    assert content_type_for(Path("photo.JPG")) == "image/jpeg"
    assert content_type_for(Path("notes.md")) == "text/plain"


def test_preview_server_responses(output_dir):
    httpd = make_server(SiteConfig(output_dir=output_dir, host="127.0.0.1", port=0))
    port = httpd.server_address[1]
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    try:
        with urllib.request.urlopen(f"http://127.0.0.1:{port}/games/lantern") as response:
            assert response.status == 200
            assert response.headers["Content-Type"] == "text/html"
            assert response.read() == b"lantern"
        with pytest.raises(urllib.error.HTTPError) as excinfo:
            urllib.request.urlopen(f"http://127.0.0.1:{port}/nowhere")
        assert excinfo.value.code == 404
        assert excinfo.value.read() == b"File not found"
    finally:
        httpd.shutdown()
        httpd.server_close()
