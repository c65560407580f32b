from __future__ import annotations

import functools
import http.server
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlsplit

from .config import SiteConfig

CONTENT_TYPES = {
    ".html": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
}
DEFAULT_CONTENT_TYPE = "text/plain"
NOT_FOUND_BODY = b"File not found"


def content_type_for(path: Path) -> str:
    return CONTENT_TYPES.get(path.suffix.lower(), DEFAULT_CONTENT_TYPE)


def resolve_request_path(root: Path, request_path: str) -> Optional[Path]:
    """Map a request path onto a file below ``root``.

    Directory-style paths get ``index.html``; an extensionless miss is retried
    with ``.html``. Returns ``None`` when nothing matches or the path escapes
    ``root``.
    """
    url_path = unquote(urlsplit(request_path).path)
    root = root.resolve()
    candidate = root / url_path.lstrip("/")
    if url_path.endswith("/") or candidate.is_dir():
        candidate = candidate / "index.html"
    if not candidate.is_file() and not candidate.suffix:
        candidate = candidate.with_name(candidate.name + ".html")
    if not candidate.is_file():
        return None
    resolved = candidate.resolve()
    if not resolved.is_relative_to(root):
        return None
    return resolved


class PreviewHandler(http.server.SimpleHTTPRequestHandler):
    def do_GET(self) -> None:
        self._respond(include_body=True)

    def do_HEAD(self) -> None:
        self._respond(include_body=False)

    def _respond(self, include_body: bool) -> None:
        path = resolve_request_path(Path(self.directory), self.path)
        if path is None:
            self.send_response(404)
            self.send_header("Content-Type", DEFAULT_CONTENT_TYPE)
            self.send_header("Content-Length", str(len(NOT_FOUND_BODY)))
            self.end_headers()
            if include_body:
                self.wfile.write(NOT_FOUND_BODY)
            return
        data = path.read_bytes()
        self.send_response(200)
        self.send_header("Content-Type", content_type_for(path))
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        if include_body:
            self.wfile.write(data)


def make_server(config: SiteConfig) -> http.server.ThreadingHTTPServer:
    handler = functools.partial(PreviewHandler, directory=str(config.output_dir))
    return http.server.ThreadingHTTPServer((config.host, config.port), handler)


def serve(config: SiteConfig) -> None:
    httpd = make_server(config)
    print(f"\nServer running at http://{config.host}:{config.port}")
    print("Press Ctrl+C to stop the server")
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        print("Shutting down server.")
    finally:
        httpd.server_close()
