"""
pytest configuration and fixtures.
"""

import http.client
from pathlib import Path
from typing import Callable, Generator, Optional

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from staticserver import HTTPServer, ServerConfig, create_app
from staticserver.handlers import StaticFileHandler, serve_static
from staticserver.http import HTTPRequest


INDEX_HTML = b"<!DOCTYPE html><title>home</title><h1>Home</h1>\n"
ABOUT_HTML = b"<h1>About</h1>\n"
STYLE_CSS = b"body { color: #333; }\n" * 50
NOT_FOUND_HTML = b"<h1>Custom not found</h1>\n"


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """
    A small document root:

        index.html  about.html  style.css  data.json  LICENSE
        docs/index.html  docs/guide.html
        blog/post.md          (directory without index)
        space name.txt
    """
    root = tmp_path / "site"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX_HTML)
    (root / "about.html").write_bytes(ABOUT_HTML)
    (root / "style.css").write_bytes(STYLE_CSS)
    (root / "data.json").write_bytes(b'{"ok": true}')
    (root / "LICENSE").write_bytes(b"MIT\n")
    (root / "space name.txt").write_bytes(b"spaced\n")

    docs = root / "docs"
    docs.mkdir()
    (docs / "index.html").write_bytes(b"<h1>Docs</h1>\n")
    (docs / "guide.html").write_bytes(b"<h1>Guide</h1>\n")

    blog = root / "blog"
    blog.mkdir()
    (blog / "post.md").write_bytes(b"# Post\n")

    # A file next to the root that must never be reachable
    (tmp_path / "secret.txt").write_bytes(b"top secret\n")
    return root


@pytest.fixture
def site_with_404(site: Path) -> Path:
    (site / "404.html").write_bytes(NOT_FOUND_HTML)
    return site


@pytest.fixture
def make_request() -> Callable[..., HTTPRequest]:
    """Factory for HTTPRequest objects; header names may use any case."""

    def factory(
        path: str = "/",
        method: str = "GET",
        headers: Optional[dict] = None,
    ) -> HTTPRequest:
        return HTTPRequest(
            method=method,
            path=path,
            headers={k.lower(): v for k, v in (headers or {}).items()},
            client_address=("127.0.0.1", 50000),
        )

    return factory


@pytest.fixture
def make_handler() -> Callable[..., StaticFileHandler]:
    def factory(root: Path, **options) -> StaticFileHandler:
        return serve_static(str(root), **options)

    return factory


@pytest.fixture
def config() -> ServerConfig:
    """Test server configuration on an OS-assigned port."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,
        min_workers=2,
        max_workers=4,
        timeout=5.0,
        keep_alive_timeout=1.0,
        log_level="WARNING",
    )


class LiveServer:
    """A running server plus helpers to talk to it."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self.host, self.port = server.start_background()

    def request(self, method: str, path: str, headers: Optional[dict] = None):
        """Returns (status, headers, body) for one request on a fresh connection."""
        conn = http.client.HTTPConnection(self.host, self.port, timeout=5)
        try:
            conn.request(method, path, headers=headers or {})
            response = conn.getresponse()
            body = response.read()
            return response.status, {k.lower(): v for k, v in response.getheaders()}, body
        finally:
            conn.close()

    def stop(self):
        self.server.stop()


@pytest.fixture
def live_server(site_with_404: Path, config: ServerConfig) -> Generator[Callable[..., LiveServer], None, None]:
    """Factory starting servers over the test site; all stopped at teardown."""
    started = []

    def factory(**options) -> LiveServer:
        live = LiveServer(create_app(str(site_with_404), config, **options))
        started.append(live)
        return live

    yield factory

    for live in started:
        live.stop()
