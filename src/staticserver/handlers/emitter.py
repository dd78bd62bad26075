"""
=============================================================================
CONDITIONAL RESPONSE EMITTER
=============================================================================

Builds the response for a regular file once resolution has found it.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  1. caching headers      ETag, Last-Modified, Cache-Control          │
    │  2. conditional check    If-None-Match / If-Modified-Since → 304     │
    │  3. entity headers       Content-Length, Content-Type                │
    │  4. HEAD                 stop here, no read                          │
    │  5. negotiate gzip       Content-Encoding: gzip, no Content-Length   │
    │  6. body                 response cache, else read (+ compress)      │
    └─────────────────────────────────────────────────────────────────────┘

The status is 200 unless the caller passes an override; the custom 404
document is emitted through here with ``status_override=404``.

=============================================================================
CONDITIONAL REQUESTS
=============================================================================

    Client                                     Server
      │  GET /app.js                              │
      │ ────────────────────────────────────────► │
      │  200, ETag: "a1-2f-17c6..."               │
      │ ◄──────────────────────────────────────── │
      │                                           │
      │  GET /app.js                              │
      │  If-None-Match: "a1-2f-17c6..."           │
      │ ────────────────────────────────────────► │
      │  304 Not Modified (headers only)          │
      │ ◄──────────────────────────────────────── │

Either validator is enough: an exact ETag match, or an If-Modified-Since
date at or after the file's mtime (compared in whole seconds, since HTTP
dates carry no fractions). An If-Modified-Since value that does not parse
is ignored.

=============================================================================
"""

import gzip
import logging
import os
from datetime import timezone
from email.utils import parsedate_to_datetime
from typing import Optional

from ..config import StaticOptions
from ..http.mime_types import get_content_type
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, format_http_date
from ..http.status_codes import HTTPStatus
from .cache import ResponseCache
from .errors import InternalError
from .etag import compute_etag


logger = logging.getLogger(__name__)

GZIP_LEVEL = 6


def read_file(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def accepts_gzip(request: HTTPRequest) -> bool:
    return "gzip" in request.get_header("accept-encoding").lower()


class FileEmitter:
    """
    Emits file responses for one StaticFileHandler.

    Args:
        options: Handler options (cache max-age, gzip).
        cache: Shared response cache.
        server_header: Value of the Server header.
    """

    def __init__(
        self,
        options: StaticOptions,
        cache: ResponseCache,
        server_header: str,
    ):
        self.options = options
        self.cache = cache
        self.server_header = server_header

    def emit(
        self,
        request: HTTPRequest,
        path: str,
        stat: os.stat_result,
        status_override: Optional[int] = None,
    ) -> HTTPResponse:
        """
        Response for the regular file at ``path``.

        Raises:
            InternalError: the file could not be read.
        """
        etag = compute_etag(stat)
        headers = {
            "Server": self.server_header,
            "ETag": etag,
            "Last-Modified": format_http_date(stat.st_mtime),
            "Cache-Control": f"max-age={self.options.cache}",
        }
        if self.options.gzip:
            headers["Vary"] = "Accept-Encoding"

        if self.is_not_modified(request, etag, stat):
            logger.debug(f"Not modified: {path}")
            return HTTPResponse(status=HTTPStatus.NOT_MODIFIED, headers=headers)

        status = HTTPStatus(status_override or HTTPStatus.OK)
        headers["Content-Length"] = str(stat.st_size)
        headers["Content-Type"] = get_content_type(path)

        if request.method == "HEAD":
            return HTTPResponse(status=status, headers=headers)

        gzipped = self.options.gzip and accepts_gzip(request)
        if gzipped:
            headers["Content-Encoding"] = "gzip"
            del headers["Content-Length"]

        try:
            body = self.cache.load(path, etag, gzipped, lambda: self._load(path, gzipped))
        except OSError as e:
            logger.error(f"Error reading file {path}: {e}", exc_info=True)
            raise InternalError("Failed to read file", cause=e) from e

        if not gzipped and len(body) != stat.st_size:
            # changed on disk between stat and read
            headers["Content-Length"] = str(len(body))

        return HTTPResponse(status=status, headers=headers, body=body)

    def is_not_modified(
        self,
        request: HTTPRequest,
        etag: str,
        stat: os.stat_result,
    ) -> bool:
        if request.get_header("if-none-match") == etag:
            return True

        since = request.get_header("if-modified-since")
        if not since:
            return False
        try:
            since_dt = parsedate_to_datetime(since)
        except (TypeError, ValueError, IndexError):
            return False
        if since_dt is None:
            return False
        if since_dt.tzinfo is None:
            since_dt = since_dt.replace(tzinfo=timezone.utc)

        return since_dt.timestamp() >= int(stat.st_mtime)

    def _load(self, path: str, gzipped: bool) -> bytes:
        data = read_file(path)
        if gzipped:
            return gzip.compress(data, compresslevel=GZIP_LEVEL)
        return data
