"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

Serves a directory tree over HTTP: containment, the fallback chain,
directory handling, then the conditional emitter.

=============================================================================
RESOLUTION
=============================================================================

Every request starts as one Attempt. Some outcomes re-enter resolution
with a derived attempt (another URL path, maybe a status override):

    ┌───────────────────────────────────────────────────────────────────┐
    │  resolve_path (403)  →  method (405)  →  os.stat                  │
    │                                                                   │
    │  stat raised not-found                                            │
    │    ├── already the 404 document          → 404                    │
    │    ├── index lookup for a directory      → 404 (directory decides)│
    │    ├── default_ext set, no extension     → retry "<path>.<ext>"   │
    │    └── otherwise                         → retry "/404.html"      │
    │                                            with status 404        │
    │  stat raised anything else               → 500                    │
    │                                                                   │
    │  directory                                                        │
    │    ├── no trailing slash                 → 302 "<path>/"          │
    │    ├── auto_index                        → retry "<path>index.html"
    │    │     └── not there                   → listing or 403         │
    │    └── no auto_index                     → listing or 404         │
    │                                                                   │
    │  regular file, URL ends in "/"           → as not found           │
    │  regular file                            → FileEmitter            │
    └───────────────────────────────────────────────────────────────────┘

The rules bound the chain (request → default extension → 404 document),
so depth never goes past 3. MAX_FALLBACK_DEPTH guards it anyway.

=============================================================================
USAGE
=============================================================================

    static = serve_static("./public", gzip=True, defaultExt="html")
    response = static.handle(request)

    # or in front of another handler: terminal 404s fall through
    pipeline.add(StaticMiddleware(static))

=============================================================================
"""

import logging
import os
import posixpath
import stat as stat_module
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional
from urllib.parse import quote

from .. import __version__
from ..config import StaticOptions
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder
from ..http.status_codes import HTTPStatus
from ..middleware.base import Middleware, NextHandler
from .cache import ResponseCache
from .emitter import FileEmitter
from .errors import FileNotFound, Forbidden, InternalError, StaticFileError
from .listing import render_listing
from .resolver import check_method, mount_point, resolve_path
from .status import error_response


logger = logging.getLogger(__name__)

MAX_FALLBACK_DEPTH = 4
INDEX_FILE = "index.html"
NOT_FOUND_DOCUMENT = "404.html"


@dataclass(frozen=True)
class Attempt:
    """
    One pass through resolution.

    Attributes:
        url_path: Decoded URL path being resolved.
        status_override: Status to serve a found file with (404 for the
                         custom 404 document).
        depth: Number of re-entries that led here.
        index_lookup: This attempt is looking for a directory's index.
    """

    url_path: str
    status_override: Optional[int] = None
    depth: int = 0
    index_lookup: bool = False

    def derive(self, url_path: str, **changes: Any) -> "Attempt":
        return replace(self, url_path=url_path, depth=self.depth + 1, **changes)


class StaticFileHandler:
    """
    Request handler for one served directory.

    Thread-safe: options are immutable and the response cache locks
    internally, so one instance serves every worker.

    Args:
        options: Normalized StaticOptions.
        cache: Response cache to use; one is created from the options
               budgets when omitted. Pass the same cache to several
               handlers to share it.
    """

    def __init__(self, options: StaticOptions, cache: Optional[ResponseCache] = None):
        self.options = options
        self.root = str(Path(options.root).resolve())
        self.cache = cache if cache is not None else ResponseCache(
            max_entries=options.file_cache_entries,
            max_bytes=options.file_cache_bytes,
            coalesce=options.coalesce_reads,
        )
        self.server_header = f"staticserver-{__version__}"
        self.emitter = FileEmitter(options, self.cache, self.server_header)

    def __call__(self, request: HTTPRequest) -> HTTPResponse:
        return self.handle(request)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """Serve ``request``; every failure becomes one error response."""
        try:
            return self.serve(request)
        except StaticFileError as e:
            logger.debug(f"{request.method} {request.path} -> {e.status_code} ({e})")
            return error_response(e, self.server_header)

    def serve(self, request: HTTPRequest) -> HTTPResponse:
        """
        Like handle(), but failures are raised.

        Raises:
            StaticFileError: a subclass per failing status.
        """
        return self._resolve(request, Attempt(request.path))

    # =========================================================================
    # STATE MACHINE
    # =========================================================================

    def _resolve(self, request: HTTPRequest, attempt: Attempt) -> HTTPResponse:
        if attempt.depth > MAX_FALLBACK_DEPTH:
            logger.error(f"Fallback chain too deep for {request.path}: {attempt}")
            raise InternalError("Fallback depth exceeded")

        path = resolve_path(self.root, self.options.base_dir, attempt.url_path)
        check_method(request.method)

        try:
            st = os.stat(path)
        except (FileNotFoundError, NotADirectoryError):
            logger.debug(f"Not found: {path}")
            return self._not_found(request, attempt)
        except OSError as e:
            logger.error(f"Cannot stat {path}: {e}", exc_info=True)
            raise InternalError("Failed to stat file", cause=e) from e

        if stat_module.S_ISDIR(st.st_mode):
            return self._directory(request, attempt, path, st)

        if not stat_module.S_ISREG(st.st_mode):
            logger.warning(f"Refusing to serve special file: {path}")
            raise Forbidden("Not a regular file")

        # normpath drops the trailing slash; "/file.html/" names no file
        if attempt.url_path.endswith("/"):
            logger.debug(f"File requested as a directory: {attempt.url_path}")
            return self._not_found(request, attempt)

        logger.debug(f"Serving {path} (status {attempt.status_override or 200})")
        return self.emitter.emit(request, path, st, attempt.status_override)

    def _not_found(self, request: HTTPRequest, attempt: Attempt) -> HTTPResponse:
        if attempt.status_override == HTTPStatus.NOT_FOUND:
            raise FileNotFound("No 404 document")

        if attempt.index_lookup:
            raise FileNotFound("No index document")

        ext = self.options.default_ext
        url_path = attempt.url_path
        if ext and not url_path.endswith("/") and not posixpath.splitext(url_path)[1]:
            logger.debug(f"Retrying {url_path} with .{ext}")
            return self._resolve(request, attempt.derive(f"{url_path}.{ext}"))

        document = posixpath.join(mount_point(self.options.base_dir), NOT_FOUND_DOCUMENT)
        logger.debug(f"Falling back to {document}")
        return self._resolve(
            request,
            attempt.derive(document, status_override=HTTPStatus.NOT_FOUND),
        )

    def _directory(
        self,
        request: HTTPRequest,
        attempt: Attempt,
        path: str,
        st: os.stat_result,
    ) -> HTTPResponse:
        if not attempt.url_path.endswith("/"):
            return (ResponseBuilder()
                .redirect(quote(attempt.url_path + "/"))
                .header("Server", self.server_header)
                .build())

        if self.options.auto_index:
            try:
                return self._resolve(
                    request,
                    attempt.derive(attempt.url_path + INDEX_FILE, index_lookup=True),
                )
            except (FileNotFound, Forbidden) as e:
                logger.debug(f"No index for {path}: {e}")

            if self.options.show_dir:
                return self._listing(path, attempt, st)
            raise Forbidden("Directory has no index")

        if self.options.show_dir:
            return self._listing(path, attempt, st)
        raise FileNotFound("Directory listing disabled")

    def _listing(self, path: str, attempt: Attempt, st: os.stat_result) -> HTTPResponse:
        try:
            return render_listing(path, attempt.url_path, st, self.server_header)
        except OSError as e:
            logger.error(f"Cannot list {path}: {e}", exc_info=True)
            raise InternalError("Failed to list directory", cause=e) from e


class StaticMiddleware(Middleware):
    """
    Static handler in front of another handler.

    Requests that end in a terminal 404 are passed to ``next`` so that
    routes behind the middleware still get a chance; every other outcome
    is answered here.
    """

    def __init__(self, handler: StaticFileHandler):
        self.handler = handler

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        try:
            return self.handler.serve(request)
        except FileNotFound:
            return next(request)
        except StaticFileError as e:
            return error_response(e, self.handler.server_header)


def serve_static(root: str, **options: Any) -> StaticFileHandler:
    """
    Build a StaticFileHandler for ``root``.

    Options use either spelling (``autoIndex`` or ``auto_index``):

        static = serve_static("/var/www", cache=86400, gzip=True)
    """
    return StaticFileHandler(StaticOptions.normalize({"root": root}, **options))
