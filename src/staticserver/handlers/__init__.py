"""
=============================================================================
HANDLERS
=============================================================================

The static file pipeline, leaf modules first:

    resolver.py   URL path → filesystem path, containment, method check
    etag.py       stat → ETag
    cache.py      bounded LRU of served bodies, single-flight loads
    emitter.py    caching headers, 304, gzip, body
    listing.py    HTML directory listing
    status.py     StaticFileError → error response
    static.py     the resolution state machine, StaticMiddleware

    from staticserver.handlers import serve_static

    static = serve_static("./public", defaultExt="html", gzip=True)
    response = static.handle(request)

=============================================================================
"""

from .errors import (
    StaticFileError,
    Forbidden,
    FileNotFound,
    MethodNotAllowed,
    InternalError,
)
from .cache import CacheEntry, ResponseCache
from .etag import compute_etag
from .listing import render_listing
from .resolver import resolve_path
from .emitter import FileEmitter
from .static import (
    Attempt,
    StaticFileHandler,
    StaticMiddleware,
    serve_static,
    MAX_FALLBACK_DEPTH,
)

__all__ = [
    "StaticFileError",
    "Forbidden",
    "FileNotFound",
    "MethodNotAllowed",
    "InternalError",
    "CacheEntry",
    "ResponseCache",
    "compute_etag",
    "render_listing",
    "resolve_path",
    "FileEmitter",
    "Attempt",
    "StaticFileHandler",
    "StaticMiddleware",
    "serve_static",
    "MAX_FALLBACK_DEPTH",
]
