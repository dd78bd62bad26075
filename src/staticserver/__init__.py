"""
=============================================================================
STATICSERVER - Static File HTTP Server
=============================================================================

Serves a directory tree over HTTP/1.1 with conditional requests, gzip,
custom 404 documents and directory indexes, on a raw-socket server with a
worker thread pool.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    staticserver/
    ├── __init__.py          # package exports
    ├── __main__.py          # CLI (python -m staticserver [dir])
    ├── server.py            # HTTPServer: sockets + pool + handler
    ├── config.py            # ServerConfig, StaticOptions
    ├── core/
    │   ├── socket_server.py # accept loop
    │   ├── connection.py    # one client connection
    │   └── thread_pool.py   # worker threads
    ├── http/
    │   ├── request.py       # request parsing
    │   ├── response.py      # response building
    │   ├── status_codes.py  # HTTPStatus
    │   └── mime_types.py    # Content-Type lookup
    ├── middleware/
    │   ├── base.py          # Middleware, MiddlewarePipeline
    │   └── logging.py       # access log
    └── handlers/
        ├── resolver.py      # containment
        ├── cache.py         # response cache
        ├── emitter.py       # ETag / 304 / gzip
        ├── listing.py       # directory listing
        ├── status.py        # error responses
        └── static.py        # fallback state machine

=============================================================================
QUICK START
=============================================================================

    from staticserver import HTTPServer, ServerConfig, serve_static
    from staticserver.middleware import LoggingMiddleware

    server = HTTPServer(
        ServerConfig(port=8000),
        handler=serve_static("./public", gzip=True, defaultExt="html"),
    )
    server.use(LoggingMiddleware())
    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig, StaticOptions
from .handlers import StaticFileHandler, StaticMiddleware, serve_static
from .server import HTTPServer, create_app

__all__ = [
    "HTTPServer",
    "ServerConfig",
    "StaticOptions",
    "StaticFileHandler",
    "StaticMiddleware",
    "serve_static",
    "create_app",
    "__version__",
]
