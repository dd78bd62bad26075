"""
=============================================================================
MIDDLEWARE
=============================================================================

Middleware wraps the static handler. Each one gets the request and a
``next`` callable, and either answers itself or calls ``next``:

    Request ──► LoggingMiddleware ──► StaticMiddleware ──► fallback handler
                      │                     │
                      │                     └─ answers everything except a
                      │                        terminal 404, which it hands
                      │                        to next()
                      └─ times the call, logs, adds X-Request-ID
    Response ◄───────────────────────────────────────────────────────────

The pipeline is composed once at startup (wrap()) into a single callable;
request handling does not touch the middleware list.

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, List
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)

# The next middleware, or the final handler
NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    Base class for middleware.

        class ServerTiming(Middleware):
            def __call__(self, request, next):
                response = next(request)
                response.set_header("X-Served-By", "edge-1")
                return response
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        """Return a response, calling ``next(request)`` to continue."""

    @property
    def name(self) -> str:
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Ordered middleware list; the first added is the outermost.

        pipeline = MiddlewarePipeline()
        pipeline.use(LoggingMiddleware(), StaticMiddleware(static))
        app = pipeline.wrap(not_found_handler)
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def use(self, *middleware: Middleware) -> "MiddlewarePipeline":
        for mw in middleware:
            self.add(mw)
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """Compose the middleware around ``handler`` into one callable."""
        current = handler
        for middleware in reversed(self._middleware):
            current = self._bind(middleware, current)
        return current

    @staticmethod
    def _bind(middleware: Middleware, next_handler: NextHandler) -> NextHandler:
        # Separate scope so each closure keeps its own next_handler
        def wrapped(request: HTTPRequest) -> HTTPResponse:
            return middleware(request, next_handler)
        return wrapped

    def __len__(self) -> int:
        return len(self._middleware)
