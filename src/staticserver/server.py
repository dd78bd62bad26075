"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together:

    ┌──────────────┐   Connection   ┌────────────┐   bytes   ┌───────────────┐
    │ SocketServer │ ─────────────► │ ThreadPool │ ────────► │ RequestParser │
    └──────────────┘                └────────────┘           └───────┬───────┘
                                                                     │ HTTPRequest
                                                                     ▼
                                   ┌────────────────────────────────────────┐
                                   │ middleware ─► handler (static files)   │
                                   └───────────────────┬────────────────────┘
                                                       │ HTTPResponse
                                                       ▼
                                          to_bytes() ─► sendall()

One connection is served by one worker for its whole keep-alive life.
Parse failures are answered with their status (400/405/413/505) and the
connection is closed; a handler exception becomes a logged 500.

=============================================================================
"""

import logging
import threading
from typing import Any, Callable, Optional, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, ThreadPool
from .http import (
    HTTPRequest,
    HTTPResponse,
    HTTPParseError,
    HTTPStatus,
    RequestParser,
    ResponseBuilder,
    not_found,
)
from .handlers import serve_static
from .middleware import Middleware, MiddlewarePipeline, LoggingMiddleware


logger = logging.getLogger(__name__)

Handler = Callable[[HTTPRequest], HTTPResponse]


def default_handler(request: HTTPRequest) -> HTTPResponse:
    return not_found()


class HTTPServer:
    """
    Threaded HTTP/1.1 server around a single request handler.

        server = HTTPServer(ServerConfig(port=8000), handler=serve_static("."))
        server.use(LoggingMiddleware())
        server.run()                 # blocks until SIGINT / SIGTERM

    For tests, ``start_background()`` runs the server on a daemon thread
    and returns once it listens; ``stop()`` shuts it down.
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        handler: Optional[Handler] = None,
    ):
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            min_workers=self.config.min_workers,
            max_workers=self.config.max_workers,
            queue_size=self.config.queue_size,
        )
        self._parser = RequestParser(max_request_size=self.config.max_request_size)
        self._middleware = MiddlewarePipeline()
        self._final_handler: Handler = handler or default_handler
        self._handler: Optional[Handler] = None
        self._running = False
        self._thread: Optional[threading.Thread] = None

    # =========================================================================
    # SETUP
    # =========================================================================

    def use(self, middleware: Middleware) -> "HTTPServer":
        """Add middleware; the first added is the outermost."""
        self._middleware.add(middleware)
        return self

    @property
    def handler(self) -> Handler:
        return self._final_handler

    @property
    def address(self) -> Tuple[str, int]:
        """(host, port) actually bound, once listening."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._running

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """Serve until shutdown. Blocks."""
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()
        self._serve()

    def _serve(self):
        self._running = True
        self._handler = self._middleware.wrap(self._final_handler)
        self._thread_pool.start()

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def start_background(self, timeout: float = 5.0) -> Tuple[str, int]:
        """
        Run on a daemon thread; return the bound address once listening.

        Raises:
            RuntimeError: the server did not start listening in time.
        """
        self._thread = threading.Thread(
            target=self._serve, name="staticserver", daemon=True
        )
        self._thread.start()
        if not self._socket_server.ready.wait(timeout):
            raise RuntimeError("Server did not start listening in time")
        return self.address

    def stop(self, timeout: float = 5.0):
        self._running = False
        self._socket_server.shutdown()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("staticserver").setLevel(level)

    def _shutdown(self):
        logger.info("Shutting down server...")
        self._running = False
        self._thread_pool.shutdown(wait=True, timeout=self.config.keep_alive_timeout + 1)
        logger.info("Server stopped")

    # =========================================================================
    # CONNECTIONS
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Runs on the accept thread: hand off, never block."""
        try:
            submitted = self._thread_pool.submit(
                self._process_connection,
                args=(conn,),
                block=False,
            )
        except RuntimeError as e:
            logger.warning(f"[{conn.id}] Not accepting connections: {e}")
            self._send_error(conn, HTTPStatus.SERVICE_UNAVAILABLE, "Server shutting down")
            conn.close()
            return

        if not submitted:
            logger.warning(f"[{conn.id}] Thread pool full, rejecting connection")
            self._send_error(conn, HTTPStatus.SERVICE_UNAVAILABLE, "Server overloaded")
            conn.close()

    def _process_connection(self, conn: Connection):
        with conn:
            while self._running:
                try:
                    raw_request = conn.read_request()
                except TimeoutError:
                    self._send_error(conn, HTTPStatus.REQUEST_TIMEOUT, "Request timeout")
                    break
                except ValueError as e:
                    self._send_error(conn, HTTPStatus.PAYLOAD_TOO_LARGE, str(e))
                    break

                if raw_request is None:
                    break

                try:
                    request = self._parser.parse(raw_request, conn.address)
                except HTTPParseError as e:
                    logger.debug(f"[{conn.id}] Parse error: {e}")
                    self._send_error(conn, e.status_code, str(e))
                    break

                response = self._dispatch(conn, request)
                keep_alive = request.is_keep_alive and self.config.keep_alive

                if keep_alive:
                    response.headers.setdefault("Connection", "keep-alive")
                    response.headers.setdefault(
                        "Keep-Alive", f"timeout={int(self.config.keep_alive_timeout)}"
                    )
                else:
                    response.headers["Connection"] = "close"

                data = response.to_bytes(
                    self.config.server_name,
                    include_body=request.method != "HEAD",
                )
                if not conn.send_response(data):
                    break
                if not keep_alive or response.headers.get("Connection") == "close":
                    break
                conn.set_keep_alive()

    def _dispatch(self, conn: Connection, request: HTTPRequest) -> HTTPResponse:
        try:
            return self._handler(request)
        except Exception as e:
            logger.exception(f"[{conn.id}] Handler error: {e}")
            return (ResponseBuilder()
                .status(HTTPStatus.INTERNAL_SERVER_ERROR)
                .json({"error": "Internal Server Error"})
                .build())

    def _send_error(self, conn: Connection, status: int, message: str):
        response = (ResponseBuilder()
            .status(status)
            .json({"error": message})
            .close_connection()
            .build())
        conn.send_response(response.to_bytes(self.config.server_name))


def create_app(
    root: str,
    config: Optional[ServerConfig] = None,
    **static_options: Any,
) -> HTTPServer:
    """
    Server for ``root`` with the access log enabled.

        app = create_app("./public", ServerConfig(port=0), gzip=True)
    """
    config = config or ServerConfig()
    server = HTTPServer(config, handler=serve_static(root, **static_options))
    server.use(LoggingMiddleware(log_format=config.log_format))
    return server
