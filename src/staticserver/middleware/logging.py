"""
=============================================================================
ACCESS LOG MIDDLEWARE
=============================================================================

One log line per request on the ``staticserver.access`` logger.

    TEXT (Apache style):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ 127.0.0.1 - - [15/Oct/2025:10:00:00 +0000] "GET /app.js HTTP/1.1"   │
    │     200 5312 "curl/8.4" gzip 0.84ms                                 │
    └─────────────────────────────────────────────────────────────────────┘

    JSON (one object per line, for log aggregators):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ {"request_id": "a1b2c3d4", "method": "GET", "path": "/app.js",      │
    │  "status_code": 200, "bytes": 5312, "encoding": "gzip", ...}        │
    └─────────────────────────────────────────────────────────────────────┘

"bytes" is what the response declares in Content-Length when present (so
HEAD requests log the size a GET would have sent), else the body size.

Each response gets an ``X-Request-ID`` header matching the log line.

=============================================================================
"""

import json
import logging
import time
import uuid
from dataclasses import asdict, dataclass
from typing import Optional

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse
from .base import Middleware, NextHandler


# Configure separately from the application loggers, e.g.
#   logging.getLogger("staticserver.access").addHandler(file_handler)
logger = logging.getLogger("staticserver.access")


@dataclass
class RequestLog:
    """One access log entry."""

    request_id: str
    method: str
    path: str
    version: str
    client_ip: str
    user_agent: str
    status_code: int
    bytes: int
    encoding: str
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.path} {self.version}" {self.status_code} '
            f'{self.bytes} "{self.user_agent}" {self.encoding} '
            f'{self.duration_ms:.2f}ms'
        )


def response_size(response: HTTPResponse) -> int:
    declared = response.headers.get("Content-Length")
    if declared is not None and declared.isdigit():
        return int(declared)
    return len(response.body)


class LoggingMiddleware(Middleware):
    """
    Access logging; add it first so that it times the whole pipeline.

        server.use(LoggingMiddleware(log_format="json"))

    Args:
        log_format: "text" or "json".
        include_request_id: Set X-Request-ID on responses.
        log_level: Level access lines are logged at.
        skip_paths: Exact paths not to log (e.g. ["/favicon.ico"]).
    """

    def __init__(
        self,
        log_format: str = "text",
        include_request_id: bool = True,
        log_level: int = logging.INFO,
        skip_paths: Optional[list[str]] = None,
    ):
        self.log_format = log_format
        self.include_request_id = include_request_id
        self.log_level = log_level
        self.skip_paths = set(skip_paths or [])

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        request_id = uuid.uuid4().hex[:8]
        start = time.perf_counter()

        try:
            response = next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.error(
                f"Request failed: {request.method} {request.path} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.perf_counter() - start) * 1000

        if self.include_request_id:
            response.headers["X-Request-ID"] = request_id

        if request.path in self.skip_paths:
            return response

        entry = RequestLog(
            request_id=request_id,
            method=request.method,
            path=request.path,
            version=request.version,
            client_ip=request.client_address[0] or "-",
            user_agent=request.user_agent or "-",
            status_code=int(response.status),
            bytes=response_size(response),
            encoding=response.headers.get("Content-Encoding", "identity"),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(entry.to_dict()))
        else:
            logger.log(self.log_level, entry.to_text())

        return response
