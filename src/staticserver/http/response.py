"""
=============================================================================
HTTP RESPONSE BUILDING
=============================================================================

The response object every handler returns, a fluent builder for it, and
the one-line helpers the status responders use.

=============================================================================
WHAT A STATIC FILE RESPONSE LOOKS LIKE ON THE WIRE
=============================================================================

    HTTP/1.1 200 OK\\r\\n
    Server: staticserver-1.0.0\\r\\n
    ETag: "1573241-8f2-17c6b1e2a40"\\r\\n
    Last-Modified: Tue, 14 Oct 2025 09:12:44 GMT\\r\\n
    Cache-Control: max-age=3600\\r\\n
    Content-Type: text/html; charset=utf-8\\r\\n
    Content-Length: 2290\\r\\n
    Date: Wed, 15 Oct 2025 10:00:00 GMT\\r\\n
    \\r\\n
    <!DOCTYPE html> ...

The handler decides every header above except Date, which is stamped at
serialization time. Content-Length is filled in at serialization time
only when the handler left it out (the gzip case, where the compressed
size is not known until the body exists).

=============================================================================
HEAD AND 304
=============================================================================

    HEAD  → same headers as GET, no body bytes on the wire.
            Content-Length still describes the GET body.
    304   → never has a body, never gets an invented Content-Length.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Union
import json

from .status_codes import HTTPStatus


@dataclass
class HTTPResponse:
    """
    An HTTP response ready to be serialized.

    Header names are stored as given (``"Content-Length"``, ``"ETag"``);
    the static handler always uses the canonical capitalization so that
    lookups like ``response.headers.get("ETag")`` work.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """e.g. ``HTTP/1.1 304 Not Modified``"""
        return f"{self.version} {int(self.status)} {HTTPStatus(self.status).phrase}"

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        self.headers[name] = value
        return self

    def remove_header(self, name: str) -> "HTTPResponse":
        """Drop a header if present (case-insensitive)."""
        for existing in [key for key in self.headers if key.lower() == name.lower()]:
            del self.headers[existing]
        return self

    def to_bytes(
        self,
        server_name: str = "staticserver",
        include_body: bool = True,
    ) -> bytes:
        """
        Serialize status line, headers and body.

        Args:
            server_name: Used for the Server header when the handler did
                         not set one.
            include_body: False for HEAD requests; headers are unchanged.
        """
        response_headers = dict(self.headers)
        status = HTTPStatus(self.status)

        if status.allows_body and "Content-Length" not in response_headers:
            response_headers["Content-Length"] = str(len(self.body))

        if "Date" not in response_headers:
            response_headers["Date"] = format_http_date(datetime.now(timezone.utc))

        if "Server" not in response_headers:
            response_headers["Server"] = server_name

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("latin-1", errors="replace") + b"\r\n"

        if not include_body or not status.allows_body:
            return header_bytes
        return header_bytes + self.body


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

        response = (ResponseBuilder()
            .status(HTTPStatus.FOUND)
            .header("Location", "/docs/")
            .build())

    Every method but build() returns the builder.
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    # =========================================================================
    # STATUS AND HEADERS
    # =========================================================================

    def status(self, status: Union[HTTPStatus, int]) -> "ResponseBuilder":
        self._status = HTTPStatus(status)
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def headers(self, headers: Dict[str, str]) -> "ResponseBuilder":
        self._headers.update(headers)
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    # =========================================================================
    # BODIES
    # =========================================================================

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """Raw body; strings are encoded as UTF-8."""
        self._body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    def text(self, text: str) -> "ResponseBuilder":
        self._body = text.encode("utf-8")
        self._headers["Content-Type"] = "text/plain; charset=utf-8"
        return self

    def html(self, html: str) -> "ResponseBuilder":
        self._body = html.encode("utf-8")
        self._headers["Content-Type"] = "text/html; charset=utf-8"
        return self

    def json(self, data: Any) -> "ResponseBuilder":
        self._body = json.dumps(data, ensure_ascii=False).encode("utf-8")
        self._headers["Content-Type"] = "application/json; charset=utf-8"
        return self

    # =========================================================================
    # REDIRECTS AND CONNECTION
    # =========================================================================

    def redirect(self, location: str, permanent: bool = False) -> "ResponseBuilder":
        """302 Found (or 301 when permanent) with a Location header."""
        self._status = HTTPStatus.MOVED_PERMANENTLY if permanent else HTTPStatus.FOUND
        self._headers["Location"] = location
        return self

    def close_connection(self) -> "ResponseBuilder":
        self._headers["Connection"] = "close"
        return self

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=self._headers,
            body=self._body,
        )


# =============================================================================
# DATES
# =============================================================================

_DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
_MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def format_http_date(when: Union[datetime, float, int]) -> str:
    """
    Format an IMF-fixdate (RFC 7231), always in GMT.

    Accepts an aware datetime or a POSIX timestamp such as ``st_mtime``;
    fractions of a second are dropped.

        >>> format_http_date(0)
        'Thu, 01 Jan 1970 00:00:00 GMT'
    """
    if isinstance(when, datetime):
        dt = when.astimezone(timezone.utc)
    else:
        dt = datetime.fromtimestamp(when, tz=timezone.utc)

    return (
        f"{_DAYS[dt.weekday()]}, "
        f"{dt.day:02d} {_MONTHS[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


# =============================================================================
# ONE-LINE HELPERS
# =============================================================================
#
# Minimal error bodies. The status responders build on these; they never
# include file contents or exception details.
#
# =============================================================================

def forbidden(message: str = "Forbidden") -> HTTPResponse:
    return ResponseBuilder().status(HTTPStatus.FORBIDDEN).json({"error": message}).build()


def not_found(message: str = "Not Found") -> HTTPResponse:
    return ResponseBuilder().status(HTTPStatus.NOT_FOUND).json({"error": message}).build()


def method_not_allowed(allowed_methods: list[str]) -> HTTPResponse:
    """405 with the Allow header RFC 7231 requires."""
    return (ResponseBuilder()
        .status(HTTPStatus.METHOD_NOT_ALLOWED)
        .header("Allow", ", ".join(allowed_methods))
        .json({"error": "Method Not Allowed", "allowed": allowed_methods})
        .build())


def internal_error(message: str = "Internal Server Error") -> HTTPResponse:
    return ResponseBuilder().status(HTTPStatus.INTERNAL_SERVER_ERROR).json({"error": message}).build()


def error_response(status: Union[HTTPStatus, int], message: Optional[str] = None) -> HTTPResponse:
    """Generic JSON error for statuses without a dedicated helper."""
    status = HTTPStatus(status)
    return ResponseBuilder().status(status).json({"error": message or status.phrase}).build()
