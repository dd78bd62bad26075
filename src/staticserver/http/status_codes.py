"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes a static file server actually emits, with their reason
phrases.

=============================================================================
WHICH CODES A FILE SERVER NEEDS
=============================================================================

    ┌──────┬──────────────────────────────────────────────────────────────┐
    │ Code │ When the static handler sends it                             │
    ├──────┼──────────────────────────────────────────────────────────────┤
    │ 200  │ File (or custom fallback document) served                    │
    │ 302  │ Directory requested without a trailing slash                 │
    │ 304  │ If-None-Match / If-Modified-Since says the client is current │
    │ 403  │ Path escapes the root, or directory with nothing to show     │
    │ 404  │ Nothing left to try in the fallback chain                    │
    │ 405  │ Anything other than GET or HEAD                              │
    │ 500  │ Filesystem error that is not "does not exist"                │
    └──────┴──────────────────────────────────────────────────────────────┘

The transport layer adds a few more of its own (400, 408, 413, 503, 505)
for requests that never reach the handler.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes with reason phrases.

    IntEnum, so members compare equal to plain ints:

        >>> HTTPStatus.NOT_MODIFIED == 304
        True
        >>> HTTPStatus.NOT_MODIFIED.phrase
        'Not Modified'
    """

    # 2xx
    OK = 200
    NO_CONTENT = 204

    # 3xx
    MOVED_PERMANENTLY = 301
    FOUND = 302
    NOT_MODIFIED = 304

    # 4xx
    BAD_REQUEST = 400
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    REQUEST_TIMEOUT = 408
    PAYLOAD_TOO_LARGE = 413

    # 5xx
    INTERNAL_SERVER_ERROR = 500
    SERVICE_UNAVAILABLE = 503
    HTTP_VERSION_NOT_SUPPORTED = 505

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line (``HTTP/1.1 404 Not Found``)."""
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_redirect(self) -> bool:
        return 300 <= self < 400

    @property
    def is_error(self) -> bool:
        """4xx or 5xx; used by the access log to pick a level."""
        return self >= 400

    @property
    def allows_body(self) -> bool:
        """
        Whether a response with this status may carry a body.

        RFC 7230 section 3.3: 1xx, 204 and 304 responses never have one.
        """
        return not (100 <= self < 200 or self in (HTTPStatus.NO_CONTENT, HTTPStatus.NOT_MODIFIED))


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NO_CONTENT: "No Content",
    HTTPStatus.MOVED_PERMANENTLY: "Moved Permanently",
    HTTPStatus.FOUND: "Found",
    HTTPStatus.NOT_MODIFIED: "Not Modified",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.REQUEST_TIMEOUT: "Request Timeout",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version Not Supported",
}
