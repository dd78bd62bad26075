"""
=============================================================================
HTTP MESSAGES
=============================================================================

Request parsing, response building and the small tables (status codes,
content types) the static handler relies on.

    request.py       bytes → HTTPRequest
    response.py      HTTPResponse, ResponseBuilder, error helpers
    status_codes.py  HTTPStatus enum
    mime_types.py    extension → (type, charset)

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError
from .response import (
    HTTPResponse,
    ResponseBuilder,
    format_http_date,
    forbidden,
    not_found,
    method_not_allowed,
    internal_error,
    error_response,
)
from .status_codes import HTTPStatus
from .mime_types import mime_type, get_content_type

__all__ = [
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "HTTPResponse",
    "ResponseBuilder",
    "format_http_date",
    "forbidden",
    "not_found",
    "method_not_allowed",
    "internal_error",
    "error_response",
    "HTTPStatus",
    "mime_type",
    "get_content_type",
]
