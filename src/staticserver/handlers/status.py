"""
Status responders: one minimal response per StaticFileError.

    Forbidden         → 403 {"error": "Forbidden"}
    FileNotFound      → 404 {"error": "Not Found"}
    MethodNotAllowed  → 405 {"error": ..., "allowed": [...]}, Allow header
    InternalError     → 500 {"error": "Internal Server Error"}

Bodies never contain file data or exception details; the cause of a 500
is logged where it is raised.
"""

from typing import Optional

from ..http.response import (
    HTTPResponse,
    error_response as generic_error,
    forbidden,
    internal_error,
    method_not_allowed,
    not_found,
)
from .errors import StaticFileError


def error_response(
    error: StaticFileError,
    server_header: Optional[str] = None,
) -> HTTPResponse:
    status = error.status_code
    if status == 403:
        response = forbidden()
    elif status == 404:
        response = not_found()
    elif status == 405:
        response = method_not_allowed(list(getattr(error, "allowed", ("GET", "HEAD"))))
    elif status == 500:
        response = internal_error()
    else:
        response = generic_error(status)

    if server_header:
        response.set_header("Server", server_header)
    return response
