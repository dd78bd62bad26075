"""
=============================================================================
STATIC HANDLER ERRORS
=============================================================================

Every way a static request can fail is one of these exceptions. They are
raised deep inside resolution and converted into exactly one response by
StaticFileHandler.handle():

    StaticFileError                       status
    ├── Forbidden             ───────►     403   outside root, NUL byte,
    │                                            directory without index
    ├── FileNotFound          ───────►     404   fallback chain exhausted
    ├── MethodNotAllowed      ───────►     405   not GET / HEAD
    └── InternalError         ───────►     500   any other OSError

"Not modified" is not an error; it is an ordinary 304 response.

=============================================================================
"""

from typing import Optional


class StaticFileError(Exception):
    """
    Base class; carries the status code the responder should send.

    Same shape as HTTPParseError: a message for logs plus a status code.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "",
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message or self.__class__.__name__)
        if status_code is not None:
            self.status_code = status_code
        self.cause = cause


class Forbidden(StaticFileError):
    status_code = 403


class FileNotFound(StaticFileError):
    status_code = 404


class MethodNotAllowed(StaticFileError):
    status_code = 405

    allowed = ("GET", "HEAD")


class InternalError(StaticFileError):
    """Filesystem failure other than not-found; ``cause`` is the OSError."""

    status_code = 500
