"""
=============================================================================
CONTENT TYPE RESOLUTION
=============================================================================

Answers one question for the static handler: given a file path, what goes
in the Content-Type header?

    mime_type("site/app.js")     → ("text/javascript", "utf-8")
    mime_type("site/logo.png")   → ("image/png", None)
    mime_type("site/LICENSE")    → (None, None)

The handler turns that into a header value:

    text/javascript; charset=utf-8
    image/png
    application/octet-stream        ← nothing resolved

=============================================================================
WHY A CHARSET ONLY FOR SOME TYPES?
=============================================================================

A charset parameter is meaningful for textual formats only. Adding one to
image/png is harmless noise at best, so it is attached when the type is
text-like: every text/* type plus the handful of application/* and image/*
types that are really text (JSON, JavaScript, XML, SVG).

=============================================================================
"""

from pathlib import Path
from typing import Optional


# =============================================================================
# EXTENSION TABLE
# =============================================================================
# Keys are lowercase extensions with the leading dot.
# =============================================================================

_TEXT = {
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".mjs": "text/javascript",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",
    ".yaml": "text/yaml",
    ".yml": "text/yaml",
    ".py": "text/x-python",
    ".sh": "text/x-shellscript",
}

_DATA = {
    ".json": "application/json",
    ".map": "application/json",    # source maps
    ".xml": "application/xml",
    ".wasm": "application/wasm",
    ".pdf": "application/pdf",
    ".zip": "application/zip",
    ".gz": "application/gzip",
    ".tar": "application/x-tar",
}

_MEDIA = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".webp": "image/webp",
    ".avif": "image/avif",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".otf": "font/otf",
    ".mp3": "audio/mpeg",
    ".ogg": "audio/ogg",
    ".wav": "audio/wav",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
}

MIME_TYPES: dict[str, str] = {**_TEXT, **_DATA, **_MEDIA}

# Sent when nothing above matched
DEFAULT_MIME_TYPE = "application/octet-stream"

DEFAULT_CHARSET = "utf-8"

# application/* and image/* types that are text underneath
_TEXTUAL_NON_TEXT = {
    "application/json",
    "application/xml",
    "application/javascript",
    "image/svg+xml",
}


def is_text_type(mime_type: str) -> bool:
    """True for text/* and the textual application/image types."""
    return mime_type.startswith("text/") or mime_type in _TEXTUAL_NON_TEXT


def charset_for(mime_type: str) -> Optional[str]:
    """Charset to advertise for ``mime_type``, or None."""
    return DEFAULT_CHARSET if is_text_type(mime_type) else None


def mime_type(path: str | Path) -> tuple[Optional[str], Optional[str]]:
    """
    Resolve ``(type, charset)`` for a file path from its extension.

    Both members are None when the extension is unknown; the caller
    decides on the fallback.

        >>> mime_type("index.HTML")
        ('text/html', 'utf-8')
        >>> mime_type("archive.tar")
        ('application/x-tar', None)
    """
    extension = Path(path).suffix.lower()
    resolved = MIME_TYPES.get(extension)
    if resolved is None:
        return None, None
    return resolved, charset_for(resolved)


def get_content_type(path: str | Path) -> str:
    """
    Full Content-Type header value for ``path``.

        >>> get_content_type("page.html")
        'text/html; charset=utf-8'
        >>> get_content_type("blob.bin")
        'application/octet-stream'
    """
    resolved, charset = mime_type(path)
    if resolved is None:
        return DEFAULT_MIME_TYPE
    if charset:
        return f"{resolved}; charset={charset}"
    return resolved
