"""
=============================================================================
PATH RESOLVER
=============================================================================

Maps a decoded request path onto the filesystem and refuses anything that
lands outside the served root. No filesystem access happens here.

    root      = /srv/site
    base_dir  = /static

    /static/css/app.css      →  /srv/site/css/app.css
    /static/                 →  /srv/site
    /static/../../etc/passwd →  /etc/passwd            → Forbidden
    /other/page.html         →  not under the mount     → Forbidden

=============================================================================
CONTAINMENT
=============================================================================

The joined path is normalized with os.path.normpath (which collapses
"." and ".." textually) and must then be the root itself or start with
"root + os.sep". The separator matters:

    root            /srv/site
    /srv/site-old   shares the prefix "/srv/site" but is NOT inside

The root is canonicalized once, when the handler is built. Paths under it
are compared textually; a symlink inside the tree that points elsewhere is
followed when the file is opened.

=============================================================================
"""

import logging
import os
import posixpath

from .errors import Forbidden, MethodNotAllowed


logger = logging.getLogger(__name__)

ALLOWED_METHODS = ("GET", "HEAD")


def mount_point(base_dir: str) -> str:
    """Normalized virtual prefix: ``"static/"`` → ``"/static"``."""
    return posixpath.normpath(posixpath.join("/", base_dir or "/"))


def is_contained(root: str, path: str) -> bool:
    """True when ``path`` is ``root`` or lies below it."""
    prefix = root if root.endswith(os.sep) else root + os.sep
    return path == root or path.startswith(prefix)


def resolve_path(root: str, base_dir: str, request_path: str) -> str:
    """
    Absolute filesystem path for ``request_path``.

    Args:
        root: Canonical served directory.
        base_dir: Virtual mount point stripped from the request path.
        request_path: Percent-decoded URL path, query already removed.

    Raises:
        Forbidden: NUL byte, path outside the mount, or outside ``root``.
    """
    if "\x00" in request_path:
        logger.warning(f"Rejected path with NUL byte: {request_path!r}")
        raise Forbidden("NUL byte in path")

    mount = mount_point(base_dir)
    if mount == "/":
        relative = request_path
    elif request_path == mount or request_path.startswith(mount + "/"):
        relative = request_path[len(mount):]
    else:
        logger.warning(f"Path outside base dir {mount}: {request_path}")
        raise Forbidden("Path outside base directory")

    resolved = os.path.normpath(os.path.join(root, relative.lstrip("/")))

    if not is_contained(root, resolved):
        logger.warning(f"Path traversal attempt: {request_path} -> {resolved}")
        raise Forbidden("Path escapes root")

    return resolved


def check_method(method: str) -> None:
    """Raise MethodNotAllowed unless ``method`` is GET or HEAD."""
    if method not in ALLOWED_METHODS:
        raise MethodNotAllowed(f"Method {method} not allowed")
