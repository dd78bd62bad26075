"""
Plain HTML directory listings.

Rendered only when the handler has ``show_dir`` enabled and the directory
has no index document. Entries are sorted, directories get a trailing
slash, and every name is escaped for HTML and quoted for the href.

SECURITY NOTE: a listing exposes the structure of the served tree; keep
``show_dir`` off unless the directory is meant to be browsed.
"""

import html
import os
from typing import Optional
from urllib.parse import quote

from ..http.response import HTTPResponse, ResponseBuilder, format_http_date


_PAGE = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>Index of {title}</title>
    <style>
        body {{ font-family: monospace; padding: 20px; }}
        h1 {{ border-bottom: 1px solid #ccc; padding-bottom: 10px; }}
        ul {{ list-style: none; padding: 0; }}
        li {{ padding: 5px 0; }}
        a {{ text-decoration: none; color: #0066cc; }}
        a:hover {{ text-decoration: underline; }}
    </style>
</head>
<body>
    <h1>Index of {title}</h1>
    <ul>
{entries}
    </ul>
</body>
</html>
"""


def list_entries(directory: str) -> list[str]:
    """Sorted entry names; directories carry a trailing slash."""
    names = []
    with os.scandir(directory) as it:
        for entry in it:
            name = entry.name
            try:
                if entry.is_dir():
                    name += "/"
            except OSError:
                pass  # dangling symlink, listed as a file
            names.append(name)
    return sorted(names)


def render_listing(
    directory: str,
    url_path: str,
    stat: os.stat_result,
    server_header: Optional[str] = None,
) -> HTTPResponse:
    """
    Listing page for ``directory``, linked relative to ``url_path``.

    Raises:
        OSError: the directory could not be read.
    """
    items = []
    if url_path.rstrip("/"):
        items.append('        <li><a href="../">../</a></li>')
    for name in list_entries(directory):
        items.append(
            f'        <li><a href="{html.escape(quote(name), quote=True)}">'
            f"{html.escape(name)}</a></li>"
        )

    page = _PAGE.format(title=html.escape(url_path), entries="\n".join(items))

    builder = (ResponseBuilder()
        .html(page)
        .header("Last-Modified", format_http_date(stat.st_mtime)))
    if server_header:
        builder.header("Server", server_header)
    return builder.build()
