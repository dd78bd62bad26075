"""
Unit tests for directory listings.
"""

import os

from staticserver.handlers.listing import list_entries, render_listing
from staticserver.http import HTTPStatus


class TestListEntries:
    def test_sorted_with_directory_slash(self, site):
        entries = list_entries(str(site))

        assert entries == sorted(entries)
        assert "docs/" in entries
        assert "blog/" in entries
        assert "index.html" in entries

    def test_empty_directory(self, tmp_path):
        assert list_entries(str(tmp_path)) == []


class TestRenderListing:
    def test_page(self, site):
        blog = site / "blog"
        response = render_listing(str(blog), "/blog/", os.stat(blog), "staticserver-test")

        assert response.status == HTTPStatus.OK
        assert response.headers["Content-Type"] == "text/html; charset=utf-8"
        assert response.headers["Server"] == "staticserver-test"
        assert "Last-Modified" in response.headers
        assert b"Index of /blog/" in response.body
        assert b'<a href="post.md">post.md</a>' in response.body
        assert b'href="../"' in response.body

    def test_no_parent_link_at_root(self, site):
        response = render_listing(str(site), "/", os.stat(site))
        assert b'href="../"' not in response.body

    def test_names_are_escaped(self, tmp_path):
        (tmp_path / "<b>&.txt").write_bytes(b"")
        (tmp_path / "a b.txt").write_bytes(b"")

        body = render_listing(str(tmp_path), "/x/", os.stat(tmp_path)).body

        assert b"<b>&.txt" not in body
        assert b"&lt;b&gt;&amp;.txt" in body
        assert b'href="a%20b.txt"' in body
