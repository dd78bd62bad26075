"""
Unit tests for HTTP response building.
"""

import json
from datetime import datetime, timezone

import pytest

from staticserver.http.response import (
    HTTPResponse,
    ResponseBuilder,
    HTTPStatus,
    error_response,
    forbidden,
    format_http_date,
    internal_error,
    method_not_allowed,
    not_found,
)


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        assert HTTPResponse(status=HTTPStatus.OK).status_line == "HTTP/1.1 200 OK"
        assert HTTPResponse(status=HTTPStatus.NOT_MODIFIED).status_line == "HTTP/1.1 304 Not Modified"

    def test_status_line_accepts_int(self):
        assert HTTPResponse(status=404).status_line == "HTTP/1.1 404 Not Found"

    def test_to_bytes_includes_headers(self):
        response = HTTPResponse(
            status=HTTPStatus.OK,
            headers={"X-Custom": "value"},
            body=b"test",
        )

        result = response.to_bytes()

        assert result.startswith(b"HTTP/1.1 200 OK\r\n")
        assert b"X-Custom: value\r\n" in result
        assert b"Content-Length: 4\r\n" in result
        assert b"Date: " in result
        assert result.endswith(b"\r\n\r\ntest")

    def test_server_header_defaulted_not_overwritten(self):
        assert b"Server: staticserver\r\n" in HTTPResponse().to_bytes()

        custom = HTTPResponse(headers={"Server": "staticserver-1.0.0"})
        assert b"Server: staticserver-1.0.0\r\n" in custom.to_bytes("other")

    def test_existing_content_length_kept(self):
        # HEAD responses declare the GET body size with an empty body
        response = HTTPResponse(headers={"Content-Length": "1234"})
        result = response.to_bytes(include_body=False)

        assert b"Content-Length: 1234\r\n" in result
        assert result.endswith(b"\r\n\r\n")

    def test_head_omits_body(self):
        response = HTTPResponse(body=b"hello")
        result = response.to_bytes(include_body=False)

        assert b"Content-Length: 5\r\n" in result
        assert not result.endswith(b"hello")

    def test_not_modified_has_no_body_or_length(self):
        response = HTTPResponse(status=HTTPStatus.NOT_MODIFIED, body=b"ignored")
        result = response.to_bytes()

        assert b"Content-Length" not in result
        assert result.endswith(b"\r\n\r\n")

    def test_set_and_remove_header(self):
        response = (HTTPResponse()
            .set_header("X-One", "1")
            .set_header("Content-Length", "9"))

        response.remove_header("content-length")

        assert response.headers == {"X-One": "1"}


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_status_coerces_int(self):
        response = ResponseBuilder().status(403).build()
        assert response.status is HTTPStatus.FORBIDDEN

    def test_json_body(self):
        data = {"error": "Not Found"}
        response = ResponseBuilder().json(data).build()

        assert response.headers["Content-Type"] == "application/json; charset=utf-8"
        assert json.loads(response.body) == data

    def test_html_body(self):
        response = ResponseBuilder().html("<h1>Hi</h1>").build()

        assert response.headers["Content-Type"] == "text/html; charset=utf-8"
        assert response.body == b"<h1>Hi</h1>"

    def test_text_body(self):
        response = ResponseBuilder().text("plain").build()
        assert response.headers["Content-Type"] == "text/plain; charset=utf-8"

    def test_redirect(self):
        response = ResponseBuilder().redirect("/docs/").build()

        assert response.status == HTTPStatus.FOUND
        assert response.headers["Location"] == "/docs/"
        assert response.body == b""

    def test_redirect_permanent(self):
        response = ResponseBuilder().redirect("/new", permanent=True).build()
        assert response.status == HTTPStatus.MOVED_PERMANENTLY

    def test_close_connection(self):
        response = ResponseBuilder().close_connection().build()
        assert response.headers["Connection"] == "close"


class TestHelpers:
    """Tests for the one-line response helpers."""

    @pytest.mark.parametrize("helper, status", [
        (forbidden, HTTPStatus.FORBIDDEN),
        (not_found, HTTPStatus.NOT_FOUND),
        (internal_error, HTTPStatus.INTERNAL_SERVER_ERROR),
    ])
    def test_status(self, helper, status):
        response = helper()
        assert response.status == status
        assert json.loads(response.body) == {"error": status.phrase}

    def test_method_not_allowed_sets_allow(self):
        response = method_not_allowed(["GET", "HEAD"])

        assert response.status == HTTPStatus.METHOD_NOT_ALLOWED
        assert response.headers["Allow"] == "GET, HEAD"

    def test_error_response(self):
        response = error_response(503)
        assert response.status == HTTPStatus.SERVICE_UNAVAILABLE
        assert json.loads(response.body) == {"error": "Service Unavailable"}


class TestHTTPStatus:
    def test_phrases(self):
        assert HTTPStatus.NOT_MODIFIED.phrase == "Not Modified"
        assert HTTPStatus.METHOD_NOT_ALLOWED.phrase == "Method Not Allowed"

    def test_categories(self):
        assert HTTPStatus.FOUND.is_redirect
        assert HTTPStatus.NOT_FOUND.is_error
        assert not HTTPStatus.OK.is_error

    def test_allows_body(self):
        assert HTTPStatus.OK.allows_body
        assert HTTPStatus.NOT_FOUND.allows_body
        assert not HTTPStatus.NOT_MODIFIED.allows_body
        assert not HTTPStatus.NO_CONTENT.allows_body


class TestFormatHTTPDate:
    def test_datetime(self):
        dt = datetime(2026, 1, 15, 12, 30, 45, tzinfo=timezone.utc)
        assert format_http_date(dt) == "Thu, 15 Jan 2026 12:30:45 GMT"

    def test_timestamp_drops_fraction(self):
        assert format_http_date(0.9) == "Thu, 01 Jan 1970 00:00:00 GMT"
