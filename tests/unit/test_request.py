"""
Unit tests for HTTP request parsing.
"""

import pytest

from staticserver.http.request import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
)


def parse_request(raw: bytes) -> HTTPRequest:
    return RequestParser().parse(raw)


@pytest.fixture
def conditional_get() -> bytes:
    """GET with the headers the static handler looks at."""
    return (
        b"GET /docs/guide.html?v=3 HTTP/1.1\r\n"
        b"Host: localhost:8000\r\n"
        b"User-Agent: pytest\r\n"
        b'If-None-Match: "1a-2b-3c"\r\n'
        b"Accept-Encoding: gzip, deflate\r\n"
        b"Connection: keep-alive\r\n"
        b"\r\n"
    )


class TestRequestParser:
    """Tests for RequestParser class."""

    def test_parse_simple_get(self, conditional_get: bytes):
        parser = RequestParser()
        request = parser.parse(conditional_get, ("127.0.0.1", 12345))

        assert request.method == "GET"
        assert request.path == "/docs/guide.html"
        assert request.version == "HTTP/1.1"
        assert request.client_address == ("127.0.0.1", 12345)

    def test_parse_headers(self, conditional_get: bytes):
        request = parse_request(conditional_get)

        assert request.host == "localhost:8000"
        assert request.user_agent == "pytest"
        assert request.headers["if-none-match"] == '"1a-2b-3c"'
        assert request.get_header("Accept-Encoding") == "gzip, deflate"
        assert request.is_keep_alive is True

    def test_query_string_split_off(self, conditional_get: bytes):
        request = parse_request(conditional_get)

        assert request.path == "/docs/guide.html"
        assert request.query_params == {"v": ["3"]}

    def test_path_is_percent_decoded(self):
        raw = b"GET /space%20name.txt HTTP/1.1\r\nHost: test\r\n\r\n"
        assert parse_request(raw).path == "/space name.txt"

    def test_utf8_path_decoded(self):
        raw = b"GET /caf%C3%A9.html HTTP/1.1\r\nHost: test\r\n\r\n"
        assert parse_request(raw).path == "/café.html"

    def test_double_slash_path_is_not_a_netloc(self):
        raw = b"GET //etc/passwd HTTP/1.1\r\nHost: test\r\n\r\n"
        assert parse_request(raw).path == "//etc/passwd"

    def test_traversal_left_to_handler(self):
        # Judging the path is the handler's job (403), not the parser's
        raw = b"GET /../../../etc/passwd HTTP/1.1\r\nHost: test\r\n\r\n"
        assert parse_request(raw).path == "/../../../etc/passwd"

    def test_encoded_traversal_decoded(self):
        raw = b"GET /%2e%2e/%2e%2e/etc/passwd HTTP/1.1\r\nHost: test\r\n\r\n"
        assert parse_request(raw).path == "/../../etc/passwd"

    def test_absolute_form_target(self):
        raw = b"GET http://example.com/a/b.css?x=1 HTTP/1.1\r\n\r\n"
        request = parse_request(raw)
        assert request.path == "/a/b.css"

    def test_parse_invalid_method(self):
        raw = b"INVALID /path HTTP/1.1\r\nHost: test\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(raw)

        assert exc_info.value.status_code == 405

    def test_post_parses_so_handler_can_answer_405(self):
        raw = b"POST /index.html HTTP/1.1\r\nContent-Length: 2\r\n\r\nhi"
        request = parse_request(raw)
        assert request.method == "POST"
        assert request.body == b"hi"

    def test_parse_invalid_request_line(self):
        raw = b"GET\r\nHost: test\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(raw)

        assert exc_info.value.status_code == 400

    def test_unsupported_version(self):
        raw = b"GET / HTTP/2.0\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(raw)

        assert exc_info.value.status_code == 505

    def test_missing_terminator(self):
        with pytest.raises(HTTPParseError):
            parse_request(b"GET / HTTP/1.1\r\nHost: test\r\n")

    def test_parse_missing_headers(self):
        request = parse_request(b"GET / HTTP/1.1\r\n\r\n")

        assert request.method == "GET"
        assert request.path == "/"
        assert len(request.headers) == 0

    def test_parse_request_too_large(self):
        parser = RequestParser(max_request_size=100)
        raw = b"GET / HTTP/1.1\r\n" + b"X-Large: " + b"A" * 200 + b"\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            parser.parse(raw)

        assert exc_info.value.status_code == 413

    def test_invalid_content_length(self):
        raw = b"GET / HTTP/1.1\r\nContent-Length: abc\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(raw)

        assert exc_info.value.status_code == 400

    def test_http_version_keep_alive_defaults(self):
        request_10 = parse_request(b"GET / HTTP/1.0\r\nHost: test\r\n\r\n")
        assert request_10.version == "HTTP/1.0"
        assert request_10.is_keep_alive is False

        request_11 = parse_request(b"GET / HTTP/1.1\r\nHost: test\r\n\r\n")
        assert request_11.is_keep_alive is True

        closing = parse_request(b"GET / HTTP/1.1\r\nConnection: close\r\n\r\n")
        assert closing.is_keep_alive is False

    def test_case_insensitive_headers(self):
        raw = b"GET / HTTP/1.1\r\nIF-MODIFIED-SINCE: Mon, 01 Jan 2024 00:00:00 GMT\r\n\r\n"
        request = parse_request(raw)

        assert request.get_header("If-Modified-Since") == "Mon, 01 Jan 2024 00:00:00 GMT"
        assert request.get_header("if-modified-since") == "Mon, 01 Jan 2024 00:00:00 GMT"

    def test_repeated_headers_joined(self):
        raw = (
            b"GET / HTTP/1.1\r\n"
            b"Accept-Encoding: deflate\r\n"
            b"Accept-Encoding: gzip\r\n"
            b"\r\n"
        )
        assert parse_request(raw).get_header("accept-encoding") == "deflate, gzip"


class TestHTTPRequest:
    """Tests for HTTPRequest dataclass."""

    def test_get_header_default(self):
        request = HTTPRequest(method="GET", path="/")

        assert request.get_header("X-Missing") == ""
        assert request.get_header("X-Missing", "default") == "default"
