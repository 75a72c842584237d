"""
Unit tests for HTTP response building.
"""

import pytest
from datetime import datetime, timezone

from webdemo.http.request import Cookie
from webdemo.http.response import (
    HTTPResponse,
    ResponseBuilder,
    canonical_header_key,
    format_http_date,
    http_error,
    not_found,
    redirect,
    write_error,
)
from webdemo.http.status_codes import HTTPStatus


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_defaults(self):
        """Test that a new response is an empty 200."""
        response = HTTPResponse()
        assert response.status == HTTPStatus.OK
        assert response.body == b""
        assert response.cookies == []

    def test_status_line(self):
        """Test status line generation."""
        assert HTTPResponse(status=HTTPStatus.OK).status_line == "HTTP/1.1 200 OK"
        assert HTTPResponse(status=HTTPStatus.NOT_FOUND).status_line == "HTTP/1.1 404 Not Found"

    def test_header_names_canonical(self):
        """Test that header names are case-insensitive."""
        response = HTTPResponse(headers={"x-custom": "1"})
        response.set_header("Content-type", "text/plain")

        assert response.headers == {"X-Custom": "1", "Content-Type": "text/plain"}
        assert response.get_header("CONTENT-TYPE") == "text/plain"

        response.set_header("content-type", "application/json")
        assert response.get_header("Content-Type") == "application/json"

    def test_del_header(self):
        response = HTTPResponse(headers={"Content-Length": "5"})
        response.del_header("content-length")
        assert response.get_header("Content-Length") is None

    def test_write_appends(self):
        """Test sequential body writes."""
        response = HTTPResponse()
        assert response.write("héllo ") == 7
        assert response.write(b"world") == 5
        assert response.body == "héllo world".encode("utf-8")

    def test_set_cookie(self):
        """Test that cookies serialize without attributes."""
        response = HTTPResponse()
        response.set_cookie(Cookie("testcookiename", "testcookievalue"))
        assert response.cookies == ["testcookiename=testcookievalue"]

    def test_to_bytes_includes_headers(self):
        """Test that to_bytes includes all headers."""
        response = HTTPResponse(
            status=HTTPStatus.OK,
            headers={"X-Custom": "value"},
            body=b"test",
        )

        result = response.to_bytes()

        assert result.startswith(b"HTTP/1.1 200 OK\r\n")
        assert b"X-Custom: value\r\n" in result
        assert b"Content-Length: 4\r\n" in result
        assert b"Server: webdemo/1.0\r\n" in result
        assert b"Date: " in result
        assert result.endswith(b"\r\n\r\ntest")

    def test_to_bytes_set_cookie_lines(self):
        """Test one Set-Cookie line per cookie."""
        response = HTTPResponse()
        response.set_cookie(Cookie("a", "1"))
        response.set_cookie(Cookie("b", "2"))

        result = response.to_bytes()
        assert b"Set-Cookie: a=1\r\n" in result
        assert b"Set-Cookie: b=2\r\n" in result

    def test_to_bytes_keeps_explicit_content_length(self):
        response = HTTPResponse(headers={"Content-Length": "99"}, body=b"x")
        assert b"Content-Length: 99\r\n" in response.to_bytes()

    def test_to_bytes_without_body(self):
        """Test HEAD-style serialization."""
        response = HTTPResponse(body=b"hello world")
        result = response.to_bytes(include_body=False)

        assert b"Content-Length: 11\r\n" in result
        assert result.endswith(b"\r\n\r\n")
        assert b"hello world" not in result

    def test_custom_server_name(self):
        result = HTTPResponse().to_bytes(server_name="custom/2.0")
        assert b"Server: custom/2.0\r\n" in result


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_text(self):
        response = ResponseBuilder().text("hi\n").build()
        assert response.status == HTTPStatus.OK
        assert response.body == b"hi\n"
        assert response.get_header("Content-Type") == "text/plain; charset=utf-8"

    def test_html_and_status(self):
        response = (ResponseBuilder()
            .status(HTTPStatus.MOVED_PERMANENTLY)
            .header("location", "/item/")
            .html("<p>moved</p>")
            .build())

        assert response.status == HTTPStatus.MOVED_PERMANENTLY
        assert response.get_header("Location") == "/item/"
        assert response.get_header("Content-Type") == "text/html; charset=utf-8"


class TestErrorResponses:
    """Tests for error and redirect helpers."""

    def test_http_error(self):
        """Test plain-text error shape."""
        response = http_error(HTTPStatus.INTERNAL_SERVER_ERROR, "boom")

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.body == b"boom\n"
        assert response.get_header("Content-Type") == "text/plain; charset=utf-8"
        assert response.get_header("X-Content-Type-Options") == "nosniff"

    def test_not_found(self):
        """Test the default 404."""
        response = not_found()
        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body == b"404 page not found\n"
        assert response.cookies == []

    def test_write_error_keeps_cookies(self):
        """Test that a started response keeps its cookies but loses its body."""
        response = HTTPResponse()
        response.set_cookie(Cookie("a", "1"))
        response.set_header("Content-Type", "application/json")
        response.set_header("Content-Length", "3")
        response.write("abc")

        write_error(response, HTTPStatus.NOT_FOUND, "404 page not found")

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.cookies == ["a=1"]
        assert response.body == b"404 page not found\n"
        assert response.get_header("Content-Type") == "text/plain; charset=utf-8"
        assert response.get_header("Content-Length") is None

    def test_redirect(self):
        """Test 301 with Location and a link body."""
        response = redirect("/item/?x=1&y=2")

        assert response.status == HTTPStatus.MOVED_PERMANENTLY
        assert response.get_header("Location") == "/item/?x=1&y=2"
        assert response.body == b'<a href="/item/?x=1&amp;y=2">Moved Permanently</a>.\n\n'


class TestUtilities:
    """Tests for helper functions."""

    @pytest.mark.parametrize("name,expected", [
        ("content-type", "Content-Type"),
        ("Content-type", "Content-Type"),
        ("X-CONTENT-TYPE-OPTIONS", "X-Content-Type-Options"),
        ("set-cookie", "Set-Cookie"),
    ])
    def test_canonical_header_key(self, name, expected):
        assert canonical_header_key(name) == expected

    def test_format_http_date(self):
        dt = datetime(2026, 10, 19, 8, 5, 3, tzinfo=timezone.utc)
        assert format_http_date(dt) == "Mon, 19 Oct 2026 08:05:03 GMT"

    def test_status_phrases(self):
        assert HTTPStatus.NOT_FOUND.phrase == "Not Found"
        assert HTTPStatus.MOVED_PERMANENTLY.phrase == "Moved Permanently"
        assert HTTPStatus.NOT_IMPLEMENTED.phrase == "Not Implemented"
