"""
=============================================================================
HTTP RESPONSE
=============================================================================

The response a handler fills in and the server serializes onto the socket.

=============================================================================
HOW HANDLERS USE IT
=============================================================================

Handlers build a response the same way they would write to a stream:
set headers first, then append body text piece by piece.

    response = HTTPResponse()
    set_test_cookie(response)                       ← Set-Cookie line
    response.set_header("Content-type", "text/plain")
    response.write("FooWebHandler says ... \\n")     ← body, in order
    response.write(" request.Method     'GET'\\n")
    return response

Serialized by to_bytes():

    HTTP/1.1 200 OK\\r\\n
    Content-Type: text/plain\\r\\n                   ← name canonicalized
    Set-Cookie: testcookiename=testcookievalue\\r\\n
    Content-Length: 48\\r\\n                         ← auto-added
    Date: Mon, 19 Oct 2026 12:00:00 GMT\\r\\n         ← auto-added
    Server: webdemo/1.0\\r\\n                        ← auto-added
    \\r\\n
    FooWebHandler says ...

=============================================================================
HEADER NAMES
=============================================================================

Header names are case-insensitive. Every name is stored in canonical form
so "Content-type", "content-type" and "CONTENT-TYPE" are the same key:

    canonical_header_key("content-type")            → "Content-Type"
    canonical_header_key("x-content-type-options")  → "X-Content-Type-Options"

Set-Cookie may legitimately appear several times, so cookies live in their
own list instead of the header dict.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from html import escape
from http.cookies import SimpleCookie
from typing import Optional, Dict, List, Union

from .request import Cookie
from .status_codes import HTTPStatus


# Body of every 404 this server sends, from the router or from a handler.
NOT_FOUND_TEXT = "404 page not found"


def canonical_header_key(name: str) -> str:
    """Capitalize each dash-separated word: "content-type" → "Content-Type"."""
    return "-".join(part.capitalize() for part in name.strip().split("-"))


@dataclass
class HTTPResponse:
    """
    An HTTP response under construction.

    =========================================================================
    RESPONSE LIFECYCLE
    =========================================================================

        Handler fills in          to_bytes()              Socket sends
        HTTPResponse    ─────►    serializes    ─────►    raw bytes

    =========================================================================
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    cookies: List[str] = field(default_factory=list)
    body: bytes = b""
    version: str = "HTTP/1.1"

    def __post_init__(self):
        self.headers = {canonical_header_key(k): v for k, v in self.headers.items()}

    @property
    def status_line(self) -> str:
        """e.g. "HTTP/1.1 200 OK"."""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    # =========================================================================
    # HEADERS
    # =========================================================================

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set (replace) a header. Returns self for chaining."""
        self.headers[canonical_header_key(name)] = value
        return self

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.headers.get(canonical_header_key(name), default)

    def del_header(self, name: str) -> "HTTPResponse":
        self.headers.pop(canonical_header_key(name), None)
        return self

    def set_cookie(self, cookie: Cookie) -> "HTTPResponse":
        """
        Add a Set-Cookie line for the cookie.

        Serialization goes through http.cookies so values needing quotes
        are quoted the way browsers expect:

            Cookie("testcookiename", "testcookievalue")
                → Set-Cookie: testcookiename=testcookievalue
        """
        jar = SimpleCookie()
        jar[cookie.name] = cookie.value
        self.cookies.append(jar[cookie.name].OutputString())
        return self

    # =========================================================================
    # BODY
    # =========================================================================

    def write(self, data: Union[str, bytes]) -> int:
        """
        Append to the body. Strings are UTF-8 encoded.

        Returns:
            Number of bytes appended.
        """
        if isinstance(data, str):
            data = data.encode("utf-8")
        self.body += data
        return len(data)

    def set_body(self, body: Union[str, bytes]) -> "HTTPResponse":
        """Replace the body. Returns self for chaining."""
        self.body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    def to_bytes(self, server_name: str = "webdemo/1.0", include_body: bool = True) -> bytes:
        """
        Serialize status line, headers and body.

        Content-Length, Date and Server are added unless the handler set
        them. With include_body=False (HEAD requests) the headers still
        describe the full body but no body bytes follow.

        Args:
            server_name: Value for the Server header.
            include_body: Whether to append the body bytes.

        Returns:
            The complete response, ready for socket.sendall().
        """
        response_headers = dict(self.headers)

        response_headers.setdefault("Content-Length", str(len(self.body)))
        response_headers.setdefault("Date", format_http_date(datetime.now(timezone.utc)))
        response_headers.setdefault("Server", server_name)

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        for cookie in self.cookies:
            lines.append(f"Set-Cookie: {cookie}")
        lines.append("")

        head = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return head + self.body if include_body else head


class ResponseBuilder:
    """
    Fluent builder for the responses the server layer produces itself
    (errors, redirects, defaults).

        response = (ResponseBuilder()
            .status(HTTPStatus.NOT_FOUND)
            .text("404 page not found\\n")
            .build())

    Every method but build() returns self.
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[canonical_header_key(name)] = value
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    def text(self, text: str, content_type: str = "text/plain; charset=utf-8") -> "ResponseBuilder":
        """Plain text body with a text/plain Content-Type."""
        self._body = text.encode("utf-8")
        return self.content_type(content_type)

    def html(self, html: str) -> "ResponseBuilder":
        """HTML body with a UTF-8 text/html Content-Type."""
        self._body = html.encode("utf-8")
        return self.content_type("text/html; charset=utf-8")

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=self._headers,
            body=self._body,
        )


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def format_http_date(dt: datetime) -> str:
    """
    Format a UTC datetime as an HTTP-date (RFC 7231).

        Mon, 19 Oct 2026 12:00:00 GMT
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


# =============================================================================
# ERROR AND REDIRECT RESPONSES
# =============================================================================
#
# All error bodies are plain text: the message plus a newline, with
# nosniff so browsers never reinterpret them as HTML.
#
#     return http_error(HTTPStatus.INTERNAL_SERVER_ERROR, "boom")
#     return not_found()
#
# =============================================================================

def write_error(response: HTTPResponse, status: HTTPStatus, message: str) -> HTTPResponse:
    """
    Turn a response a handler already started into an error response.

    Headers the handler set (cookies included) are kept; Content-Type is
    replaced and any body written so far is discarded.
    """
    response.status = status
    response.set_header("Content-Type", "text/plain; charset=utf-8")
    response.set_header("X-Content-Type-Options", "nosniff")
    response.del_header("Content-Length")
    response.set_body(message + "\n")
    return response


def http_error(status: HTTPStatus, message: str) -> HTTPResponse:
    """A fresh plain-text error response."""
    return write_error(HTTPResponse(), status, message)


def not_found() -> HTTPResponse:
    """The default 404 for paths no route claims."""
    return http_error(HTTPStatus.NOT_FOUND, NOT_FOUND_TEXT)


def redirect(location: str) -> HTTPResponse:
    """
    301 Moved Permanently to location.

    The small HTML body gives clients that ignore Location something
    to click.
    """
    return (ResponseBuilder()
        .status(HTTPStatus.MOVED_PERMANENTLY)
        .header("Location", location)
        .html(f'<a href="{escape(location)}">Moved Permanently</a>.\n\n')
        .build())
