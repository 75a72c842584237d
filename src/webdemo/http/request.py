"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Parses raw HTTP/1.1 request bytes into structured HTTPRequest objects,
and turns the query string, urlencoded body and Cookie header into the
values the handlers print back to the client.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   POST /generic/page?color=purple HTTP/1.1\r\n   ← request line     │
    │   ──┬─ ────────────┬────────────── ────┬───                         │
    │     │              │                   │                             │
    │   Method     Request target         Version                          │
    │              (RequestURI)                                            │
    │                    │                                                 │
    │         ┌──────────┴──────────┐                                      │
    │       Path              Query string                                 │
    │   /generic/page         color=purple                                 │
    │                                                                      │
    │   Host: localhost:8080\r\n                       ← headers           │
    │   Cookie: testcookiename=testcookievalue\r\n                         │
    │   Content-Type: application/x-www-form-urlencoded\r\n               │
    │   Content-Length: 9\r\n                                              │
    │   \r\n                                           ← blank line        │
    │   size=huge                                      ← body              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
THE FORM MAPPING
=============================================================================

The "form" of a request merges two sources into name → list of values:

    body  (POST/PUT/PATCH, application/x-www-form-urlencoded)
      +
    query string

    POST /generic/x?color=purple&size=tiny
    body: size=huge

    form = {"size": ["huge", "tiny"], "color": ["purple"]}
                      ─────   ─────
                      body    query   (body values come first)

A field may repeat, so every value is a list. Malformed input raises
FormParseError:

    ?q=%zz        → invalid URL escape "%zz"
    ?a=1;b=2      → invalid semicolon separator in query

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, List, Tuple
from urllib.parse import unquote, unquote_plus, urlsplit
import re


class HTTPParseError(Exception):
    """
    Raised when the raw request bytes cannot be parsed.

    Carries the status code the server should answer with:

        400 Bad Request                - Malformed request syntax
        413 Payload Too Large          - Request exceeds size limit
        501 Not Implemented            - Unknown Transfer-Encoding
        505 HTTP Version Not Supported - Unknown HTTP version
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class IncompleteBody(HTTPParseError):
    """The chunked body stops before its terminating zero-size chunk."""


class FormParseError(ValueError):
    """Raised when the query string or urlencoded body is malformed."""


# Only these media types have their body merged into the form.
FORM_URLENCODED = "application/x-www-form-urlencoded"

# Methods whose body is considered form data.
FORM_BODY_METHODS = {"POST", "PUT", "PATCH"}

# A "%" not followed by two hex digits.
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")

# Cookie names are tokens; values are printable ASCII minus '"', ';' and '\'.
_COOKIE_NAME = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")
_COOKIE_VALUE = re.compile(r"^[\x20\x21\x23-\x3a\x3c-\x5b\x5d-\x7e]*$")

_CHUNK_SIZE = re.compile(rb"^[0-9A-Fa-f]{1,16}$")


@dataclass
class Cookie:
    """
    A name/value pair, as sent by the client or set by the server.

    str(cookie) gives the "name=value" form. Values containing a space or
    comma are double-quoted so they survive the round trip in a header.
    """

    name: str
    value: str

    def __str__(self) -> str:
        value = self.value
        if " " in value or "," in value:
            value = f'"{value}"'
        return f"{self.name}={value}"


@dataclass
class HTTPRequest:
    """
    Represents a parsed HTTP request.

    =========================================================================
    ATTRIBUTES
    =========================================================================

        method:         GET, POST, ... (any uppercase token is accepted)

        path:           Decoded URL path, no query string
                        "/generic/page"

        target:         The request target exactly as received
                        "/generic/page?color=purple"

        version:        "HTTP/1.1" or "HTTP/1.0"

        headers:        Header names in LOWERCASE → value

        query_string:   Raw query string, "color=purple"

        body:           Body bytes: exactly Content-Length long, or the
                        decoded chunks of a chunked body

        client_address: (ip, port) of the peer

        raw:            The original request bytes

    =========================================================================
    """

    method: str
    path: str
    target: str = ""
    version: str = "HTTP/1.1"

    headers: Dict[str, str] = field(default_factory=dict)
    query_string: str = ""
    body: bytes = b""

    client_address: tuple[str, int] = ("", 0)
    raw: bytes = b""

    # Cached result of parse_form()
    _form: Optional[Dict[str, List[str]]] = field(default=None, repr=False)

    def __post_init__(self):
        if not self.target:
            self.target = self.path + (f"?{self.query_string}" if self.query_string else "")

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def content_type(self) -> Optional[str]:
        """
        Media type of the body, lowercased and without parameters.

        "application/x-www-form-urlencoded; charset=utf-8"
            → "application/x-www-form-urlencoded"
        """
        ct = self.headers.get("content-type", "")
        return ct.split(";")[0].strip().lower() or None

    @property
    def content_length(self) -> int:
        """Content-Length as an int, 0 when missing or invalid."""
        try:
            return int(self.headers.get("content-length", 0))
        except ValueError:
            return 0

    @property
    def is_keep_alive(self) -> bool:
        """
        Whether the connection should stay open after this request.

            HTTP/1.1: open unless "Connection: close"
            HTTP/1.0: closed unless "Connection: keep-alive"
        """
        connection = self.headers.get("connection", "").lower()

        if self.version == "HTTP/1.1":
            return connection != "close"
        return connection == "keep-alive"

    @property
    def cookies(self) -> List[Cookie]:
        """
        Cookies sent by the client, in the order they appear.

            "a=1; a=2; path=/x"  → [a=1, a=2, path=/x]

        Every pair counts: repeated names are all kept, and attribute
        words like path or expires are ordinary names in a request.
        Surrounding double quotes are stripped from values. Pairs with an
        invalid name or value are skipped, the rest still returned.
        """
        cookies: List[Cookie] = []

        for part in self.headers.get("cookie", "").split(";"):
            name, _, value = part.strip().partition("=")
            name, value = name.strip(), value.strip()

            if len(value) > 1 and value[0] == value[-1] == '"':
                value = value[1:-1]

            if _COOKIE_NAME.match(name) and _COOKIE_VALUE.match(value):
                cookies.append(Cookie(name, value))

        return cookies

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    def get_header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)

    def parse_form(self) -> Dict[str, List[str]]:
        """
        Build the form mapping from the body and the query string.

        The result is cached, so repeated calls are cheap. Nothing is
        cached when parsing fails.

        Returns:
            Field name → ordered list of values.

        Raises:
            FormParseError: Malformed escape, ";" separator, or a
                            Content-Type header that is not a media type.
        """
        if self._form is not None:
            return self._form

        form: Dict[str, List[str]] = {}

        if self.method in FORM_BODY_METHODS:
            for key, values in self._parse_body_form().items():
                form.setdefault(key, []).extend(values)

        for key, values in parse_query(self.query_string).items():
            form.setdefault(key, []).extend(values)

        self._form = form
        return form

    def _parse_body_form(self) -> Dict[str, List[str]]:
        """Parse the body when it is urlencoded; other media types add nothing."""
        raw_type = self.headers.get("content-type", "")
        if not raw_type:
            return {}

        media_type = raw_type.split(";")[0].strip().lower()
        if "/" not in media_type:
            raise FormParseError("mime: expected slash after first token")

        if media_type != FORM_URLENCODED:
            return {}

        return parse_query(self.body.decode("utf-8", errors="replace"))


# =============================================================================
# QUERY STRING PARSING
# =============================================================================

def parse_query(query: str) -> Dict[str, List[str]]:
    """
    Strictly parse a urlencoded string into name → list of values.

        "a=1&b=2&a=3"  → {"a": ["1", "3"], "b": ["2"]}
        "flag"         → {"flag": [""]}
        "x=hello+world"→ {"x": ["hello world"]}

    Empty fields ("a=1&&b=2") are skipped.

    Raises:
        FormParseError: On a bad "%" escape or a ";" inside a field.
    """
    values: Dict[str, List[str]] = {}

    for pair in query.split("&"):
        if not pair:
            continue
        if ";" in pair:
            raise FormParseError("invalid semicolon separator in query")

        key, _, value = pair.partition("=")
        values.setdefault(_unescape(key), []).append(_unescape(value))

    return values


def _unescape(component: str) -> str:
    """Decode "+" and %XX, rejecting escapes that are not two hex digits."""
    bad = _BAD_ESCAPE.search(component)
    if bad:
        escape = component[bad.start():bad.start() + 3]
        raise FormParseError(f'invalid URL escape "{escape}"')
    return unquote_plus(component)


# =============================================================================
# CHUNKED BODIES
# =============================================================================
#
#     5\r\n          ← size in hex (";ext" after it is ignored)
#     size=\r\n      ← that many bytes, then CRLF
#     4\r\n
#     huge\r\n
#     0\r\n          ← last chunk
#     \r\n           ← end of (empty) trailer section
#
# =============================================================================

def decode_chunked(data: bytes) -> Tuple[bytes, int]:
    """
    Decode a chunked body from the start of data.

    Returns:
        (body, consumed): the joined chunk data, and how many bytes of
        data the chunked encoding took up. Anything after that belongs
        to the next request.

    Raises:
        IncompleteBody: data ends before the encoding does.
        HTTPParseError: A size line is not hex or chunk data is not
                        followed by CRLF.
    """
    chunks = []
    pos = 0

    while True:
        line_end = data.find(b"\r\n", pos)
        if line_end == -1:
            raise IncompleteBody("Incomplete chunked body")

        size_field = data[pos:line_end].split(b";", 1)[0].strip()
        if not _CHUNK_SIZE.match(size_field):
            raise HTTPParseError(f"Invalid chunk size: {size_field!r}")
        size = int(size_field, 16)
        pos = line_end + 2

        if size == 0:
            break

        if len(data) < pos + size + 2:
            raise IncompleteBody("Incomplete chunked body")
        if data[pos + size:pos + size + 2] != b"\r\n":
            raise HTTPParseError("Malformed chunk: missing CRLF after data")

        chunks.append(data[pos:pos + size])
        pos += size + 2

    # Trailer fields are skipped up to the blank line.
    while True:
        line_end = data.find(b"\r\n", pos)
        if line_end == -1:
            raise IncompleteBody("Incomplete chunked body")
        is_blank = line_end == pos
        pos = line_end + 2
        if is_blank:
            return b"".join(chunks), pos


class RequestParser:
    """
    Parses raw HTTP request bytes into HTTPRequest objects.

    ==========================================================================
    PARSER STEPS
    ==========================================================================

        Raw Request Bytes
              │
              ▼
        1. Size check              too large?       → HTTPParseError(413)
        2. Find \\r\\n\\r\\n          missing?         → HTTPParseError(400)
        3. Request line            malformed?       → HTTPParseError(400)
                                   bad % in path?   → HTTPParseError(400)
                                   bad version?     → HTTPParseError(505)
        4. Headers                 lowercase names, repeats merged
        5. Body                    exactly Content-Length bytes, or
                                   decoded chunks   (other codings → 501)
              │
              ▼
        HTTPRequest

    ==========================================================================
    """

    # METHOD SP TARGET SP VERSION
    REQUEST_LINE_PATTERN = re.compile(r"^([A-Z]+) ([^\x00-\x20\x7f]+) (HTTP/\d\.\d)$")
    HEADER_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")

    def __init__(self, max_request_size: int = 10 * 1024 * 1024):
        """
        Args:
            max_request_size: Largest accepted request in bytes (10 MB).
        """
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Parse raw HTTP request data into an HTTPRequest object.

        Args:
            data: Raw HTTP request bytes from socket.
            client_address: Client's (ip, port) tuple.

        Returns:
            Parsed HTTPRequest object.

        Raises:
            HTTPParseError: If the request is malformed.
        """
        if len(data) > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: {len(data)} bytes",
                status_code=413
            )

        # ─────────────────────────────────────────────────────────────────
        # HEADERS / BODY SPLIT
        # ─────────────────────────────────────────────────────────────────
        header_end = data.find(b"\r\n\r\n")
        if header_end == -1:
            raise HTTPParseError("Incomplete request: no header terminator")

        header_section = data[:header_end].decode("iso-8859-1")
        body = data[header_end + 4:]

        lines = header_section.split("\r\n")
        method, target, path, query_string, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        # ─────────────────────────────────────────────────────────────────
        # BODY
        # ─────────────────────────────────────────────────────────────────
        # Keep-alive leaves the next request's bytes after this body,
        # so the body is cut to exactly its framed length.
        transfer_encoding = headers.get("transfer-encoding", "").lower()
        if transfer_encoding:
            body = self._parse_chunked_body(transfer_encoding, headers, body)
        else:
            body = self._parse_sized_body(headers, body)

        return HTTPRequest(
            method=method,
            path=path,
            target=target,
            version=version,
            headers=headers,
            query_string=query_string,
            body=body,
            client_address=client_address,
            raw=data,
        )

    def _parse_request_line(self, line: str) -> tuple[str, str, str, str, str]:
        """
        Split the request line into its parts.

            "GET /generic/a%20b?x=1 HTTP/1.1"
              → ("GET", "/generic/a%20b?x=1", "/generic/a b", "x=1", "HTTP/1.1")

        Returns:
            (method, target, decoded path, query string, version)
        """
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise HTTPParseError(f"Invalid request line: {line}")

        method, target, version = match.groups()

        if version not in ("HTTP/1.0", "HTTP/1.1"):
            raise HTTPParseError(
                f"Unsupported HTTP version: {version}",
                status_code=505
            )

        # Absolute-form targets (proxies) carry scheme and host. Everything
        # else is origin-form, where a leading "//" is still part of the path.
        if target.startswith(("http://", "https://")):
            parts = urlsplit(target)
            raw_path, query_string = parts.path, parts.query
        else:
            raw_path, _, query_string = target.partition("?")

        if not raw_path.startswith("/"):
            raise HTTPParseError(f"Invalid request target: {target}")
        if _BAD_ESCAPE.search(raw_path):
            raise HTTPParseError(f"Invalid URL escape in path: {target}")

        return method, target, unquote(raw_path), query_string, version

    def _parse_sized_body(self, headers: Dict[str, str], body: bytes) -> bytes:
        """The first Content-Length bytes of body."""
        try:
            content_length = int(headers.get("content-length", 0))
        except ValueError:
            raise HTTPParseError(
                f"Invalid Content-Length: {headers['content-length']!r}"
            )
        if content_length < 0:
            raise HTTPParseError(f"Invalid Content-Length: {content_length}")

        if len(body) < content_length:
            raise HTTPParseError(
                f"Incomplete body: expected {content_length} bytes, got {len(body)}"
            )
        return body[:content_length]

    def _parse_chunked_body(self, transfer_encoding: str, headers: Dict[str, str], body: bytes) -> bytes:
        """
        Decode a Transfer-Encoding body.

        Only "chunked" is understood; anything else is a 501. A request
        that also carries Content-Length is ambiguous and rejected.
        """
        if transfer_encoding != "chunked":
            raise HTTPParseError(
                f"Unsupported transfer encoding: {transfer_encoding!r}",
                status_code=501
            )
        if "content-length" in headers:
            raise HTTPParseError("Both Transfer-Encoding and Content-Length present")

        decoded, _ = decode_chunked(body)
        return decoded

    def _parse_headers(self, lines: List[str]) -> Dict[str, str]:
        """
        Parse header lines into a dict with lowercase names.

        Repeated headers are merged: with "; " for Cookie, since that is
        the Cookie header's own separator, and with ", " for everything else.
        Lines starting with whitespace continue the previous header.
        """
        headers: Dict[str, str] = {}
        current_name = None

        for line in lines:
            if not line:
                continue

            if line[0] in (" ", "\t"):
                if current_name is not None:
                    headers[current_name] += " " + line.strip()
                continue

            match = self.HEADER_PATTERN.match(line)
            if not match:
                continue  # lenient

            name, value = match.groups()
            name = name.strip().lower()
            value = value.strip()
            current_name = name

            if name in headers:
                separator = "; " if name == "cookie" else ", "
                headers[name] += separator + value
            else:
                headers[name] = value

        return headers


def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
    max_size: int = 10 * 1024 * 1024
) -> HTTPRequest:
    """Parse one request with a throwaway RequestParser."""
    parser = RequestParser(max_request_size=max_size)
    return parser.parse(data, client_address)
