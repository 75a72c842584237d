"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything that knows what HTTP looks like, with no sockets involved:

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST (request.py)                                                │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Raw bytes → HTTPRequest. Also the form mapping (query + urlencoded  │
    │ body) and the cookies the client sent.                              │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ RESPONSE (response.py)                                              │
    │ ─────────────────────────────────────────────────────────────────── │
    │ HTTPResponse with canonical header names, Set-Cookie lines and a    │
    │ writable body. Helpers for plain-text errors and redirects.         │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ ROUTER (router.py)                                                  │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Prefix patterns, longest match wins.                                │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ STATUS CODES (status_codes.py)                                      │
    │ ─────────────────────────────────────────────────────────────────── │
    │ HTTPStatus enum with reason phrases.                                │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .request import (
    Cookie,
    FormParseError,
    HTTPParseError,
    HTTPRequest,
    RequestParser,
    parse_query,
)
from .response import (
    HTTPResponse,
    ResponseBuilder,
    http_error,     # plain-text error
    not_found,      # 404 page not found
    redirect,       # 301 Moved Permanently
    write_error,    # turn a started response into an error
)
from .router import Router, Route, clean_path
from .status_codes import HTTPStatus

__all__ = [
    # Requests
    "Cookie",
    "FormParseError",
    "HTTPParseError",
    "HTTPRequest",
    "RequestParser",
    "parse_query",

    # Responses
    "HTTPResponse",
    "ResponseBuilder",
    "http_error",
    "not_found",
    "redirect",
    "write_error",

    # Routing
    "Router",
    "Route",
    "clean_path",

    # Status codes
    "HTTPStatus",
]
