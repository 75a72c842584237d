"""
=============================================================================
GENERIC HANDLER
=============================================================================

Echoes what the server understood about the request, as plain text.

    GET /generic/page?color=purple
    Cookie: testcookiename=testcookievalue

    ┌─────────────────────────────────────────────────────────────────────┐
    │ FooWebHandler says ...                                              │
    │  request.Method     'GET'                                           │
    │  request.RequestURI '/generic/page?color=purple'                    │
    │  request.URL.Path   '/generic/page'                                 │
    │  request.Form       'map[color:[purple]]'                           │
    │  request.Cookies()  '[testcookiename=testcookievalue]'              │
    └─────────────────────────────────────────────────────────────────────┘

The labels and column alignment are fixed; clients and tests match on
whole lines.

A malformed query string or form body ends the request with
500 "error parsing url ..." and no dump.

=============================================================================
"""

import logging
from typing import Dict, List

from ..http.request import Cookie, FormParseError, HTTPRequest
from ..http.response import HTTPResponse, write_error
from ..http.status_codes import HTTPStatus
from .cookies import set_test_cookie


logger = logging.getLogger(__name__)


def format_form(form: Dict[str, List[str]]) -> str:
    """
    Render the form mapping with sorted keys.

        {"size": ["huge", "tiny"], "color": ["purple"]}
            → map[color:[purple] size:[huge tiny]]
        {}  → map[]
    """
    fields = " ".join(f"{key}:[{' '.join(form[key])}]" for key in sorted(form))
    return f"map[{fields}]"


def format_cookies(cookies: List[Cookie]) -> str:
    """
    Render cookies in the order the client sent them.

        [a=1 testcookiename=testcookievalue]
        []
    """
    return "[" + " ".join(str(cookie) for cookie in cookies) + "]"


def generic_handler(request: HTTPRequest) -> HTTPResponse:
    """Handle /generic/...: set the cookie, then dump the request."""
    response = HTTPResponse()
    set_test_cookie(response)
    response.set_header("Content-type", "text/plain")

    try:
        form = request.parse_form()
    except FormParseError as e:
        logger.debug(f"Form parse failed for {request.target}: {e}")
        return write_error(response, HTTPStatus.INTERNAL_SERVER_ERROR, f"error parsing url {e}")

    response.write("FooWebHandler says ... \n")
    response.write(f" request.Method     '{request.method}'\n")
    response.write(f" request.RequestURI '{request.target}'\n")
    response.write(f" request.URL.Path   '{request.path}'\n")
    response.write(f" request.Form       '{format_form(form)}'\n")
    response.write(f" request.Cookies()  '{format_cookies(request.cookies)}'\n")
    return response
