"""
=============================================================================
ITEM HANDLER
=============================================================================

A tiny REST-style lookup: the item name travels in the path and comes
back as JSON.

    GET /item/yellow

    {"name":"yellow","what":"item"}
    ["/item/yellow","yellow","This is long JSON data for calculation for bytes."]

The second line echoes the matched path and name plus a fixed filler
string, so the page at /home has something longer to measure.

=============================================================================
WHICH PATHS MATCH
=============================================================================

The path must be exactly "/item/" followed by one or more word
characters (ASCII letters, digits, underscore):

    /item/yellow        ✓  name = "yellow"
    /item/Item_42       ✓  name = "Item_42"
    /item/              ✗  empty name
    /item/a/b           ✗  extra segment
    /item/a-b           ✗  "-" is not a word character
    /item/caf%C3%A9     ✗  non-ASCII after decoding

Anything else under /item/ gets 404 "404 page not found". The cookie is
still set on that 404, which is how it differs from the router's own 404.

=============================================================================
"""

import json
import string
from typing import Optional

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, NOT_FOUND_TEXT, write_error
from ..http.status_codes import HTTPStatus
from .cookies import set_test_cookie


WORD_CHARS = frozenset(string.ascii_letters + string.digits + "_")

FILLER = "This is long JSON data for calculation for bytes."


def extract_item_name(path: str) -> Optional[str]:
    """
    The item name in "/item/<name>", or None if the path has another shape.

        "/item/yellow".split("/")  →  ["", "item", "yellow"]
    """
    segments = path.split("/")
    if len(segments) != 3 or segments[0] != "" or segments[1] != "item":
        return None

    name = segments[2]
    if not name or not all(ch in WORD_CHARS for ch in name):
        return None
    return name


def item_handler(request: HTTPRequest) -> HTTPResponse:
    """Handle /item/<name>."""
    response = HTTPResponse()
    set_test_cookie(response)
    response.set_header("Content-type", "application/json")

    name = extract_item_name(request.path)
    if name is None:
        return write_error(response, HTTPStatus.NOT_FOUND, NOT_FOUND_TEXT)

    record = {"what": "item", "name": name}
    echo = [request.path, name, FILLER]

    response.write(json.dumps(record, separators=(",", ":"), sort_keys=True) + "\n")
    response.write(json.dumps(echo, separators=(",", ":")) + "\n")
    return response
