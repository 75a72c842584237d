"""
=============================================================================
HANDLERS
=============================================================================

The three demo endpoints. Each takes an HTTPRequest and returns an
HTTPResponse; none keeps state between requests.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ Pattern    │ Handler               │ Responds with                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │ /home      │ HomeHandler.handle    │ home.html, text/html           │
    │ /item/     │ item_handler          │ two JSON lines + cookie        │
    │ /generic/  │ generic_handler       │ plain-text dump + cookie       │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .cookies import TEST_COOKIE, set_test_cookie
from .generic import generic_handler, format_cookies, format_form
from .home import HomeHandler
from .item import extract_item_name, item_handler

__all__ = [
    "TEST_COOKIE",
    "set_test_cookie",
    "generic_handler",
    "format_cookies",
    "format_form",
    "HomeHandler",
    "extract_item_name",
    "item_handler",
]
