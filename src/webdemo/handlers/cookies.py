"""
The demo cookie.

Generic and Item responses both carry it, so after the first visit the
browser sends it back and /generic/ shows it in its dump:

    Set-Cookie: testcookiename=testcookievalue      (response)
    Cookie: testcookiename=testcookievalue          (next request)
"""

from ..http.request import Cookie
from ..http.response import HTTPResponse


TEST_COOKIE = Cookie(name="testcookiename", value="testcookievalue")


def set_test_cookie(response: HTTPResponse) -> HTTPResponse:
    """Add the Set-Cookie line for TEST_COOKIE. No path, no expiry."""
    return response.set_cookie(TEST_COOKIE)
