"""
=============================================================================
HOME PAGE HANDLER
=============================================================================

Serves a single HTML file, read from disk on every request:

    GET /home
        │
        ▼
    read_bytes(home_file)  ──── OSError ───►  500 "home.html file error ..."
        │
        ▼
    200 text/html; charset=utf-8, body = file bytes, unchanged

The file is not cached, so editing home.html shows up on the next reload.
A relative home_file resolves against the working directory at request
time.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Union

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, write_error
from ..http.status_codes import HTTPStatus


logger = logging.getLogger(__name__)


class HomeHandler:
    """
    Serves the home page.

        home = HomeHandler("home.html")
        router.add_route("/home", home.handle, name="home")
    """

    def __init__(self, home_file: Union[str, Path] = "home.html"):
        self.home_file = Path(home_file)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        response = HTTPResponse()
        response.set_header("Content-type", "text/html; charset=utf-8")

        try:
            page = self.home_file.read_bytes()
        except OSError as e:
            logger.error(f"Cannot read {self.home_file}: {e}")
            return write_error(response, HTTPStatus.INTERNAL_SERVER_ERROR, f"home.html file error {e}")

        response.write(page)
        return response

    def __repr__(self) -> str:
        return f"HomeHandler({str(self.home_file)!r})"
