"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server can actually emit, with their reason phrases.

=============================================================================
WHERE EACH CODE COMES FROM
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    STATUS CODES IN WEBDEMO                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   200 OK                 Every successful handler response          │
    │   301 Moved Permanently  Router: /item → /item/, unclean paths      │
    │   400 Bad Request        Parser: malformed request line or body     │
    │   404 Not Found          Router default, Item handler mismatch      │
    │   408 Request Timeout    Connection: client never sent a request    │
    │   413 Payload Too Large  Parser/Connection: size limit exceeded     │
    │   500 Internal Error     Home file error, form parse error, crash   │
    │   501 Not Implemented    Parser: Transfer-Encoding not chunked      │
    │   503 Unavailable        Thread pool queue is full                  │
    │   505 Version Not Supp.  Parser: anything but HTTP/1.0 or 1.1       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    Extends IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    # 2xx SUCCESS
    OK = 200

    # 3xx REDIRECTION
    MOVED_PERMANENTLY = 301

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400
    NOT_FOUND = 404
    REQUEST_TIMEOUT = 408
    PAYLOAD_TOO_LARGE = 413

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    SERVICE_UNAVAILABLE = 503
    HTTP_VERSION_NOT_SUPPORTED = 505

    @property
    def phrase(self) -> str:
        """
        Reason phrase for the status line.

            HTTP/1.1 404 Not Found
                     ─── ─────────
                      │      └── phrase
                      └───────── code
        """
        return _STATUS_PHRASES.get(self, "Unknown")


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.MOVED_PERMANENTLY: "Moved Permanently",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.REQUEST_TIMEOUT: "Request Timeout",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.NOT_IMPLEMENTED: "Not Implemented",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version Not Supported",
}
