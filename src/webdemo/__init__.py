"""
=============================================================================
WEBDEMO - A Small HTTP/1.1 Server Over Raw Sockets
=============================================================================

Three endpoints, each showing one way of answering a request:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   /home          a static HTML page read from disk                  │
    │                                                                      │
    │   /generic/...   a plain-text dump of what the server parsed:       │
    │                  method, URI, path, form fields, cookies            │
    │                                                                      │
    │   /item/<name>   JSON built from a path segment                     │
    │                                                                      │
    │   Generic and Item responses also set a demo cookie,                │
    │   testcookiename=testcookievalue, so later requests echo it back.   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    webdemo/
    ├── __init__.py          # This file
    ├── __main__.py          # CLI (python -m webdemo)
    ├── app.py               # Route table + server factory
    ├── server.py            # HTTPServer: accept → pool → router
    ├── config.py            # ServerConfig dataclass
    ├── core/
    │   ├── socket_server.py # Listening socket, accept loop
    │   ├── connection.py    # Buffered reads, keep-alive
    │   └── thread_pool.py   # Worker threads
    ├── http/
    │   ├── request.py       # Parsing, form mapping, cookies
    │   ├── response.py      # Response model, errors, redirects
    │   ├── router.py        # Prefix routing, longest match
    │   └── status_codes.py  # HTTPStatus enum
    └── handlers/
        ├── cookies.py       # The demo cookie
        ├── generic.py       # /generic/
        ├── home.py          # /home
        └── item.py          # /item/

=============================================================================
QUICK START
=============================================================================

    from webdemo import ServerConfig, create_server

    server = create_server(ServerConfig(port=8080))
    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .server import HTTPServer
from .app import build_router, create_server

__all__ = [
    "HTTPServer",
    "ServerConfig",
    "build_router",
    "create_server",
    "__version__",
]
