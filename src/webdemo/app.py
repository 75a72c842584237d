"""
=============================================================================
APPLICATION WIRING
=============================================================================

Builds the route table and the server around it. This is the only place
that knows which handler serves which pattern:

    /home       → HomeHandler(config.home_file).handle   (exact)
    /item/      → item_handler                           (subtree)
    /generic/   → generic_handler                        (subtree)

Anything else falls through to the router's 404.

=============================================================================
"""

from typing import Optional

from .config import ServerConfig
from .handlers import HomeHandler, generic_handler, item_handler
from .http import Router
from .server import HTTPServer


def build_router(config: ServerConfig) -> Router:
    """The three demo routes, wired to config.home_file."""
    router = Router()
    router.add_route("/home", HomeHandler(config.home_file).handle, name="home")
    router.add_route("/item/", item_handler, name="item")
    router.add_route("/generic/", generic_handler, name="generic")
    return router


def create_server(config: Optional[ServerConfig] = None) -> HTTPServer:
    """
    A ready-to-run server with the demo routes.

        server = create_server(ServerConfig(port=8080))
        server.run()
    """
    config = config or ServerConfig()
    return HTTPServer(config, build_router(config))
