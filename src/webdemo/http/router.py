"""
=============================================================================
PREFIX ROUTER
=============================================================================

Maps request paths to handlers by path prefix, the way a standard HTTP
request multiplexer does:

- Subtree patterns end in "/":   "/item/"  matches /item/, /item/x, /item/x/y
- Exact patterns do not:         "/home"   matches /home only
- When several patterns match, the LONGEST one wins.

Handlers receive every request under their pattern and do any further
path parsing themselves.

=============================================================================
ROUTING FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ROUTING FLOW                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Incoming Request:  GET /item/yellow                               │
    │        │                                                             │
    │        ▼                                                             │
    │   1. Path clean?        "/item/./yellow" → 301 /item/yellow         │
    │        │                                                             │
    │        ▼                                                             │
    │   2. Missing slash?     "/item" → 301 /item/                        │
    │        │                                                             │
    │        ▼                                                             │
    │   3. Longest match:                                                  │
    │      ┌────────────────────────────────────────────────────────┐     │
    │      │  /home       → home_handler       (exact)              │     │
    │      │  /item/      → item_handler       (subtree) ← MATCH    │     │
    │      │  /generic/   → generic_handler    (subtree)            │     │
    │      └────────────────────────────────────────────────────────┘     │
    │        │                                                             │
    │        ▼                                                             │
    │   item_handler(request)          no match → 404 page not found      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from dataclasses import dataclass
from typing import Callable, Optional, List
from urllib.parse import quote
import posixpath
import re

from .request import HTTPRequest
from .response import HTTPResponse, not_found, redirect


# Handler: takes a request, returns a response
Handler = Callable[[HTTPRequest], HTTPResponse]

# Characters left as-is when a decoded path is escaped for a Location header.
PATH_SAFE = "/:@!$&'()*+,;=-._~"


@dataclass
class Route:
    """
    A registered pattern and its handler.

        Route(pattern="/item/", handler=item_handler)
    """

    pattern: str
    handler: Handler
    name: Optional[str] = None

    @property
    def is_subtree(self) -> bool:
        """Subtree patterns end in "/" and match everything below them."""
        return self.pattern.endswith("/")

    def matches(self, path: str) -> bool:
        if self.is_subtree:
            return path.startswith(self.pattern)
        return path == self.pattern


def clean_path(path: str) -> str:
    """
    Canonical form of a URL path.

        ""                → "/"
        "item/x"          → "/item/x"
        "//item///x"      → "/item/x"
        "/item/./x"       → "/item/x"
        "/generic/a/../b" → "/generic/b"
        "/generic/"       → "/generic/"   (trailing slash kept)
    """
    if not path:
        return "/"
    if not path.startswith("/"):
        path = "/" + path

    # normpath keeps a leading "//", so collapse slash runs first
    cleaned = posixpath.normpath(re.sub(r"/{2,}", "/", path))
    if path.endswith("/") and cleaned != "/":
        cleaned += "/"
    return cleaned


class Router:
    """
    HTTP request router with prefix patterns.

    ==========================================================================
    USAGE
    ==========================================================================

        router = Router()
        router.add_route("/home", home.handle)

        @router.route("/item/")
        def item(request):
            ...

        response = router.handle(request)

    Patterns are matched for every method; handlers decide what a method
    means to them.

    ==========================================================================
    """

    def __init__(self):
        self._routes: List[Route] = []

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(self, pattern: str, handler: Handler, name: Optional[str] = None) -> Route:
        """
        Register a handler for a pattern.

        Args:
            pattern: "/exact" or "/subtree/"
            handler: Called with each matching request
            name: Optional label, shown by print_routes()

        Raises:
            ValueError: Pattern does not start with "/" or is already taken.
        """
        if not pattern.startswith("/"):
            raise ValueError(f"Invalid pattern {pattern!r}: must start with '/'")
        if any(route.pattern == pattern for route in self._routes):
            raise ValueError(f"Multiple registrations for {pattern}")

        route = Route(pattern=pattern, handler=handler, name=name)
        self._routes.append(route)
        return route

    def route(self, pattern: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """
        Decorator form of add_route().

            @router.route("/generic/")
            def generic(request):
                ...
        """
        def decorator(handler: Handler) -> Handler:
            self.add_route(pattern, handler, name)
            return handler
        return decorator

    # =========================================================================
    # ROUTE MATCHING
    # =========================================================================

    def match(self, path: str) -> Optional[Route]:
        """
        Find the route for a path.

        Every route whose pattern matches is a candidate; the longest
        pattern wins, so "/item/special/" beats "/item/" for
        "/item/special/x". Registration order does not matter.

        Returns:
            The winning Route, or None.
        """
        best: Optional[Route] = None
        for route in self._routes:
            if route.matches(path) and (best is None or len(route.pattern) > len(best.pattern)):
                best = route
        return best

    def redirect_for(self, request: HTTPRequest) -> Optional[str]:
        """
        Where to send the client instead, if anywhere.

        1. Unclean paths go to their clean form.
        2. A path naming a subtree without its trailing slash ("/item")
           goes to the slash form, unless an exact pattern claims it.

        The query string is carried over. request.path is decoded, so the
        location path is percent-encoded again; a "%0d%0a" in the request
        stays "%0D%0A" and never becomes a line break in the header.

        Returns:
            Redirect location, or None to dispatch normally.
        """
        path = request.path
        query = f"?{request.query_string}" if request.query_string else ""

        cleaned = clean_path(path)
        if cleaned != path:
            return quote(cleaned, safe=PATH_SAFE) + query

        if not path.endswith("/"):
            patterns = {route.pattern for route in self._routes}
            if path not in patterns and path + "/" in patterns:
                return quote(path + "/", safe=PATH_SAFE) + query

        return None

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a request to its handler.

        Returns:
            A redirect, the handler's response, or the default 404.
        """
        location = self.redirect_for(request)
        if location is not None:
            return redirect(location)

        route = self.match(request.path)
        if route is None:
            return not_found()

        return route.handler(request)

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================

    def routes(self) -> List[Route]:
        """All registered routes, in registration order."""
        return list(self._routes)

    def print_routes(self) -> None:
        """
        Print the route table.

            Registered Routes:
            ------------------------------------------------------------
              /home        home
              /item/       item
              /generic/    generic
            ------------------------------------------------------------
        """
        print("\nRegistered Routes:")
        print("-" * 60)
        for route in self._routes:
            name = route.name or getattr(route.handler, "__name__", "")
            print(f"  {route.pattern:12} {name}")
        print("-" * 60)
