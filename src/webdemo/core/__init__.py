"""
=============================================================================
CORE NETWORKING
=============================================================================

The transport half of the server. Nothing here knows about routes or
handlers.

    socket_server.py   listening socket and accept loop
    connection.py      one client: buffered request reads, response writes
    thread_pool.py     workers that serve queued connections

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState, RequestTooLarge
from .thread_pool import ThreadPool

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "RequestTooLarge",
    "ThreadPool",
]
