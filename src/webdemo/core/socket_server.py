"""
=============================================================================
TCP SOCKET SERVER
=============================================================================

Owns the listening socket: bind, listen, accept, and hand every accepted
client to a callback as a Connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      SocketServer.start()                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   socket()  ──►  bind(host, port)  ──►  listen(backlog)             │
    │                      │                                               │
    │                      └── OSError (port in use, permission denied)   │
    │                          is logged and re-raised: fatal             │
    │                                                                      │
    │   while running:                                                    │
    │       accept()            (1 second timeout, to notice shutdown)    │
    │       Connection(...)     wrap the client socket                    │
    │       callback(conn)      HTTPServer queues it on the thread pool   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

SIGINT and SIGTERM trigger shutdown() when start() runs on the main
thread. Signal handlers can only be installed there, so a server started
from a background thread (as the tests do) is stopped by calling
shutdown() directly.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP socket server.

    Usage:
        server = SocketServer(config)
        server.start(handle_connection)  # blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        self.config = config
        self._socket: Optional[socket.socket] = None
        self._running = False
        self._bound_address: Optional[Tuple[str, int]] = None
        self._original_handlers: dict = {}

    @property
    def address(self) -> Tuple[str, int]:
        """The address actually bound; the configured one before start()."""
        return self._bound_address or (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """
        Create the listening socket.

        SO_REUSEADDR lets a restarted server bind while old connections
        sit in TIME_WAIT. TCP_NODELAY sends small responses immediately.
        The 1 second timeout turns accept() into a poll so the loop can
        see shutdown().
        """
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        sock.settimeout(1.0)
        return sock

    def _setup_signals(self):
        """Turn SIGINT/SIGTERM into a graceful shutdown (main thread only)."""
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            logger.info(f"Received {signal.Signals(signum).name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and run the accept loop. Blocks until shutdown().

        Args:
            connection_handler: Called with each new Connection.

        Raises:
            OSError: If the address cannot be bound.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)
        self._bound_address = self._socket.getsockname()[:2]

        self._running = True
        self._setup_signals()

        logger.info(f"Server listening on {self._bound_address[0]}:{self._bound_address[1]}")

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue  # poll the running flag
            except OSError as e:
                if self._running:
                    logger.error(f"Accept error: {e}")
                break

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address[:2],
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
                keep_alive_timeout=self.config.keep_alive_timeout,
                max_request_size=self.config.max_request_size,
            )
            connection_handler(conn)

    def shutdown(self):
        """Stop accepting. Idempotent, callable from any thread."""
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        logger.info("Socket server stopped")
