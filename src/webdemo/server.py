"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together: the socket server accepts, the thread pool
serves, the router dispatches.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                           HTTPServer                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    ┌──────────────┐    ┌──────────────┐    ┌──────────────┐         │
    │    │ SocketServer │──► │  ThreadPool  │──► │    Router    │         │
    │    │   accept()   │    │   workers    │    │ longest match│         │
    │    └──────────────┘    └──────┬───────┘    └──────┬───────┘         │
    │                               │                   │                  │
    │                               ▼                   ▼                  │
    │                        ┌──────────────┐    ┌──────────────┐         │
    │                        │  Connection  │    │   Handlers   │         │
    │                        │ read / send  │    │ home item    │         │
    │                        └──────────────┘    │ generic      │         │
    │                                            └──────────────┘         │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. SocketServer accepts and wraps the socket in a Connection
    2. The connection is queued on the ThreadPool (full queue → 503)
    3. A worker reads one request        (first-request timeout → 408)
    4. RequestParser builds HTTPRequest  (bad syntax → 400/413/505)
    5. Router.handle() picks the handler (handler crash → 500)
    6. Access log line, then the response goes out
       (HEAD: headers only, Content-Length still the full size)
    7. Keep-alive: back to 3. Otherwise close.

Errors in steps 3-4 close the connection after the error response.
A handler crash only affects its own request.

=============================================================================
"""

import logging
import time
from typing import Optional

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState, RequestTooLarge, ThreadPool
from .http import (
    HTTPRequest, HTTPResponse, HTTPParseError, HTTPStatus,
    RequestParser, Router, http_error,
)


logger = logging.getLogger(__name__)
access_logger = logging.getLogger("webdemo.access")


class HTTPServer:
    """
    Threaded HTTP/1.1 server around a Router.

    =========================================================================
    USAGE
    =========================================================================

        router = Router()
        router.add_route("/item/", item_handler)

        server = HTTPServer(ServerConfig(port=8080), router)
        server.run()             # blocks until SIGINT/SIGTERM or shutdown()

    Normally built by webdemo.app.create_server(), which registers the
    three demo routes.

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None, router: Optional[Router] = None):
        """
        Args:
            config: Server settings. Defaults to ServerConfig().
            router: Route table. Defaults to an empty Router, which answers
                    every request with 404.

        Raises:
            ValueError: The config does not validate.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self.router = router or Router()

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            min_workers=self.config.min_workers,
            max_workers=self.config.max_workers,
        )
        self._parser = RequestParser(max_request_size=self.config.max_request_size)
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def port(self) -> int:
        """The bound port once running (useful with port=0)."""
        return self._socket_server.address[1]

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start serving. Blocks until shutdown.

        Args:
            host: Override config.host.
            port: Override config.port.

        Raises:
            OSError: The address could not be bound. Nothing is left
                     running in that case.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()
        self._thread_pool.start()
        self._running = True

        logger.info(f"Listening on port {self.config.port} ... ")
        self._print_startup_banner()

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self):
        """Stop accepting connections. run() returns once the pool drains."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("webdemo").setLevel(level)

    def _print_startup_banner(self):
        print()
        print("=" * 64)
        print(f"  {self.config.server_name} on http://{self.config.host}:{self.config.port}")
        print(f"  Workers: {self.config.min_workers}-{self.config.max_workers} threads")
        print(f"  Home page: {self.config.home_file}")
        print("  Press Ctrl+C to stop")
        print("=" * 64)
        self.router.print_routes()

    def _shutdown(self):
        logger.info("Shutting down server...")
        self._running = False
        self._thread_pool.shutdown(wait=True, timeout=self.config.keep_alive_timeout + 5.0)
        logger.info("Server stopped")

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Called by SocketServer on the accept thread; never blocks."""
        submitted = self._thread_pool.submit(
            self._process_connection,
            args=(conn,),
            block=False,
        )

        if not submitted:
            logger.warning(f"[{conn.id}] Thread pool full, rejecting connection from {conn.client_ip}")
            self._send_error(conn, HTTPStatus.SERVICE_UNAVAILABLE, "Service Unavailable")
            conn.close()

    def _process_connection(self, conn: Connection):
        """
        Serve one connection until it closes (runs on a worker).

        ┌─────────────────────────────────────────────────────────────────┐
        │   read_request()  ──►  parse  ──►  dispatch  ──►  send          │
        │        ▲                                           │            │
        │        └──────────── keep-alive ◄──────────────────┘            │
        └─────────────────────────────────────────────────────────────────┘
        """
        with conn:
            while self._running:
                try:
                    raw_request = conn.read_request()
                except TimeoutError:
                    self._send_error(conn, HTTPStatus.REQUEST_TIMEOUT, "Request Timeout")
                    break
                except RequestTooLarge as e:
                    logger.warning(f"[{conn.id}] {e}")
                    self._send_error(conn, HTTPStatus.PAYLOAD_TOO_LARGE, "Payload Too Large")
                    break

                if raw_request is None:
                    break

                try:
                    request = self._parser.parse(raw_request, conn.address)
                except HTTPParseError as e:
                    logger.debug(f"[{conn.id}] Parse error: {e}")
                    self._send_error(conn, HTTPStatus(e.status_code), str(e))
                    break

                conn.state = ConnectionState.PROCESSING
                start_time = time.time()
                response = self._dispatch(request)

                keep_alive = self.config.keep_alive and request.is_keep_alive
                if keep_alive:
                    response.headers.setdefault("Connection", "keep-alive")
                    response.headers.setdefault(
                        "Keep-Alive", f"timeout={int(self.config.keep_alive_timeout)}"
                    )
                else:
                    response.set_header("Connection", "close")

                self._log_access(request, response, start_time)

                data = response.to_bytes(
                    self.config.server_name,
                    include_body=request.method != "HEAD",
                )
                if not conn.send_response(data) or not keep_alive:
                    break

                conn.set_keep_alive()

    def _dispatch(self, request: HTTPRequest) -> HTTPResponse:
        """Route the request. A handler exception becomes a 500."""
        try:
            return self.router.handle(request)
        except Exception as e:
            logger.exception(f"Handler error for {request.method} {request.target}: {e}")
            return http_error(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal Server Error")

    def _log_access(self, request: HTTPRequest, response: HTTPResponse, start_time: float):
        """
        One line per request:

            127.0.0.1 - - [19/Oct/2026:12:00:00 +0000] "GET /item/yellow" 200 110 0.41ms
        """
        duration_ms = (time.time() - start_time) * 1000
        access_logger.info(
            f'{request.client_address[0] or "-"} - - '
            f'[{time.strftime("%d/%b/%Y:%H:%M:%S %z")}] '
            f'"{request.method} {request.target}" '
            f"{int(response.status)} {len(response.body)} {duration_ms:.2f}ms"
        )

    def _send_error(self, conn: Connection, status: HTTPStatus, message: str):
        """Plain-text error for failures before dispatch. Always closes."""
        response = http_error(status, message)
        response.set_header("Connection", "close")
        conn.send_response(response.to_bytes(self.config.server_name))
