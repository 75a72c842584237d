"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Every setting the server reads lives on one ServerConfig object that is
handed to HTTPServer. Nothing is read from module globals.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    WHO READS WHAT                                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   SocketServer   host, port, backlog                                │
    │   Connection     buffer_size, timeout, keep_alive_timeout,          │
    │                  max_request_size                                   │
    │   ThreadPool     min_workers, max_workers                           │
    │   HTTPServer     keep_alive, log_level, server_name                 │
    │   HomeHandler    home_file                                          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

With no arguments the server listens on every interface at port 8080 and
serves home.html from the working directory.

=============================================================================
"""

from dataclasses import dataclass
from typing import Optional


DEFAULT_PORT = 8080


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    Development:
        ServerConfig(host="127.0.0.1", log_level="DEBUG")

    Tests:
        ServerConfig(host="127.0.0.1", port=free_port, log_level="WARNING")
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """Address to bind. "0.0.0.0" = all interfaces."""

    port: int = DEFAULT_PORT
    """Port to listen on. 0 lets the OS pick one."""

    backlog: int = 128
    """Pending connections the OS queues before refusing."""

    buffer_size: int = 8192
    """Bytes per recv() call."""

    timeout: Optional[float] = 30.0
    """Socket read timeout in seconds for the first request."""

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    keep_alive: bool = True
    """Allow several requests per TCP connection."""

    keep_alive_timeout: float = 5.0
    """Idle seconds before a keep-alive connection is closed."""

    max_request_size: int = 10 * 1024 * 1024
    """Largest request (headers + body) in bytes."""

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    min_workers: int = 4
    max_workers: int = 16

    # ─────────────────────────────────────────────────────────────────────
    # APPLICATION
    # ─────────────────────────────────────────────────────────────────────

    home_file: str = "home.html"
    """
    Page served at /home. Relative paths resolve against the working
    directory at request time.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING / IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    server_name: str = "webdemo/1.0"

    def validate(self) -> None:
        """
        Fail fast on values the server cannot run with.

        Raises:
            ValueError: With a message naming the bad setting.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.min_workers < 1:
            raise ValueError("min_workers must be >= 1")

        if self.max_workers < self.min_workers:
            raise ValueError("max_workers must be >= min_workers")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if not self.home_file:
            raise ValueError("home_file must not be empty")
