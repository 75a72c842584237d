"""
pytest configuration and fixtures.
"""

import socket
import threading
import time
from typing import Callable, Generator, List
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from webdemo import HTTPServer, ServerConfig, create_server


HOME_PAGE = b"<!DOCTYPE html>\n<html><body><h1>test home</h1></body></html>\n"


@pytest.fixture
def sample_get_request() -> bytes:
    """Browser-style GET with a query string and a cookie."""
    return (
        b"GET /generic/page?color=purple HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Cookie: testcookiename=testcookievalue\r\n"
        b"Connection: keep-alive\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Form POST whose body and query share a field."""
    body = b"size=huge&shape=round"
    return (
        b"POST /generic/form?size=tiny HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"Content-Type: application/x-www-form-urlencoded\r\n"
        b"Content-Length: %d\r\n"
        b"Connection: close\r\n"
        b"\r\n"
    ) % len(body) + body


@pytest.fixture
def sample_chunked_request() -> bytes:
    """Form POST sent with Transfer-Encoding: chunked."""
    return (
        b"POST /generic/form HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"Content-Type: application/x-www-form-urlencoded\r\n"
        b"Transfer-Encoding: chunked\r\n"
        b"\r\n"
        b"5\r\nsize=\r\n"
        b"4\r\nhuge\r\n"
        b"0\r\n"
        b"\r\n"
    )


@pytest.fixture
def home_file(tmp_path: Path) -> Path:
    """A home.html with known bytes."""
    path = tmp_path / "home.html"
    path.write_bytes(HOME_PAGE)
    return path


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class LiveServer:
    """Runs an HTTPServer in a background thread."""

    def __init__(self, server: HTTPServer, port: int):
        self.server = server
        self.port = port
        self._thread: threading.Thread = None

    def start(self):
        """Start server in background thread and wait until it accepts."""
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"port": self.port},
            daemon=True
        )
        self._thread.start()

        for _ in range(50):  # 5 seconds max
            try:
                with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                    s.connect(('127.0.0.1', self.port))
                    return
            except ConnectionRefusedError:
                time.sleep(0.1)

        raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server and wait for run() to return."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)


@pytest.fixture
def start_live_server(free_port: int, home_file: Path) -> Generator[Callable[..., LiveServer], None, None]:
    """
    Start the demo server on a free port, serving the home_file fixture.

    Keyword arguments override the test ServerConfig.
    """
    started: List[LiveServer] = []

    def start(**overrides) -> LiveServer:
        settings = dict(
            host="127.0.0.1",
            port=free_port,
            min_workers=2,
            max_workers=4,
            timeout=5.0,
            keep_alive_timeout=1.0,
            home_file=str(home_file),
            log_level="WARNING",
        )
        settings.update(overrides)

        live = LiveServer(create_server(ServerConfig(**settings)), free_port)
        live.start()
        started.append(live)
        return live

    yield start

    for live in started:
        live.stop()


@pytest.fixture
def live_server(start_live_server) -> LiveServer:
    """The demo server with the default test settings."""
    return start_live_server()
