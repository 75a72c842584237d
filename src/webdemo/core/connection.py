"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps one accepted client socket: reads whole HTTP requests out of the
TCP byte stream, writes responses back, and closes cleanly.

=============================================================================
WHY BUFFER?
=============================================================================

TCP is a byte stream, not a message stream. One recv() may return half a
request, or one and a half:

    recv() #1:  b"GET /item/yellow HTTP/1.1\\r\\nHo"
    recv() #2:  b"st: localhost\\r\\n\\r\\nGET /home HTTP/1.1\\r\\n..."
                                      ──────────────────────────────
                                      start of the NEXT request

So bytes accumulate in _buffer until the blank line ending the headers is
seen, then exactly Content-Length more bytes are read for the body (or,
for a chunked body, everything up to the zero-size last chunk).
Whatever follows stays in the buffer for the next read_request().

=============================================================================
CONNECTION STATES
=============================================================================

    NEW ──► READING ──► PROCESSING ──► WRITING ──┬──► KEEP_ALIVE ──► READING
                                                 │
                                                 └──► CLOSING ──► CLOSED

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid

from ..http.request import HTTPParseError, IncompleteBody, decode_chunked


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Where a connection is in its request/response cycle."""
    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    KEEP_ALIVE = "keep_alive"
    CLOSING = "closing"
    CLOSED = "closed"


class RequestTooLarge(ValueError):
    """The client sent more than max_request_size bytes for one request."""


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The accepted client socket.
        address: Client's (ip, port).
        id: Short random id used in log lines.
        state: Current ConnectionState.
        requests_handled: Requests read so far on this connection.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    state: ConnectionState = ConnectionState.NEW
    last_activity: float = field(default_factory=time.time)
    requests_handled: int = 0

    buffer_size: int = 8192
    timeout: Optional[float] = 30.0
    keep_alive_timeout: float = 5.0
    max_request_size: int = 10 * 1024 * 1024

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read one complete HTTP request.

        ┌─────────────────────────────────────────────────────────────────┐
        │   1. Shorter timeout if this is a keep-alive follow-up          │
        │   2. recv() until b"\\r\\n\\r\\n" is in the buffer                 │
        │   3. Content-Length, or Transfer-Encoding: chunked?             │
        │   4. recv() until the body (or the last chunk) is complete      │
        │   5. Cut the request off the buffer, keep the rest              │
        └─────────────────────────────────────────────────────────────────┘

        Returns:
            The request bytes, or None if the client closed the connection
            (or went idle on a keep-alive connection).

        Raises:
            TimeoutError: The first request never arrived in time.
            RequestTooLarge: The request exceeds max_request_size.
        """
        self.state = ConnectionState.READING
        self.last_activity = time.time()

        if self.requests_handled > 0:
            self.socket.settimeout(self.keep_alive_timeout)

        try:
            while b"\r\n\r\n" not in self._buffer:
                chunk = self._recv()
                if not chunk:
                    return None
                self._append(chunk)

            header_end = self._buffer.find(b"\r\n\r\n")
            body_start = header_end + 4
            raw_headers = self._buffer[:header_end]

            if self._is_chunked(raw_headers):
                request_end = self._read_chunked_body(body_start)
            else:
                request_end = self._read_sized_body(
                    body_start, self._parse_content_length(raw_headers)
                )

            request_data = self._buffer[:request_end]
            self._buffer = self._buffer[request_end:]

            self.requests_handled += 1
            self.last_activity = time.time()
            return request_data

        except socket.timeout:
            if self.requests_handled > 0:
                logger.debug(f"[{self.id}] Keep-alive timeout")
                return None
            raise TimeoutError("Request read timeout")

        finally:
            self.socket.settimeout(self.timeout)

    def _read_sized_body(self, body_start: int, content_length: int) -> int:
        """recv() until content_length body bytes are buffered. Returns the request end."""
        while len(self._buffer) - body_start < content_length:
            chunk = self._recv()
            if not chunk:
                break  # closed mid-body; the parser reports the short body
            self._append(chunk)
        return body_start + content_length

    def _read_chunked_body(self, body_start: int) -> int:
        """
        recv() until the chunked body is complete. Returns the request end.

        A malformed or truncated body ends the request at the end of the
        buffer; the parser then rejects it and the connection is closed.
        """
        while True:
            try:
                _, consumed = decode_chunked(self._buffer[body_start:])
                return body_start + consumed
            except IncompleteBody:
                chunk = self._recv()
                if not chunk:
                    return len(self._buffer)
                self._append(chunk)
            except HTTPParseError:
                return len(self._buffer)

    def _append(self, chunk: bytes):
        self._buffer += chunk
        if len(self._buffer) > self.max_request_size:
            raise RequestTooLarge(f"Request too large: {len(self._buffer)} bytes")

    def _recv(self) -> bytes:
        """recv() that reports a reset connection as a normal close."""
        try:
            data = self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            return b""
        self.last_activity = time.time()
        return data

    def _parse_content_length(self, headers: bytes) -> int:
        """
        Content-Length from raw header bytes, 0 if absent or unreadable.

        Needed before the request is parsed, so this is a plain line scan.
        """
        for line in headers.decode("iso-8859-1").lower().split("\r\n"):
            if line.startswith("content-length:"):
                try:
                    return max(0, int(line.split(":", 1)[1].strip()))
                except ValueError:
                    return 0
        return 0

    def _is_chunked(self, headers: bytes) -> bool:
        for line in headers.decode("iso-8859-1").lower().split("\r\n"):
            if line.startswith("transfer-encoding:"):
                return line.split(":", 1)[1].strip() == "chunked"
        return False

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send a serialized response with sendall().

        Returns:
            True on success, False if the client is gone.
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False
        self.last_activity = time.time()
        return True

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection.

        shutdown(SHUT_WR) sends FIN first, then unread client bytes are
        drained briefly so the kernel does not answer them with RST.
        Safe to call more than once.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # peer already gone

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.requests_handled} requests")

    def set_keep_alive(self):
        """Mark the connection as waiting for its next request."""
        self.state = ConnectionState.KEEP_ALIVE

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
