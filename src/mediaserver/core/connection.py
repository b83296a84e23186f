"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one client socket with buffered request reading and response
writing.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL
=============================================================================

    Client sends:                 Server may recv():
        GET /a.mp4 HTTP/1.1\\r\\n       "GET /a.m"
        Range: bytes=0-\\r\\n           "p4 HTTP/1.1\\r\\nRange: by"
        \\r\\n                          "tes=0-\\r\\n\\r\\n"

Requests are buffered until the \\r\\n\\r\\n header terminator arrives.
Anything received after the current request stays in the buffer for the
next one on the same keep-alive connection.

=============================================================================
WRITING LARGE FILES
=============================================================================

Responses go out in two steps: the head with sendall(), then each body
chunk with sendall(). Only one chunk is in memory at a time:

    send_stream(head, chunks)
        sendall(head)
        for chunk in chunks:   ← at most chunk_size bytes each
            sendall(chunk)

A player that seeks usually drops the connection mid-body. That shows up
as BrokenPipeError / ConnectionResetError here and simply ends the send.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Iterable, Optional
import uuid


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, for logging and debugging."""
    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    KEEP_ALIVE = "keep_alive"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short unique identifier used as a log prefix.
        state: Current connection state.
        requests_handled: Number of requests read on this connection.
        bytes_sent: Total bytes written to the client.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    last_activity: float = field(default_factory=time.time)
    requests_handled: int = 0
    bytes_sent: int = 0

    buffer_size: int = 8192
    timeout: Optional[float] = 30.0   # First request
    keep_alive_timeout: float = 5.0   # Subsequent requests
    max_request_size: int = 64 * 1024

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read one complete HTTP request from the socket.

        Returns:
            Complete request bytes, or None if the client closed the
            connection (or a keep-alive connection went idle).

        Raises:
            TimeoutError: The first request did not arrive in time.
            ValueError: The request exceeds max_request_size.
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

                self._buffer += chunk
                if len(self._buffer) > self.max_request_size:
                    raise ValueError(f"Request too large: {len(self._buffer)} bytes")

            header_end = self._buffer.find(b"\r\n\r\n")
            body_start = header_end + 4
            content_length = self._parse_content_length(self._buffer[:header_end])

            if body_start + content_length > self.max_request_size:
                raise ValueError(f"Request too large: {body_start + content_length} bytes")

            while len(self._buffer) - body_start < content_length:
                chunk = self._recv()
                if not chunk:
                    break  # Parser reports the short body
                self._buffer += chunk

            request_end = body_start + content_length
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

    def _recv(self) -> bytes:
        try:
            data = self.socket.recv(self.buffer_size)
            self.last_activity = time.time()
            return data
        except (ConnectionResetError, BrokenPipeError):
            return b""

    def _parse_content_length(self, headers: bytes) -> int:
        """
        Find Content-Length in raw header bytes.

        Needed before the request can be parsed, to know how much body
        to wait for. Unparseable values count as 0; the parser rejects
        them properly.
        """
        header_str = headers.decode("utf-8", errors="replace").lower()
        for line in header_str.split("\r\n"):
            if line.startswith("content-length:"):
                try:
                    return max(0, int(line.split(":", 1)[1].strip()))
                except ValueError:
                    return 0
        return 0

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send a complete buffered response.

        Returns:
            True if sent, False if the connection was lost.
        """
        self.state = ConnectionState.WRITING
        return self._sendall(data)

    def send_stream(self, head: bytes, chunks: Iterable[bytes]) -> bool:
        """
        Send a response head followed by body chunks.

        Stops at the first failed write; the caller owns `chunks` and
        must close it.

        Returns:
            True if everything was sent, False if the connection was lost.
        """
        self.state = ConnectionState.WRITING

        if not self._sendall(head):
            return False

        for chunk in chunks:
            if not self._sendall(chunk):
                return False
        return True

    def _sendall(self, data: bytes) -> bool:
        try:
            self.socket.sendall(data)
        except (ConnectionResetError, BrokenPipeError, OSError) as e:
            logger.warning(f"[{self.id}] Send failed after {self.bytes_sent} bytes: {e}")
            return False

        self.bytes_sent += len(data)
        self.last_activity = time.time()
        return True

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def set_keep_alive(self):
        """Mark connection as waiting for the next request."""
        self.state = ConnectionState.KEEP_ALIVE

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR)  - send FIN, we're done writing
        2. drain              - discard whatever the client still sends
        3. close()            - release the descriptor

        Safe to call more than once.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass  # Includes socket.timeout

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(
            f"[{self.id}] Connection closed after {self.requests_handled} requests, "
            f"{self.bytes_sent} bytes sent"
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
