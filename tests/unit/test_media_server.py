"""
Unit tests for how MediaServer writes responses to a connection.
"""

import logging
import socket

import pytest

from mediaserver import MediaServer
from mediaserver.core import Connection
from mediaserver.http import HTTPRequest, HTTPStatus, ResponseBuilder


class ClosingStream:
    """Chunk iterator that records whether it was closed."""

    def __init__(self, chunks):
        self._chunks = iter(chunks)
        self.closed = False

    def __iter__(self):
        return self

    def __next__(self):
        return next(self._chunks)

    def close(self):
        self.closed = True


@pytest.fixture
def connection():
    server_side, client_side = socket.socketpair()
    conn = Connection(socket=server_side, address=("127.0.0.1", 1), timeout=2.0)
    yield conn, client_side
    conn.close()
    client_side.close()


def read_all(conn: Connection, client_side: socket.socket) -> bytes:
    """Close the server side, then collect everything the client received."""
    conn.close()
    received = b""
    while True:
        data = client_side.recv(4096)
        if not data:
            return received
        received += data


def streamed(chunks, length: int):
    stream = ClosingStream(chunks)
    response = (ResponseBuilder()
        .status(HTTPStatus.OK)
        .content_type("video/mp4")
        .stream(stream, length=length)
        .build())
    return response, stream


class TestSend:

    def test_complete_stream(self, config, connection):
        conn, _ = connection
        response, stream = streamed([b"a" * 6, b"b" * 4], length=10)

        sent = MediaServer(config)._send(conn, HTTPRequest(method="GET", path="/clip.mp4"), response)

        assert sent is True
        assert stream.closed

    def test_short_stream_fails_the_send(self, config, connection, caplog):
        """A file that shrank mid-request must not leave the connection reusable."""
        conn, client_side = connection
        response, stream = streamed([b"x" * 10], length=1000)

        with caplog.at_level(logging.WARNING, logger="mediaserver.server"):
            sent = MediaServer(config)._send(
                conn, HTTPRequest(method="GET", path="/clip.mp4"), response
            )

        assert sent is False
        assert stream.closed
        assert "10 of 1000 bytes" in caplog.text
        assert read_all(conn, client_side).endswith(b"\r\n\r\n" + b"x" * 10)

    def test_client_abort_is_a_warning(self, config, connection, caplog):
        conn, client_side = connection
        client_side.close()

        def endless():
            while True:
                yield b"x" * 8192

        response, stream = streamed(endless(), length=10 ** 9)

        with caplog.at_level(logging.WARNING, logger="mediaserver.server"):
            sent = MediaServer(config)._send(
                conn, HTTPRequest(method="GET", path="/clip.mp4"), response
            )

        assert sent is False
        assert stream.closed
        aborts = [r for r in caplog.records if "Client aborted /clip.mp4" in r.getMessage()]
        assert aborts and aborts[0].levelno == logging.WARNING

    def test_head_skips_the_body(self, config, connection):
        conn, client_side = connection
        response, stream = streamed([b"never read"], length=10)

        sent = MediaServer(config)._send(conn, HTTPRequest(method="HEAD", path="/clip.mp4"), response)

        assert sent is True
        assert stream.closed
        assert read_all(conn, client_side).endswith(b"\r\n\r\n")
