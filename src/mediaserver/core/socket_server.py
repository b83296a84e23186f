"""
=============================================================================
TCP SOCKET SERVER
=============================================================================

Owns the listening socket and hands every accepted client to a callback.

    start(handler)
        │
        ├──► _create_socket()   SO_REUSEADDR, TCP_NODELAY, 1s accept timeout
        ├──► bind() + listen()
        ├──► _setup_signals()   SIGTERM/SIGINT → shutdown() (main thread only)
        └──► _accept_loop()     accept() → Connection → handler(conn)

    shutdown()                  flips _running; the loop exits within 1s

The 1 second accept timeout is what lets the loop notice shutdown()
without a wake-up pipe.

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
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False
        self._ready = threading.Event()
        self._shutdown_event = threading.Event()
        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once bound to port 0."""
        if self._socket is not None:
            return self._socket.getsockname()[:2]
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Rebind immediately after a restart (skip TIME_WAIT)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Send response heads without waiting for a full segment
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        sock.settimeout(1.0)
        return sock

    def _setup_signals(self):
        """
        Route SIGTERM (docker stop, systemd) and SIGINT (Ctrl+C) to
        shutdown().

        signal.signal() only works in the main thread, so a server
        started from a background thread (tests, embedding) keeps the
        existing handlers.
        """
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
        Bind, listen and accept connections until shutdown() is called.

        Args:
            connection_handler: Called with each accepted Connection.

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

        # Must be set before listen(): once clients can connect, shutdown() may run
        self._running = True
        self._shutdown_event.clear()
        self._socket.listen(self.config.backlog)
        self._setup_signals()

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")
        self._ready.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self._running:
                    logger.error(f"Accept error: {e}")
                break

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
                keep_alive_timeout=self.config.keep_alive_timeout,
                max_request_size=self.config.max_request_size,
            )
            connection_handler(conn)

    def shutdown(self):
        """Stop accepting connections. Idempotent, callable from any thread."""
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False
        self._shutdown_event.set()

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._ready.clear()
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. Returns False on timeout."""
        return self._ready.wait(timeout)

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """Block until shutdown() is called. Returns False on timeout."""
        return self._shutdown_event.wait(timeout)
