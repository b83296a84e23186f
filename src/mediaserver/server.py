"""
=============================================================================
MEDIA SERVER
=============================================================================

Ties the components together into a running server.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         MediaServer                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    SocketServer ──accept──► ThreadPool ──worker──► _process_connection
    │                                                         │            │
    │                                 RequestParser ◄─────────┤            │
    │                                                         ▼            │
    │                     MiddlewarePipeline (LoggingMiddleware)           │
    │                                                         │            │
    │                                                         ▼            │
    │                                         MediaHandler.handle          │
    │                                                         │            │
    │                 head_bytes() + iter_body() ◄────────────┘            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. SocketServer accepts the TCP connection
    2. The connection is queued in the ThreadPool (503 if the queue is full)
    3. A worker reads and parses the request (4xx/505 on malformed input)
    4. Middleware + MediaHandler produce an HTTPResponse
    5. The head is sent, then the body chunk by chunk
       (HEAD requests stop after the head)
    6. The response is closed, releasing its file, on every path
    7. Keep-alive: back to 3; otherwise the connection is closed

=============================================================================
"""

import logging
from typing import Optional, Callable

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState, ThreadPool
from .handlers import MediaHandler
from .http import (
    HTTPRequest, RequestParser, HTTPParseError,
    HTTPResponse, HTTPStatus,
    error_response, internal_error,
)
from .middleware import MiddlewarePipeline, Middleware, LoggingMiddleware


logger = logging.getLogger(__name__)


class MediaServer:
    """
    Static media file server.

    =========================================================================
    USAGE
    =========================================================================

        config = ServerConfig(media_root="/srv/media", port=8080)
        server = MediaServer(config)
        server.run()  # Blocks until SIGINT/SIGTERM or stop()

    Additional middleware wraps the media handler, inside access logging:

        server.use(MyMiddleware())

    =========================================================================
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        handler: Optional[MediaHandler] = None,
    ):
        """
        Args:
            config: Server configuration. Defaults to ServerConfig().
            handler: Media handler to serve requests with. Built from
                     the configuration when omitted.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            min_workers=self.config.min_workers,
            max_workers=self.config.max_workers,
            queue_size=self.config.queue_size,
        )
        self._parser = RequestParser(max_request_size=self.config.max_request_size)

        self._media_handler = handler or MediaHandler.from_config(self.config)
        self._middleware = MiddlewarePipeline()
        self._middleware.add(LoggingMiddleware(log_format=self.config.log_format))

        # Built in run(), after all middleware has been added
        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None

        self._running = False

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def use(self, middleware: Middleware) -> "MediaServer":
        """
        Add middleware around the media handler.

        Returns:
            Self for method chaining.
        """
        self._middleware.add(middleware)
        return self

    @property
    def media_handler(self) -> MediaHandler:
        return self._media_handler

    @property
    def address(self) -> tuple[str, int]:
        """Bound (host, port); the real port when configured with port 0."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._running

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the server and block until it is stopped.

        Args:
            host: Override config host.
            port: Override config port.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._running = True

        self._setup_logging()
        self._handler = self._middleware.wrap(self._media_handler.handle)
        self._thread_pool.start()

        logger.info(
            f"Serving {self._media_handler.resolver.root} on "
            f"{self.config.host}:{self.config.port} "
            f"({self.config.min_workers}-{self.config.max_workers} workers)"
        )
        if self.config.dev_path_prefix:
            logger.info(
                f"Stripping '{self.config.dev_path_prefix}/' for hosts matching "
                f"{', '.join(self.config.dev_host_markers)}"
            )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def stop(self):
        """Ask a running server to stop. Safe to call from any thread."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is bound."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        # No-op when the root logger is already configured (tests, embedding)
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("mediaserver").setLevel(level)

    def _shutdown(self):
        """
        Graceful shutdown: the socket server has already stopped
        accepting; let queued and in-flight connections finish, then
        stop the workers.
        """
        logger.info("Shutting down server...")
        self._running = False

        self._thread_pool.shutdown(wait=True, timeout=30.0)

        logger.info("Server stopped")

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Queue a freshly accepted connection (runs in the accept loop)."""
        submitted = self._thread_pool.submit(
            self._process_connection,
            args=(conn,),
            timeout=self.config.timeout,
            block=False,
        )

        if not submitted:
            logger.warning(f"[{conn.id}] Thread pool full, rejecting connection")
            self._send_error(conn, HTTPStatus.SERVICE_UNAVAILABLE, "Server overloaded")
            conn.close()

    def _process_connection(self, conn: Connection):
        """
        Serve requests on one connection until it closes (worker thread).

        Args:
            conn: The client connection.
        """
        with conn:
            while self._running:
                try:
                    raw_request = conn.read_request()
                    if raw_request is None:
                        break

                    try:
                        request = self._parser.parse(raw_request, conn.address)
                    except HTTPParseError as e:
                        logger.info(f"[{conn.id}] Bad request from {conn.client_ip}: {e}")
                        self._send_error(conn, HTTPStatus(e.status_code), str(e))
                        break

                    conn.state = ConnectionState.PROCESSING

                    try:
                        response = self._handler(request)
                    except Exception as e:
                        logger.exception(f"[{conn.id}] Handler error: {e}")
                        response = internal_error()

                    keep_alive = request.is_keep_alive and self.config.keep_alive
                    if keep_alive:
                        response.headers.setdefault("Connection", "keep-alive")
                        response.headers.setdefault(
                            "Keep-Alive",
                            f"timeout={int(self.config.keep_alive_timeout)}"
                        )
                    else:
                        response.headers["Connection"] = "close"

                    if not self._send(conn, request, response):
                        break

                    if not keep_alive:
                        break

                    conn.set_keep_alive()

                except TimeoutError:
                    self._send_error(conn, HTTPStatus.REQUEST_TIMEOUT, "Request timeout")
                    break

                except ValueError as e:
                    # Raised by read_request() for oversized requests
                    self._send_error(conn, HTTPStatus.PAYLOAD_TOO_LARGE, str(e))
                    break

                except Exception as e:
                    logger.exception(f"[{conn.id}] Connection error: {e}")
                    break

    def _send(self, conn: Connection, request: HTTPRequest, response: HTTPResponse) -> bool:
        """
        Write a response to the client.

        HEAD gets the head only. Streamed bodies go out chunk by chunk.
        The response is closed on every path, so an aborted transfer
        never leaves its file open.

        A stream that ends before its declared Content-Length (the file
        shrank after it was stat'ed) counts as a failed send: the client
        would otherwise read the next response as the rest of this body.

        Returns:
            True if the whole response was sent.
        """
        try:
            head = response.head_bytes(self.config.server_name)

            if request.method == "HEAD":
                return conn.send_response(head)

            if response.is_streamed:
                sent_before = conn.bytes_sent
                if not conn.send_stream(head, response.iter_body()):
                    logger.warning(
                        f"[{conn.id}] Client aborted {request.path} "
                        f"({response.status} {response.content_length} bytes)"
                    )
                    return False

                body_sent = conn.bytes_sent - sent_before - len(head)
                if body_sent < response.content_length:
                    logger.warning(
                        f"[{conn.id}] Short body for {request.path}: "
                        f"{body_sent} of {response.content_length} bytes, closing"
                    )
                    return False
                return True

            return conn.send_response(head + response.body)
        finally:
            response.close()

    def _send_error(self, conn: Connection, status: HTTPStatus, message: str):
        """Send a plain-text error for failures outside the handler."""
        response = error_response(status, message)
        response.headers["Connection"] = "close"
        conn.send_response(response.to_bytes(self.config.server_name))


def create_app(config: Optional[ServerConfig] = None) -> MediaServer:
    """
    Create a media server from a configuration.

        app = create_app(ServerConfig(media_root="/srv/media", port=3000))
        app.run()
    """
    return MediaServer(config)
