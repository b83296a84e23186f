"""
=============================================================================
CORE NETWORKING
=============================================================================

    socket_server.py   listening socket and accept loop
    connection.py      one client: buffered reads, head + chunked writes
    thread_pool.py     bounded pool of worker threads

One worker owns a connection for its whole keep-alive lifetime, including
the time spent streaming a large file to a slow client.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .thread_pool import ThreadPool

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "ThreadPool",
]
