"""
=============================================================================
MEDIASERVER - Static Media File Server
=============================================================================

Serves images, video and audio from one base directory over HTTP/1.1,
with long-lived caching headers and single byte-range responses so
players can seek.

    ┌─────────────────────────────────────────────────────────────────────┐
    │   GET /clips/intro.mp4   Range: bytes=1048576-                       │
    │                                                                      │
    │   1. PATH RESOLVER      /clips/intro.mp4 → /srv/media/clips/intro.mp4│
    │                         ".." and symlink escapes → 403               │
    │   2. CONTENT CLASSIFIER .mp4 → video/mp4                             │
    │   3. CONTENT SENDER     206 + Content-Range, streamed in 8 KiB chunks│
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    mediaserver/
    ├── __init__.py          # Package exports
    ├── __main__.py          # CLI entry point (python -m mediaserver)
    ├── server.py            # MediaServer: accept → parse → handle → send
    ├── config.py            # ServerConfig dataclass, MEDIA_* env vars
    ├── errors.py            # NotFound / Forbidden / RangeNotSatisfiable
    ├── core/                # Sockets, connections, thread pool
    ├── http/                # Request parsing, responses, status, MIME table
    ├── handlers/            # Path resolution, range parsing, media handler
    └── middleware/          # Pipeline and access logging

=============================================================================
QUICK START
=============================================================================

    from mediaserver import MediaServer, ServerConfig

    MediaServer(ServerConfig(media_root="/srv/media")).run()

Or from the command line:

    python -m mediaserver --root /srv/media --port 8080

=============================================================================
"""

__version__ = "1.0.0"

from .server import MediaServer, create_app
from .config import ServerConfig

__all__ = ["MediaServer", "ServerConfig", "create_app", "__version__"]
