"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the media server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    Priority (highest to lowest):

    1. Command-line arguments     python -m mediaserver --root /srv/media
    2. Environment variables      MEDIA_ROOT=/srv/media python -m mediaserver
    3. Defaults in this dataclass

=============================================================================
THE DEVELOPMENT PREFIX
=============================================================================

In production the media server answers on its own subdomain:

    https://media.example.com/clips/intro.mp4

Locally there is no DNS for that subdomain, so the same URL is reached
through a path prefix instead:

    http://localhost:8080/media.example.com/clips/intro.mp4
                          └──── dev_path_prefix ────┘

When the Host header contains one of `dev_host_markers` and
`dev_path_prefix` is set, the prefix is removed before the path is
resolved. Production hosts never have it stripped.

=============================================================================
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


# Largest chunk read from disk per iteration of a streamed response
MAX_CHUNK_SIZE = 8192

ONE_YEAR = 31536000


@dataclass
class ServerConfig:
    """
    Configuration for the media server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK     host, port, backlog, buffer_size, timeout
    HTTP        keep_alive, keep_alive_timeout, max_request_size
    THREADING   min_workers, max_workers, queue_size
    MEDIA       media_root, cache_max_age, chunk_size,
                dev_host_markers, dev_path_prefix
    LOGGING     log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """Address to bind. "0.0.0.0" inside containers."""

    port: int = 8080

    backlog: int = 128
    """Maximum number of connections waiting in the accept queue."""

    buffer_size: int = 8192
    """Bytes read per recv() while receiving a request."""

    timeout: Optional[float] = 30.0
    """Socket timeout in seconds. None blocks forever."""

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    keep_alive: bool = True

    keep_alive_timeout: float = 5.0
    """Idle seconds before a kept-alive connection is closed."""

    max_request_size: int = 64 * 1024
    """
    Maximum request size in bytes. Media requests are header-only GETs,
    so this is far below what an upload API would need.
    """

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    min_workers: int = 4
    max_workers: int = 16

    queue_size: int = 100
    """Connections waiting for a worker before new ones get a 503."""

    # ─────────────────────────────────────────────────────────────────────
    # MEDIA
    # ─────────────────────────────────────────────────────────────────────

    media_root: str = "."
    """
    Base directory. Every servable file must resolve to a path inside it.
    """

    cache_max_age: int = ONE_YEAR
    """Seconds clients and CDNs may cache a file (Cache-Control/Expires)."""

    chunk_size: int = MAX_CHUNK_SIZE
    """Bytes read from disk per chunk when streaming. At most 8192."""

    dev_host_markers: tuple[str, ...] = ("localhost",)
    """Substrings of the Host header that identify a development host."""

    dev_path_prefix: Optional[str] = None
    """Leading path segment stripped on development hosts (None = off)."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"

    log_format: str = "text"
    """Access log format: 'text' (Apache style) or 'json'."""

    # ─────────────────────────────────────────────────────────────────────
    # SERVER IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "MediaServer/1.0"

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        MEDIA_HOST           Bind address (default: 127.0.0.1)
        MEDIA_PORT           Port (default: 8080)
        MEDIA_WORKERS        Max worker threads (default: 16)
        MEDIA_TIMEOUT        Socket timeout in seconds (default: 30)
        MEDIA_ROOT           Base directory for media files (default: .)
        MEDIA_CACHE_MAX_AGE  Cache lifetime in seconds (default: 31536000)
        MEDIA_DEV_HOSTS      Comma-separated dev host markers (default: localhost)
        MEDIA_DEV_PREFIX     Path prefix stripped on dev hosts (default: none)
        MEDIA_LOG_LEVEL      Logging level (default: INFO)
        MEDIA_LOG_FORMAT     text or json (default: text)

        =====================================================================
        """
        dev_hosts = os.getenv("MEDIA_DEV_HOSTS", "localhost")
        workers = int(os.getenv("MEDIA_WORKERS", "16"))

        return cls(
            host=os.getenv("MEDIA_HOST", "127.0.0.1"),
            port=int(os.getenv("MEDIA_PORT", "8080")),
            min_workers=min(cls.min_workers, workers),
            max_workers=workers,
            timeout=float(os.getenv("MEDIA_TIMEOUT", "30")),
            media_root=os.getenv("MEDIA_ROOT", "."),
            cache_max_age=int(os.getenv("MEDIA_CACHE_MAX_AGE", str(ONE_YEAR))),
            dev_host_markers=tuple(
                marker.strip() for marker in dev_hosts.split(",") if marker.strip()
            ),
            dev_path_prefix=os.getenv("MEDIA_DEV_PREFIX") or None,
            log_level=os.getenv("MEDIA_LOG_LEVEL", "INFO"),
            log_format=os.getenv("MEDIA_LOG_FORMAT", "text"),
        )

    @property
    def media_path(self) -> Path:
        """Canonical (absolute, symlink-free) media root."""
        return Path(self.media_root).resolve()

    def validate(self) -> None:
        """
        Validate configuration values.

        Called at server construction so a bad value fails at startup,
        not on the first request.

        Raises:
            ValueError: On the first invalid value found.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.min_workers < 1:
            raise ValueError("min_workers must be >= 1")

        if self.max_workers < self.min_workers:
            raise ValueError("max_workers must be >= min_workers")

        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if not 0 < self.chunk_size <= MAX_CHUNK_SIZE:
            raise ValueError(f"chunk_size must be between 1 and {MAX_CHUNK_SIZE}")

        if self.cache_max_age < 0:
            raise ValueError("cache_max_age must be >= 0")

        if self.log_format not in ("text", "json"):
            raise ValueError(f"Invalid log_format: {self.log_format}")

        if not self.media_path.is_dir():
            raise ValueError(f"Media root is not a directory: {self.media_root}")
