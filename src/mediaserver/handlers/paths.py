"""
=============================================================================
MEDIA PATH RESOLUTION
=============================================================================

Turns the path of a request into a file that is safe to read.

=============================================================================
SECURITY: TWO INDEPENDENT TRAVERSAL CHECKS
=============================================================================

    GET /../../etc/passwd
    GET /clips/%2e%2e/%2e%2e/etc/passwd      (decoded by the parser)
    GET /clips/link-to-etc/passwd            (symlink planted in the root)

    ┌─────────────────────────────────────────────────────────────────────┐
    │  1. TEXTUAL PRE-FILTER (before touching the filesystem)            │
    │     ".." anywhere in "<root>/<path>"          → 403                │
    │     Cheap, catches the obvious attempts, leaks nothing about       │
    │     which files exist outside the root.                            │
    │                                                                      │
    │  2. CANONICAL CONTAINMENT (after resolve())                        │
    │     realpath must be <root> or start with "<root>/"  → else 403    │
    │     Authoritative: catches symlinks and anything the textual       │
    │     filter cannot see.                                              │
    └─────────────────────────────────────────────────────────────────────┘

Neither check replaces the other.

=============================================================================
"""

import html
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from ..errors import Forbidden, NotFound


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedFile:
    """
    A file that passed every check in PathResolver.resolve().

    Attributes:
        path:      Canonical absolute path, inside the media root
        requested: The relative path as the client asked for it
        size:      Size in bytes at resolution time
    """

    path: Path
    requested: str
    size: int


class PathResolver:
    """
    Resolves request paths against a media root.

        resolver = PathResolver("/srv/media", dev_path_prefix="media.example.com")

        resolver.resolve("/clips/intro.mp4", host="media.example.com")
        # → ResolvedFile(path=/srv/media/clips/intro.mp4, ...)

        resolver.resolve("/media.example.com/clips/intro.mp4", host="localhost:8080")
        # → same file, prefix stripped for the development host

    The resolver keeps no per-request state; one instance is shared by
    every worker thread.
    """

    def __init__(
        self,
        root: str,
        dev_host_markers: Sequence[str] = ("localhost",),
        dev_path_prefix: Optional[str] = None,
    ):
        """
        Args:
            root: Media root directory.
            dev_host_markers: Host header substrings that mark a
                              development host.
            dev_path_prefix: Leading segment to strip on development
                             hosts. None disables stripping.
        """
        self.root = Path(root).resolve()
        self.dev_host_markers = tuple(dev_host_markers)
        self.dev_path_prefix = dev_path_prefix.strip("/") if dev_path_prefix else None

        if not self.root.is_dir():
            raise ValueError(f"Media root directory does not exist: {root}")

    def is_dev_host(self, host: str) -> bool:
        """Check if the Host header names a local development host."""
        return any(marker in host for marker in self.dev_host_markers)

    def normalize(self, path: str, host: str = "") -> str:
        """
        Reduce a decoded request path to the relative path of a media file.

            "/clips/intro.mp4/"                      → "clips/intro.mp4"
            "/media.example.com/clips/a.mp4"  (dev)  → "clips/a.mp4"
            "/media.example.com"              (dev)  → ""
        """
        path = path.strip("/")

        prefix = self.dev_path_prefix
        if prefix and self.is_dev_host(host):
            if path.startswith(prefix + "/"):
                path = path[len(prefix) + 1:]
            elif path == prefix:
                path = ""

        return path

    def resolve(self, path: str, host: str = "") -> ResolvedFile:
        """
        Resolve a request path to a regular file inside the media root.

        Args:
            path: Percent-decoded request path, without query string.
            host: Host header of the request.

        Returns:
            The resolved file.

        Raises:
            NotFound: Empty path, nothing at the path, or not a regular file.
            Forbidden: Traversal sequence in the path, or the canonical
                       path lies outside the media root.
        """
        requested = self.normalize(path, host)

        if not requested:
            raise NotFound("Media file not specified")

        # ─────────────────────────────────────────────────────────────────
        # CHECK 1: TEXTUAL PRE-FILTER
        # ─────────────────────────────────────────────────────────────────
        candidate = f"{self.root}/{requested}".replace("\\", "/")
        if ".." in candidate:
            logger.warning(f"Traversal attempt rejected: {requested!r}")
            raise Forbidden("Access denied: Invalid path")

        # ─────────────────────────────────────────────────────────────────
        # CANONICALIZE
        # ─────────────────────────────────────────────────────────────────
        # strict=True fails on missing files; ValueError covers NUL bytes
        try:
            real_path = Path(candidate).resolve(strict=True)
        except (OSError, RuntimeError, ValueError):
            logger.debug(f"Media file not found: {requested!r}")
            raise NotFound(f"File not found: {html.escape(requested)}")

        # ─────────────────────────────────────────────────────────────────
        # CHECK 2: CANONICAL CONTAINMENT
        # ─────────────────────────────────────────────────────────────────
        if not self.contains(real_path):
            logger.warning(f"Path escapes media root: {requested!r} -> {real_path}")
            raise Forbidden("Access denied: Path outside base directory")

        if not real_path.is_file():
            raise NotFound(f"Not a file: {html.escape(requested)}")

        try:
            size = real_path.stat().st_size
        except OSError:
            # Deleted between resolve() and stat()
            raise NotFound(f"File not found: {html.escape(requested)}")

        return ResolvedFile(path=real_path, requested=requested, size=size)

    def contains(self, real_path: Path) -> bool:
        """
        Check that a canonical path is the root or lies beneath it.

        Compared on a separator boundary, so a sibling such as
        /srv/media-private never passes for a root of /srv/media.
        """
        root = str(self.root)
        candidate = str(real_path)
        return candidate == root or candidate.startswith(root.rstrip(os.sep) + os.sep)
