"""
=============================================================================
MEDIA FILE HANDLER
=============================================================================

Serves files from the media root with caching headers and single-range
support for seeking.

=============================================================================
REQUEST FLOW
=============================================================================

    HTTPRequest
        │
        ▼
    PathResolver.resolve(path, host) ──── NotFound  → 404 text/plain
        │                            └─── Forbidden → 403 text/plain
        ▼
    get_mime_type(file)              (never fails, octet-stream fallback)
        │
        ▼
    parse_range(Range, size) ─────────── RangeNotSatisfiable → 416
        │                                   Content-Range: bytes */size
        ├── None      → 200, whole file
        └── ByteRange → 206, Content-Range: bytes start-end/size

=============================================================================
HEADERS ON EVERY FILE RESPONSE (200, 206, 416)
=============================================================================

    Content-Type:            from the extension
    X-Content-Type-Options:  nosniff
    Cache-Control:           public, max-age=31536000
    Expires:                 now + max-age (RFC 1123 date)
    Accept-Ranges:           bytes
    Content-Length:          file size, range length, or 0

=============================================================================
"""

import logging
from pathlib import Path
from typing import Iterator, Optional

from ..config import MAX_CHUNK_SIZE, ONE_YEAR, ServerConfig
from ..errors import MediaError, RangeNotSatisfiable
from ..http.mime_types import get_mime_type
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder
from ..http.status_codes import HTTPStatus
from .paths import PathResolver, ResolvedFile
from .ranges import ByteRange, parse_range


logger = logging.getLogger(__name__)


def iter_file(
    path: Path,
    start: int,
    length: int,
    chunk_size: int = MAX_CHUNK_SIZE,
) -> Iterator[bytes]:
    """
    Stream `length` bytes of a file starting at `start`.

    The file is opened on the first next() and closed when the generator
    finishes or is close()d, so an abandoned response never leaks a
    descriptor. Stops early at end-of-file if the file shrank after it
    was resolved.

    Args:
        path: File to read.
        start: Offset of the first byte.
        length: Number of bytes to produce.
        chunk_size: Maximum bytes per read().
    """
    with open(path, "rb") as f:
        if start:
            f.seek(start)

        remaining = length
        while remaining > 0:
            chunk = f.read(min(chunk_size, remaining))
            if not chunk:
                break
            remaining -= len(chunk)
            yield chunk


class MediaHandler:
    """
    Request handler for the media root.

    =========================================================================
    USAGE
    =========================================================================

        handler = MediaHandler(PathResolver("/srv/media"))
        response = handler.handle(request)

        # or, from the server configuration
        handler = MediaHandler.from_config(config)

    The handler is stateless across requests; the server calls handle()
    from many worker threads at once.

    =========================================================================
    """

    def __init__(
        self,
        resolver: PathResolver,
        cache_max_age: int = ONE_YEAR,
        chunk_size: int = MAX_CHUNK_SIZE,
    ):
        self.resolver = resolver
        self.cache_max_age = cache_max_age
        self.chunk_size = min(chunk_size, MAX_CHUNK_SIZE)

    @classmethod
    def from_config(cls, config: ServerConfig) -> "MediaHandler":
        resolver = PathResolver(
            config.media_root,
            dev_host_markers=config.dev_host_markers,
            dev_path_prefix=config.dev_path_prefix,
        )
        return cls(
            resolver,
            cache_max_age=config.cache_max_age,
            chunk_size=config.chunk_size,
        )

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Serve the file named by the request path.

        Args:
            request: The HTTP request.

        Returns:
            A streamed 200/206 response, or a buffered 403/404/416.
        """
        try:
            media = self.resolver.resolve(request.path, request.host)
        except MediaError as e:
            return self._error_response(e)

        return self._serve_file(media, request.range)

    def _serve_file(self, media: ResolvedFile, range_header: Optional[str]) -> HTTPResponse:
        builder = (ResponseBuilder()
            .content_type(get_mime_type(media.path))
            .no_sniff()
            .accept_ranges()
            .cache(self.cache_max_age))

        try:
            byte_range = parse_range(range_header, media.size)
        except RangeNotSatisfiable as e:
            logger.debug(f"Unsatisfiable range {range_header!r} for {media.requested} ({media.size} bytes)")
            return (builder
                .status(HTTPStatus.RANGE_NOT_SATISFIABLE)
                .header("Content-Range", e.content_range)
                .header("Content-Length", "0")
                .build())

        if byte_range is None:
            return (builder
                .status(HTTPStatus.OK)
                .stream(self._read(media.path, 0, media.size), length=media.size)
                .build())

        return self._partial_response(builder, media, byte_range)

    def _partial_response(
        self,
        builder: ResponseBuilder,
        media: ResolvedFile,
        byte_range: ByteRange,
    ) -> HTTPResponse:
        return (builder
            .status(HTTPStatus.PARTIAL_CONTENT)
            .header("Content-Range", byte_range.content_range)
            .stream(
                self._read(media.path, byte_range.start, byte_range.length),
                length=byte_range.length,
            )
            .build())

    def _read(self, path: Path, start: int, length: int) -> Iterator[bytes]:
        return iter_file(path, start, length, self.chunk_size)

    def _error_response(self, error: MediaError) -> HTTPResponse:
        """Short plain-text response for a 403/404."""
        return (ResponseBuilder()
            .status(error.status_code)
            .no_sniff()
            .accept_ranges()
            .text(error.message)
            .build())
