"""
=============================================================================
MEDIA TYPE DETECTION
=============================================================================

Maps file extensions to the MIME type sent in the Content-Type header.

=============================================================================
WHY A STATIC TABLE?
=============================================================================

The standard library's mimetypes module consults the host's
/etc/mime.types, so the same file can be labelled differently on two
machines. Media players are picky (HLS playlists, MPEG-TS segments), so
the table here is fixed and identical everywhere:

    ┌──────────────┬──────────────────────────────────┐
    │  Extension   │  Content-Type                    │
    ├──────────────┼──────────────────────────────────┤
    │  .mp4        │  video/mp4                       │
    │  .m3u8       │  application/vnd.apple.mpegurl   │
    │  .ts         │  video/mp2t   (not TypeScript!)  │
    │  .xyz        │  application/octet-stream        │
    └──────────────┴──────────────────────────────────┘

The table is a read-only mapping built once at import time. Worker
threads read it concurrently without any locking.

=============================================================================
"""

from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Union


_MIME_TYPES = {
    # -------------------------------------------------------------------------
    # IMAGES
    # -------------------------------------------------------------------------
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "avif": "image/avif",
    "svg": "image/svg+xml",
    "ico": "image/x-icon",
    "bmp": "image/bmp",

    # -------------------------------------------------------------------------
    # VIDEO
    # -------------------------------------------------------------------------
    "mp4": "video/mp4",
    "webm": "video/webm",
    "mov": "video/quicktime",
    "mkv": "video/x-matroska",
    "ts": "video/mp2t",             # HLS segment

    # -------------------------------------------------------------------------
    # AUDIO
    # -------------------------------------------------------------------------
    "wav": "audio/wav",
    "mp3": "audio/mpeg",
    "m4a": "audio/mp4",
    "ogg": "audio/ogg",
    "flac": "audio/flac",

    # -------------------------------------------------------------------------
    # STREAMING MANIFESTS
    # -------------------------------------------------------------------------
    "m3u8": "application/vnd.apple.mpegurl",

    # -------------------------------------------------------------------------
    # DOCUMENTS
    # -------------------------------------------------------------------------
    "pdf": "application/pdf",
    "txt": "text/plain",
    "json": "application/json",
}

MIME_TYPES: Mapping[str, str] = MappingProxyType(_MIME_TYPES)

# Anything we don't recognize is served as opaque bytes
DEFAULT_MIME_TYPE = "application/octet-stream"


def get_mime_type(path: Union[str, Path], default: Optional[str] = None) -> str:
    """
    Get the MIME type for a file based on its extension.

    Args:
        path: File path or name
        default: Fallback for unknown extensions
                 (application/octet-stream if not given)

    Returns:
        The MIME type string. Never raises.

    Examples:
        >>> get_mime_type("/srv/media/clips/intro.MP4")
        'video/mp4'

        >>> get_mime_type("stream/segment003.ts")
        'video/mp2t'

        >>> get_mime_type("README")
        'application/octet-stream'
    """
    extension = Path(path).suffix.lower().lstrip(".")
    return MIME_TYPES.get(extension, default or DEFAULT_MIME_TYPE)
