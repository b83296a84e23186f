"""
=============================================================================
REQUEST HANDLERS
=============================================================================

    paths.py    PathResolver: request path → file inside the media root
    ranges.py   parse_range: Range header → ByteRange
    media.py    MediaHandler: ties both together and builds the response

=============================================================================
"""

from .media import MediaHandler, iter_file
from .paths import PathResolver, ResolvedFile
from .ranges import ByteRange, parse_range

__all__ = [
    "MediaHandler",
    "iter_file",
    "PathResolver",
    "ResolvedFile",
    "ByteRange",
    "parse_range",
]
