"""
=============================================================================
HTTP RANGE REQUESTS (RFC 7233, single range)
=============================================================================

Browsers seek inside <video> and <audio> elements by asking for a slice
of the file instead of the whole thing:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  GET /clips/intro.mp4 HTTP/1.1                                      │
    │  Range: bytes=1000-1999                                             │
    │                                                                      │
    │  HTTP/1.1 206 Partial Content                                       │
    │  Content-Range: bytes 1000-1999/52428800                            │
    │  Content-Length: 1000                                                │
    │                                                                      │
    │  <exactly 1000 bytes starting at offset 1000>                       │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHAT WE ACCEPT
=============================================================================

    Header                   Result (file of 500 bytes)
    ──────                   ──────────────────────────
    (absent)                 None → 200, whole file
    bytes=0-99               ByteRange(0, 99)      → 206
    bytes=100-               ByteRange(100, 499)   → 206
    bytes=400-9999           ByteRange(400, 499)   → 206 (end clamped)
    bytes=500-               RangeNotSatisfiable   → 416
    bytes=50-10              RangeNotSatisfiable   → 416
    bytes=0-10,20-30         RangeNotSatisfiable   → 416 (no multipart)
    bytes=-100, items=0-5    None → 200, whole file (not our pattern)

Anything that does not look like `bytes=<start>-<end?>` is ignored and
the whole file is sent. Clients that send something odd still get a
playable response instead of an error.

=============================================================================
"""

import re
from dataclasses import dataclass
from typing import Optional

from ..errors import RangeNotSatisfiable


# bytes=<start>-<end?>, unit name is case-insensitive per RFC 7233
RANGE_PATTERN = re.compile(r"^bytes=(\d+)-(\d*)$", re.IGNORECASE)


@dataclass(frozen=True)
class ByteRange:
    """
    An inclusive slice [start, end] of a file of `size` bytes.

    Always satisfies 0 <= start <= end <= size - 1; parse_range() never
    builds one that doesn't.
    """

    start: int
    end: int
    size: int

    @property
    def length(self) -> int:
        """Number of bytes in the slice (the Content-Length of a 206)."""
        return self.end - self.start + 1

    @property
    def content_range(self) -> str:
        """Value of the Content-Range header for a 206 response."""
        return f"bytes {self.start}-{self.end}/{self.size}"


def parse_range(header: Optional[str], size: int) -> Optional[ByteRange]:
    """
    Parse a Range header against a file of `size` bytes.

    Args:
        header: Raw Range header value, or None if the request had none.
        size: Current size of the file in bytes.

    Returns:
        A ByteRange to serve, or None to serve the whole file.

    Raises:
        RangeNotSatisfiable: The range starts past the end of the file,
            ends before it starts, or asks for more than one range.
    """
    if not header:
        return None

    value = header.strip()

    if value.lower().startswith("bytes=") and "," in value:
        raise RangeNotSatisfiable(size, "Multiple ranges are not supported")

    match = RANGE_PATTERN.match(value)
    if not match:
        return None

    start = int(match.group(1))
    end = int(match.group(2)) if match.group(2) else size - 1

    if start > size - 1 or end < start:
        raise RangeNotSatisfiable(size)

    return ByteRange(start=start, end=min(end, size - 1), size=size)
