"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds HTTPResponse objects and serializes their head to bytes.

=============================================================================
BUFFERED VS STREAMED BODIES
=============================================================================

A media file can be gigabytes long, so a response body comes in one of
two shapes:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   BUFFERED (error messages, 416)      STREAMED (file content)       │
    │   ──────────────────────────────      ───────────────────────       │
    │   body=b"File not found: x.mp4"       stream=<iterator of chunks>   │
    │   Content-Length = len(body)          Content-Length set by handler │
    │   to_bytes() → head + body            head sent, then each chunk    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A streamed response never holds more than one chunk in memory. The
server is responsible for close()-ing the stream once it is done with
it, whether the stream was fully sent, cut short by a disconnect, or
skipped entirely for a HEAD request.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Iterable, Iterator, Union

from .status_codes import HTTPStatus


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

    Attributes:
        status:  HTTP status code
        headers: Response headers (names as sent on the wire)
        body:    Buffered body bytes
        stream:  Iterable of body chunks; takes precedence over `body`
        version: HTTP version for the status line
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    stream: Optional[Iterable[bytes]] = field(default=None, repr=False)
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """Status line, e.g. "HTTP/1.1 206 Partial Content"."""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    @property
    def is_streamed(self) -> bool:
        return self.stream is not None

    @property
    def content_length(self) -> int:
        """Declared body size: the Content-Length header, else len(body)."""
        declared = self.headers.get("Content-Length")
        if declared is not None:
            return int(declared)
        return len(self.body)

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a response header. Returns self for chaining."""
        self.headers[name] = value
        return self

    def iter_body(self) -> Iterator[bytes]:
        """Yield the body as chunks, whichever shape it has."""
        if self.stream is not None:
            yield from self.stream
        elif self.body:
            yield self.body

    def close(self) -> None:
        """Release the body stream (closes the underlying file, if any)."""
        close = getattr(self.stream, "close", None)
        if close is not None:
            close()

    def head_bytes(self, server_name: str = "MediaServer/1.0") -> bytes:
        """
        Serialize the status line and headers.

            HTTP/1.1 200 OK\\r\\n
            Content-Type: video/mp4\\r\\n
            Content-Length: 52428800\\r\\n
            Date: Mon, 19 Oct 2026 10:00:00 GMT\\r\\n
            Server: MediaServer/1.0\\r\\n
            \\r\\n

        Content-Length, Date and Server are added when missing.
        """
        response_headers = dict(self.headers)

        if "Content-Length" not in response_headers:
            response_headers["Content-Length"] = str(len(self.body))

        if "Date" not in response_headers:
            response_headers["Date"] = format_http_date(datetime.now(timezone.utc))

        if "Server" not in response_headers:
            response_headers["Server"] = server_name

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        return "\r\n".join(lines).encode("utf-8") + b"\r\n"

    def to_bytes(self, server_name: str = "MediaServer/1.0") -> bytes:
        """
        Serialize a buffered response completely.

        Raises:
            ValueError: For streamed responses, which must be sent chunk
                        by chunk with head_bytes() + iter_body().
        """
        if self.stream is not None:
            raise ValueError("Streamed responses cannot be serialized in one piece")
        return self.head_bytes(server_name) + self.body


class ResponseBuilder:
    """
    Fluent builder for constructing HTTP responses.

        response = (ResponseBuilder()
            .status(HTTPStatus.PARTIAL_CONTENT)
            .content_type("video/mp4")
            .no_sniff()
            .cache(max_age=31536000)
            .header("Content-Range", "bytes 0-99/1000")
            .stream(chunks, length=100)
            .build())

    Every method but build() returns self.
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""
        self._stream: Optional[Iterable[bytes]] = None

    # =========================================================================
    # STATUS & HEADERS
    # =========================================================================

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    def no_sniff(self) -> "ResponseBuilder":
        """
        Forbid MIME sniffing.

        Without it, a browser may decide an uploaded "image" is really
        HTML and render it, running any script inside.
        """
        return self.header("X-Content-Type-Options", "nosniff")

    def accept_ranges(self) -> "ResponseBuilder":
        """Advertise byte-range support so players enable seeking."""
        return self.header("Accept-Ranges", "bytes")

    def cache(self, max_age: int, now: Optional[datetime] = None) -> "ResponseBuilder":
        """
        Add public caching headers.

        Sets both the HTTP/1.1 directive and an absolute HTTP/1.0 expiry:

            Cache-Control: public, max-age=31536000
            Expires: Tue, 19 Oct 2027 10:00:00 GMT

        Args:
            max_age: Freshness lifetime in seconds
            now: Reference time for Expires (defaults to the current time)
        """
        now = now or datetime.now(timezone.utc)
        self._headers["Cache-Control"] = f"public, max-age={max_age}"
        self._headers["Expires"] = format_http_date(now + timedelta(seconds=max_age))
        return self

    # =========================================================================
    # BODY
    # =========================================================================

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        if isinstance(body, str):
            self._body = body.encode("utf-8")
        else:
            self._body = body
        self._stream = None
        return self

    def text(self, text: str, content_type: str = "text/plain; charset=utf-8") -> "ResponseBuilder":
        """Set a plain text body and its Content-Type."""
        self._headers["Content-Type"] = content_type
        return self.body(text)

    def stream(self, chunks: Iterable[bytes], length: int) -> "ResponseBuilder":
        """
        Set a streamed body.

        Args:
            chunks: Iterable producing the body in pieces
            length: Total number of bytes the stream will produce;
                    becomes Content-Length
        """
        self._body = b""
        self._stream = chunks
        self._headers["Content-Length"] = str(length)
        return self

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=self._headers,
            body=self._body,
            stream=self._stream,
        )


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231 IMF-fixdate, RFC 1123 style).

        Wed, 01 Jan 2026 12:00:00 GMT

    HTTP dates are always GMT. Aware datetimes are converted to UTC first;
    naive datetimes are assumed to already be UTC.

    Month and day names are spelled out here instead of using strftime,
    which would follow the process locale.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# Short plain-text error responses. Media clients show these at most in a
# console, so there is no JSON envelope.
#
# =============================================================================

def error_response(status: HTTPStatus, message: str) -> HTTPResponse:
    """Build a plain-text error response with the given status."""
    return ResponseBuilder().status(status).text(message).build()


def internal_error(message: str = "Internal Server Error") -> HTTPResponse:
    """
    500 Internal Server Error.

    Keep the message generic; details belong in the server log.
    """
    return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, message)
