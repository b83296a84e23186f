"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes the media server can emit, with their reason phrases.

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  2xx   │ 200 OK               - whole file                         │
    │        │ 206 Partial Content  - one byte range of the file         │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  4xx   │ 400 Bad Request      - malformed HTTP message             │
    │        │ 403 Forbidden        - traversal / escape from media root │
    │        │ 404 Not Found        - empty path, missing, not a file    │
    │        │ 405 Method Not Allowed - unknown request method           │
    │        │ 408 Request Timeout  - client too slow to send headers    │
    │        │ 413 Payload Too Large  - request over max_request_size    │
    │        │ 416 Range Not Satisfiable - range outside the file        │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  5xx   │ 500 Internal Server Error - handler crashed               │
    │        │ 503 Service Unavailable   - worker queue full             │
    │        │ 505 HTTP Version Not Supported                            │
    └────────┴───────────────────────────────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.PARTIAL_CONTENT == 206
        True
        >>> HTTPStatus.PARTIAL_CONTENT.phrase
        'Partial Content'
    """

    # 2xx Success
    OK = 200                            # Whole file sent
    PARTIAL_CONTENT = 206               # Single byte range sent (seeking)

    # 4xx Client Error
    BAD_REQUEST = 400                   # Malformed request syntax
    FORBIDDEN = 403                     # Path traversal or escape from root
    NOT_FOUND = 404                     # Missing file, directory, empty path
    METHOD_NOT_ALLOWED = 405            # Unknown method token
    REQUEST_TIMEOUT = 408               # Headers not received in time
    PAYLOAD_TOO_LARGE = 413             # Request exceeds size limit
    RANGE_NOT_SATISFIABLE = 416         # Range starts past end of file

    # 5xx Server Error
    INTERNAL_SERVER_ERROR = 500         # Unexpected handler failure
    SERVICE_UNAVAILABLE = 503           # Thread pool saturated
    HTTP_VERSION_NOT_SUPPORTED = 505    # Not HTTP/1.0 or HTTP/1.1

    @property
    def phrase(self) -> str:
        """
        Reason phrase for the status line.

            HTTP/1.1 206 Partial Content
                     ─── ───────────────
                      │         └── phrase
                      └──────────── code
        """
        return _STATUS_PHRASES.get(self, "Unknown")


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.PARTIAL_CONTENT: "Partial Content",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.REQUEST_TIMEOUT: "Request Timeout",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.RANGE_NOT_SATISFIABLE: "Range Not Satisfiable",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version Not Supported",
}
