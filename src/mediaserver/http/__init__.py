"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Translates between raw bytes on the socket and structured messages.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ request.py       bytes → HTTPRequest (path decoded, headers lower)  │
    │ response.py      HTTPResponse → head bytes + body chunks            │
    │ status_codes.py  HTTPStatus enum with reason phrases                │
    │ mime_types.py    file extension → Content-Type                      │
    └─────────────────────────────────────────────────────────────────────┘

Nothing in this package knows about the media root; that lives in
mediaserver.handlers.

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError
from .response import (
    HTTPResponse,
    ResponseBuilder,
    format_http_date,
    error_response,
    internal_error,
)
from .status_codes import HTTPStatus
from .mime_types import MIME_TYPES, DEFAULT_MIME_TYPE, get_mime_type

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "format_http_date",
    "error_response",
    "internal_error",

    # Status codes
    "HTTPStatus",

    # MIME types
    "MIME_TYPES",
    "DEFAULT_MIME_TYPE",
    "get_mime_type",
]
