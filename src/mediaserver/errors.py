"""
Media request errors.

Each error ends the request immediately and maps to exactly one HTTP
status. They are raised by the path resolver and the range parser and
translated into responses in one place, MediaHandler.handle().

    MediaError
    ├── NotFound              404  empty path, missing file, not a file
    ├── Forbidden             403  traversal attempt, escape from root
    └── RangeNotSatisfiable   416  range outside the current file size
"""

from .http.status_codes import HTTPStatus


class MediaError(Exception):
    """
    Base class for errors that terminate a media request.

    Like HTTPParseError, the exception carries the status code that
    should be returned to the client.
    """

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(MediaError):
    status_code = HTTPStatus.NOT_FOUND


class Forbidden(MediaError):
    status_code = HTTPStatus.FORBIDDEN


class RangeNotSatisfiable(MediaError):
    """
    The requested byte range cannot be served from a file of `size` bytes.

    The response for this error has an empty body and carries
    `Content-Range: bytes */<size>` so the client learns the real length.
    """

    status_code = HTTPStatus.RANGE_NOT_SATISFIABLE

    def __init__(self, size: int, message: str = "Requested range not satisfiable"):
        super().__init__(message)
        self.size = size

    @property
    def content_range(self) -> str:
        return f"bytes */{self.size}"
