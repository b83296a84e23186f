"""
Unit tests for HTTP response building.
"""

from datetime import datetime, timedelta, timezone

import pytest

from mediaserver.http.response import (
    HTTPResponse,
    ResponseBuilder,
    HTTPStatus,
    error_response,
    internal_error,
    format_http_date,
)


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        assert HTTPResponse(status=HTTPStatus.OK).status_line == "HTTP/1.1 200 OK"
        assert (HTTPResponse(status=HTTPStatus.PARTIAL_CONTENT).status_line
                == "HTTP/1.1 206 Partial Content")
        assert (HTTPResponse(status=HTTPStatus.RANGE_NOT_SATISFIABLE).status_line
                == "HTTP/1.1 416 Range Not Satisfiable")

    def test_to_bytes_includes_headers(self):
        response = HTTPResponse(
            status=HTTPStatus.OK,
            headers={"X-Custom": "value"},
            body=b"test",
        )

        result = response.to_bytes()

        assert result.startswith(b"HTTP/1.1 200 OK\r\n")
        assert b"X-Custom: value\r\n" in result
        assert b"Content-Length: 4\r\n" in result
        assert b"Server: MediaServer/1.0\r\n" in result
        assert result.endswith(b"\r\n\r\ntest")

    def test_head_bytes_keeps_declared_length(self):
        response = ResponseBuilder().stream(iter([b"abc"]), length=3).build()

        head = response.head_bytes()

        assert b"Content-Length: 3\r\n" in head
        assert head.endswith(b"\r\n\r\n")

    def test_to_bytes_rejects_streamed(self):
        response = ResponseBuilder().stream(iter([b"abc"]), length=3).build()

        with pytest.raises(ValueError):
            response.to_bytes()

    def test_iter_body(self):
        assert list(HTTPResponse(body=b"xyz").iter_body()) == [b"xyz"]
        assert list(HTTPResponse().iter_body()) == []

        streamed = ResponseBuilder().stream(iter([b"a", b"b"]), length=2).build()
        assert b"".join(streamed.iter_body()) == b"ab"

    def test_content_length(self):
        assert HTTPResponse(body=b"hello").content_length == 5
        assert HTTPResponse(headers={"Content-Length": "0"}).content_length == 0

    def test_close_closes_stream(self):
        closed = []

        def chunks():
            try:
                yield b"first"
                yield b"second"
            finally:
                closed.append(True)

        response = ResponseBuilder().stream(chunks(), length=11).build()
        body = response.iter_body()
        assert next(body) == b"first"

        response.close()

        assert closed == [True]

    def test_close_without_stream(self):
        HTTPResponse(body=b"x").close()  # No error

    def test_set_header_chaining(self):
        response = (HTTPResponse()
            .set_header("X-One", "1")
            .set_header("X-Two", "2"))

        assert response.headers == {"X-One": "1", "X-Two": "2"}


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_defaults(self):
        response = ResponseBuilder().build()
        assert response.status == HTTPStatus.OK
        assert response.body == b""
        assert not response.is_streamed

    def test_media_headers(self):
        response = (ResponseBuilder()
            .content_type("video/mp4")
            .no_sniff()
            .accept_ranges()
            .build())

        assert response.headers["Content-Type"] == "video/mp4"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["Accept-Ranges"] == "bytes"

    def test_cache_headers(self):
        now = datetime(2026, 10, 19, 10, 0, 0, tzinfo=timezone.utc)

        response = ResponseBuilder().cache(31536000, now=now).build()

        assert response.headers["Cache-Control"] == "public, max-age=31536000"
        assert response.headers["Expires"] == "Tue, 19 Oct 2027 10:00:00 GMT"

    def test_text_body(self):
        response = ResponseBuilder().text("Not a file: x").build()

        assert response.headers["Content-Type"] == "text/plain; charset=utf-8"
        assert response.body == b"Not a file: x"

    def test_body_replaces_stream(self):
        response = (ResponseBuilder()
            .stream(iter([b"a"]), length=1)
            .body(b"plain")
            .build())

        assert not response.is_streamed
        assert response.body == b"plain"


class TestConvenienceFunctions:

    def test_error_response(self):
        response = error_response(HTTPStatus.BAD_REQUEST, "nope")
        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.body == b"nope"

    def test_internal_error_is_generic(self):
        response = internal_error()
        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.body == b"Internal Server Error"


class TestFormatHttpDate:

    def test_format(self):
        dt = datetime(2026, 1, 1, 12, 0, 0)
        assert format_http_date(dt) == "Thu, 01 Jan 2026 12:00:00 GMT"

    def test_aware_datetime_converted_to_utc(self):
        tz = timezone(timedelta(hours=2))
        dt = datetime(2026, 1, 1, 14, 0, 0, tzinfo=tz)
        assert format_http_date(dt) == "Thu, 01 Jan 2026 12:00:00 GMT"
