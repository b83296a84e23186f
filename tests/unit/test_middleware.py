"""
Unit tests for the middleware pipeline and access logging.
"""

import json
import logging

import pytest

from mediaserver.http import HTTPRequest, HTTPResponse, HTTPStatus, ResponseBuilder
from mediaserver.middleware import LoggingMiddleware, Middleware, MiddlewarePipeline


class Recorder(Middleware):
    """Appends its tag to a shared list before and after the handler."""

    def __init__(self, tag: str, calls: list):
        self.tag = tag
        self.calls = calls

    def __call__(self, request, next):
        self.calls.append(f"{self.tag}:before")
        response = next(request)
        self.calls.append(f"{self.tag}:after")
        return response


class ShortCircuit(Middleware):
    def __call__(self, request, next):
        return ResponseBuilder().status(HTTPStatus.FORBIDDEN).text("blocked").build()


def ok_handler(request: HTTPRequest) -> HTTPResponse:
    return ResponseBuilder().text("ok").build()


def make_request(**headers) -> HTTPRequest:
    return HTTPRequest(
        method="GET",
        path="/clip.mp4",
        headers={k.replace("_", "-"): v for k, v in headers.items()},
        client_address=("10.1.2.3", 40000),
    )


class TestMiddlewarePipeline:

    def test_empty_pipeline_returns_handler(self):
        assert MiddlewarePipeline().wrap(ok_handler) is ok_handler

    def test_order(self):
        calls = []
        pipeline = MiddlewarePipeline().add(Recorder("a", calls)).add(Recorder("b", calls))

        pipeline.wrap(ok_handler)(make_request())

        assert calls == ["a:before", "b:before", "b:after", "a:after"]

    def test_short_circuit(self):
        handled = []

        def handler(request):
            handled.append(request)
            return ok_handler(request)

        response = MiddlewarePipeline().add(ShortCircuit()).wrap(handler)(make_request())

        assert response.status == HTTPStatus.FORBIDDEN
        assert handled == []


class TestLoggingMiddleware:

    def test_text_log_line(self, caplog):
        middleware = LoggingMiddleware()

        with caplog.at_level(logging.INFO, logger="mediaserver.access"):
            response = middleware(make_request(range="bytes=0-99"), ok_handler)

        assert len(caplog.records) == 1
        line = caplog.records[0].getMessage()
        assert line.startswith("10.1.2.3 - - [")
        assert '"GET /clip.mp4" 200 2 ' in line
        assert line.endswith("range=bytes=0-99")
        assert len(response.headers["X-Request-ID"]) == 8

    def test_json_log_line(self, caplog):
        def partial(request):
            return (ResponseBuilder()
                .status(HTTPStatus.PARTIAL_CONTENT)
                .stream(iter([b"x" * 100]), length=100)
                .build())

        middleware = LoggingMiddleware(log_format="json")

        with caplog.at_level(logging.INFO, logger="mediaserver.access"):
            response = middleware(make_request(range="bytes=0-99", user_agent="vlc"), partial)

        entry = json.loads(caplog.records[0].getMessage())
        assert entry["status_code"] == 206
        assert entry["content_length"] == 100
        assert entry["range"] == "bytes=0-99"
        assert entry["user_agent"] == "vlc"
        assert entry["request_id"] == response.headers["X-Request-ID"]

        # The body is left for the server to stream
        assert b"".join(response.iter_body()) == b"x" * 100

    def test_skip_paths(self, caplog):
        middleware = LoggingMiddleware(skip_paths=["/clip.mp4"])

        with caplog.at_level(logging.INFO, logger="mediaserver.access"):
            middleware(make_request(), ok_handler)

        assert caplog.records == []

    def test_without_request_id(self):
        response = LoggingMiddleware(include_request_id=False)(make_request(), ok_handler)
        assert "X-Request-ID" not in response.headers

    def test_handler_error_is_logged_and_reraised(self, caplog):
        def broken(request):
            raise RuntimeError("disk gone")

        with caplog.at_level(logging.ERROR, logger="mediaserver.access"):
            with pytest.raises(RuntimeError):
                LoggingMiddleware()(make_request(), broken)

        assert "RuntimeError: disk gone" in caplog.records[0].getMessage()
