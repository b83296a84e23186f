"""
=============================================================================
ACCESS LOGGING MIDDLEWARE
=============================================================================

One log line per request on the "mediaserver.access" logger, in either
Apache-style text or JSON:

    text:
        127.0.0.1 - - [19/Oct/2026:10:00:00 +0000] "GET /clips/intro.mp4" 206 1048576 0.41ms range=bytes=0-1048575

    json:
        {"request_id": "3f2a9c1e", "method": "GET", "path": "/clips/intro.mp4",
         "range": "bytes=0-1048575", "status_code": 206, "content_length": 1048576, ...}

Media responses are streamed after the middleware chain returns, so
`content_length` is the declared body size and `duration_ms` covers
resolving the file and building the response, not the transfer itself.

Every response gets an X-Request-ID header matching its log line.

=============================================================================
"""

import time
import json
import uuid
import logging
from typing import Optional
from dataclasses import dataclass, asdict

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger("mediaserver.access")


@dataclass
class RequestLog:
    """
    Structured log entry for a request.

    request_id:     Short random ID, echoed in X-Request-ID
    method:         HTTP method
    path:           Decoded request path
    query:          Query string ("" when absent)
    range:          Range header as sent ("" when absent)
    client_ip:      Client's IP address
    user_agent:     Client identifier
    status_code:    HTTP response code
    content_length: Declared response body size in bytes
    duration_ms:    Time spent producing the response
    timestamp:      When the request was processed
    """

    request_id: str
    method: str
    path: str
    query: str
    range: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        line = (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )
        if self.range:
            line += f" range={self.range}"
        return line


class LoggingMiddleware(Middleware):
    """
    Request logging middleware. Add it first so it sees every request.

        pipeline.add(LoggingMiddleware(log_format="json"))
    """

    def __init__(
        self,
        log_format: str = "text",
        include_request_id: bool = True,
        log_level: int = logging.INFO,
        skip_paths: Optional[list[str]] = None,
    ):
        """
        Args:
            log_format: "text" (Apache style) or "json".
            include_request_id: Add X-Request-ID header to responses.
            log_level: Level used for access log lines.
            skip_paths: Request paths that are never logged.
        """
        self.log_format = log_format
        self.include_request_id = include_request_id
        self.log_level = log_level
        self.skip_paths = set(skip_paths or [])

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        request_id = str(uuid.uuid4())[:8]
        start_time = time.time()

        try:
            response = next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.path} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.time() - start_time) * 1000

        if self.include_request_id:
            response.headers["X-Request-ID"] = request_id

        if request.path in self.skip_paths:
            return response

        log_entry = RequestLog(
            request_id=request_id,
            method=request.method,
            path=request.path,
            query=request.query_string,
            range=request.range or "",
            client_ip=request.client_address[0],
            user_agent=request.user_agent or "-",
            status_code=int(response.status),
            content_length=response.content_length,
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(log_entry.to_dict()))
        else:
            logger.log(self.log_level, log_entry.to_text())

        return response
