"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Parses raw HTTP/1.1 request bytes into structured HTTPRequest objects.
Implements the parts of RFC 7230 a media server needs.

=============================================================================
WHAT THE MEDIA HANDLER READS FROM A REQUEST
=============================================================================

    GET /clips/intro%20final.mp4?t=30 HTTP/1.1\r\n
    Host: localhost:8080\r\n
    Range: bytes=1048576-\r\n
    \r\n

        request.path   → "/clips/intro final.mp4"   (decoded, no query)
        request.host   → "localhost:8080"           (dev-prefix decision)
        request.range  → "bytes=1048576-"           (partial content)

Everything else (method, version, other headers) is parsed for the server
loop and the access log, not for the handler.

=============================================================================
PATH TRAVERSAL IS NOT REJECTED HERE
=============================================================================

A path like /../../etc/passwd parses fine. Traversal is a *media*
decision with its own status (403) and message, so the request is passed
through untouched and the path resolver rejects it. Rejecting here would
turn the attack into a 400 and hide it from the resolver's log.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Optional, Dict
from urllib.parse import parse_qs, urlparse, unquote
import re


class HTTPParseError(Exception):
    """
    Raised when HTTP request parsing fails.

    Carries the HTTP status code to return to the client:

        400 Bad Request                - Malformed request syntax
        405 Method Not Allowed         - Unknown method token
        413 Payload Too Large          - Request exceeds size limit
        505 HTTP Version Not Supported - Not HTTP/1.0 or HTTP/1.1
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code  # HTTP status to return


@dataclass
class HTTPRequest:
    """
    Represents a parsed HTTP request.

    Attributes:
        method:         GET, HEAD, ... (the media handler treats all as GET)
        path:           Percent-decoded path WITHOUT query string
        version:        "HTTP/1.1" or "HTTP/1.0", affects keep-alive
        headers:        Header dict with LOWERCASE keys
        query_params:   Parsed query string, dict of lists
        body:           Raw body bytes (normally empty for media requests)
        client_address: (ip, port) of the client, for the access log
        raw:            The original unparsed request bytes
    """

    method: str
    path: str
    version: str = "HTTP/1.1"

    headers: Dict[str, str] = field(default_factory=dict)
    query_params: Dict[str, list[str]] = field(default_factory=dict)
    body: bytes = b""

    client_address: tuple[str, int] = ("", 0)
    raw: bytes = b""

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def host(self) -> str:
        """
        Get the Host header value.

        The media handler inspects it to recognize local development
        hosts, where URLs carry an extra subdomain-style prefix.
        """
        return self.headers.get("host", "")

    @property
    def range(self) -> Optional[str]:
        """Get the Range header value, or None when the client sent none."""
        return self.headers.get("range")

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent", "")

    @property
    def query_string(self) -> str:
        """Re-joined query string for logging ("" when there is none)."""
        return "&".join(
            f"{name}={value}"
            for name, values in self.query_params.items()
            for value in values
        )

    @property
    def is_keep_alive(self) -> bool:
        """
        Check if this connection should be kept alive.

            HTTP/1.1: keep alive unless "Connection: close"
            HTTP/1.0: close unless "Connection: keep-alive"

        Players issue many range requests while seeking, so reusing the
        TCP connection matters here.
        """
        connection = self.headers.get("connection", "").lower()

        if self.version == "HTTP/1.1":
            return connection != "close"
        else:
            return connection == "keep-alive"


class RequestParser:
    """
    Parses raw HTTP request bytes into HTTPRequest objects.

        Raw Request Bytes
              │
              ▼
        1. Size check ............. too large? → HTTPParseError(413)
        2. Split at \\r\\n\\r\\n ...... missing?   → HTTPParseError(400)
        3. Request line ........... METHOD SP URI SP VERSION
                                    bad? → HTTPParseError(400/405/505)
        4. Headers ................ "Name: Value", names lowercased
        5. Body ................... exactly Content-Length bytes
              │
              ▼
        HTTPRequest
    """

    VALID_METHODS = {
        "GET",
        "HEAD",
        "POST",
        "PUT",
        "DELETE",
        "PATCH",
        "OPTIONS",
        "TRACE",
        "CONNECT",
    }

    REQUEST_LINE_PATTERN = re.compile(r"^([A-Z]+) ([^ ]+) (HTTP/\d\.\d)$")
    HEADER_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")

    def __init__(self, max_request_size: int = 10 * 1024 * 1024):
        """
        Args:
            max_request_size: Maximum allowed request size in bytes.
                              Larger requests are rejected with 413.
        """
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Parse raw HTTP request data into an HTTPRequest object.

        Args:
            data: Raw HTTP request bytes from socket.
            client_address: Client's (ip, port) tuple for logging.

        Returns:
            Parsed HTTPRequest object.

        Raises:
            HTTPParseError: If the request is malformed.
        """
        if len(data) > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: {len(data)} bytes",
                status_code=413
            )

        header_end = data.find(b"\r\n\r\n")
        if header_end == -1:
            raise HTTPParseError("Incomplete request: no header terminator")

        header_section = data[:header_end].decode("utf-8", errors="replace")
        body = data[header_end + 4:]

        lines = header_section.split("\r\n")
        if not lines or not lines[0]:
            raise HTTPParseError("Empty request")

        method, path, query_params, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        try:
            content_length = int(headers.get("content-length", 0))
        except ValueError:
            raise HTTPParseError("Invalid Content-Length header")

        if len(body) < content_length:
            raise HTTPParseError(
                f"Incomplete body: expected {content_length} bytes, got {len(body)}"
            )

        # Extra bytes belong to the next pipelined request
        body = body[:content_length]

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            query_params=query_params,
            body=body,
            client_address=client_address,
            raw=data,
        )

    def _parse_request_line(
        self,
        line: str
    ) -> tuple[str, str, Dict[str, list[str]], str]:
        """
        Parse "METHOD SP REQUEST-URI SP HTTP-VERSION".

        Returns:
            Tuple of (method, decoded path, query_params, version)

        Raises:
            HTTPParseError: If line is malformed
        """
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise HTTPParseError(f"Invalid request line: {line}")

        method, uri, version = match.groups()

        if method not in self.VALID_METHODS:
            raise HTTPParseError(f"Invalid method: {method}", status_code=405)

        if version not in ("HTTP/1.0", "HTTP/1.1"):
            raise HTTPParseError(
                f"Unsupported HTTP version: {version}",
                status_code=505
            )

        # "/a%20b.mp4?t=3" → path "/a b.mp4", query {"t": ["3"]}
        parsed = urlparse(uri)
        path = unquote(parsed.path) or "/"
        query_params = parse_qs(parsed.query, keep_blank_values=True)

        return method, path, query_params, version

    def _parse_headers(self, lines: list[str]) -> Dict[str, str]:
        """
        Parse header lines into a dict with lowercase names.

        Handles obsolete line folding (continuation lines starting with
        whitespace) and joins repeated headers with ", " per RFC 7230.
        """
        headers: Dict[str, str] = {}
        current_name = None
        current_value = None

        for line in lines:
            if not line:
                continue

            if line[0] in (" ", "\t"):
                if current_name is not None:
                    current_value += " " + line.strip()
                    headers[current_name] = current_value
                continue

            match = self.HEADER_PATTERN.match(line)
            if not match:
                continue  # Lenient: skip malformed header lines

            name, value = match.groups()
            name = name.strip().lower()
            value = value.strip()

            current_name = name
            current_value = value

            if name in headers:
                headers[name] += ", " + value
            else:
                headers[name] = value

        return headers
