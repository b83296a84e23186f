"""
=============================================================================
MIDDLEWARE CHAIN
=============================================================================

Layers that run around MediaHandler.handle for every parsed request:

    Request ──► layer 1 ──► layer 2 ──► MediaHandler.handle
    Response ◄── layer 1 ◄── layer 2 ◄──┘

The response a layer gets back still holds an unread body stream; the
server sends it only after the whole chain has returned. A layer may
set headers on it but must not iterate `response.stream`.

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, List

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


# The next layer, or MediaHandler.handle itself
NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """A layer around the media handler; call next(request) to continue."""

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        ...


class MiddlewarePipeline:
    """
    Ordered middleware for one server. The first layer added sees the
    request first and the response last.
    """

    def __init__(self):
        self._layers: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        self._layers.append(middleware)
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """Return `handler` with every layer applied, outermost first."""
        for layer in reversed(self._layers):
            handler = _bind(layer, handler)
        return handler


def _bind(layer: Middleware, next_handler: NextHandler) -> NextHandler:
    def call(request: HTTPRequest) -> HTTPResponse:
        return layer(request, next_handler)
    return call
