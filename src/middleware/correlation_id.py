"""Correlation ID middleware so one webhook delivery can be traced end to end."""

import uuid
from typing import Callable

import logfire
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

CORRELATION_HEADER = "X-Correlation-ID"


def _webhook_source(path: str) -> str:
    if path.startswith("/telegram"):
        return "telegram"
    if path.startswith("/webhook"):
        return "facebook"
    return "other"


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """Attach a correlation id to every request and its Logfire span.

    An incoming X-Correlation-ID header is reused; otherwise a UUID4 is
    generated. The id is echoed back in the response headers and stored
    on ``request.state.correlation_id``.
    """

    def __init__(self, app: ASGIApp, header_name: str = CORRELATION_HEADER):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        with logfire.span(
            "webhook {source} {path}",
            source=_webhook_source(request.url.path),
            path=request.url.path,
            correlation_id=correlation_id,
        ):
            response = await call_next(request)
        response.headers[self.header_name] = correlation_id
        return response
