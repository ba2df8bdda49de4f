"""Correlation ID middleware for tracing a webhook delivery through the logs."""

import uuid
from typing import Callable

import logfire
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

CORRELATION_ID_HEADER = "X-Correlation-ID"


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Tag every request with a correlation ID.

    An incoming ``X-Correlation-ID`` header is reused, otherwise a UUID is
    generated. The ID is stored on ``request.state``, attached to a logfire
    span around the request and echoed in the response header.
    """

    def __init__(self, app: ASGIApp, header_name: str = CORRELATION_ID_HEADER):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get(self.header_name.lower()) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        with logfire.span("request", correlation_id=correlation_id, path=request.url.path):
            response = await call_next(request)

        response.headers[self.header_name] = correlation_id
        return response
