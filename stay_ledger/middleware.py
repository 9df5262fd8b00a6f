"""
FastAPI middleware for request tracing and correlation.

Every request gets an id that is echoed back in the ``X-Request-ID`` header and
bound into structlog contextvars, so all log events emitted while handling the
request carry it.
"""

from __future__ import annotations

import uuid
from typing import Awaitable, Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Attach a request id to each HTTP request.

    An inbound ``X-Request-ID`` from an upstream proxy is reused; otherwise a
    UUID4 is generated. The id is:
    1. Stored in request.state.request_id for route handlers
    2. Bound as ``request_id`` in structlog contextvars for the request's duration
    3. Returned in the X-Request-ID response header

    Example:
        >>> from stay_ledger.middleware import RequestIDMiddleware
        >>> app.add_middleware(RequestIDMiddleware)
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
