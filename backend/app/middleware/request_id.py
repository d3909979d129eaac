"""
Foods API Backend — Request ID Middleware
===========================================

What:  Assigns a correlation ID to each request and echoes it in the response.
How:   Accepts the client's X-Request-ID when it is a short token of safe
       characters, otherwise generates an 8-character hex ID; stores it in
       a ContextVar and request.state.
Who:   Read by the access log middleware and every exception handler, which
       copy it into log lines and error bodies.

Accepted client IDs:
    "trace-42", "3f2c9a1b", "web.checkout_7"   → reused
    "", "a b", "<script>", 65+ characters      → replaced
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"

_CLIENT_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def resolve_request_id(client_value: Optional[str]) -> str:
    """The client's ID if it is safe to log and echo, else a fresh one."""
    if client_value and _CLIENT_ID.match(client_value):
        return client_value
    return new_request_id()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tags every request/response pair with an X-Request-ID."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        # Left set after the call: the catch-all 500 handler runs outside
        # this middleware and still reads it
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
