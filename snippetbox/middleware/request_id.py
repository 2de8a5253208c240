"""
Snippetbox — Request ID Middleware
====================================

What:  Tags every request with a short ID that appears in its log lines and
       in the X-Request-ID response header.
How:   A client-supplied X-Request-ID is reused only if it is a plain token
       (letters, digits, `.`, `_`, `-`; at most 64 characters). Anything else,
       including an absent header, gets a fresh 8-character hex ID. The value
       lives in `request_id_var` for the error handlers and access log.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

_CLIENT_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def choose_request_id(supplied: str | None) -> str:
    """Reuse `supplied` if it is safe to put in a log line, else mint one."""
    if supplied and _CLIENT_ID.fullmatch(supplied):
        return supplied
    return new_request_id()


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = choose_request_id(request.headers.get(REQUEST_ID_HEADER))
        request_id_var.set(rid)

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
