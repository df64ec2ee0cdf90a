"""
Request gate middleware: request id, panic recovery, request deadline.

Registration order in `api/main.py` puts RequestIDMiddleware outermost, then
RecoveryMiddleware, then TimeoutMiddleware. Bearer and tenant checks are route
dependencies (see `auth/dependencies.py`).
"""

from __future__ import annotations

import asyncio
import re
import traceback
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .errors import AppError, ErrorCode, wrap
from .http_errors import REQUEST_ID_HEADER, render_error
from .logging import get_logger

log = get_logger(__name__)

# Caller-supplied ids outside this shape are replaced with a fresh one.
_REQUEST_ID_RE = re.compile(r"[A-Za-z0-9._-]{1,128}")


def _request_id_from(raw: str | None) -> str:
    candidate = (raw or "").strip()
    if _REQUEST_ID_RE.fullmatch(candidate):
        return candidate
    return uuid.uuid4().hex


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a request id to every request/response cycle and to the log context."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = _request_id_from(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.clear_contextvars()
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class RecoveryMiddleware(BaseHTTPMiddleware):
    """
    Convert any unhandled exception into an `internal` error envelope.

    Kinded errors raised by routes are rendered by the exception handlers
    before they get here; this only sees the unexpected ones.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            request_id = str(getattr(request.state, "request_id", "") or "")
            log.error(
                "panic_recovered",
                panic_value=repr(exc),
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                client=request.client.host if request.client else None,
                stack_trace="".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
            )
            err = wrap(exc, ErrorCode.INTERNAL, "internal server error")
            err.fields.update({"panic_value": repr(exc), "recovered": True})
            return render_error(request, err)


class TimeoutMiddleware:
    """
    Per-request deadline.

    Written as plain ASGI so that expiry cancels the handler task itself;
    an open unit of work sees the cancellation and rolls back.
    """

    def __init__(self, app: ASGIApp, timeout_s: float = 30.0) -> None:
        self.app = app
        self.timeout_s = timeout_s

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await asyncio.wait_for(self.app(scope, receive, send_wrapper), timeout=self.timeout_s)
        except asyncio.TimeoutError:
            request = Request(scope)
            log.warning("request_timeout", timeout_s=self.timeout_s, response_started=started)
            if started:
                return
            err = AppError(ErrorCode.INTERNAL, "request timed out", fields={"timeout_s": self.timeout_s})
            response = render_error(request, err)
            await response(scope, receive, send)
