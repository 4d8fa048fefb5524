"""
ASGI middleware: request ids, access logging and handler timeouts.

Install order matters. Starlette wraps middleware in reverse order of
``add_middleware`` calls, so the request id must be added last to be the
outermost layer and be visible to the access log.
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable, Optional

from starlette.datastructures import Headers, MutableHeaders
from starlette.responses import PlainTextResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from shared_utils.constants import Headers as HeaderNames, LogScope, ResponseText
from shared_utils.logging_utils import get_scoped_logger

logger = get_scoped_logger(LogScope.MIDDLEWARE)

UNKNOWN_REQUEST_ID = "unknown"


def next_request_id() -> str:
    """Request id derived from the wall clock in nanoseconds."""
    return str(time.time_ns())


def request_id_from_scope(scope: Scope) -> str:
    """Request id stored by RequestIdMiddleware, or ``"unknown"``."""
    return scope.get("state", {}).get("request_id", UNKNOWN_REQUEST_ID)


class RequestIdMiddleware:
    """Tags each request with an id and echoes it in ``X-Request-Id``.

    The id comes from the inbound header when present, else from
    ``id_factory``. Handlers read it from ``request.state.request_id``.
    """

    def __init__(
        self,
        app: ASGIApp,
        header_name: str = HeaderNames.REQUEST_ID,
        id_factory: Callable[[], str] = next_request_id,
    ) -> None:
        self.app = app
        self.header_name = header_name
        self.id_factory = id_factory

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = Headers(scope=scope).get(self.header_name) or self.id_factory()
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_with_request_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message)[self.header_name] = request_id
            await send(message)

        await self.app(scope, receive, send_with_request_id)


class AccessLogMiddleware:
    """Logs every completed request, whatever its outcome."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        status_code: Optional[int] = None

        async def send_capturing_status(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_capturing_status)
        finally:
            client = scope.get("client")
            logger.info(
                "request_completed",
                request_id=request_id_from_scope(scope),
                method=scope.get("method"),
                path=scope.get("path"),
                remote_addr=f"{client[0]}:{client[1]}" if client else None,
                user_agent=Headers(scope=scope).get("user-agent", ""),
                status=status_code,
                duration_ms=round((time.perf_counter() - start) * 1000, 1),
            )


class HandlerTimeoutMiddleware:
    """Caps handler time. Answers 504 if nothing was sent before the deadline.

    The timed-out handler is cancelled but not awaited: work already running
    in a worker thread (a remote fetch) finishes on its own and its response
    is dropped.
    """

    def __init__(self, app: ASGIApp, timeout_seconds: float) -> None:
        self.app = app
        self.timeout_seconds = timeout_seconds

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        timed_out = False
        response_started = False

        async def guarded_send(message: Message) -> None:
            nonlocal response_started
            if timed_out:
                return
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        task = asyncio.ensure_future(self.app(scope, receive, guarded_send))
        done, _ = await asyncio.wait({task}, timeout=self.timeout_seconds)
        if task in done:
            task.result()
            return

        timed_out = True
        task.cancel()
        task.add_done_callback(_consume_result)
        logger.warning(
            "handler_timed_out",
            request_id=request_id_from_scope(scope),
            path=scope.get("path"),
            timeout_seconds=self.timeout_seconds,
            response_started=response_started,
        )
        if not response_started:
            response = PlainTextResponse(ResponseText.GATEWAY_TIMEOUT, status_code=504)
            await response(scope, receive, send)


def _consume_result(task: "asyncio.Future[None]") -> None:
    """Retrieve the outcome of an abandoned handler so it is not reported."""
    if not task.cancelled() and task.exception() is not None:
        logger.warning("abandoned_handler_failed", error=str(task.exception()))
