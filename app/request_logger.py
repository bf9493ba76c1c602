"""Access log middleware — one record per HTTP request."""

from __future__ import annotations

import logging
import time
import uuid
from contextvars import ContextVar

from starlette.types import ASGIApp, Message, Receive, Scope, Send

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

logger = logging.getLogger("app.request")


def get_request_id() -> str | None:
    return request_id_ctx.get()


class RequestLoggingMiddleware:
    """Logs method, path, status and latency; propagates X-Request-ID."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        req_id = headers.get(b"x-request-id", b"").decode() or uuid.uuid4().hex
        request_id_ctx.set(req_id)

        start = time.perf_counter()
        status_code: int | None = None

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                out = list(message.get("headers", []))
                out.append((b"x-request-id", req_id.encode()))
                message["headers"] = out
            await send(message)

        await self.app(scope, receive, send_wrapper)

        logger.info(
            "HTTP request",
            extra={
                "method": scope["method"],
                "path": scope["path"],
                "status_code": status_code,
                "duration_ms": round((time.perf_counter() - start) * 1000, 2),
                "request_id": req_id,
            },
        )
