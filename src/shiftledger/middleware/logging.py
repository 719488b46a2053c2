"""Request ID propagation and access logging."""

import time
import uuid

import structlog
from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from shiftledger.core.logging import get_logger, set_request_id

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware:
    """
    Bind a request ID to every log line of a request.

    An incoming X-Request-ID is reused, otherwise a UUID is generated.
    The ID goes back out on the response.
    """

    def __init__(self, app: ASGIApp):
        self.app = app
        self.logger = get_logger(__name__)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        structlog.contextvars.clear_contextvars()
        request_id = Headers(scope=scope).get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        set_request_id(request_id)

        started = time.perf_counter()
        self.logger.info("request.start", method=scope["method"], path=scope["path"])

        async def send_with_request_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message).append(REQUEST_ID_HEADER, request_id)
                self.logger.info(
                    "request.complete",
                    status_code=message["status"],
                    duration_ms=round((time.perf_counter() - started) * 1000, 2),
                )
            await send(message)

        await self.app(scope, receive, send_with_request_id)
