"""Request body size enforcement.

Uploads are capped before they are buffered: a declared Content-Length
above the cap is refused without reading the body, and streamed bodies are
counted chunk by chunk as the multipart parser pulls them in so the request
is aborted as soon as the cap is crossed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from starlette import datastructures, responses

from smap_registry.core import errors

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)


class BodySizeLimitMiddleware:
    """ASGI middleware rejecting request bodies larger than a fixed cap.

    Args:
        app: Wrapped ASGI application.
        max_body_size: Largest accepted body in bytes.
    """

    def __init__(self, app: ASGIApp, max_body_size: int) -> None:
        self.app = app
        self.max_body_size = max_body_size

    def _too_large(self) -> errors.PayloadTooLarge:
        return errors.PayloadTooLarge(
            f"request body exceeds {self.max_body_size} bytes",
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = datastructures.Headers(scope=scope).get("content-length")
        if declared is not None and declared.isdigit():
            if int(declared) > self.max_body_size:
                logger.warning(
                    "Rejected %s %s: declared body of %s bytes",
                    scope.get("method"),
                    scope.get("path"),
                    declared,
                )
                error = self._too_large()
                response = responses.JSONResponse(
                    error.to_dict(),
                    status_code=error.status_code,
                )
                await response(scope, receive, send)
                return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_size:
                    logger.warning(
                        "Aborted %s %s: body passed %d bytes",
                        scope.get("method"),
                        scope.get("path"),
                        self.max_body_size,
                    )
                    raise self._too_large()
            return message

        await self.app(scope, limited_receive, send)
