"""
Request body size limiting.

Bodies are capped both by their declared Content-Length and by the bytes
actually received, so chunked uploads without a Content-Length are held to
the same limit.
"""

from fastapi import HTTPException, status
from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send


def too_large_message(max_size: int) -> str:
    return f"Request body too large. Maximum size: {max_size // (1024 * 1024)}MB"


class RequestBodyLimitMiddleware:
    """
    ASGI middleware enforcing a maximum request body size.

    Requests that declare a larger Content-Length are rejected with 413 before
    the body is read. Otherwise received bytes are counted as the application
    reads them, and reading past the limit raises a 413 HTTPException, which
    the application's exception handlers turn into the JSON error body.
    """

    def __init__(self, app: ASGIApp, max_size: int) -> None:
        self.app = app
        self.max_size = max_size

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length")
        if content_length and content_length.isdigit():
            if int(content_length) > self.max_size:
                response = JSONResponse(
                    status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    content={"error": too_large_message(self.max_size)},
                )
                await response(scope, receive, send)
                return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_size:
                    raise HTTPException(
                        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                        detail=too_large_message(self.max_size),
                    )
            return message

        await self.app(scope, limited_receive, send)
