import logging

from starlette.datastructures import Headers
from starlette.responses import JSONResponse

from .errors import PayloadTooLarge

logger = logging.getLogger(__name__)


class BodySizeLimitMiddleware:
    """
    Reject request bodies larger than ``max_body_bytes`` with a 413.

    A declared Content-Length is checked up front. Otherwise the body is
    buffered while counting, which also covers chunked uploads, and then
    replayed to the app.
    """

    def __init__(self, app, max_body_bytes: int):
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        length = Headers(scope=scope).get("content-length")
        if length and length.isdigit() and int(length) > self.max_body_bytes:
            await self._reject(scope, receive, send, length)
            return

        messages = []
        received = 0
        while True:
            message = await receive()
            messages.append(message)
            if message["type"] != "http.request":
                break
            received += len(message.get("body", b""))
            if received > self.max_body_bytes:
                await self._reject(scope, receive, send, f"more than {self.max_body_bytes}")
                return
            if not message.get("more_body", False):
                break

        async def replay():
            if messages:
                return messages.pop(0)
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(self, scope, receive, send, size):
        logger.warning(f"Rejected {scope['path']}: body of {size} bytes")
        exc = PayloadTooLarge()
        response = JSONResponse(status_code=exc.status_code, content={"error": exc.message})
        await response(scope, receive, send)
