"""Deadline and size cap for multipart request bodies.

Starlette buffers the whole multipart body before a route runs, so both limits
have to be applied to the ASGI ``receive`` stream instead of inside the handler.
"""
import asyncio
import logging

from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.config import settings
from app.utils.exceptions import AppException, FileTooLarge, UploadTimeout
from app.utils.response import error_response

logger = logging.getLogger(__name__)

# Room for part headers and boundaries on top of the file bytes
MULTIPART_OVERHEAD = 64 * 1024


def body_limit_for(path: str) -> int:
    if path.endswith("/profile-picture"):
        return settings.max_profile_picture_size_bytes + MULTIPART_OVERHEAD
    return settings.max_upload_size_bytes * settings.max_files_per_upload + MULTIPART_OVERHEAD


def _is_multipart(scope: Scope) -> bool:
    for name, value in scope.get("headers", []):
        if name == b"content-type":
            return value.lower().startswith(b"multipart/form-data")
    return False


def _content_length(scope: Scope) -> int | None:
    for name, value in scope.get("headers", []):
        if name == b"content-length" and value.isdigit():
            return int(value)
    return None


def _too_large(limit: int) -> FileTooLarge:
    return FileTooLarge(
        f"Upload exceeds the {limit // (1024 * 1024)}MB request limit",
        data={"max_bytes": limit},
    )


async def _send_error(exc: AppException, scope: Scope, receive: Receive, send: Send) -> None:
    response = JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.message, data=exc.data, code=exc.code),
    )
    await response(scope, receive, send)


class _BodyGuard:
    """Wraps receive/send for one request.

    Once a limit is hit the app sees a client disconnect and anything it
    tries to send is dropped, leaving the error response to the middleware.
    """

    def __init__(self, receive: Receive, send: Send, limit: int, timeout: float):
        self._receive = receive
        self._send = send
        self._limit = limit
        self._timeout = timeout
        self._deadline = asyncio.get_running_loop().time() + timeout
        self._received = 0
        self._body_done = False
        self.error: AppException | None = None
        self.response_started = False

    async def receive(self) -> Message:
        if self.error is not None:
            return {"type": "http.disconnect"}
        if self._body_done:
            return await self._receive()

        remaining = max(self._deadline - asyncio.get_running_loop().time(), 0)
        try:
            message = await asyncio.wait_for(self._receive(), timeout=remaining)
        except asyncio.TimeoutError:
            logger.warning("Upload body not received within %ss", self._timeout)
            self.error = UploadTimeout(f"Upload not completed within {self._timeout:g}s")
            return {"type": "http.disconnect"}

        if message["type"] == "http.request":
            self._received += len(message.get("body", b""))
            if self._received > self._limit:
                logger.warning("Upload body passed the %d byte limit", self._limit)
                self.error = _too_large(self._limit)
                return {"type": "http.disconnect"}
            if not message.get("more_body", False):
                self._body_done = True
        return message

    async def send(self, message: Message) -> None:
        if self.error is not None:
            return
        self.response_started = True
        await self._send(message)


class UploadLimitMiddleware:
    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not _is_multipart(scope):
            await self.app(scope, receive, send)
            return

        limit = body_limit_for(scope["path"])
        declared = _content_length(scope)
        if declared is not None and declared > limit:
            logger.info("Rejected %d byte upload to %s before reading it", declared, scope["path"])
            await _send_error(_too_large(limit), scope, receive, send)
            return

        guard = _BodyGuard(receive, send, limit, settings.upload_timeout_seconds)
        try:
            await self.app(scope, guard.receive, guard.send)
        except Exception:
            if guard.error is None or guard.response_started:
                raise
        if guard.error is not None and not guard.response_started:
            await _send_error(guard.error, scope, receive, send)
