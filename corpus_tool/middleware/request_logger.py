"""ASGI middleware that logs a one-line summary of every API request."""
import logging
import time
import uuid

from starlette.types import ASGIApp, Receive, Scope, Send

logger = logging.getLogger(__name__)


class RequestLoggerMiddleware:
    """Log method, path, status, size and response time of each request."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = str(uuid.uuid4())
        start_time = time.time()

        method = scope["method"]
        path = scope["path"]
        client = scope.get("client")
        ip_address = client[0] if client else None

        # Variables to capture from response
        status_code = 500
        response_size = 0

        async def send_with_capturing(message):
            nonlocal status_code, response_size
            if message["type"] == "http.response.start":
                status_code = message["status"]
                headers = list(message.get("headers", []))
                headers.append((b"x-request-id", request_id.encode("latin1")))
                message["headers"] = headers
            elif message["type"] == "http.response.body":
                response_size += len(message.get("body", b""))
            await send(message)

        try:
            await self.app(scope, receive, send_with_capturing)
        finally:
            response_time_ms = int((time.time() - start_time) * 1000)

            # Skip logging health checks to reduce noise
            if path != "/health":
                level = logging.WARNING if status_code >= 500 else logging.INFO
                logger.log(
                    level,
                    f"{request_id} {ip_address} {method} {path} -> {status_code} "
                    f"({response_size} bytes, {response_time_ms} ms)",
                )
