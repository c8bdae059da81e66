"""Middleware for todo-api."""

import math
import time
import uuid
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from todo_api.constants import REQUEST_ID_HEADER, RETRY_AFTER_HEADER
from todo_api.exceptions import error_response
from todo_api.logger import get_logger, request_id_context
from todo_api.rate_limit import BucketStore, RateLimitExceeded, TokenBucket

logger = get_logger(__name__)

# Probes and scrapes are never throttled
RATE_LIMIT_EXEMPT_PREFIXES = ("/health", "/metrics")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Add unique request ID to each request."""

    async def dispatch(  # noqa: PLR6301 - Required instance method for Starlette middleware
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Process request and add request ID."""
        # Generate server-side request ID
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        # Set request ID in context for logging
        token = request_id_context.set(request_id)

        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_context.reset(token)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log all requests with timing information and structured fields."""

    async def dispatch(  # noqa: PLR6301 - Required instance method for Starlette middleware
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Process request and log details."""
        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        # request_id is automatically added by RequestContextFilter
        logger.info(
            f"{request.method} {request.url.path} - {response.status_code} - {duration:.3f}s",
            extra={
                "http_method": request.method,
                "http_path": str(request.url.path),
                "http_status": response.status_code,
                "duration_seconds": round(duration, 3),
                "client_host": request.client.host if request.client else None,
            },
        )

        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add browser security response headers.

    Args:
        app: ASGI application
        hsts: Also send Strict-Transport-Security (only behind TLS)
        hsts_max_age: max-age for Strict-Transport-Security in seconds
    """

    def __init__(
        self, app: ASGIApp, *, hsts: bool = False, hsts_max_age: int = 31_536_000
    ) -> None:
        super().__init__(app)
        self.headers = {
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "DENY",
            "Referrer-Policy": "strict-origin-when-cross-origin",
            "X-XSS-Protection": "1; mode=block",
        }
        if hsts:
            self.headers["Strict-Transport-Security"] = (
                f"max-age={hsts_max_age}; includeSubDomains"
            )

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        response = await call_next(request)
        for name, value in self.headers.items():
            response.headers.setdefault(name, value)
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-client token bucket admission control.

    Buckets are keyed by client address and kept in the BucketStore found at
    `app.state.rate_limit_store`. Without a store, requests pass through.

    Args:
        app: ASGI application
        capacity: Burst size per client
        refill_rate: Sustained requests per second per client
    """

    def __init__(self, app: ASGIApp, *, capacity: int, refill_rate: float) -> None:
        super().__init__(app)
        self.capacity = capacity
        self.refill_rate = refill_rate

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Reject the request with 429 when the client's bucket is empty."""
        store: BucketStore | None = getattr(
            request.app.state, "rate_limit_store", None
        )
        if store is None or request.url.path.startswith(RATE_LIMIT_EXEMPT_PREFIXES):
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        bucket = TokenBucket(
            store,
            bucket_name=f"client:{client}",
            capacity=self.capacity,
            refill_rate=self.refill_rate,
        )
        # store calls may block on redis
        if await run_in_threadpool(bucket.try_acquire):
            return await call_next(request)

        exc = RateLimitExceeded(
            "Too many requests",
            retry_after=await run_in_threadpool(bucket.retry_after),
        )
        logger.warning(
            f"Rate limit exceeded for {client}",
            extra={"client_host": client, "http_path": str(request.url.path)},
        )
        return error_response(
            request,
            exc.status_code,
            exc.message,
            exc.code,
            headers={RETRY_AFTER_HEADER: str(max(math.ceil(exc.retry_after), 1))},
        )
