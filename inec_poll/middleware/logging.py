"""Request logging with per-request context.

Every event logged while a request is handled carries the request id, the
route, and who is calling: the authenticated user id when the bearer token
verifies, and always the client IP the rate limiter would key on. Token
problems are not reported here; the endpoint's own dependencies reject them.
"""
import time
import uuid
from typing import Callable, Optional

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from inec_poll.core.exceptions import Unauthenticated
from inec_poll.core.rate_limit import get_client_ip
from inec_poll.core.security import decode_access_token, get_token_from_request

logger = structlog.get_logger(__name__)


def _caller_id(request: Request) -> Optional[str]:
    """User id from a valid token, None for anonymous or unverifiable callers."""
    token = get_token_from_request(request)
    if not token:
        return None
    try:
        return decode_access_token(token).id
    except Unauthenticated:
        return None


class LoggingMiddleware(BaseHTTPMiddleware):
    """Bind request and caller context, then log how each request ended."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Honour an upstream request id so proxy and app logs line up
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        user_id = _caller_id(request)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_ip=get_client_ip(request),
            user_id=user_id,
        )

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                exception=str(exc),
                exception_type=type(exc).__name__,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            raise

        response.headers["X-Request-ID"] = request_id

        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        if response.status_code >= 500:
            logger.error("request_completed", status_code=response.status_code, duration_ms=duration_ms)
        elif response.status_code in (401, 403, 429):
            # Auth and throttling rejections are what operators look for first
            logger.warning("request_rejected", status_code=response.status_code, duration_ms=duration_ms)
        else:
            logger.info("request_completed", status_code=response.status_code, duration_ms=duration_ms)

        return response
