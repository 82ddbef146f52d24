"""Security headers and origin checks."""
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from inec_poll.core import constants
from inec_poll.core.exceptions import Forbidden
from inec_poll.core.logging_config import get_logger
from inec_poll.core.security import is_allowed_origin
from inec_poll.schemas.common import ErrorDetail, ErrorResponse

logger = get_logger(__name__)

_UNSAFE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Add security headers to every response and refuse cross-origin writes.

    State-changing API requests whose Origin or Referer is not in
    ALLOWED_ORIGINS get a 403 before reaching any handler.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if (
            request.method in _UNSAFE_METHODS
            and request.url.path.startswith("/api/")
            and not is_allowed_origin(request.headers.get("origin"), request.headers.get("referer"))
        ):
            logger.warning("origin_rejected", origin=request.headers.get("origin"))
            error = Forbidden(constants.INVALID_CSRF_TOKEN)
            response = JSONResponse(
                status_code=error.status_code,
                content=ErrorResponse(
                    error=ErrorDetail(code=error.code, message=error.message)
                ).model_dump(exclude_none=True),
            )
        else:
            response = await call_next(request)

        for header, value in constants.SECURITY_HEADERS.items():
            response.headers[header] = value
        return response
