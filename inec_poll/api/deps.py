"""Shared API dependencies."""
from typing import Callable, Optional
from fastapi import Depends, Request

from inec_poll.db import get_db
from inec_poll.core.rate_limit import RateLimiter, get_client_ip
from inec_poll.core.security import CurrentUser, decode_access_token, get_token_from_request

__all__ = [
    "get_db",
    "get_current_user",
    "get_rate_limiter",
    "rate_limit",
]


def get_current_user(request: Request) -> Optional[CurrentUser]:
    """
    Identity of the caller, or None for anonymous requests.

    A token that is present but invalid raises Unauthenticated; whether an
    anonymous caller may proceed is decided by the action itself.
    """
    token = get_token_from_request(request)
    if not token:
        return None
    return decode_access_token(token)


def get_rate_limiter(request: Request) -> RateLimiter:
    """The limiter owned by the application (created in main, started in lifespan)."""
    return request.app.state.rate_limiter


def rate_limit(action: str) -> Callable:
    """
    Build a dependency that counts one request for ``action``.

    Authenticated callers are keyed by user id, anonymous ones by client IP.
    """

    def dependency(
        request: Request,
        user: Optional[CurrentUser] = Depends(get_current_user),
        limiter: RateLimiter = Depends(get_rate_limiter),
    ) -> None:
        identity = user.id if user else get_client_ip(request)
        limiter.hit(identity, action)

    return dependency
