"""Security and authentication utilities.

Users sign in with the external auth provider, which issues a signed JWT.
This service never sees passwords; it only verifies the token and reads the
user id (``sub``) and email from it.
"""
from datetime import datetime, timedelta, timezone
from typing import NamedTuple, Optional
import jwt
from fastapi import Request

from inec_poll.core import config
from inec_poll.core.exceptions import Unauthenticated


class CurrentUser(NamedTuple):
    id: str
    email: Optional[str] = None


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token (used by tests and the dev token script)."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(hours=1)

    to_encode.update({"exp": expire})
    if config.settings.AUTH_JWT_AUDIENCE and "aud" not in to_encode:
        to_encode["aud"] = config.settings.AUTH_JWT_AUDIENCE
    return jwt.encode(
        to_encode,
        config.settings.AUTH_JWT_SECRET,
        algorithm=config.settings.AUTH_JWT_ALGORITHM,
    )


def decode_access_token(token: str) -> CurrentUser:
    """
    Verify a provider-issued JWT and extract the user identity.

    Raises:
        Unauthenticated: If the token is expired, malformed or has no subject
    """
    audience = config.settings.AUTH_JWT_AUDIENCE
    try:
        payload = jwt.decode(
            token,
            config.settings.AUTH_JWT_SECRET,
            algorithms=[config.settings.AUTH_JWT_ALGORITHM],
            audience=audience,
            options={"verify_aud": audience is not None},
        )
    except jwt.ExpiredSignatureError:
        raise Unauthenticated("Token expired")
    except jwt.PyJWTError:
        raise Unauthenticated("Invalid token")

    subject = payload.get("sub")
    if not subject:
        raise Unauthenticated("Invalid token")

    return CurrentUser(id=str(subject), email=payload.get("email"))


def get_token_from_request(request: Request) -> Optional[str]:
    """Read the bearer token from the Authorization header or the auth cookie."""
    authorization = request.headers.get("Authorization")
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()

    return request.cookies.get(config.settings.AUTH_COOKIE_NAME)


def is_allowed_origin(origin: Optional[str], referer: Optional[str]) -> bool:
    """
    Check request origin against ALLOWED_ORIGINS for state-changing requests.

    Requests without Origin/Referer headers (non-browser clients) pass.
    An empty ALLOWED_ORIGINS list disables the check.
    """
    allowed = config.settings.ALLOWED_ORIGINS
    if not allowed:
        return True

    if origin and origin not in allowed:
        return False

    if referer and not any(referer.startswith(prefix) for prefix in allowed):
        return False

    return True
