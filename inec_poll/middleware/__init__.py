"""HTTP middleware."""
from inec_poll.middleware.logging import LoggingMiddleware
from inec_poll.middleware.security import SecurityHeadersMiddleware

__all__ = ["LoggingMiddleware", "SecurityHeadersMiddleware"]
