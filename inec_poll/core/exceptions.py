"""Domain errors raised by the poll actions.

Every failure that crosses the service boundary is one of these. The HTTP
layer turns them into the tagged ErrorResponse body using ``code`` and
``status_code``; the message text is what the user sees.
"""
from typing import List, Optional

from inec_poll.core import constants


class PollServiceError(Exception):
    """Base class for all poll action failures."""

    code = "error"
    status_code = 400
    default_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(PollServiceError):
    code = "unauthenticated"
    status_code = 401
    default_message = constants.AUTHENTICATION_REQUIRED


class NotFound(PollServiceError):
    code = "not_found"
    status_code = 404
    default_message = constants.POLL_NOT_FOUND


class Forbidden(PollServiceError):
    code = "forbidden"
    status_code = 403
    default_message = "You do not have permission to perform this action"


class PollInactive(PollServiceError):
    code = "poll_inactive"
    status_code = 409
    default_message = constants.POLL_INACTIVE


class PollEnded(PollServiceError):
    code = "poll_ended"
    status_code = 409
    default_message = constants.POLL_ENDED


class AlreadyVoted(PollServiceError):
    code = "already_voted"
    status_code = 409
    default_message = constants.ALREADY_VOTED


class ValidationFailed(PollServiceError):
    """Schema violation; ``errors`` holds every message, not just the first."""

    code = "validation_failed"
    status_code = 422
    default_message = "Invalid poll data provided"

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(", ".join(self.errors) or None)


class RateLimited(PollServiceError):
    code = "rate_limited"
    status_code = 429
    default_message = constants.RATE_LIMIT_EXCEEDED

    def __init__(self, retry_after: int, message: Optional[str] = None):
        self.retry_after = retry_after
        super().__init__(message)


class StoreFailure(PollServiceError):
    """Underlying persistence error; the original message is passed through."""

    code = "store_failure"
    status_code = 500
    default_message = "Database operation failed"
