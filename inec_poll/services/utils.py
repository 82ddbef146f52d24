"""Shared utilities for service layer."""
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from inec_poll.core.exceptions import PollServiceError, StoreFailure
from inec_poll.core.logging_config import get_logger

logger = get_logger(__name__)


def store_error_message(exc: SQLAlchemyError) -> str:
    """Best available text for a database error (the driver's message when present)."""
    original = getattr(exc, "orig", None)
    return str(original) if original is not None else str(exc)


def is_duplicate_vote_error(exc: IntegrityError) -> bool:
    """
    Check whether an IntegrityError comes from the one-vote-per-voter constraint.

    PostgreSQL reports the constraint name, SQLite reports the column pair.
    """
    message = store_error_message(exc)
    return "uq_votes_poll_voter" in message or (
        "votes.poll_id" in message and "votes.voter_id" in message
    )


@contextmanager
def store_operation(db: Session, action: str) -> Iterator[None]:
    """
    Run a unit of work against the database.

    Any failure rolls the session back. Domain errors propagate unchanged;
    database errors become StoreFailure carrying the driver's message.
    Nothing is retried.

    Args:
        db: Database session
        action: Short description used in messages, e.g. "create poll"
    """
    try:
        yield
    except PollServiceError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        message = store_error_message(exc)
        logger.error("store_operation_rolled_back", action=action, error=message)
        raise StoreFailure(f"Failed to {action}: {message}") from exc
