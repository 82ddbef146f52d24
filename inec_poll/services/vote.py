"""Vote business logic."""
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inec_poll.core import constants
from inec_poll.core.cache import revalidate_path
from inec_poll.core.exceptions import (
    AlreadyVoted,
    NotFound,
    PollEnded,
    PollInactive,
    Unauthenticated,
)
from inec_poll.core.logging_config import get_logger
from inec_poll.core.utils import has_ended, utcnow
from inec_poll.db.models import Poll, PollOption, Vote
from inec_poll.services.profile import ensure_profile
from inec_poll.services.utils import is_duplicate_vote_error, store_operation

logger = get_logger(__name__)


def _has_voted(db: Session, poll_id: str, voter_id: str) -> bool:
    return db.query(Vote.id).filter(
        Vote.poll_id == poll_id,
        Vote.voter_id == voter_id
    ).first() is not None


def cast_vote(
    db: Session,
    poll_id: str,
    option_id: str,
    voter_id: Optional[str],
    voter_ip: Optional[str] = None,
    voter_email: Optional[str] = None,
) -> None:
    """
    Cast a vote in a poll.

    Checks run in order and stop at the first failure: identity, poll exists,
    poll has not ended, poll is active, voter has not voted yet, option
    belongs to the poll. The existing-vote check gives a fast answer; the
    unique constraint on (poll_id, voter_id) is what actually guarantees one
    vote per voter, and a violation on insert is reported as AlreadyVoted too.

    Raises:
        Unauthenticated, NotFound, PollEnded, PollInactive, AlreadyVoted, StoreFailure
    """
    if not voter_id:
        raise Unauthenticated("Authentication required to vote")

    with store_operation(db, "cast vote"):
        poll = db.query(Poll).filter(Poll.id == poll_id).first()
        if not poll:
            raise NotFound(constants.POLL_NOT_FOUND)

        # An ended poll reports PollEnded even when it was also deactivated
        if has_ended(poll.end_date, utcnow()):
            raise PollEnded(constants.POLL_ENDED)

        if not poll.is_active:
            raise PollInactive(constants.POLL_INACTIVE)

        if _has_voted(db, poll_id, voter_id):
            logger.info("vote_rejected", poll_id=poll_id, voter_id=voter_id, reason="already_voted")
            raise AlreadyVoted(constants.ALREADY_VOTED)

        option = db.query(PollOption).filter(
            PollOption.id == option_id,
            PollOption.poll_id == poll_id
        ).first()
        if not option:
            raise NotFound(constants.OPTION_NOT_FOUND)

        ensure_profile(db, voter_id, voter_email)
        db.add(Vote(
            poll_id=poll_id,
            option_id=option_id,
            voter_id=voter_id,
            voter_ip_address=voter_ip,
            voted_at=utcnow(),
        ))

        try:
            db.commit()
        except IntegrityError as exc:
            # A concurrent request from the same voter won the race
            if is_duplicate_vote_error(exc):
                logger.info("vote_rejected", poll_id=poll_id, voter_id=voter_id, reason="unique_constraint")
                raise AlreadyVoted(constants.ALREADY_VOTED) from exc
            raise

    logger.info("vote_cast", poll_id=poll_id, option_id=option_id, voter_id=voter_id)
    # The list carries total_votes too
    revalidate_path(f"/polls/{poll_id}", "/polls")


def get_user_vote(db: Session, poll_id: str, voter_id: Optional[str]) -> Optional[str]:
    """Return the option id the voter chose in this poll, or None."""
    if not voter_id:
        raise Unauthenticated(constants.AUTHENTICATION_REQUIRED)

    with store_operation(db, "fetch vote"):
        if not db.query(Poll.id).filter(Poll.id == poll_id).first():
            raise NotFound(constants.POLL_NOT_FOUND)

        vote = db.query(Vote.option_id).filter(
            Vote.poll_id == poll_id,
            Vote.voter_id == voter_id
        ).first()
        return vote.option_id if vote else None
