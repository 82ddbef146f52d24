"""Poll business logic."""
from typing import Dict, List, Optional
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import func

from inec_poll.core import constants
from inec_poll.core.cache import revalidate_path
from inec_poll.core.exceptions import Forbidden, NotFound, Unauthenticated
from inec_poll.core.logging_config import get_logger
from inec_poll.core.validation import validate
from inec_poll.db.models import Poll, PollOption, Vote
from inec_poll.schemas.poll import PollCreate, PollDetail, PollOptionCreate, PollUpdate
from inec_poll.services.profile import ensure_profile
from inec_poll.services.utils import store_operation

logger = get_logger(__name__)


def _build_options(options: List[PollOptionCreate]) -> List[PollOption]:
    """Create option rows numbered 1..N in submission order."""
    return [
        PollOption(
            candidate_name=option.candidate_name,
            party_name=option.party_name,
            candidate_image_url=option.candidate_image_url,
            display_order=index + 1,
        )
        for index, option in enumerate(options)
    ]


def _get_poll_or_404(db: Session, poll_id: str) -> Poll:
    poll = db.query(Poll).filter(Poll.id == poll_id).first()
    if not poll:
        raise NotFound(constants.POLL_NOT_FOUND)
    return poll


def _to_detail(poll: Poll, total_votes: int) -> PollDetail:
    return PollDetail.model_validate(poll).model_copy(update={"total_votes": total_votes})


def get_total_votes_bulk(db: Session, poll_ids: List[str]) -> Dict[str, int]:
    """
    Get total vote counts for multiple polls in one query.

    Args:
        db: Database session
        poll_ids: Poll IDs to count

    Returns:
        Dict mapping poll_id -> total votes (polls without votes are absent)
    """
    if not poll_ids:
        return {}

    rows = (
        db.query(Vote.poll_id, func.count(Vote.id))
        .filter(Vote.poll_id.in_(poll_ids))
        .group_by(Vote.poll_id)
        .all()
    )
    return {poll_id: count for poll_id, count in rows}


def create_poll(db: Session, data, creator_id: Optional[str], creator_email: Optional[str] = None) -> str:
    """
    Create a poll together with its candidate options.

    The payload is validated before anything is written. The creator's
    profile, the poll row and all option rows are committed in a single
    transaction, so a failure leaves no poll without candidates behind.

    Args:
        db: Database session
        data: PollCreate or a raw dict to validate
        creator_id: Authenticated user id
        creator_email: Email claim used if a stub profile has to be created

    Returns:
        The new poll's id

    Raises:
        Unauthenticated: No creator identity
        ValidationFailed: Payload violates the poll rules
        StoreFailure: The database rejected the write (nothing is kept)
    """
    if not creator_id:
        raise Unauthenticated("Authentication required to create polls")

    poll_data = validate(PollCreate, data)

    with store_operation(db, "create poll"):
        ensure_profile(db, creator_id, creator_email)

        poll = Poll(
            title=poll_data.title,
            description=poll_data.description,
            election_type=poll_data.election_type,
            state=poll_data.state,
            lga=poll_data.lga,
            creator_id=creator_id,
            end_date=poll_data.end_date,
        )
        poll.options = _build_options(poll_data.options)
        db.add(poll)
        db.commit()
        poll_id = poll.id

    logger.info("poll_created", poll_id=poll_id, creator_id=creator_id, options=len(poll_data.options))
    revalidate_path("/polls")
    return poll_id


def list_active_polls(
    db: Session,
    election_type: Optional[str] = None,
    state: Optional[str] = None,
) -> List[PollDetail]:
    """
    List active polls, newest first, with options and creator summary.

    Args:
        db: Database session
        election_type: Only polls of this election type
        state: Only polls scoped to this state

    Returns:
        List of PollDetail including each poll's total vote count
    """
    with store_operation(db, "fetch polls"):
        query = (
            db.query(Poll)
            .options(selectinload(Poll.options), selectinload(Poll.creator))
            .filter(Poll.is_active.is_(True))
        )
        if election_type:
            query = query.filter(Poll.election_type == election_type)
        if state:
            query = query.filter(Poll.state == state)

        polls = query.order_by(Poll.created_at.desc()).all()
        totals = get_total_votes_bulk(db, [poll.id for poll in polls])
        return [_to_detail(poll, totals.get(poll.id, 0)) for poll in polls]


def get_poll(db: Session, poll_id: str) -> PollDetail:
    """Get a single poll (active or not) with its options."""
    with store_operation(db, "fetch poll"):
        poll = (
            db.query(Poll)
            .options(selectinload(Poll.options), selectinload(Poll.creator))
            .filter(Poll.id == poll_id)
            .first()
        )
        if not poll:
            raise NotFound(constants.POLL_NOT_FOUND)
        totals = get_total_votes_bulk(db, [poll.id])
        return _to_detail(poll, totals.get(poll.id, 0))


def update_poll(db: Session, poll_id: str, data, user_id: Optional[str]) -> None:
    """
    Update a poll's fields and replace all of its options.

    Options are deleted and re-inserted rather than diffed, so votes cast for
    the previous options are removed with them. Only the creator may update;
    a poll whose creator no longer exists cannot be updated by anyone.

    Raises:
        Unauthenticated, ValidationFailed, NotFound, Forbidden, StoreFailure
    """
    if not user_id:
        raise Unauthenticated("Authentication required to update polls")

    poll_data = validate(PollUpdate, data)

    with store_operation(db, "update poll"):
        poll = _get_poll_or_404(db, poll_id)
        if poll.creator_id is None or poll.creator_id != user_id:
            raise Forbidden(constants.NOT_POLL_OWNER_UPDATE)

        poll.title = poll_data.title
        poll.description = poll_data.description
        poll.election_type = poll_data.election_type
        poll.state = poll_data.state
        poll.lga = poll_data.lga
        poll.end_date = poll_data.end_date
        if poll_data.is_active is not None:
            poll.is_active = poll_data.is_active

        # delete-orphan cascade removes the old options (and their votes)
        poll.options = _build_options(poll_data.options)
        db.commit()

    logger.info("poll_updated", poll_id=poll_id, user_id=user_id)
    revalidate_path("/polls")


def delete_poll(db: Session, poll_id: str, user_id: Optional[str]) -> None:
    """
    Delete a poll with all of its options and votes (creator only).

    Votes, options and the poll row are removed in one transaction, so no
    option or vote referencing the poll survives a partial failure.
    """
    if not user_id:
        raise Unauthenticated("Authentication required to delete polls")

    with store_operation(db, "delete poll"):
        poll = _get_poll_or_404(db, poll_id)
        if poll.creator_id is None or poll.creator_id != user_id:
            raise Forbidden(constants.NOT_POLL_OWNER_DELETE)

        # Options and votes go through the relationship cascades
        db.delete(poll)
        db.commit()

    logger.info("poll_deleted", poll_id=poll_id, user_id=user_id)
    revalidate_path("/polls")
