"""Poll result tallies."""
from decimal import Decimal, ROUND_HALF_UP
from sqlalchemy import func
from sqlalchemy.orm import Session

from inec_poll.core import constants
from inec_poll.core.exceptions import NotFound
from inec_poll.db.models import Poll, PollOption, Vote
from inec_poll.schemas.results import OptionResult, PollResults
from inec_poll.services.utils import store_operation

_TWO_PLACES = Decimal("0.01")


def calculate_percentage(count: int, total: int) -> float:
    """
    Share of ``total`` held by ``count``, in percent, rounded half-up to 2 decimals.

    A poll with no votes gives 0 for every option.
    """
    if total <= 0:
        return 0.0
    share = Decimal(count * 100) / Decimal(total)
    return float(share.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def get_poll_results(db: Session, poll_id: str) -> PollResults:
    """
    Tally the votes of one poll.

    Every option appears, including options with no votes. Results are
    ordered by vote count, highest first; ties keep display order.

    Raises:
        NotFound: Unknown poll
        StoreFailure: Database error
    """
    with store_operation(db, "fetch poll results"):
        if not db.query(Poll.id).filter(Poll.id == poll_id).first():
            raise NotFound(constants.POLL_NOT_FOUND)

        options = (
            db.query(PollOption)
            .filter(PollOption.poll_id == poll_id)
            .order_by(PollOption.display_order)
            .all()
        )
        counts = dict(
            db.query(Vote.option_id, func.count(Vote.id))
            .filter(Vote.poll_id == poll_id)
            .group_by(Vote.option_id)
            .all()
        )

    total_votes = sum(counts.get(option.id, 0) for option in options)
    results = [
        OptionResult(
            option_id=option.id,
            candidate_name=option.candidate_name,
            party_name=option.party_name,
            display_order=option.display_order,
            vote_count=counts.get(option.id, 0),
            vote_percentage=calculate_percentage(counts.get(option.id, 0), total_votes),
        )
        for option in options
    ]
    # sorted() is stable, so equal counts stay in display order
    results = sorted(results, key=lambda result: result.vote_count, reverse=True)

    return PollResults(poll_id=poll_id, total_votes=total_votes, results=results)
