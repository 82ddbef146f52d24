"""Poll endpoints."""
from typing import Optional
from urllib.parse import urlencode
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from inec_poll.api.deps import get_db, get_current_user, rate_limit
from inec_poll.core.cache import global_cache, get_or_fetch
from inec_poll.core.config import settings
from inec_poll.core.rate_limit import get_client_ip
from inec_poll.core.security import CurrentUser
from inec_poll.schemas import (
    PollCreate,
    PollUpdate,
    PollCreatedResponse,
    PollListResponse,
    PollDetailResponse,
    PollResultsResponse,
    VoteRequest,
    UserVoteResponse,
    SuccessResponse,
)
from inec_poll.services.poll import (
    create_poll,
    delete_poll,
    get_poll,
    list_active_polls,
    update_poll,
)
from inec_poll.services.results import get_poll_results
from inec_poll.services.vote import cast_vote, get_user_vote

router = APIRouter()


def _user_id(user: Optional[CurrentUser]) -> Optional[str]:
    return user.id if user else None


@router.get("", response_model=PollListResponse, dependencies=[Depends(rate_limit("general"))])
async def list_polls_endpoint(
    election_type: Optional[str] = None,
    state: Optional[str] = None,
    db: Session = Depends(get_db)
) -> PollListResponse:
    """
    List active polls, newest first.

    Optional ``election_type`` and ``state`` query parameters narrow the list.
    Served from the read cache; any poll write invalidates it.
    """
    filters = {key: value for key, value in (("election_type", election_type), ("state", state)) if value}
    cache_key = "/polls" + (f"?{urlencode(sorted(filters.items()))}" if filters else "")

    polls = get_or_fetch(
        global_cache,
        cache_key,
        lambda: list_active_polls(db, election_type=election_type, state=state),
        ttl_seconds=settings.CACHE_TTL_SECONDS,
    )
    return PollListResponse(polls=polls)


@router.post("", response_model=PollCreatedResponse, dependencies=[Depends(rate_limit("create_poll"))])
async def create_poll_endpoint(
    poll: PollCreate,
    user: Optional[CurrentUser] = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> PollCreatedResponse:
    """
    Create a new poll with its candidate options.

    The caller must be signed in. A profile is created for first-time
    creators. Options are stored in the order submitted (display_order 1..N).

    Args:
        poll: PollCreate schema with title, election type and 2-10 options
        user: Caller identity from the bearer token (injected)
        db: Database session (injected)

    Returns:
        PollCreatedResponse containing the new poll_id

    Raises:
        401 if not signed in, 422 if the payload is invalid,
        429 after 5 creations per minute, 500 if the database rejects the write

    Example:
        Request:
            POST /api/v1/polls
            Authorization: Bearer eyJhbGc...
            {
                "title": "2027 Presidential Election",
                "election_type": "Presidential",
                "options": [
                    {"candidate_name": "Candidate A", "party_name": "Party A"},
                    {"candidate_name": "Candidate B", "party_name": "Party B"}
                ]
            }

        Response (200):
            {
                "success": true,
                "poll_id": "0b7f3c2e-..."
            }

        Response (422):
            {
                "success": false,
                "error": {
                    "code": "validation_failed",
                    "message": "At least 2 candidates are required",
                    "errors": ["At least 2 candidates are required"]
                }
            }
    """
    poll_id = create_poll(
        db,
        poll,
        _user_id(user),
        creator_email=user.email if user else None,
    )
    return PollCreatedResponse(poll_id=poll_id)


@router.get("/{poll_id}", response_model=PollDetailResponse, dependencies=[Depends(rate_limit("general"))])
async def get_poll_endpoint(poll_id: str, db: Session = Depends(get_db)) -> PollDetailResponse:
    """Get one poll with its options (inactive and ended polls included)."""
    poll = get_or_fetch(
        global_cache,
        f"/polls/{poll_id}",
        lambda: get_poll(db, poll_id),
        ttl_seconds=settings.CACHE_TTL_SECONDS,
    )
    return PollDetailResponse(poll=poll)


@router.put("/{poll_id}", response_model=SuccessResponse, dependencies=[Depends(rate_limit("update_poll"))])
async def update_poll_endpoint(
    poll_id: str,
    poll: PollUpdate,
    user: Optional[CurrentUser] = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> SuccessResponse:
    """
    Update a poll (creator only).

    All fields are replaced and the option list is rebuilt from the payload,
    which discards votes cast for the previous options. ``is_active`` may be
    set to false to close voting without deleting the poll.
    """
    update_poll(db, poll_id, poll, _user_id(user))
    return SuccessResponse(message="Poll updated successfully!")


@router.delete("/{poll_id}", response_model=SuccessResponse, dependencies=[Depends(rate_limit("delete_poll"))])
async def delete_poll_endpoint(
    poll_id: str,
    user: Optional[CurrentUser] = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> SuccessResponse:
    """Delete a poll with its options and votes (creator only)."""
    delete_poll(db, poll_id, _user_id(user))
    return SuccessResponse(message="Poll deleted successfully!")


@router.post("/{poll_id}/votes", response_model=SuccessResponse, dependencies=[Depends(rate_limit("vote"))])
async def vote_endpoint(
    request: Request,
    poll_id: str,
    vote_request: VoteRequest,
    user: Optional[CurrentUser] = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> SuccessResponse:
    """
    Cast a vote in a poll.

    Each signed-in user gets exactly one vote per poll; votes cannot be
    changed or withdrawn. The client re-fetches results after success.

    Args:
        request: FastAPI Request (client IP is stored with the vote)
        poll_id: ID of the poll to vote in
        vote_request: VoteRequest with the chosen option_id
        user: Caller identity (injected)
        db: Database session (injected)

    Returns:
        SuccessResponse with success status

    Raises:
        401 not signed in, 404 poll or option not found,
        409 poll ended / inactive / already voted, 429 after 10 votes per minute

    Example:
        Request:
            POST /api/v1/polls/0b7f3c2e-.../votes
            Authorization: Bearer eyJhbGc...
            {
                "option_id": "5d1e9a4b-..."
            }

        Response (409):
            {
                "success": false,
                "error": {
                    "code": "already_voted",
                    "message": "You have already voted on this poll"
                }
            }
    """
    cast_vote(
        db,
        poll_id,
        vote_request.option_id,
        _user_id(user),
        voter_ip=get_client_ip(request),
        voter_email=user.email if user else None,
    )
    return SuccessResponse(message="Vote cast successfully!")


@router.get("/{poll_id}/votes/me", response_model=UserVoteResponse, dependencies=[Depends(rate_limit("general"))])
async def my_vote_endpoint(
    poll_id: str,
    user: Optional[CurrentUser] = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> UserVoteResponse:
    """Tell the signed-in user whether, and for which option, they voted."""
    option_id = get_user_vote(db, poll_id, _user_id(user))
    return UserVoteResponse(voted=option_id is not None, option_id=option_id)


@router.get("/{poll_id}/results", response_model=PollResultsResponse, dependencies=[Depends(rate_limit("general"))])
async def poll_results_endpoint(poll_id: str, db: Session = Depends(get_db)) -> PollResultsResponse:
    """
    Vote tallies for a poll.

    Each option carries vote_count and vote_percentage (2 decimals, 0 when
    the poll has no votes), ordered by count with ties in display order.
    """
    results = get_or_fetch(
        global_cache,
        f"/polls/{poll_id}/results",
        lambda: get_poll_results(db, poll_id),
        ttl_seconds=settings.CACHE_TTL_SECONDS,
    )
    return PollResultsResponse(**results.model_dump())
