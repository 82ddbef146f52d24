"""Pydantic schemas for request/response validation."""
from inec_poll.schemas.poll import (
    PollOptionCreate,
    PollCreate,
    PollUpdate,
    PollOptionResponse,
    CreatorSummary,
    PollDetail,
    PollCreatedResponse,
    PollListResponse,
    PollDetailResponse,
)
from inec_poll.schemas.vote import VoteRequest, UserVoteResponse
from inec_poll.schemas.results import OptionResult, PollResults, PollResultsResponse
from inec_poll.schemas.profile import ProfileUpdate, ProfileDetail, ProfileResponse
from inec_poll.schemas.common import SuccessResponse, ErrorResponse, ErrorDetail

__all__ = [
    "PollOptionCreate",
    "PollCreate",
    "PollUpdate",
    "PollOptionResponse",
    "CreatorSummary",
    "PollDetail",
    "PollCreatedResponse",
    "PollListResponse",
    "PollDetailResponse",
    "VoteRequest",
    "UserVoteResponse",
    "OptionResult",
    "PollResults",
    "PollResultsResponse",
    "ProfileUpdate",
    "ProfileDetail",
    "ProfileResponse",
    "SuccessResponse",
    "ErrorResponse",
    "ErrorDetail",
]
