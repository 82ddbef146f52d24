"""Poll result schemas."""
from typing import List, Optional
from pydantic import BaseModel


class OptionResult(BaseModel):
    option_id: str
    candidate_name: str
    party_name: Optional[str] = None
    display_order: int
    vote_count: int
    vote_percentage: float


class PollResults(BaseModel):
    poll_id: str
    total_votes: int
    results: List[OptionResult]


class PollResultsResponse(PollResults):
    success: bool = True
