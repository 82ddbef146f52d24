"""Vote schemas."""
import uuid
from typing import Optional
from pydantic import BaseModel, field_validator


class VoteRequest(BaseModel):
    option_id: str

    @field_validator('option_id')
    @classmethod
    def validate_option_id(cls, v: str) -> str:
        """Option ids are UUIDs; reject anything else before touching the database."""
        try:
            return str(uuid.UUID(v.strip()))
        except ValueError:
            raise ValueError("Invalid option ID")


class UserVoteResponse(BaseModel):
    success: bool = True
    voted: bool
    option_id: Optional[str] = None
