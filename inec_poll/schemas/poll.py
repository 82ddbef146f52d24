"""Poll schemas."""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, AnyHttpUrl, field_validator

from inec_poll.core import constants
from inec_poll.core.sanitization import sanitize_text, sanitize_optional_text
from inec_poll.core.utils import to_utc

_url_adapter = TypeAdapter(AnyHttpUrl)


def _check_max_length(value: Optional[str], limit: int, label: str) -> Optional[str]:
    if value is not None and len(value) > limit:
        raise ValueError(f"{label} must be at most {limit} characters")
    return value


def validate_optional_url(value: Optional[str]) -> Optional[str]:
    """Accept a well-formed http(s) URL or an empty string (stored as None)."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if len(value) > constants.MAX_URL_LENGTH:
        raise ValueError(f"URL must be at most {constants.MAX_URL_LENGTH} characters")
    try:
        _url_adapter.validate_python(value)
    except ValidationError:
        raise ValueError("Must be a valid URL")
    return value


class PollOptionCreate(BaseModel):
    candidate_name: str
    party_name: Optional[str] = None
    candidate_image_url: Optional[str] = None

    @field_validator('candidate_name')
    @classmethod
    def validate_candidate_name(cls, v: str) -> str:
        """Sanitize candidate name; required, at most 255 characters."""
        v = sanitize_text(v)
        if not v:
            raise ValueError("Candidate name is required")
        return _check_max_length(v, constants.MAX_CANDIDATE_NAME_LENGTH, "Candidate name")

    @field_validator('party_name')
    @classmethod
    def validate_party_name(cls, v: Optional[str]) -> Optional[str]:
        v = sanitize_optional_text(v)
        return _check_max_length(v, constants.MAX_PARTY_NAME_LENGTH, "Party name")

    @field_validator('candidate_image_url')
    @classmethod
    def validate_image_url(cls, v: Optional[str]) -> Optional[str]:
        return validate_optional_url(v)


class PollCreate(BaseModel):
    title: str
    description: Optional[str] = None
    election_type: str
    state: Optional[str] = None
    lga: Optional[str] = None
    end_date: Optional[datetime] = None
    options: List[PollOptionCreate]

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Sanitize and validate poll title."""
        v = sanitize_text(v)
        if not v:
            raise ValueError("Poll title is required")
        return _check_max_length(v, constants.MAX_TITLE_LENGTH, "Poll title")

    @field_validator('description')
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        # Descriptions keep their line breaks
        v = sanitize_optional_text(v, collapse_whitespace=False)
        return _check_max_length(v, constants.MAX_DESCRIPTION_LENGTH, "Description")

    @field_validator('election_type')
    @classmethod
    def validate_election_type(cls, v: str) -> str:
        if v not in constants.ELECTION_TYPES:
            raise ValueError(
                "Election type must be one of: " + ", ".join(constants.ELECTION_TYPES)
            )
        return v

    @field_validator('state')
    @classmethod
    def validate_state(cls, v: Optional[str]) -> Optional[str]:
        v = sanitize_optional_text(v)
        return _check_max_length(v, constants.MAX_STATE_LENGTH, "State name")

    @field_validator('lga')
    @classmethod
    def validate_lga(cls, v: Optional[str]) -> Optional[str]:
        v = sanitize_optional_text(v)
        return _check_max_length(v, constants.MAX_LGA_LENGTH, "LGA name")

    @field_validator('end_date', mode='before')
    @classmethod
    def blank_end_date(cls, v):
        """The poll form submits an empty string when no end date is picked."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('end_date')
    @classmethod
    def normalize_end_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_utc(v) if v is not None else None

    @field_validator('options')
    @classmethod
    def validate_option_count(cls, v: List[PollOptionCreate]) -> List[PollOptionCreate]:
        if len(v) < constants.MIN_CANDIDATES:
            raise ValueError(f"At least {constants.MIN_CANDIDATES} candidates are required")
        if len(v) > constants.MAX_CANDIDATES:
            raise ValueError(f"Maximum {constants.MAX_CANDIDATES} candidates allowed")
        return v


class PollUpdate(PollCreate):
    """Full replacement of a poll's fields and options; the creator may also close or reopen it."""

    is_active: Optional[bool] = None


class PollOptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    candidate_name: str
    party_name: Optional[str] = None
    candidate_image_url: Optional[str] = None
    display_order: int


class CreatorSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None


class PollDetail(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: Optional[str] = None
    election_type: str
    state: Optional[str] = None
    lga: Optional[str] = None
    creator_id: Optional[str] = None
    is_active: bool
    start_date: datetime
    end_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    total_votes: int = 0
    options: List[PollOptionResponse] = Field(default_factory=list)
    creator: Optional[CreatorSummary] = None


class PollCreatedResponse(BaseModel):
    success: bool = True
    poll_id: str


class PollListResponse(BaseModel):
    success: bool = True
    polls: List[PollDetail]


class PollDetailResponse(BaseModel):
    success: bool = True
    poll: PollDetail
