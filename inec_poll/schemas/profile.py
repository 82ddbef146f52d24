"""Profile schemas."""
import re
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, field_validator

from inec_poll.core import constants
from inec_poll.core.sanitization import sanitize_text, sanitize_optional_text
from inec_poll.schemas.poll import validate_optional_url

EMAIL_REGEX = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


def normalize_email(email: Optional[str]) -> Optional[str]:
    """Canonical stored form of an email address (trimmed, lowercase); blank becomes None."""
    if email is None:
        return None
    return email.strip().lower() or None


class ProfileUpdate(BaseModel):
    full_name: str
    email: str
    state: Optional[str] = None
    lga: Optional[str] = None
    avatar_url: Optional[str] = None

    @field_validator('full_name')
    @classmethod
    def validate_full_name(cls, v: str) -> str:
        v = sanitize_text(v)
        if not v:
            raise ValueError("Full name is required")
        if len(v) > constants.MAX_CANDIDATE_NAME_LENGTH:
            raise ValueError(
                f"Full name must be at most {constants.MAX_CANDIDATE_NAME_LENGTH} characters"
            )
        return v

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = normalize_email(v) or ""
        if not EMAIL_REGEX.match(v):
            raise ValueError("Must be a valid email address")
        if len(v) > constants.MAX_EMAIL_LENGTH:
            raise ValueError(f"Email must be at most {constants.MAX_EMAIL_LENGTH} characters")
        return v

    @field_validator('state', 'lga')
    @classmethod
    def validate_region(cls, v: Optional[str]) -> Optional[str]:
        v = sanitize_optional_text(v)
        if v is not None and len(v) > constants.MAX_STATE_LENGTH:
            raise ValueError(f"State and LGA names must be at most {constants.MAX_STATE_LENGTH} characters")
        return v

    @field_validator('avatar_url')
    @classmethod
    def validate_avatar_url(cls, v: Optional[str]) -> Optional[str]:
        return validate_optional_url(v)


class ProfileDetail(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    state: Optional[str] = None
    lga: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ProfileResponse(BaseModel):
    success: bool = True
    profile: ProfileDetail
