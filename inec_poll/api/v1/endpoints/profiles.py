"""Profile endpoints."""
from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from inec_poll.api.deps import get_db, get_current_user, rate_limit
from inec_poll.core.security import CurrentUser
from inec_poll.schemas import ProfileUpdate, ProfileResponse
from inec_poll.services.profile import get_profile, update_profile

router = APIRouter(dependencies=[Depends(rate_limit("general"))])


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    user: Optional[CurrentUser] = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> ProfileResponse:
    """Profile of the signed-in user (404 until their first poll, vote or profile update)."""
    return ProfileResponse(profile=get_profile(db, user.id if user else None))


@router.put("/me", response_model=ProfileResponse)
async def update_my_profile(
    profile: ProfileUpdate,
    user: Optional[CurrentUser] = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> ProfileResponse:
    """Create or update the signed-in user's profile."""
    return ProfileResponse(profile=update_profile(db, user.id if user else None, profile))
