"""Profile business logic."""
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inec_poll.core import constants
from inec_poll.core.exceptions import NotFound, StoreFailure, Unauthenticated, ValidationFailed
from inec_poll.core.logging_config import get_logger
from inec_poll.core.validation import validate
from inec_poll.db.models import Profile
from inec_poll.schemas.profile import ProfileDetail, ProfileUpdate, normalize_email
from inec_poll.services.utils import store_operation

logger = get_logger(__name__)


def _email_taken(db: Session, email: str, user_id: str) -> bool:
    """Whether a profile other than ``user_id`` already holds ``email``."""
    return db.query(Profile.id).filter(
        Profile.email == email,
        Profile.id != user_id
    ).first() is not None


def ensure_profile(db: Session, user_id: str, email: Optional[str] = None) -> Profile:
    """
    Return the user's profile, creating a stub if this is their first write.

    The stub is added to the current transaction (flushed, not committed) so it
    commits together with the poll or vote that needed it. The token's email is
    only copied onto the stub while no other profile holds it; otherwise the
    stub is created without an email. If a concurrent request inserted the same
    id first, the duplicate insert fails and the existing row is used instead.
    """
    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if profile:
        return profile

    email = normalize_email(email)
    if email and _email_taken(db, email, user_id):
        logger.warning("profile_email_in_use", user_id=user_id)
        email = None

    profile = Profile(id=user_id, email=email)
    db.add(profile)
    try:
        db.flush()
    except IntegrityError:
        # The stub is the first write of the transaction, so nothing else is lost
        db.rollback()
        profile = db.query(Profile).filter(Profile.id == user_id).first()
        if profile:
            return profile
        if email is None:
            raise StoreFailure("Failed to create user profile")

        # Lost a race for the email, not for the id
        profile = Profile(id=user_id, email=None)
        db.add(profile)
        db.flush()

    logger.info("profile_created", user_id=user_id)
    return profile


def get_profile(db: Session, user_id: Optional[str]) -> ProfileDetail:
    """Get the current user's profile."""
    if not user_id:
        raise Unauthenticated(constants.AUTHENTICATION_REQUIRED)

    with store_operation(db, "fetch profile"):
        profile = db.query(Profile).filter(Profile.id == user_id).first()
        if not profile:
            raise NotFound("Profile not found")
        return ProfileDetail.model_validate(profile)


def update_profile(db: Session, user_id: Optional[str], data) -> ProfileDetail:
    """
    Create or update the current user's profile.

    Raises:
        ValidationFailed: Invalid payload, or the email belongs to another profile
    """
    if not user_id:
        raise Unauthenticated(constants.AUTHENTICATION_REQUIRED)

    profile_data = validate(ProfileUpdate, data)

    with store_operation(db, "update profile"):
        if _email_taken(db, profile_data.email, user_id):
            raise ValidationFailed([constants.EMAIL_IN_USE])

        profile = ensure_profile(db, user_id, profile_data.email)
        profile.full_name = profile_data.full_name
        profile.email = profile_data.email
        profile.state = profile_data.state
        profile.lga = profile_data.lga
        profile.avatar_url = profile_data.avatar_url
        db.commit()
        db.refresh(profile)
        return ProfileDetail.model_validate(profile)
