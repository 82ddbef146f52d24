"""Profile model."""
from datetime import datetime, timezone as tz
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship

from inec_poll.db.base import Base


class Profile(Base):
    __tablename__ = "profiles"

    # Same id as the user in the external auth provider
    id = Column(String(36), primary_key=True)
    email = Column(String(255), unique=True, nullable=True)
    full_name = Column(String(255), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    state = Column(String(100), nullable=True)
    lga = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(tz.utc),
        onupdate=lambda: datetime.now(tz.utc),
    )

    # Relationships
    polls = relationship("Poll", back_populates="creator", passive_deletes=True)
