"""Poll model."""
import uuid
from datetime import datetime, timezone as tz
from sqlalchemy import Column, String, Text, Boolean, DateTime, Enum, ForeignKey, Index
from sqlalchemy.orm import relationship

from inec_poll.core.constants import ELECTION_TYPES
from inec_poll.db.base import Base


class Poll(Base):
    __tablename__ = "polls"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    election_type = Column(Enum(*ELECTION_TYPES, name="election_type"), nullable=False)
    state = Column(String(100), nullable=True)
    lga = Column(String(100), nullable=True)
    # Null once the creator's profile is deleted; such polls can no longer be edited
    creator_id = Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    start_date = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))
    end_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(tz.utc),
        onupdate=lambda: datetime.now(tz.utc),
    )

    # Relationships
    creator = relationship("Profile", back_populates="polls")
    options = relationship(
        "PollOption",
        back_populates="poll",
        cascade="all, delete-orphan",
        order_by="PollOption.display_order",
    )
    votes = relationship("Vote", back_populates="poll", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_polls_election_type", "election_type"),
        Index("idx_polls_state", "state"),
        Index("idx_polls_creator_id", "creator_id"),
        Index("idx_polls_active", "is_active"),
    )
