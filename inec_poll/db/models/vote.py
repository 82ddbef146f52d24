"""Vote model."""
import uuid
from datetime import datetime, timezone as tz
from sqlalchemy import Column, String, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship

from inec_poll.db.base import Base


class Vote(Base):
    __tablename__ = "votes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    poll_id = Column(String(36), ForeignKey("polls.id", ondelete="CASCADE"), nullable=False)
    option_id = Column(String(36), ForeignKey("poll_options.id", ondelete="CASCADE"), nullable=False)
    voter_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=True)
    voter_ip_address = Column(String(45), nullable=True)  # Fits IPv6 text form
    voted_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))

    # Relationships
    poll = relationship("Poll", back_populates="votes")
    option = relationship("PollOption", back_populates="votes")

    __table_args__ = (
        Index("idx_votes_poll_id", "poll_id"),
        Index("idx_votes_option_id", "option_id"),
        Index("idx_votes_voter_id", "voter_id"),
        Index("idx_votes_voted_at", "voted_at"),
        UniqueConstraint("poll_id", "voter_id", name="uq_votes_poll_voter"),
    )
