"""Database models."""
from inec_poll.db.models.profile import Profile
from inec_poll.db.models.poll import Poll
from inec_poll.db.models.poll_option import PollOption
from inec_poll.db.models.vote import Vote

__all__ = ["Profile", "Poll", "PollOption", "Vote"]
