from .poll import (
    create_poll,
    delete_poll,
    get_poll,
    list_active_polls,
    update_poll,
)
from .profile import ensure_profile, get_profile, update_profile
from .results import calculate_percentage, get_poll_results
from .vote import cast_vote, get_user_vote

__all__ = [
    # polls
    "create_poll",
    "delete_poll",
    "get_poll",
    "list_active_polls",
    "update_poll",
    # votes
    "cast_vote",
    "get_user_vote",
    # results
    "calculate_percentage",
    "get_poll_results",
    # profiles
    "ensure_profile",
    "get_profile",
    "update_profile",
]
