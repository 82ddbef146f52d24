"""Unit tests for poll services."""
from datetime import timedelta
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from inec_poll.core.utils import utcnow
from inec_poll.core.exceptions import (
    Forbidden,
    NotFound,
    StoreFailure,
    Unauthenticated,
    ValidationFailed,
)
from inec_poll.db.models import Poll, PollOption, Profile, Vote
from inec_poll.services.poll import (
    create_poll,
    delete_poll,
    get_poll,
    list_active_polls,
    update_poll,
)
from inec_poll.services.vote import cast_vote
from tests.conftest import USER_A, USER_B, poll_payload


@pytest.mark.unit
class TestCreatePoll:

    def test_creates_poll_options_and_profile(self, db_session):
        poll_id = create_poll(db_session, poll_payload(), USER_A, "a@example.com")

        poll = db_session.query(Poll).filter(Poll.id == poll_id).one()
        assert poll.creator_id == USER_A
        assert poll.is_active is True
        assert [o.display_order for o in poll.options] == [1, 2]
        assert [o.candidate_name for o in poll.options] == ["Candidate A", "Candidate B"]

        profile = db_session.query(Profile).filter(Profile.id == USER_A).one()
        assert profile.email == "a@example.com"

    def test_existing_profile_is_reused(self, db_session):
        create_poll(db_session, poll_payload(), USER_A, "a@example.com")
        create_poll(db_session, poll_payload(title="Second"), USER_A, "a@example.com")
        assert db_session.query(Profile).count() == 1

    def test_stub_profile_without_email(self, db_session):
        create_poll(db_session, poll_payload(), USER_A)
        create_poll(db_session, poll_payload(), USER_B)
        assert db_session.query(Profile).filter(Profile.email.is_(None)).count() == 2

    def test_requires_identity(self, db_session):
        with pytest.raises(Unauthenticated):
            create_poll(db_session, poll_payload(), None)
        assert db_session.query(Poll).count() == 0

    def test_invalid_payload_writes_nothing(self, db_session):
        with pytest.raises(ValidationFailed) as exc_info:
            create_poll(db_session, poll_payload(options=[{"candidate_name": "Solo"}]), USER_A)

        assert exc_info.value.errors == ["At least 2 candidates are required"]
        assert db_session.query(Poll).count() == 0
        assert db_session.query(Profile).count() == 0

    def test_store_failure_leaves_no_orphan_poll(self, db_session):
        """A failing commit rolls back the poll together with its options."""
        with patch.object(db_session, "commit", side_effect=OperationalError("INSERT", {}, Exception("disk full"))):
            with pytest.raises(StoreFailure, match="Failed to create poll: disk full"):
                create_poll(db_session, poll_payload(), USER_A)

        assert db_session.query(Poll).count() == 0
        assert db_session.query(PollOption).count() == 0

    def test_invalidates_cached_lists(self, db_session):
        with patch("inec_poll.services.poll.revalidate_path") as mock_revalidate:
            create_poll(db_session, poll_payload(), USER_A)
        mock_revalidate.assert_called_once_with("/polls")


@pytest.mark.unit
class TestListAndGet:

    def test_lists_active_polls_newest_first(self, db_session):
        first = create_poll(db_session, poll_payload(title="First"), USER_A)
        second = create_poll(db_session, poll_payload(title="Second"), USER_A)
        closed = create_poll(db_session, poll_payload(title="Closed"), USER_A)
        now = utcnow()
        db_session.query(Poll).filter(Poll.id == first).update({"created_at": now - timedelta(hours=2)})
        db_session.query(Poll).filter(Poll.id == second).update({"created_at": now - timedelta(hours=1)})
        db_session.query(Poll).filter(Poll.id == closed).update({"is_active": False})
        db_session.commit()

        polls = list_active_polls(db_session)

        assert [p.id for p in polls] == [second, first]

    def test_filters(self, db_session):
        create_poll(db_session, poll_payload(election_type="Gubernatorial", state="Kano"), USER_A)
        lagos = create_poll(db_session, poll_payload(election_type="Gubernatorial", state="Lagos"), USER_A)
        create_poll(db_session, poll_payload(election_type="Presidential", state="Lagos"), USER_A)

        polls = list_active_polls(db_session, election_type="Gubernatorial", state="Lagos")

        assert [p.id for p in polls] == [lagos]

    def test_get_poll_includes_options_and_totals(self, db_session):
        poll_id = create_poll(db_session, poll_payload(), USER_A, "a@example.com")
        detail = get_poll(db_session, poll_id)
        cast_vote(db_session, poll_id, detail.options[0].id, USER_B)

        detail = get_poll(db_session, poll_id)

        assert detail.total_votes == 1
        assert len(detail.options) == 2
        assert detail.creator.email == "a@example.com"

    def test_get_inactive_poll(self, db_session):
        poll_id = create_poll(db_session, poll_payload(), USER_A)
        db_session.query(Poll).filter(Poll.id == poll_id).update({"is_active": False})
        db_session.commit()
        assert get_poll(db_session, poll_id).is_active is False

    def test_get_unknown_poll(self, db_session):
        with pytest.raises(NotFound, match="Poll not found"):
            get_poll(db_session, "does-not-exist")


@pytest.mark.unit
class TestUpdatePoll:

    def test_creator_replaces_fields_and_options(self, db_session):
        poll_id = create_poll(db_session, poll_payload(), USER_A)
        old_option = get_poll(db_session, poll_id).options[0].id
        cast_vote(db_session, poll_id, old_option, USER_B)

        update_poll(db_session, poll_id, poll_payload(
            title="Renamed",
            options=[{"candidate_name": "X"}, {"candidate_name": "Y"}, {"candidate_name": "Z"}],
        ), USER_A)

        detail = get_poll(db_session, poll_id)
        assert detail.title == "Renamed"
        assert [o.candidate_name for o in detail.options] == ["X", "Y", "Z"]
        assert [o.display_order for o in detail.options] == [1, 2, 3]
        # Votes for the replaced options go with them
        assert db_session.query(Vote).count() == 0

    def test_close_poll(self, db_session):
        poll_id = create_poll(db_session, poll_payload(), USER_A)
        update_poll(db_session, poll_id, poll_payload(is_active=False), USER_A)
        assert get_poll(db_session, poll_id).is_active is False

    def test_other_user_forbidden(self, db_session):
        poll_id = create_poll(db_session, poll_payload(), USER_A)
        with pytest.raises(Forbidden, match="You can only update your own polls"):
            update_poll(db_session, poll_id, poll_payload(title="Hijacked"), USER_B)
        assert get_poll(db_session, poll_id).title == "2027 Presidential Election"

    def test_orphaned_poll_cannot_be_updated(self, db_session):
        poll_id = create_poll(db_session, poll_payload(), USER_A)
        db_session.query(Poll).filter(Poll.id == poll_id).update({"creator_id": None})
        db_session.commit()
        with pytest.raises(Forbidden):
            update_poll(db_session, poll_id, poll_payload(), USER_A)

    def test_unknown_poll(self, db_session):
        with pytest.raises(NotFound):
            update_poll(db_session, "missing", poll_payload(), USER_A)

    def test_requires_identity(self, db_session):
        with pytest.raises(Unauthenticated):
            update_poll(db_session, "missing", poll_payload(), None)

    def test_invalid_payload(self, db_session):
        poll_id = create_poll(db_session, poll_payload(), USER_A)
        with pytest.raises(ValidationFailed):
            update_poll(db_session, poll_id, poll_payload(options=[]), USER_A)
        assert len(get_poll(db_session, poll_id).options) == 2


@pytest.mark.unit
class TestDeletePoll:

    def test_removes_poll_options_and_votes(self, db_session):
        poll_id = create_poll(db_session, poll_payload(), USER_A)
        cast_vote(db_session, poll_id, get_poll(db_session, poll_id).options[1].id, USER_B)

        delete_poll(db_session, poll_id, USER_A)

        assert db_session.query(Poll).count() == 0
        assert db_session.query(PollOption).count() == 0
        assert db_session.query(Vote).count() == 0

    def test_other_user_forbidden(self, db_session):
        poll_id = create_poll(db_session, poll_payload(), USER_A)
        with pytest.raises(Forbidden, match="You can only delete your own polls"):
            delete_poll(db_session, poll_id, USER_B)
        assert db_session.query(Poll).count() == 1

    def test_unknown_poll(self, db_session):
        with pytest.raises(NotFound):
            delete_poll(db_session, "missing", USER_A)

    def test_requires_identity(self, db_session):
        with pytest.raises(Unauthenticated):
            delete_poll(db_session, "missing", None)
