"""Unit tests for payload validation."""
from datetime import datetime, timedelta, timezone

import pytest

from inec_poll.core.exceptions import ValidationFailed
from inec_poll.core.validation import format_validation_errors, validate
from inec_poll.schemas import PollCreate, PollUpdate, ProfileUpdate, VoteRequest
from tests.conftest import poll_payload


def _errors(schema, data):
    with pytest.raises(ValidationFailed) as exc_info:
        validate(schema, data)
    return exc_info.value.errors


@pytest.mark.unit
class TestPollCreateValidation:
    """Poll creation rules."""

    def test_valid_payload(self):
        poll = validate(PollCreate, poll_payload())
        assert poll.title == "2027 Presidential Election"
        assert len(poll.options) == 2
        assert poll.end_date.tzinfo is not None

    def test_requires_two_candidates(self):
        errors = _errors(PollCreate, poll_payload(options=[{"candidate_name": "Only One"}]))
        assert errors == ["At least 2 candidates are required"]

    def test_allows_at_most_ten_candidates(self):
        options = [{"candidate_name": f"Candidate {i}"} for i in range(11)]
        errors = _errors(PollCreate, poll_payload(options=options))
        assert errors == ["Maximum 10 candidates allowed"]

    def test_ten_candidates_accepted(self):
        options = [{"candidate_name": f"Candidate {i}"} for i in range(10)]
        assert len(validate(PollCreate, poll_payload(options=options)).options) == 10

    def test_blank_title_rejected(self):
        assert "Poll title is required" in _errors(PollCreate, poll_payload(title="   "))

    def test_title_length_limit(self):
        errors = _errors(PollCreate, poll_payload(title="x" * 501))
        assert errors == ["Poll title must be at most 500 characters"]

    def test_unknown_election_type(self):
        errors = _errors(PollCreate, poll_payload(election_type="Local Council"))
        assert errors[0].startswith("Election type must be one of:")

    def test_blank_candidate_name(self):
        errors = _errors(PollCreate, poll_payload(options=[
            {"candidate_name": "A"},
            {"candidate_name": "  "},
        ]))
        assert errors == ["Candidate name is required"]

    def test_candidate_name_length_limit(self):
        errors = _errors(PollCreate, poll_payload(options=[
            {"candidate_name": "A" * 256},
            {"candidate_name": "B"},
        ]))
        assert errors == ["Candidate name must be at most 255 characters"]

    def test_invalid_candidate_image_url(self):
        errors = _errors(PollCreate, poll_payload(options=[
            {"candidate_name": "A", "candidate_image_url": "not a url"},
            {"candidate_name": "B"},
        ]))
        assert errors == ["Must be a valid URL"]

    def test_javascript_url_rejected(self):
        errors = _errors(PollCreate, poll_payload(options=[
            {"candidate_name": "A", "candidate_image_url": "javascript:alert(1)"},
            {"candidate_name": "B"},
        ]))
        assert errors == ["Must be a valid URL"]

    def test_empty_image_url_becomes_none(self):
        poll = validate(PollCreate, poll_payload(options=[
            {"candidate_name": "A", "candidate_image_url": ""},
            {"candidate_name": "B", "candidate_image_url": "https://example.com/b.png"},
        ]))
        assert poll.options[0].candidate_image_url is None
        assert poll.options[1].candidate_image_url == "https://example.com/b.png"

    def test_empty_end_date_becomes_none(self):
        assert validate(PollCreate, poll_payload(end_date="")).end_date is None

    def test_end_date_normalized_to_utc(self):
        lagos = timezone(timedelta(hours=1))
        poll = validate(PollCreate, poll_payload(end_date=datetime(2030, 1, 1, 13, 0, tzinfo=lagos).isoformat()))
        assert poll.end_date == datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_text_fields_sanitized(self):
        poll = validate(PollCreate, poll_payload(title="<b>Governorship</b> poll", state="  Lagos "))
        assert poll.title == "Governorship poll"
        assert poll.state == "Lagos"

    def test_collects_every_violation(self):
        errors = _errors(PollCreate, poll_payload(title="", election_type="Mayor", options=[]))
        assert "Poll title is required" in errors
        assert "At least 2 candidates are required" in errors
        assert any(error.startswith("Election type must be one of:") for error in errors)

    def test_missing_field_uses_location(self):
        payload = poll_payload()
        del payload["title"]
        assert _errors(PollCreate, payload) == ["title: Field required"]

    def test_error_message_joins_errors(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate(PollCreate, poll_payload(title="", options=[]))
        assert exc_info.value.message == ", ".join(exc_info.value.errors)

    def test_update_accepts_is_active(self):
        poll = validate(PollUpdate, poll_payload(is_active=False))
        assert poll.is_active is False


@pytest.mark.unit
class TestOtherSchemas:

    def test_vote_request_requires_uuid(self):
        assert _errors(VoteRequest, {"option_id": "abc"}) == ["Invalid option ID"]

    def test_vote_request_normalizes_uuid(self):
        vote = validate(VoteRequest, {"option_id": "5D1E9A4B-0000-4000-8000-000000000001"})
        assert vote.option_id == "5d1e9a4b-0000-4000-8000-000000000001"

    def test_profile_email_lowercased(self):
        profile = validate(ProfileUpdate, {"full_name": "Ada", "email": "Ada@Example.COM"})
        assert profile.email == "ada@example.com"

    def test_profile_bad_email(self):
        assert _errors(ProfileUpdate, {"full_name": "Ada", "email": "ada"}) == ["Must be a valid email address"]


@pytest.mark.unit
class TestFormatValidationErrors:

    def test_strips_request_location(self):
        errors = [{"type": "missing", "loc": ("body", "options", 0, "candidate_name"), "msg": "Field required"}]
        assert format_validation_errors(errors) == ["options.0.candidate_name: Field required"]

    def test_deduplicates(self):
        error = {"type": "value_error", "loc": ("x",), "msg": "Value error, bad", "ctx": {"error": ValueError("bad")}}
        assert format_validation_errors([error, error]) == ["bad"]
