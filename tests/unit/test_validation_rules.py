"""Tests for the declarative validation rule set.

Every rule list is evaluated in full: callers receive one message per
violated field, never only the first.
"""

import uuid
from datetime import UTC, date, datetime, time, timedelta

import pytest

from grh.core.errors import ValidationError
from grh.services.validation_rules import (
    EntityKind,
    FieldMessage,
    RuleContext,
    add_months,
    check,
    hours_between,
    merge_candidate,
    snapshot,
    validate,
)

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)

VALID_POSTING = {
    "title": "Python developer",
    "profession": "Developer",
    "description": "x" * 60,
    "contract_type": "permanent",
    "location": "Lyon",
    "required_skills": ["python"],
    "desired_salary": 45000,
}


def _fields(messages: list[FieldMessage]) -> set[str]:
    return {m.field for m in messages}


def _virtual_training(**overrides) -> dict:
    data = {
        "title": "English B2",
        "description": "Weekly English sessions",
        "modality": "virtual",
        "training_type": "language",
        "mission_id": uuid.uuid4(),
        "trainer_id": uuid.uuid4(),
        "meeting_link": "https://meet.google.com/abc-defg-hij",
        "scheduled_date": NOW + timedelta(days=3),
    }
    data.update(overrides)
    return data


# =============================================================================
# Job postings
# =============================================================================


class TestJobPostingRules:
    def test_valid_posting_has_no_messages(self):
        """A complete posting should pass every rule."""
        assert check(EntityKind.JOB_POSTING, VALID_POSTING) == []

    def test_every_violation_is_reported(self):
        """Blank title, short description and no skills should all be reported."""
        data = {**VALID_POSTING, "title": " ", "description": "too short", "required_skills": []}

        messages = check(EntityKind.JOB_POSTING, data)

        assert _fields(messages) == {"title", "description", "required_skills"}
        assert FieldMessage("title", "Title is required") in messages
        assert FieldMessage(
            "description", "Description must contain at least 50 characters"
        ) in messages
        assert FieldMessage("required_skills", "At least one skill is required") in messages

    def test_salary_out_of_range(self):
        """A salary above one million should be rejected."""
        messages = check(EntityKind.JOB_POSTING, {**VALID_POSTING, "desired_salary": 1_000_001})
        assert messages == [
            FieldMessage("desired_salary", "desired_salary must be between 0 and 1000000")
        ]

    def test_salary_is_optional(self):
        """A missing salary should not be reported."""
        data = {**VALID_POSTING, "desired_salary": None}
        assert check(EntityKind.JOB_POSTING, data) == []

    def test_unknown_contract_type(self):
        """A contract type outside the enumeration should be reported."""
        messages = check(EntityKind.JOB_POSTING, {**VALID_POSTING, "contract_type": "gig"})
        assert _fields(messages) == {"contract_type"}
        assert messages[0].message.startswith("contract_type must be one of")

    def test_update_validates_merged_candidate(self):
        """An update should be checked against the current values overlaid."""
        messages = check(EntityKind.JOB_POSTING, {"title": ""}, VALID_POSTING)
        assert _fields(messages) == {"title"}


# =============================================================================
# Interviews and missions
# =============================================================================


class TestInterviewRules:
    def test_posting_interview_requires_posting_reference(self):
        """A posting interview without a posting id should be rejected."""
        data = {
            "kind": "posting",
            "candidate_id": uuid.uuid4(),
            "scheduled_at": NOW,
            "meeting_link": "https://meet.example.com/x",
        }
        messages = check(EntityKind.INTERVIEW, data)
        assert messages == [FieldMessage("related_posting_id", "Posting reference required")]

    def test_application_interview_requires_application_reference(self):
        """An application interview without an application id should be rejected."""
        data = {
            "kind": "application",
            "candidate_id": uuid.uuid4(),
            "scheduled_at": NOW,
            "meeting_link": "https://meet.example.com/x",
        }
        messages = check(EntityKind.INTERVIEW, data)
        assert _fields(messages) == {"related_application_id"}

    def test_meeting_link_must_be_http(self):
        """A non-http meeting link should be rejected."""
        data = {
            "kind": "posting",
            "candidate_id": uuid.uuid4(),
            "related_posting_id": uuid.uuid4(),
            "scheduled_at": NOW,
            "meeting_link": "ftp://example.com",
        }
        messages = check(EntityKind.INTERVIEW, data)
        assert messages == [
            FieldMessage("meeting_link", "Meeting link must be an http(s) URL")
        ]


class TestMissionRules:
    def test_end_before_start(self):
        """An end date before the start date should be reported on end_date."""
        data = {
            "title": "Audit",
            "description": "Yearly audit",
            "start_date": NOW,
            "end_date": NOW - timedelta(days=1),
            "employee_id": uuid.uuid4(),
            "contract_id": uuid.uuid4(),
        }
        messages = check(EntityKind.MISSION, data)
        assert messages == [FieldMessage("end_date", "End date must be after start date")]

    def test_date_only_values_are_compared(self):
        """Plain dates should be compared like datetimes."""
        data = {
            "title": "Audit",
            "description": "Yearly audit",
            "start_date": date(2026, 5, 1),
            "end_date": date(2026, 4, 1),
            "employee_id": uuid.uuid4(),
            "contract_id": uuid.uuid4(),
        }
        assert _fields(check(EntityKind.MISSION, data)) == {"end_date"}

    @pytest.mark.parametrize("content", [None, "", "   ", 42])
    def test_feedback_requires_text(self, content):
        """Feedback should be a non-blank string."""
        messages = check(EntityKind.MISSION_FEEDBACK, {"content": content})
        assert messages == [FieldMessage("content", "Feedback text is required")]


# =============================================================================
# Trainings
# =============================================================================


class TestTrainingRules:
    def test_valid_virtual_training(self):
        """A virtual training with a Meet link and a future date should pass."""
        assert check(EntityKind.TRAINING, _virtual_training(), now=NOW) == []

    def test_hybrid_requires_location_and_link(self):
        """A hybrid training should need both a location and a meeting link."""
        data = _virtual_training(modality="hybrid", meeting_link=None)

        messages = check(EntityKind.TRAINING, data, now=NOW)

        assert FieldMessage(
            "location", "Location is required for in-person and hybrid trainings"
        ) in messages
        assert FieldMessage(
            "meeting_link", "Meeting link is required for virtual and hybrid trainings"
        ) in messages

    def test_meeting_link_must_be_google_meet(self):
        """A Zoom link should be rejected."""
        data = _virtual_training(meeting_link="https://zoom.us/j/123")
        messages = check(EntityKind.TRAINING, data, now=NOW)
        assert messages == [
            FieldMessage("meeting_link", "Meeting link must be a valid Google Meet link")
        ]

    def test_in_person_requires_start(self):
        """An in-person training without a start should be rejected."""
        data = _virtual_training(
            modality="in-person", meeting_link=None, scheduled_date=None, location="Paris"
        )
        messages = check(EntityKind.TRAINING, data, now=NOW)
        assert FieldMessage(
            "starts_at", "Start date is required for in-person trainings"
        ) in messages

    def test_in_person_start_in_past(self):
        """An in-person training starting before now should be rejected."""
        data = _virtual_training(
            modality="in-person",
            meeting_link=None,
            scheduled_date=None,
            location="Paris",
            starts_at=NOW - timedelta(hours=1),
            ends_at=NOW + timedelta(hours=2),
        )
        messages = check(EntityKind.TRAINING, data, now=NOW)
        assert messages == [FieldMessage("starts_at", "Start date cannot be in the past")]

    def test_virtual_date_in_past(self):
        """A virtual training dated yesterday should be rejected."""
        data = _virtual_training(scheduled_date=NOW - timedelta(days=1))
        messages = check(EntityKind.TRAINING, data, now=NOW)
        assert messages == [FieldMessage("scheduled_date", "Date cannot be in the past")]

    def test_past_date_ignored_when_schedule_unchanged(self):
        """Editing the title of a past training should not trip the date rule."""
        current = _virtual_training(scheduled_date=NOW - timedelta(days=10))
        assert check(EntityKind.TRAINING, {"title": "Renamed"}, current, now=NOW) == []

    def test_past_date_checked_when_schedule_changes(self):
        """Moving a training into the past should be rejected on update."""
        current = _virtual_training()
        changes = {"scheduled_date": NOW - timedelta(days=1)}
        messages = check(EntityKind.TRAINING, changes, current, now=NOW)
        assert _fields(messages) == {"scheduled_date"}

    def test_content_training_requires_items(self):
        """A content-based training without items should be rejected."""
        data = _virtual_training(modality="content", meeting_link=None, scheduled_date=None)
        messages = check(EntityKind.TRAINING, {**data, "contents": []}, now=NOW)
        assert messages == [
            FieldMessage(
                "contents", "A content-based training requires at least one content item"
            )
        ]

    def test_content_items_are_checked(self):
        """Each content item should report its own field path."""
        data = _virtual_training(modality="content", meeting_link=None, scheduled_date=None)
        contents = [
            {"content_type": "video", "url": "https://videos.example.com/1"},
            {"content_type": "podcast", "url": ""},
        ]
        messages = check(EntityKind.TRAINING, {**data, "contents": contents}, now=NOW)
        assert _fields(messages) == {"contents[1].content_type", "contents[1].url"}


# =============================================================================
# Replies, rejections, validate()
# =============================================================================


class TestShortTextRules:
    def test_reply_too_long(self):
        """A reply over 1000 characters should be rejected."""
        messages = check(EntityKind.NOTIFICATION_REPLY, {"content": "a" * 1001})
        assert _fields(messages) == {"content"}

    def test_rejection_reason_required(self):
        """A blank rejection reason should be rejected."""
        messages = check(EntityKind.REJECTION, {"rejection_reason": "  "})
        assert messages == [
            FieldMessage("rejection_reason", "A rejection reason is required")
        ]


class TestValidate:
    def test_raises_with_every_message(self):
        """validate() should raise one ValidationError listing every field."""
        with pytest.raises(ValidationError) as exc_info:
            validate(EntityKind.REJECTION, {"rejection_reason": None})

        error = exc_info.value
        assert error.code == "VALIDATION_ERROR"
        assert error.status_code == 400
        assert error.message == "A rejection reason is required"
        assert error.details == [
            {"field": "rejection_reason", "message": "A rejection reason is required"}
        ]

    def test_messages_joined(self):
        """Multiple messages should be joined with semicolons."""
        with pytest.raises(ValidationError) as exc_info:
            validate(EntityKind.TRAINING_CONTENT, {"content_type": "video"})
        assert exc_info.value.message == "Content url is required; Content title is required"

    def test_valid_payload_returns_none(self):
        """validate() should return silently for valid input."""
        assert validate(EntityKind.JOB_POSTING, VALID_POSTING) is None


class TestHelpers:
    def test_merge_candidate_overlays(self):
        """Proposed values should win over current ones."""
        assert merge_candidate({"a": 2}, {"a": 1, "b": 3}) == {"a": 2, "b": 3}

    def test_snapshot_reads_attributes(self):
        """snapshot() should read the named attributes, None when absent."""

        class Entity:
            title = "Audit"

        assert snapshot(Entity(), ("title", "missing")) == {"title": "Audit", "missing": None}

    def test_schedule_scope(self):
        """Schedule rules should apply on create and on schedule edits only."""
        assert RuleContext(now=NOW).schedule_in_scope is True
        title_only = RuleContext(now=NOW, proposed_fields=frozenset({"title"}), is_update=True)
        assert title_only.schedule_in_scope is False
        assert RuleContext(
            now=NOW, proposed_fields=frozenset({"starts_at"}), is_update=True
        ).schedule_in_scope is True


class TestTimesheetRules:
    def _entry(self, **overrides) -> dict:
        data = {
            "work_date": date(2026, 2, 27),
            "start_time": time(8, 30),
            "end_time": time(12, 0),
            "break_hours": 0.5,
            "overtime_hours": 0,
            "contract_start_date": date(2026, 1, 5),
        }
        data.update(overrides)
        return data

    def test_valid_entry(self):
        assert check(EntityKind.TIME_ENTRY, self._entry(), now=NOW) == []

    def test_break_cannot_exceed_span(self):
        """A 4h break on a 3.5h span should be rejected."""
        messages = check(EntityKind.TIME_ENTRY, self._entry(break_hours=4), now=NOW)
        assert messages == [
            FieldMessage("break_hours", "Break (4h) cannot exceed the time worked (3.5h)")
        ]

    def test_negative_overtime(self):
        messages = check(EntityKind.TIME_ENTRY, self._entry(overtime_hours=-1), now=NOW)
        assert _fields(messages) == {"overtime_hours"}

    def test_entry_date_window(self):
        """An entry cannot be in the future nor before the contract."""
        future = check(EntityKind.TIME_ENTRY, self._entry(work_date=date(2026, 3, 3)), now=NOW)
        early = check(EntityKind.TIME_ENTRY, self._entry(work_date=date(2026, 1, 2)), now=NOW)
        assert _fields(future) == _fields(early) == {"work_date"}

    def test_absence_three_months_ahead(self):
        absence = {"absence_type": "paid-leave", "duration_days": 5}
        ok = check(EntityKind.ABSENCE, {**absence, "start_date": date(2026, 6, 2)}, now=NOW)
        late = check(EntityKind.ABSENCE, {**absence, "start_date": date(2026, 6, 3)}, now=NOW)
        assert ok == []
        assert _fields(late) == {"start_date"}

    def test_hours_between(self):
        assert hours_between(time(9, 15), time(17, 45)) == 8.5

    def test_add_months_clamps_to_month_end(self):
        assert add_months(date(2026, 11, 30), 3) == date(2027, 2, 28)
