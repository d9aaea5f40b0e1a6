"""Validation rule set for every lifecycle entity.

Rules are declared as data: each entity kind maps to an ordered list of rule
functions. A rule receives the candidate (current values overlaid with the
proposed ones) and a RuleContext, and yields the FieldMessages it finds.
Evaluation never stops at the first failure, so the caller gets every
violated field at once.

Usage:
    validate(EntityKind.TRAINING, proposed, now=now)            # create
    validate(EntityKind.TRAINING, changes, current, now=now)    # update
"""

import calendar
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time
from enum import Enum
from typing import Any

from grh.core.errors import ValidationError
from grh.models.enums import (
    AbsenceType,
    ContentType,
    ContractType,
    InterviewKind,
    TrainingModality,
    TrainingType,
)

# =============================================================================
# Constants
# =============================================================================

POSTING_TITLE_MAX = 100
POSTING_PROFESSION_MAX = 50
POSTING_DESCRIPTION_MIN = 50
SALARY_MIN = 0
SALARY_MAX = 1_000_000
REJECTION_REASON_MAX = 500
TRAINING_TITLE_MAX = 100
TRAINING_DESCRIPTION_MAX = 500
REPLY_CONTENT_MAX = 1000
CV_NAME_MAX = 100
TIMESHEET_COMMENT_MAX = 1000
WORKDAY_HOURS_MAX = 24
ABSENCE_DAYS_MAX = 366
ABSENCE_MONTHS_AHEAD = 3

MEETING_LINK_PATTERN = re.compile(r"^https?://.+")
GOOGLE_MEET_PATTERN = re.compile(r"^https://meet\.google\.com/[a-z0-9-]+$")

_SCHEDULE_FIELDS = frozenset({"modality", "starts_at", "ends_at", "scheduled_date"})


class EntityKind(Enum):
    """Entity kinds with a declared rule list."""

    JOB_POSTING = "job_posting"
    INTERVIEW = "interview"
    MISSION = "mission"
    MISSION_FEEDBACK = "mission_feedback"
    TRAINING = "training"
    TRAINING_CONTENT = "training_content"
    NOTIFICATION_REPLY = "notification_reply"
    REJECTION = "rejection"
    JOB_OFFER = "job_offer"
    CONTRACT = "contract"
    CV_PROFILE = "cv_profile"
    TIME_ENTRY = "time_entry"
    ABSENCE = "absence"


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class FieldMessage:
    """One violated rule.

    Attributes:
        field: Name of the offending field.
        message: Human-readable explanation.
    """

    field: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


@dataclass(frozen=True)
class RuleContext:
    """Evaluation context passed to every rule.

    Attributes:
        now: Reference instant for time-based rules.
        proposed_fields: Keys present in the proposed change set.
        is_update: True when a current entity was supplied.
    """

    now: datetime
    proposed_fields: frozenset[str] = field(default_factory=frozenset)
    is_update: bool = False

    @property
    def schedule_in_scope(self) -> bool:
        """Whether not-in-the-past schedule rules apply.

        On update they only apply when the schedule or modality changes,
        so editing the title of a past training stays possible.
        """
        return not self.is_update or bool(self.proposed_fields & _SCHEDULE_FIELDS)


Rule = Callable[[Mapping[str, Any], RuleContext], Iterable[FieldMessage]]


# =============================================================================
# Value helpers
# =============================================================================


def _get(candidate: Mapping[str, Any], name: str) -> Any:
    value = candidate.get(name)
    if isinstance(value, Enum):
        return value.value
    return value


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


# =============================================================================
# Rule builders
# =============================================================================


def required(name: str, message: str | None = None) -> Rule:
    """Field must be present and not blank."""

    def rule(candidate: Mapping[str, Any], _ctx: RuleContext) -> Iterable[FieldMessage]:
        if _is_blank(_get(candidate, name)):
            yield FieldMessage(name, message or f"{name} is required")

    return rule


def max_length(name: str, limit: int) -> Rule:
    """String field, when present, is at most ``limit`` characters."""

    def rule(candidate: Mapping[str, Any], _ctx: RuleContext) -> Iterable[FieldMessage]:
        value = _get(candidate, name)
        if isinstance(value, str) and len(value) > limit:
            yield FieldMessage(name, f"{name} must be at most {limit} characters")

    return rule


def min_length(name: str, limit: int, message: str) -> Rule:
    """String field, when present, is at least ``limit`` characters."""

    def rule(candidate: Mapping[str, Any], _ctx: RuleContext) -> Iterable[FieldMessage]:
        value = _get(candidate, name)
        if isinstance(value, str) and value.strip() and len(value) < limit:
            yield FieldMessage(name, message)

    return rule


def one_of(name: str, enum_cls: type[Enum], *, optional: bool = False) -> Rule:
    """Field value belongs to an enumeration."""
    allowed = [m.value for m in enum_cls]

    def rule(candidate: Mapping[str, Any], _ctx: RuleContext) -> Iterable[FieldMessage]:
        value = _get(candidate, name)
        if value is None:
            if not optional:
                yield FieldMessage(name, f"{name} is required")
            return
        if value not in allowed:
            yield FieldMessage(name, f"{name} must be one of {allowed}")

    return rule


def number_range(name: str, low: float, high: float) -> Rule:
    """Numeric field, when present, lies within [low, high]."""

    def rule(candidate: Mapping[str, Any], _ctx: RuleContext) -> Iterable[FieldMessage]:
        value = _get(candidate, name)
        if value is None:
            return
        if isinstance(value, bool) or not isinstance(value, int | float):
            yield FieldMessage(name, f"{name} must be a number")
        elif not low <= value <= high:
            yield FieldMessage(name, f"{name} must be between {low} and {high}")

    return rule


def matches(name: str, pattern: re.Pattern[str], message: str) -> Rule:
    """String field, when present, matches ``pattern``."""

    def rule(candidate: Mapping[str, Any], _ctx: RuleContext) -> Iterable[FieldMessage]:
        value = _get(candidate, name)
        if _is_blank(value):
            return
        if not isinstance(value, str) or not pattern.match(value):
            yield FieldMessage(name, message)

    return rule


def when(predicate: Callable[[Mapping[str, Any]], bool], *rules: Rule) -> Rule:
    """Apply ``rules`` only when ``predicate`` holds on the candidate."""

    def rule(candidate: Mapping[str, Any], ctx: RuleContext) -> Iterable[FieldMessage]:
        if predicate(candidate):
            for inner in rules:
                yield from inner(candidate, ctx)

    return rule


def field_in(name: str, *values: Enum) -> Callable[[Mapping[str, Any]], bool]:
    """Predicate: field value is one of ``values``."""
    wanted = {v.value for v in values}
    return lambda candidate: _get(candidate, name) in wanted


# =============================================================================
# Entity-specific rules
# =============================================================================


def _skills_non_empty(name: str) -> Rule:
    def rule(candidate: Mapping[str, Any], _ctx: RuleContext) -> Iterable[FieldMessage]:
        skills = candidate.get(name)
        if not isinstance(skills, list | tuple) or not skills:
            yield FieldMessage(name, "At least one skill is required")
        elif any(_is_blank(skill) for skill in skills):
            yield FieldMessage(name, "Skills cannot be empty")

    return rule


def _end_after_start(start: str, end: str, message: str) -> Rule:
    def rule(candidate: Mapping[str, Any], _ctx: RuleContext) -> Iterable[FieldMessage]:
        start_value = candidate.get(start)
        end_value = candidate.get(end)
        if isinstance(start_value, datetime) and isinstance(end_value, datetime):
            if _aware(end_value) <= _aware(start_value):
                yield FieldMessage(end, message)
        elif (
            isinstance(start_value, date)
            and isinstance(end_value, date)
            and not isinstance(start_value, datetime)
            and not isinstance(end_value, datetime)
            and end_value <= start_value
        ):
            yield FieldMessage(end, message)

    return rule


def _not_in_past(name: str, message: str) -> Rule:
    def rule(candidate: Mapping[str, Any], ctx: RuleContext) -> Iterable[FieldMessage]:
        value = candidate.get(name)
        if ctx.schedule_in_scope and isinstance(value, datetime):
            if _aware(value) < ctx.now:
                yield FieldMessage(name, message)

    return rule


def _training_contents(candidate: Mapping[str, Any], _ctx: RuleContext) -> Iterable[FieldMessage]:
    contents = candidate.get("contents") or []
    allowed = ContentType.values()
    for index, item in enumerate(contents):
        item_type = _get(item, "content_type")
        if item_type not in allowed:
            yield FieldMessage(
                f"contents[{index}].content_type",
                f"content_type must be one of {allowed}",
            )
        if _is_blank(_get(item, "url")):
            yield FieldMessage(f"contents[{index}].url", "Content url is required")


def _content_modality_has_items(
    candidate: Mapping[str, Any], _ctx: RuleContext
) -> Iterable[FieldMessage]:
    if not candidate.get("contents"):
        yield FieldMessage(
            "contents", "A content-based training requires at least one content item"
        )


def hours_between(start: time, end: time) -> float:
    """Length of the same-day span from ``start`` to ``end``, in hours."""
    minutes = (end.hour * 60 + end.minute) - (start.hour * 60 + start.minute)
    return minutes / 60


def add_months(day: date, months: int) -> date:
    """Same day ``months`` later, clamped to the end of shorter months."""
    index = day.month - 1 + months
    year, month = day.year + index // 12, index % 12 + 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def _times_ordered(candidate: Mapping[str, Any], _ctx: RuleContext) -> Iterable[FieldMessage]:
    start, end = candidate.get("start_time"), candidate.get("end_time")
    if isinstance(start, time) and isinstance(end, time) and end <= start:
        yield FieldMessage("end_time", "End time must be after start time")


def _break_within_worked_time(
    candidate: Mapping[str, Any], _ctx: RuleContext
) -> Iterable[FieldMessage]:
    start, end = candidate.get("start_time"), candidate.get("end_time")
    pause = candidate.get("break_hours")
    if not (isinstance(start, time) and isinstance(end, time) and end > start):
        return
    if isinstance(pause, int | float) and not isinstance(pause, bool):
        worked = hours_between(start, end)
        if pause > worked:
            yield FieldMessage(
                "break_hours",
                f"Break ({pause:g}h) cannot exceed the time worked ({worked:g}h)",
            )


def _not_after_today(name: str, message: str) -> Rule:
    def rule(candidate: Mapping[str, Any], ctx: RuleContext) -> Iterable[FieldMessage]:
        value = candidate.get(name)
        if isinstance(value, date) and not isinstance(value, datetime):
            if value > ctx.now.date():
                yield FieldMessage(name, message)

    return rule


def _within_months_ahead(name: str, months: int) -> Rule:
    def rule(candidate: Mapping[str, Any], ctx: RuleContext) -> Iterable[FieldMessage]:
        value = candidate.get(name)
        if isinstance(value, date) and not isinstance(value, datetime):
            if value > add_months(ctx.now.date(), months):
                yield FieldMessage(
                    name, f"Date cannot be more than {months} months in the future"
                )

    return rule


def _not_before_contract(name: str) -> Rule:
    def rule(candidate: Mapping[str, Any], _ctx: RuleContext) -> Iterable[FieldMessage]:
        value = candidate.get(name)
        contract_start = candidate.get("contract_start_date")
        if isinstance(value, date) and isinstance(contract_start, date) and value < contract_start:
            yield FieldMessage(name, "Date is before the start of the contract")

    return rule


def _is_string(name: str, message: str) -> Rule:
    def rule(candidate: Mapping[str, Any], _ctx: RuleContext) -> Iterable[FieldMessage]:
        value = candidate.get(name)
        if not isinstance(value, str) or not value.strip():
            yield FieldMessage(name, message)

    return rule


# =============================================================================
# Rule Table
# =============================================================================

_IN_PERSON_OR_HYBRID = field_in(
    "modality", TrainingModality.IN_PERSON, TrainingModality.HYBRID
)
_VIRTUAL_OR_HYBRID = field_in("modality", TrainingModality.VIRTUAL, TrainingModality.HYBRID)

RULES: dict[EntityKind, list[Rule]] = {
    EntityKind.JOB_POSTING: [
        required("title", "Title is required"),
        max_length("title", POSTING_TITLE_MAX),
        required("profession", "Profession is required"),
        max_length("profession", POSTING_PROFESSION_MAX),
        required("description", "Description is required"),
        min_length(
            "description",
            POSTING_DESCRIPTION_MIN,
            "Description must contain at least 50 characters",
        ),
        one_of("contract_type", ContractType),
        required("location", "Location is required"),
        _skills_non_empty("required_skills"),
        number_range("desired_salary", SALARY_MIN, SALARY_MAX),
        max_length("rejection_reason", REJECTION_REASON_MAX),
    ],
    EntityKind.INTERVIEW: [
        one_of("kind", InterviewKind),
        required("candidate_id", "Candidate is required"),
        when(
            field_in("kind", InterviewKind.POSTING),
            required("related_posting_id", "Posting reference required"),
        ),
        when(
            field_in("kind", InterviewKind.APPLICATION),
            required("related_application_id", "Application reference required"),
        ),
        required("scheduled_at", "Interview date is required"),
        required("meeting_link", "Meeting link is required"),
        matches(
            "meeting_link",
            MEETING_LINK_PATTERN,
            "Meeting link must be an http(s) URL",
        ),
    ],
    EntityKind.MISSION: [
        required("title", "Mission name is required"),
        required("description", "Description is required"),
        required("start_date", "Start date is required"),
        required("employee_id", "Employee is required"),
        required("contract_id", "Contract is required"),
        _end_after_start("start_date", "end_date", "End date must be after start date"),
    ],
    EntityKind.MISSION_FEEDBACK: [
        _is_string("content", "Feedback text is required"),
    ],
    EntityKind.TRAINING: [
        required("title", "Title is required"),
        max_length("title", TRAINING_TITLE_MAX),
        required("description", "Description is required"),
        max_length("description", TRAINING_DESCRIPTION_MAX),
        one_of("modality", TrainingModality),
        one_of("training_type", TrainingType),
        required("mission_id", "Mission is required"),
        required("trainer_id", "Trainer is required"),
        when(
            _IN_PERSON_OR_HYBRID,
            required("location", "Location is required for in-person and hybrid trainings"),
        ),
        when(
            _VIRTUAL_OR_HYBRID,
            required(
                "meeting_link",
                "Meeting link is required for virtual and hybrid trainings",
            ),
        ),
        matches(
            "meeting_link",
            GOOGLE_MEET_PATTERN,
            "Meeting link must be a valid Google Meet link",
        ),
        when(
            field_in("modality", TrainingModality.IN_PERSON),
            required("starts_at", "Start date is required for in-person trainings"),
            required("ends_at", "End date is required for in-person trainings"),
            _end_after_start("starts_at", "ends_at", "End date must be after start date"),
            _not_in_past("starts_at", "Start date cannot be in the past"),
        ),
        when(
            _VIRTUAL_OR_HYBRID,
            required("scheduled_date", "Date is required for virtual and hybrid trainings"),
            _not_in_past("scheduled_date", "Date cannot be in the past"),
        ),
        when(field_in("modality", TrainingModality.CONTENT), _content_modality_has_items),
        _training_contents,
    ],
    EntityKind.TRAINING_CONTENT: [
        one_of("content_type", ContentType),
        required("url", "Content url is required"),
        required("title", "Content title is required"),
    ],
    EntityKind.NOTIFICATION_REPLY: [
        _is_string("content", "Reply content is required"),
        max_length("content", REPLY_CONTENT_MAX),
    ],
    EntityKind.REJECTION: [
        _is_string("rejection_reason", "A rejection reason is required"),
        max_length("rejection_reason", REJECTION_REASON_MAX),
    ],
    EntityKind.JOB_OFFER: [
        required("title", "Title is required"),
        max_length("title", POSTING_TITLE_MAX),
        required("description", "Description is required"),
        required("location", "Location is required"),
        one_of("contract_type", ContractType),
    ],
    EntityKind.CONTRACT: [
        required("title", "Title is required"),
        required("position", "Position is required"),
        required("employee_id", "Employee is required"),
        required("company_id", "Company is required"),
        one_of("contract_type", ContractType),
        required("start_date", "Start date is required"),
        _end_after_start("start_date", "end_date", "End date must be after start date"),
        number_range("salary", SALARY_MIN, SALARY_MAX),
    ],
    EntityKind.CV_PROFILE: [
        required("name", "Name is required"),
        max_length("name", CV_NAME_MAX),
        required("profession", "Profession is required"),
        max_length("profession", POSTING_PROFESSION_MAX),
        _skills_non_empty("skills"),
    ],
    EntityKind.TIME_ENTRY: [
        required("work_date", "Date is required"),
        required("start_time", "Start time is required"),
        required("end_time", "End time is required"),
        _times_ordered,
        number_range("break_hours", 0, WORKDAY_HOURS_MAX),
        number_range("overtime_hours", 0, WORKDAY_HOURS_MAX),
        _break_within_worked_time,
        _not_after_today("work_date", "Date cannot be in the future"),
        _not_before_contract("work_date"),
        max_length("comment", TIMESHEET_COMMENT_MAX),
    ],
    EntityKind.ABSENCE: [
        one_of("absence_type", AbsenceType),
        required("start_date", "Date is required"),
        required("duration_days", "Duration is required"),
        number_range("duration_days", 1, ABSENCE_DAYS_MAX),
        _within_months_ahead("start_date", ABSENCE_MONTHS_AHEAD),
        _not_before_contract("start_date"),
        max_length("justification", TIMESHEET_COMMENT_MAX),
        max_length("comment", TIMESHEET_COMMENT_MAX),
    ],
}


# =============================================================================
# Public Functions
# =============================================================================


def merge_candidate(
    proposed: Mapping[str, Any],
    current: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Overlay proposed values on the current ones."""
    candidate = dict(current or {})
    candidate.update(proposed)
    return candidate


def snapshot(entity: object, fields: Iterable[str]) -> dict[str, Any]:
    """Read ``fields`` off an entity into a candidate mapping."""
    return {name: getattr(entity, name, None) for name in fields}


def check(
    kind: EntityKind,
    proposed: Mapping[str, Any],
    current: Mapping[str, Any] | None = None,
    *,
    now: datetime | None = None,
) -> list[FieldMessage]:
    """Evaluate every rule of ``kind`` and return all violations.

    Args:
        kind: Entity kind whose rule list applies.
        proposed: Proposed field values (full entity on create, changes on update).
        current: Current field values on update, None on create.
        now: Reference instant for time-based rules. Defaults to now (UTC).

    Returns:
        List of FieldMessages, empty when the candidate is valid.
    """
    ctx = RuleContext(
        now=_aware(now) if now else datetime.now(UTC),
        proposed_fields=frozenset(proposed),
        is_update=current is not None,
    )
    candidate = merge_candidate(proposed, current)
    messages: list[FieldMessage] = []
    for rule in RULES[kind]:
        messages.extend(rule(candidate, ctx))
    return messages


def validate(
    kind: EntityKind,
    proposed: Mapping[str, Any],
    current: Mapping[str, Any] | None = None,
    *,
    now: datetime | None = None,
) -> None:
    """Evaluate every rule of ``kind`` and raise when any is violated.

    Raises:
        ValidationError: With one detail entry per violated field.
    """
    messages = check(kind, proposed, current, now=now)
    if messages:
        raise ValidationError(
            message="; ".join(m.message for m in messages),
            details=[m.as_dict() for m in messages],
        )
