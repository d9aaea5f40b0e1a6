"""Status transition guards for every lifecycle entity.

State machines:

    JobPosting:  pending <-> published (owner)
                 pending/published -> rejected* (admin)
                 pending/published -> expired* (system, time-triggered)
                 archived* (no transitions)
    JobOffer:    open -> closed* (company) | rejected* (admin, unless validated)
    Interview:   scheduled -> scheduled (reschedule), completed*, cancelled*
    Mission:     todo -> in-progress -> done (assigned employee)
                 done -> validated* (company) | in-progress (company rejection)
                 any non-terminal -> cancelled* (company or admin)
    Training:    draft -> scheduled -> in-progress -> completed*
                 any non-terminal -> cancelled* (company)
    Contract:    draft -> published (admin) -> signed* | rejected* (employee)
    TimeEntry,
    Absence:     pending -> validated* | rejected* (company)

(* = terminal)

A transition may carry a guard (extra precondition on the entity) and an
effect (side fields forced by the move, e.g. the new expiration date when a
posting is published).
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

from grh.core.config import settings
from grh.core.errors import ConflictError
from grh.models.enums import (
    ContractState,
    InterviewOutcome,
    InterviewStatus,
    MissionStatus,
    OfferStatus,
    PostingStatus,
    TrainingStatus,
    ValidationState,
)

# =============================================================================
# Enums
# =============================================================================


class LifecycleEntity(Enum):
    """Entities governed by a state machine."""

    JOB_POSTING = "Job posting"
    JOB_OFFER = "Job offer"
    INTERVIEW = "Interview"
    MISSION = "Mission"
    TRAINING = "Training"
    CONTRACT = "Contract"
    TIME_ENTRY = "Time entry"
    ABSENCE = "Absence"


class ActorRole(Enum):
    """Role the actor plays toward the entity being transitioned."""

    OWNER = "owner"
    ADMIN = "admin"
    COMPANY = "company"
    EMPLOYEE = "employee"
    SYSTEM = "system"


# =============================================================================
# Exceptions
# =============================================================================


class InvalidStatusTransitionError(ConflictError):
    """Raised when attempting a transition the state machine does not allow."""

    def __init__(
        self,
        entity: LifecycleEntity,
        current: str,
        target: str,
        valid_transitions: list[str],
    ) -> None:
        self.entity = entity
        self.current = current
        self.target = target
        self.valid_transitions = valid_transitions
        super().__init__(
            code="INVALID_STATUS_TRANSITION",
            message=(
                f"{entity.value} cannot go from {current} to {target}. "
                f"Valid transitions: {valid_transitions or 'none (terminal state)'}"
            ),
        )


class TerminalStatusError(ConflictError):
    """Raised when the entity is already in a terminal status."""

    def __init__(self, entity: LifecycleEntity, current: str) -> None:
        self.entity = entity
        self.current = current
        super().__init__(
            code="TERMINAL_STATUS",
            message=f"{entity.value} is {current} and can no longer be modified",
        )


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class TransitionResult:
    """Result of a status transition.

    Attributes:
        new_status: The status after transition.
        changes: Every field to write, the status included.
    """

    new_status: str
    changes: dict[str, Any] = field(default_factory=dict)


Guard = Callable[[Mapping[str, Any], datetime], None]
Effect = Callable[[Mapping[str, Any], datetime], dict[str, Any]]


@dataclass(frozen=True)
class _Transition:
    roles: frozenset[ActorRole]
    guard: Guard | None = None
    effect: Effect | None = None


# =============================================================================
# Guards and effects
# =============================================================================


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _require_publishable(context: Mapping[str, Any], now: datetime) -> None:
    expiration = context.get("expiration_date")
    if isinstance(expiration, datetime) and _aware(expiration) < now:
        raise ConflictError("Cannot publish an expired posting", code="POSTING_EXPIRED")
    if not context.get("linked_cv_profile_id"):
        raise ConflictError(
            "A CV profile is required to publish this posting",
            code="CV_PROFILE_REQUIRED",
        )


def _reset_expiration(context: Mapping[str, Any], now: datetime) -> dict[str, Any]:
    lifetime = context.get("lifetime_days") or settings.posting_lifetime_days
    return {"expiration_date": now + timedelta(days=lifetime)}


def _reject_posting(context: Mapping[str, Any], _now: datetime) -> dict[str, Any]:
    return {"is_validated": False, "rejection_reason": context.get("rejection_reason")}


def _require_not_validated(context: Mapping[str, Any], _now: datetime) -> None:
    if context.get("is_validated"):
        raise ConflictError("Offer is already validated", code="ALREADY_VALIDATED")


def _require_evaluated_outcome(context: Mapping[str, Any], _now: datetime) -> None:
    outcome = context.get("outcome")
    if isinstance(outcome, Enum):
        outcome = outcome.value
    if outcome not in (InterviewOutcome.POSITIVE.value, InterviewOutcome.NEGATIVE.value):
        raise ConflictError(
            "An evaluation must set the outcome to positive or negative",
            code="OUTCOME_REQUIRED",
        )


def _record_outcome(context: Mapping[str, Any], _now: datetime) -> dict[str, Any]:
    outcome = context["outcome"]
    return {"outcome": outcome.value if isinstance(outcome, Enum) else outcome}


def _company_validated(_context: Mapping[str, Any], _now: datetime) -> dict[str, Any]:
    return {"company_validation": ValidationState.VALIDATED.value}


def _company_rejected(_context: Mapping[str, Any], _now: datetime) -> dict[str, Any]:
    return {"company_validation": ValidationState.REJECTED.value}


# =============================================================================
# State Machine Definition
# =============================================================================

_OWNER = frozenset({ActorRole.OWNER})
_ADMIN = frozenset({ActorRole.ADMIN})
_SYSTEM = frozenset({ActorRole.SYSTEM})
_COMPANY = frozenset({ActorRole.COMPANY})
_EMPLOYEE = frozenset({ActorRole.EMPLOYEE})
_COMPANY_OR_ADMIN = frozenset({ActorRole.COMPANY, ActorRole.ADMIN})

_P = PostingStatus
_O = OfferStatus
_I = InterviewStatus
_M = MissionStatus
_T = TrainingStatus
_C = ContractState
_V = ValidationState

# Review of one timesheet item by the company owning the contract.
_TIMESHEET_REVIEW = {
    (_V.PENDING.value, _V.VALIDATED.value): _Transition(_COMPANY),
    (_V.PENDING.value, _V.REJECTED.value): _Transition(_COMPANY),
}

# Keys are (current, target) status values.
_VALID_TRANSITIONS: dict[LifecycleEntity, dict[tuple[str, str], _Transition]] = {
    LifecycleEntity.JOB_POSTING: {
        (_P.PENDING.value, _P.PUBLISHED.value): _Transition(
            _OWNER, guard=_require_publishable, effect=_reset_expiration
        ),
        (_P.PUBLISHED.value, _P.PENDING.value): _Transition(_OWNER),
        (_P.PENDING.value, _P.REJECTED.value): _Transition(_ADMIN, effect=_reject_posting),
        (_P.PUBLISHED.value, _P.REJECTED.value): _Transition(_ADMIN, effect=_reject_posting),
        (_P.PENDING.value, _P.EXPIRED.value): _Transition(_SYSTEM),
        (_P.PUBLISHED.value, _P.EXPIRED.value): _Transition(_SYSTEM),
    },
    LifecycleEntity.JOB_OFFER: {
        (_O.OPEN.value, _O.CLOSED.value): _Transition(_COMPANY),
        (_O.OPEN.value, _O.REJECTED.value): _Transition(
            _ADMIN, guard=_require_not_validated
        ),
    },
    LifecycleEntity.INTERVIEW: {
        (_I.SCHEDULED.value, _I.SCHEDULED.value): _Transition(_COMPANY),
        (_I.SCHEDULED.value, _I.COMPLETED.value): _Transition(
            _COMPANY, guard=_require_evaluated_outcome, effect=_record_outcome
        ),
        (_I.SCHEDULED.value, _I.CANCELLED.value): _Transition(_COMPANY_OR_ADMIN),
    },
    LifecycleEntity.MISSION: {
        (_M.TODO.value, _M.IN_PROGRESS.value): _Transition(_EMPLOYEE),
        (_M.IN_PROGRESS.value, _M.DONE.value): _Transition(_EMPLOYEE),
        (_M.DONE.value, _M.VALIDATED.value): _Transition(
            _COMPANY, effect=_company_validated
        ),
        (_M.DONE.value, _M.IN_PROGRESS.value): _Transition(
            _COMPANY, effect=_company_rejected
        ),
        (_M.TODO.value, _M.CANCELLED.value): _Transition(_COMPANY_OR_ADMIN),
        (_M.IN_PROGRESS.value, _M.CANCELLED.value): _Transition(_COMPANY_OR_ADMIN),
        (_M.DONE.value, _M.CANCELLED.value): _Transition(_COMPANY_OR_ADMIN),
    },
    LifecycleEntity.TRAINING: {
        (_T.DRAFT.value, _T.SCHEDULED.value): _Transition(_COMPANY),
        (_T.SCHEDULED.value, _T.IN_PROGRESS.value): _Transition(_COMPANY),
        (_T.IN_PROGRESS.value, _T.COMPLETED.value): _Transition(_COMPANY),
        (_T.DRAFT.value, _T.CANCELLED.value): _Transition(_COMPANY),
        (_T.SCHEDULED.value, _T.CANCELLED.value): _Transition(_COMPANY),
        (_T.IN_PROGRESS.value, _T.CANCELLED.value): _Transition(_COMPANY),
    },
    LifecycleEntity.CONTRACT: {
        (_C.DRAFT.value, _C.PUBLISHED.value): _Transition(_ADMIN),
        (_C.PUBLISHED.value, _C.SIGNED.value): _Transition(_EMPLOYEE),
        (_C.PUBLISHED.value, _C.REJECTED.value): _Transition(_EMPLOYEE),
    },
    LifecycleEntity.TIME_ENTRY: _TIMESHEET_REVIEW,
    LifecycleEntity.ABSENCE: _TIMESHEET_REVIEW,
}

TERMINAL_STATUSES: dict[LifecycleEntity, frozenset[str]] = {
    LifecycleEntity.JOB_POSTING: frozenset(
        {_P.EXPIRED.value, _P.REJECTED.value, _P.ARCHIVED.value}
    ),
    LifecycleEntity.JOB_OFFER: frozenset({_O.CLOSED.value, _O.REJECTED.value}),
    LifecycleEntity.INTERVIEW: frozenset({_I.COMPLETED.value, _I.CANCELLED.value}),
    LifecycleEntity.MISSION: frozenset({_M.VALIDATED.value, _M.CANCELLED.value}),
    LifecycleEntity.TRAINING: frozenset({_T.COMPLETED.value, _T.CANCELLED.value}),
    LifecycleEntity.CONTRACT: frozenset({_C.SIGNED.value, _C.REJECTED.value}),
    LifecycleEntity.TIME_ENTRY: frozenset({_V.VALIDATED.value, _V.REJECTED.value}),
    LifecycleEntity.ABSENCE: frozenset({_V.VALIDATED.value, _V.REJECTED.value}),
}


# =============================================================================
# Public Functions
# =============================================================================


def _value(status: str | Enum) -> str:
    return status.value if isinstance(status, Enum) else status


def is_terminal(entity: LifecycleEntity, status: str | Enum) -> bool:
    """Check whether ``status`` is terminal for ``entity``."""
    return _value(status) in TERMINAL_STATUSES[entity]


def get_valid_transitions(
    entity: LifecycleEntity,
    current: str | Enum,
    actor_role: ActorRole | None = None,
) -> list[str]:
    """Get valid target statuses from ``current``.

    Args:
        entity: Entity whose state machine applies.
        current: The current status.
        actor_role: When given, only targets this role may request.

    Returns:
        List of statuses that can be transitioned to.
    """
    current_value = _value(current)
    return [
        target
        for (source, target), rule in _VALID_TRANSITIONS[entity].items()
        if source == current_value and (actor_role is None or actor_role in rule.roles)
    ]


def can_transition(
    entity: LifecycleEntity,
    current: str | Enum,
    requested: str | Enum,
    actor_role: ActorRole,
) -> bool:
    """Check if ``actor_role`` may move the entity from ``current`` to ``requested``.

    Guards that depend on entity fields are not evaluated here.
    """
    rule = _VALID_TRANSITIONS[entity].get((_value(current), _value(requested)))
    return rule is not None and actor_role in rule.roles


def apply_transition(
    entity: LifecycleEntity,
    current: str | Enum,
    requested: str | Enum,
    actor_role: ActorRole,
    *,
    context: Mapping[str, Any] | None = None,
    now: datetime | None = None,
) -> TransitionResult:
    """Execute a status transition with validation.

    Args:
        entity: Entity whose state machine applies.
        current: The current status.
        requested: The desired target status.
        actor_role: Role the actor plays toward the entity.
        context: Entity fields and inputs read by guards and effects.
        now: Reference instant. Defaults to now (UTC).

    Returns:
        TransitionResult with the new status and every forced field.

    Raises:
        TerminalStatusError: If the current status is terminal.
        InvalidStatusTransitionError: If the move is not allowed for the role.
        ConflictError: If a guard rejects the move.
    """
    current_value = _value(current)
    requested_value = _value(requested)
    moment = _aware(now) if now else datetime.now(UTC)
    ctx: Mapping[str, Any] = context or {}

    if is_terminal(entity, current_value):
        raise TerminalStatusError(entity, current_value)

    rule = _VALID_TRANSITIONS[entity].get((current_value, requested_value))
    if rule is None or actor_role not in rule.roles:
        raise InvalidStatusTransitionError(
            entity,
            current_value,
            requested_value,
            get_valid_transitions(entity, current_value, actor_role),
        )

    if rule.guard is not None:
        rule.guard(ctx, moment)

    changes: dict[str, Any] = {"status": requested_value}
    if rule.effect is not None:
        changes.update(rule.effect(ctx, moment))
    return TransitionResult(new_status=requested_value, changes=changes)


def reconcile_expiry(posting: Any, now: datetime) -> dict[str, Any]:
    """Compute the time-driven corrections for a job posting.

    Pure: returns the fields to change and never mutates ``posting``.

    - A posting past its expiration date becomes expired, unless it is
      already in a terminal status (rejection takes precedence).
    - A rejected posting is never validated.

    Args:
        posting: Object with status, expiration_date and is_validated.
        now: Reference instant.

    Returns:
        Dict of fields to write; empty when nothing changes.
    """
    changes: dict[str, Any] = {}
    status = _value(posting.status)
    expiration = posting.expiration_date

    if (
        status not in (_P.EXPIRED.value, _P.REJECTED.value, _P.ARCHIVED.value)
        and isinstance(expiration, datetime)
        and _aware(expiration) < _aware(now)
    ):
        changes["status"] = _P.EXPIRED.value

    if status == _P.REJECTED.value and posting.is_validated:
        changes["is_validated"] = False

    return changes


def apply_changes(entity: Any, changes: Mapping[str, Any]) -> None:
    """Write ``changes`` onto ``entity`` attributes."""
    for name, value in changes.items():
        setattr(entity, name, value)
