"""Authorization policy.

One table maps every protected action to a predicate over (actor, resource)
and the reason reported when it fails. Services call ``require`` before
touching the resource; nothing else decides who may do what.

Usage:
    require(actor, Action.MISSION_VALIDATE, mission)
"""

import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from grh.core.errors import ForbiddenError
from grh.models.enums import ProfileName, TrainerRole

# =============================================================================
# Actor
# =============================================================================


@dataclass(frozen=True)
class Actor:
    """Authenticated user acting on the platform.

    Attributes:
        user_id: User UUID.
        profiles: Profile names held by the user (Admin, Company, Candidate).
        role: Trainer role (Coach or Trainer), if any.
    """

    user_id: uuid.UUID
    profiles: frozenset[str] = field(default_factory=frozenset)
    role: str | None = None

    def has_profile(self, profile: ProfileName) -> bool:
        return profile.value in self.profiles

    @property
    def is_admin(self) -> bool:
        return self.has_profile(ProfileName.ADMIN)

    @property
    def is_company(self) -> bool:
        return self.has_profile(ProfileName.COMPANY)

    @property
    def is_candidate(self) -> bool:
        return self.has_profile(ProfileName.CANDIDATE)

    @property
    def is_trainer(self) -> bool:
        return self.role in TrainerRole.values()


# =============================================================================
# Actions
# =============================================================================


class Action(Enum):
    """Protected actions."""

    POSTING_UPDATE = "posting.update"
    POSTING_DELETE = "posting.delete"
    POSTING_TOGGLE_SAVE = "posting.toggle_save"
    POSTING_TOGGLE_PUBLISH = "posting.toggle_publish"
    POSTING_VALIDATE = "posting.validate"
    POSTING_REJECT = "posting.reject"

    OFFER_CREATE = "offer.create"
    OFFER_VALIDATE = "offer.validate"
    OFFER_REJECT = "offer.reject"
    OFFER_CLOSE = "offer.close"
    APPLICATION_CREATE = "application.create"
    APPLICATION_LIST_FOR_OFFER = "application.list_for_offer"
    APPLICATION_REFUSE = "application.refuse"

    INTERVIEW_SCHEDULE = "interview.schedule"
    INTERVIEW_EVALUATE = "interview.evaluate"
    INTERVIEW_RESCHEDULE = "interview.reschedule"
    INTERVIEW_CANCEL = "interview.cancel"
    INTERVIEW_READ = "interview.read"
    INTERVIEW_LIST_POSITIVE = "interview.list_positive"

    CONTRACT_CREATE = "contract.create"
    CONTRACT_PUBLISH = "contract.publish"
    CONTRACT_SIGN = "contract.sign"
    CONTRACT_READ = "contract.read"

    MISSION_CREATE = "mission.create"
    MISSION_UPDATE = "mission.update"
    MISSION_DELETE = "mission.delete"
    MISSION_CHANGE_STATUS = "mission.change_status"
    MISSION_VALIDATE = "mission.validate"
    MISSION_ADMIN_VALIDATE = "mission.admin_validate"
    MISSION_CANCEL = "mission.cancel"
    MISSION_FEEDBACK = "mission.feedback"
    MISSION_SUBMIT_REPORT = "mission.submit_report"
    MISSION_READ = "mission.read"

    TRAINING_CREATE = "training.create"
    TRAINING_UPDATE = "training.update"
    TRAINING_DELETE = "training.delete"
    TRAINING_ADD_CONTENT = "training.add_content"
    TRAINING_READ = "training.read"
    TRAINING_RECORD_PROGRESS = "training.record_progress"
    TRAINING_LIST_AS_TRAINER = "training.list_as_trainer"

    TIMESHEET_RECORD = "timesheet.record"
    TIMESHEET_EDIT = "timesheet.edit"
    TIMESHEET_REVIEW = "timesheet.review"
    TIMESHEET_VALIDATE_MONTH = "timesheet.validate_month"
    TIMESHEET_READ = "timesheet.read"
    TIMESHEET_LIST_PENDING = "timesheet.list_pending"

    NOTIFICATION_ACCESS = "notification.access"
    NOTIFICATION_MARK_READ = "notification.mark_read"
    NOTIFICATION_LIST_ADMIN = "notification.list_admin"


# =============================================================================
# Decision
# =============================================================================


@dataclass(frozen=True)
class Decision:
    """Outcome of a policy check.

    Attributes:
        allowed: Whether the action is permitted.
        reason: Why it was denied (None when allowed).
    """

    allowed: bool
    reason: str | None = None


# =============================================================================
# Predicates
# =============================================================================

Predicate = Callable[[Actor, Any], bool]


def _attr_is_actor(attribute: str) -> Predicate:
    def predicate(actor: Actor, resource: Any) -> bool:
        return resource is not None and getattr(resource, attribute, None) == actor.user_id

    return predicate


def _any_of(*predicates: Predicate) -> Predicate:
    return lambda actor, resource: any(p(actor, resource) for p in predicates)


def _admin(actor: Actor, _resource: Any) -> bool:
    return actor.is_admin


def _company(actor: Actor, _resource: Any) -> bool:
    return actor.is_company


def _candidate(actor: Actor, _resource: Any) -> bool:
    return actor.is_candidate


def _trainer(actor: Actor, _resource: Any) -> bool:
    return actor.is_trainer


def _schedules_interview(actor: Actor, offer: Any) -> bool:
    # ``offer`` is None for posting-based interviews.
    if actor.is_admin:
        return True
    if not actor.is_company:
        return False
    return offer is None or offer.company_id == actor.user_id


_owner = _attr_is_actor("owner_candidate_id")
_owning_company = _attr_is_actor("company_id")
_assigned_employee = _attr_is_actor("employee_id")
_assigned_trainer = _attr_is_actor("trainer_id")
_interview_candidate = _attr_is_actor("candidate_id")
_recipient = _attr_is_actor("recipient_user_id")
_sender_company = _attr_is_actor("sender_company_id")

_NOT_OWNER = "Only the owner of this posting can perform this action"
_ADMIN_ONLY = "Admin access required"
_COMPANY_ONLY = "Only the company owning this mission can perform this action"
_TRAINING_COMPANY_ONLY = "Only the company owning this training can perform this action"
_INTERVIEW_COMPANY_ONLY = "Only the company that scheduled this interview can perform this action"
_TIMESHEET_COMPANY_ONLY = "Only the company owning this contract can review its timesheet"

# =============================================================================
# Policy Table
# =============================================================================

POLICY: dict[Action, tuple[Predicate, str]] = {
    Action.POSTING_UPDATE: (_owner, _NOT_OWNER),
    Action.POSTING_DELETE: (_owner, _NOT_OWNER),
    Action.POSTING_TOGGLE_SAVE: (_owner, _NOT_OWNER),
    Action.POSTING_TOGGLE_PUBLISH: (_owner, _NOT_OWNER),
    Action.POSTING_VALIDATE: (_admin, _ADMIN_ONLY),
    Action.POSTING_REJECT: (_admin, _ADMIN_ONLY),
    Action.OFFER_CREATE: (_company, "A company profile is required to publish offers"),
    Action.OFFER_VALIDATE: (_admin, _ADMIN_ONLY),
    Action.OFFER_REJECT: (_admin, _ADMIN_ONLY),
    Action.OFFER_CLOSE: (_owning_company, "Only the company owning this offer can close it"),
    Action.APPLICATION_CREATE: (_candidate, "A candidate profile is required to apply"),
    Action.APPLICATION_LIST_FOR_OFFER: (
        _owning_company,
        "Only the company owning this offer can view its applications",
    ),
    Action.APPLICATION_REFUSE: (
        _owning_company,
        "Only the company owning this offer can refuse applications",
    ),
    Action.INTERVIEW_SCHEDULE: (
        _schedules_interview,
        "Only the company owning the offer or an admin can schedule this interview",
    ),
    Action.INTERVIEW_EVALUATE: (_owning_company, _INTERVIEW_COMPANY_ONLY),
    Action.INTERVIEW_RESCHEDULE: (_owning_company, _INTERVIEW_COMPANY_ONLY),
    Action.INTERVIEW_CANCEL: (_owning_company, _INTERVIEW_COMPANY_ONLY),
    Action.INTERVIEW_READ: (
        _any_of(_owning_company, _interview_candidate, _admin),
        "You are not a participant of this interview",
    ),
    Action.INTERVIEW_LIST_POSITIVE: (_admin, _ADMIN_ONLY),
    Action.CONTRACT_CREATE: (_admin, _ADMIN_ONLY),
    Action.CONTRACT_PUBLISH: (_admin, _ADMIN_ONLY),
    Action.CONTRACT_SIGN: (
        _assigned_employee,
        "Only the employee named in this contract can answer it",
    ),
    Action.CONTRACT_READ: (
        _any_of(_assigned_employee, _owning_company, _admin),
        "You are not a party to this contract",
    ),
    Action.MISSION_CREATE: (_company, "A company profile is required to create missions"),
    Action.MISSION_UPDATE: (_owning_company, _COMPANY_ONLY),
    Action.MISSION_DELETE: (_owning_company, _COMPANY_ONLY),
    Action.MISSION_CHANGE_STATUS: (
        _assigned_employee,
        "Only the assigned employee can change the mission status",
    ),
    Action.MISSION_VALIDATE: (_owning_company, _COMPANY_ONLY),
    Action.MISSION_ADMIN_VALIDATE: (_admin, _ADMIN_ONLY),
    Action.MISSION_CANCEL: (_any_of(_owning_company, _admin), _COMPANY_ONLY),
    Action.MISSION_FEEDBACK: (_owning_company, _COMPANY_ONLY),
    Action.MISSION_SUBMIT_REPORT: (
        _assigned_employee,
        "Only the assigned employee can submit the mission report",
    ),
    Action.MISSION_READ: (
        _any_of(_owning_company, _assigned_employee, _admin),
        "You are not a participant of this mission",
    ),
    Action.TRAINING_CREATE: (
        _owning_company,
        "Only the company owning the mission can create a training for it",
    ),
    Action.TRAINING_UPDATE: (_owning_company, _TRAINING_COMPANY_ONLY),
    Action.TRAINING_DELETE: (_owning_company, _TRAINING_COMPANY_ONLY),
    Action.TRAINING_ADD_CONTENT: (_owning_company, _TRAINING_COMPANY_ONLY),
    Action.TRAINING_READ: (
        _any_of(_owning_company, _assigned_employee, _assigned_trainer),
        "You are not a participant of this training",
    ),
    Action.TRAINING_RECORD_PROGRESS: (
        _assigned_employee,
        "Only the trained employee can record progress",
    ),
    Action.TRAINING_LIST_AS_TRAINER: (
        _trainer,
        "Only coaches and trainers can list their trainings",
    ),
    Action.TIMESHEET_RECORD: (
        _assigned_employee,
        "Only the employee named in this contract can record time against it",
    ),
    Action.TIMESHEET_EDIT: (
        _assigned_employee,
        "Only the employee who recorded this item can change it",
    ),
    Action.TIMESHEET_REVIEW: (_owning_company, _TIMESHEET_COMPANY_ONLY),
    Action.TIMESHEET_VALIDATE_MONTH: (_owning_company, _TIMESHEET_COMPANY_ONLY),
    Action.TIMESHEET_READ: (
        _any_of(_assigned_employee, _owning_company, _admin),
        "You are not a party to this contract",
    ),
    Action.TIMESHEET_LIST_PENDING: (_company, "A company profile is required"),
    Action.NOTIFICATION_ACCESS: (
        _any_of(_recipient, _sender_company),
        "You are not a party to this notification",
    ),
    Action.NOTIFICATION_MARK_READ: (
        _recipient,
        "Only the recipient can mark this notification",
    ),
    Action.NOTIFICATION_LIST_ADMIN: (_admin, _ADMIN_ONLY),
}


# =============================================================================
# Public Functions
# =============================================================================


def authorize(actor: Actor, action: Action, resource: Any = None) -> Decision:
    """Evaluate the policy for ``action`` on ``resource``.

    Args:
        actor: The acting user.
        action: The protected action.
        resource: The entity acted on (None for create-style actions).

    Returns:
        Decision with the denial reason when not allowed.
    """
    predicate, reason = POLICY[action]
    if predicate(actor, resource):
        return Decision(allowed=True)
    return Decision(allowed=False, reason=reason)


def require(actor: Actor, action: Action, resource: Any = None) -> None:
    """Raise ForbiddenError unless the policy allows ``action``.

    Raises:
        ForbiddenError: With the policy's denial reason.
    """
    decision = authorize(actor, action, resource)
    if not decision.allowed:
        raise ForbiddenError(decision.reason or "Access denied")
