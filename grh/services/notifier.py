"""Side-effect notifier.

Maps committed lifecycle events to notification intents. Pure and
table-driven: each event class has one handler that returns the intents to
persist. Events without a handler (posting validation, rejection, publish
toggles) produce nothing.

Persistence of the intents is handled by notification_dispatch.
"""

import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, TypeVar

from grh.models.enums import InterviewKind, InterviewOutcome, NotificationType

# Related-entity reference keys carried by an intent.
REF_KEYS: tuple[str, ...] = (
    "posting_id",
    "interview_id",
    "application_id",
    "offer_id",
    "contract_id",
    "mission_id",
    "training_id",
)

# =============================================================================
# Intent
# =============================================================================


@dataclass(frozen=True)
class NotificationIntent:
    """A notification to persist.

    Attributes:
        recipient_user_id: Addressee.
        type: Notification type.
        payload: Message and type-specific data (JSON-serializable).
        sender_company_id: Company at the origin, if any.
        refs: Related-entity references, keys from REF_KEYS.
    """

    recipient_user_id: uuid.UUID
    type: NotificationType
    payload: dict[str, Any]
    sender_company_id: uuid.UUID | None = None
    refs: dict[str, uuid.UUID] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the outbox (JSONB)."""
        return {
            "recipient_user_id": str(self.recipient_user_id),
            "type": self.type.value,
            "payload": self.payload,
            "sender_company_id": (
                str(self.sender_company_id) if self.sender_company_id else None
            ),
            "refs": {key: str(value) for key, value in self.refs.items()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NotificationIntent":
        """Rebuild an intent parked in the outbox."""
        sender = data.get("sender_company_id")
        return cls(
            recipient_user_id=uuid.UUID(data["recipient_user_id"]),
            type=NotificationType.from_string(data["type"]),
            payload=dict(data.get("payload") or {}),
            sender_company_id=uuid.UUID(sender) if sender else None,
            refs={
                key: uuid.UUID(value)
                for key, value in (data.get("refs") or {}).items()
                if key in REF_KEYS
            },
        )


# =============================================================================
# Events
# =============================================================================


@dataclass(frozen=True)
class InterviewScheduled:
    interview_id: uuid.UUID
    candidate_id: uuid.UUID
    company_id: uuid.UUID
    kind: InterviewKind
    scheduled_at: datetime
    meeting_link: str
    posting_id: uuid.UUID | None = None
    application_id: uuid.UUID | None = None
    offer_id: uuid.UUID | None = None
    offer_title: str | None = None


@dataclass(frozen=True)
class InterviewRescheduled:
    interview_id: uuid.UUID
    candidate_id: uuid.UUID
    company_id: uuid.UUID
    scheduled_at: datetime
    meeting_link: str
    posting_id: uuid.UUID | None = None
    offer_id: uuid.UUID | None = None


@dataclass(frozen=True)
class InterviewCancelled:
    interview_id: uuid.UUID
    candidate_id: uuid.UUID
    company_id: uuid.UUID


@dataclass(frozen=True)
class InterviewEvaluated:
    """Interview evaluated. ``admin_ids`` lists every Admin for positive outcomes."""

    interview_id: uuid.UUID
    candidate_id: uuid.UUID
    company_id: uuid.UUID
    outcome: InterviewOutcome
    admin_ids: tuple[uuid.UUID, ...] = ()
    candidate_name: str | None = None
    posting_id: uuid.UUID | None = None
    offer_id: uuid.UUID | None = None


@dataclass(frozen=True)
class MissionCreated:
    mission_id: uuid.UUID
    employee_id: uuid.UUID
    company_id: uuid.UUID
    title: str
    start_date: datetime
    end_date: datetime | None = None


@dataclass(frozen=True)
class MissionFeedbackAdded:
    mission_id: uuid.UUID
    employee_id: uuid.UUID
    company_id: uuid.UUID
    title: str
    feedback: str


@dataclass(frozen=True)
class TrainingCreated:
    training_id: uuid.UUID
    mission_id: uuid.UUID
    employee_id: uuid.UUID
    trainer_id: uuid.UUID
    company_id: uuid.UUID
    title: str
    modality: str


@dataclass(frozen=True)
class ApplicationRefused:
    application_id: uuid.UUID
    candidate_id: uuid.UUID
    company_id: uuid.UUID
    offer_id: uuid.UUID
    offer_title: str


@dataclass(frozen=True)
class ApplicationAccepted:
    application_id: uuid.UUID
    candidate_id: uuid.UUID
    company_id: uuid.UUID
    offer_id: uuid.UUID
    offer_title: str


@dataclass(frozen=True)
class OfferRejected:
    offer_id: uuid.UUID
    company_id: uuid.UUID
    title: str


@dataclass(frozen=True)
class AccountRegistered:
    """New account. ``admin_ids`` lists every Admin to inform."""

    user_id: uuid.UUID
    name: str
    admin_ids: tuple[uuid.UUID, ...] = ()


@dataclass(frozen=True)
class ContractPublished:
    contract_id: uuid.UUID
    employee_id: uuid.UUID
    company_id: uuid.UUID
    title: str


@dataclass(frozen=True)
class ContractRejected:
    contract_id: uuid.UUID
    employee_id: uuid.UUID
    company_id: uuid.UUID
    title: str
    admin_ids: tuple[uuid.UUID, ...] = ()


@dataclass(frozen=True)
class PostingValidated:
    posting_id: uuid.UUID
    owner_id: uuid.UUID


@dataclass(frozen=True)
class PostingRejected:
    posting_id: uuid.UUID
    owner_id: uuid.UUID
    reason: str


@dataclass(frozen=True)
class PostingPublishToggled:
    posting_id: uuid.UUID
    owner_id: uuid.UUID
    published: bool


# =============================================================================
# Handler Table
# =============================================================================

E = TypeVar("E")
Handler = Callable[[Any], list[NotificationIntent]]

_HANDLERS: dict[type, Handler] = {}


def _handles(event_cls: type[E]) -> Callable[[Callable[[E], list[NotificationIntent]]], Handler]:
    def register(func: Callable[[E], list[NotificationIntent]]) -> Handler:
        _HANDLERS[event_cls] = func
        return func

    return register


def _refs(**values: uuid.UUID | None) -> dict[str, uuid.UUID]:
    return {key: value for key, value in values.items() if value is not None}


def _unique(ids: tuple[uuid.UUID, ...]) -> list[uuid.UUID]:
    return list(dict.fromkeys(ids))


def _format_date(value: datetime) -> str:
    return value.strftime("%d/%m/%Y %H:%M")


@_handles(InterviewScheduled)
def _interview_scheduled(event: InterviewScheduled) -> list[NotificationIntent]:
    if event.kind == InterviewKind.POSTING:
        message = (
            "Un entretien a été planifié suite à votre annonce pour le "
            f"{_format_date(event.scheduled_at)}"
        )
    else:
        subject = f" pour l'offre {event.offer_title}" if event.offer_title else ""
        message = (
            f"Un entretien a été planifié{subject} le "
            f"{_format_date(event.scheduled_at)}"
        )
    return [
        NotificationIntent(
            recipient_user_id=event.candidate_id,
            type=NotificationType.ENTRETIEN_PLANIFIE,
            sender_company_id=event.company_id,
            payload={
                "message": message,
                "scheduled_at": event.scheduled_at.isoformat(),
                "meeting_link": event.meeting_link,
                "kind": event.kind.value,
            },
            refs=_refs(
                interview_id=event.interview_id,
                posting_id=event.posting_id,
                application_id=event.application_id,
                offer_id=event.offer_id,
            ),
        )
    ]


@_handles(InterviewRescheduled)
def _interview_rescheduled(event: InterviewRescheduled) -> list[NotificationIntent]:
    return [
        NotificationIntent(
            recipient_user_id=event.candidate_id,
            type=NotificationType.ENTRETIEN_PLANIFIE,
            sender_company_id=event.company_id,
            payload={
                "message": (
                    "Votre entretien a été reprogrammé au "
                    f"{_format_date(event.scheduled_at)}"
                ),
                "scheduled_at": event.scheduled_at.isoformat(),
                "meeting_link": event.meeting_link,
                "rescheduled": True,
            },
            refs=_refs(
                interview_id=event.interview_id,
                posting_id=event.posting_id,
                offer_id=event.offer_id,
            ),
        )
    ]


@_handles(InterviewCancelled)
def _interview_cancelled(event: InterviewCancelled) -> list[NotificationIntent]:
    return [
        NotificationIntent(
            recipient_user_id=event.candidate_id,
            type=NotificationType.ENTRETIEN_ANNULE,
            sender_company_id=event.company_id,
            payload={"message": "Votre entretien a été annulé"},
            refs=_refs(interview_id=event.interview_id),
        )
    ]


@_handles(InterviewEvaluated)
def _interview_evaluated(event: InterviewEvaluated) -> list[NotificationIntent]:
    positive = event.outcome == InterviewOutcome.POSITIVE
    refs = _refs(
        interview_id=event.interview_id,
        posting_id=event.posting_id,
        offer_id=event.offer_id,
    )
    intents = [
        NotificationIntent(
            recipient_user_id=event.candidate_id,
            type=NotificationType.ENTRETIEN_EVALUE,
            sender_company_id=event.company_id,
            payload={
                "message": (
                    "Félicitations ! Votre entretien a reçu une évaluation positive"
                    if positive
                    else "Votre entretien a été évalué"
                ),
                "outcome": event.outcome.value,
            },
            refs=refs,
        )
    ]
    if positive:
        candidate = event.candidate_name or "le candidat"
        intents.extend(
            NotificationIntent(
                recipient_user_id=admin_id,
                type=NotificationType.PREPARER_CONTRAT,
                sender_company_id=event.company_id,
                payload={
                    "message": f"Préparer le contrat pour {candidate}",
                    "candidate_id": str(event.candidate_id),
                    "company_id": str(event.company_id),
                },
                refs=refs,
            )
            for admin_id in _unique(event.admin_ids)
        )
    return intents


@_handles(MissionCreated)
def _mission_created(event: MissionCreated) -> list[NotificationIntent]:
    return [
        NotificationIntent(
            recipient_user_id=event.employee_id,
            type=NotificationType.NOUVELLE_MISSION,
            sender_company_id=event.company_id,
            payload={
                "message": f"Une nouvelle mission vous a été assignée : {event.title}",
                "title": event.title,
                "start_date": event.start_date.isoformat(),
                "end_date": event.end_date.isoformat() if event.end_date else None,
            },
            refs=_refs(mission_id=event.mission_id),
        )
    ]


@_handles(MissionFeedbackAdded)
def _mission_feedback(event: MissionFeedbackAdded) -> list[NotificationIntent]:
    return [
        NotificationIntent(
            recipient_user_id=event.employee_id,
            type=NotificationType.FEEDBACK_COMPTE_RENDU,
            sender_company_id=event.company_id,
            payload={
                "message": (
                    f"Nouveau feedback sur le compte rendu de la mission {event.title}"
                ),
                "feedback": event.feedback,
            },
            refs=_refs(mission_id=event.mission_id),
        )
    ]


@_handles(TrainingCreated)
def _training_created(event: TrainingCreated) -> list[NotificationIntent]:
    refs = _refs(training_id=event.training_id, mission_id=event.mission_id)
    return [
        NotificationIntent(
            recipient_user_id=event.employee_id,
            type=NotificationType.NEW_FORMATION,
            sender_company_id=event.company_id,
            payload={
                "message": f"Une nouvelle formation vous a été assignée : {event.title}",
                "title": event.title,
                "modality": event.modality,
            },
            refs=refs,
        ),
        NotificationIntent(
            recipient_user_id=event.trainer_id,
            type=NotificationType.NEW_FORMATION_ASSIGNMENT,
            sender_company_id=event.company_id,
            payload={
                "message": f"Vous avez été désigné formateur pour : {event.title}",
                "title": event.title,
                "modality": event.modality,
            },
            refs=refs,
        ),
    ]


@_handles(ApplicationRefused)
def _application_refused(event: ApplicationRefused) -> list[NotificationIntent]:
    return [
        NotificationIntent(
            recipient_user_id=event.candidate_id,
            type=NotificationType.CANDIDATURE_REFUSEE,
            sender_company_id=event.company_id,
            payload={
                "message": (
                    f"Votre candidature pour l'offre {event.offer_title} n'a pas été retenue"
                ),
            },
            refs=_refs(application_id=event.application_id, offer_id=event.offer_id),
        )
    ]


@_handles(ApplicationAccepted)
def _application_accepted(event: ApplicationAccepted) -> list[NotificationIntent]:
    return [
        NotificationIntent(
            recipient_user_id=event.candidate_id,
            type=NotificationType.CANDIDATURE_ACCEPTEE,
            sender_company_id=event.company_id,
            payload={
                "message": f"Votre candidature pour l'offre {event.offer_title} a été acceptée",
            },
            refs=_refs(application_id=event.application_id, offer_id=event.offer_id),
        )
    ]


@_handles(OfferRejected)
def _offer_rejected(event: OfferRejected) -> list[NotificationIntent]:
    return [
        NotificationIntent(
            recipient_user_id=event.company_id,
            type=NotificationType.OFFRE_REJETEE,
            payload={
                "message": (
                    f"Votre offre \"{event.title}\" a été rejetée par l'administrateur."
                ),
            },
            refs=_refs(offer_id=event.offer_id),
        )
    ]


@_handles(AccountRegistered)
def _account_registered(event: AccountRegistered) -> list[NotificationIntent]:
    return [
        NotificationIntent(
            recipient_user_id=admin_id,
            type=NotificationType.NEW_USER,
            payload={
                "message": f"Nouvel utilisateur inscrit : {event.name}",
                "user_id": str(event.user_id),
                "user_name": event.name,
            },
        )
        for admin_id in _unique(event.admin_ids)
    ]


@_handles(ContractPublished)
def _contract_published(event: ContractPublished) -> list[NotificationIntent]:
    return [
        NotificationIntent(
            recipient_user_id=event.employee_id,
            type=NotificationType.CONTRAT_PUBLIE,
            sender_company_id=event.company_id,
            payload={"message": f"Un contrat vous attend : {event.title}"},
            refs=_refs(contract_id=event.contract_id),
        )
    ]


@_handles(ContractRejected)
def _contract_rejected(event: ContractRejected) -> list[NotificationIntent]:
    return [
        NotificationIntent(
            recipient_user_id=admin_id,
            type=NotificationType.CONTRAT_REJETE_CANDIDAT,
            sender_company_id=event.company_id,
            payload={
                "message": f"Le contrat {event.title} a été rejeté par le candidat",
                "employee_id": str(event.employee_id),
            },
            refs=_refs(contract_id=event.contract_id),
        )
        for admin_id in _unique(event.admin_ids)
    ]


# =============================================================================
# Public Functions
# =============================================================================


def on_transition(event: object) -> list[NotificationIntent]:
    """Compute the notification intents for a committed event.

    Args:
        event: One of the event dataclasses of this module.

    Returns:
        Intents to persist; empty for events that notify nobody.
    """
    handler = _HANDLERS.get(type(event))
    if handler is None:
        return []
    return handler(event)
