"""Repository interfaces consumed by the services.

Services receive a ``Repositories`` container built per request (see
grh.api.deps.get_repositories) instead of looking models up globally. The
SQLAlchemy implementations live in grh.repositories.sql; tests substitute
in-memory implementations of the same protocols.

Conventions:
- ``add`` persists a new entity and returns it with id and timestamps set.
- ``save`` flushes attribute changes made by the caller.
- Paginated lists return ``(items, total)``.
"""

import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Protocol, TypeVar

from grh.core.filtering import SortSpec
from grh.models import (
    Absence,
    Application,
    Contract,
    CvProfile,
    Interview,
    JobOffer,
    JobPosting,
    Mission,
    MissionFeedback,
    Notification,
    NotificationReply,
    PendingNotification,
    StoredFile,
    TimeEntry,
    TimesheetMonth,
    Training,
    TrainingContent,
    TrainingProgress,
    User,
)
from grh.services.notifier import NotificationIntent

T = TypeVar("T")

# =============================================================================
# Filters
# =============================================================================


@dataclass(frozen=True)
class PostingFilters:
    """Search filters for published postings.

    Attributes:
        contract_type: Exact contract type.
        location: Case-insensitive substring of the location.
        profession: Case-insensitive substring of the profession.
        skills: Matches postings requiring any of these skills.
        search: Free text over title and description.
    """

    contract_type: str | None = None
    location: str | None = None
    profession: str | None = None
    skills: tuple[str, ...] = ()
    search: str | None = None


@dataclass(frozen=True)
class MissionFilters:
    search: str | None = None
    statuses: tuple[str, ...] = ()
    date_from: datetime | None = None
    date_to: datetime | None = None
    sort: SortSpec = field(default_factory=lambda: SortSpec("start_date", "desc"))


@dataclass(frozen=True)
class TrainingFilters:
    """Filters for training lists.

    The participant ids combine with OR: a training matches when the actor
    is its company, its employee or its trainer.
    """

    company_id: uuid.UUID | None = None
    employee_id: uuid.UUID | None = None
    trainer_id: uuid.UUID | None = None
    statuses: tuple[str, ...] = ()
    modality: str | None = None
    training_type: str | None = None
    search: str | None = None


# =============================================================================
# Protocols
# =============================================================================


class Repository(Protocol[T]):
    async def get(self, entity_id: uuid.UUID) -> T | None: ...

    async def add(self, entity: T) -> T: ...

    async def save(self, entity: T) -> T: ...

    async def delete(self, entity: T) -> None: ...


class UserRepository(Repository[User], Protocol):
    async def get_by_email(self, email: str) -> User | None: ...

    async def get_profile_names(self, user_id: uuid.UUID) -> frozenset[str]: ...

    async def assign_profile(self, user_id: uuid.UUID, profile_name: str) -> None: ...

    async def list_ids_with_profile(self, profile_name: str) -> list[uuid.UUID]: ...

    async def list_trainers(self) -> list[User]: ...


class CvProfileRepository(Repository[CvProfile], Protocol):
    async def list_for_user(self, user_id: uuid.UUID) -> list[CvProfile]: ...


class JobPostingRepository(Repository[JobPosting], Protocol):
    async def list_for_owner(
        self, owner_id: uuid.UUID, *, offset: int, limit: int
    ) -> tuple[list[JobPosting], int]: ...

    async def search(
        self, filters: PostingFilters, *, offset: int, limit: int
    ) -> tuple[list[JobPosting], int]: ...

    async def list_published(self) -> list[JobPosting]: ...

    async def list_saved_by(
        self, user_id: uuid.UUID, *, offset: int, limit: int
    ) -> tuple[list[JobPosting], int]: ...

    async def is_saved(self, posting_id: uuid.UUID, user_id: uuid.UUID) -> bool: ...

    async def add_save(self, posting_id: uuid.UUID, user_id: uuid.UUID) -> None: ...

    async def remove_save(self, posting_id: uuid.UUID, user_id: uuid.UUID) -> None: ...

    async def count_saves(self, posting_ids: Sequence[uuid.UUID]) -> dict[uuid.UUID, int]: ...


class JobOfferRepository(Repository[JobOffer], Protocol):
    async def list_open(self, *, offset: int, limit: int) -> tuple[list[JobOffer], int]: ...

    async def list_for_company(self, company_id: uuid.UUID) -> list[JobOffer]: ...


class ApplicationRepository(Repository[Application], Protocol):
    async def get_for_offer_and_candidate(
        self, offer_id: uuid.UUID, candidate_id: uuid.UUID
    ) -> Application | None: ...

    async def list_for_candidate(self, candidate_id: uuid.UUID) -> list[Application]: ...

    async def list_for_offer(self, offer_id: uuid.UUID) -> list[Application]: ...


class InterviewRepository(Repository[Interview], Protocol):
    async def list_for_company(self, company_id: uuid.UUID) -> list[Interview]: ...

    async def list_positive(self, kind: str | None = None) -> list[Interview]: ...

    async def get_for_application(self, application_id: uuid.UUID) -> Interview | None: ...

    async def get_scheduled_for_posting(self, posting_id: uuid.UUID) -> Interview | None: ...


class ContractRepository(Repository[Contract], Protocol):
    async def list_for_user(self, user_id: uuid.UUID) -> list[Contract]: ...


class MissionRepository(Repository[Mission], Protocol):
    async def list_for_company(
        self, company_id: uuid.UUID, filters: MissionFilters, *, offset: int, limit: int
    ) -> tuple[list[Mission], int]: ...

    async def list_for_employee(self, employee_id: uuid.UUID) -> list[Mission]: ...

    async def list_for_contract(self, contract_id: uuid.UUID) -> list[Mission]: ...

    async def add_feedback(self, feedback: MissionFeedback) -> MissionFeedback: ...

    async def list_feedback(self, mission_id: uuid.UUID) -> list[MissionFeedback]: ...


class TrainingRepository(Repository[Training], Protocol):
    async def search(
        self, filters: TrainingFilters, *, offset: int, limit: int
    ) -> tuple[list[Training], int]: ...

    async def add_content(self, content: TrainingContent) -> TrainingContent: ...

    async def get_content(self, content_id: uuid.UUID) -> TrainingContent | None: ...

    async def list_contents(self, training_id: uuid.UUID) -> list[TrainingContent]: ...

    async def get_progress(
        self, training_id: uuid.UUID, employee_id: uuid.UUID, content_id: uuid.UUID
    ) -> TrainingProgress | None: ...

    async def add_progress(self, progress: TrainingProgress) -> TrainingProgress: ...

    async def list_progress(
        self, training_id: uuid.UUID, employee_id: uuid.UUID
    ) -> list[TrainingProgress]: ...


class NotificationRepository(Repository[Notification], Protocol):
    async def create_from_intent(self, intent: NotificationIntent) -> Notification: ...

    async def list_for_user(
        self, user_id: uuid.UUID, *, unread_only: bool = False
    ) -> list[Notification]: ...

    async def count_unread(self, user_id: uuid.UUID) -> int: ...

    async def mark_all_read(self, user_id: uuid.UUID) -> int: ...

    async def add_reply(self, reply: NotificationReply) -> NotificationReply: ...

    async def get_reply(self, reply_id: uuid.UUID) -> NotificationReply | None: ...

    async def list_replies(self, notification_id: uuid.UUID) -> list[NotificationReply]: ...

    async def mark_replies_read_for(self, user_id: uuid.UUID) -> int: ...

    async def delete_read_for(self, user_id: uuid.UUID) -> int: ...

    async def delete_for_mission(self, mission_id: uuid.UUID) -> int: ...


class TimeEntryRepository(Repository[TimeEntry], Protocol):
    async def list_for_contract(
        self,
        contract_id: uuid.UUID,
        *,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[TimeEntry]: ...

    async def list_pending_for_company(self, company_id: uuid.UUID) -> list[TimeEntry]: ...


class AbsenceRepository(Repository[Absence], Protocol):
    async def list_for_contract(
        self,
        contract_id: uuid.UUID,
        *,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[Absence]: ...

    async def list_pending_for_company(self, company_id: uuid.UUID) -> list[Absence]: ...


class TimesheetMonthRepository(Repository[TimesheetMonth], Protocol):
    async def get_for_period(
        self, contract_id: uuid.UUID, year: int, month: int
    ) -> TimesheetMonth | None: ...

    async def list_for_contract(self, contract_id: uuid.UUID) -> list[TimesheetMonth]: ...


class OutboxRepository(Protocol):
    async def park(self, intent: dict[str, Any], error: str) -> PendingNotification: ...

    async def list_due(self, now: datetime, *, limit: int) -> list[PendingNotification]: ...

    async def record_failure(
        self, row: PendingNotification, error: str, *, next_attempt_at: datetime
    ) -> None: ...

    async def delete(self, row: PendingNotification) -> None: ...


class StoredFileRepository(Protocol):
    async def add(self, stored: StoredFile) -> StoredFile: ...

    async def get(self, file_id: uuid.UUID) -> StoredFile | None: ...

    async def delete(self, stored: StoredFile) -> None: ...


# =============================================================================
# Container
# =============================================================================


class Committer(Protocol):
    async def commit(self) -> None: ...


@dataclass
class Repositories:
    """Per-request bundle of repositories sharing one unit of work."""

    users: UserRepository
    cv_profiles: CvProfileRepository
    postings: JobPostingRepository
    offers: JobOfferRepository
    applications: ApplicationRepository
    interviews: InterviewRepository
    contracts: ContractRepository
    missions: MissionRepository
    trainings: TrainingRepository
    time_entries: TimeEntryRepository
    absences: AbsenceRepository
    timesheet_months: TimesheetMonthRepository
    notifications: NotificationRepository
    outbox: OutboxRepository
    files: StoredFileRepository
    unit_of_work: Committer

    async def commit(self) -> None:
        """Commit everything written so far in this request."""
        await self.unit_of_work.commit()
