"""SQLAlchemy-backed Repositories container."""

from sqlalchemy.ext.asyncio import AsyncSession

from grh.repositories.interfaces import Repositories
from grh.repositories.job_posting_repository import JobPostingRepository
from grh.repositories.mission_repository import MissionRepository
from grh.repositories.notification_repository import (
    NotificationRepository,
    OutboxRepository,
    StoredFileRepository,
)
from grh.repositories.recruitment_repository import (
    ApplicationRepository,
    ContractRepository,
    InterviewRepository,
    JobOfferRepository,
)
from grh.repositories.timesheet_repository import (
    AbsenceRepository,
    TimeEntryRepository,
    TimesheetMonthRepository,
)
from grh.repositories.training_repository import TrainingRepository
from grh.repositories.user_repository import CvProfileRepository, UserRepository


def build_repositories(db: AsyncSession) -> Repositories:
    """Bind every repository to one session.

    The session itself is the unit of work: ``Repositories.commit`` commits it.
    """
    return Repositories(
        users=UserRepository(db),
        cv_profiles=CvProfileRepository(db),
        postings=JobPostingRepository(db),
        offers=JobOfferRepository(db),
        applications=ApplicationRepository(db),
        interviews=InterviewRepository(db),
        contracts=ContractRepository(db),
        missions=MissionRepository(db),
        trainings=TrainingRepository(db),
        time_entries=TimeEntryRepository(db),
        absences=AbsenceRepository(db),
        timesheet_months=TimesheetMonthRepository(db),
        notifications=NotificationRepository(db),
        outbox=OutboxRepository(db),
        files=StoredFileRepository(db),
        unit_of_work=db,
    )
