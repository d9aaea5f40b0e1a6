"""SQLAlchemy ORM models for the GRH backend.

All models are exported from this module for convenient imports:
    from grh.models import User, JobPosting, Mission, ...

Models are organized by domain:
- user.py: User, Profile, UserProfile
- cv_profile.py: CvProfile
- job_posting.py: JobPosting, PostingSave
- offer.py: JobOffer, Application
- interview.py: Interview
- contract.py: Contract
- mission.py: Mission, MissionFeedback
- training.py: Training, TrainingContent, TrainingProgress
- notification.py: Notification, NotificationReply, PendingNotification
- stored_file.py: StoredFile
- timesheet.py: TimeEntry, Absence, TimesheetMonth
"""

from grh.models.base import Base, TimestampMixin
from grh.models.contract import Contract
from grh.models.cv_profile import CvProfile
from grh.models.interview import Interview
from grh.models.job_posting import JobPosting, PostingSave
from grh.models.mission import Mission, MissionFeedback
from grh.models.notification import (
    Notification,
    NotificationReply,
    PendingNotification,
)
from grh.models.offer import Application, JobOffer
from grh.models.stored_file import StoredFile
from grh.models.timesheet import Absence, TimeEntry, TimesheetMonth
from grh.models.training import Training, TrainingContent, TrainingProgress
from grh.models.user import Profile, User, UserProfile

__all__ = [
    "Absence",
    "Application",
    "Base",
    "Contract",
    "CvProfile",
    "Interview",
    "JobOffer",
    "JobPosting",
    "Mission",
    "MissionFeedback",
    "Notification",
    "NotificationReply",
    "PendingNotification",
    "PostingSave",
    "Profile",
    "StoredFile",
    "TimeEntry",
    "TimesheetMonth",
    "TimestampMixin",
    "Training",
    "TrainingContent",
    "TrainingProgress",
    "User",
    "UserProfile",
]
