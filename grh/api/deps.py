"""Shared dependencies for API endpoints.

Authentication:
- Local mode (auth disabled) acts as DEFAULT_USER_ID.
- Hosted mode validates ``Authorization: Bearer <jwt>`` (HS256, exp/aud/iss).

Every request gets one session, one set of repositories bound to it and
services built on top. Tests override ``get_repositories`` with in-memory
fakes and ``get_local_blob_store`` with a temporary directory.
"""

import uuid
from typing import Annotated

import jwt
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from grh.core.auth import bearer_token, decode_jwt
from grh.core.config import settings
from grh.core.database import get_db
from grh.core.errors import UnauthorizedError
from grh.models import User
from grh.repositories.interfaces import Repositories
from grh.repositories.sql import build_repositories
from grh.services.account_service import AccountService
from grh.services.authorization import Actor
from grh.services.blob_store import BlobStore, DatabaseBlobStore, LocalBlobStore
from grh.services.contract_service import ContractService
from grh.services.cv_profile_service import CvProfileService
from grh.services.interview_service import InterviewService
from grh.services.mission_service import MissionService
from grh.services.notification_service import NotificationService
from grh.services.offer_service import ApplicationService, OfferService
from grh.services.posting_service import PostingService
from grh.services.timesheet_service import TimesheetService
from grh.services.training_service import TrainingService

DbSession = Annotated[AsyncSession, Depends(get_db)]


def get_repositories(db: DbSession) -> Repositories:
    return build_repositories(db)


Repos = Annotated[Repositories, Depends(get_repositories)]


# =============================================================================
# Authentication
# =============================================================================


def _subject_from_request(request: Request) -> uuid.UUID:
    """Resolve the acting user id from the auth mode.

    Raises:
        UnauthorizedError: For any auth failure. The message never says why.
    """
    if not settings.auth_enabled:
        if settings.default_user_id is None:
            raise UnauthorizedError()
        return settings.default_user_id

    token = bearer_token(request.headers.get("Authorization"))
    if not token:
        raise UnauthorizedError()
    try:
        payload = decode_jwt(token)
        return uuid.UUID(payload["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError, TypeError) as exc:
        raise UnauthorizedError() from exc


async def get_current_user(request: Request, repos: Repos) -> User:
    """Load the authenticated user.

    Raises:
        UnauthorizedError: If the user does not exist or is inactive.
    """
    user_id = _subject_from_request(request)
    user = await repos.users.get(user_id)
    if user is None or not user.is_active:
        raise UnauthorizedError()
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


async def get_current_actor(user: CurrentUser, repos: Repos) -> Actor:
    """Build the Actor (id, profiles, trainer role) checked by the policy."""
    profiles = await repos.users.get_profile_names(user.id)
    return Actor(user_id=user.id, profiles=profiles, role=user.role)


CurrentActor = Annotated[Actor, Depends(get_current_actor)]


# =============================================================================
# Blob stores
# =============================================================================


def get_local_blob_store() -> BlobStore:
    """Local-path store for CV files and training material."""
    return LocalBlobStore(settings.upload_dir)


LocalStore = Annotated[BlobStore, Depends(get_local_blob_store)]


# =============================================================================
# Services
# =============================================================================


def get_account_service(repos: Repos) -> AccountService:
    return AccountService(repos)


def get_cv_profile_service(repos: Repos, store: LocalStore) -> CvProfileService:
    return CvProfileService(repos, store)


def get_posting_service(repos: Repos, store: LocalStore) -> PostingService:
    return PostingService(repos, store)


def get_offer_service(repos: Repos) -> OfferService:
    return OfferService(repos)


def get_application_service(repos: Repos) -> ApplicationService:
    return ApplicationService(repos)


def get_interview_service(repos: Repos) -> InterviewService:
    return InterviewService(repos)


def get_contract_service(repos: Repos) -> ContractService:
    return ContractService(repos)


def get_mission_service(repos: Repos) -> MissionService:
    return MissionService(repos, DatabaseBlobStore(repos.files))


def get_training_service(repos: Repos, store: LocalStore) -> TrainingService:
    return TrainingService(repos, store)


def get_timesheet_service(repos: Repos) -> TimesheetService:
    return TimesheetService(repos)


def get_notification_service(repos: Repos) -> NotificationService:
    return NotificationService(repos)


Accounts = Annotated[AccountService, Depends(get_account_service)]
CvProfiles = Annotated[CvProfileService, Depends(get_cv_profile_service)]
Postings = Annotated[PostingService, Depends(get_posting_service)]
Offers = Annotated[OfferService, Depends(get_offer_service)]
Applications = Annotated[ApplicationService, Depends(get_application_service)]
Interviews = Annotated[InterviewService, Depends(get_interview_service)]
Contracts = Annotated[ContractService, Depends(get_contract_service)]
Missions = Annotated[MissionService, Depends(get_mission_service)]
Trainings = Annotated[TrainingService, Depends(get_training_service)]
Timesheets = Annotated[TimesheetService, Depends(get_timesheet_service)]
Notifications = Annotated[NotificationService, Depends(get_notification_service)]
