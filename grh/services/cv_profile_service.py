"""Candidate CV profiles and their uploaded CV files."""

import logging
from collections.abc import Mapping
from typing import Any

from grh.models import CvProfile
from grh.repositories.interfaces import Repositories
from grh.services.authorization import Actor
from grh.services.base import WorkflowService
from grh.services.blob_store import BlobStore
from grh.services.validation_rules import EntityKind, validate

logger = logging.getLogger(__name__)


class CvProfileService(WorkflowService):
    """Creates and lists the actor's CV profiles.

    Args:
        repos: Per-request repositories.
        cv_store: Blob store receiving the CV files.
    """

    def __init__(self, repos: Repositories, cv_store: BlobStore) -> None:
        super().__init__(repos)
        self._cv_store = cv_store

    async def create(
        self,
        actor: Actor,
        data: Mapping[str, Any],
        *,
        cv_content: bytes | None = None,
        cv_filename: str | None = None,
        cv_mimetype: str | None = None,
    ) -> CvProfile:
        """Create a CV profile, storing the CV file when one is given.

        The upload is expected to be size- and type-checked by the caller.
        """
        fields = {
            "name": data.get("name"),
            "profession": data.get("profession"),
            "skills": list(data.get("skills") or []),
        }
        validate(EntityKind.CV_PROFILE, fields)

        profile = CvProfile(user_id=actor.user_id, **fields)
        if cv_content is not None:
            filename = cv_filename or "cv"
            mimetype = cv_mimetype or "application/octet-stream"
            profile.cv_file_handle = await self._cv_store.put(
                cv_content,
                content_type=mimetype,
                filename=filename,
                metadata={"user_id": str(actor.user_id)},
            )
            profile.cv_filename = filename
            profile.cv_mimetype = mimetype
            profile.cv_size = len(cv_content)

        profile = await self._repos.cv_profiles.add(profile)
        logger.info("CV profile %s created for %s", profile.id, actor.user_id)
        return profile

    async def list_mine(self, actor: Actor) -> list[CvProfile]:
        return await self._repos.cv_profiles.list_for_user(actor.user_id)
