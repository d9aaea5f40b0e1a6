"""Trainings ("formations") attached to missions.

A training inherits its company and employee from its mission and is run
by a Coach or Trainer. Content items (videos, documents, quizzes) are
attached to it and the trained employee records per-item progress.
"""

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from grh.core.errors import APIError, NotFoundError, ValidationError
from grh.models import Training, TrainingContent, TrainingProgress, User
from grh.models.enums import ContentType, TrainerRole, TrainingStatus
from grh.repositories.interfaces import Repositories, TrainingFilters
from grh.services.authorization import Action, Actor, require
from grh.services.base import Clock, WorkflowService, utc_now
from grh.services.blob_store import BlobStore, StoredBlob
from grh.services.notification_dispatch import NotificationDispatcher
from grh.services.notifier import TrainingCreated
from grh.services.status_transitions import (
    ActorRole,
    LifecycleEntity,
    TerminalStatusError,
    apply_changes,
    apply_transition,
    is_terminal,
)
from grh.services.validation_rules import EntityKind, snapshot, validate

logger = logging.getLogger(__name__)

EDITABLE_FIELDS: tuple[str, ...] = (
    "title",
    "description",
    "modality",
    "training_type",
    "location",
    "meeting_link",
    "scheduled_date",
    "starts_at",
    "ends_at",
    "trainer_id",
)
_RULE_FIELDS: tuple[str, ...] = (*EDITABLE_FIELDS, "mission_id")

# Lists without client pagination (sessions, employee and trainer views).
UNPAGED_LIMIT = 500

_ACTIVE_STATUSES = (TrainingStatus.SCHEDULED.value, TrainingStatus.IN_PROGRESS.value)


def material_path(training_id: uuid.UUID, content_id: uuid.UUID) -> str:
    """API path serving an uploaded material file."""
    return f"/trainings/{training_id}/contents/{content_id}/file"


# =============================================================================
# Read models
# =============================================================================


def start_of(training: Training) -> datetime | None:
    """Start instant: ``starts_at`` for in-person, ``scheduled_date`` otherwise."""
    return training.starts_at or training.scheduled_date


def duration_hours(training: Training) -> float | None:
    """Length of an in-person training in hours, None when unbounded."""
    if training.starts_at is None or training.ends_at is None:
        return None
    return round((training.ends_at - training.starts_at).total_seconds() / 3600, 2)


@dataclass
class TrainingPage:
    items: list[Training]
    total: int
    skip: int
    limit: int

    @property
    def has_more(self) -> bool:
        return self.skip + len(self.items) < self.total


@dataclass
class ContentProgress:
    content: TrainingContent
    completed: bool = False
    completed_at: datetime | None = None


@dataclass
class TrainingPlanning:
    """Schedule view of one training."""

    training: Training
    trainer: User | None
    contents: list[TrainingContent]

    @property
    def starts(self) -> datetime | None:
        return start_of(self.training)

    @property
    def duration_hours(self) -> float | None:
        return duration_hours(self.training)


def _content_dicts(contents: list[TrainingContent]) -> list[dict[str, Any]]:
    return [{"content_type": c.content_type, "url": c.url} for c in contents]


# =============================================================================
# Service
# =============================================================================


class TrainingService(WorkflowService):
    """Training workflow.

    Args:
        repos: Per-request repositories.
        material_store: Blob store for uploaded training material.
        dispatcher: Notification dispatcher.
        clock: Current-time provider.
    """

    def __init__(
        self,
        repos: Repositories,
        material_store: BlobStore,
        dispatcher: NotificationDispatcher | None = None,
        *,
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(repos, dispatcher, clock=clock)
        self._material_store = material_store

    async def _load(self, training_id: uuid.UUID) -> Training:
        return await self._get_or_404(self._repos.trainings, training_id, "Training")

    async def _check_trainer(self, trainer_id: uuid.UUID) -> User:
        trainer = await self._get_or_404(self._repos.users, trainer_id, "Trainer")
        if trainer.role not in TrainerRole.values() or not trainer.is_active:
            raise ValidationError(
                message="The trainer must be an active Coach or Trainer",
                details=[{"field": "trainer_id", "message": "Not a Coach or Trainer"}],
            )
        return trainer

    # -----------------------------------------------------------------------
    # Create / update / delete
    # -----------------------------------------------------------------------

    async def create(self, actor: Actor, data: Mapping[str, Any]) -> Training:
        """Create a training for a mission and notify the employee and trainer.

        Raises:
            ValidationError: If fields are invalid or the trainer is not a
                Coach or Trainer.
            NotFoundError: If the mission or trainer does not exist.
            ForbiddenError: If the actor does not own the mission.
        """
        fields = {name: data.get(name) for name in _RULE_FIELDS}
        contents = [dict(item) for item in data.get("contents") or []]
        validate(EntityKind.TRAINING, {**fields, "contents": contents}, now=self.now())

        mission = await self._get_or_404(self._repos.missions, fields["mission_id"], "Mission")
        require(actor, Action.TRAINING_CREATE, mission)
        await self._check_trainer(fields["trainer_id"])

        training = await self._repos.trainings.add(
            Training(
                company_id=mission.company_id,
                employee_id=mission.employee_id,
                status=TrainingStatus.DRAFT.value,
                **fields,
            )
        )
        for item in contents:
            await self._repos.trainings.add_content(
                TrainingContent(
                    training_id=training.id,
                    content_type=item["content_type"],
                    url=item["url"],
                    title=item.get("title"),
                    description=item.get("description"),
                )
            )
        await self._repos.commit()
        logger.info("Training %s created for mission %s", training.id, mission.id)

        await self._dispatcher.dispatch(
            TrainingCreated(
                training_id=training.id,
                mission_id=mission.id,
                employee_id=training.employee_id,
                trainer_id=training.trainer_id,
                company_id=training.company_id,
                title=training.title,
                modality=training.modality,
            )
        )
        return training

    async def update(
        self, actor: Actor, training_id: uuid.UUID, data: Mapping[str, Any]
    ) -> Training:
        """Edit a training. A ``status`` key goes through the transition guard."""
        training = await self._load(training_id)
        require(actor, Action.TRAINING_UPDATE, training)
        if is_terminal(LifecycleEntity.TRAINING, training.status):
            raise TerminalStatusError(LifecycleEntity.TRAINING, training.status)

        changes: dict[str, Any] = {}
        if data.get("status") is not None:
            result = apply_transition(
                LifecycleEntity.TRAINING,
                training.status,
                data["status"],
                ActorRole.COMPANY,
                now=self.now(),
            )
            changes.update(result.changes)

        proposed = {name: value for name, value in data.items() if name in EDITABLE_FIELDS}
        if proposed:
            current = snapshot(training, _RULE_FIELDS)
            current["contents"] = _content_dicts(
                await self._repos.trainings.list_contents(training.id)
            )
            validate(EntityKind.TRAINING, proposed, current, now=self.now())
            if "trainer_id" in proposed and proposed["trainer_id"] != training.trainer_id:
                await self._check_trainer(proposed["trainer_id"])
            changes.update(proposed)

        old_status = training.status
        apply_changes(training, changes)
        training = await self._repos.trainings.save(training)
        if training.status != old_status:
            logger.info("Training %s: %s -> %s", training.id, old_status, training.status)
        return training

    async def delete(self, actor: Actor, training_id: uuid.UUID) -> None:
        """Delete a training with its contents.

        Uploaded material blobs are removed best-effort.
        """
        training = await self._load(training_id)
        require(actor, Action.TRAINING_DELETE, training)
        handles = [
            c.file_handle
            for c in await self._repos.trainings.list_contents(training.id)
            if c.file_handle
        ]
        await self._repos.trainings.delete(training)
        logger.info("Training %s deleted by %s", training_id, actor.user_id)
        for handle in handles:
            try:
                await self._material_store.delete(handle)
            except APIError as e:
                logger.warning(
                    "Failed to delete material %s of training %s: %s",
                    handle,
                    training_id,
                    e.message,
                )

    # -----------------------------------------------------------------------
    # Contents
    # -----------------------------------------------------------------------

    async def add_content(
        self, actor: Actor, training_id: uuid.UUID, data: Mapping[str, Any]
    ) -> TrainingContent:
        training = await self._load(training_id)
        require(actor, Action.TRAINING_ADD_CONTENT, training)
        fields = {
            name: data.get(name) for name in ("content_type", "url", "title", "description")
        }
        validate(EntityKind.TRAINING_CONTENT, fields)
        return await self._repos.trainings.add_content(
            TrainingContent(training_id=training.id, **fields)
        )

    async def upload_material(
        self,
        actor: Actor,
        training_id: uuid.UUID,
        *,
        content: bytes,
        filename: str,
        content_type: str,
        title: str | None = None,
    ) -> TrainingContent:
        """Store an uploaded file and attach it as a document content.

        The upload is expected to be size- and type-checked by the caller.
        """
        training = await self._load(training_id)
        require(actor, Action.TRAINING_ADD_CONTENT, training)
        handle = await self._material_store.put(
            content,
            content_type=content_type,
            filename=filename,
            metadata={"training_id": str(training.id)},
        )
        content_id = uuid.uuid4()
        item = await self._repos.trainings.add_content(
            TrainingContent(
                id=content_id,
                training_id=training.id,
                content_type=ContentType.DOCUMENT.value,
                url=material_path(training.id, content_id),
                file_handle=handle,
                title=title or filename,
            )
        )
        logger.info("Material %s uploaded to training %s", item.id, training.id)
        return item

    async def list_contents(self, actor: Actor, training_id: uuid.UUID) -> list[TrainingContent]:
        training = await self._load(training_id)
        require(actor, Action.TRAINING_READ, training)
        return await self._repos.trainings.list_contents(training.id)

    async def get_material(
        self, actor: Actor, training_id: uuid.UUID, content_id: uuid.UUID
    ) -> StoredBlob:
        """Read back an uploaded material file.

        Raises:
            NotFoundError: If the content is not part of the training or is
                a link rather than an upload.
        """
        training = await self._load(training_id)
        require(actor, Action.TRAINING_READ, training)
        content = await self._repos.trainings.get_content(content_id)
        if content is None or content.training_id != training.id or not content.file_handle:
            raise NotFoundError("Training material", str(content_id))
        return await self._material_store.get(content.file_handle)

    # -----------------------------------------------------------------------
    # Progress
    # -----------------------------------------------------------------------

    async def record_progress(
        self,
        actor: Actor,
        training_id: uuid.UUID,
        content_id: uuid.UUID,
        completed: bool = True,
    ) -> TrainingProgress:
        """Upsert the employee's completion of one content item.

        Raises:
            NotFoundError: If the content item is not part of the training.
        """
        training = await self._load(training_id)
        require(actor, Action.TRAINING_RECORD_PROGRESS, training)
        content = await self._repos.trainings.get_content(content_id)
        if content is None or content.training_id != training.id:
            raise NotFoundError("Training content", str(content_id))

        completed_at = self.now() if completed else None
        progress = await self._repos.trainings.get_progress(
            training.id, actor.user_id, content.id
        )
        if progress is None:
            return await self._repos.trainings.add_progress(
                TrainingProgress(
                    training_id=training.id,
                    employee_id=actor.user_id,
                    content_id=content.id,
                    completed=completed,
                    completed_at=completed_at,
                )
            )
        if progress.completed != completed:
            progress.completed = completed
            progress.completed_at = completed_at
        return await self._repos.trainings.save(progress)

    async def get_progress(self, actor: Actor, training_id: uuid.UUID) -> list[ContentProgress]:
        """Every content item of the training with the employee's completion."""
        training = await self._load(training_id)
        require(actor, Action.TRAINING_READ, training)
        contents = await self._repos.trainings.list_contents(training.id)
        done = {
            p.content_id: p
            for p in await self._repos.trainings.list_progress(training.id, training.employee_id)
        }
        report = []
        for content in contents:
            progress = done.get(content.id)
            if progress is None:
                report.append(ContentProgress(content))
            else:
                report.append(ContentProgress(content, progress.completed, progress.completed_at))
        return report

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    async def list_for_actor(
        self, actor: Actor, filters: TrainingFilters, *, limit: int, skip: int
    ) -> TrainingPage:
        """Trainings the actor takes part in. Admins see every training."""
        if not actor.is_admin:
            filters = TrainingFilters(
                company_id=actor.user_id if actor.is_company else None,
                employee_id=actor.user_id,
                trainer_id=actor.user_id if actor.is_trainer else None,
                statuses=filters.statuses,
                modality=filters.modality,
                training_type=filters.training_type,
                search=filters.search,
            )
        items, total = await self._repos.trainings.search(filters, offset=skip, limit=limit)
        return TrainingPage(items=items, total=total, skip=skip, limit=limit)

    async def list_sessions(self, actor: Actor) -> list[Training]:
        """Upcoming and running trainings with a start time, earliest first."""
        page = await self.list_for_actor(
            actor, TrainingFilters(statuses=_ACTIVE_STATUSES), limit=UNPAGED_LIMIT, skip=0
        )
        sessions = [t for t in page.items if start_of(t) is not None]
        return sorted(sessions, key=start_of)

    async def list_for_employee(self, actor: Actor) -> list[Training]:
        items, _ = await self._repos.trainings.search(
            TrainingFilters(employee_id=actor.user_id), offset=0, limit=UNPAGED_LIMIT
        )
        return items

    async def list_for_trainer(self, actor: Actor) -> list[Training]:
        require(actor, Action.TRAINING_LIST_AS_TRAINER)
        items, _ = await self._repos.trainings.search(
            TrainingFilters(trainer_id=actor.user_id), offset=0, limit=UNPAGED_LIMIT
        )
        return items

    async def planning(self, actor: Actor, training_id: uuid.UUID) -> TrainingPlanning:
        training = await self._load(training_id)
        require(actor, Action.TRAINING_READ, training)
        trainer = await self._repos.users.get(training.trainer_id)
        contents = await self._repos.trainings.list_contents(training.id)
        return TrainingPlanning(training=training, trainer=trainer, contents=contents)

    async def list_trainers(self) -> list[User]:
        return await self._repos.users.list_trainers()
