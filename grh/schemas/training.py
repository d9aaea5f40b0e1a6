"""Training request schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class TrainingContentRequest(BaseModel):
    """Content item, inline on create or via POST /trainings/{id}/contents."""

    model_config = ConfigDict(extra="forbid")

    content_type: str | None = None
    url: str | None = None
    title: str | None = None
    description: str | None = None


class CreateTrainingRequest(BaseModel):
    """Request body for POST /trainings."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    description: str | None = None
    modality: str | None = None
    training_type: str | None = None
    location: str | None = None
    meeting_link: str | None = None
    scheduled_date: datetime | None = None
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    mission_id: uuid.UUID | None = None
    trainer_id: uuid.UUID | None = None
    contents: list[TrainingContentRequest] | None = None


class UpdateTrainingRequest(BaseModel):
    """Request body for PATCH /trainings/{id}. Only sent fields are applied."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    description: str | None = None
    modality: str | None = None
    training_type: str | None = None
    location: str | None = None
    meeting_link: str | None = None
    scheduled_date: datetime | None = None
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    trainer_id: uuid.UUID | None = None
    status: str | None = None


class ProgressRequest(BaseModel):
    """Request body for POST /trainings/{id}/progress."""

    model_config = ConfigDict(extra="forbid")

    content_id: uuid.UUID
    completed: bool = True
