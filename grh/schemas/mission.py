"""Mission request schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class CreateMissionRequest(BaseModel):
    """Request body for POST /missions."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    description: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    employee_id: uuid.UUID | None = None
    contract_id: uuid.UUID | None = None


class UpdateMissionRequest(BaseModel):
    """Request body for PATCH /missions/{id}.

    ``status`` is accepted so the service can point callers to the status
    endpoint instead of failing with an unknown-field error.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    description: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    status: str | None = None


class MissionStatusRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: str


class MissionReviewRequest(BaseModel):
    """Request body for the company and admin review endpoints."""

    model_config = ConfigDict(extra="forbid")

    action: str


class MissionFeedbackRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    content: str | None = None
