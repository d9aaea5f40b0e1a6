"""Interview request schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ScheduleFromApplicationRequest(BaseModel):
    """Request body for POST /interviews."""

    model_config = ConfigDict(extra="forbid")

    application_id: uuid.UUID | None = None
    scheduled_at: datetime | None = None
    meeting_link: str | None = None
    notes: str | None = None


class ScheduleFromPostingRequest(BaseModel):
    """Request body for POST /interviews/from-posting."""

    model_config = ConfigDict(extra="forbid")

    posting_id: uuid.UUID | None = None
    candidate_id: uuid.UUID | None = None
    scheduled_at: datetime | None = None
    meeting_link: str | None = None
    notes: str | None = None


class EvaluateInterviewRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    outcome: str | None = None
    notes: str | None = None


class RescheduleInterviewRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    scheduled_at: datetime | None = None
    meeting_link: str | None = None
