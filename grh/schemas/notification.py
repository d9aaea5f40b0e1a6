"""Notification request schemas."""

from pydantic import BaseModel, ConfigDict


class MarkReadRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    read: bool = True


class ReplyRequest(BaseModel):
    """Request body for POST /notifications/{id}/reply."""

    model_config = ConfigDict(extra="forbid")

    content: str | None = None
