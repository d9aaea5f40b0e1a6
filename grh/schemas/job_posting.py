"""Job posting request schemas.

Fields are typed but otherwise unconstrained: length, enum and cross-field
checks belong to the validation rule set, which reports every violation at
once in the standard VALIDATION_ERROR envelope.
"""

import uuid

from pydantic import BaseModel, ConfigDict


class CreatePostingRequest(BaseModel):
    """Request body for POST /postings."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    profession: str | None = None
    description: str | None = None
    contract_type: str | None = None
    location: str | None = None
    required_skills: list[str] | None = None
    desired_salary: int | None = None
    linked_cv_profile_id: uuid.UUID | None = None


class UpdatePostingRequest(CreatePostingRequest):
    """Request body for PUT /postings/{id}. Only sent fields are applied."""


class RejectPostingRequest(BaseModel):
    """Request body for PUT /postings/{id}/reject."""

    model_config = ConfigDict(extra="forbid")

    reason: str | None = None
