"""Offer, application and contract request schemas."""

import uuid
from datetime import date

from pydantic import BaseModel, ConfigDict


class CreateOfferRequest(BaseModel):
    """Request body for POST /offers."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    description: str | None = None
    location: str | None = None
    contract_type: str | None = None


class ValidateOfferRequest(BaseModel):
    """Request body for PUT /offers/{id}/validate."""

    model_config = ConfigDict(extra="forbid")

    comment: str | None = None


class ApplyRequest(BaseModel):
    """Request body for POST /offers/{id}/apply."""

    model_config = ConfigDict(extra="forbid")

    cv_profile_id: uuid.UUID | None = None
    cover_note: str | None = None


class CreateContractRequest(BaseModel):
    """Request body for POST /contracts."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    employee_id: uuid.UUID | None = None
    company_id: uuid.UUID | None = None
    interview_id: uuid.UUID | None = None
    offer_id: uuid.UUID | None = None
    contract_type: str | None = None
    position: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    salary: int | None = None
