"""Company offers and candidate applications API routers.

Endpoints:
- /offers - create, list open offers, list the company's own offers
- /offers/{id}/validate, /offers/{id}/reject - admin review
- /offers/{id}/close - stop accepting applications
- /offers/{id}/apply, /offers/{id}/applications
- /applications/mine, /applications/{id}/refuse
"""

import uuid
from typing import Annotated, Any

from fastapi import APIRouter, Depends

from grh.api.deps import Applications, CurrentActor, Offers
from grh.core.pagination import PaginationParams, pagination_params
from grh.core.responses import DataResponse, ListResponse, single_page
from grh.models import Application, JobOffer
from grh.schemas import ApplyRequest, CreateOfferRequest, ValidateOfferRequest

router = APIRouter()
applications_router = APIRouter()

Pagination = Annotated[PaginationParams, Depends(pagination_params)]


def _offer_to_dict(offer: JobOffer) -> dict[str, Any]:
    return {
        "id": offer.id,
        "company_id": offer.company_id,
        "title": offer.title,
        "description": offer.description,
        "location": offer.location,
        "contract_type": offer.contract_type,
        "status": offer.status,
        "is_validated": offer.is_validated,
        "validation_comment": offer.validation_comment,
        "created_at": offer.created_at,
    }


def _application_to_dict(application: Application) -> dict[str, Any]:
    return {
        "id": application.id,
        "offer_id": application.offer_id,
        "candidate_id": application.candidate_id,
        "cv_profile_id": application.cv_profile_id,
        "cover_note": application.cover_note,
        "status": application.status,
        "interview_id": application.interview_id,
        "created_at": application.created_at,
    }


# =============================================================================
# Offers
# =============================================================================


@router.post("", status_code=201)
async def create_offer(
    body: CreateOfferRequest, actor: CurrentActor, service: Offers
) -> DataResponse[dict]:
    offer = await service.create(actor, body.model_dump(exclude_unset=True))
    return DataResponse(message="Offer created", data=_offer_to_dict(offer))


@router.get("")
async def list_open_offers(
    _actor: CurrentActor, service: Offers, pagination: Pagination
) -> ListResponse[dict]:
    offers, total = await service.list_open(offset=pagination.offset, limit=pagination.limit)
    return ListResponse(
        data=[_offer_to_dict(o) for o in offers],
        pagination=pagination.meta(total=total, count=len(offers)),
    )


@router.get("/mine")
async def list_my_offers(actor: CurrentActor, service: Offers) -> ListResponse[dict]:
    return single_page([_offer_to_dict(o) for o in await service.list_mine(actor)])


@router.put("/{offer_id}/validate")
async def validate_offer(
    offer_id: uuid.UUID,
    actor: CurrentActor,
    service: Offers,
    body: ValidateOfferRequest | None = None,
) -> DataResponse[dict]:
    offer = await service.validate(actor, offer_id, body.comment if body else None)
    return DataResponse(message="Offer validated", data=_offer_to_dict(offer))


@router.put("/{offer_id}/reject")
async def reject_offer(
    offer_id: uuid.UUID, actor: CurrentActor, service: Offers
) -> DataResponse[dict]:
    offer = await service.reject(actor, offer_id)
    return DataResponse(message="Offer rejected", data=_offer_to_dict(offer))


@router.put("/{offer_id}/close")
async def close_offer(
    offer_id: uuid.UUID, actor: CurrentActor, service: Offers
) -> DataResponse[dict]:
    offer = await service.close(actor, offer_id)
    return DataResponse(message="Offer closed", data=_offer_to_dict(offer))


@router.post("/{offer_id}/apply", status_code=201)
async def apply_to_offer(
    offer_id: uuid.UUID,
    body: ApplyRequest,
    actor: CurrentActor,
    service: Applications,
) -> DataResponse[dict]:
    application = await service.apply(actor, offer_id, body.cv_profile_id, body.cover_note)
    return DataResponse(message="Application sent", data=_application_to_dict(application))


@router.get("/{offer_id}/applications")
async def list_offer_applications(
    offer_id: uuid.UUID, actor: CurrentActor, service: Applications
) -> ListResponse[dict]:
    applications = await service.list_for_offer(actor, offer_id)
    return single_page([_application_to_dict(a) for a in applications])


# =============================================================================
# Applications
# =============================================================================


@applications_router.get("/mine")
async def list_my_applications(actor: CurrentActor, service: Applications) -> ListResponse[dict]:
    return single_page([_application_to_dict(a) for a in await service.list_mine(actor)])


@applications_router.put("/{application_id}/refuse")
async def refuse_application(
    application_id: uuid.UUID, actor: CurrentActor, service: Applications
) -> DataResponse[dict]:
    application = await service.refuse(actor, application_id)
    return DataResponse(message="Application refused", data=_application_to_dict(application))
