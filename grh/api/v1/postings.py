"""Job postings API router.

Endpoints:
- /postings - create a posting
- /postings/mine, /postings/saved - the actor's own and saved postings
- /postings/search, /postings/published - public listings (published only)
- /postings/{id} - read, update, delete
- /postings/{id}/toggle-save, /postings/{id}/toggle-publish
- /postings/{id}/validate, /postings/{id}/reject - admin review
- /postings/{id}/cv - download the linked CV
"""

import uuid
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from grh.api.deps import CurrentActor, Postings
from grh.core.file_validation import sanitize_filename_for_header
from grh.core.filtering import parse_filter_value
from grh.core.pagination import PaginationParams, pagination_params
from grh.core.responses import DataResponse, ListResponse
from grh.models import JobPosting
from grh.repositories.interfaces import PostingFilters
from grh.schemas import CreatePostingRequest, RejectPostingRequest, UpdatePostingRequest
from grh.services.posting_service import PostingService

router = APIRouter()

Pagination = Annotated[PaginationParams, Depends(pagination_params)]


def _posting_to_dict(posting: JobPosting, save_count: int | None = None) -> dict[str, Any]:
    data = {
        "id": posting.id,
        "owner_candidate_id": posting.owner_candidate_id,
        "title": posting.title,
        "profession": posting.profession,
        "description": posting.description,
        "contract_type": posting.contract_type,
        "location": posting.location,
        "required_skills": posting.required_skills,
        "desired_salary": posting.desired_salary,
        "status": posting.status,
        "is_validated": posting.is_validated,
        "rejection_reason": posting.rejection_reason,
        "expiration_date": posting.expiration_date,
        "linked_cv_profile_id": posting.linked_cv_profile_id,
        "linked_interview_id": posting.linked_interview_id,
        "created_at": posting.created_at,
        "updated_at": posting.updated_at,
    }
    if save_count is not None:
        data["save_count"] = save_count
    return data


async def _page(
    service: PostingService, postings: list[JobPosting], total: int, pagination: PaginationParams
) -> ListResponse[dict]:
    counts = await service.save_counts(postings)
    return ListResponse(
        data=[_posting_to_dict(p, counts.get(p.id, 0)) for p in postings],
        pagination=pagination.meta(total=total, count=len(postings)),
    )


# =============================================================================
# Collections
# =============================================================================


@router.post("", status_code=201)
async def create_posting(
    body: CreatePostingRequest, actor: CurrentActor, service: Postings
) -> DataResponse[dict]:
    posting = await service.create(actor, body.model_dump(exclude_unset=True))
    return DataResponse(message="Job posting created", data=_posting_to_dict(posting))


@router.get("/mine")
async def list_my_postings(
    actor: CurrentActor, service: Postings, pagination: Pagination
) -> ListResponse[dict]:
    postings, total = await service.list_mine(
        actor, offset=pagination.offset, limit=pagination.limit
    )
    return await _page(service, postings, total, pagination)


@router.get("/search")
async def search_postings(
    _actor: CurrentActor,
    service: Postings,
    pagination: Pagination,
    contract_type: str | None = None,
    location: str | None = None,
    profession: str | None = None,
    skills: Annotated[str | None, Query(description="Comma-separated, any of")] = None,
    q: str | None = None,
) -> ListResponse[dict]:
    """Search published postings. Skills match when any listed skill is required."""
    filters = PostingFilters(
        contract_type=contract_type,
        location=location,
        profession=profession,
        skills=tuple(parse_filter_value(skills)),
        search=q,
    )
    postings, total = await service.search(
        filters, offset=pagination.offset, limit=pagination.limit
    )
    return await _page(service, postings, total, pagination)


@router.get("/saved")
async def list_saved_postings(
    actor: CurrentActor, service: Postings, pagination: Pagination
) -> ListResponse[dict]:
    postings, total = await service.list_saved(
        actor, offset=pagination.offset, limit=pagination.limit
    )
    return await _page(service, postings, total, pagination)


@router.get("/published")
async def list_published_postings(_actor: CurrentActor, service: Postings) -> ListResponse[dict]:
    postings = await service.list_published()
    return await _page(
        service, postings, len(postings), PaginationParams(page=1, limit=max(len(postings), 1))
    )


# =============================================================================
# Single posting
# =============================================================================


@router.get("/{posting_id}")
async def get_posting(
    posting_id: uuid.UUID, _actor: CurrentActor, service: Postings
) -> DataResponse[dict]:
    posting = await service.get(posting_id)
    counts = await service.save_counts([posting])
    return DataResponse(data=_posting_to_dict(posting, counts.get(posting.id, 0)))


@router.put("/{posting_id}")
async def update_posting(
    posting_id: uuid.UUID,
    body: UpdatePostingRequest,
    actor: CurrentActor,
    service: Postings,
) -> DataResponse[dict]:
    posting = await service.update(actor, posting_id, body.model_dump(exclude_unset=True))
    return DataResponse(message="Job posting updated", data=_posting_to_dict(posting))


@router.delete("/{posting_id}")
async def delete_posting(
    posting_id: uuid.UUID, actor: CurrentActor, service: Postings
) -> DataResponse[dict]:
    await service.delete(actor, posting_id)
    return DataResponse(message="Job posting deleted", data={"id": posting_id})


@router.post("/{posting_id}/toggle-save")
async def toggle_save_posting(
    posting_id: uuid.UUID, actor: CurrentActor, service: Postings
) -> DataResponse[dict]:
    posting, saved = await service.toggle_save(actor, posting_id)
    counts = await service.save_counts([posting])
    return DataResponse(
        message="Job posting saved" if saved else "Job posting unsaved",
        data={
            "id": posting.id,
            "is_saved": saved,
            "save_count": counts.get(posting.id, 0),
        },
    )


@router.put("/{posting_id}/toggle-publish")
async def toggle_publish_posting(
    posting_id: uuid.UUID, actor: CurrentActor, service: Postings
) -> DataResponse[dict]:
    posting = await service.toggle_publish(actor, posting_id)
    return DataResponse(data=_posting_to_dict(posting))


@router.put("/{posting_id}/validate")
async def validate_posting(
    posting_id: uuid.UUID, actor: CurrentActor, service: Postings
) -> DataResponse[dict]:
    posting = await service.validate(actor, posting_id)
    return DataResponse(message="Job posting validated", data=_posting_to_dict(posting))


@router.put("/{posting_id}/reject")
async def reject_posting(
    posting_id: uuid.UUID,
    body: RejectPostingRequest,
    actor: CurrentActor,
    service: Postings,
) -> DataResponse[dict]:
    posting = await service.reject(actor, posting_id, body.reason)
    return DataResponse(message="Job posting rejected", data=_posting_to_dict(posting))


@router.get("/{posting_id}/cv")
async def download_posting_cv(
    posting_id: uuid.UUID, _actor: CurrentActor, service: Postings
) -> Response:
    blob = await service.get_cv(posting_id)
    filename = sanitize_filename_for_header(blob.filename)
    return Response(
        content=blob.data,
        media_type=blob.content_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
