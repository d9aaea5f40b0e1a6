"""Missions API router.

Endpoints:
- POST /missions - create under a signed contract (company)
- GET /missions - the company's missions (search, status, dates, sort)
- GET /missions/mine - the employee's missions
- GET /missions/contract/{id}
- /missions/{id} - read, edit, delete
- PATCH /missions/{id}/status|validate|admin-validate|cancel
- /missions/{id}/feedback, /missions/{id}/report
"""

import uuid
from datetime import datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import Response

from grh.api.deps import CurrentActor, Missions
from grh.core.config import settings
from grh.core.file_validation import (
    REPORT_MIMES,
    megabytes,
    read_file_with_size_limit,
    sanitize_filename_for_header,
    validate_file_content,
)
from grh.core.filtering import SortSpec, parse_filter_value, parse_sort
from grh.core.pagination import PaginationParams, pagination_params
from grh.core.rate_limiting import limiter, setting_limit
from grh.core.responses import DataResponse, ListResponse, single_page
from grh.models import Mission, MissionFeedback
from grh.repositories.interfaces import MissionFilters
from grh.repositories.mission_repository import SORTABLE_FIELDS
from grh.schemas import (
    CreateMissionRequest,
    MissionFeedbackRequest,
    MissionReviewRequest,
    MissionStatusRequest,
    UpdateMissionRequest,
)

router = APIRouter()

Pagination = Annotated[PaginationParams, Depends(pagination_params)]


def _mission_to_dict(mission: Mission) -> dict[str, Any]:
    return {
        "id": mission.id,
        "title": mission.title,
        "description": mission.description,
        "start_date": mission.start_date,
        "end_date": mission.end_date,
        "status": mission.status,
        "company_id": mission.company_id,
        "employee_id": mission.employee_id,
        "contract_id": mission.contract_id,
        "company_validation": mission.company_validation,
        "admin_validation": mission.admin_validation,
        "report_filename": mission.report_filename,
        "report_submitted_at": mission.report_submitted_at,
        "created_at": mission.created_at,
        "updated_at": mission.updated_at,
    }


def _feedback_to_dict(feedback: MissionFeedback) -> dict[str, Any]:
    return {
        "id": feedback.id,
        "mission_id": feedback.mission_id,
        "author_id": feedback.author_id,
        "content": feedback.content,
        "created_at": feedback.created_at,
    }


# =============================================================================
# Collections
# =============================================================================


@router.post("", status_code=201)
async def create_mission(
    body: CreateMissionRequest, actor: CurrentActor, service: Missions
) -> DataResponse[dict]:
    mission = await service.create(actor, body.model_dump(exclude_unset=True))
    return DataResponse(message="Mission created", data=_mission_to_dict(mission))


@router.get("")
async def list_company_missions(
    actor: CurrentActor,
    service: Missions,
    pagination: Pagination,
    search: str | None = None,
    status: str | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    sort_by: str | None = None,
) -> ListResponse[dict]:
    """List the company's missions.

    ``status`` accepts a comma-separated list; ``sort_by`` is ``field:asc|desc``.
    """
    field, direction = parse_sort(sort_by, SORTABLE_FIELDS, ("start_date", "desc"))
    filters = MissionFilters(
        search=search,
        statuses=tuple(parse_filter_value(status)),
        date_from=date_from,
        date_to=date_to,
        sort=SortSpec(field, direction),
    )
    missions, total = await service.list_for_company(
        actor, filters, offset=pagination.offset, limit=pagination.limit
    )
    return ListResponse(
        data=[_mission_to_dict(m) for m in missions],
        pagination=pagination.meta(total=total, count=len(missions)),
    )


@router.get("/mine")
async def list_my_missions(actor: CurrentActor, service: Missions) -> ListResponse[dict]:
    return single_page([_mission_to_dict(m) for m in await service.list_for_employee(actor)])


@router.get("/contract/{contract_id}")
async def list_contract_missions(
    contract_id: uuid.UUID, actor: CurrentActor, service: Missions
) -> ListResponse[dict]:
    missions = await service.list_for_contract(actor, contract_id)
    return single_page([_mission_to_dict(m) for m in missions])


# =============================================================================
# Single mission
# =============================================================================


@router.get("/{mission_id}")
async def get_mission(
    mission_id: uuid.UUID, actor: CurrentActor, service: Missions
) -> DataResponse[dict]:
    return DataResponse(data=_mission_to_dict(await service.get(actor, mission_id)))


@router.patch("/{mission_id}")
async def update_mission(
    mission_id: uuid.UUID,
    body: UpdateMissionRequest,
    actor: CurrentActor,
    service: Missions,
) -> DataResponse[dict]:
    mission = await service.update(actor, mission_id, body.model_dump(exclude_unset=True))
    return DataResponse(message="Mission updated", data=_mission_to_dict(mission))


@router.delete("/{mission_id}")
async def delete_mission(
    mission_id: uuid.UUID, actor: CurrentActor, service: Missions
) -> DataResponse[dict]:
    await service.delete(actor, mission_id)
    return DataResponse(message="Mission deleted", data={"id": mission_id})


@router.patch("/{mission_id}/status")
async def change_mission_status(
    mission_id: uuid.UUID,
    body: MissionStatusRequest,
    actor: CurrentActor,
    service: Missions,
) -> DataResponse[dict]:
    mission = await service.change_status(actor, mission_id, body.status)
    return DataResponse(data=_mission_to_dict(mission))


@router.patch("/{mission_id}/validate")
async def validate_mission(
    mission_id: uuid.UUID,
    body: MissionReviewRequest,
    actor: CurrentActor,
    service: Missions,
) -> DataResponse[dict]:
    mission = await service.validate(actor, mission_id, body.action)
    return DataResponse(data=_mission_to_dict(mission))


@router.patch("/{mission_id}/admin-validate")
async def admin_validate_mission(
    mission_id: uuid.UUID,
    body: MissionReviewRequest,
    actor: CurrentActor,
    service: Missions,
) -> DataResponse[dict]:
    mission = await service.admin_validate(actor, mission_id, body.action)
    return DataResponse(data=_mission_to_dict(mission))


@router.patch("/{mission_id}/cancel")
async def cancel_mission(
    mission_id: uuid.UUID, actor: CurrentActor, service: Missions
) -> DataResponse[dict]:
    mission = await service.cancel(actor, mission_id)
    return DataResponse(message="Mission cancelled", data=_mission_to_dict(mission))


# =============================================================================
# Report and feedback
# =============================================================================


@router.post("/{mission_id}/feedback", status_code=201)
async def add_mission_feedback(
    mission_id: uuid.UUID,
    body: MissionFeedbackRequest,
    actor: CurrentActor,
    service: Missions,
) -> DataResponse[dict]:
    feedback = await service.add_feedback(actor, mission_id, body.content)
    return DataResponse(message="Feedback added", data=_feedback_to_dict(feedback))


@router.get("/{mission_id}/feedback")
async def list_mission_feedback(
    mission_id: uuid.UUID, actor: CurrentActor, service: Missions
) -> ListResponse[dict]:
    feedback = await service.list_feedback(actor, mission_id)
    return single_page([_feedback_to_dict(f) for f in feedback])


@router.post("/{mission_id}/report")
@limiter.limit(setting_limit("rate_limit_upload"))
async def submit_mission_report(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    mission_id: uuid.UUID,
    file: Annotated[UploadFile, File(...)],
    actor: CurrentActor,
    service: Missions,
) -> DataResponse[dict]:
    """Upload the mission report (PDF only)."""
    content = await read_file_with_size_limit(file, megabytes(settings.report_max_size_mb))
    filename = file.filename or "report.pdf"
    validate_file_content(content, filename, REPORT_MIMES)
    mission = await service.submit_report(
        actor, mission_id, content=content, filename=filename
    )
    return DataResponse(message="Report submitted", data=_mission_to_dict(mission))


@router.get("/{mission_id}/report")
async def download_mission_report(
    mission_id: uuid.UUID, actor: CurrentActor, service: Missions
) -> Response:
    blob = await service.get_report(actor, mission_id)
    filename = sanitize_filename_for_header(blob.filename)
    return Response(
        content=blob.data,
        media_type=blob.content_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
