"""Trainings API router.

Endpoints:
- POST /trainings - create for a mission (company)
- GET /trainings - trainings the actor takes part in (skip/limit)
- GET /trainings/sessions, /trainings/mine, /trainings/coach, /trainings/trainers
- /trainings/{id} - edit, delete, planning
- /trainings/{id}/contents, /trainings/{id}/contents/upload
- GET /trainings/{id}/contents/{content_id}/file - uploaded material
- /trainings/{id}/progress
"""

import uuid
from typing import Annotated, Any

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import Response

from grh.api.deps import CurrentActor, Trainings
from grh.core.config import settings
from grh.core.file_validation import (
    MATERIAL_MIMES,
    megabytes,
    read_file_with_size_limit,
    sanitize_filename_for_header,
    validate_file_content,
)
from grh.core.filtering import parse_filter_value
from grh.core.pagination import OffsetParams, offset_params
from grh.core.rate_limiting import limiter, setting_limit
from grh.core.responses import DataResponse, ListResponse, single_page
from grh.models import Training, TrainingContent, TrainingProgress, User
from grh.repositories.interfaces import TrainingFilters
from grh.schemas import (
    CreateTrainingRequest,
    ProgressRequest,
    TrainingContentRequest,
    UpdateTrainingRequest,
)
from grh.services.training_service import duration_hours

router = APIRouter()

Offset = Annotated[OffsetParams, Depends(offset_params)]


def _training_to_dict(training: Training) -> dict[str, Any]:
    return {
        "id": training.id,
        "title": training.title,
        "description": training.description,
        "modality": training.modality,
        "training_type": training.training_type,
        "location": training.location,
        "meeting_link": training.meeting_link,
        "scheduled_date": training.scheduled_date,
        "starts_at": training.starts_at,
        "ends_at": training.ends_at,
        "duration_hours": duration_hours(training),
        "status": training.status,
        "mission_id": training.mission_id,
        "company_id": training.company_id,
        "employee_id": training.employee_id,
        "trainer_id": training.trainer_id,
        "created_at": training.created_at,
    }


def _content_to_dict(content: TrainingContent) -> dict[str, Any]:
    return {
        "id": content.id,
        "training_id": content.training_id,
        "content_type": content.content_type,
        "url": content.url,
        "title": content.title,
        "description": content.description,
        "added_at": content.added_at,
    }


def _trainer_to_dict(user: User) -> dict[str, Any]:
    return {"id": user.id, "name": user.name, "email": user.email, "role": user.role}


# =============================================================================
# Collections
# =============================================================================


@router.post("", status_code=201)
async def create_training(
    body: CreateTrainingRequest, actor: CurrentActor, service: Trainings
) -> DataResponse[dict]:
    training = await service.create(actor, body.model_dump(exclude_unset=True))
    return DataResponse(message="Training created", data=_training_to_dict(training))


@router.get("")
async def list_trainings(
    actor: CurrentActor,
    service: Trainings,
    offset: Offset,
    status: str | None = None,
    modality: str | None = None,
    training_type: str | None = None,
    search: str | None = None,
) -> ListResponse[dict]:
    filters = TrainingFilters(
        statuses=tuple(parse_filter_value(status)),
        modality=modality,
        training_type=training_type,
        search=search,
    )
    page = await service.list_for_actor(actor, filters, limit=offset.limit, skip=offset.skip)
    return ListResponse(
        data=[_training_to_dict(t) for t in page.items],
        pagination=offset.meta(total=page.total, count=len(page.items)),
    )


@router.get("/sessions")
async def list_training_sessions(actor: CurrentActor, service: Trainings) -> ListResponse[dict]:
    return single_page([_training_to_dict(t) for t in await service.list_sessions(actor)])


@router.get("/mine")
async def list_my_trainings(actor: CurrentActor, service: Trainings) -> ListResponse[dict]:
    return single_page([_training_to_dict(t) for t in await service.list_for_employee(actor)])


@router.get("/coach")
async def list_coach_trainings(actor: CurrentActor, service: Trainings) -> ListResponse[dict]:
    return single_page([_training_to_dict(t) for t in await service.list_for_trainer(actor)])


@router.get("/trainers")
async def list_trainers(_actor: CurrentActor, service: Trainings) -> ListResponse[dict]:
    return single_page([_trainer_to_dict(u) for u in await service.list_trainers()])


# =============================================================================
# Single training
# =============================================================================


@router.get("/{training_id}/planning")
async def get_training_planning(
    training_id: uuid.UUID, actor: CurrentActor, service: Trainings
) -> DataResponse[dict]:
    planning = await service.planning(actor, training_id)
    return DataResponse(
        data={
            "training": _training_to_dict(planning.training),
            "starts": planning.starts,
            "duration_hours": planning.duration_hours,
            "trainer": _trainer_to_dict(planning.trainer) if planning.trainer else None,
            "contents": [_content_to_dict(c) for c in planning.contents],
        }
    )


@router.patch("/{training_id}")
async def update_training(
    training_id: uuid.UUID,
    body: UpdateTrainingRequest,
    actor: CurrentActor,
    service: Trainings,
) -> DataResponse[dict]:
    training = await service.update(actor, training_id, body.model_dump(exclude_unset=True))
    return DataResponse(message="Training updated", data=_training_to_dict(training))


@router.delete("/{training_id}")
async def delete_training(
    training_id: uuid.UUID, actor: CurrentActor, service: Trainings
) -> DataResponse[dict]:
    await service.delete(actor, training_id)
    return DataResponse(message="Training deleted", data={"id": training_id})


# =============================================================================
# Contents and progress
# =============================================================================


@router.post("/{training_id}/contents", status_code=201)
async def add_training_content(
    training_id: uuid.UUID,
    body: TrainingContentRequest,
    actor: CurrentActor,
    service: Trainings,
) -> DataResponse[dict]:
    content = await service.add_content(actor, training_id, body.model_dump(exclude_unset=True))
    return DataResponse(message="Content added", data=_content_to_dict(content))


@router.post("/{training_id}/contents/upload", status_code=201)
@limiter.limit(setting_limit("rate_limit_upload"))
async def upload_training_material(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    training_id: uuid.UUID,
    file: Annotated[UploadFile, File(...)],
    actor: CurrentActor,
    service: Trainings,
    title: Annotated[str | None, Form()] = None,
) -> DataResponse[dict]:
    content = await read_file_with_size_limit(file, megabytes(settings.material_max_size_mb))
    filename = file.filename or "material"
    mimetype = validate_file_content(content, filename, MATERIAL_MIMES)
    item = await service.upload_material(
        actor,
        training_id,
        content=content,
        filename=filename,
        content_type=mimetype,
        title=title,
    )
    return DataResponse(message="Material uploaded", data=_content_to_dict(item))


@router.get("/{training_id}/contents")
async def list_training_contents(
    training_id: uuid.UUID, actor: CurrentActor, service: Trainings
) -> ListResponse[dict]:
    contents = await service.list_contents(actor, training_id)
    return single_page([_content_to_dict(c) for c in contents])


@router.get("/{training_id}/contents/{content_id}/file")
async def download_training_material(
    training_id: uuid.UUID, content_id: uuid.UUID, actor: CurrentActor, service: Trainings
) -> Response:
    blob = await service.get_material(actor, training_id, content_id)
    filename = sanitize_filename_for_header(blob.filename)
    return Response(
        content=blob.data,
        media_type=blob.content_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/{training_id}/progress")
async def record_training_progress(
    training_id: uuid.UUID,
    body: ProgressRequest,
    actor: CurrentActor,
    service: Trainings,
) -> DataResponse[dict]:
    progress: TrainingProgress = await service.record_progress(
        actor, training_id, body.content_id, body.completed
    )
    return DataResponse(
        data={
            "training_id": progress.training_id,
            "content_id": progress.content_id,
            "completed": progress.completed,
            "completed_at": progress.completed_at,
        }
    )


@router.get("/{training_id}/progress")
async def get_training_progress(
    training_id: uuid.UUID, actor: CurrentActor, service: Trainings
) -> DataResponse[dict]:
    report = await service.get_progress(actor, training_id)
    completed = sum(1 for item in report if item.completed)
    return DataResponse(
        data={
            "items": [
                {
                    "content": _content_to_dict(item.content),
                    "completed": item.completed,
                    "completed_at": item.completed_at,
                }
                for item in report
            ],
            "completed": completed,
            "total": len(report),
        }
    )
