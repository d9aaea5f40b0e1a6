"""CV profiles API router.

Endpoints:
- POST /cv-profiles - create a profile, optionally uploading the CV file
- GET /cv-profiles/mine - the actor's profiles
"""

from typing import Annotated, Any

from fastapi import APIRouter, File, Form, Request, UploadFile

from grh.api.deps import CurrentActor, CvProfiles
from grh.core.config import settings
from grh.core.file_validation import (
    CV_MIMES,
    megabytes,
    read_file_with_size_limit,
    validate_file_content,
)
from grh.core.filtering import parse_filter_value
from grh.core.rate_limiting import limiter, setting_limit
from grh.core.responses import DataResponse, ListResponse, single_page
from grh.models import CvProfile

router = APIRouter()


def _cv_profile_to_dict(profile: CvProfile) -> dict[str, Any]:
    return {
        "id": profile.id,
        "user_id": profile.user_id,
        "name": profile.name,
        "profession": profile.profession,
        "skills": profile.skills,
        "cv_filename": profile.cv_filename,
        "cv_mimetype": profile.cv_mimetype,
        "cv_size": profile.cv_size,
        "created_at": profile.created_at,
    }


@router.post("", status_code=201)
@limiter.limit(setting_limit("rate_limit_upload"))
async def create_cv_profile(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    actor: CurrentActor,
    service: CvProfiles,
    name: Annotated[str | None, Form()] = None,
    profession: Annotated[str | None, Form()] = None,
    skills: Annotated[str | None, Form(description="Comma-separated skills")] = None,
    file: Annotated[UploadFile | None, File()] = None,
) -> DataResponse[dict]:
    """Create a CV profile. The CV must be a PDF, DOC or DOCX file."""
    content = mimetype = filename = None
    if file is not None:
        content = await read_file_with_size_limit(file, megabytes(settings.cv_max_size_mb))
        filename = file.filename or "cv"
        mimetype = validate_file_content(content, filename, CV_MIMES)

    profile = await service.create(
        actor,
        {"name": name, "profession": profession, "skills": parse_filter_value(skills)},
        cv_content=content,
        cv_filename=filename,
        cv_mimetype=mimetype,
    )
    return DataResponse(message="CV profile created", data=_cv_profile_to_dict(profile))


@router.get("/mine")
async def list_my_cv_profiles(actor: CurrentActor, service: CvProfiles) -> ListResponse[dict]:
    return single_page([_cv_profile_to_dict(p) for p in await service.list_mine(actor)])
