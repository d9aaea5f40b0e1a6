"""Interviews API router.

Endpoints:
- POST /interviews - schedule from an application to a company offer
- POST /interviews/from-posting - schedule with a posting's candidate
- GET /interviews/company, /interviews/positive
- GET /interviews/check/application/{id}, /interviews/check/posting/{id}
- /interviews/{id} - read, evaluate, reschedule, cancel
"""

import uuid
from typing import Any

from fastapi import APIRouter

from grh.api.deps import CurrentActor, Interviews
from grh.core.responses import DataResponse, ListResponse, single_page
from grh.models import Interview
from grh.schemas import (
    EvaluateInterviewRequest,
    RescheduleInterviewRequest,
    ScheduleFromApplicationRequest,
    ScheduleFromPostingRequest,
)

router = APIRouter()


def _interview_to_dict(interview: Interview) -> dict[str, Any]:
    return {
        "id": interview.id,
        "kind": interview.kind,
        "candidate_id": interview.candidate_id,
        "company_id": interview.company_id,
        "offer_id": interview.offer_id,
        "related_application_id": interview.related_application_id,
        "related_posting_id": interview.related_posting_id,
        "scheduled_at": interview.scheduled_at,
        "meeting_link": interview.meeting_link,
        "status": interview.status,
        "outcome": interview.outcome,
        "notes": interview.notes,
        "created_at": interview.created_at,
    }


def _list(interviews: list[Interview]) -> ListResponse[dict]:
    return single_page([_interview_to_dict(i) for i in interviews])


def _check(interview: Interview | None) -> DataResponse[dict]:
    return DataResponse(
        data={
            "exists": interview is not None,
            "interview": _interview_to_dict(interview) if interview else None,
        }
    )


@router.post("", status_code=201)
async def schedule_interview(
    body: ScheduleFromApplicationRequest, actor: CurrentActor, service: Interviews
) -> DataResponse[dict]:
    interview = await service.schedule_from_application(
        actor, body.model_dump(exclude_unset=True)
    )
    return DataResponse(message="Interview scheduled", data=_interview_to_dict(interview))


@router.post("/from-posting", status_code=201)
async def schedule_interview_from_posting(
    body: ScheduleFromPostingRequest, actor: CurrentActor, service: Interviews
) -> DataResponse[dict]:
    interview = await service.schedule_from_posting(actor, body.model_dump(exclude_unset=True))
    return DataResponse(message="Interview scheduled", data=_interview_to_dict(interview))


@router.get("/company")
async def list_company_interviews(actor: CurrentActor, service: Interviews) -> ListResponse[dict]:
    return _list(await service.list_for_company(actor))


@router.get("/positive")
async def list_positive_interviews(
    actor: CurrentActor, service: Interviews, kind: str | None = None
) -> ListResponse[dict]:
    """Admin view of interviews evaluated positively, ready for a contract."""
    return _list(await service.list_positive(actor, kind))


@router.get("/check/application/{application_id}")
async def check_application_interview(
    application_id: uuid.UUID, _actor: CurrentActor, service: Interviews
) -> DataResponse[dict]:
    return _check(await service.check_for_application(application_id))


@router.get("/check/posting/{posting_id}")
async def check_posting_interview(
    posting_id: uuid.UUID, _actor: CurrentActor, service: Interviews
) -> DataResponse[dict]:
    return _check(await service.check_for_posting(posting_id))


@router.get("/{interview_id}")
async def get_interview(
    interview_id: uuid.UUID, actor: CurrentActor, service: Interviews
) -> DataResponse[dict]:
    return DataResponse(data=_interview_to_dict(await service.get(actor, interview_id)))


@router.put("/{interview_id}/evaluate")
async def evaluate_interview(
    interview_id: uuid.UUID,
    body: EvaluateInterviewRequest,
    actor: CurrentActor,
    service: Interviews,
) -> DataResponse[dict]:
    interview = await service.evaluate(actor, interview_id, body.outcome, body.notes)
    return DataResponse(message="Interview evaluated", data=_interview_to_dict(interview))


@router.put("/{interview_id}/reschedule")
async def reschedule_interview(
    interview_id: uuid.UUID,
    body: RescheduleInterviewRequest,
    actor: CurrentActor,
    service: Interviews,
) -> DataResponse[dict]:
    interview = await service.reschedule(
        actor, interview_id, body.scheduled_at, body.meeting_link
    )
    return DataResponse(message="Interview rescheduled", data=_interview_to_dict(interview))


@router.put("/{interview_id}/cancel")
async def cancel_interview(
    interview_id: uuid.UUID, actor: CurrentActor, service: Interviews
) -> DataResponse[dict]:
    interview = await service.cancel(actor, interview_id)
    return DataResponse(message="Interview cancelled", data=_interview_to_dict(interview))
