"""Pydantic request schemas for API endpoints."""

from grh.schemas.interview import (
    EvaluateInterviewRequest,
    RescheduleInterviewRequest,
    ScheduleFromApplicationRequest,
    ScheduleFromPostingRequest,
)
from grh.schemas.job_posting import (
    CreatePostingRequest,
    RejectPostingRequest,
    UpdatePostingRequest,
)
from grh.schemas.mission import (
    CreateMissionRequest,
    MissionFeedbackRequest,
    MissionReviewRequest,
    MissionStatusRequest,
    UpdateMissionRequest,
)
from grh.schemas.notification import MarkReadRequest, ReplyRequest
from grh.schemas.recruitment import (
    ApplyRequest,
    CreateContractRequest,
    CreateOfferRequest,
    ValidateOfferRequest,
)
from grh.schemas.timesheet import (
    AbsenceRequest,
    TimeEntryRequest,
    ValidateMonthRequest,
)
from grh.schemas.training import (
    CreateTrainingRequest,
    ProgressRequest,
    TrainingContentRequest,
    UpdateTrainingRequest,
)

__all__ = [
    # Postings
    "CreatePostingRequest",
    "RejectPostingRequest",
    "UpdatePostingRequest",
    # Interviews
    "EvaluateInterviewRequest",
    "RescheduleInterviewRequest",
    "ScheduleFromApplicationRequest",
    "ScheduleFromPostingRequest",
    # Offers, applications, contracts
    "ApplyRequest",
    "CreateContractRequest",
    "CreateOfferRequest",
    "ValidateOfferRequest",
    # Missions
    "CreateMissionRequest",
    "MissionFeedbackRequest",
    "MissionReviewRequest",
    "MissionStatusRequest",
    "UpdateMissionRequest",
    # Trainings
    "CreateTrainingRequest",
    "ProgressRequest",
    "TrainingContentRequest",
    "UpdateTrainingRequest",
    # Time tracking
    "AbsenceRequest",
    "TimeEntryRequest",
    "ValidateMonthRequest",
    # Notifications
    "MarkReadRequest",
    "ReplyRequest",
]
