"""API v1 router aggregator.

All v1 endpoint routers are included here, mounted at /api/v1.
"""

from fastapi import APIRouter

from grh.api.v1 import (
    auth,
    contracts,
    cv_profiles,
    interviews,
    missions,
    notifications,
    offers,
    postings,
    timesheets,
    trainings,
)

router = APIRouter()

# =============================================================================
# Authentication
# =============================================================================

router.include_router(auth.router, prefix="/auth", tags=["auth"])

# =============================================================================
# Recruitment
# =============================================================================

router.include_router(cv_profiles.router, prefix="/cv-profiles", tags=["cv-profiles"])
router.include_router(postings.router, prefix="/postings", tags=["postings"])
router.include_router(offers.router, prefix="/offers", tags=["offers"])
router.include_router(
    offers.applications_router, prefix="/applications", tags=["applications"]
)
router.include_router(interviews.router, prefix="/interviews", tags=["interviews"])
router.include_router(contracts.router, prefix="/contracts", tags=["contracts"])

# =============================================================================
# Employment
# =============================================================================

router.include_router(missions.router, prefix="/missions", tags=["missions"])
router.include_router(trainings.router, prefix="/trainings", tags=["trainings"])
router.include_router(timesheets.router, prefix="/timesheets", tags=["timesheets"])

# =============================================================================
# Notifications
# =============================================================================

router.include_router(
    notifications.router, prefix="/notifications", tags=["notifications"]
)
