"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from jobboard.api.routes.auth_routes import router as auth_router
from jobboard.api.routes.profile_routes import router as profile_router
from jobboard.api.routes.job_routes import router as job_router
from jobboard.api.routes.application_routes import router as application_router
from jobboard.api.routes.saved_job_routes import router as saved_job_router
from jobboard.api.routes.employer_routes import router as employer_router
from jobboard.api.routes.match_score_routes import router as match_score_router
from jobboard.api.routes.personality_routes import router as personality_router
from jobboard.api.routes.productivity_routes import router as productivity_router
from jobboard.api.routes.resume_routes import router as resume_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(profile_router)
api_router.include_router(job_router)
api_router.include_router(application_router)
api_router.include_router(saved_job_router)
api_router.include_router(employer_router)
api_router.include_router(match_score_router)
api_router.include_router(personality_router)
api_router.include_router(productivity_router)
api_router.include_router(resume_router)
