"""
Job Routes (public job board)

GET /jobs            - Search published jobs; signed-in job seekers get match scores
GET /jobs/{job_id}   - Published job details
"""

from typing import Optional

from fastapi import APIRouter, Depends

from jobboard.core.auth import get_optional_user
from jobboard.schemas.schemas import JobSearchFilters
from jobboard.services import job_service, match_service

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.get("")
def search_jobs(
    filters: JobSearchFilters = Depends(),
    user: Optional[dict] = Depends(get_optional_user),
):
    """
    Search open jobs. Filters: keyword, location, job_type, experience_level,
    remote_allowed, page, page_size.

    Job seekers get match_score / match_explanation / match_confidence on each
    job, best matches first.
    """
    seeker_id = user["user_id"] if user and user["role"] == "job_seeker" else None
    return match_service.search_jobs_with_match_scores(seeker_id, filters)


@router.get("/{job_id}")
def get_job(job_id: int):
    return job_service.get_published_job(job_id)
