"""
Saved Job Routes

GET    /saved-jobs                 - My saved jobs
POST   /saved-jobs/{job_id}        - Save a job
GET    /saved-jobs/{job_id}        - Is this job saved?
DELETE /saved-jobs/{job_id}        - Unsave
"""

from fastapi import APIRouter, Depends

from jobboard.core.auth import require_job_seeker
from jobboard.schemas.schemas import MessageResponse
from jobboard.services import saved_job_service

router = APIRouter(prefix="/saved-jobs", tags=["Saved Jobs"])


@router.get("")
def list_saved_jobs(user: dict = Depends(require_job_seeker)):
    return saved_job_service.list_saved_jobs(user["user_id"])


@router.post("/{job_id}", response_model=MessageResponse, status_code=201)
def save_job(job_id: int, user: dict = Depends(require_job_seeker)):
    saved_job_service.save_job(user["user_id"], job_id)
    return MessageResponse(message="Job saved")


@router.get("/{job_id}")
def is_saved(job_id: int, user: dict = Depends(require_job_seeker)):
    return {"job_id": job_id, "is_saved": saved_job_service.is_job_saved(user["user_id"], job_id)}


@router.delete("/{job_id}", response_model=MessageResponse)
def unsave_job(job_id: int, user: dict = Depends(require_job_seeker)):
    saved_job_service.unsave_job(user["user_id"], job_id)
    return MessageResponse(message="Job removed from saved")
