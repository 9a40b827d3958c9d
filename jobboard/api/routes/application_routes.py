"""
Application Routes (job seeker side)

POST   /applications                   - Apply to a job
GET    /applications                   - My applications
GET    /applications/check/{job_id}    - Have I applied?
GET    /applications/{application_id}  - Application details
DELETE /applications/{application_id}  - Withdraw
"""

from fastapi import APIRouter, BackgroundTasks, Depends

from jobboard.core.auth import get_current_user, require_job_seeker
from jobboard.schemas.schemas import ApplicationCreate, MessageResponse
from jobboard.services import application_service

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.post("", status_code=201)
def apply_to_job(
    data: ApplicationCreate,
    background_tasks: BackgroundTasks,
    user: dict = Depends(get_current_user),
):
    """Apply once per job. AI match scoring runs after the response is sent."""
    application = application_service.apply_to_job(
        user, data.job_id, data.cover_letter, background_tasks
    )
    return {"success": True, "message": "Application submitted successfully!", "application": application}


@router.get("")
def my_applications(user: dict = Depends(require_job_seeker)):
    return application_service.list_applicant_applications(user["user_id"])


@router.get("/check/{job_id}")
def check_applied(job_id: int, user: dict = Depends(require_job_seeker)):
    return {"job_id": job_id, "has_applied": application_service.has_applied(job_id, user["user_id"])}


@router.get("/{application_id}")
def get_application(application_id: int, user: dict = Depends(get_current_user)):
    return application_service.get_application(user, application_id)


@router.delete("/{application_id}", response_model=MessageResponse)
def withdraw_application(application_id: int, user: dict = Depends(require_job_seeker)):
    application_service.withdraw_application(user["user_id"], application_id)
    return MessageResponse(message="Application withdrawn")
