"""
Employer Routes

GET    /employer/dashboard                        - Dashboard stats + active jobs
GET    /employer/jobs                             - My jobs (optional ?status=)
POST   /employer/jobs                             - Create job
GET    /employer/jobs/{job_id}                    - Job details
PUT    /employer/jobs/{job_id}                    - Update job
DELETE /employer/jobs/{job_id}                    - Delete job
PATCH  /employer/jobs/{job_id}/status             - Publish / close / cancel / draft
GET    /employer/jobs/{job_id}/applications       - Applications with candidate info + match scores
GET    /employer/jobs/{job_id}/stats              - Application counts by status
GET    /employer/applications                     - Applications across all my jobs
GET    /employer/applications/{application_id}    - Application details
PATCH  /employer/applications/{application_id}    - Update status (+ notes), notifies the candidate
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from jobboard.core.auth import require_employer
from jobboard.schemas.schemas import (
    ApplicationStats, ApplicationStatusUpdate, JobCreate, JobCreatedResponse,
    JobStatus, JobStatusUpdate, JobUpdate, MessageResponse
)
from jobboard.services import application_service, dashboard_service, job_service

router = APIRouter(prefix="/employer", tags=["Employer"])


@router.get("/dashboard")
def dashboard(employer: dict = Depends(require_employer)):
    return dashboard_service.get_dashboard(employer["company_id"])


# ============================================================
# JOBS
# ============================================================

@router.get("/jobs")
def list_jobs(
    status: Optional[JobStatus] = Query(None),
    employer: dict = Depends(require_employer),
):
    return job_service.list_employer_jobs(employer["company_id"], status.value if status else None)


@router.post("/jobs", response_model=JobCreatedResponse, status_code=201)
def create_job(job: JobCreate, employer: dict = Depends(require_employer)):
    job_id = job_service.create_job(employer["company_id"], job)
    message = "Job published successfully!" if job.status.value == "published" else "Job saved as draft"
    return JobCreatedResponse(job_id=job_id, message=message)


@router.get("/jobs/{job_id}")
def get_job(job_id: int, employer: dict = Depends(require_employer)):
    return job_service.get_employer_job(employer["company_id"], job_id)


@router.put("/jobs/{job_id}", response_model=MessageResponse)
def update_job(job_id: int, job: JobUpdate, employer: dict = Depends(require_employer)):
    job_service.update_job(employer["company_id"], job_id, job)
    return MessageResponse(message="Job updated successfully")


@router.delete("/jobs/{job_id}", response_model=MessageResponse)
def delete_job(job_id: int, employer: dict = Depends(require_employer)):
    job_service.delete_job(employer["company_id"], job_id)
    return MessageResponse(message="Job deleted successfully")


@router.patch("/jobs/{job_id}/status")
def update_job_status(job_id: int, data: JobStatusUpdate, employer: dict = Depends(require_employer)):
    job = job_service.update_job_status(employer["company_id"], job_id, data.status)
    return {"success": True, "job": job}


@router.get("/jobs/{job_id}/applications")
def job_applications(job_id: int, employer: dict = Depends(require_employer)):
    return application_service.list_job_applications(employer["company_id"], job_id)


@router.get("/jobs/{job_id}/stats", response_model=ApplicationStats)
def job_stats(job_id: int, employer: dict = Depends(require_employer)):
    return application_service.get_application_stats(employer["company_id"], job_id)


# ============================================================
# APPLICATIONS
# ============================================================

@router.get("/applications")
def all_applications(
    status: Optional[str] = Query(None),
    employer: dict = Depends(require_employer),
):
    return application_service.list_employer_applications(employer["company_id"], status)


@router.get("/applications/{application_id}")
def application_details(application_id: int, employer: dict = Depends(require_employer)):
    return application_service.get_application(employer, application_id)


@router.patch("/applications/{application_id}")
def update_application_status(
    application_id: int,
    data: ApplicationStatusUpdate,
    employer: dict = Depends(require_employer),
):
    application = application_service.update_application_status(employer["company_id"], application_id, data)
    return {"success": True, "application": application}
