"""
Productivity Routes

POST /productivity/assessment        - Submit the assessment
GET  /productivity/status            - Completed flag + latest assessment id
GET  /productivity/assessment        - Latest assessment with experiences and knowledge
POST /productivity/retake            - Clear the completed flag
POST /productivity/share             - Create a 7-day share link
GET  /productivity/shared/{token}    - Public view of a shared report
GET  /productivity/report/pdf        - Download the report PDF
GET  /productivity/report/verify     - Public check of a report signature
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from jobboard.core.auth import require_job_seeker
from jobboard.schemas.schemas import (
    MessageResponse, ProductivityAssessmentCreate, ReportVerifyResponse, ShareLinkResponse
)
from jobboard.services import productivity_service, report_service

router = APIRouter(prefix="/productivity", tags=["Productivity"])


@router.post("/assessment", status_code=201)
def submit_assessment(data: ProductivityAssessmentCreate, user: dict = Depends(require_job_seeker)):
    """AI scores the assessment when no overall_productivity_score is given."""
    assessment_id = productivity_service.submit_assessment(user["user_id"], data)
    return {
        "success": True,
        "assessment_id": assessment_id,
        "message": "Productivity assessment completed successfully!",
    }


@router.get("/status")
def assessment_status(user: dict = Depends(require_job_seeker)):
    return productivity_service.get_assessment_status(user["user_id"])


@router.get("/assessment")
def assessment_data(user: dict = Depends(require_job_seeker)):
    return productivity_service.get_assessment_data(user["user_id"])


@router.post("/retake", response_model=MessageResponse)
def retake(user: dict = Depends(require_job_seeker)):
    productivity_service.retake_assessment(user["user_id"])
    return MessageResponse(message="Assessment reset")


@router.post("/share", response_model=ShareLinkResponse)
def share(user: dict = Depends(require_job_seeker)):
    return report_service.create_share_link(user["user_id"])


@router.get("/shared/{token}")
def shared_report(token: str):
    return report_service.get_shared_report(token)


@router.get("/report/pdf")
def report_pdf(user: dict = Depends(require_job_seeker)):
    pdf = report_service.build_report_pdf(user["user_id"])
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="productivity-report.pdf"'},
    )


@router.get("/report/verify", response_model=ReportVerifyResponse)
def verify_report(
    assessment_id: Optional[int] = Query(None),
    sig: Optional[str] = Query(None),
):
    return report_service.verify_report(assessment_id, sig)
