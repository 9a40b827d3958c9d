"""
Personality Routes

GET  /personality/questions         - Active questionnaire (built-in set when none stored)
POST /personality/questions/seed    - Store the built-in questions (employers)
POST /personality/analyze           - Submit responses; analysis runs in the background
GET  /personality/status            - Analysis status (poll until is_ready)
GET  /personality/analysis          - Completed analysis
"""

from fastapi import APIRouter, BackgroundTasks, Depends

from jobboard.core.auth import get_current_user, require_employer, require_job_seeker
from jobboard.schemas.schemas import PersonalityStatusResponse, PersonalitySubmitRequest
from jobboard.services import personality_service

router = APIRouter(prefix="/personality", tags=["Personality"])


@router.get("/questions")
def get_questions(user: dict = Depends(get_current_user)):
    return {"success": True, "questions": personality_service.get_questions()}


@router.post("/questions/seed")
def seed_questions(user: dict = Depends(require_employer)):
    return {"success": True, **personality_service.seed_default_questions()}


@router.post("/analyze", response_model=PersonalityStatusResponse, status_code=202)
def analyze(
    request: PersonalitySubmitRequest,
    background_tasks: BackgroundTasks,
    user: dict = Depends(require_job_seeker),
):
    """
    Responses are keyed by question position: {"1": "...", "2": "..."}.
    Returns the queued status; poll /personality/status for the result.
    """
    return personality_service.submit_responses(user["user_id"], request.responses, background_tasks)


@router.get("/status", response_model=PersonalityStatusResponse)
def status(user: dict = Depends(get_current_user)):
    return personality_service.get_status(user["user_id"])


@router.get("/analysis")
def analysis(user: dict = Depends(get_current_user)):
    return personality_service.get_analysis(user["user_id"])
