"""
Match Score Routes (job seekers)

POST /match-scores/queue          - Queue AI scoring for a job (runs after the response)
GET  /match-scores?job_ids=1&...  - Cached scores for many jobs (placeholders when missing)
GET  /match-scores/{job_id}       - Score for one job, computed now if not cached
"""

from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from jobboard.core.auth import require_job_seeker
from jobboard.core.errors import NotFoundError
from jobboard.schemas.schemas import MatchScoreQueueRequest, MatchScoreSummary
from jobboard.services import match_service
from jobboard.services.match_score_job import enqueue_match_score_job

router = APIRouter(prefix="/match-scores", tags=["Match Scores"])


@router.post("/queue", status_code=202)
def queue_match_score(
    data: MatchScoreQueueRequest,
    background_tasks: BackgroundTasks,
    user: dict = Depends(require_job_seeker),
):
    queued = enqueue_match_score_job(background_tasks, data.job_id, user["user_id"])
    return {"success": True, "queued": queued}


@router.get("")
def batch_match_scores(
    job_ids: List[int] = Query(...),
    user: dict = Depends(require_job_seeker),
):
    return match_service.get_batch_job_match_scores(job_ids, user["user_id"])


@router.get("/{job_id}", response_model=MatchScoreSummary)
def job_match_score(job_id: int, user: dict = Depends(require_job_seeker)):
    score = match_service.get_job_match_score(job_id, user["user_id"])
    if not score:
        raise NotFoundError("Match score not available")
    return MatchScoreSummary(
        job_id=job_id,
        score=score["score"],
        explanation=score["explanation"] or "",
        confidence=score["confidence"] or 0,
    )
