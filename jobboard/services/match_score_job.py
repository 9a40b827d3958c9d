"""
Match Score Job - fire-and-forget scoring after a response is sent.

Work is scheduled on FastAPI BackgroundTasks. Nothing is persisted: if the
process stops before the task runs, the score is simply computed later on
demand. A (job_id, user_id) pair already queued or running is not queued again.
"""
import logging
import threading
from typing import Set, Tuple

from fastapi import BackgroundTasks

from jobboard.services import match_service

logger = logging.getLogger(__name__)

_in_flight: Set[Tuple[int, int]] = set()
_lock = threading.Lock()


def is_in_flight(job_id: int, user_id: int) -> bool:
    with _lock:
        return (job_id, user_id) in _in_flight


def run_match_score_job(job_id: int, user_id: int) -> None:
    try:
        result = match_service.calculate_match_score_for_job_user(job_id, user_id)
        if result is None:
            logger.warning("Background match score produced no result (job %s, user %s)", job_id, user_id)
    except Exception:
        logger.exception("Failed to calculate match score in background job (job %s, user %s)", job_id, user_id)
    finally:
        with _lock:
            _in_flight.discard((job_id, user_id))


def enqueue_match_score_job(background_tasks: BackgroundTasks, job_id: int, user_id: int) -> bool:
    """Schedule scoring. Returns False if the same pair is already pending."""
    key = (job_id, user_id)
    with _lock:
        if key in _in_flight:
            logger.info("Match score already queued for job %s / user %s", job_id, user_id)
            return False
        _in_flight.add(key)

    background_tasks.add_task(run_match_score_job, job_id, user_id)
    return True
