"""
Saved Job Service - job seekers bookmarking published jobs.
"""
import logging
from typing import List

from jobboard.core.errors import ConflictError, NotFoundError
from jobboard.db.postgres import execute_raw_sql, fetch_one

logger = logging.getLogger(__name__)


def save_job(candidate_id: int, job_id: int) -> int:
    job = fetch_one(
        "SELECT job_id FROM jobs WHERE job_id = :id AND status = 'published'",
        {"id": job_id}
    )
    if not job:
        raise NotFoundError("Job not found")

    rows = execute_raw_sql("""
        INSERT INTO saved_jobs (job_id, candidate_id) VALUES (:jid, :uid)
        ON CONFLICT (job_id, candidate_id) DO NOTHING
        RETURNING saved_job_id
    """, {"jid": job_id, "uid": candidate_id})
    if not rows:
        raise ConflictError("Job already saved")
    return rows[0]["saved_job_id"]


def unsave_job(candidate_id: int, job_id: int) -> None:
    rows = execute_raw_sql(
        "DELETE FROM saved_jobs WHERE job_id = :jid AND candidate_id = :uid RETURNING saved_job_id",
        {"jid": job_id, "uid": candidate_id}
    )
    if not rows:
        raise NotFoundError("Saved job not found")


def is_job_saved(candidate_id: int, job_id: int) -> bool:
    return fetch_one(
        "SELECT saved_job_id FROM saved_jobs WHERE job_id = :jid AND candidate_id = :uid",
        {"jid": job_id, "uid": candidate_id}
    ) is not None


def list_saved_jobs(candidate_id: int) -> List[dict]:
    return execute_raw_sql("""
        SELECT sj.saved_job_id, sj.saved_at, j.job_id, j.title, j.location, j.job_type,
               j.experience_level, j.salary_min, j.salary_max, j.currency, j.remote_allowed,
               j.status, j.posted_at, c.name AS company_name
        FROM saved_jobs sj
        JOIN jobs j ON sj.job_id = j.job_id
        JOIN companies c ON j.company_id = c.company_id
        WHERE sj.candidate_id = :uid
        ORDER BY sj.saved_at DESC
    """, {"uid": candidate_id})
