"""
Application Service - job applications from both sides.

Job seekers apply (once per job), list and withdraw their applications.
Employers review applications for jobs their company owns and move them
through the status pipeline; notifying statuses email the candidate.
"""
import logging
from typing import List, Optional

from fastapi import BackgroundTasks
from sqlalchemy import text

from jobboard.core.errors import AppError, ConflictError, NotFoundError, PermissionDeniedError
from jobboard.db.postgres import execute_raw_sql, fetch_one, get_db_session
from jobboard.schemas.schemas import ApplicationStats, ApplicationStatusUpdate
from jobboard.services import notification_service
from jobboard.services.job_service import assert_job_owned
from jobboard.services.match_score_job import enqueue_match_score_job

logger = logging.getLogger(__name__)

ALREADY_APPLIED_MESSAGE = "You have already applied for this job."

MATCH_SCORE_COLUMNS = """
    ms.overall_score AS match_score, ms.match_explanation,
    ms.ai_confidence_score AS match_confidence
"""


# ============================================================
# JOB SEEKER SIDE
# ============================================================

def has_applied(job_id: int, applicant_id: int) -> bool:
    return fetch_one(
        "SELECT application_id FROM applications WHERE job_id = :jid AND applicant_id = :uid",
        {"jid": job_id, "uid": applicant_id}
    ) is not None


def apply_to_job(
    user: dict,
    job_id: int,
    cover_letter: Optional[str] = None,
    background_tasks: Optional[BackgroundTasks] = None,
) -> dict:
    if user["role"] != "job_seeker":
        raise PermissionDeniedError("Only job seekers can apply for jobs.")

    job = fetch_one("SELECT job_id, status FROM jobs WHERE job_id = :id", {"id": job_id})
    if not job:
        raise NotFoundError("Job not found")
    if job["status"] != "published":
        raise AppError("This job is not accepting applications.")

    if has_applied(job_id, user["user_id"]):
        raise ConflictError(ALREADY_APPLIED_MESSAGE)

    # UNIQUE (job_id, applicant_id) settles concurrent double submits
    rows = execute_raw_sql("""
        INSERT INTO applications (job_id, applicant_id, status, cover_letter)
        VALUES (:job_id, :applicant_id, 'pending', :cover_letter)
        ON CONFLICT (job_id, applicant_id) DO NOTHING
        RETURNING application_id, job_id, applicant_id, status, applied_at
    """, {"job_id": job_id, "applicant_id": user["user_id"], "cover_letter": cover_letter})
    if not rows:
        raise ConflictError(ALREADY_APPLIED_MESSAGE)

    application = rows[0]
    logger.info("User %s applied to job %s", user["user_id"], job_id)

    if background_tasks is not None:
        enqueue_match_score_job(background_tasks, job_id, user["user_id"])
    return application


def withdraw_application(applicant_id: int, application_id: int) -> None:
    application = fetch_one(
        "SELECT application_id, status FROM applications WHERE application_id = :id AND applicant_id = :uid",
        {"id": application_id, "uid": applicant_id}
    )
    if not application:
        raise NotFoundError("Application not found")
    if application["status"] == "accepted":
        raise AppError("Accepted applications cannot be withdrawn.")

    execute_raw_sql(
        "DELETE FROM applications WHERE application_id = :id AND applicant_id = :uid",
        {"id": application_id, "uid": applicant_id}
    )


def list_applicant_applications(applicant_id: int) -> List[dict]:
    return execute_raw_sql(f"""
        SELECT a.application_id, a.job_id, j.title AS job_title, c.name AS company_name,
               j.location, j.job_type, a.status, a.cover_letter, a.applied_at, a.updated_at,
               {MATCH_SCORE_COLUMNS}
        FROM applications a
        JOIN jobs j ON a.job_id = j.job_id
        JOIN companies c ON j.company_id = c.company_id
        LEFT JOIN match_scores ms ON ms.job_id = a.job_id AND ms.candidate_id = a.applicant_id
        WHERE a.applicant_id = :id
        ORDER BY a.applied_at DESC
    """, {"id": applicant_id})


def get_application(user: dict, application_id: int) -> dict:
    """Visible to the applicant and to the employer owning the job."""
    application = fetch_one(f"""
        SELECT a.application_id, a.job_id, a.applicant_id, a.status, a.cover_letter, a.notes,
               a.applied_at, a.updated_at, j.title AS job_title, c.name AS company_name,
               c.owner_id, u.full_name AS applicant_name, u.email AS applicant_email,
               {MATCH_SCORE_COLUMNS}
        FROM applications a
        JOIN jobs j ON a.job_id = j.job_id
        JOIN companies c ON j.company_id = c.company_id
        JOIN users u ON a.applicant_id = u.user_id
        LEFT JOIN match_scores ms ON ms.job_id = a.job_id AND ms.candidate_id = a.applicant_id
        WHERE a.application_id = :id
    """, {"id": application_id})

    if not application or user["user_id"] not in (application["applicant_id"], application["owner_id"]):
        raise NotFoundError("Application not found")

    application.pop("owner_id")
    if user["user_id"] == application["applicant_id"]:
        application.pop("notes")
    return application


# ============================================================
# EMPLOYER SIDE
# ============================================================

def list_job_applications(company_id: Optional[int], job_id: int) -> List[dict]:
    assert_job_owned(company_id, job_id)
    return execute_raw_sql(f"""
        SELECT a.application_id, a.job_id, a.applicant_id, a.status, a.cover_letter, a.notes,
               a.applied_at, a.updated_at,
               u.full_name AS applicant_name, u.email AS applicant_email, u.phone AS applicant_phone,
               u.location AS applicant_location, u.title AS applicant_title,
               u.linkedin_url, u.github_url, u.portfolio_url,
               {MATCH_SCORE_COLUMNS}
        FROM applications a
        JOIN users u ON a.applicant_id = u.user_id
        LEFT JOIN match_scores ms ON ms.job_id = a.job_id AND ms.candidate_id = a.applicant_id
        WHERE a.job_id = :job_id
        ORDER BY a.applied_at DESC
    """, {"job_id": job_id})


def list_employer_applications(company_id: Optional[int], status: Optional[str] = None) -> List[dict]:
    if not company_id:
        return []
    sql = f"""
        SELECT a.application_id, a.job_id, j.title AS job_title, a.applicant_id,
               u.full_name AS applicant_name, u.email AS applicant_email,
               a.status, a.applied_at, a.updated_at, {MATCH_SCORE_COLUMNS}
        FROM applications a
        JOIN jobs j ON a.job_id = j.job_id
        JOIN users u ON a.applicant_id = u.user_id
        LEFT JOIN match_scores ms ON ms.job_id = a.job_id AND ms.candidate_id = a.applicant_id
        WHERE j.company_id = :company_id
    """
    params = {"company_id": company_id}
    if status:
        sql += " AND a.status = :status"
        params["status"] = status
    sql += " ORDER BY a.applied_at DESC"
    return execute_raw_sql(sql, params)


def get_application_stats(company_id: Optional[int], job_id: int) -> ApplicationStats:
    assert_job_owned(company_id, job_id)
    rows = execute_raw_sql(
        "SELECT status, COUNT(*) AS count FROM applications WHERE job_id = :job_id GROUP BY status",
        {"job_id": job_id}
    )
    counts = {row["status"]: row["count"] for row in rows}
    return ApplicationStats(
        total=sum(counts.values()),
        pending=counts.get("pending", 0),
        reviewing=counts.get("reviewing", 0),
        interviewed=counts.get("interview", 0) + counts.get("interviewed", 0),
        offered=counts.get("offered", 0),
        hired=counts.get("hired", 0),
        accepted=counts.get("accepted", 0),
        rejected=counts.get("rejected", 0),
    )


def update_application_status(company_id: Optional[int], application_id: int,
                              update: ApplicationStatusUpdate) -> dict:
    """
    Only the employer owning the job may move an application.
    Returns the updated row plus {"notification": {"delivered", "reason"}}.
    """
    with get_db_session() as db:
        row = db.execute(
            text("""
                UPDATE applications a
                SET status = :status,
                    notes = COALESCE(:notes, a.notes),
                    updated_at = CURRENT_TIMESTAMP
                FROM jobs j
                WHERE a.application_id = :id AND a.job_id = j.job_id AND j.company_id = :company_id
                RETURNING a.application_id, a.job_id, a.applicant_id, a.status, a.notes, a.updated_at
            """),
            {"id": application_id, "company_id": company_id,
             "status": update.status.value, "notes": update.notes}
        ).mappings().fetchone()

    if not row:
        raise NotFoundError("Application not found or you don't have permission to update it")

    application = dict(row)
    context = fetch_one("""
        SELECT u.email, u.full_name, j.title, c.name AS company_name
        FROM users u, jobs j JOIN companies c ON j.company_id = c.company_id
        WHERE u.user_id = :uid AND j.job_id = :jid
    """, {"uid": application["applicant_id"], "jid": application["job_id"]}) or {}

    application["notification"] = notification_service.notify_application_status_change(
        application_id=application_id,
        status=application["status"],
        candidate_email=context.get("email"),
        candidate_name=context.get("full_name"),
        job_title=context.get("title"),
        company_name=context.get("company_name"),
        notes=update.notes,
    )
    logger.info("Application %s moved to %s", application_id, application["status"])
    return application
