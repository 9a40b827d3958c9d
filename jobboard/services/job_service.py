"""
Job Service - job postings for employers and the public job board.

Ownership rule: an employer may only touch jobs whose company they own.
Only published jobs are visible on the public board.
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy import text

from jobboard.core.errors import AppError, NotFoundError
from jobboard.db.postgres import execute_raw_sql, fetch_one, get_db_session
from jobboard.schemas.schemas import JobCreate, JobSearchFilters, JobStatus, JobUpdate
from jobboard.services.profile_service import get_or_create_skill

logger = logging.getLogger(__name__)

NO_COMPANY_MESSAGE = "You must create a company profile before posting jobs."

JOB_COLUMNS = """
    j.job_id, j.company_id, c.name AS company_name, j.title, j.description, j.requirements,
    j.responsibilities, j.location, j.job_type, j.experience_level, j.salary_min, j.salary_max,
    j.currency, j.remote_allowed, j.status, j.posted_at, j.created_at, j.updated_at
"""

UPDATABLE_FIELDS = [
    "title", "description", "requirements", "responsibilities", "location", "job_type",
    "experience_level", "salary_min", "salary_max", "currency", "remote_allowed",
]


def _not_owned(action: str) -> NotFoundError:
    return NotFoundError(f"Job not found or you don't have permission to {action} it")


def _replace_job_skills(db, job_id: int, skills: List[str], is_required: bool) -> None:
    db.execute(
        text("DELETE FROM job_skills WHERE job_id = :jid AND is_required = :req"),
        {"jid": job_id, "req": is_required}
    )
    for skill_name in skills:
        if not skill_name.strip():
            continue
        skill_id = get_or_create_skill(db, skill_name)
        db.execute(
            text("""
                INSERT INTO job_skills (job_id, skill_id, is_required) VALUES (:jid, :sid, :req)
                ON CONFLICT (job_id, skill_id) DO UPDATE SET is_required = EXCLUDED.is_required
            """),
            {"jid": job_id, "sid": skill_id, "req": is_required}
        )


def get_job_skills(job_ids: List[int]) -> Dict[int, dict]:
    """{job_id: {"required_skills": [...], "preferred_skills": [...]}}"""
    skills = {job_id: {"required_skills": [], "preferred_skills": []} for job_id in job_ids}
    if not job_ids:
        return skills

    rows = execute_raw_sql("""
        SELECT js.job_id, sk.skill_name, js.is_required
        FROM job_skills js JOIN skills sk ON js.skill_id = sk.skill_id
        WHERE js.job_id = ANY(:ids) ORDER BY sk.skill_name
    """, {"ids": list(job_ids)})
    for row in rows:
        key = "required_skills" if row["is_required"] else "preferred_skills"
        skills[row["job_id"]][key].append(row["skill_name"])
    return skills


def _attach_skills(jobs: List[dict]) -> List[dict]:
    skills = get_job_skills([j["job_id"] for j in jobs])
    for job in jobs:
        job.update(skills.get(job["job_id"], {"required_skills": [], "preferred_skills": []}))
    return jobs


# ============================================================
# EMPLOYER OPERATIONS
# ============================================================

def create_job(company_id: Optional[int], data: JobCreate) -> int:
    if not company_id:
        raise AppError(NO_COMPANY_MESSAGE)

    with get_db_session() as db:
        job_id = db.execute(
            text("""
                INSERT INTO jobs (company_id, title, description, requirements, responsibilities,
                    location, job_type, experience_level, salary_min, salary_max, currency,
                    remote_allowed, status, posted_at)
                VALUES (:company_id, :title, :description, :requirements, :responsibilities,
                    :location, :job_type, :experience_level, :salary_min, :salary_max, :currency,
                    :remote_allowed, :status,
                    CASE WHEN :status = 'published' THEN CURRENT_TIMESTAMP ELSE NULL END)
                RETURNING job_id
            """),
            {
                "company_id": company_id,
                "title": data.title.strip(),
                "description": data.description,
                "requirements": data.requirements,
                "responsibilities": data.responsibilities,
                "location": data.location,
                "job_type": data.job_type.value,
                "experience_level": data.experience_level.value,
                "salary_min": data.salary_min,
                "salary_max": data.salary_max,
                "currency": data.currency.upper(),
                "remote_allowed": data.remote_allowed,
                "status": data.status.value,
            }
        ).fetchone()[0]

        _replace_job_skills(db, job_id, data.required_skills, is_required=True)
        _replace_job_skills(db, job_id, data.preferred_skills, is_required=False)

    logger.info("Company %s created job %s (%s)", company_id, job_id, data.status.value)
    return job_id


def update_job(company_id: Optional[int], job_id: int, data: JobUpdate) -> None:
    updates = []
    params = {"id": job_id, "company_id": company_id}

    for field in UPDATABLE_FIELDS:
        value = getattr(data, field)
        if value is not None:
            updates.append(f"{field} = :{field}")
            params[field] = value.value if hasattr(value, "value") else value

    if not updates and data.required_skills is None and data.preferred_skills is None:
        raise AppError("No fields to update")

    with get_db_session() as db:
        owned = db.execute(
            text("SELECT salary_min, salary_max FROM jobs WHERE job_id = :id AND company_id = :company_id"),
            params
        ).fetchone()
        if not owned:
            raise _not_owned("update")

        salary_min = params.get("salary_min", owned[0])
        salary_max = params.get("salary_max", owned[1])
        if salary_min is not None and salary_max is not None and salary_min > salary_max:
            raise AppError("Minimum salary cannot exceed maximum salary")

        if updates:
            db.execute(
                text(f"UPDATE jobs SET {', '.join(updates)}, updated_at = CURRENT_TIMESTAMP "
                     f"WHERE job_id = :id AND company_id = :company_id"),
                params
            )
        if data.required_skills is not None:
            _replace_job_skills(db, job_id, data.required_skills, is_required=True)
        if data.preferred_skills is not None:
            _replace_job_skills(db, job_id, data.preferred_skills, is_required=False)


def delete_job(company_id: Optional[int], job_id: int) -> None:
    rows = execute_raw_sql(
        "DELETE FROM jobs WHERE job_id = :id AND company_id = :company_id RETURNING job_id",
        {"id": job_id, "company_id": company_id}
    )
    if not rows:
        raise _not_owned("delete")
    logger.info("Company %s deleted job %s", company_id, job_id)


def update_job_status(company_id: Optional[int], job_id: int, status: JobStatus) -> dict:
    """Publishing stamps posted_at the first time."""
    rows = execute_raw_sql("""
        UPDATE jobs
        SET status = :status,
            posted_at = CASE WHEN :status = 'published' THEN COALESCE(posted_at, CURRENT_TIMESTAMP)
                             ELSE posted_at END,
            updated_at = CURRENT_TIMESTAMP
        WHERE job_id = :id AND company_id = :company_id
        RETURNING job_id, status, posted_at
    """, {"id": job_id, "company_id": company_id, "status": status.value})
    if not rows:
        raise _not_owned("update")
    return rows[0]


def list_employer_jobs(company_id: Optional[int], status: Optional[str] = None) -> List[dict]:
    if not company_id:
        return []

    sql = f"""
        SELECT {JOB_COLUMNS},
               COUNT(a.application_id) AS application_count
        FROM jobs j
        JOIN companies c ON j.company_id = c.company_id
        LEFT JOIN applications a ON a.job_id = j.job_id
        WHERE j.company_id = :company_id
    """
    params = {"company_id": company_id}
    if status:
        sql += " AND j.status = :status"
        params["status"] = status
    sql += " GROUP BY j.job_id, c.name ORDER BY j.created_at DESC"

    return _attach_skills(execute_raw_sql(sql, params))


def get_employer_job(company_id: Optional[int], job_id: int) -> dict:
    job = fetch_one(f"""
        SELECT {JOB_COLUMNS}
        FROM jobs j JOIN companies c ON j.company_id = c.company_id
        WHERE j.job_id = :id AND j.company_id = :company_id
    """, {"id": job_id, "company_id": company_id})
    if not job:
        raise _not_owned("view")
    return _attach_skills([job])[0]


def assert_job_owned(company_id: Optional[int], job_id: int, action: str = "view") -> None:
    if not fetch_one(
        "SELECT job_id FROM jobs WHERE job_id = :id AND company_id = :company_id",
        {"id": job_id, "company_id": company_id}
    ):
        raise _not_owned(action)


# ============================================================
# PUBLIC JOB BOARD
# ============================================================

def search_jobs(filters: JobSearchFilters) -> dict:
    """Published jobs only, newest first."""
    where = "WHERE j.status = 'published'"
    params = {}

    if filters.keyword:
        where += (" AND (j.title ILIKE :keyword OR j.description ILIKE :keyword"
                  " OR j.requirements ILIKE :keyword)")
        params["keyword"] = f"%{filters.keyword.strip()}%"
    if filters.location:
        where += " AND j.location ILIKE :location"
        params["location"] = f"%{filters.location.strip()}%"
    if filters.job_type:
        where += " AND j.job_type = :job_type"
        params["job_type"] = filters.job_type.value
    if filters.experience_level:
        where += " AND j.experience_level = :experience_level"
        params["experience_level"] = filters.experience_level.value
    if filters.remote_allowed is not None:
        where += " AND j.remote_allowed = :remote_allowed"
        params["remote_allowed"] = filters.remote_allowed

    total = execute_raw_sql(
        f"SELECT COUNT(*) AS total FROM jobs j {where}", params
    )[0]["total"]

    params["limit"] = filters.page_size
    params["offset"] = (filters.page - 1) * filters.page_size
    jobs = execute_raw_sql(f"""
        SELECT {JOB_COLUMNS}
        FROM jobs j JOIN companies c ON j.company_id = c.company_id
        {where}
        ORDER BY j.posted_at DESC NULLS LAST, j.job_id DESC
        LIMIT :limit OFFSET :offset
    """, params)

    return {
        "jobs": _attach_skills(jobs),
        "total": total,
        "page": filters.page,
        "page_size": filters.page_size,
    }


def get_published_job(job_id: int) -> dict:
    job = fetch_one(f"""
        SELECT {JOB_COLUMNS}, c.description AS company_description, c.website AS company_website,
               c.company_culture
        FROM jobs j JOIN companies c ON j.company_id = c.company_id
        WHERE j.job_id = :id AND j.status = 'published'
    """, {"id": job_id})
    if not job:
        raise NotFoundError("Job not found")
    return _attach_skills([job])[0]
