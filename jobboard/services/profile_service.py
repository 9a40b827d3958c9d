"""
Profile Service - job seeker profiles, skills, experience, education
and employer company profiles.
"""
import logging
from typing import List, Optional

from sqlalchemy import text

from jobboard.core.errors import AppError, NotFoundError
from jobboard.db.postgres import execute_raw_sql, fetch_one, get_db_session
from jobboard.schemas.schemas import (
    CompanyUpsert, EducationCreate, ExperienceCreate, JobSeekerProfileUpdate, SkillAdd
)

logger = logging.getLogger(__name__)

PROFILE_FIELDS = [
    "full_name", "title", "summary", "phone", "location",
    "linkedin_url", "github_url", "portfolio_url",
]

COMPANY_FIELDS = [
    "name", "description", "website", "company_size", "industry", "founded_year",
    "headquarters", "company_culture", "hr_email", "phone",
]


# ============================================================
# SKILLS (shared with jobs)
# ============================================================

def get_or_create_skill(db, skill_name: str, category: str = None) -> int:
    """Find or create a skill by name inside an open session. Returns skill_id."""
    result = db.execute(
        text("""
            INSERT INTO skills (skill_name, category) VALUES (:name, :category)
            ON CONFLICT (skill_name) DO UPDATE SET skill_name = EXCLUDED.skill_name
            RETURNING skill_id
        """),
        {"name": skill_name.strip(), "category": category}
    )
    return result.fetchone()[0]


def set_user_skill(db, user_id: int, skill_name: str, proficiency: int = 3,
                   years_experience: int = None, category: str = None) -> int:
    skill_id = get_or_create_skill(db, skill_name, category)
    db.execute(
        text("""
            INSERT INTO user_skills (user_id, skill_id, proficiency, years_experience)
            VALUES (:user_id, :skill_id, :proficiency, :years)
            ON CONFLICT (user_id, skill_id) DO UPDATE
            SET proficiency = EXCLUDED.proficiency,
                years_experience = COALESCE(EXCLUDED.years_experience, user_skills.years_experience)
        """),
        {"user_id": user_id, "skill_id": skill_id, "proficiency": proficiency, "years": years_experience}
    )
    return skill_id


def list_skills(user_id: int) -> List[dict]:
    return execute_raw_sql("""
        SELECT sk.skill_id, sk.skill_name, sk.category, us.proficiency, us.years_experience
        FROM user_skills us JOIN skills sk ON us.skill_id = sk.skill_id
        WHERE us.user_id = :id ORDER BY sk.skill_name
    """, {"id": user_id})


def add_skill(user_id: int, skill: SkillAdd) -> int:
    with get_db_session() as db:
        return set_user_skill(db, user_id, skill.skill_name, skill.proficiency, skill.years_experience)


def remove_skill(user_id: int, skill_id: int) -> None:
    with get_db_session() as db:
        result = db.execute(
            text("DELETE FROM user_skills WHERE user_id = :uid AND skill_id = :sid"),
            {"uid": user_id, "sid": skill_id}
        )
        if result.rowcount == 0:
            raise NotFoundError("Skill not found in profile")


# ============================================================
# JOB SEEKER PROFILE
# ============================================================

def get_job_seeker_profile(user_id: int) -> dict:
    profile = fetch_one("""
        SELECT user_id, email, full_name, title, summary, phone, location,
               linkedin_url, github_url, portfolio_url, productivity_assessment_completed
        FROM users WHERE user_id = :id
    """, {"id": user_id})
    if not profile:
        raise NotFoundError("Profile not found")

    profile["skills"] = list_skills(user_id)
    profile["experiences"] = list_experiences(user_id)
    profile["educations"] = list_educations(user_id)
    return profile


def update_job_seeker_profile(user_id: int, data: JobSeekerProfileUpdate) -> List[str]:
    """Partial update; empty strings clear a field. Returns the updated field names."""
    updates = []
    params = {"id": user_id}

    for field in PROFILE_FIELDS:
        value = getattr(data, field)
        if value is not None:
            updates.append(f"{field} = :{field}")
            params[field] = value or None

    if not updates:
        raise AppError("No fields to update")

    with get_db_session() as db:
        db.execute(
            text(f"UPDATE users SET {', '.join(updates)}, updated_at = CURRENT_TIMESTAMP WHERE user_id = :id"),
            params
        )
    return [u.split(" = ")[0] for u in updates]


# ============================================================
# EXPERIENCE & EDUCATION
# ============================================================

def list_experiences(user_id: int) -> List[dict]:
    return execute_raw_sql("""
        SELECT experience_id, position, company, start_date, end_date, is_current, description
        FROM experiences WHERE user_id = :id
        ORDER BY is_current DESC, start_date DESC NULLS LAST
    """, {"id": user_id})


def add_experience(user_id: int, data: ExperienceCreate) -> int:
    rows = execute_raw_sql("""
        INSERT INTO experiences (user_id, position, company, start_date, end_date, is_current, description)
        VALUES (:user_id, :position, :company, :start_date, :end_date, :is_current, :description)
        RETURNING experience_id
    """, {"user_id": user_id, **data.model_dump()})
    return rows[0]["experience_id"]


def delete_experience(user_id: int, experience_id: int) -> None:
    with get_db_session() as db:
        result = db.execute(
            text("DELETE FROM experiences WHERE experience_id = :id AND user_id = :uid"),
            {"id": experience_id, "uid": user_id}
        )
        if result.rowcount == 0:
            raise NotFoundError("Experience not found")


def list_educations(user_id: int) -> List[dict]:
    return execute_raw_sql("""
        SELECT education_id, institution, degree, field_of_study, graduation_year
        FROM educations WHERE user_id = :id
        ORDER BY graduation_year DESC NULLS LAST
    """, {"id": user_id})


def add_education(user_id: int, data: EducationCreate) -> int:
    rows = execute_raw_sql("""
        INSERT INTO educations (user_id, institution, degree, field_of_study, graduation_year)
        VALUES (:user_id, :institution, :degree, :field_of_study, :graduation_year)
        RETURNING education_id
    """, {"user_id": user_id, **data.model_dump()})
    return rows[0]["education_id"]


def delete_education(user_id: int, education_id: int) -> None:
    with get_db_session() as db:
        result = db.execute(
            text("DELETE FROM educations WHERE education_id = :id AND user_id = :uid"),
            {"id": education_id, "uid": user_id}
        )
        if result.rowcount == 0:
            raise NotFoundError("Education not found")


# ============================================================
# COMPANY PROFILE
# ============================================================

def get_company(owner_id: int) -> Optional[dict]:
    return fetch_one(f"""
        SELECT company_id, owner_id, {', '.join(COMPANY_FIELDS)}, created_at, updated_at
        FROM companies WHERE owner_id = :id
    """, {"id": owner_id})


def upsert_company(owner_id: int, data: CompanyUpsert) -> int:
    """One company per employer: insert on first save, update afterwards."""
    params = data.model_dump(mode="json")
    params = {field: (params.get(field) or None) for field in COMPANY_FIELDS}
    params["owner_id"] = owner_id

    columns = ", ".join(COMPANY_FIELDS)
    values = ", ".join(f":{f}" for f in COMPANY_FIELDS)
    assignments = ", ".join(f"{f} = EXCLUDED.{f}" for f in COMPANY_FIELDS)

    rows = execute_raw_sql(f"""
        INSERT INTO companies (owner_id, {columns}) VALUES (:owner_id, {values})
        ON CONFLICT (owner_id) DO UPDATE SET {assignments}, updated_at = CURRENT_TIMESTAMP
        RETURNING company_id
    """, params)
    return rows[0]["company_id"]
