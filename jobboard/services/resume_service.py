"""
Resume Service - parse an uploaded resume and optionally apply it to the profile.

Two kinds of caller:
1. A signed-in user (Authorization: Bearer <JWT>). Auto-apply is off by default.
2. An internal service (Authorization: Bearer <INTERNAL_API_TOKEN> plus
   X-User-Id). Auto-apply is on by default.
X-Auto-Apply or the auto_apply form field override the default.

Storage and auto-apply are best effort: a parsed resume is returned even if
they fail.
"""
import logging
import re
from datetime import date
from typing import List, Optional

from sqlalchemy import text

from jobboard.core.auth import is_internal_token, user_from_token
from jobboard.core.errors import AppError
from jobboard.db.postgres import get_db_session
from jobboard.schemas.ai_schemas import ResumeParsingResult
from jobboard.services.mongo_service import ParsedResumeService, RawResumeService
from jobboard.services.profile_service import set_user_skill
from jobboard.services.resume_parser import parse_and_validate_resume

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Resume parsed successfully"

PERSONAL_FIELDS = ["full_name", "phone", "location", "linkedin_url", "github_url", "portfolio_url"]
URL_FIELDS = {"linkedin_url", "github_url", "portfolio_url"}

_YEAR_MONTH_RE = re.compile(r"^(\d{4})(?:-(\d{1,2}))?")


# ============================================================
# CALLER RESOLUTION
# ============================================================

def parse_flag(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    value = value.strip().lower()
    if value == "true":
        return True
    if value == "false":
        return False
    return None


def resolve_caller(token: Optional[str], x_user_id: Optional[str], x_auto_apply: Optional[str] = None) -> dict:
    """Returns {"user_id", "is_internal", "auto_apply"}."""
    requested = parse_flag(x_auto_apply)

    if is_internal_token(token):
        if not x_user_id:
            raise AppError("Missing X-User-Id header")
        try:
            user_id = int(x_user_id)
        except ValueError:
            raise AppError("Invalid X-User-Id header")
        return {"user_id": user_id, "is_internal": True,
                "auto_apply": requested if requested is not None else True}

    if not token:
        raise AppError("Unauthorized", status_code=401)
    user = user_from_token(token)
    return {"user_id": user["user_id"], "is_internal": False,
            "auto_apply": requested if requested is not None else False}


# ============================================================
# AUTO-APPLY
# ============================================================

def normalize_url(url: str) -> str:
    return url if url.startswith("http") else f"https://{url}"


def parse_month(value: Optional[str]) -> Optional[date]:
    """'2021-03' -> date(2021, 3, 1); '2021' -> date(2021, 1, 1)."""
    match = _YEAR_MONTH_RE.match(value or "")
    if not match:
        return None
    month = int(match.group(2) or 1)
    if not 1 <= month <= 12:
        month = 1
    return date(int(match.group(1)), month, 1)


def parse_year(value: Optional[str]) -> Optional[int]:
    match = _YEAR_MONTH_RE.match(value or "")
    return int(match.group(1)) if match else None


def apply_parsed_resume(user_id: int, parsed: ResumeParsingResult) -> List[str]:
    """
    Merge a parsed resume into the user's profile. Returns labels of what changed,
    e.g. ["phone", "experiences (+2)", "skills (+5)"].
    """
    fields_updated = []

    with get_db_session() as db:
        user = db.execute(
            text(f"SELECT {', '.join(PERSONAL_FIELDS)} FROM users WHERE user_id = :id"),
            {"id": user_id}
        ).mappings().fetchone()
        if not user:
            logger.warning("Auto-apply skipped, user %s not found", user_id)
            return fields_updated

        # Personal info: parsed value wins when it differs
        info = parsed.personal_info.model_dump()
        updates = {}
        for field in PERSONAL_FIELDS:
            value = info.get(field)
            if not value:
                continue
            if field in URL_FIELDS:
                value = normalize_url(value)
            if value != user[field]:
                updates[field] = value
                fields_updated.append(field)

        if updates:
            set_clause = ", ".join(f"{field} = :{field}" for field in updates)
            db.execute(
                text(f"UPDATE users SET {set_clause}, updated_at = CURRENT_TIMESTAMP WHERE user_id = :id"),
                {**updates, "id": user_id}
            )

        # Experiences: dedup on (position, company)
        existing = {
            (row["position"], row["company"])
            for row in db.execute(
                text("SELECT position, company FROM experiences WHERE user_id = :id"), {"id": user_id}
            ).mappings()
        }
        added = 0
        for exp in parsed.experience:
            key = (exp.job_title, exp.company_name)
            if key in existing:
                continue
            existing.add(key)
            db.execute(
                text("""
                    INSERT INTO experiences (user_id, position, company, start_date, end_date, is_current, description)
                    VALUES (:uid, :position, :company, :start_date, :end_date, :is_current, :description)
                """),
                {"uid": user_id, "position": exp.job_title, "company": exp.company_name,
                 "start_date": parse_month(exp.start_date), "end_date": parse_month(exp.end_date),
                 "is_current": exp.is_current, "description": exp.description or ""}
            )
            added += 1
        if added:
            fields_updated.append(f"experiences (+{added})")

        # Educations: dedup on (institution, degree)
        existing = {
            (row["institution"], row["degree"])
            for row in db.execute(
                text("SELECT institution, degree FROM educations WHERE user_id = :id"), {"id": user_id}
            ).mappings()
        }
        added = 0
        for edu in parsed.education:
            key = (edu.institution_name, edu.degree)
            if key in existing:
                continue
            existing.add(key)
            db.execute(
                text("""
                    INSERT INTO educations (user_id, institution, degree, field_of_study, graduation_year)
                    VALUES (:uid, :institution, :degree, :field_of_study, :graduation_year)
                """),
                {"uid": user_id, "institution": edu.institution_name, "degree": edu.degree,
                 "field_of_study": edu.field_of_study, "graduation_year": parse_year(edu.end_date)}
            )
            added += 1
        if added:
            fields_updated.append(f"educations (+{added})")

        # Skills: union by name, case-insensitive
        known = {
            row["skill_name"].lower()
            for row in db.execute(
                text("""
                    SELECT s.skill_name FROM user_skills us JOIN skills s ON us.skill_id = s.skill_id
                    WHERE us.user_id = :id
                """),
                {"id": user_id}
            ).mappings()
        }
        added = 0
        for skill in parsed.skills:
            name = skill.name.strip()
            if not name or name.lower() in known:
                continue
            known.add(name.lower())
            set_user_skill(db, user_id, name, proficiency=skill.proficiency_level, category=skill.category)
            added += 1
        if added:
            fields_updated.append(f"skills (+{added})")

    logger.info("Auto-applied resume for user %s: %s", user_id, ", ".join(fields_updated) or "no changes")
    return fields_updated


# ============================================================
# PIPELINE
# ============================================================

def store_resume(user_id: int, resume_text: str, filename: str, file_type: str,
                 parsed: ResumeParsingResult, confidence: float) -> None:
    """Replace the user's stored resume. Failures are logged only."""
    try:
        raw_id = RawResumeService().replace(user_id, resume_text, filename, file_type)
        ParsedResumeService().replace(user_id, raw_id, parsed.model_dump(), confidence, filename)
    except Exception:
        logger.exception("Failed to store resume for user %s", user_id)


def process_resume(user_id: int, resume_text: str, filename: str, file_type: str, auto_apply: bool) -> dict:
    result = parse_and_validate_resume(resume_text, filename)
    if not result.success or result.data is None:
        raise AppError(result.error or "Failed to process resume", status_code=500)

    parsed: ResumeParsingResult = result.data
    store_resume(user_id, resume_text, filename, file_type, parsed, result.confidence)

    fields_updated = []
    if auto_apply:
        try:
            fields_updated = apply_parsed_resume(user_id, parsed)
        except Exception:
            logger.exception("Auto-apply failed for user %s", user_id)

    return {
        "success": True,
        "data": parsed.model_dump(),
        "message": SUCCESS_MESSAGE,
        "fields_updated": fields_updated or None,
    }
