"""
Match Service - cached AI match scores between job seekers and jobs.

Scores live in match_scores, one row per (job, candidate). A cached row is
returned as-is; otherwise the scorer is called and the result upserted.
"""
import json
import logging
from datetime import date
from typing import Dict, List, Optional

from jobboard.db.postgres import execute_raw_sql, fetch_one
from jobboard.schemas.ai_schemas import (
    CandidateData, CandidateEducation, CandidateExperience,
    CandidatePersonality, CandidateSkill, JobData
)
from jobboard.schemas.schemas import JobSearchFilters
from jobboard.services.job_service import get_job_skills, search_jobs
from jobboard.services.match_scorer import calculate_match_score

logger = logging.getLogger(__name__)

DEFAULT_PERSONALITY_SCORE = 75

PENDING_SCORE = {"score": 75, "explanation": "Match score pending AI analysis", "confidence": 0.5}
ERROR_SCORE = {"score": 75, "explanation": "Unable to calculate match score", "confidence": 0.3}


def _summary(row: dict) -> dict:
    confidence = row.get("ai_confidence_score")
    return {
        "score": row["overall_score"],
        "explanation": row.get("match_explanation"),
        "confidence": float(confidence) if confidence is not None else None,
    }


def _years_between(start: Optional[date], end: Optional[date]) -> float:
    if not start:
        return 0
    end = end or date.today()
    return max(round((end - start).days / 365.25, 1), 0)


# ============================================================
# LOADING JOB / CANDIDATE DATA
# ============================================================

def load_job_data(job_id: int) -> Optional[JobData]:
    job = fetch_one("""
        SELECT j.job_id, j.title, j.description, j.requirements, j.responsibilities,
               j.experience_level, j.job_type, j.location, j.remote_allowed,
               c.name AS company_name, c.company_culture, c.description AS company_description
        FROM jobs j JOIN companies c ON j.company_id = c.company_id
        WHERE j.job_id = :id
    """, {"id": job_id})
    if not job:
        return None

    skills = get_job_skills([job_id])[job_id]
    return JobData(
        title=job["title"],
        company_name=job["company_name"],
        description=job["description"] or "",
        requirements=job["requirements"] or "",
        responsibilities=job["responsibilities"] or "",
        experience_level=job["experience_level"] or "",
        job_type=job["job_type"] or "",
        location=job["location"] or "",
        remote_allowed=bool(job["remote_allowed"]),
        # Companies without a culture statement fall back to their description
        company_culture=job["company_culture"] or job["company_description"] or "",
        required_skills=skills["required_skills"],
        preferred_skills=skills["preferred_skills"],
    )


def load_candidate_data(user_id: int) -> Optional[CandidateData]:
    """None unless the user exists and is a job seeker."""
    user = fetch_one(
        "SELECT user_id, full_name, title, location, role FROM users WHERE user_id = :id",
        {"id": user_id}
    )
    if not user or user["role"] != "job_seeker":
        return None

    skills = execute_raw_sql("""
        SELECT s.skill_name, us.proficiency
        FROM user_skills us JOIN skills s ON us.skill_id = s.skill_id
        WHERE us.user_id = :id
    """, {"id": user_id})
    experiences = execute_raw_sql("""
        SELECT position, company, description, start_date, end_date, is_current
        FROM experiences WHERE user_id = :id ORDER BY start_date DESC NULLS LAST
    """, {"id": user_id})
    educations = execute_raw_sql(
        "SELECT institution, degree, field_of_study FROM educations WHERE user_id = :id",
        {"id": user_id}
    )
    personality = fetch_one("""
        SELECT problem_solving_style, work_preference, analytical_score, creative_score,
               leadership_score, teamwork_score, strengths
        FROM personality_analysis WHERE user_id = :id AND status = 'completed'
    """, {"id": user_id})

    experience = [
        CandidateExperience(
            job_title=exp["position"],
            company_name=exp["company"],
            description=exp["description"] or "",
            years=_years_between(exp["start_date"], None if exp["is_current"] else exp["end_date"]),
        )
        for exp in experiences
    ]

    personality_data = None
    if personality:
        personality_data = CandidatePersonality(
            problem_solving_style=personality["problem_solving_style"] or "",
            work_preference=personality["work_preference"] or "",
            analytical_score=personality["analytical_score"] or DEFAULT_PERSONALITY_SCORE,
            creative_score=personality["creative_score"] or DEFAULT_PERSONALITY_SCORE,
            leadership_score=personality["leadership_score"] or DEFAULT_PERSONALITY_SCORE,
            teamwork_score=personality["teamwork_score"] or DEFAULT_PERSONALITY_SCORE,
            strengths=personality["strengths"] or [],
        )

    return CandidateData(
        full_name=user["full_name"] or "",
        experience_years=round(sum(e.years for e in experience), 1) if experience else None,
        current_job_title=user["title"],
        skills=[CandidateSkill(name=s["skill_name"], proficiency_level=s["proficiency"] or 3) for s in skills],
        experience=experience,
        education=[
            CandidateEducation(
                degree=edu["degree"],
                field_of_study=edu["field_of_study"] or "",
                institution_name=edu["institution"],
            )
            for edu in educations
        ],
        personality_analysis=personality_data,
        preferred_location=user["location"],
    )


# ============================================================
# SCORING
# ============================================================

def save_match_score(job_id: int, candidate_id: int, result) -> None:
    """Upsert a MatchScoreResult for (job, candidate)."""
    execute_raw_sql("""
        INSERT INTO match_scores (
            job_id, candidate_id, overall_score, skills_match_score, experience_match_score,
            culture_fit_score, personality_match_score, match_explanation, strengths,
            potential_concerns, recommendations, ai_confidence_score
        ) VALUES (
            :job_id, :candidate_id, :overall_score, :skills_match_score, :experience_match_score,
            :culture_fit_score, :personality_match_score, :match_explanation, :strengths,
            :potential_concerns, CAST(:recommendations AS JSONB), :confidence_score
        )
        ON CONFLICT (job_id, candidate_id) DO UPDATE SET
            overall_score = EXCLUDED.overall_score,
            skills_match_score = EXCLUDED.skills_match_score,
            experience_match_score = EXCLUDED.experience_match_score,
            culture_fit_score = EXCLUDED.culture_fit_score,
            personality_match_score = EXCLUDED.personality_match_score,
            match_explanation = EXCLUDED.match_explanation,
            strengths = EXCLUDED.strengths,
            potential_concerns = EXCLUDED.potential_concerns,
            recommendations = EXCLUDED.recommendations,
            ai_confidence_score = EXCLUDED.ai_confidence_score,
            updated_at = CURRENT_TIMESTAMP
    """, {
        "job_id": job_id,
        "candidate_id": candidate_id,
        "overall_score": result.overall_score,
        "skills_match_score": result.skills_match_score,
        "experience_match_score": result.experience_match_score,
        "culture_fit_score": result.culture_fit_score,
        "personality_match_score": result.personality_match_score,
        "match_explanation": result.match_explanation,
        "strengths": result.strengths,
        "potential_concerns": result.potential_concerns,
        "recommendations": json.dumps(result.recommendations),
        "confidence_score": result.confidence_score,
    })


def calculate_match_score_for_job_user(job_id: int, user_id: int) -> Optional[dict]:
    """
    Score (job, user) with the AI and cache the result.

    Returns {"overall_score", "match_explanation", "ai_confidence_score"},
    or None when the job/candidate is missing or the AI call failed.
    """
    job = load_job_data(job_id)
    if not job:
        return None
    candidate = load_candidate_data(user_id)
    if not candidate:
        return None

    response = calculate_match_score(job, candidate)
    if not response.success or not response.data:
        logger.warning("Match score for job %s / user %s failed: %s", job_id, user_id, response.error)
        return None

    result = response.data
    save_match_score(job_id, user_id, result)
    logger.info("Match score for job %s / user %s: %s", job_id, user_id, result.overall_score)
    return {
        "overall_score": result.overall_score,
        "match_explanation": result.match_explanation,
        "ai_confidence_score": result.confidence_score,
    }


def get_job_match_score(job_id: int, user_id: int) -> Optional[dict]:
    """Cached score if present, else computed now. None when unavailable."""
    try:
        existing = fetch_one("""
            SELECT overall_score, match_explanation, ai_confidence_score
            FROM match_scores WHERE job_id = :jid AND candidate_id = :uid
        """, {"jid": job_id, "uid": user_id})
        if existing:
            return _summary(existing)

        computed = calculate_match_score_for_job_user(job_id, user_id)
        return _summary(computed) if computed else None
    except Exception:
        logger.exception("Error getting match score for job %s / user %s", job_id, user_id)
        return None


def get_batch_job_match_scores(job_ids: List[int], user_id: int) -> Dict[int, dict]:
    """
    Cached scores for many jobs. Never calls the AI: jobs without a
    stored score get a neutral placeholder.
    """
    if not job_ids:
        return {}
    try:
        rows = execute_raw_sql("""
            SELECT job_id, overall_score, match_explanation, ai_confidence_score
            FROM match_scores
            WHERE candidate_id = :uid AND job_id = ANY(:ids)
        """, {"uid": user_id, "ids": list(job_ids)})
    except Exception:
        logger.exception("Error getting batch match scores for user %s", user_id)
        return {job_id: dict(ERROR_SCORE) for job_id in job_ids}

    scores = {row["job_id"]: _summary(row) for row in rows}
    for job_id in job_ids:
        scores.setdefault(job_id, dict(PENDING_SCORE))
    return scores


def search_jobs_with_match_scores(user_id: Optional[int], filters: JobSearchFilters) -> dict:
    """Job board search; signed-in seekers get scores and a best-match-first order."""
    result = search_jobs(filters)
    jobs = result["jobs"]

    if user_id is None:
        for job in jobs:
            job["match_score"] = None
        return result

    scores = get_batch_job_match_scores([job["job_id"] for job in jobs], user_id)
    for job in jobs:
        score = scores.get(job["job_id"]) or {}
        job["match_score"] = score.get("score")
        job["match_explanation"] = score.get("explanation")
        job["match_confidence"] = score.get("confidence")

    # stable sort keeps posted_at order among equal scores
    result["jobs"] = sorted(jobs, key=lambda j: j["match_score"] or 0, reverse=True)
    return result
