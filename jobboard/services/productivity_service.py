"""
Productivity Service - the productivity assessment questionnaire.

A submission stores the work experiences, the knowledge assessment and the
assessment row together. When no manual overall score is given the AI
scorer fills it in; manual notes and recommendation always win.
"""
import logging
from typing import Optional

from sqlalchemy import text

from jobboard.core.errors import NotFoundError
from jobboard.db.postgres import execute_raw_sql, fetch_one, get_db_session
from jobboard.schemas.schemas import ProductivityAssessmentCreate
from jobboard.services.productivity_scorer import score_productivity

logger = logging.getLogger(__name__)

ASSESSMENT_VERSION = "v1.0"

WORK_EXPERIENCE_FIELDS = [
    "company_name", "company_activities", "position", "start_date", "end_date", "is_current",
    "work_duration", "reason_for_leaving", "functions_performed", "work_products",
    "result_measurement", "product_timeline", "team_comparison_score",
    "workload_change_over_time", "responsibility_evolution", "key_achievements",
]


def _apply_ai_score(data: ProductivityAssessmentCreate) -> dict:
    """Assessment values to store, enriched with the AI score when none was given."""
    values = {
        "overall_productivity_score": data.overall_productivity_score,
        "assessor_notes": data.assessor_notes,
        "probation_recommendation": data.probation_recommendation.value if data.probation_recommendation else None,
        "scored_by": "manual",
    }
    if data.overall_productivity_score is not None:
        return values

    try:
        result = score_productivity(data)
    except Exception:
        logger.exception("Productivity scoring raised")
        return values

    if result.success and result.data:
        ai = result.data
        values["overall_productivity_score"] = ai.overall_productivity_score
        values["assessor_notes"] = data.assessor_notes or ai.assessor_notes
        values["probation_recommendation"] = values["probation_recommendation"] or ai.probation_recommendation
        values["scored_by"] = "ai"
    else:
        logger.warning("Productivity scoring failed, storing without a score: %s", result.error)
    return values


def submit_assessment(user_id: int, data: ProductivityAssessmentCreate) -> int:
    """Returns the new assessment_id."""
    scored = _apply_ai_score(data)
    columns = ", ".join(WORK_EXPERIENCE_FIELDS)
    placeholders = ", ".join(f":{field}" for field in WORK_EXPERIENCE_FIELDS)

    with get_db_session() as db:
        for exp in data.work_experiences:
            db.execute(
                text(f"INSERT INTO work_experiences (user_id, {columns}) VALUES (:user_id, {placeholders})"),
                {"user_id": user_id, **exp.model_dump(include=set(WORK_EXPERIENCE_FIELDS))}
            )

        db.execute(
            text("""
                INSERT INTO knowledge_assessments
                    (user_id, recent_learning_activities, professional_development, future_learning_goals)
                VALUES (:user_id, :recent_learning_activities, :professional_development, :future_learning_goals)
            """),
            {"user_id": user_id, **data.knowledge_assessment.model_dump()}
        )

        assessment_id = db.execute(
            text("""
                INSERT INTO productivity_assessments (
                    user_id, residence_location, minimum_salary_requirement, role_type,
                    motivation_level, iq_test_score, personality_test_score, leadership_test_score,
                    overall_productivity_score, probation_recommendation, assessor_notes,
                    planned_start_date, scored_by, assessment_version, completed_at
                ) VALUES (
                    :user_id, :residence_location, :minimum_salary_requirement, :role_type,
                    :motivation_level, :iq_test_score, :personality_test_score, :leadership_test_score,
                    :overall_productivity_score, :probation_recommendation, :assessor_notes,
                    :planned_start_date, :scored_by, :version, CURRENT_TIMESTAMP
                )
                RETURNING assessment_id
            """),
            {
                "user_id": user_id,
                "residence_location": data.residence_location,
                "minimum_salary_requirement": data.minimum_salary_requirement,
                "role_type": data.role_type.value if data.role_type else None,
                "motivation_level": data.motivation_level,
                "iq_test_score": data.iq_test_score,
                "personality_test_score": data.personality_test_score,
                "leadership_test_score": data.leadership_test_score,
                "planned_start_date": data.planned_start_date,
                "version": ASSESSMENT_VERSION,
                **scored,
            }
        ).scalar()

        db.execute(
            text("""
                UPDATE users SET productivity_assessment_completed = TRUE, updated_at = CURRENT_TIMESTAMP
                WHERE user_id = :user_id
            """),
            {"user_id": user_id}
        )

    logger.info("Productivity assessment %s stored for user %s (%s)", assessment_id, user_id, scored["scored_by"])
    return assessment_id


def get_assessment_status(user_id: int) -> dict:
    user = fetch_one(
        "SELECT productivity_assessment_completed FROM users WHERE user_id = :id", {"id": user_id}
    )
    if not user:
        raise NotFoundError("User not found")
    latest = get_latest_assessment(user_id)
    return {
        "completed": bool(user["productivity_assessment_completed"]),
        "assessment_id": latest["assessment_id"] if latest else None,
        "completed_at": latest["completed_at"] if latest else None,
    }


def get_latest_assessment(user_id: int) -> Optional[dict]:
    return fetch_one("""
        SELECT * FROM productivity_assessments
        WHERE user_id = :id ORDER BY created_at DESC, assessment_id DESC LIMIT 1
    """, {"id": user_id})


def get_assessment_details(user_id: int, assessment: dict) -> dict:
    """Assessment plus the owner's work experiences and latest knowledge assessment."""
    work_experiences = execute_raw_sql(
        "SELECT * FROM work_experiences WHERE user_id = :id ORDER BY start_date DESC",
        {"id": user_id}
    )
    knowledge = fetch_one("""
        SELECT recent_learning_activities, professional_development, future_learning_goals
        FROM knowledge_assessments WHERE user_id = :id
        ORDER BY created_at DESC, knowledge_assessment_id DESC LIMIT 1
    """, {"id": user_id})
    return {
        "assessment": assessment,
        "work_experiences": work_experiences,
        "knowledge_assessment": knowledge,
    }


def get_assessment_data(user_id: int) -> dict:
    assessment = get_latest_assessment(user_id)
    if not assessment:
        raise NotFoundError("No assessment found")
    return get_assessment_details(user_id, assessment)


def retake_assessment(user_id: int) -> None:
    """Previous answers are kept; only the completion flag is cleared."""
    execute_raw_sql("""
        UPDATE users SET productivity_assessment_completed = FALSE, updated_at = CURRENT_TIMESTAMP
        WHERE user_id = :id
    """, {"id": user_id})
