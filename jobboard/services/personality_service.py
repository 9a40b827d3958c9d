"""
Personality Service - questionnaire, submission and background analysis.

Lifecycle of a user's personality_analysis row:
    queued -> processing -> completed | failed
Submitting again resets the row to queued. The full AI report is also kept
in MongoDB (personality_reports).
"""
import json
import logging
from typing import Dict, List

from fastapi import BackgroundTasks
from sqlalchemy import text

from jobboard.core.errors import NotFoundError
from jobboard.db.postgres import execute_raw_sql, fetch_one, get_db_session
from jobboard.schemas.ai_schemas import QuestionResponse
from jobboard.schemas.schemas import PersonalityStatusResponse
from jobboard.services.mongo_service import PersonalityReportService
from jobboard.services.personality_analyzer import (
    analyze_personality, format_personality_summary, validate_personality_analysis
)

logger = logging.getLogger(__name__)

ANALYSIS_VERSION = "1.0"

DEFAULT_QUESTIONS = [
    {"question_text": "Describe the biggest failure in your career and what it taught you.",
     "category": "problem_solving", "order_index": 1},
    {"question_text": "Tell us about a time you had to work in a team with difficult people. How did you resolve it?",
     "category": "teamwork", "order_index": 2},
    {"question_text": "Describe a project or initiative you started on your own, without being asked by management.",
     "category": "initiative", "order_index": 3},
    {"question_text": "How do you usually make important decisions? Walk us through your process with a concrete example.",
     "category": "decision_making", "order_index": 4},
    {"question_text": "Tell us about a time you had to learn something completely new for work. How did you approach it?",
     "category": "learning", "order_index": 5},
    {"question_text": "Describe a situation where you disagreed with a management decision. How did you respond?",
     "category": "leadership", "order_index": 6},
    {"question_text": "What motivates you most at work? Give concrete examples.",
     "category": "motivation", "order_index": 7},
]

ANALYSIS_FIELDS = [
    "problem_solving_style", "initiative_level", "work_preference", "motivational_factors",
    "growth_areas", "communication_style", "leadership_potential",
    "analytical_score", "creative_score", "leadership_score", "teamwork_score",
    "personality_summary", "ideal_work_environment", "confidence_score",
]


# ============================================================
# QUESTIONS
# ============================================================

def get_questions() -> List[dict]:
    """Active stored questions, or the built-in set when none are stored."""
    try:
        questions = execute_raw_sql("""
            SELECT question_id, question_text, category, order_index
            FROM questionnaires WHERE is_active = TRUE
            ORDER BY order_index
        """)
    except Exception:
        logger.exception("Error fetching questions, using defaults")
        questions = []

    return questions or [dict(q, question_id=None) for q in DEFAULT_QUESTIONS]


def seed_default_questions() -> dict:
    existing = execute_raw_sql("SELECT COUNT(*) AS count FROM questionnaires")[0]["count"]
    if existing:
        return {"message": "Questions already exist in database", "count": existing}

    with get_db_session() as db:
        for q in DEFAULT_QUESTIONS:
            db.execute(
                text("""
                    INSERT INTO questionnaires (question_text, category, order_index, is_active)
                    VALUES (:question_text, :category, :order_index, TRUE)
                """),
                q
            )
    return {"message": "Default questions seeded successfully", "count": len(DEFAULT_QUESTIONS)}


def map_responses(responses: Dict[str, str], questions: List[dict]) -> List[QuestionResponse]:
    """Keys "1".."n" refer to questions by position."""
    by_position = {str(i): q for i, q in enumerate(questions, start=1)}
    mapped = []
    for key, answer in responses.items():
        question = by_position.get(key)
        if not question:
            logger.warning("Question %s not found", key)
            mapped.append(QuestionResponse(
                question_id=None, question_text="Question not found",
                response_text=answer, category="general"
            ))
            continue
        mapped.append(QuestionResponse(
            question_id=str(question["question_id"]) if question.get("question_id") else None,
            question_text=question["question_text"],
            response_text=answer,
            category=question.get("category") or "general",
        ))
    return mapped


# ============================================================
# SUBMISSION & BACKGROUND ANALYSIS
# ============================================================

def submit_responses(user_id: int, responses: Dict[str, str],
                     background_tasks: BackgroundTasks) -> PersonalityStatusResponse:
    question_responses = map_responses(responses, get_questions())

    with get_db_session() as db:
        db.execute(text("DELETE FROM test_responses WHERE user_id = :uid"), {"uid": user_id})
        for qr in question_responses:
            db.execute(
                text("""
                    INSERT INTO test_responses (user_id, question_id, question_text, response_text)
                    VALUES (:uid, :qid, :qtext, :answer)
                """),
                {"uid": user_id, "qid": int(qr.question_id) if qr.question_id else None,
                 "qtext": qr.question_text, "answer": qr.response_text}
            )
        db.execute(
            text("""
                INSERT INTO personality_analysis (user_id, status, queued_at, updated_at)
                VALUES (:uid, 'queued', CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
                ON CONFLICT (user_id) DO UPDATE SET
                    status = 'queued',
                    queued_at = CURRENT_TIMESTAMP,
                    processed_at = NULL,
                    error_message = NULL,
                    updated_at = CURRENT_TIMESTAMP
            """),
            {"uid": user_id}
        )

    background_tasks.add_task(run_personality_analysis, user_id, question_responses)
    logger.info("Personality analysis queued for user %s (%d responses)", user_id, len(question_responses))
    return get_status(user_id)


def _mark_failed(user_id: int, error: str) -> None:
    execute_raw_sql("""
        UPDATE personality_analysis
        SET status = 'failed', error_message = :error, updated_at = CURRENT_TIMESTAMP
        WHERE user_id = :uid
    """, {"uid": user_id, "error": error})


def run_personality_analysis(user_id: int, responses: List[QuestionResponse]) -> None:
    """Background task. Never raises: failures end in status 'failed'."""
    try:
        execute_raw_sql("""
            UPDATE personality_analysis SET status = 'processing', updated_at = CURRENT_TIMESTAMP
            WHERE user_id = :uid
        """, {"uid": user_id})

        result = analyze_personality(responses)
        if not result.success or not result.data:
            _mark_failed(user_id, result.error or "Failed to analyze personality")
            return

        analysis = result.data
        validation = validate_personality_analysis(analysis)
        if not validation["valid"]:
            logger.error("Invalid analysis for user %s: %s", user_id, validation["errors"])
            _mark_failed(user_id, "AI analysis produced invalid results")
            return

        params = {field: getattr(analysis, field) for field in ANALYSIS_FIELDS}
        params.update({
            "uid": user_id,
            "strengths": json.dumps(analysis.strengths),
            "development_areas": json.dumps(analysis.development_areas),
            "version": ANALYSIS_VERSION,
        })
        for field in ("analytical_score", "creative_score", "leadership_score", "teamwork_score"):
            params[field] = int(round(params[field]))

        execute_raw_sql("""
            UPDATE personality_analysis SET
                status = 'completed',
                problem_solving_style = :problem_solving_style,
                initiative_level = :initiative_level,
                work_preference = :work_preference,
                motivational_factors = :motivational_factors,
                growth_areas = :growth_areas,
                communication_style = :communication_style,
                leadership_potential = :leadership_potential,
                analytical_score = :analytical_score,
                creative_score = :creative_score,
                leadership_score = :leadership_score,
                teamwork_score = :teamwork_score,
                personality_summary = :personality_summary,
                strengths = CAST(:strengths AS JSONB),
                development_areas = CAST(:development_areas AS JSONB),
                ideal_work_environment = :ideal_work_environment,
                confidence_score = :confidence_score,
                analysis_version = :version,
                error_message = NULL,
                processed_at = CURRENT_TIMESTAMP,
                updated_at = CURRENT_TIMESTAMP
            WHERE user_id = :uid
        """, params)

        try:
            report = analysis.model_dump()
            report["formatted_summary"] = format_personality_summary(analysis)
            PersonalityReportService().upsert(user_id, report, [r.model_dump() for r in responses])
        except Exception:
            logger.exception("Failed to store personality report in MongoDB for user %s", user_id)

        logger.info("Personality analysis completed for user %s", user_id)

    except Exception as e:
        logger.exception("Personality analysis failed for user %s", user_id)
        try:
            _mark_failed(user_id, str(e))
        except Exception:
            logger.exception("Could not record failure for user %s", user_id)


# ============================================================
# READ
# ============================================================

def get_status(user_id: int) -> PersonalityStatusResponse:
    row = fetch_one("""
        SELECT status, queued_at, processed_at, error_message, updated_at
        FROM personality_analysis WHERE user_id = :uid
    """, {"uid": user_id})
    if not row:
        return PersonalityStatusResponse(status="not_started")

    return PersonalityStatusResponse(
        status=row["status"],
        queued_at=row["queued_at"],
        processed_at=row["processed_at"],
        error=row["error_message"],
        last_updated=row["updated_at"],
        is_ready=row["status"] == "completed",
    )


def get_analysis(user_id: int) -> dict:
    row = fetch_one("""
        SELECT * FROM personality_analysis WHERE user_id = :uid AND status = 'completed'
    """, {"uid": user_id})
    if not row:
        raise NotFoundError("Personality analysis not found")

    if row.get("confidence_score") is not None:
        row["confidence_score"] = float(row["confidence_score"])
    row.pop("error_message", None)
    return row
