"""
Productivity Scorer

Estimates a candidate's overall productivity potential (0-100) and a
probation recommendation from their work history, learning activity and
personal context.
"""
import logging

from jobboard.schemas.ai_schemas import ProductivityScoreResult
from jobboard.schemas.schemas import ProductivityAssessmentCreate, WorkExperienceInput
from jobboard.services.ai_client import AIResponse, get_ai_client, with_retry

logger = logging.getLogger(__name__)

PRODUCTIVITY_SCORE_SCHEMA = {
    "overall_productivity_score": "number 0-100 integer - overall productivity potential score",
    "probation_recommendation": "string enum: 'yes' | 'no' | 'never_consider' - recommendation for probation",
    "assessor_notes": "string - concise 2-3 sentence rationale for the score and recommendation",
    "confidence_score": "number 0-1 - AI confidence in this analysis",
}

SYSTEM_CONTEXT = """
You are a senior HR productivity analyst. Evaluate a candidate's productivity potential and hiring recommendation.

Guidelines:
- Base scoring primarily on concrete work outcomes, responsibilities growth, and comparative performance (team_comparison_score 1-5 when present).
- Consider evidence of learning velocity and professional development.
- Motivation context (1=money, 2=personal_benefit, 3=personal_conviction, 4=duty) can influence recommendation but should not dominate the score.
- Be concise and strictly return valid JSON as per schema.
"""


def format_experience(index: int, exp: WorkExperienceInput) -> str:
    period = exp.start_date
    if exp.end_date:
        period += f"→{exp.end_date}"
    if exp.is_current:
        period += " (current)"

    team_score = f"{exp.team_comparison_score}/5" if exp.team_comparison_score is not None else None
    details = [
        ("functions", exp.functions_performed),
        ("products", exp.work_products),
        ("measurement", exp.result_measurement),
        ("timeline", exp.product_timeline),
        ("team_score", team_score),
        ("workload_change", exp.workload_change_over_time),
        ("responsibility_change", exp.responsibility_evolution),
        ("achievements", exp.key_achievements),
    ]

    parts = [f"#{index} {exp.position} @ {exp.company_name}", f"period={period}"]
    parts.extend(f"{label}={value}" for label, value in details if value)
    return " | ".join(parts)


def build_productivity_prompt(assessment: ProductivityAssessmentCreate) -> str:
    experiences = "\n".join(
        format_experience(i, exp) for i, exp in enumerate(assessment.work_experiences, start=1)
    )
    knowledge = assessment.knowledge_assessment
    role_type = assessment.role_type.value if assessment.role_type else "unspecified"
    salary = assessment.minimum_salary_requirement
    return f"""CANDIDATE DATA

WORK EXPERIENCES:
{experiences or 'N/A'}

KNOWLEDGE / LEARNING:
- recent_learning: {knowledge.recent_learning_activities or 'N/A'}
- professional_development: {knowledge.professional_development or 'N/A'}
- future_learning_goals: {knowledge.future_learning_goals or 'N/A'}

PERSONAL CONTEXT:
- role_type: {role_type}
- motivation_level: {assessment.motivation_level or 'unspecified'}
- min_salary: {salary if salary is not None else 'unspecified'}
- location: {assessment.residence_location or 'unspecified'}

Task: Estimate the candidate's overall productivity potential (0-100) and a probation recommendation.
Return strictly valid JSON following the provided schema."""


def score_productivity(assessment: ProductivityAssessmentCreate) -> AIResponse:
    """`data` is a ProductivityScoreResult on success."""
    client = get_ai_client()
    prompt = build_productivity_prompt(assessment)
    return with_retry(lambda: client.generate_structured(
        prompt, SYSTEM_CONTEXT, PRODUCTIVITY_SCORE_SCHEMA, result_model=ProductivityScoreResult
    ))
