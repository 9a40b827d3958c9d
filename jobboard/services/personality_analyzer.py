"""
Personality Analyzer

Turns free-text questionnaire answers into a structured workplace
personality profile (styles, four 0-100 scores, strengths, growth areas).
"""
import logging
from typing import List

from jobboard.schemas.ai_schemas import PersonalityAnalysisResult, QuestionResponse
from jobboard.services.ai_client import AIResponse, get_ai_client, with_retry

logger = logging.getLogger(__name__)

NO_RESPONSES_ERROR = "No questionnaire responses provided"

REQUIRED_TEXT_FIELDS = [
    "problem_solving_style",
    "initiative_level",
    "work_preference",
    "motivational_factors",
    "personality_summary",
]
MIN_TEXT_LENGTH = 10

SCORE_FIELDS = ["analytical_score", "creative_score", "leadership_score", "teamwork_score"]

PERSONALITY_ANALYSIS_SCHEMA = {
    "problem_solving_style": "string - detailed description of how the person approaches problems",
    "initiative_level": "string - assessment of proactiveness and self-motivation",
    "work_preference": "string - whether they prefer team collaboration or individual work",
    "motivational_factors": "string - what drives and motivates this person",
    "growth_areas": "string - areas where the person could improve or develop",
    "communication_style": "string - how they prefer to communicate and interact",
    "leadership_potential": "string - assessment of leadership capabilities and style",
    "analytical_score": "number 0-100 - quantified analytical thinking ability",
    "creative_score": "number 0-100 - quantified creative problem-solving ability",
    "leadership_score": "number 0-100 - quantified leadership potential",
    "teamwork_score": "number 0-100 - quantified collaboration and teamwork skills",
    "personality_summary": "string - comprehensive 2-3 sentence personality overview",
    "strengths": ["array of strings - key personality strengths"],
    "development_areas": ["array of strings - areas for growth and improvement"],
    "ideal_work_environment": "string - description of optimal work setting for this person",
    "confidence_score": "number 0-1 - AI confidence in this analysis",
    "analysis_notes": "string - any additional insights or caveats",
}

SYSTEM_CONTEXT = """
You are an expert personality assessor specializing in workplace psychology and soft skills evaluation. Your task is to analyze questionnaire responses to provide insights into a person's work personality, behavioral patterns, and professional capabilities.

Analysis Guidelines:
- Base your assessment solely on the provided responses
- Look for patterns across multiple responses to increase confidence
- Be specific and actionable in your descriptions
- Focus on workplace-relevant personality traits
- Provide balanced assessment including both strengths and areas for growth
- Use evidence from responses to support your conclusions
- Assign quantified scores (0-100) based on clear evidence from responses
- Be honest about confidence levels - lower confidence if responses are brief or unclear
- Consider cultural context and avoid bias
- Focus on behavioral tendencies rather than making definitive character judgments

Scoring Guidelines:
- Analytical Score: Evidence of logical thinking, problem-solving approach, data-driven decisions
- Creative Score: Signs of innovative thinking, creative problem-solving, novel approaches
- Leadership Score: Initiative-taking, influence on others, decision-making confidence
- Teamwork Score: Collaboration mentions, team-oriented thinking, interpersonal skills

Confidence Scoring:
- High confidence (0.8-1.0): Multiple consistent responses with detailed examples
- Medium confidence (0.5-0.8): Some clear patterns but limited detail or mixed signals
- Low confidence (0.0-0.5): Brief responses, unclear patterns, or contradictory information
"""


def build_personality_prompt(responses: List[QuestionResponse]) -> str:
    responses_text = "\n".join(
        f"Question {i} ({r.category or 'general'}): {r.question_text}\nResponse: {r.response_text}\n"
        for i, r in enumerate(responses, start=1)
    )
    return f"""Please analyze the following questionnaire responses to assess the person's workplace personality and soft skills:

{responses_text}
Provide a comprehensive personality analysis focusing on workplace behavior, collaboration style, problem-solving approach, and professional development areas. Base your assessment on evidence from the responses and be specific about confidence levels."""


def analyze_personality(responses: List[QuestionResponse]) -> AIResponse:
    """`data` is a PersonalityAnalysisResult on success."""
    if not responses:
        return AIResponse(success=False, error=NO_RESPONSES_ERROR)

    client = get_ai_client()
    prompt = build_personality_prompt(responses)
    return with_retry(lambda: client.generate_structured(
        prompt, SYSTEM_CONTEXT, PERSONALITY_ANALYSIS_SCHEMA, result_model=PersonalityAnalysisResult
    ))


def validate_personality_analysis(result: PersonalityAnalysisResult) -> dict:
    """Returns {"valid": bool, "errors": [...]}."""
    errors = []

    for field in REQUIRED_TEXT_FIELDS:
        value = getattr(result, field) or ""
        if len(value.strip()) < MIN_TEXT_LENGTH:
            errors.append(f"Missing or insufficient {field}")

    for field in SCORE_FIELDS:
        value = getattr(result, field)
        if value is None or not (0 <= value <= 100):
            errors.append(f"Invalid {field}: must be a number between 0-100")

    if result.confidence_score is None or not (0 <= result.confidence_score <= 1):
        errors.append("Invalid confidence_score: must be a number between 0-1")

    if not result.strengths:
        errors.append("Strengths must be a non-empty array")

    if not result.development_areas:
        errors.append("Development areas must be a non-empty array")

    return {"valid": not errors, "errors": errors}


def format_personality_summary(analysis: PersonalityAnalysisResult) -> str:
    scores = {
        "analytical": analysis.analytical_score or 0,
        "creative": analysis.creative_score or 0,
        "leadership": analysis.leadership_score or 0,
        "teamwork": analysis.teamwork_score or 0,
    }
    top = sorted(scores, key=scores.get, reverse=True)[:2]
    return (
        f"{analysis.personality_summary} Key strengths include {' and '.join(top)} capabilities, "
        f"with {analysis.work_preference.lower()} work preferences."
    )
