"""
Resume Parser

Extracts structured resume data (contact details, experience, education,
skills, languages, certifications) from plain resume text, then applies
the checks a profile import relies on.
"""
import logging
import re

from jobboard.schemas.ai_schemas import ConfidenceScores, ResumeParsingResult
from jobboard.services.ai_client import AIResponse, get_ai_client, with_retry

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

RESUME_PARSING_SCHEMA = {
    "personal_info": {
        "full_name": "string",
        "email": "string",
        "phone": "string",
        "location": "string",
        "linkedin_url": "string (optional)",
        "github_url": "string (optional)",
        "portfolio_url": "string (optional)",
    },
    "professional_summary": "string",
    "experience": [{
        "job_title": "string",
        "company_name": "string",
        "start_date": "string (YYYY-MM format)",
        "end_date": "string (YYYY-MM format, null if current)",
        "is_current": "boolean",
        "description": "string",
        "achievements": ["array of strings"],
    }],
    "education": [{
        "institution_name": "string",
        "degree": "string",
        "field_of_study": "string",
        "start_date": "string (YYYY-MM format)",
        "end_date": "string (YYYY-MM format, null if current)",
        "is_current": "boolean",
        "gpa": "string (optional)",
        "achievements": ["array of strings"],
    }],
    "skills": [{
        "name": "string",
        "category": "technical|soft|language|other",
        "proficiency_level": "number 1-5",
    }],
    "languages": [{"name": "string", "proficiency": "beginner|intermediate|advanced|native"}],
    "certifications": [{
        "name": "string",
        "issuer": "string",
        "date_obtained": "string (optional)",
        "expiry_date": "string (optional)",
    }],
    "additional_info": {
        "desired_salary_range": {"min": "number (optional)", "max": "number (optional)"},
        "preferred_location": "string (optional)",
        "remote_preference": "boolean (optional)",
        "availability": "string (optional)",
    },
    "confidence_scores": {
        "overall": "number 0-1",
        "personal_info": "number 0-1",
        "experience": "number 0-1",
        "education": "number 0-1",
        "skills": "number 0-1",
    },
}

SYSTEM_CONTEXT = """
You are an expert resume parser. Your task is to extract structured information from resume text with high accuracy.

Guidelines:
- Extract all available information, but don't fabricate missing data
- For dates, use YYYY-MM format (e.g., "2023-01", "2020-12")
- If exact dates aren't available, estimate based on context
- Categorize skills appropriately (technical, soft, language, other)
- Assign realistic proficiency levels based on context clues
- Calculate confidence scores based on data clarity and completeness
- For achievements, extract specific accomplishments, metrics, and results
- If salary or location preferences aren't mentioned, leave them empty
- Be conservative with confidence scores - only high scores for very clear data

Focus on accuracy over completeness.
"""


def build_resume_prompt(resume_text: str, filename: str = None) -> str:
    header = f"Filename: {filename}\n\n" if filename else ""
    return f"""Please parse the following resume content and extract structured information:

{header}Resume Content:
{resume_text}

Extract all relevant information according to the specified schema, ensuring accuracy and appropriate confidence scoring."""


def parse_resume_with_ai(resume_text: str, filename: str = None) -> AIResponse:
    client = get_ai_client()
    prompt = build_resume_prompt(resume_text, filename)
    return with_retry(lambda: client.generate_structured(
        prompt, SYSTEM_CONTEXT, RESUME_PARSING_SCHEMA,
        result_model=ResumeParsingResult, max_tokens=4000
    ))


def clean_parsed_resume(data: ResumeParsingResult) -> AIResponse:
    """Required-field checks plus defaults for is_current, achievements and confidence."""
    info = data.personal_info
    if not info.full_name or not info.email:
        return AIResponse(success=False, error="Missing required personal information (name or email)")

    if not EMAIL_RE.match(info.email):
        return AIResponse(success=False, error="Invalid email format detected")

    for entry in [*data.experience, *data.education]:
        entry.is_current = entry.is_current or not entry.end_date
        if entry.achievements is None:
            entry.achievements = []

    if data.confidence_scores is None:
        data.confidence_scores = ConfidenceScores()

    return AIResponse(success=True, data=data, confidence=data.confidence_scores.overall)


def parse_and_validate_resume(resume_text: str, filename: str = None) -> AIResponse:
    """`data` is a cleaned ResumeParsingResult on success."""
    result = parse_resume_with_ai(resume_text, filename)
    if not result.success or result.data is None:
        return result
    return clean_parsed_resume(result.data)
