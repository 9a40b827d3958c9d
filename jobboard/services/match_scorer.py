"""
Match Scorer

Asks the model for a 0-100 compatibility estimate between a candidate
and a job, broken down into four weighted components:

    skills 30% | experience 25% | culture fit 20% | personality 25%
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Tuple

from jobboard.schemas.ai_schemas import CandidateData, JobData, MatchScoreResult, QuickMatchScore
from jobboard.services.ai_client import AIResponse, get_ai_client, with_retry

logger = logging.getLogger(__name__)

BATCH_SIZE = 3
BATCH_DELAY_SECONDS = 1.0
QUICK_SCORE_FALLBACK = 50

MATCH_SCORE_SCHEMA = {
    "overall_score": "number 0-100 - weighted average of all component scores",
    "skills_match_score": "number 0-100 - how well candidate skills match job requirements",
    "experience_match_score": "number 0-100 - relevance of candidate experience to role",
    "culture_fit_score": "number 0-100 - alignment with company culture and values",
    "personality_match_score": "number 0-100 - personality fit for role requirements",
    "match_explanation": "string - 2-3 sentences explaining overall compatibility",
    "strengths": "string - key strengths that make this a good match",
    "potential_concerns": "string - areas where candidate might not be ideal fit",
    "confidence_score": "number 0-1 - AI confidence in this analysis",
    "recommendations": ["array of strings - specific recommendations for both candidate and employer"],
}

SYSTEM_CONTEXT = """
You are an expert HR analyst specializing in candidate-job matching. Your task is to evaluate how well a candidate fits a specific job role across multiple dimensions.

Evaluation Criteria:
1. Skills Match (30% weight): Compare required/preferred skills with candidate skills and proficiency levels
2. Experience Match (25% weight): Relevance of work history, years of experience, and career progression
3. Culture Fit (20% weight): Alignment with company culture, work style preferences, and team dynamics
4. Personality Match (25% weight): Soft skills alignment with role requirements and team needs

Scoring Guidelines:
- 90-100: Exceptional fit, ideal candidate
- 80-89: Strong fit, highly recommended
- 70-79: Good fit, recommended with minor concerns
- 60-69: Moderate fit, considerable evaluation needed
- 50-59: Weak fit, significant concerns
- 0-49: Poor fit, not recommended

Be objective and evidence-based. Consider both strengths and weaknesses. Factor in the seniority level of the role when evaluating experience requirements.
Balance technical skills with soft skills appropriately for small and mid-sized teams.
"""


def build_job_summary(job: JobData) -> str:
    location = job.location + (" (Remote allowed)" if job.remote_allowed else "")
    return f"""JOB DETAILS:
Title: {job.title}
Company: {job.company_name or 'Not specified'}
Experience Level: {job.experience_level}
Job Type: {job.job_type}
Location: {location}

Description: {job.description}
Requirements: {job.requirements}
Responsibilities: {job.responsibilities}

Required Skills: {', '.join(job.required_skills)}
Preferred Skills: {', '.join(job.preferred_skills)}
Company Culture: {job.company_culture or 'Not specified'}"""


def build_candidate_summary(candidate: CandidateData) -> str:
    skills = ", ".join(f"{s.name} (Level {s.proficiency_level}/5)" for s in candidate.skills)
    experience = "\n".join(
        f"{e.job_title} at {e.company_name} ({e.years:g} years): {e.description}"
        for e in candidate.experience
    )
    education = "\n".join(
        f"{e.degree} in {e.field_of_study} from {e.institution_name}"
        for e in candidate.education
    )

    p = candidate.personality_analysis
    if p:
        personality = f"""PERSONALITY ANALYSIS:
- Problem Solving Style: {p.problem_solving_style}
- Work Preference: {p.work_preference}
- Analytical Score: {p.analytical_score}/100
- Creative Score: {p.creative_score}/100
- Leadership Score: {p.leadership_score}/100
- Teamwork Score: {p.teamwork_score}/100
- Key Strengths: {', '.join(p.strengths)}"""
    else:
        personality = "Personality analysis not available"

    years = f"{candidate.experience_years:g}" if candidate.experience_years is not None else "Not specified"
    return f"""CANDIDATE PROFILE:
Name: {candidate.full_name}
Current Title: {candidate.current_job_title or 'Not specified'}
Total Experience: {years} years
Preferred Location: {candidate.preferred_location or 'Not specified'}
Remote Preference: {'Yes' if candidate.remote_preference else 'No'}

SKILLS: {skills}

EXPERIENCE:
{experience}

EDUCATION:
{education}

{personality}"""


def build_match_prompt(job: JobData, candidate: CandidateData) -> str:
    return f"""Please evaluate the compatibility between this job and candidate, providing detailed scoring across all dimensions:

{build_job_summary(job)}

{build_candidate_summary(candidate)}

Analyze the match quality considering:
1. Technical skills alignment and proficiency levels
2. Experience relevance and career progression fit
3. Cultural alignment and work style compatibility
4. Personality traits alignment with role requirements
5. Location and remote work preferences

Provide specific, actionable insights in your analysis."""


def calculate_match_score(job: JobData, candidate: CandidateData) -> AIResponse:
    """AI match score for one candidate/job pair. `data` is a MatchScoreResult."""
    client = get_ai_client()
    prompt = build_match_prompt(job, candidate)
    return with_retry(lambda: client.generate_structured(
        prompt, SYSTEM_CONTEXT, MATCH_SCORE_SCHEMA, result_model=MatchScoreResult
    ))


def calculate_batch_match_scores(
    job: JobData,
    candidates: List[CandidateData],
    sleep: Callable[[float], None] = time.sleep,
) -> List[Tuple[CandidateData, AIResponse]]:
    """
    Score many candidates against one job.
    Runs BATCH_SIZE calls concurrently, pausing between batches to stay under rate limits.
    Results keep the input order.
    """
    results = []
    with ThreadPoolExecutor(max_workers=BATCH_SIZE) as executor:
        for start in range(0, len(candidates), BATCH_SIZE):
            batch = candidates[start:start + BATCH_SIZE]
            scores = list(executor.map(lambda c: calculate_match_score(job, c), batch))
            results.extend(zip(batch, scores))

            if start + BATCH_SIZE < len(candidates):
                sleep(BATCH_DELAY_SECONDS)
    return results


def quick_match_score(
    job_title: str,
    job_requirements: str,
    candidate_skills: List[str],
    candidate_experience: str,
) -> int:
    """Single-number estimate for real-time use; no retries, 50 on any failure."""
    prompt = f"""Job: {job_title}
Requirements: {job_requirements}
Candidate Skills: {', '.join(candidate_skills)}
Experience: {candidate_experience}

Match score (0-100 only):"""

    try:
        result = get_ai_client().generate_structured(
            prompt,
            "You are a quick job-candidate matcher. Provide only a single number from 0-100 representing match quality.",
            {"score": "number 0-100"},
            result_model=QuickMatchScore,
            max_tokens=50,
        )
    except Exception:
        logger.exception("Quick match score failed")
        return QUICK_SCORE_FALLBACK

    if result.success and result.data:
        return result.data.score
    return QUICK_SCORE_FALLBACK
