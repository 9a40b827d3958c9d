"""
AI Output Schemas

Shapes of the JSON the generative model is asked to return, plus the
structured inputs the prompt builders take. Model output is validated
against these before anything is stored.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


def _round_number(v):
    if isinstance(v, float):
        return int(round(v))
    return v


# ============================================================
# MATCH SCORING
# ============================================================

class JobData(BaseModel):
    title: str
    company_name: Optional[str] = None
    description: str = ""
    requirements: str = ""
    responsibilities: str = ""
    experience_level: str = ""
    job_type: str = ""
    location: str = ""
    remote_allowed: bool = False
    company_culture: Optional[str] = None
    required_skills: List[str] = []
    preferred_skills: List[str] = []


class CandidateSkill(BaseModel):
    name: str
    proficiency_level: int = 3


class CandidateExperience(BaseModel):
    job_title: str
    company_name: str
    description: str = ""
    years: float = 0


class CandidateEducation(BaseModel):
    degree: str
    field_of_study: str = ""
    institution_name: str


class CandidatePersonality(BaseModel):
    problem_solving_style: str = ""
    work_preference: str = ""
    analytical_score: int = 75
    creative_score: int = 75
    leadership_score: int = 75
    teamwork_score: int = 75
    strengths: List[str] = []


class CandidateData(BaseModel):
    full_name: str
    experience_years: Optional[float] = None
    current_job_title: Optional[str] = None
    skills: List[CandidateSkill] = []
    experience: List[CandidateExperience] = []
    education: List[CandidateEducation] = []
    personality_analysis: Optional[CandidatePersonality] = None
    preferred_location: Optional[str] = None
    remote_preference: Optional[bool] = None


class MatchScoreResult(BaseModel):
    overall_score: int = Field(..., ge=0, le=100)
    skills_match_score: int = Field(..., ge=0, le=100)
    experience_match_score: int = Field(..., ge=0, le=100)
    culture_fit_score: int = Field(..., ge=0, le=100)
    personality_match_score: int = Field(..., ge=0, le=100)
    match_explanation: str = ""
    strengths: str = ""
    potential_concerns: str = ""
    confidence_score: float = Field(0.5, ge=0, le=1)
    recommendations: List[str] = []

    @field_validator(
        "overall_score", "skills_match_score", "experience_match_score",
        "culture_fit_score", "personality_match_score", mode="before"
    )
    @classmethod
    def round_scores(cls, v):
        return _round_number(v)


class QuickMatchScore(BaseModel):
    score: int = Field(..., ge=0, le=100)

    @field_validator("score", mode="before")
    @classmethod
    def round_score(cls, v):
        return _round_number(v)


# ============================================================
# PERSONALITY
# ============================================================

class QuestionResponse(BaseModel):
    question_id: Optional[str] = None
    question_text: str
    response_text: str
    category: Optional[str] = None


class PersonalityAnalysisResult(BaseModel):
    # Checked by validate_personality_analysis, so kept permissive here
    problem_solving_style: str = ""
    initiative_level: str = ""
    work_preference: str = ""
    motivational_factors: str = ""
    growth_areas: str = ""
    communication_style: str = ""
    leadership_potential: str = ""

    analytical_score: Optional[float] = None
    creative_score: Optional[float] = None
    leadership_score: Optional[float] = None
    teamwork_score: Optional[float] = None

    personality_summary: str = ""
    strengths: List[str] = []
    development_areas: List[str] = []
    ideal_work_environment: str = ""

    confidence_score: Optional[float] = None
    analysis_notes: str = ""


# ============================================================
# PRODUCTIVITY
# ============================================================

class ProductivityScoreResult(BaseModel):
    overall_productivity_score: int = Field(..., ge=0, le=100)
    probation_recommendation: Literal["yes", "no", "never_consider"]
    assessor_notes: str = ""
    confidence_score: float = Field(0.5, ge=0, le=1)

    @field_validator("overall_productivity_score", mode="before")
    @classmethod
    def round_score(cls, v):
        return _round_number(v)


# ============================================================
# RESUME PARSING
# ============================================================

class ParsedPersonalInfo(BaseModel):
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    linkedin_url: Optional[str] = None
    github_url: Optional[str] = None
    portfolio_url: Optional[str] = None


class ParsedExperience(BaseModel):
    job_title: str
    company_name: str
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    is_current: bool = False
    description: str = ""
    achievements: Optional[List[str]] = None


class ParsedEducation(BaseModel):
    institution_name: str
    degree: str
    field_of_study: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    is_current: bool = False
    gpa: Optional[str] = None
    achievements: Optional[List[str]] = None


class ParsedSkill(BaseModel):
    name: str
    category: Literal["technical", "soft", "language", "other"] = "other"
    proficiency_level: int = 3

    @field_validator("proficiency_level", mode="before")
    @classmethod
    def clamp_level(cls, v):
        if isinstance(v, (int, float)):
            return min(5, max(1, int(round(v))))
        return 3


class ParsedLanguage(BaseModel):
    name: str
    proficiency: Optional[str] = None


class ParsedCertification(BaseModel):
    name: str
    issuer: Optional[str] = None
    date_obtained: Optional[str] = None
    expiry_date: Optional[str] = None


class SalaryRange(BaseModel):
    min: Optional[float] = None
    max: Optional[float] = None


class ParsedAdditionalInfo(BaseModel):
    desired_salary_range: Optional[SalaryRange] = None
    preferred_location: Optional[str] = None
    remote_preference: Optional[bool] = None
    availability: Optional[str] = None


class ConfidenceScores(BaseModel):
    overall: float = 0.7
    personal_info: float = 0.8
    experience: float = 0.7
    education: float = 0.7
    skills: float = 0.6


class ResumeParsingResult(BaseModel):
    personal_info: ParsedPersonalInfo = ParsedPersonalInfo()
    professional_summary: str = ""
    experience: List[ParsedExperience] = []
    education: List[ParsedEducation] = []
    skills: List[ParsedSkill] = []
    languages: List[ParsedLanguage] = []
    certifications: List[ParsedCertification] = []
    additional_info: ParsedAdditionalInfo = ParsedAdditionalInfo()
    confidence_scores: Optional[ConfidenceScores] = None
