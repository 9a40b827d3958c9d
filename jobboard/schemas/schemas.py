"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
AI output shapes live in ai_schemas.py.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from jobboard.core.auth import normalize_role


def _current_year() -> int:
    return datetime.now().year


def _optional_url(value: Optional[str]) -> Optional[str]:
    """Empty string means 'clear the field'; anything else must be http(s)."""
    if value is None:
        return None
    value = value.strip()
    if value == "":
        return ""
    if not value.startswith(("http://", "https://")):
        raise ValueError("Must be a valid URL starting with http:// or https://")
    return value


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    job_seeker = "job_seeker"
    employer = "employer"


class JobType(str, Enum):
    full_time = "full_time"
    part_time = "part_time"
    contract = "contract"
    internship = "internship"


class ExperienceLevel(str, Enum):
    entry = "entry"
    junior = "junior"
    mid = "mid"
    senior = "senior"
    executive = "executive"


class JobStatus(str, Enum):
    draft = "draft"
    published = "published"
    closed = "closed"
    cancelled = "cancelled"


class NewJobStatus(str, Enum):
    draft = "draft"
    published = "published"


class ApplicationStatus(str, Enum):
    pending = "pending"
    reviewing = "reviewing"
    interview = "interview"
    interviewed = "interviewed"
    offered = "offered"
    accepted = "accepted"
    rejected = "rejected"
    hired = "hired"


class CompanySize(str, Enum):
    tiny = "1-10"
    small = "11-50"
    medium = "51-200"
    large = "201-500"
    xlarge = "501-1000"
    enterprise = "1000+"


class RoleType(str, Enum):
    specialist = "specialist"
    manager = "manager"


class ProbationRecommendation(str, Enum):
    yes = "yes"
    no = "no"
    never_consider = "never_consider"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    full_name: str = Field(..., min_length=2, max_length=200)
    role: UserRole
    company_name: Optional[str] = Field(None, max_length=200)

    @field_validator("role", mode="before")
    @classmethod
    def normalize(cls, v):
        return normalize_role(v) if isinstance(v, str) else v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    role: str


class UserResponse(BaseModel):
    user_id: int
    email: str
    role: str
    full_name: Optional[str] = None
    is_active: bool
    created_at: datetime


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str
    password: str = Field(..., min_length=8)
    confirm_password: Optional[str] = None

    @model_validator(mode="after")
    def passwords_match(self):
        if self.confirm_password and self.confirm_password != self.password:
            raise ValueError("Passwords do not match")
        return self


# ============================================================
# PROFILE SCHEMAS
# ============================================================

class JobSeekerProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=2, max_length=200)
    title: Optional[str] = Field(None, max_length=200)
    summary: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=200)
    linkedin_url: Optional[str] = None
    github_url: Optional[str] = None
    portfolio_url: Optional[str] = None

    @field_validator("linkedin_url", "github_url", "portfolio_url")
    @classmethod
    def check_urls(cls, v):
        return _optional_url(v)


class JobSeekerProfileResponse(BaseModel):
    user_id: int
    email: str
    full_name: Optional[str] = None
    title: Optional[str] = None
    summary: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    linkedin_url: Optional[str] = None
    github_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    productivity_assessment_completed: bool = False
    skills: List[Dict[str, Any]] = []
    experiences: List[Dict[str, Any]] = []
    educations: List[Dict[str, Any]] = []


class SkillAdd(BaseModel):
    skill_name: str = Field(..., min_length=1, max_length=100)
    proficiency: int = Field(3, ge=1, le=5)
    years_experience: Optional[int] = Field(None, ge=0, le=60)


class ExperienceCreate(BaseModel):
    position: str = Field(..., min_length=1, max_length=200)
    company: str = Field(..., min_length=1, max_length=200)
    start_date: date
    end_date: Optional[date] = None
    description: Optional[str] = None
    is_current: bool = False

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date is None:
            self.is_current = True
        elif self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self


class EducationCreate(BaseModel):
    institution: str = Field(..., min_length=1, max_length=200)
    degree: str = Field(..., min_length=1, max_length=200)
    field_of_study: Optional[str] = Field(None, max_length=200)
    graduation_year: Optional[int] = None

    @field_validator("graduation_year")
    @classmethod
    def check_year(cls, v):
        if v is not None and not (1900 <= v <= _current_year() + 10):
            raise ValueError("Graduation year is out of range")
        return v


class CompanyUpsert(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    description: Optional[str] = None
    website: Optional[str] = None
    company_size: Optional[CompanySize] = None
    industry: Optional[str] = Field(None, max_length=100)
    founded_year: Optional[int] = None
    headquarters: Optional[str] = Field(None, max_length=200)
    company_culture: Optional[str] = None
    hr_email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)

    @field_validator("website")
    @classmethod
    def check_website(cls, v):
        return _optional_url(v)

    @field_validator("founded_year")
    @classmethod
    def check_founded(cls, v):
        if v is not None and not (1800 <= v <= _current_year()):
            raise ValueError("Founded year is out of range")
        return v

    @field_validator("hr_email", mode="before")
    @classmethod
    def blank_email(cls, v):
        return None if v == "" else v


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobCreate(BaseModel):
    title: str = Field(..., min_length=2, max_length=200)
    description: str = Field(..., min_length=10)
    requirements: Optional[str] = None
    responsibilities: Optional[str] = None
    location: Optional[str] = Field(None, max_length=200)
    job_type: JobType = JobType.full_time
    experience_level: ExperienceLevel = ExperienceLevel.mid
    salary_min: Optional[int] = Field(None, ge=0)
    salary_max: Optional[int] = Field(None, ge=0)
    currency: str = Field("USD", min_length=3, max_length=3)
    remote_allowed: bool = False
    status: NewJobStatus = NewJobStatus.published
    required_skills: List[str] = []
    preferred_skills: List[str] = []

    @model_validator(mode="after")
    def check_salary(self):
        if self.salary_min is not None and self.salary_max is not None and self.salary_min > self.salary_max:
            raise ValueError("Minimum salary cannot exceed maximum salary")
        return self


class JobUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = Field(None, min_length=10)
    requirements: Optional[str] = None
    responsibilities: Optional[str] = None
    location: Optional[str] = None
    job_type: Optional[JobType] = None
    experience_level: Optional[ExperienceLevel] = None
    salary_min: Optional[int] = Field(None, ge=0)
    salary_max: Optional[int] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    remote_allowed: Optional[bool] = None
    required_skills: Optional[List[str]] = None
    preferred_skills: Optional[List[str]] = None


class JobStatusUpdate(BaseModel):
    status: JobStatus


class JobSearchFilters(BaseModel):
    keyword: Optional[str] = None
    location: Optional[str] = None
    job_type: Optional[JobType] = None
    experience_level: Optional[ExperienceLevel] = None
    remote_allowed: Optional[bool] = None
    page: int = Field(1, ge=1)
    page_size: int = Field(20, ge=1, le=100)


class JobCreatedResponse(BaseModel):
    success: bool = True
    job_id: int
    message: str


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(BaseModel):
    job_id: int
    cover_letter: Optional[str] = None


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus
    notes: Optional[str] = None

    @field_validator("status")
    @classmethod
    def not_pending(cls, v):
        if v == ApplicationStatus.pending:
            raise ValueError("Applications cannot be moved back to pending")
        return v


class ApplicationStats(BaseModel):
    total: int = 0
    pending: int = 0
    reviewing: int = 0
    interviewed: int = 0
    offered: int = 0
    hired: int = 0
    accepted: int = 0
    rejected: int = 0


# ============================================================
# MATCH SCORE SCHEMAS
# ============================================================

class MatchScoreQueueRequest(BaseModel):
    job_id: int


class MatchScoreSummary(BaseModel):
    job_id: int
    score: int
    explanation: str
    confidence: float


# ============================================================
# PERSONALITY SCHEMAS
# ============================================================

class PersonalityQuestion(BaseModel):
    question_id: Optional[int] = None
    question_text: str
    category: str
    order_index: int


class PersonalitySubmitRequest(BaseModel):
    # Keys are the 1-based question positions ("1", "2", ...)
    responses: Dict[str, str]

    @field_validator("responses")
    @classmethod
    def non_empty(cls, v):
        cleaned = {k: text.strip() for k, text in v.items() if text and text.strip()}
        if not cleaned:
            raise ValueError("No questionnaire responses provided")
        return cleaned


class PersonalityStatusResponse(BaseModel):
    success: bool = True
    status: str
    queued_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    error: Optional[str] = None
    last_updated: Optional[datetime] = None
    is_ready: bool = False


# ============================================================
# PRODUCTIVITY SCHEMAS
# ============================================================

class WorkExperienceInput(BaseModel):
    company_name: str = Field(..., min_length=1, max_length=200)
    company_activities: Optional[str] = None
    position: str = Field(..., min_length=1, max_length=200)
    start_date: str = Field(..., min_length=1)
    end_date: Optional[str] = None
    is_current: bool = False
    work_duration: Optional[str] = None
    reason_for_leaving: Optional[str] = None
    functions_performed: Optional[str] = None
    work_products: Optional[str] = None
    result_measurement: Optional[str] = None
    product_timeline: Optional[str] = None
    team_comparison_score: Optional[int] = Field(None, ge=1, le=5)
    workload_change_over_time: Optional[str] = None
    responsibility_evolution: Optional[str] = None
    key_achievements: Optional[str] = None


class KnowledgeInput(BaseModel):
    recent_learning_activities: Optional[str] = None
    professional_development: Optional[str] = None
    future_learning_goals: Optional[str] = None


class ProductivityAssessmentCreate(BaseModel):
    # Personal context
    residence_location: Optional[str] = None
    minimum_salary_requirement: Optional[int] = Field(None, ge=0)

    # Assessment scores
    role_type: Optional[RoleType] = None
    motivation_level: Optional[int] = Field(None, ge=1, le=4)
    iq_test_score: Optional[int] = None
    personality_test_score: Optional[int] = None
    leadership_test_score: Optional[int] = None

    # Conclusion (left empty to let the AI scorer fill it)
    overall_productivity_score: Optional[int] = Field(None, ge=0, le=100)
    assessor_notes: Optional[str] = None
    probation_recommendation: Optional[ProbationRecommendation] = None
    planned_start_date: Optional[date] = None

    work_experiences: List[WorkExperienceInput] = Field(..., min_length=1)
    knowledge_assessment: KnowledgeInput = KnowledgeInput()


class ShareLinkResponse(BaseModel):
    success: bool = True
    token: str
    url: str
    expires_at: datetime


class ReportVerifyResponse(BaseModel):
    valid: bool
    assessment_id: int


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
