"""
Profile Routes

Job seeker:
GET    /profile                          - Get own profile (skills, experience, education)
PUT    /profile                          - Update profile fields
GET    /profile/skills                   - List skills
POST   /profile/skills                   - Add or update a skill
DELETE /profile/skills/{skill_id}        - Remove skill
POST   /profile/experiences              - Add experience
DELETE /profile/experiences/{id}         - Remove experience
POST   /profile/educations               - Add education
DELETE /profile/educations/{id}          - Remove education

Employer:
GET    /profile/company                  - Get own company
PUT    /profile/company                  - Create or update company
"""

from fastapi import APIRouter, Depends

from jobboard.core.auth import require_employer, require_job_seeker
from jobboard.core.errors import NotFoundError
from jobboard.schemas.schemas import (
    CompanyUpsert, EducationCreate, ExperienceCreate, JobSeekerProfileResponse,
    JobSeekerProfileUpdate, MessageResponse, SkillAdd
)
from jobboard.services import profile_service

router = APIRouter(prefix="/profile", tags=["Profiles"])


@router.get("", response_model=JobSeekerProfileResponse)
def get_profile(user: dict = Depends(require_job_seeker)):
    return JobSeekerProfileResponse(**profile_service.get_job_seeker_profile(user["user_id"]))


@router.put("", response_model=MessageResponse)
def update_profile(data: JobSeekerProfileUpdate, user: dict = Depends(require_job_seeker)):
    """Partial update. Send an empty string to clear a field."""
    fields = profile_service.update_job_seeker_profile(user["user_id"], data)
    return MessageResponse(message=f"Profile updated: {', '.join(fields)}")


# ============================================================
# SKILLS
# ============================================================

@router.get("/skills")
def get_skills(user: dict = Depends(require_job_seeker)):
    return profile_service.list_skills(user["user_id"])


@router.post("/skills", status_code=201)
def add_skill(skill: SkillAdd, user: dict = Depends(require_job_seeker)):
    skill_id = profile_service.add_skill(user["user_id"], skill)
    return {"success": True, "skill_id": skill_id, "message": f"Skill '{skill.skill_name}' added"}


@router.delete("/skills/{skill_id}", response_model=MessageResponse)
def remove_skill(skill_id: int, user: dict = Depends(require_job_seeker)):
    profile_service.remove_skill(user["user_id"], skill_id)
    return MessageResponse(message="Skill removed")


# ============================================================
# EXPERIENCE & EDUCATION
# ============================================================

@router.get("/experiences")
def get_experiences(user: dict = Depends(require_job_seeker)):
    return profile_service.list_experiences(user["user_id"])


@router.post("/experiences", status_code=201)
def add_experience(data: ExperienceCreate, user: dict = Depends(require_job_seeker)):
    experience_id = profile_service.add_experience(user["user_id"], data)
    return {"success": True, "experience_id": experience_id}


@router.delete("/experiences/{experience_id}", response_model=MessageResponse)
def delete_experience(experience_id: int, user: dict = Depends(require_job_seeker)):
    profile_service.delete_experience(user["user_id"], experience_id)
    return MessageResponse(message="Experience removed")


@router.get("/educations")
def get_educations(user: dict = Depends(require_job_seeker)):
    return profile_service.list_educations(user["user_id"])


@router.post("/educations", status_code=201)
def add_education(data: EducationCreate, user: dict = Depends(require_job_seeker)):
    education_id = profile_service.add_education(user["user_id"], data)
    return {"success": True, "education_id": education_id}


@router.delete("/educations/{education_id}", response_model=MessageResponse)
def delete_education(education_id: int, user: dict = Depends(require_job_seeker)):
    profile_service.delete_education(user["user_id"], education_id)
    return MessageResponse(message="Education removed")


# ============================================================
# COMPANY
# ============================================================

@router.get("/company")
def get_company(user: dict = Depends(require_employer)):
    company = profile_service.get_company(user["user_id"])
    if not company:
        raise NotFoundError("Company profile not found")
    return company


@router.put("/company")
def upsert_company(data: CompanyUpsert, user: dict = Depends(require_employer)):
    company_id = profile_service.upsert_company(user["user_id"], data)
    return {"success": True, "company_id": company_id, "message": "Company profile saved"}
