from datetime import date

import pytest
from pydantic import ValidationError

from jobboard.schemas.schemas import (
    ApplicationStatusUpdate, CompanyUpsert, EducationCreate, ExperienceCreate, JobCreate,
    JobSeekerProfileUpdate, PersonalitySubmitRequest, ProductivityAssessmentCreate, RegisterRequest,
    ResetPasswordRequest
)


def test_register_accepts_legacy_role_names():
    request = RegisterRequest(email="ada@example.com", password="longenough", full_name="Ada", role="employee")

    assert request.role.value == "job_seeker"

    with pytest.raises(ValidationError):
        RegisterRequest(email="ada@example.com", password="longenough", full_name="Ada", role="admin")


def test_reset_passwords_must_match():
    request = ResetPasswordRequest(token="t", password="newpassword", confirm_password="newpassword")
    assert request.password == "newpassword"

    with pytest.raises(ValidationError, match="Passwords do not match"):
        ResetPasswordRequest(token="t", password="newpassword", confirm_password="otherpassword")

    # an empty confirmation is treated as not sent
    assert ResetPasswordRequest(token="t", password="newpassword", confirm_password="").password == "newpassword"


def test_profile_urls_need_a_scheme():
    assert JobSeekerProfileUpdate(github_url="").github_url == ""
    assert JobSeekerProfileUpdate(github_url=" https://github.com/ada ").github_url == "https://github.com/ada"

    with pytest.raises(ValidationError, match="Must be a valid URL"):
        JobSeekerProfileUpdate(linkedin_url="linkedin.com/in/ada")


def test_open_ended_experience_is_current():
    exp = ExperienceCreate(position="Dev", company="Acme", start_date=date(2022, 1, 1))
    assert exp.is_current is True

    with pytest.raises(ValidationError, match="End date cannot be before start date"):
        ExperienceCreate(position="Dev", company="Acme", start_date=date(2022, 1, 1), end_date=date(2021, 1, 1))


def test_graduation_and_founding_years():
    with pytest.raises(ValidationError):
        EducationCreate(institution="TU", degree="BSc", graduation_year=1850)

    with pytest.raises(ValidationError):
        CompanyUpsert(name="Demo Labs", founded_year=1700)

    assert CompanyUpsert(name="Demo Labs", hr_email="").hr_email is None


def test_job_salary_range():
    job = JobCreate(title="Backend Engineer", description="Build and run our APIs")
    assert job.status.value == "published"
    assert job.currency == "USD"

    with pytest.raises(ValidationError, match="Minimum salary cannot exceed maximum salary"):
        JobCreate(title="Backend Engineer", description="Build and run our APIs", salary_min=90, salary_max=50)


def test_applications_cannot_return_to_pending():
    assert ApplicationStatusUpdate(status="interview").status.value == "interview"

    with pytest.raises(ValidationError):
        ApplicationStatusUpdate(status="pending")
    with pytest.raises(ValidationError):
        ApplicationStatusUpdate(status="lost")


def test_personality_answers_are_trimmed():
    request = PersonalitySubmitRequest(responses={"1": "  I rewrote it  ", "2": "   "})
    assert request.responses == {"1": "I rewrote it"}

    with pytest.raises(ValidationError, match="No questionnaire responses provided"):
        PersonalitySubmitRequest(responses={"1": " "})


def test_assessment_needs_work_experience():
    with pytest.raises(ValidationError):
        ProductivityAssessmentCreate(work_experiences=[])

    with pytest.raises(ValidationError):
        ProductivityAssessmentCreate(
            motivation_level=5,
            work_experiences=[{"company_name": "Acme", "position": "Analyst", "start_date": "2020-01"}],
        )
