#!/usr/bin/env python3
"""
Demo Data Script

Inserts a demo employer with a company and a published job, and a demo job
seeker with a few skills. Existing demo accounts are left untouched.
Usage: python scripts/seed_demo_data.py
"""
import sys
sys.path.insert(0, '.')

from jobboard.core.errors import ConflictError
from jobboard.db.postgres import fetch_one
from jobboard.schemas.schemas import JobCreate, RegisterRequest, SkillAdd
from jobboard.services import auth_service, job_service, profile_service

DEMO_PASSWORD = "demo-password-123"


def ensure_user(email: str, full_name: str, role: str, company_name: str = None) -> int:
    try:
        user_id = auth_service.register(RegisterRequest(
            email=email, password=DEMO_PASSWORD, full_name=full_name,
            role=role, company_name=company_name
        ))
        print(f"    ✅ Created {role} {email}")
        return user_id
    except ConflictError:
        print(f"    ⏭️  {email} already exists")
        return fetch_one("SELECT user_id FROM users WHERE email = :email", {"email": email})["user_id"]


def main():
    print("[1] Employer...")
    employer_id = ensure_user("employer@demo.jobboard", "Demo Employer", "employer", "Demo Labs")
    company = profile_service.get_company(employer_id)

    print("[2] Job...")
    existing = fetch_one(
        "SELECT job_id FROM jobs WHERE company_id = :cid AND title = :title",
        {"cid": company["company_id"], "title": "Backend Engineer"}
    )
    if existing:
        print(f"    ⏭️  Job {existing['job_id']} already exists")
    else:
        job_id = job_service.create_job(company["company_id"], JobCreate(
            title="Backend Engineer",
            description="Build and run the APIs behind our hiring platform.",
            requirements="3+ years of Python, PostgreSQL, REST APIs",
            location="Remote",
            job_type="full_time",
            experience_level="mid",
            salary_min=60000,
            salary_max=90000,
            remote_allowed=True,
            required_skills=["Python", "PostgreSQL"],
            preferred_skills=["FastAPI", "MongoDB"],
        ))
        print(f"    ✅ Created job {job_id}")

    print("[3] Job seeker...")
    seeker_id = ensure_user("seeker@demo.jobboard", "Demo Seeker", "job_seeker")
    for name, level in [("Python", 4), ("PostgreSQL", 3), ("FastAPI", 3)]:
        profile_service.add_skill(seeker_id, SkillAdd(skill_name=name, proficiency=level))
    print("    ✅ Skills set")

    print(f"\nDone. Both demo accounts use the password '{DEMO_PASSWORD}'.")


if __name__ == "__main__":
    main()
