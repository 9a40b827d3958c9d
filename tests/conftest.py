import pytest
from fastapi.testclient import TestClient

from jobboard.core.auth import get_current_user, get_optional_user, require_employer, require_job_seeker
from jobboard.main import app


@pytest.fixture
def job_seeker():
    return {"user_id": 11, "email": "seeker@example.com", "role": "job_seeker", "full_name": "Ada Seeker"}


@pytest.fixture
def employer():
    return {"user_id": 21, "email": "boss@example.com", "role": "employer",
            "full_name": "Eve Employer", "company_id": 7}


@pytest.fixture
def client():
    # startup hooks only run inside `with TestClient(...)`, so no MongoDB is needed here
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seeker_client(client, job_seeker):
    app.dependency_overrides[get_current_user] = lambda: job_seeker
    app.dependency_overrides[get_optional_user] = lambda: job_seeker
    app.dependency_overrides[require_job_seeker] = lambda: job_seeker
    return client


@pytest.fixture
def employer_client(client, employer):
    app.dependency_overrides[get_current_user] = lambda: employer
    app.dependency_overrides[require_employer] = lambda: employer
    return client
