from unittest.mock import MagicMock, patch

import pytest

from jobboard.core.errors import AppError, NotFoundError
from jobboard.schemas.schemas import JobStatus, JobUpdate
from jobboard.services import job_service, profile_service


def _session(db):
    session = MagicMock()
    session.__enter__.return_value = db
    return session


def _deleting(rowcount):
    db = MagicMock()
    db.execute.return_value.rowcount = rowcount
    return db


# ============================================================
# PROFILE
# ============================================================

@pytest.mark.parametrize("delete, message", [
    (profile_service.delete_experience, "Experience not found"),
    (profile_service.delete_education, "Education not found"),
])
def test_deletes_are_scoped_to_owner(delete, message):
    db = _deleting(0)

    with patch("jobboard.services.profile_service.get_db_session", return_value=_session(db)):
        with pytest.raises(NotFoundError, match=message):
            delete(11, 5)

    sql, params = db.execute.call_args[0]
    assert "user_id = :uid" in str(sql)
    assert params == {"id": 5, "uid": 11}


def test_delete_own_experience():
    db = _deleting(1)

    with patch("jobboard.services.profile_service.get_db_session", return_value=_session(db)):
        profile_service.delete_experience(11, 5)

    assert db.execute.call_count == 1


# ============================================================
# JOBS
# ============================================================

def test_update_checks_merged_salary_range():
    db = MagicMock()
    db.execute.return_value.fetchone.return_value = (50000, 90000)

    with patch("jobboard.services.job_service.get_db_session", return_value=_session(db)):
        with pytest.raises(AppError, match="Minimum salary cannot exceed maximum salary"):
            job_service.update_job(7, 1, JobUpdate(salary_min=100000))

    # only the ownership lookup ran
    assert db.execute.call_count == 1


def test_update_requires_changes():
    with pytest.raises(AppError, match="No fields to update"):
        job_service.update_job(7, 1, JobUpdate())


def test_update_job_not_owned():
    db = MagicMock()
    db.execute.return_value.fetchone.return_value = None

    with patch("jobboard.services.job_service.get_db_session", return_value=_session(db)):
        with pytest.raises(NotFoundError, match="permission to update"):
            job_service.update_job(7, 1, JobUpdate(title="Platform Engineer"))


def test_publishing_stamps_posted_at():
    published = {"job_id": 1, "status": "published", "posted_at": "2026-10-01T09:00:00"}

    with patch("jobboard.services.job_service.execute_raw_sql", return_value=[published]) as sql:
        assert job_service.update_job_status(7, 1, JobStatus.published) == published

    statement, params = sql.call_args[0]
    assert "COALESCE(posted_at, CURRENT_TIMESTAMP)" in statement
    assert params == {"id": 1, "company_id": 7, "status": "published"}


def test_status_update_on_foreign_job():
    with patch("jobboard.services.job_service.execute_raw_sql", return_value=[]):
        with pytest.raises(NotFoundError):
            job_service.update_job_status(7, 1, JobStatus.closed)
