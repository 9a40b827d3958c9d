from unittest.mock import MagicMock, patch

import pytest

from jobboard.core.errors import AppError, ConflictError, NotFoundError, PermissionDeniedError
from jobboard.schemas.schemas import ApplicationStatusUpdate
from jobboard.services import application_service

SEEKER = {"user_id": 11, "role": "job_seeker"}
EMPLOYER = {"user_id": 21, "role": "employer", "company_id": 7}


def test_employers_cannot_apply():
    with pytest.raises(PermissionDeniedError):
        application_service.apply_to_job(EMPLOYER, 1)


def test_apply_checks_job_state():
    with patch("jobboard.services.application_service.fetch_one", return_value=None):
        with pytest.raises(NotFoundError, match="Job not found"):
            application_service.apply_to_job(SEEKER, 1)

    with patch("jobboard.services.application_service.fetch_one", return_value={"job_id": 1, "status": "closed"}):
        with pytest.raises(AppError, match="not accepting applications"):
            application_service.apply_to_job(SEEKER, 1)


def test_second_application_conflicts():
    published = {"job_id": 1, "status": "published"}

    with patch("jobboard.services.application_service.fetch_one", side_effect=[published, {"application_id": 3}]):
        with pytest.raises(ConflictError, match="already applied"):
            application_service.apply_to_job(SEEKER, 1)

    # lost race: the insert is skipped by the unique constraint
    with patch("jobboard.services.application_service.fetch_one", side_effect=[published, None]), \
            patch("jobboard.services.application_service.execute_raw_sql", return_value=[]):
        with pytest.raises(ConflictError):
            application_service.apply_to_job(SEEKER, 1)


def test_apply_queues_match_scoring():
    published = {"job_id": 1, "status": "published"}
    created = {"application_id": 9, "job_id": 1, "applicant_id": 11, "status": "pending"}
    tasks = MagicMock()

    with patch("jobboard.services.application_service.fetch_one", side_effect=[published, None]), \
            patch("jobboard.services.application_service.execute_raw_sql", return_value=[created]), \
            patch("jobboard.services.application_service.enqueue_match_score_job") as enqueue:
        application = application_service.apply_to_job(SEEKER, 1, "Hello", tasks)

    assert application == created
    enqueue.assert_called_once_with(tasks, 1, 11)


def test_accepted_application_cannot_be_withdrawn():
    with patch("jobboard.services.application_service.fetch_one",
               return_value={"application_id": 9, "status": "accepted"}), \
            patch("jobboard.services.application_service.execute_raw_sql") as sql:
        with pytest.raises(AppError, match="cannot be withdrawn"):
            application_service.withdraw_application(11, 9)

    sql.assert_not_called()


def test_application_visibility():
    row = {"application_id": 9, "applicant_id": 11, "owner_id": 21, "notes": "strong", "status": "pending"}

    with patch("jobboard.services.application_service.fetch_one", side_effect=lambda *a: dict(row)):
        seen_by_applicant = application_service.get_application(SEEKER, 9)
        seen_by_employer = application_service.get_application(EMPLOYER, 9)
        with pytest.raises(NotFoundError):
            application_service.get_application({"user_id": 99, "role": "job_seeker"}, 9)

    assert "notes" not in seen_by_applicant
    assert "owner_id" not in seen_by_applicant
    assert seen_by_employer["notes"] == "strong"


def test_stats_merge_interview_statuses():
    rows = [{"status": "pending", "count": 3}, {"status": "interview", "count": 1},
            {"status": "interviewed", "count": 2}, {"status": "rejected", "count": 4}]

    with patch("jobboard.services.application_service.assert_job_owned"), \
            patch("jobboard.services.application_service.execute_raw_sql", return_value=rows):
        stats = application_service.get_application_stats(7, 1)

    assert stats.total == 10
    assert stats.interviewed == 3
    assert stats.rejected == 4
    assert stats.hired == 0


def _session_returning(row):
    db = MagicMock()
    db.execute.return_value.mappings.return_value.fetchone.return_value = row
    session = MagicMock()
    session.__enter__.return_value = db
    return session


def test_status_update_requires_ownership():
    with patch("jobboard.services.application_service.get_db_session", return_value=_session_returning(None)):
        with pytest.raises(NotFoundError, match="don't have permission"):
            application_service.update_application_status(7, 9, ApplicationStatusUpdate(status="rejected"))


def test_status_update_notifies_candidate():
    updated = {"application_id": 9, "job_id": 1, "applicant_id": 11, "status": "interview", "notes": None}
    context = {"email": "ada@example.com", "full_name": "Ada", "title": "Dev", "company_name": "Demo Labs"}

    with patch("jobboard.services.application_service.get_db_session", return_value=_session_returning(updated)), \
            patch("jobboard.services.application_service.fetch_one", return_value=context), \
            patch("jobboard.services.notification_service."
                  "notify_application_status_change",
                  return_value={"delivered": True, "reason": None}) as notify:
        application = application_service.update_application_status(
            7, 9, ApplicationStatusUpdate(status="interview", notes="Tuesday 10am")
        )

    assert application["notification"] == {"delivered": True, "reason": None}
    kwargs = notify.call_args.kwargs
    assert kwargs["candidate_email"] == "ada@example.com"
    assert kwargs["status"] == "interview"
    assert kwargs["notes"] == "Tuesday 10am"
