from datetime import datetime, timedelta
from unittest.mock import patch

import pytest

from jobboard.core.errors import AppError, NotFoundError
from jobboard.services import report_service

COMPLETED_AT = datetime(2026, 3, 2, 9, 30, 0)


def test_signing_timestamp_prefers_completed_at():
    assert report_service.signing_timestamp({"completed_at": COMPLETED_AT, "created_at": None}) == \
        "2026-03-02T09:30:00"
    assert report_service.signing_timestamp({"completed_at": None, "created_at": COMPLETED_AT}) == \
        "2026-03-02T09:30:00"
    assert report_service.signing_timestamp({}) == ""


def test_signature_depends_on_secret_and_payload():
    sig = report_service.sign_assessment(5, "2026-03-02T09:30:00", secret="s3cret")

    assert len(sig) == 64
    assert sig == report_service.sign_assessment(5, "2026-03-02T09:30:00", secret="s3cret")
    assert sig != report_service.sign_assessment(6, "2026-03-02T09:30:00", secret="s3cret")
    assert sig != report_service.sign_assessment(5, "2026-03-02T09:30:00", secret="other")


def test_verify_accepts_own_signature_only():
    assessment = {"assessment_id": 5, "completed_at": COMPLETED_AT, "created_at": COMPLETED_AT}
    good = report_service.sign_assessment(5, "2026-03-02T09:30:00")

    with patch("jobboard.services.report_service.fetch_one", return_value=assessment):
        assert report_service.verify_report(5, good).valid is True
        assert report_service.verify_report(5, "0" * 64).valid is False


def test_verify_requires_params_and_known_assessment():
    with pytest.raises(AppError, match="Missing params"):
        report_service.verify_report(None, "abc")

    with patch("jobboard.services.report_service.fetch_one", return_value=None):
        with pytest.raises(NotFoundError):
            report_service.verify_report(99, "abc")


def test_verify_url_points_at_api():
    url = report_service.build_verify_url({"assessment_id": 5, "completed_at": COMPLETED_AT})

    assert "/api/productivity/report/verify?assessment_id=5&sig=" in url


def test_share_link_needs_an_assessment():
    with patch("jobboard.services.report_service.get_latest_assessment", return_value=None):
        with pytest.raises(AppError, match="No assessment found"):
            report_service.create_share_link(11)


def test_share_link_is_stored_with_expiry():
    with patch("jobboard.services.report_service.get_latest_assessment", return_value={"assessment_id": 5}), \
            patch("jobboard.services.report_service.execute_raw_sql") as sql:
        link = report_service.create_share_link(11)

    params = sql.call_args[0][1]
    assert len(link.token) == 32
    assert params["token"] == link.token
    assert params["aid"] == 5
    assert link.url.endswith(f"/share/{link.token}")
    assert timedelta(days=6) < link.expires_at - datetime.utcnow() <= timedelta(days=7)


def test_unknown_share_token_is_404():
    with patch("jobboard.services.report_service.fetch_one", return_value=None):
        with pytest.raises(NotFoundError):
            report_service.get_shared_report("nope")


def test_expired_share_token_is_410():
    shared = {"assessment_id": 5, "user_id": 11, "expires_at": datetime(2026, 1, 1)}

    with patch("jobboard.services.report_service.fetch_one", return_value=shared):
        with pytest.raises(AppError) as exc:
            report_service.get_shared_report("tok", now=datetime(2026, 1, 2))

    assert exc.value.status_code == 410


def test_shared_report_hides_personal_context():
    shared = {"assessment_id": 5, "user_id": 11, "expires_at": datetime(2026, 1, 8)}
    assessment = {"assessment_id": 5, "overall_productivity_score": 70, "residence_location": "Riga",
                  "minimum_salary_requirement": 3000, "assessor_notes": "private"}

    with patch("jobboard.services.report_service.fetch_one", side_effect=[shared, assessment]), \
            patch("jobboard.services.report_service.get_assessment_details",
                  side_effect=lambda uid, a: {"assessment": a, "work_experiences": [],
                                              "knowledge_assessment": None}):
        report = report_service.get_shared_report("tok", now=datetime(2026, 1, 2))

    assert report["assessment"] == {"assessment_id": 5, "overall_productivity_score": 70}
    assert report["expires_at"] == datetime(2026, 1, 8)


def test_rendered_report_is_a_pdf():
    details = {
        "assessment": {"assessment_id": 5, "role_type": "specialist", "overall_productivity_score": 81,
                       "motivation_level": 3, "completed_at": COMPLETED_AT},
        "work_experiences": [{"company_name": "Acme & Co", "position": "Analyst",
                              "start_date": "2020-01", "end_date": None}],
        "knowledge_assessment": {"recent_learning_activities": "Statistics <course>"},
    }

    pdf = report_service.render_report_pdf(details, full_name="Ada Seeker")

    assert pdf.startswith(b"%PDF")


def test_report_pdf_needs_an_assessment():
    with patch("jobboard.services.report_service.get_latest_assessment", return_value=None):
        with pytest.raises(NotFoundError):
            report_service.build_report_pdf(11)
