from datetime import datetime, timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest

from jobboard.services import dashboard_service

NOW = datetime(2026, 5, 20, 12, 0)


@pytest.mark.parametrize("days, label", [
    (0, "Today"),
    (1, "Yesterday"),
    (3, "3 days ago"),
    (7, "1 week ago"),
    (13, "1 week ago"),
    (20, "2 weeks ago"),
    (35, "1 month ago"),
    (95, "3 months ago"),
])
def test_relative_date_labels(days, label):
    assert dashboard_service.format_relative_date(NOW - timedelta(days=days, hours=1), NOW) == label


def test_unposted_job_label():
    assert dashboard_service.format_relative_date(None, NOW) == "Not posted"


def test_stats_without_company_are_zero():
    with patch("jobboard.services.dashboard_service.execute_raw_sql") as sql:
        stats = dashboard_service.get_dashboard_stats(None, NOW)

    sql.assert_not_called()
    assert stats == {"active_jobs": 0, "new_candidates": 0, "weekly_interviews": 0, "average_match_score": 0}


def test_stats_round_average_score():
    row = {"active_jobs": 2, "new_candidates": 5, "weekly_interviews": None,
           "average_match_score": Decimal("77.6")}

    with patch("jobboard.services.dashboard_service.execute_raw_sql", return_value=[row]) as sql:
        stats = dashboard_service.get_dashboard_stats(7, NOW)

    assert stats == {"active_jobs": 2, "new_candidates": 5, "weekly_interviews": 0, "average_match_score": 78}
    assert sql.call_args[0][1] == {"cid": 7, "since": NOW - timedelta(days=7)}


def test_active_jobs_get_posted_labels():
    jobs = [{"job_id": 1, "title": "Dev", "status": "published", "posted_at": NOW - timedelta(days=2),
             "company_name": "Demo Labs", "total_candidates": 4, "new_candidates": 1}]

    with patch("jobboard.services.dashboard_service.execute_raw_sql", return_value=jobs):
        active = dashboard_service.get_active_jobs(7, NOW)

    assert active[0]["posted_label"] == "2 days ago"
