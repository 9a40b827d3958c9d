"""
Dashboard Service - headline numbers for the employer dashboard.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from jobboard.db.postgres import execute_raw_sql

logger = logging.getLogger(__name__)

RECENT_DAYS = 7


def format_relative_date(posted_at: Optional[datetime], now: Optional[datetime] = None) -> str:
    if posted_at is None:
        return "Not posted"
    days = max(((now or datetime.utcnow()) - posted_at).days, 0)
    if days == 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    if days < 7:
        return f"{days} days ago"
    if days < 14:
        return "1 week ago"
    if days < 30:
        return f"{days // 7} weeks ago"
    months = days // 30
    return "1 month ago" if months == 1 else f"{months} months ago"


def get_dashboard_stats(company_id: Optional[int], now: Optional[datetime] = None) -> dict:
    if not company_id:
        return {"active_jobs": 0, "new_candidates": 0, "weekly_interviews": 0, "average_match_score": 0}

    since = (now or datetime.utcnow()) - timedelta(days=RECENT_DAYS)
    row = execute_raw_sql("""
        SELECT
            (SELECT COUNT(*) FROM jobs WHERE company_id = :cid AND status = 'published') AS active_jobs,
            (SELECT COUNT(*) FROM applications a JOIN jobs j ON a.job_id = j.job_id
             WHERE j.company_id = :cid AND a.applied_at >= :since) AS new_candidates,
            (SELECT COUNT(*) FROM applications a JOIN jobs j ON a.job_id = j.job_id
             WHERE j.company_id = :cid AND a.status = 'interview' AND a.applied_at >= :since) AS weekly_interviews,
            (SELECT AVG(ms.overall_score) FROM match_scores ms JOIN jobs j ON ms.job_id = j.job_id
             WHERE j.company_id = :cid) AS average_match_score
    """, {"cid": company_id, "since": since})[0]

    average = row["average_match_score"]
    return {
        "active_jobs": row["active_jobs"] or 0,
        "new_candidates": row["new_candidates"] or 0,
        "weekly_interviews": row["weekly_interviews"] or 0,
        "average_match_score": int(round(float(average))) if average is not None else 0,
    }


def get_active_jobs(company_id: Optional[int], now: Optional[datetime] = None) -> List[dict]:
    if not company_id:
        return []

    now = now or datetime.utcnow()
    jobs = execute_raw_sql("""
        SELECT j.job_id, j.title, j.status, j.posted_at, c.name AS company_name,
               COUNT(a.application_id) AS total_candidates,
               COUNT(a.application_id) FILTER (WHERE a.applied_at >= :since) AS new_candidates
        FROM jobs j
        JOIN companies c ON j.company_id = c.company_id
        LEFT JOIN applications a ON a.job_id = j.job_id
        WHERE j.company_id = :cid AND j.status = 'published'
        GROUP BY j.job_id, c.name
        ORDER BY j.posted_at DESC NULLS LAST
    """, {"cid": company_id, "since": now - timedelta(days=RECENT_DAYS)})

    for job in jobs:
        job["posted_label"] = format_relative_date(job["posted_at"], now)
    return jobs


def get_dashboard(company_id: Optional[int]) -> dict:
    now = datetime.utcnow()
    return {
        "stats": get_dashboard_stats(company_id, now),
        "active_jobs": get_active_jobs(company_id, now),
    }
