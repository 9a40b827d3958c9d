"""
Notification Service - candidate emails.

Delivery goes to APPLICATION_STATUS_EMAIL_ENDPOINT when configured and
falls back to the Resend API. Nothing here raises: callers get
{"delivered": bool, "reason": str | None}.
"""
import logging
from html import escape
from typing import Optional

import requests

from jobboard.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 10

NOTIFIABLE_STATUSES = {"interview", "interviewed", "offered", "accepted", "hired", "rejected"}


def _result(delivered: bool, reason: str = None) -> dict:
    return {"delivered": delivered, "reason": reason}


def send_email(to: str, subject: str, html: str) -> dict:
    """Send one email through Resend."""
    if not settings.resend_api_key:
        return _result(False, "resend-missing-key")

    try:
        response = requests.post(
            settings.resend_api_url,
            headers={
                "Authorization": f"Bearer {settings.resend_api_key}",
                "Content-Type": "application/json",
            },
            json={
                "from": settings.application_status_email_from,
                "to": [to],
                "subject": subject,
                "html": html,
            },
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        logger.error("Error sending via Resend: %s", e)
        return _result(False, "resend-error")

    if not response.ok:
        logger.error("Resend request failed: %s %s", response.status_code, response.text[:500])
        return _result(False, "resend-request-failed")

    return _result(True)


def should_notify_candidate(status: str) -> bool:
    return status in NOTIFIABLE_STATUSES


def build_status_email(
    status: str,
    candidate_name: Optional[str],
    job_title: Optional[str],
    company_name: Optional[str],
    notes: Optional[str],
) -> str:
    candidate = escape(candidate_name or "there")
    job = escape(job_title or "your application")
    company = escape(company_name or settings.app_name)
    body = (
        f"<p>Hello {candidate},</p>"
        f"<p>The status of your application for <strong>{job}</strong> at "
        f"<strong>{company}</strong> has changed to: <strong>{escape(status)}</strong>.</p>"
    )
    if notes:
        body += f"<p>Note from the employer: {escape(notes)}</p>"
    body += f"<p>Thank you for using {escape(settings.app_name)}.</p>"
    return body


def _send_via_endpoint(payload: dict) -> bool:
    headers = {"Content-Type": "application/json"}
    if settings.application_status_email_token:
        headers["Authorization"] = f"Bearer {settings.application_status_email_token}"
    try:
        response = requests.post(
            settings.application_status_email_endpoint,
            headers=headers,
            json=payload,
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        logger.error("Error calling status email endpoint for application %s: %s", payload["applicationId"], e)
        return False

    if not response.ok:
        logger.error(
            "Status email endpoint failed for application %s: %s %s",
            payload["applicationId"], response.status_code, response.text[:500]
        )
        return False
    return True


def notify_application_status_change(
    application_id: int,
    status: str,
    candidate_email: Optional[str],
    candidate_name: Optional[str] = None,
    job_title: Optional[str] = None,
    company_name: Optional[str] = None,
    notes: Optional[str] = None,
) -> dict:
    if not should_notify_candidate(status):
        return _result(False, "status-not-configured")

    if not candidate_email:
        logger.warning("Missing candidate email for application %s; skipping notification", application_id)
        return _result(False, "missing-email")

    if settings.application_status_email_endpoint:
        delivered = _send_via_endpoint({
            "applicationId": application_id,
            "status": status,
            "notes": notes,
            "candidate": {"email": candidate_email, "name": candidate_name},
            "job": {"title": job_title, "company": company_name},
        })
        if delivered:
            return _result(True)

    return send_email(
        to=candidate_email,
        subject=f"Application status updated: {status}",
        html=build_status_email(status, candidate_name, job_title, company_name, notes),
    )
