"""
Report Service - sharing, signing and rendering productivity reports.

- Share links: random 32-hex-char token, valid for share_link_ttl_days.
- Signatures: HMAC-SHA256 over "{assessment_id}.{timestamp}" so a PDF's
  verify link can be checked without logging in.
- PDF: rendered with reportlab platypus.
"""
import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta
from io import BytesIO
from typing import Optional
from urllib.parse import urlencode
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from jobboard.core.config import get_settings
from jobboard.core.errors import AppError, NotFoundError
from jobboard.db.postgres import execute_raw_sql, fetch_one
from jobboard.schemas.schemas import ReportVerifyResponse, ShareLinkResponse
from jobboard.services.productivity_service import get_assessment_details, get_latest_assessment

logger = logging.getLogger(__name__)
settings = get_settings()

MOTIVATION_LABELS = {
    1: "Money",
    2: "Personal benefit",
    3: "Personal conviction",
    4: "Duty",
}


# ============================================================
# SHARE LINKS
# ============================================================

def create_share_link(user_id: int) -> ShareLinkResponse:
    assessment = get_latest_assessment(user_id)
    if not assessment:
        raise AppError("No assessment found")

    token = secrets.token_hex(16)
    expires_at = datetime.utcnow() + timedelta(days=settings.share_link_ttl_days)
    execute_raw_sql("""
        INSERT INTO shared_reports (assessment_id, token, created_by, expires_at)
        VALUES (:aid, :token, :uid, :expires_at)
    """, {"aid": assessment["assessment_id"], "token": token, "uid": user_id, "expires_at": expires_at})

    return ShareLinkResponse(
        token=token,
        url=f"{settings.site_url.rstrip('/')}/share/{token}",
        expires_at=expires_at,
    )


def get_shared_report(token: str, now: Optional[datetime] = None) -> dict:
    """Public view of a shared report. 404 unknown token, 410 expired."""
    shared = fetch_one("""
        SELECT sr.assessment_id, sr.expires_at, pa.user_id
        FROM shared_reports sr
        JOIN productivity_assessments pa ON sr.assessment_id = pa.assessment_id
        WHERE sr.token = :token
    """, {"token": token})
    if not shared:
        raise NotFoundError("Shared report not found")
    if shared["expires_at"] < (now or datetime.utcnow()):
        raise AppError("This share link has expired", status_code=410)

    assessment = fetch_one(
        "SELECT * FROM productivity_assessments WHERE assessment_id = :id",
        {"id": shared["assessment_id"]}
    )
    details = get_assessment_details(shared["user_id"], assessment)
    # only what the report shows; personal context stays private
    for key in ("residence_location", "minimum_salary_requirement", "assessor_notes"):
        details["assessment"].pop(key, None)
    details["expires_at"] = shared["expires_at"]
    return details


# ============================================================
# SIGNING
# ============================================================

def signing_timestamp(assessment: dict) -> str:
    stamp = assessment.get("completed_at") or assessment.get("created_at")
    if stamp is None:
        return ""
    return stamp.isoformat() if hasattr(stamp, "isoformat") else str(stamp)


def sign_assessment(assessment_id: int, timestamp: str, secret: str = None) -> str:
    payload = f"{assessment_id}.{timestamp}"
    key = (secret or settings.report_signing_secret).encode()
    return hmac.new(key, payload.encode(), hashlib.sha256).hexdigest()


def build_verify_url(assessment: dict) -> str:
    signature = sign_assessment(assessment["assessment_id"], signing_timestamp(assessment))
    query = urlencode({"assessment_id": assessment["assessment_id"], "sig": signature})
    return f"{settings.site_url.rstrip('/')}/api/productivity/report/verify?{query}"


def verify_report(assessment_id: Optional[int], sig: Optional[str]) -> ReportVerifyResponse:
    if not assessment_id or not sig:
        raise AppError("Missing params")

    assessment = fetch_one("""
        SELECT assessment_id, completed_at, created_at
        FROM productivity_assessments WHERE assessment_id = :id
    """, {"id": assessment_id})
    if not assessment:
        raise NotFoundError("Not found")

    expected = sign_assessment(assessment["assessment_id"], signing_timestamp(assessment))
    return ReportVerifyResponse(
        valid=hmac.compare_digest(expected.encode(), sig.encode()),
        assessment_id=assessment["assessment_id"],
    )


# ============================================================
# PDF
# ============================================================

def _value(v) -> str:
    return "-" if v is None or v == "" else escape(str(v))


def render_report_pdf(details: dict, full_name: str = None) -> bytes:
    assessment = details["assessment"]
    styles = getSampleStyleSheet()
    score_style = ParagraphStyle(
        "Score", parent=styles["Title"], textColor=colors.HexColor("#00C49A"), fontSize=32, leading=38
    )

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=A4,
        leftMargin=0.75 * inch, rightMargin=0.75 * inch,
        topMargin=0.75 * inch, bottomMargin=0.75 * inch,
        title="Productivity Assessment Report",
    )

    story = [
        Paragraph(escape(settings.app_name), styles["Title"]),
        Paragraph("Productivity Assessment Report", styles["Heading2"]),
    ]
    header = [f"Role: {assessment['role_type']}" if assessment.get("role_type") else None,
              f"Name: {full_name}" if full_name else None]
    header_line = "  •  ".join(part for part in header if part)
    if header_line:
        story.append(Paragraph(escape(header_line), styles["Normal"]))
    story.append(Spacer(1, 12))

    score = assessment.get("overall_productivity_score")
    story.append(Paragraph("Overall productivity score", styles["Heading3"]))
    story.append(Paragraph(f"{_value(score)}%", score_style))

    motivation = assessment.get("motivation_level")
    rows = [
        ["Motivation level", f"{_value(motivation)} ({MOTIVATION_LABELS[motivation]})" if motivation in MOTIVATION_LABELS else _value(motivation)],
        ["IQ test", _value(assessment.get("iq_test_score"))],
        ["Perception test", _value(assessment.get("personality_test_score"))],
        ["Leadership test", _value(assessment.get("leadership_test_score"))],
        ["Probation recommendation", _value(assessment.get("probation_recommendation"))],
    ]
    table = Table(rows, colWidths=[2.5 * inch, 3.5 * inch])
    table.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
        ("LINEBELOW", (0, 0), (-1, -1), 0.25, colors.HexColor("#CCCCCC")),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]))
    story.extend([Spacer(1, 12), table])

    experiences = details.get("work_experiences") or []
    if experiences:
        story.extend([Spacer(1, 12), Paragraph("Work experience", styles["Heading2"])])
        for exp in experiences:
            story.append(Paragraph(
                f"<b>{_value(exp.get('company_name'))}</b> - {_value(exp.get('position'))}", styles["Normal"]
            ))
            story.append(Paragraph(
                f"{_value(exp.get('start_date'))} - {_value(exp.get('end_date')) if exp.get('end_date') else 'Present'}",
                styles["Italic"]
            ))
            story.append(Spacer(1, 6))

    knowledge = details.get("knowledge_assessment")
    if knowledge:
        story.extend([Spacer(1, 12), Paragraph("Knowledge", styles["Heading2"])])
        for label, key in (("Recent learning", "recent_learning_activities"),
                           ("Professional development", "professional_development"),
                           ("Future goals", "future_learning_goals")):
            if knowledge.get(key):
                story.append(Paragraph(f"<b>{label}:</b> {escape(knowledge[key])}", styles["Normal"]))

    verify_url = build_verify_url(assessment)
    story.extend([
        Spacer(1, 18),
        Paragraph(f"Verify: {escape(verify_url)}", styles["Normal"]),
        Paragraph(f"Generated {datetime.utcnow():%Y-%m-%d %H:%M} UTC", styles["Italic"]),
    ])

    doc.build(story)
    return buffer.getvalue()


def build_report_pdf(user_id: int) -> bytes:
    assessment = get_latest_assessment(user_id)
    if not assessment:
        raise NotFoundError("No assessment found")

    user = fetch_one("SELECT full_name FROM users WHERE user_id = :id", {"id": user_id}) or {}
    pdf = render_report_pdf(get_assessment_details(user_id, assessment), user.get("full_name"))
    logger.info("Rendered productivity report for user %s (%d bytes)", user_id, len(pdf))
    return pdf
