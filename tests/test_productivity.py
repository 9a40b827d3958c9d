from unittest.mock import patch

from jobboard.schemas.ai_schemas import ProductivityScoreResult
from jobboard.schemas.schemas import ProductivityAssessmentCreate, WorkExperienceInput
from jobboard.services import productivity_service
from jobboard.services.ai_client import AIResponse
from jobboard.services.productivity_scorer import build_productivity_prompt, format_experience


def make_assessment(**overrides):
    data = {
        "work_experiences": [{
            "company_name": "Acme",
            "position": "Analyst",
            "start_date": "2020-01",
            "end_date": "2022-06",
            "team_comparison_score": 4,
            "key_achievements": "Cut reporting time in half",
        }],
    }
    data.update(overrides)
    return ProductivityAssessmentCreate(**data)


def test_experience_line_lists_only_given_details():
    exp = WorkExperienceInput(company_name="Acme", position="Analyst", start_date="2020-01",
                              is_current=True, team_comparison_score=4)

    line = format_experience(2, exp)

    assert line == "#2 Analyst @ Acme | period=2020-01 (current) | team_score=4/5"


def test_prompt_marks_missing_context():
    prompt = build_productivity_prompt(make_assessment())

    assert "period=2020-01→2022-06" in prompt
    assert "achievements=Cut reporting time in half" in prompt
    assert "- recent_learning: N/A" in prompt
    assert "- role_type: unspecified" in prompt
    assert "- min_salary: unspecified" in prompt


def test_prompt_keeps_zero_salary():
    prompt = build_productivity_prompt(make_assessment(minimum_salary_requirement=0, role_type="manager"))

    assert "- min_salary: 0" in prompt
    assert "- role_type: manager" in prompt


def test_manual_score_skips_ai():
    with patch("jobboard.services.productivity_service.score_productivity") as scorer:
        values = productivity_service._apply_ai_score(
            make_assessment(overall_productivity_score=72, probation_recommendation="yes")
        )

    scorer.assert_not_called()
    assert values == {
        "overall_productivity_score": 72,
        "assessor_notes": None,
        "probation_recommendation": "yes",
        "scored_by": "manual",
    }


def test_ai_fills_missing_score_but_manual_notes_win():
    ai = ProductivityScoreResult(overall_productivity_score=64, probation_recommendation="no",
                                 assessor_notes="AI notes", confidence_score=0.6)

    with patch("jobboard.services.productivity_service.score_productivity",
               return_value=AIResponse(success=True, data=ai)):
        values = productivity_service._apply_ai_score(make_assessment(assessor_notes="Seen in person"))

    assert values["overall_productivity_score"] == 64
    assert values["assessor_notes"] == "Seen in person"
    assert values["probation_recommendation"] == "no"
    assert values["scored_by"] == "ai"


def test_ai_failure_stores_without_score():
    with patch("jobboard.services.productivity_service.score_productivity",
               return_value=AIResponse(success=False, error="down")):
        values = productivity_service._apply_ai_score(make_assessment())

    assert values["overall_productivity_score"] is None
    assert values["scored_by"] == "manual"

    with patch("jobboard.services.productivity_service.score_productivity", side_effect=RuntimeError("boom")):
        values = productivity_service._apply_ai_score(make_assessment())

    assert values["overall_productivity_score"] is None


def test_status_reports_latest_assessment():
    latest = {"assessment_id": 5, "completed_at": "2026-01-01T10:00:00"}

    with patch("jobboard.services.productivity_service.fetch_one",
               side_effect=[{"productivity_assessment_completed": True}, latest]):
        status = productivity_service.get_assessment_status(11)

    assert status == {"completed": True, "assessment_id": 5, "completed_at": "2026-01-01T10:00:00"}
