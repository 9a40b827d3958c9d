from unittest.mock import MagicMock, patch

from jobboard.schemas.ai_schemas import PersonalityAnalysisResult, QuestionResponse
from jobboard.services import personality_service
from jobboard.services.ai_client import AIResponse
from jobboard.services.personality_analyzer import (
    NO_RESPONSES_ERROR, analyze_personality, format_personality_summary, validate_personality_analysis
)


def make_analysis(**overrides):
    data = {
        "problem_solving_style": "Breaks problems into small experiments",
        "initiative_level": "Starts projects without being asked",
        "work_preference": "Team collaboration",
        "motivational_factors": "Learning and visible impact on users",
        "personality_summary": "A curious, steady engineer who enjoys shared ownership.",
        "analytical_score": 90,
        "creative_score": 60,
        "leadership_score": 50,
        "teamwork_score": 80,
        "strengths": ["curiosity"],
        "development_areas": ["delegation"],
        "confidence_score": 0.7,
    }
    data.update(overrides)
    return PersonalityAnalysisResult(**data)


def test_valid_analysis_passes():
    assert validate_personality_analysis(make_analysis()) == {"valid": True, "errors": []}


def test_validation_collects_every_problem():
    analysis = make_analysis(
        work_preference="Team",
        analytical_score=120,
        confidence_score=None,
        strengths=[],
    )

    errors = validate_personality_analysis(analysis)["errors"]

    assert "Missing or insufficient work_preference" in errors
    assert "Invalid analytical_score: must be a number between 0-100" in errors
    assert "Invalid confidence_score: must be a number between 0-1" in errors
    assert "Strengths must be a non-empty array" in errors
    assert len(errors) == 4


def test_summary_names_two_strongest_areas():
    summary = format_personality_summary(make_analysis())

    assert summary == (
        "A curious, steady engineer who enjoys shared ownership. Key strengths include "
        "analytical and teamwork capabilities, with team collaboration work preferences."
    )


def test_analyze_without_responses_skips_ai():
    with patch("jobboard.services.personality_analyzer.get_ai_client") as get_client:
        result = analyze_personality([])

    assert not result.success
    assert result.error == NO_RESPONSES_ERROR
    get_client.assert_not_called()


def test_responses_map_to_questions_by_position():
    questions = [
        {"question_id": 4, "question_text": "Biggest failure?", "category": "problem_solving"},
        {"question_id": None, "question_text": "Team conflict?", "category": None},
    ]

    mapped = personality_service.map_responses({"1": "Shipped late", "2": "Talked", "9": "Extra"}, questions)

    assert mapped[0].question_id == "4"
    assert mapped[0].category == "problem_solving"
    assert mapped[1].question_id is None
    assert mapped[1].category == "general"
    assert mapped[2].question_text == "Question not found"
    assert mapped[2].response_text == "Extra"


def test_questions_fall_back_to_defaults():
    with patch("jobboard.services.personality_service.execute_raw_sql", side_effect=RuntimeError("db down")):
        questions = personality_service.get_questions()

    assert len(questions) == 7
    assert all(q["question_id"] is None for q in questions)
    assert [q["order_index"] for q in questions] == list(range(1, 8))


def test_status_without_row_is_not_started():
    with patch("jobboard.services.personality_service.fetch_one", return_value=None):
        status = personality_service.get_status(11)

    assert status.status == "not_started"
    assert status.is_ready is False


def test_failed_analysis_marks_row_failed():
    responses = [QuestionResponse(question_text="Q", response_text="A")]

    with patch("jobboard.services.personality_service.execute_raw_sql") as sql, \
            patch("jobboard.services.personality_service.analyze_personality",
                  return_value=AIResponse(success=False, error="Failed after 3 retries: down")):
        personality_service.run_personality_analysis(11, responses)

    assert sql.call_count == 2
    assert sql.call_args[0][1] == {"uid": 11, "error": "Failed after 3 retries: down"}


def test_invalid_analysis_marks_row_failed():
    responses = [QuestionResponse(question_text="Q", response_text="A")]

    with patch("jobboard.services.personality_service.execute_raw_sql") as sql, \
            patch("jobboard.services.personality_service.analyze_personality",
                  return_value=AIResponse(success=True, data=make_analysis(strengths=[]))):
        personality_service.run_personality_analysis(11, responses)

    assert sql.call_args[0][1]["error"] == "AI analysis produced invalid results"


def test_completed_analysis_is_stored_with_whole_scores():
    responses = [QuestionResponse(question_text="Q", response_text="A")]
    report_service = MagicMock()

    with patch("jobboard.services.personality_service.execute_raw_sql") as sql, \
            patch("jobboard.services.personality_service.analyze_personality",
                  return_value=AIResponse(success=True, data=make_analysis(analytical_score=87.6))), \
            patch("jobboard.services.personality_service.PersonalityReportService", return_value=report_service):
        personality_service.run_personality_analysis(11, responses)

    params = sql.call_args_list[1][0][1]
    assert params["analytical_score"] == 88
    assert params["strengths"] == '["curiosity"]'
    assert params["version"] == "1.0"

    user_id, report, stored_responses = report_service.upsert.call_args[0]
    assert user_id == 11
    assert "formatted_summary" in report
    assert stored_responses[0]["response_text"] == "A"


def test_unexpected_error_never_escapes():
    responses = [QuestionResponse(question_text="Q", response_text="A")]

    with patch("jobboard.services.personality_service.execute_raw_sql") as sql, \
            patch("jobboard.services.personality_service.analyze_personality", side_effect=RuntimeError("boom")):
        personality_service.run_personality_analysis(11, responses)

    assert sql.call_args[0][1] == {"uid": 11, "error": "boom"}
