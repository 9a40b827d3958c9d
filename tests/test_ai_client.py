from unittest.mock import MagicMock, patch

from jobboard.schemas.ai_schemas import QuickMatchScore
from jobboard.services import ai_client
from jobboard.services.ai_client import AIClient, AIResponse, NOT_CONFIGURED_ERROR, with_retry


def make_client(content=None, error=None):
    client = AIClient(api_key="test-key", base_url="http://ai.local/v1", model="test-model")

    mock_message = MagicMock()
    mock_message.content = content
    mock_choice = MagicMock()
    mock_choice.message = mock_message
    mock_response = MagicMock()
    mock_response.choices = [mock_choice]

    client.client = MagicMock()
    if error is not None:
        client.client.chat.completions.create.side_effect = error
    else:
        client.client.chat.completions.create.return_value = mock_response
    return client


def test_generate_structured_strips_code_fences():
    client = make_client('```json\n{"score": 81}\n```')

    result = client.generate_structured("Rate it", "You rate things.", {"score": "number"},
                                        result_model=QuickMatchScore)

    assert result.success
    assert result.data.score == 81
    assert result.confidence == 0.85
    client.client.chat.completions.create.assert_called_once()


def test_generate_structured_returns_plain_json_without_model():
    client = make_client('{"a": [1, 2]}')

    result = client.generate_structured("p", "s", {"a": "array"})

    assert result.success
    assert result.data == {"a": [1, 2]}


def test_prompt_carries_schema():
    client = make_client('{"score": 1}')
    client.generate_structured("Rate it", "  You rate things.  ", {"score": "number 0-100"})

    kwargs = client.client.chat.completions.create.call_args.kwargs
    system, user = kwargs["messages"]
    assert system["content"] == "You rate things."
    assert '"score": "number 0-100"' in user["content"]
    assert user["content"].startswith("Rate it")
    assert kwargs["model"] == "test-model"


def test_invalid_json_is_reported():
    client = make_client("definitely not json")

    result = client.generate_structured("p", "s", {})

    assert not result.success
    assert result.error.startswith("Invalid JSON response from AI")


def test_schema_mismatch_is_a_failure():
    client = make_client('{"score": 150}')

    result = client.generate_structured("p", "s", {}, result_model=QuickMatchScore)

    assert not result.success
    assert "did not match the expected schema" in result.error


def test_api_error_is_reported():
    client = make_client(error=RuntimeError("boom"))

    result = client.generate_structured("p", "s", {})

    assert not result.success
    assert result.error == "AI generation failed: boom"


def test_not_configured_client_never_calls_api():
    client = AIClient(api_key="", base_url="http://ai.local/v1", model="test-model")

    assert client.client is None
    assert not client.is_configured
    result = client.generate_structured("p", "s", {})
    assert result.error == NOT_CONFIGURED_ERROR
    assert not client.test_connection()


def test_with_retry_backs_off_then_succeeds():
    sleeps = []
    outcomes = iter([
        AIResponse(success=False, error="rate limited"),
        AIResponse(success=False, error="rate limited"),
        AIResponse(success=True, data={"ok": True}),
    ])

    result = with_retry(lambda: next(outcomes), retries=3, sleep=sleeps.append)

    assert result.success
    assert sleeps == [1, 2]


def test_with_retry_reports_last_error():
    sleeps = []
    calls = []

    def failing():
        calls.append(1)
        if len(calls) == 2:
            raise ValueError("socket closed")
        return AIResponse(success=False, error="nope")

    result = with_retry(failing, retries=3, sleep=sleeps.append)

    assert not result.success
    assert result.error == "Failed after 3 retries: nope"
    assert len(calls) == 3
    # no pause after the final attempt
    assert sleeps == [1, 2]


def test_with_retry_honours_explicit_retry_count():
    calls = []

    def failing():
        calls.append(1)
        return AIResponse(success=False, error="nope")

    assert with_retry(failing, retries=1, sleep=lambda _: None).error == "Failed after 1 retries: nope"
    assert len(calls) == 1

    result = with_retry(failing, retries=0, sleep=lambda _: None)
    assert not result.success
    assert len(calls) == 1


def test_with_retry_defaults_to_configured_retries():
    calls = []

    def failing():
        calls.append(1)
        return AIResponse(success=False, error="nope")

    with patch.object(ai_client.settings, "ai_max_retries", 2):
        with_retry(failing, sleep=lambda _: None)

    assert len(calls) == 2
