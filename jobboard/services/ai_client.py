"""
Generative AI Client

The model is reached through an OpenAI-compatible chat-completions API, so
we use the openai library (Gemini's OpenAI endpoint by default, DeepSeek or
OpenAI work the same way).

Every AI feature follows the same path:
    prompt builder -> generate_structured() -> strip ``` fences -> json.loads
    -> pydantic validation -> AIResponse
wrapped in with_retry() for exponential backoff.

AI calls never raise into callers: failures come back as
AIResponse(success=False, error=...).
"""
import json
import logging
import time
from typing import Any, Callable, Optional, Type

from openai import OpenAI
from pydantic import BaseModel, ValidationError

from jobboard.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

# Reported when the model gives no confidence of its own
DEFAULT_CONFIDENCE = 0.85

NOT_CONFIGURED_ERROR = (
    "AI service is not properly configured. "
    "Please check your AI_API_KEY and AI_MODEL environment variables."
)


class AIResponse(BaseModel):
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    confidence: Optional[float] = None


class AIClient:
    """
    Wrapper for the chat-completions API returning schema-shaped JSON.
    """

    def __init__(self, api_key: str = None, base_url: str = None, model: str = None):
        self.api_key = api_key if api_key is not None else settings.ai_api_key
        self.base_url = base_url or settings.ai_base_url
        self.model = model or settings.ai_model
        self.client = OpenAI(api_key=self.api_key, base_url=self.base_url) if self.api_key else None

    @property
    def is_configured(self) -> bool:
        return self.client is not None and bool(self.model)

    def _call_api(self, system_prompt: str, user_content: str, max_tokens: int = None) -> str:
        """
        Internal method to call the chat-completions API.
        Returns raw text response.
        """
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content}
            ],
            max_tokens=max_tokens or settings.ai_max_tokens,
            temperature=settings.ai_temperature  # Low temp for consistent structured output
        )
        return response.choices[0].message.content or ""

    def _extract_json(self, text: str) -> Any:
        """
        Extract JSON from API response.
        Handles cases where model wraps JSON in markdown code blocks.
        """
        # Remove markdown code blocks if present
        text = text.strip()
        if text.startswith("```json"):
            text = text[7:]
        elif text.startswith("```"):
            text = text[3:]
        if text.endswith("```"):
            text = text[:-3]

        return json.loads(text.strip())

    @staticmethod
    def build_prompt(prompt: str, schema: dict) -> str:
        return (
            f"{prompt.strip()}\n\n"
            "Please respond with valid JSON only, following this exact schema:\n"
            f"{json.dumps(schema, indent=2)}\n\n"
            "Ensure your response is valid JSON that can be parsed directly. "
            "Do not include any text outside the JSON structure."
        )

    def generate_structured(
        self,
        prompt: str,
        system_context: str,
        schema: dict,
        result_model: Type[BaseModel] = None,
        max_tokens: int = None,
    ) -> AIResponse:
        """
        Ask the model for JSON following `schema`.

        With `result_model`, the parsed JSON is validated into that pydantic
        model and returned as `data`; a shape mismatch counts as a failure
        so with_retry() will try again.
        """
        if not self.is_configured:
            return AIResponse(success=False, error=NOT_CONFIGURED_ERROR)

        try:
            raw = self._call_api(system_context.strip(), self.build_prompt(prompt, schema), max_tokens)
        except Exception as e:
            logger.error("Error generating AI response: %s", e)
            return AIResponse(success=False, error=f"AI generation failed: {e}")

        try:
            data = self._extract_json(raw)
        except json.JSONDecodeError as e:
            logger.error("Failed to parse AI response as JSON: %s", e)
            logger.debug("Raw response: %s", raw)
            return AIResponse(success=False, error=f"Invalid JSON response from AI: {e}")

        if result_model is not None:
            try:
                data = result_model.model_validate(data)
            except ValidationError as e:
                logger.error("AI response did not match %s: %s", result_model.__name__, e)
                return AIResponse(
                    success=False,
                    error=f"AI response did not match the expected schema ({e.error_count()} errors)"
                )

        return AIResponse(success=True, data=data, confidence=DEFAULT_CONFIDENCE)

    def test_connection(self) -> bool:
        """Test if the AI endpoint is reachable"""
        if not self.is_configured:
            return False
        try:
            response = self._call_api(
                "You are a test assistant.",
                "Reply with exactly: OK",
                max_tokens=10
            )
            return "OK" in response.upper()
        except Exception as e:
            logger.warning("AI connection failed: %s", e)
            return False


def with_retry(
    ai_function: Callable[[], AIResponse],
    retries: int = None,
    sleep: Callable[[float], None] = time.sleep,
) -> AIResponse:
    """
    Call `ai_function` until it succeeds, at most `retries` times.
    Waits 1s, 2s, 4s, ... between attempts (2**attempt seconds).
    """
    if retries is None:
        retries = settings.ai_max_retries
    last_error = ""

    for attempt in range(retries):
        try:
            result = ai_function()
            if result.success:
                return result
            last_error = result.error or "Unknown error"
        except Exception as e:
            last_error = str(e)

        if attempt < retries - 1:
            logger.info("AI call failed (attempt %d/%d): %s", attempt + 1, retries, last_error)
            sleep(2 ** attempt)

    return AIResponse(success=False, error=f"Failed after {retries} retries: {last_error}")


# Singleton instance
_ai_client: AIClient = None


def get_ai_client() -> AIClient:
    """Get or create AI client (singleton pattern)"""
    global _ai_client
    if _ai_client is None:
        _ai_client = AIClient()
    return _ai_client
