from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Protocol

import httpx

from resume_reviewer.core import REQUIRED_FIELDS, REQUIRED_SCORES
from resume_reviewer.errors import (
    AuthError,
    CredentialMissing,
    ProviderError,
    RateLimited,
    ResponseParseError,
    ResponseShapeError,
    ReviewError,
)
from resume_reviewer.models import AnalysisOutcome, AnalysisResult
from resume_reviewer.services.prompts import SYSTEM_PROMPT, USER_PROMPT
from resume_reviewer.settings import settings

logger = logging.getLogger(__name__)

TEMPERATURE = 0.3
MAX_TOKENS = 2000


class CredentialProvider(Protocol):
    def get(self) -> Optional[str]: ...


def build_payload(resume_text: str, model: str) -> Dict[str, Any]:
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": USER_PROMPT.format(resume_text=resume_text)},
        ],
        "temperature": TEMPERATURE,
        "max_tokens": MAX_TOKENS,
        "response_format": {"type": "json_object"},
    }


def validate_analysis_response(analysis: Any) -> None:
    """
    Presence-only check of the AI response.

    Only key presence is enforced; value types, score ranges and list lengths
    are accepted as-is. Raises ResponseShapeError naming the first missing key.
    """
    if not isinstance(analysis, dict):
        raise ResponseShapeError(f"Invalid AI response: missing field '{REQUIRED_FIELDS[0]}'")

    for field in REQUIRED_FIELDS:
        if field not in analysis:
            raise ResponseShapeError(f"Invalid AI response: missing field '{field}'")

    scores = analysis["scores"]
    for score in REQUIRED_SCORES:
        if not isinstance(scores, dict) or score not in scores:
            raise ResponseShapeError(f"Invalid AI response: missing score '{score}'")


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = {}
    message = None
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        message = body["error"].get("message")
    return message or f"API request failed with status {response.status_code}"


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    status = response.status_code
    if status == 401:
        raise AuthError("Invalid API key. Please check your OpenAI API key.")
    if status == 429:
        raise RateLimited("Rate limit exceeded. Please try again in a moment.")
    if status == 500:
        raise ProviderError("OpenAI service error. Please try again later.")
    raise ProviderError(_error_message(response))


def _message_content(response: httpx.Response) -> str:
    try:
        data = response.json()
        return data["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise ResponseParseError("Invalid AI response: unexpected response body from OpenAI") from e


def parse_analysis(content: Any) -> AnalysisResult:
    try:
        analysis = json.loads(content)
    except (TypeError, json.JSONDecodeError) as e:
        raise ResponseParseError("Invalid AI response: the model did not return valid JSON") from e
    validate_analysis_response(analysis)
    return analysis


class AnalysisClient:
    """Sends resume text to the chat completions endpoint and validates the JSON reply."""

    def __init__(
        self,
        credentials: CredentialProvider,
        *,
        endpoint: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.credentials = credentials
        self.endpoint = endpoint or settings.OPENAI_API_URL
        self.model = model or settings.OPENAI_MODEL
        self.timeout = timeout if timeout is not None else settings.OPENAI_TIMEOUT_S
        self._transport = transport

    async def request_analysis(self, resume_text: str) -> AnalysisResult:
        api_key = self.credentials.get()
        if not api_key:
            raise CredentialMissing("API key not configured. Please add your OpenAI API key.")

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }
        payload = build_payload(resume_text, self.model)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.endpoint, headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise ProviderError(f"Could not reach OpenAI: {e}") from e

        _raise_for_status(response)
        return parse_analysis(_message_content(response))

    async def analyze_resume(self, resume_text: str) -> AnalysisOutcome:
        try:
            analysis = await self.request_analysis(resume_text)
        except ReviewError as e:
            logger.error("AI analysis error (%s): %s", e.kind, e.message)
            return AnalysisOutcome(success=False, error=e.message, kind=e.kind)

        logger.info("AI analysis complete: score_overall=%s", analysis.get("score_overall"))
        return AnalysisOutcome(success=True, data=analysis)
