"""Generated weather descriptions via an OpenAI-compatible chat endpoint."""

from __future__ import annotations

import time
from typing import Any, Optional, Union

import requests
from pydantic import BaseModel, ValidationError

from weather_sim.core.config import (
    AI_INITIAL_TOKENS,
    AI_RATE_LIMIT_SECONDS,
    AI_RETRY_EXTRA_TOKENS,
    AI_TIMEOUT_SECONDS,
    DEFAULT_OPENAI_MODEL,
    OPENAI_ENDPOINT,
)
from weather_sim.narration.report import ConditionsSummary, basic_description
from weather_sim.viz.logger import WeatherLogger

SYSTEM_PROMPT = (
    "You are a weather system for a tabletop role-playing campaign. Generate very "
    "concise, atmospheric descriptions (2-3 sentences max) focusing on the most "
    "critical environmental effects and immediate survival concerns."
)


class DescriptionError(RuntimeError):
    """The generator could not produce text."""


class _ContentPart(BaseModel):
    text: Optional[str] = None
    content: Optional[str] = None


class _Message(BaseModel):
    content: Union[str, list[Union[str, _ContentPart]], None] = None


class _Choice(BaseModel):
    message: Optional[_Message] = None
    text: Optional[str] = None
    finish_reason: Optional[str] = None


class _CompletionResponse(BaseModel):
    choices: list[_Choice] = []
    output_text: Optional[str] = None


def build_prompt(conditions: ConditionsSummary) -> str:
    return (
        f"You are a weather system for the {conditions.campaign_name or 'D&D'} setting.\n"
        "Current conditions:\n"
        f"- Terrain: {conditions.terrain or 'Unknown terrain'}\n"
        f"- Temperature: {conditions.temp_desc or 'Normal temperature'}\n"
        f"- Wind: {conditions.wind_desc or 'Normal wind'}\n"
        f"- Precipitation: {conditions.precip_desc or 'Clear skies'}\n"
        f"- Humidity: {conditions.humid_desc or 'Normal humidity'}\n"
        f"- Time of Day: {conditions.time_period or 'Unknown time'}\n\n"
        "Generate a brief, atmospheric description of these conditions. Focus on the "
        "most important environmental effects and survival considerations. Keep it "
        "concise and avoid repetition."
    )


def extract_text(payload: dict[str, Any]) -> tuple[str, Optional[str]]:
    """Pull (text, finish_reason) out of a chat or responses style payload."""
    parsed = _CompletionResponse.model_validate(payload)
    text: Optional[str] = None
    finish_reason: Optional[str] = None

    if parsed.choices:
        choice = parsed.choices[0]
        finish_reason = choice.finish_reason
        content = choice.message.content if choice.message else None
        if isinstance(content, str):
            text = content
        elif isinstance(content, list):
            parts = []
            for part in content:
                if isinstance(part, str):
                    parts.append(part)
                elif part.text or part.content:
                    parts.append(part.text or part.content)
            text = "\n".join(parts) if parts else None
        if not text and choice.text:
            text = choice.text

    if not text and parsed.output_text and parsed.output_text.strip():
        text = parsed.output_text

    return (text or "").strip(), finish_reason


class DescriptionService:
    """Turns a conditions summary into prose, falling back to fixed text on failure."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_OPENAI_MODEL,
        logger: Optional[WeatherLogger] = None,
        endpoint: str = OPENAI_ENDPOINT,
        rate_limit_seconds: float = AI_RATE_LIMIT_SECONDS,
        timeout_seconds: float = AI_TIMEOUT_SECONDS,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.endpoint = endpoint
        self.rate_limit_seconds = rate_limit_seconds
        self.timeout_seconds = timeout_seconds
        self.logger = logger or WeatherLogger(stdout=False)
        self._last_call: float = 0.0

    def generate(self, conditions: ConditionsSummary) -> str:
        """Always returns text; errors are logged and replaced by the basic description."""
        if not self.api_key:
            return basic_description(conditions)

        self._respect_rate_limit()
        try:
            text = self._complete(build_prompt(conditions))
        except (requests.RequestException, ValidationError, ValueError, DescriptionError) as exc:
            self.logger.log(
                WeatherLogger.ERROR,
                f"Weather description generation failed: {exc}",
                model=self.model,
            )
            return basic_description(conditions)
        finally:
            self._last_call = time.monotonic()

        if not text:
            self.logger.log(WeatherLogger.NARRATION, "Empty generated description, using fallback")
            return basic_description(conditions)
        self.logger.log(WeatherLogger.NARRATION, "Generated weather description", model=self.model)
        return text

    def _respect_rate_limit(self) -> None:
        if not self._last_call:
            return
        elapsed = time.monotonic() - self._last_call
        if elapsed < self.rate_limit_seconds:
            time.sleep(self.rate_limit_seconds - elapsed)

    def _call_once(self, prompt: str, max_tokens: int) -> tuple[str, Optional[str]]:
        response = requests.post(
            self.endpoint,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            json={
                "model": self.model,
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                "max_tokens": max_tokens,
            },
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise DescriptionError("unexpected response payload")
        return extract_text(payload)

    def _complete(self, prompt: str) -> str:
        text, finish_reason = self._call_once(prompt, AI_INITIAL_TOKENS)
        # One retry with a larger budget when empty or cut off
        if not text or finish_reason == "length":
            retry_text, _ = self._call_once(prompt, AI_INITIAL_TOKENS + AI_RETRY_EXTRA_TOKENS)
            text = retry_text or text
        return text
