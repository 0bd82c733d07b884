from __future__ import annotations

import math
import re
from typing import Any

import httpx

from app.domain.entities import PREDICTION_SERVICE, ConnectionStatus, InputValue, PredictionInputs, PredictionResult
from app.domain.errors import InvalidResponseError, ProviderAuthError, RateLimitedError, ServiceError
from app.infrastructure.clients.base import BaseClient


SYSTEM_INSTRUCTION = (
    "You are an AI prediction expert. Provide concise, specific predictions based on the input data. "
    "Return only the prediction text without explanations."
)

VARIANCE_SCALE = 10000.0
MIN_CONFIDENCE = 0.6

_LEADING_NUMBER = re.compile(r"\s*[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


def _format_input(value: InputValue) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_prompt(domain: str, inputs: PredictionInputs) -> str:
    input1, input2, input3 = (_format_input(value) for value in inputs.as_list())

    if domain == "financial":
        return (
            "Predict cryptocurrency price trend based on:\n"
            f"Market Cap: ${input1}M\n"
            f"Volume (24h): ${input2}M\n"
            f"Price Change: {input3}%\n"
            'Provide a specific prediction like "Price trend: UP 8.5%" or "Price trend: DOWN 3.2%"'
        )
    if domain == "gaming":
        return (
            "Predict gaming match outcome based on:\n"
            f"Player Score: {input1}\n"
            f"Match Duration: {input2} minutes\n"
            f"Team Rating: {input3}\n"
            'Provide a specific prediction like "Win probability: 73.5%" or "Performance: Above Average"'
        )
    if domain == "iot":
        return (
            "Predict weather/environmental conditions based on:\n"
            f"Temperature: {input1}°C\n"
            f"Humidity: {input2}%\n"
            f"Pressure: {input3} hPa\n"
            'Provide a specific prediction like "Forecast: Sunny, 24°C" or "Conditions: Rainy, 18°C"'
        )
    return (
        "Analyze the following data and provide a prediction:\n"
        f"Input 1: {input1}\n"
        f"Input 2: {input2}\n"
        f"Input 3: {input3}\n"
        f"Domain: {domain}"
    )


def _parse_number(value: InputValue) -> float:
    """Read the leading number of `value` (`"150 units"` is 150); anything else is 0."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_NUMBER.match(value)
        if match is None:
            return 0.0
        number = float(match.group(0))
    return number if math.isfinite(number) else 0.0


def calculate_confidence(inputs: PredictionInputs) -> float:
    """Population variance of the inputs, scaled by 10000 and clamped, floored at 0.6."""
    values = [_parse_number(value) for value in inputs.as_list()]
    mean = sum(values) / len(values)
    variance = sum((value - mean) ** 2 for value in values) / len(values)
    normalized = min(variance / VARIANCE_SCALE, 1.0)
    return max(MIN_CONFIDENCE, 1.0 - normalized)


class PredictionClient(BaseClient):
    service = PREDICTION_SERVICE
    display_name = "Gemini"
    timeout_setting = "gemini_timeout_seconds"
    required_settings_fields = ["gemini_api_key"]

    @property
    def model(self) -> str:
        return self.settings.gemini_model

    def _generate_url(self) -> str:
        return f"{self.settings.gemini_base_url.rstrip('/')}/models/{self.model}:generateContent"

    async def _generate(self, text: str, max_output_tokens: int, temperature: float | None = None) -> Any:
        generation_config: dict[str, Any] = {"maxOutputTokens": max_output_tokens}
        if temperature is not None:
            generation_config["temperature"] = temperature
        response = await self._request(
            "POST",
            self._generate_url(),
            params={"key": self.settings.gemini_api_key},
            json={"contents": [{"parts": [{"text": text}]}], "generationConfig": generation_config},
        )
        return self._json(response)

    async def get_prediction(self, domain: str, inputs: PredictionInputs) -> PredictionResult:
        self._ensure_configured()
        prompt = build_prompt(domain, inputs)
        payload = await self._generate(
            f"{SYSTEM_INSTRUCTION}\n\n{prompt}",
            max_output_tokens=self.settings.gemini_max_output_tokens,
            temperature=self.settings.gemini_temperature,
        )
        try:
            text = payload["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise InvalidResponseError(self.service, "Gemini returned no candidate text") from exc
        if not isinstance(text, str):
            raise InvalidResponseError(self.service, "Gemini returned no candidate text")

        return PredictionResult(
            prediction=text.strip(),
            model=self.model,
            confidence=calculate_confidence(inputs),
            domain=domain,
        )

    def _map_status_error(self, response: httpx.Response, subject: str | None = None) -> ServiceError:
        status = response.status_code
        if status == 429:
            return RateLimitedError(self.service, "Gemini rate limit exceeded - retry later")
        if status in {400, 401, 403}:
            return ProviderAuthError(self.service, "Gemini API key invalid or expired", status_code=status)
        return super()._map_status_error(response, subject=subject)

    async def _probe(self) -> ConnectionStatus:
        await self._generate("Hi", max_output_tokens=1)
        return ConnectionStatus.connected(self.service)
