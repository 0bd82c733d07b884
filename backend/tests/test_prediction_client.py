from __future__ import annotations

import json

import httpx
import pytest

from app.domain.entities import PredictionInputs
from app.domain.errors import InvalidResponseError, ProviderAuthError, ServiceError
from app.infrastructure.clients.prediction import PredictionClient, build_prompt, calculate_confidence


def _gemini_reply(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def test_confidence_is_floored_for_wide_spread_inputs() -> None:
    inputs = PredictionInputs(input1="50000", input2="2500", input3="7.5")
    assert calculate_confidence(inputs) == 0.6


def test_confidence_is_one_for_identical_inputs() -> None:
    assert calculate_confidence(PredictionInputs(input1="42", input2="42", input3="42")) == 1.0


def test_confidence_follows_normalized_variance() -> None:
    # mean 50, population variance (2500 + 0 + 2500) / 3
    inputs = PredictionInputs(input1=0, input2=50, input3=100)
    expected = 1 - (5000 / 3) / 10000
    assert calculate_confidence(inputs) == pytest.approx(expected)
    assert 0.6 <= calculate_confidence(inputs) <= 1.0


def test_confidence_treats_unparseable_inputs_as_zero() -> None:
    assert calculate_confidence(PredictionInputs(input1="abc", input2=None, input3="0")) == 1.0


def test_prompt_templates_by_domain() -> None:
    inputs = PredictionInputs(input1="50000", input2="2500", input3=7.5)
    assert "Market Cap: $50000M" in build_prompt("financial", inputs)
    assert "Price Change: 7.5%" in build_prompt("financial", inputs)
    assert "Match Duration: 2500 minutes" in build_prompt("gaming", inputs)
    assert "Pressure: 7.5 hPa" in build_prompt("iot", inputs)

    fallback = build_prompt("sports", inputs)
    assert fallback.startswith("Analyze the following data")
    assert "Domain: sports" in fallback


def test_prompt_renders_whole_floats_without_decimal() -> None:
    prompt = build_prompt("gaming", PredictionInputs(input1=1500.0, input2=30, input3=4.2))
    assert "Player Score: 1500\n" in prompt


@pytest.mark.asyncio
async def test_get_prediction_trims_first_candidate(settings, mock_http) -> None:
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["path"] = request.url.path
        captured["key"] = request.url.params["key"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json=_gemini_reply("  Price trend: UP 8.5%\n"))

    http_client = mock_http(handler)
    client = PredictionClient(settings, http_client)
    result = await client.get_prediction("financial", PredictionInputs(input1="50000", input2="2500", input3="7.5"))
    await http_client.aclose()

    assert result.prediction == "Price trend: UP 8.5%"
    assert result.model == "gemini-2.0-flash"
    assert result.domain == "financial"
    assert result.confidence == 0.6
    assert captured["path"].endswith("/models/gemini-2.0-flash:generateContent")
    assert captured["key"] == "test-gemini-key"
    assert captured["body"]["generationConfig"] == {"maxOutputTokens": 150, "temperature": 0.7}
    assert "Predict cryptocurrency price trend" in captured["body"]["contents"][0]["parts"][0]["text"]


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [400, 401, 403])
async def test_rejected_key_statuses(status_code: int, settings, mock_http) -> None:
    http_client = mock_http(lambda request: httpx.Response(status_code, json={"error": {"message": "API key not valid"}}))

    with pytest.raises(ProviderAuthError) as exc_info:
        await PredictionClient(settings, http_client).get_prediction("iot", PredictionInputs())
    await http_client.aclose()

    assert exc_info.value.code == str(status_code)
    assert exc_info.value.status_code == status_code
    assert exc_info.value.message == "Gemini API key invalid or expired"


@pytest.mark.asyncio
async def test_server_error_uses_vendor_message(settings, mock_http) -> None:
    http_client = mock_http(lambda request: httpx.Response(500, json={"error": {"message": "backend overloaded"}}))

    with pytest.raises(ServiceError) as exc_info:
        await PredictionClient(settings, http_client).get_prediction("iot", PredictionInputs())
    await http_client.aclose()

    assert exc_info.value.code == "500"
    assert exc_info.value.message == "backend overloaded"


@pytest.mark.asyncio
async def test_missing_candidates_is_invalid_response(settings, mock_http) -> None:
    http_client = mock_http(lambda request: httpx.Response(200, json={"candidates": []}))

    with pytest.raises(InvalidResponseError) as exc_info:
        await PredictionClient(settings, http_client).get_prediction("gaming", PredictionInputs())
    await http_client.aclose()

    assert exc_info.value.code == "INVALID_RESPONSE"
    assert exc_info.value.service == "prediction"


@pytest.mark.asyncio
async def test_probe_requests_single_token(settings, mock_http) -> None:
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json=_gemini_reply("Hello"))

    http_client = mock_http(handler)
    status = await PredictionClient(settings, http_client).test_connection()
    await http_client.aclose()

    assert status.success is True
    assert bodies[0]["generationConfig"] == {"maxOutputTokens": 1}


def test_confidence_reads_leading_number_of_text_inputs() -> None:
    with_units = PredictionInputs(input1="150 units", input2="150", input3="150.0 kg")
    assert calculate_confidence(with_units) == 1.0

    # "abc" and "-" carry no number and count as 0
    mixed = PredictionInputs(input1="100 units", input2="abc", input3="-")
    expected = 1 - (20000 / 9) / 10000
    assert calculate_confidence(mixed) == pytest.approx(expected)


@pytest.mark.asyncio
async def test_null_candidate_text_is_invalid_response(settings, mock_http) -> None:
    http_client = mock_http(
        lambda request: httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": None}]}}]})
    )

    with pytest.raises(InvalidResponseError):
        await PredictionClient(settings, http_client).get_prediction("gaming", PredictionInputs())
    await http_client.aclose()
