import pytest
import requests

from weather_sim.narration import ai
from weather_sim.narration.ai import DescriptionService, build_prompt, extract_text
from weather_sim.narration.report import (
    ConditionsSummary,
    basic_description,
    build_conditions,
    render_forecast,
    render_report,
    render_trace,
)
from weather_sim.viz.logger import WeatherLogger
from weather_sim.world.climate import WeatherCalculator, WeatherState
from weather_sim.world.forecast import ForecastDay
from weather_sim.world.periods import TimePeriod

CONDITIONS = ConditionsSummary(
    terrain="Open Plains",
    temp_desc="Warm",
    wind_desc="Gentle breeze",
    precip_desc="Light drizzle",
    humid_desc="Slightly humid",
    time_period="Evening",
    campaign_name="Test Realm",
)


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def json(self):
        return self.payload


def _chat(text, finish_reason="stop"):
    return {"choices": [{"message": {"role": "assistant", "content": text}, "finish_reason": finish_reason}]}


@pytest.fixture
def calls(monkeypatch):
    """Queue responses for requests.post and record the payloads sent."""
    recorded = {"responses": [], "sent": []}

    def fake_post(url, headers=None, json=None, timeout=None):
        recorded["sent"].append(json)
        response = recorded["responses"].pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(ai.requests, "post", fake_post)
    return recorded


@pytest.fixture
def service():
    return DescriptionService(api_key="sk-test", rate_limit_seconds=0, logger=WeatherLogger(stdout=False))


def test_basic_description():
    assert basic_description(CONDITIONS) == (
        "The Open Plains unfolds before you. The temperature is warm, with gentle breeze "
        "and light drizzle. The air feels slightly humid."
    )


def test_prompt_mentions_every_condition():
    prompt = build_prompt(CONDITIONS)
    for text in ("Test Realm", "Open Plains", "Warm", "Gentle breeze", "Light drizzle", "Slightly humid", "Evening"):
        assert text in prompt


@pytest.mark.parametrize(
    "payload, expected",
    [
        (_chat("  Hot wind.  "), ("Hot wind.", "stop")),
        ({"choices": [{"message": {"content": [{"type": "text", "text": "A"}, "B"]}}]}, ("A\nB", None)),
        ({"choices": [{"text": "Legacy text", "finish_reason": "length"}]}, ("Legacy text", "length")),
        ({"output_text": "Responses API"}, ("Responses API", None)),
        ({"choices": []}, ("", None)),
    ],
)
def test_extract_text(payload, expected):
    assert extract_text(payload) == expected


def test_no_api_key_uses_fallback(calls):
    service = DescriptionService(api_key=None)
    assert service.generate(CONDITIONS) == basic_description(CONDITIONS)
    assert calls["sent"] == []


def test_generated_text(service, calls):
    calls["responses"].append(FakeResponse(_chat("Dusk settles over the grass.")))
    assert service.generate(CONDITIONS) == "Dusk settles over the grass."
    sent = calls["sent"][0]
    assert sent["max_tokens"] == 300
    assert sent["messages"][0]["role"] == "system"


def test_retry_with_larger_budget_when_cut_off(service, calls):
    calls["responses"].extend([
        FakeResponse(_chat("Dusk sett", finish_reason="length")),
        FakeResponse(_chat("Dusk settles over the grass.")),
    ])
    assert service.generate(CONDITIONS) == "Dusk settles over the grass."
    assert [s["max_tokens"] for s in calls["sent"]] == [300, 500]


def test_empty_text_after_retry_falls_back(service, calls):
    calls["responses"].extend([FakeResponse(_chat("")), FakeResponse(_chat(""))])
    assert service.generate(CONDITIONS) == basic_description(CONDITIONS)


@pytest.mark.parametrize(
    "response",
    [
        requests.ConnectionError("offline"),
        FakeResponse({"error": "quota"}, status=429),
        FakeResponse(["not", "an", "object"]),
        FakeResponse({"choices": "nonsense"}),
    ],
)
def test_failures_are_logged_and_replaced(service, calls, response):
    calls["responses"].append(response)
    assert service.generate(CONDITIONS) == basic_description(CONDITIONS)
    errors = [e for e in service.logger.entries if e.category == WeatherLogger.ERROR]
    assert len(errors) == 1


def test_rate_limit_waits_between_calls(monkeypatch, calls):
    sleeps = []
    monkeypatch.setattr(ai.time, "sleep", sleeps.append)
    service = DescriptionService(api_key="sk-test", rate_limit_seconds=5)
    calls["responses"].extend([FakeResponse(_chat("One.")), FakeResponse(_chat("Two."))])
    service.generate(CONDITIONS)
    service.generate(CONDITIONS)
    assert len(sleeps) == 1
    assert 0 < sleeps[0] <= 5


def test_render_report(campaign):
    state = WeatherState(temperature=9, wind=8, precipitation=0, humidity=0, terrain="plains", season="winter")
    report = render_report(state, campaign, TimePeriod.NIGHT)
    assert report.splitlines()[0] == "Weather for Open Plains"
    assert "Season: Winter | Time: Night" in report
    assert "Heat: C (+9)" in report
    assert "Wind: Gale (+8)" in report
    assert "Approx. 95°F" in report
    assert "  - Ranged attacks have disadvantage." in report
    assert "Generated" not in report
    assert "Custom text." in render_report(state, campaign, TimePeriod.NIGHT, description="Custom text.")


def test_build_conditions(campaign):
    state = WeatherState(temperature=-3, wind=0, precipitation=0, humidity=0, terrain="peak", season=None)
    conditions = build_conditions(state, campaign, TimePeriod.UNKNOWN)
    assert conditions.to_dict() == {
        "terrain": "Frozen Peak",
        "temp_desc": "B",
        "wind_desc": "Breezy",
        "precip_desc": "Normal precipitation",
        "humid_desc": "Normal humidity",
        "time_period": "Unknown Time",
        "campaign_name": "Test Realm",
    }


def test_render_forecast():
    days = [
        ForecastDay(day=1, temperature=3, wind=1, precipitation=0, humidity=2,
                    indicators={"temperature": "warmer", "wind": "", "precipitation": "", "humidity": ""}),
        ForecastDay(day=2, temperature=2, wind=1, precipitation=-1, humidity=2,
                    indicators={"temperature": "cooler", "wind": "", "precipitation": "drier", "humidity": ""}),
    ]
    text = render_forecast(days, "Open Plains")
    lines = text.splitlines()
    assert lines[:3] == ["2-Day Weather Forecast", "Current Terrain: Open Plains", ""]
    assert "Day 1:" in lines
    assert "Temperature: 3 (warmer)" in lines
    assert "Wind: 1" in lines
    assert "Precipitation: -1 (drier)" in lines


def test_render_trace(campaign, rng):
    _, trace = WeatherCalculator(rng).calculate(
        terrain=campaign.terrains["plains"],
        previous=None,
        variability=4,
        season_id="winter",
        campaign=campaign,
        time_period=TimePeriod.NOON,
        timestamp=0.0,
    )
    text = render_trace(trace)
    assert "Terrain: Open Plains | Variability: 4" in text
    assert "Time period: Noon | Season: winter" in text
    assert "temperature" in text and "humidity" in text
