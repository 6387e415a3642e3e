"""Plain-text weather reports, forecasts and calculation traces."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional

from weather_sim.core.config import DIMENSIONS
from weather_sim.world.campaign import CampaignData
from weather_sim.world.climate import CalculationTrace, WeatherState
from weather_sim.world.descriptions import describe_dimension, survival_rules, to_fahrenheit
from weather_sim.world.forecast import ForecastDay
from weather_sim.world.periods import TimePeriod

_LABELS = {
    "temperature": "Heat",
    "wind": "Wind",
    "precipitation": "Precipitation",
    "humidity": "Humidity",
}


@dataclass(frozen=True)
class ConditionsSummary:
    """What a description generator is told about the current weather."""

    terrain: str
    temp_desc: str
    wind_desc: str
    precip_desc: str
    humid_desc: str
    time_period: str
    campaign_name: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


def build_conditions(state: WeatherState, campaign: CampaignData, period: TimePeriod) -> ConditionsSummary:
    terrain = campaign.terrain(state.terrain)
    return ConditionsSummary(
        terrain=terrain.name if terrain else state.terrain,
        temp_desc=describe_dimension("temperature", state.temperature, campaign),
        wind_desc=describe_dimension("wind", state.wind, campaign),
        precip_desc=describe_dimension("precipitation", state.precipitation, campaign),
        humid_desc=describe_dimension("humidity", state.humidity, campaign),
        time_period=period.value,
        campaign_name=campaign.name,
    )


def basic_description(conditions: ConditionsSummary) -> str:
    """Deterministic description used whenever no generated text is available."""
    return (
        f"The {conditions.terrain or 'landscape'} unfolds before you. "
        f"The temperature is {conditions.temp_desc.lower()}, with "
        f"{conditions.wind_desc.lower()} and {conditions.precip_desc.lower()}. "
        f"The air feels {conditions.humid_desc.lower()}."
    )


def render_report(
    state: WeatherState,
    campaign: CampaignData,
    period: TimePeriod,
    description: Optional[str] = None,
) -> str:
    """Full weather report for one scene."""
    terrain = campaign.terrain(state.terrain)
    season = campaign.season(state.season)
    conditions = build_conditions(state, campaign, period)
    descriptions = {
        "temperature": conditions.temp_desc,
        "wind": conditions.wind_desc,
        "precipitation": conditions.precip_desc,
        "humidity": conditions.humid_desc,
    }

    lines = [
        f"Weather for {terrain.name if terrain else state.terrain}",
        f"Season: {season.name if season else (state.season or 'Unknown')} | Time: {period.value}",
        "",
    ]
    if terrain and terrain.description:
        lines.append(terrain.description)
    lines.append(description or basic_description(conditions))
    lines.append("")
    for dim in DIMENSIONS:
        lines.append(f"{_LABELS[dim]}: {descriptions[dim]} ({state.value(dim):+d})")
    lines.append(f"Approx. {to_fahrenheit(state.temperature, campaign):.0f}°F")
    lines.append("")
    lines.append("Survival Rules:")
    lines.extend(f"  - {rule}" for rule in survival_rules(state, campaign))
    return "\n".join(lines)


def render_forecast(forecast: list[ForecastDay], terrain_name: str) -> str:
    header = [f"{len(forecast)}-Day Weather Forecast", f"Current Terrain: {terrain_name}"]
    blocks = []
    for day in forecast:
        rows = [f"Day {day.day}:"]
        for dim in DIMENSIONS:
            indicator = day.indicators.get(dim, "")
            suffix = f" ({indicator})" if indicator else ""
            rows.append(f"{dim.capitalize()}: {day.value(dim)}{suffix}")
        blocks.append("\n".join(rows))
    return "\n".join(header) + "\n\n" + "\n\n".join(blocks)


def render_trace(trace: CalculationTrace) -> str:
    """Step-by-step breakdown of one calculation."""
    previous = trace.previous or {}
    lines = [
        f"Terrain: {trace.terrain_name} | Variability: {trace.variability}",
        f"Time period: {trace.time_period.value} | Season: {trace.season or 'Unknown'}",
        "",
        f"{'dimension':<14}{'base':>6}{'prev':>6}{'random':>9}{'interm':>8}{'time':>6}{'season':>8}{'final':>7}",
    ]
    for dim in DIMENSIONS:
        prev = previous.get(dim)
        lines.append(
            f"{dim:<14}{trace.baselines[dim]:>6}"
            f"{'-' if prev is None else prev:>6}"
            f"{trace.random_factors.get(dim, 0.0):>9.2f}"
            f"{trace.intermediate.get(dim, 0):>8}"
            f"{trace.time_modifiers.get(dim):>6}"
            f"{trace.season_modifiers.get(dim):>8}"
            f"{trace.final.get(dim, 0):>7}"
        )
    return "\n".join(lines)
