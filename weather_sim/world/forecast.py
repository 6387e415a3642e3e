"""Multi-day forecast: the same blending step run forward without persistence."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from numpy.random import Generator

from weather_sim.core.config import (
    CHANGE_PHRASES,
    CHANGE_THRESHOLD,
    DIMENSIONS,
    FORECAST_DAYS,
    FORECAST_VARIABILITY_STEP,
)
from weather_sim.world.campaign import Terrain
from weather_sim.world.climate import WeatherState, clamp, random_factor, round_half_up


@dataclass
class ForecastDay:
    """One projected day."""

    day: int
    temperature: int
    wind: int
    precipitation: int
    humidity: int
    variability: float = 0.0
    indicators: dict[str, str] = field(default_factory=dict)

    def value(self, dimension: str) -> int:
        return getattr(self, dimension)

    def values(self) -> dict[str, int]:
        return {dim: self.value(dim) for dim in DIMENSIONS}


def change_indicator(current: float, previous: Optional[float], dimension: str) -> str:
    """Describe the direction of change, or "" when there is none to report."""
    if previous is None:
        return ""
    diff = current - previous
    if abs(diff) < CHANGE_THRESHOLD:
        return ""
    rising, falling = CHANGE_PHRASES[dimension]
    return rising if diff > 0 else falling


def day_variability(variability: float, day_index: int) -> float:
    """Forecast uncertainty grows with each day ahead."""
    return variability * (1 + day_index * FORECAST_VARIABILITY_STEP)


def project_forecast(
    terrain: Terrain,
    start: WeatherState,
    variability: float,
    rng: Generator,
    days: int = FORECAST_DAYS,
) -> list[ForecastDay]:
    """Project ``days`` days ahead from ``start``.

    Each day averages the terrain baseline with the previous day's values and
    adds a random factor; no time-of-day or season modifiers are applied.
    Days depend on each other, so the sequence is built in order.
    """
    forecast: list[ForecastDay] = []
    previous: dict[str, int] = start.values()

    for i in range(days):
        amplitude_base = day_variability(variability, i)
        values: dict[str, int] = {}
        for dim in DIMENSIONS:
            blended = (terrain.baseline(dim) + previous[dim]) / 2
            values[dim] = round_half_up(clamp(blended + random_factor(rng, amplitude_base, dim)))

        indicators = {dim: change_indicator(values[dim], previous[dim], dim) for dim in DIMENSIONS}
        forecast.append(
            ForecastDay(
                day=i + 1,
                variability=amplitude_base,
                indicators=indicators,
                **values,
            )
        )
        previous = values

    return forecast
