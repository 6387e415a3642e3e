"""Weather state evolution: bounded random walk plus time and season modifiers."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Optional

from numpy.random import Generator

from weather_sim.core.config import AMPLITUDE_DIVISORS, DIMENSIONS, VALUE_MAX, VALUE_MIN
from weather_sim.world.campaign import CampaignData, ModifierRecord, Terrain, terrain_key
from weather_sim.world.periods import TimePeriod, resolve_time_modifiers


def clamp(value: float, lo: int = VALUE_MIN, hi: int = VALUE_MAX) -> float:
    return max(lo, min(hi, value))


def round_half_up(value: float) -> int:
    """Round to nearest integer with halves going up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def random_factor(rng: Generator, variability: float, dimension: str) -> float:
    """Uniform draw on [-1, 1] scaled by the dimension's amplitude."""
    amplitude = variability / AMPLITUDE_DIVISORS[dimension]
    return (rng.random() * 2 - 1) * amplitude


@dataclass(frozen=True)
class WeatherState:
    """The persisted weather of one scene. Replaced wholesale on every update."""

    temperature: int
    wind: int
    precipitation: int
    humidity: int
    terrain: str
    season: Optional[str]
    last_update: float = 0.0

    @classmethod
    def from_terrain(cls, terrain: Terrain, season_id: Optional[str], timestamp: float) -> "WeatherState":
        """Initial state: the terrain baselines as-is, no randomness."""
        return cls(
            temperature=terrain.temperature,
            wind=terrain.wind,
            precipitation=terrain.precipitation,
            humidity=terrain.humidity,
            terrain=terrain.id,
            season=season_id,
            last_update=timestamp,
        )

    def value(self, dimension: str) -> int:
        return getattr(self, dimension)

    def values(self) -> dict[str, int]:
        return {dim: self.value(dim) for dim in DIMENSIONS}

    def to_dict(self) -> dict[str, Any]:
        return {
            "temperature": self.temperature,
            "wind": self.wind,
            "precipitation": self.precipitation,
            "humidity": self.humidity,
            "terrain": self.terrain,
            "season": self.season,
            "lastUpdate": self.last_update,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WeatherState":
        return cls(
            temperature=int(data["temperature"]),
            wind=int(data["wind"]),
            precipitation=int(data["precipitation"]),
            humidity=int(data["humidity"]),
            terrain=str(data["terrain"]),
            season=data.get("season"),
            last_update=float(data.get("lastUpdate", 0.0)),
        )


@dataclass
class CalculationTrace:
    """Every intermediate quantity of one weather calculation."""

    terrain_name: str
    baselines: dict[str, int]
    previous: Optional[dict[str, int]]
    variability: float
    random_factors: dict[str, float] = field(default_factory=dict)
    time_period: TimePeriod = TimePeriod.UNKNOWN
    global_time_modifiers: ModifierRecord = field(default_factory=ModifierRecord)
    terrain_time_modifiers: ModifierRecord = field(default_factory=ModifierRecord)
    time_modifiers: ModifierRecord = field(default_factory=ModifierRecord)
    season: Optional[str] = None
    season_modifiers: ModifierRecord = field(default_factory=ModifierRecord)
    intermediate: dict[str, int] = field(default_factory=dict)
    final: dict[str, int] = field(default_factory=dict)
    timestamp: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "terrain": {"name": self.terrain_name, **self.baselines},
            "previous": self.previous,
            "variability": self.variability,
            "randomFactors": dict(self.random_factors),
            "timePeriod": self.time_period.value,
            "globalTimeModifiers": self.global_time_modifiers.to_dict(),
            "terrainTimeModifiers": self.terrain_time_modifiers.to_dict(),
            "timeModifiers": self.time_modifiers.to_dict(),
            "season": self.season,
            "seasonModifiers": self.season_modifiers.to_dict(),
            "intermediate": dict(self.intermediate),
            "final": dict(self.final),
            "timestamp": self.timestamp,
        }


class WeatherCalculator:
    """Derives the next weather state. Holds no state besides the generator."""

    def __init__(self, rng: Generator) -> None:
        self._rng = rng

    def calculate(
        self,
        terrain: Terrain,
        previous: Optional[WeatherState],
        variability: float,
        season_id: Optional[str],
        campaign: CampaignData,
        time_period: TimePeriod,
        timestamp: float,
    ) -> tuple[WeatherState, CalculationTrace]:
        """Run one update tick.

        The caller has already resolved ``terrain`` to a valid campaign entry.
        An unknown season or time period contributes zero modifiers.
        """
        trace = CalculationTrace(
            terrain_name=terrain.name,
            baselines=terrain.baselines(),
            previous=previous.values() if previous else None,
            variability=variability,
            timestamp=timestamp,
        )

        # 1. Fresh draw per dimension
        factors = {dim: random_factor(self._rng, variability, dim) for dim in DIMENSIONS}
        trace.random_factors = factors

        # 2. Interpolated base values. Temperature reverts to the terrain
        # baseline every tick; the others average with the previous value.
        intermediate: dict[str, int] = {}
        for dim in DIMENSIONS:
            baseline = terrain.baseline(dim)
            if dim == "temperature":
                base = baseline
            else:
                prior = previous.value(dim) if previous else baseline
                base = (baseline + prior) / 2
            intermediate[dim] = round_half_up(base + factors[dim])
        trace.intermediate = intermediate

        # 3. Time of day
        global_mods, terrain_mods, time_mods = resolve_time_modifiers(time_period, campaign, terrain)
        trace.time_period = time_period
        trace.global_time_modifiers = global_mods
        trace.terrain_time_modifiers = terrain_mods
        trace.time_modifiers = time_mods

        # 4. Season
        season_mods = campaign.season_modifiers(season_id)
        trace.season = season_id
        trace.season_modifiers = season_mods

        # 5. Apply and clamp
        final = {
            dim: int(clamp(intermediate[dim] + time_mods.get(dim) + season_mods.get(dim)))
            for dim in DIMENSIONS
        }
        trace.final = final

        # 6. New state
        state = WeatherState(
            temperature=final["temperature"],
            wind=final["wind"],
            precipitation=final["precipitation"],
            humidity=final["humidity"],
            terrain=previous.terrain if previous else (terrain.id or terrain_key(terrain.name)),
            season=season_id,
            last_update=timestamp,
        )
        return state, trace
