"""Shared fixtures for the weather simulation tests."""

from __future__ import annotations

from typing import Optional

import numpy as np
import pytest

from weather_sim.core.clock import TimeSource
from weather_sim.world.campaign import CampaignData, parse_campaign


class ScriptedRng:
    """Stands in for a numpy Generator, replaying fixed ``random()`` draws."""

    def __init__(self, values: list[float]) -> None:
        self.values = list(values)
        self.calls = 0

    def random(self) -> float:
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        return value


class ManualTimeSource(TimeSource):
    """Time source whose clock, hour and season the test controls."""

    def __init__(self, timestamp: float = 1_000_000.0, hour: Optional[float] = None, season: Optional[str] = None):
        super().__init__()
        self.timestamp = timestamp
        self.hour = hour
        self.season = season

    def current_timestamp(self) -> float:
        return self.timestamp

    def current_hour(self) -> Optional[float]:
        return self.hour

    def current_season(self) -> Optional[str]:
        return self.season

    def set_season(self, season_id: str) -> bool:
        self.season = season_id
        return True

    def advance_hours(self, hours: float) -> None:
        self.timestamp += hours * 3600


CAMPAIGN_DOC = {
    "id": "test",
    "name": "Test Realm",
    "temperatureRange": [0, 100],
    "terrains": {
        "plains": {
            "name": "Open Plains",
            "description": "Grass to the horizon.",
            "temperature": 5,
            "wind": 2,
            "precipitation": 0,
            "humidity": 3,
            "rules": ["Tall grass hides small creatures."],
            "timeModifiers": {"Noon": {"temperature": 1, "wind": -1}},
        },
        "peak": {
            "name": "Frozen Peak",
            "temperature": -9,
            "wind": 9,
            "precipitation": 2,
            "humidity": -4,
        },
    },
    "seasons": {
        "calm": {"name": "Calm", "modifiers": {}},
        "winter": {
            "name": "Winter",
            "modifiers": {"temperature": -3, "wind": 1, "variability": 2},
        },
    },
    "timeModifiers": {
        "Noon": {"temperature": 2},
        "Late Night": {"temperature": -2, "humidity": 1},
    },
    "weatherDimensions": {
        "temperature": {
            "descriptions": {"-10": "A", "0": "B", "5": "C"},
            "rules": [
                {"extremeHeat": 8, "effect": "Save DC 10 each hour. Drink twice the water."},
                {"extremeCold": -8, "effect": "Frostbite risk."},
            ],
        },
        "wind": {
            "descriptions": {"-10": "Still", "0": "Breezy", "7": "Gale"},
            "rules": [{"strongWind": 7, "effect": "Ranged attacks have disadvantage."}],
        },
    },
}


@pytest.fixture
def campaign() -> CampaignData:
    return parse_campaign(CAMPAIGN_DOC)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


@pytest.fixture
def time_source() -> ManualTimeSource:
    return ManualTimeSource()
