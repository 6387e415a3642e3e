"""Time sources: where the current timestamp, hour and season come from."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from weather_sim.core.config import (
    DAYLIGHT_HOURS,
    DAYS_PER_SEASON,
    DEFAULT_DAYLIGHT_HOURS,
    GAME_START_HOUR,
    HOURS_PER_DAY,
    SECONDS_PER_HOUR,
)
from weather_sim.world.periods import PeriodClassifier, TimePeriod


def hours_since(timestamp: float, now: float) -> float:
    return (now - timestamp) / SECONDS_PER_HOUR


def is_update_needed(last_update: Optional[float], frequency_hours: float, now: float) -> bool:
    if not last_update:
        return True
    return hours_since(last_update, now) >= frequency_hours


class TimeSource(ABC):
    """Supplies timestamp, hour of day and season to the weather engine."""

    def __init__(self, classifier: Optional[PeriodClassifier] = None) -> None:
        self.classifier = classifier or PeriodClassifier()

    @abstractmethod
    def current_timestamp(self) -> float:
        """Seconds on this source's timeline."""

    @abstractmethod
    def current_hour(self) -> Optional[float]:
        """Fractional hour of day, or None when unknown."""

    @abstractmethod
    def current_season(self) -> Optional[str]:
        """Season id, or None when this source does not track seasons."""

    def sun_times(self) -> Optional[tuple[float, float, float]]:
        """(sunrise, sunset, midday) as hours of day, when known."""
        return None

    def current_time_period(self) -> TimePeriod:
        return self.classifier.classify(self.current_hour(), self.sun_times())

    def set_season(self, season_id: str) -> bool:
        """Accept a manually chosen season. Calendar-driven sources refuse."""
        return False


class SystemClock(TimeSource):
    """Wall-clock time with a manually configured season."""

    def __init__(self, season: Optional[str] = None, classifier: Optional[PeriodClassifier] = None) -> None:
        super().__init__(classifier)
        self.season = season

    def set_season(self, season_id: str) -> bool:
        self.season = season_id
        return True

    def current_timestamp(self) -> float:
        return time.time()

    def current_hour(self) -> Optional[float]:
        now = datetime.now()
        return now.hour + now.minute / 60

    def current_season(self) -> Optional[str]:
        return self.season


class NullTimeSource(TimeSource):
    """No calendar available: the period is always Unknown Time."""

    def current_timestamp(self) -> float:
        return time.time()

    def current_hour(self) -> Optional[float]:
        return None

    def current_season(self) -> Optional[str]:
        return None

    def set_season(self, season_id: str) -> bool:
        # The stored scene season is used as-is
        return True


class GameClock(TimeSource):
    """In-game calendar: hours, days, and seasons cycling through the campaign."""

    def __init__(
        self,
        season_ids: list[str],
        start_hour: float = GAME_START_HOUR,
        start_day: int = 0,
        days_per_season: int = DAYS_PER_SEASON,
        classifier: Optional[PeriodClassifier] = None,
    ) -> None:
        super().__init__(classifier)
        if not season_ids:
            raise ValueError("GameClock needs at least one season")
        self.season_ids = list(season_ids)
        self.days_per_season = days_per_season
        self.elapsed_hours: float = start_day * HOURS_PER_DAY + start_hour

    @property
    def day(self) -> int:
        return int(self.elapsed_hours // HOURS_PER_DAY)

    @property
    def hour(self) -> float:
        return self.elapsed_hours % HOURS_PER_DAY

    @property
    def days_per_year(self) -> int:
        return self.days_per_season * len(self.season_ids)

    @property
    def day_of_year(self) -> int:
        return self.day % self.days_per_year

    @property
    def day_of_season(self) -> int:
        return self.day_of_year % self.days_per_season

    @property
    def season(self) -> str:
        return self.season_ids[(self.day_of_year // self.days_per_season) % len(self.season_ids)]

    def advance(self, hours: float = 1.0) -> None:
        """Advance the clock by some hours."""
        if hours < 0:
            raise ValueError("cannot move the game clock backwards")
        self.elapsed_hours += hours

    def daylight_hours(self) -> float:
        """Hours of daylight, interpolated within the season toward the next."""
        season = self.season
        day_frac = self.day_of_season / self.days_per_season

        current_hours = DAYLIGHT_HOURS.get(season, DEFAULT_DAYLIGHT_HOURS)
        next_season = self.season_ids[(self.season_ids.index(season) + 1) % len(self.season_ids)]
        next_hours = DAYLIGHT_HOURS.get(next_season, DEFAULT_DAYLIGHT_HOURS)

        return current_hours + (next_hours - current_hours) * day_frac

    def sun_times(self) -> Optional[tuple[float, float, float]]:
        midday = HOURS_PER_DAY / 2
        half = self.daylight_hours() / 2
        return midday - half, midday + half, midday

    def current_timestamp(self) -> float:
        return self.elapsed_hours * SECONDS_PER_HOUR

    def current_hour(self) -> Optional[float]:
        return self.hour

    def current_season(self) -> Optional[str]:
        return self.season


def build_time_source(
    kind: str,
    season_ids: list[str],
    manual_season: Optional[str] = None,
    classifier: Optional[PeriodClassifier] = None,
) -> TimeSource:
    """Select the deployment's time source once, at startup."""
    if kind == "system":
        return SystemClock(season=manual_season, classifier=classifier)
    if kind == "game":
        return GameClock(season_ids, classifier=classifier)
    if kind == "none":
        return NullTimeSource(classifier=classifier)
    raise ValueError(f"Unknown time source: {kind}")
