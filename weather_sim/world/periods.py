"""Time-of-day periods and the modifiers they contribute."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from weather_sim.core.config import (
    DEFAULT_SUNRISE,
    DEFAULT_SUNSET,
    HOUR_TABLE,
    HOURS_PER_DAY,
)
from weather_sim.world.campaign import CampaignData, ModifierRecord, Terrain


class TimePeriod(str, Enum):
    EARLY_MORNING = "Early Morning"
    MORNING = "Morning"
    NOON = "Noon"
    AFTERNOON = "Afternoon"
    EVENING = "Evening"
    NIGHT = "Night"
    LATE_NIGHT = "Late Night"
    UNKNOWN = "Unknown Time"


HourTable = list[tuple[int, TimePeriod]]

DEFAULT_HOUR_TABLE: HourTable = [(start, TimePeriod(name)) for start, name in HOUR_TABLE]


def validate_hour_table(table: HourTable) -> HourTable:
    """Check a start-hour table is strictly increasing and inside one day."""
    if not table:
        raise ValueError("hour table must define at least one period")
    starts = [start for start, _ in table]
    if starts != sorted(set(starts)):
        raise ValueError("hour table start hours must be strictly increasing")
    if starts[0] < 0 or starts[-1] >= HOURS_PER_DAY:
        raise ValueError("hour table start hours must lie in [0, 24)")
    if any(period is TimePeriod.UNKNOWN for _, period in table):
        raise ValueError("Unknown Time cannot be assigned to an hour range")
    return table


def classify_hour(hour: Optional[float], table: HourTable = DEFAULT_HOUR_TABLE) -> TimePeriod:
    """Map an hour of day onto the fixed-hour period table.

    Each period runs from its start hour up to the next start hour; the last
    entry wraps past midnight to the first, so the table covers the whole day.
    """
    if hour is None or not 0 <= hour < HOURS_PER_DAY:
        return TimePeriod.UNKNOWN
    for start, period in reversed(table):
        if hour >= start:
            return period
    # Before the first start hour: still inside the wrapped last period
    return table[-1][1]


def classify_solar(
    hour: Optional[float],
    sunrise: float,
    sunset: float,
    midday: Optional[float] = None,
) -> TimePeriod:
    """Classify relative to sunrise and sunset.

    Daylight splits into quarters around midday (Early Morning, Noon, then
    Afternoon for the second half); night splits into halves (Night, Late Night).
    """
    if hour is None or not 0 <= hour < HOURS_PER_DAY:
        return TimePeriod.UNKNOWN
    daylight = sunset - sunrise
    night = HOURS_PER_DAY - daylight
    if daylight <= 0 or night <= 0:
        return TimePeriod.UNKNOWN

    if midday is None:
        midday = sunrise + daylight / 2
    if not sunrise < midday < sunset:
        return TimePeriod.UNKNOWN

    if sunrise <= hour < sunset:
        if hour < (sunrise + midday) / 2:
            return TimePeriod.EARLY_MORNING
        if hour < midday:
            return TimePeriod.NOON
        return TimePeriod.AFTERNOON

    since_sunset = (hour - sunset) % HOURS_PER_DAY
    if since_sunset < night / 2:
        return TimePeriod.NIGHT
    return TimePeriod.LATE_NIGHT


class PeriodClassifier:
    """One classification algorithm, chosen once per deployment."""

    HOURS = "hours"
    SOLAR = "solar"

    def __init__(
        self,
        mode: str = HOURS,
        table: Optional[HourTable] = None,
        default_sunrise: float = DEFAULT_SUNRISE,
        default_sunset: float = DEFAULT_SUNSET,
    ) -> None:
        if mode not in (self.HOURS, self.SOLAR):
            raise ValueError(f"Unknown period classifier mode: {mode}")
        self.mode = mode
        self.table = validate_hour_table(table) if table is not None else DEFAULT_HOUR_TABLE
        self.default_sunrise = default_sunrise
        self.default_sunset = default_sunset

    def classify(
        self,
        hour: Optional[float],
        sun_times: Optional[tuple[float, float, float]] = None,
    ) -> TimePeriod:
        if self.mode == self.HOURS:
            return classify_hour(hour, self.table)
        if sun_times is None:
            return classify_solar(hour, self.default_sunrise, self.default_sunset)
        sunrise, sunset, midday = sun_times
        return classify_solar(hour, sunrise, sunset, midday)


def resolve_time_modifiers(
    period: TimePeriod,
    campaign: CampaignData,
    terrain: Terrain,
) -> tuple[ModifierRecord, ModifierRecord, ModifierRecord]:
    """Return (global, terrain-specific, combined) modifiers for a period."""
    if period is TimePeriod.UNKNOWN:
        zero = ModifierRecord.zero()
        return zero, zero, zero
    global_mods = campaign.time_modifiers.get(period.value, ModifierRecord.zero())
    terrain_mods = terrain.time_modifiers.get(period.value, ModifierRecord.zero())
    return global_mods, terrain_mods, global_mods.plus(terrain_mods)
