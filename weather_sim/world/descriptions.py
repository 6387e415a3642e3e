"""Narrative description lookup and survival rules."""

from __future__ import annotations

from weather_sim.core.config import NO_RULES_MESSAGE, VALUE_MAX, VALUE_MIN
from weather_sim.world.campaign import CampaignData
from weather_sim.world.climate import WeatherState


def bucket_level(value: float, levels: list[int]) -> int:
    """Pick the description level for ``value`` from the defined levels.

    Negative values scan upward for the first level >= value; non-negative
    values scan downward for the first level <= value. Either way the lowest
    level is the fallback. ``levels`` must not be empty.
    """
    ordered = sorted(levels)
    if value < 0:
        for level in ordered:
            if value <= level:
                return level
        return ordered[0]

    for level in reversed(ordered):
        if value >= level:
            return level
    return ordered[0]


def bucketize(value: float, table: dict[int, str]) -> str:
    return table[bucket_level(value, list(table))]


def describe_dimension(dimension: str, value: float, campaign: CampaignData) -> str:
    table = campaign.dimensions.get(dimension)
    if table is None:
        return f"Normal {dimension}"
    return bucketize(value, table.descriptions)


def _effect_bullets(effect: str) -> list[str]:
    return [f"{part.strip()}." for part in effect.split(".") if part.strip()]


def survival_rules(state: WeatherState, campaign: CampaignData) -> list[str]:
    """Rules triggered by the current conditions, followed by terrain rules."""
    rules: list[str] = []
    for table in campaign.dimensions.values():
        for rule in table.rules:
            if rule.applies(state.value(rule.dimension)):
                rules.extend(_effect_bullets(rule.effect))

    terrain = campaign.terrain(state.terrain)
    if terrain is not None:
        rules.extend(terrain.rules)

    return rules or [NO_RULES_MESSAGE]


def to_fahrenheit(value: float, campaign: CampaignData) -> float:
    """Map a temperature value onto the campaign's Fahrenheit range."""
    lo, hi = campaign.temperature_range_f
    return lo + (value - VALUE_MIN) * (hi - lo) / (VALUE_MAX - VALUE_MIN)
