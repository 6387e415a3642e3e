import pytest

from weather_sim.world.campaign import ModifierRecord
from weather_sim.world.periods import (
    PeriodClassifier,
    TimePeriod,
    classify_hour,
    classify_solar,
    resolve_time_modifiers,
    validate_hour_table,
)


def test_every_hour_maps_to_a_known_period():
    for hour in range(24):
        assert classify_hour(hour) is not TimePeriod.UNKNOWN


@pytest.mark.parametrize(
    "hour, expected",
    [
        (0, TimePeriod.NIGHT),
        (1.9, TimePeriod.NIGHT),
        (2, TimePeriod.LATE_NIGHT),
        (4, TimePeriod.LATE_NIGHT),
        (5, TimePeriod.EARLY_MORNING),
        (8, TimePeriod.MORNING),
        (11.5, TimePeriod.MORNING),
        (12, TimePeriod.NOON),
        (14, TimePeriod.AFTERNOON),
        (18, TimePeriod.EVENING),
        (21, TimePeriod.NIGHT),
        (23, TimePeriod.NIGHT),
    ],
)
def test_fixed_hour_table(hour, expected):
    assert classify_hour(hour) is expected


@pytest.mark.parametrize("hour", [None, -1, 24, 30])
def test_missing_or_invalid_hour_is_unknown(hour):
    assert classify_hour(hour) is TimePeriod.UNKNOWN
    assert classify_solar(hour, 6, 18) is TimePeriod.UNKNOWN


@pytest.mark.parametrize(
    "hour, expected",
    [
        (6, TimePeriod.EARLY_MORNING),
        (8.9, TimePeriod.EARLY_MORNING),
        (9, TimePeriod.NOON),
        (11.9, TimePeriod.NOON),
        (12, TimePeriod.AFTERNOON),
        (17.9, TimePeriod.AFTERNOON),
        (18, TimePeriod.NIGHT),
        (23.9, TimePeriod.NIGHT),
        (0, TimePeriod.LATE_NIGHT),
        (5.9, TimePeriod.LATE_NIGHT),
    ],
)
def test_solar_quarters_and_night_halves(hour, expected):
    assert classify_solar(hour, sunrise=6, sunset=18) is expected


def test_solar_uses_given_midday():
    # Midday at 10: first quarter ends at 8
    assert classify_solar(7.5, sunrise=6, sunset=18, midday=10) is TimePeriod.EARLY_MORNING
    assert classify_solar(9, sunrise=6, sunset=18, midday=10) is TimePeriod.NOON
    assert classify_solar(10, sunrise=6, sunset=18, midday=10) is TimePeriod.AFTERNOON


@pytest.mark.parametrize("sunrise, sunset", [(6, 6), (8, 5), (0, 24)])
def test_solar_degenerate_day_is_unknown(sunrise, sunset):
    assert classify_solar(10, sunrise, sunset) is TimePeriod.UNKNOWN


def test_classifier_modes():
    hours = PeriodClassifier(PeriodClassifier.HOURS)
    solar = PeriodClassifier(PeriodClassifier.SOLAR)
    assert hours.classify(9) is TimePeriod.MORNING
    # Default sun times 6-18
    assert solar.classify(8.5) is TimePeriod.EARLY_MORNING
    assert solar.classify(8.5, sun_times=(4.0, 20.0, 12.0)) is TimePeriod.NOON


def test_classifier_rejects_unknown_mode():
    with pytest.raises(ValueError):
        PeriodClassifier("lunar")


def test_hour_table_validation():
    with pytest.raises(ValueError):
        validate_hour_table([])
    with pytest.raises(ValueError):
        validate_hour_table([(8, TimePeriod.MORNING), (5, TimePeriod.EARLY_MORNING)])
    with pytest.raises(ValueError):
        validate_hour_table([(0, TimePeriod.UNKNOWN)])

    table = [(6, TimePeriod.MORNING), (18, TimePeriod.NIGHT)]
    classifier = PeriodClassifier(table=table)
    assert classifier.classify(3) is TimePeriod.NIGHT
    assert classifier.classify(12) is TimePeriod.MORNING


def test_time_modifiers_sum_global_and_terrain(campaign):
    plains = campaign.terrains["plains"]
    global_mods, terrain_mods, combined = resolve_time_modifiers(TimePeriod.NOON, campaign, plains)
    assert global_mods.temperature == 2
    assert terrain_mods.temperature == 1
    assert combined.temperature == 3
    assert combined.wind == -1


def test_time_modifiers_zero_for_unknown_or_missing_period(campaign):
    plains = campaign.terrains["plains"]
    assert resolve_time_modifiers(TimePeriod.UNKNOWN, campaign, plains)[2] == ModifierRecord.zero()
    assert resolve_time_modifiers(TimePeriod.EVENING, campaign, plains)[2] == ModifierRecord.zero()
