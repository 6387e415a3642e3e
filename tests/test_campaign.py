import copy
import json

import pytest

from conftest import CAMPAIGN_DOC
from weather_sim.world.campaign import (
    CampaignDataError,
    ModifierRecord,
    bundled_campaign,
    bundled_campaigns,
    load_campaign,
    parse_campaign,
    terrain_key,
)


def _doc(**overrides):
    doc = copy.deepcopy(CAMPAIGN_DOC)
    doc.update(overrides)
    return doc


def test_parse_builds_reference_data(campaign):
    assert campaign.id == "test"
    assert campaign.name == "Test Realm"
    assert list(campaign.terrains) == ["plains", "peak"]
    assert campaign.default_terrain_id == "plains"
    assert campaign.default_season_id == "calm"
    plains = campaign.terrains["plains"]
    assert plains.baselines() == {"temperature": 5, "wind": 2, "precipitation": 0, "humidity": 3}
    assert plains.time_modifiers["Noon"] == ModifierRecord(temperature=1, wind=-1)
    assert campaign.seasons["winter"].modifiers.variability == 2
    assert campaign.dimensions["temperature"].descriptions == {-10: "A", 0: "B", 5: "C"}


def test_rules_are_typed_by_kind(campaign):
    rules = campaign.dimensions["temperature"].rules
    assert [(r.kind, r.dimension, r.threshold) for r in rules] == [
        ("extremeHeat", "temperature", 8),
        ("extremeCold", "temperature", -8),
    ]
    heat, cold = rules
    assert heat.applies(8) and not heat.applies(7)
    assert cold.applies(-9) and not cold.applies(-7)


def test_unknown_season_modifiers_are_zero(campaign):
    assert campaign.season_modifiers("monsoon") == ModifierRecord.zero()
    assert campaign.season_modifiers(None) == ModifierRecord.zero()
    assert campaign.terrain(None) is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"terrains": {}},
        {"seasons": {}},
        {"weatherDimensions": {"visibility": {"descriptions": {"0": "Clear"}}}},
        {"weatherDimensions": {"wind": {"descriptions": {}}}},
        {"weatherDimensions": {"wind": {"descriptions": {"high": "Gale"}}}},
        {"timeModifiers": {"Noon": {"temperature": "hot"}}},
        {"temperatureRange": [100, 0]},
    ],
)
def test_malformed_documents_are_rejected(overrides):
    with pytest.raises(CampaignDataError):
        parse_campaign(_doc(**overrides))


def test_baseline_out_of_bounds_is_rejected():
    doc = _doc()
    doc["terrains"]["plains"]["temperature"] = 11
    with pytest.raises(CampaignDataError):
        parse_campaign(doc)


def test_missing_terrains_is_rejected():
    doc = _doc()
    del doc["terrains"]
    with pytest.raises(CampaignDataError):
        parse_campaign(doc)


def test_terrain_key():
    assert terrain_key("Rocky Badlands") == "rockybadlands"
    assert terrain_key("  Salt  Flats ") == "saltflats"


def test_load_campaign_from_file(tmp_path):
    doc = _doc()
    del doc["id"]
    path = tmp_path / "homebrew.json"
    path.write_text(json.dumps(doc), encoding="utf-8")
    loaded = load_campaign(path)
    assert loaded.id == "homebrew"
    assert "plains" in loaded.terrains


def test_load_campaign_bad_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(CampaignDataError):
        load_campaign(path)
    with pytest.raises(CampaignDataError):
        load_campaign(tmp_path / "missing.json")


def test_bundled_campaigns():
    assert {"athas", "earth"} <= set(bundled_campaigns())
    earth = bundled_campaign("earth")
    assert earth.default_terrain_id == "temperate"
    assert set(earth.seasons) == {"spring", "summer", "fall", "winter"}
    assert earth.temperature_range_f == (0.0, 100.0)
    athas = bundled_campaign("athas")
    assert list(athas.seasons) == ["highSun", "sunDescending", "sunAscending"]
    assert athas.temperature_range_f == (40.0, 140.0)
    with pytest.raises(CampaignDataError):
        bundled_campaign("nowhere")
