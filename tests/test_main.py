import json

import pytest

from weather_sim.main import main


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    for key in ["WEATHER_CONFIG_PATH", "WEATHER_USE_AI", "WEATHER_TIME_SOURCE", "WEATHER_CAMPAIGN",
                "WEATHER_CAMPAIGN_PATH", "WEATHER_STATE_PATH", "WEATHER_LOG_FILE", "WEATHER_MANUAL_ONLY",
                "WEATHER_VARIABILITY", "WEATHER_TERRAIN", "WEATHER_SEASON", "WEATHER_UPDATE_FREQUENCY"]:
        monkeypatch.delenv(key, raising=False)


def test_scene_commands(tmp_path, capsys):
    state_file = str(tmp_path / "state.json")
    base = ["--state-file", state_file, "--verbosity", "0"]

    assert main(base + ["init", "--terrain", "desert", "--season", "summer"]) == 0
    state = json.loads(capsys.readouterr().out)
    assert state["terrain"] == "desert"
    assert state["temperature"] == 7

    assert main(base + ["report"]) == 0
    assert "Weather for Desert" in capsys.readouterr().out

    assert main(base + ["forecast", "--days", "3"]) == 0
    assert "3-Day Weather Forecast" in capsys.readouterr().out

    assert main(base + ["set-terrain", "volcano"]) == 1
    assert "Unknown terrain 'volcano'" in capsys.readouterr().out

    assert main(base + ["set-terrain", "arctic"]) == 0
    capsys.readouterr()
    assert json.loads(open(state_file, encoding="utf-8").read())["default"]["terrain"] == "arctic"

    assert main(base + ["trace"]) == 0
    assert "Terrain: Arctic Tundra" in capsys.readouterr().out

    assert main(base + ["stats"]) == 0
    assert json.loads(capsys.readouterr().out)["scenes"] == ["default"]


def test_unknown_campaign(tmp_path, capsys):
    assert main(["--state-file", str(tmp_path / "s.json"), "--campaign", "nowhere", "stats"]) == 1
    assert "Unknown campaign" in capsys.readouterr().err


def test_trace_on_fresh_scene(tmp_path, capsys):
    state_file = tmp_path / "s.json"
    assert main(["--state-file", str(state_file), "--verbosity", "0", "trace"]) == 0
    out = capsys.readouterr().out
    assert "Terrain: Temperate Plains | Variability: 7" in out  # 5 + spring delta 2
    assert "default" in json.loads(state_file.read_text(encoding="utf-8"))


def test_variability_persists_between_runs(tmp_path, capsys):
    base = ["--state-file", str(tmp_path / "s.json"), "--verbosity", "0"]
    assert main(base + ["set-variability", "0"]) == 0
    assert "Variability set to 0" in capsys.readouterr().out
    assert (tmp_path / "s.settings").exists()

    assert main(base + ["stats"]) == 0
    assert json.loads(capsys.readouterr().out)["variability"] == 0

    assert main(base + ["set-variability", "14"]) == 0
    capsys.readouterr()
    assert main(base + ["stats"]) == 0
    assert json.loads(capsys.readouterr().out)["variability"] == 10
