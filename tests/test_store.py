import json
import threading
from dataclasses import replace

import pytest

from weather_sim.simulation.store import InMemoryStateStore, JsonFileStateStore
from weather_sim.world.climate import WeatherState

STATE = WeatherState(temperature=4, wind=-1, precipitation=6, humidity=2, terrain="plains",
                     season="winter", last_update=3600.0)


@pytest.fixture(params=["memory", "json"])
def store(request, tmp_path):
    if request.param == "memory":
        return InMemoryStateStore()
    return JsonFileStateStore(tmp_path / "state" / "weather.json")


def test_get_put_delete(store):
    assert store.get("scene-1") is None
    store.put("scene-1", STATE)
    store.put("scene-2", replace(STATE, terrain="peak"))
    assert store.get("scene-1") == STATE
    assert sorted(store.scene_ids()) == ["scene-1", "scene-2"]

    store.delete("scene-1")
    store.delete("never-existed")
    assert store.get("scene-1") is None
    assert store.scene_ids() == ["scene-2"]


def test_json_store_persists_across_instances(tmp_path):
    path = tmp_path / "weather.json"
    JsonFileStateStore(path).put("tavern", STATE)

    reopened = JsonFileStateStore(path)
    assert reopened.get("tavern") == STATE
    on_disk = json.loads(path.read_text(encoding="utf-8"))
    assert on_disk["tavern"]["lastUpdate"] == 3600.0
    assert list(tmp_path.glob("*.tmp")) == []


def test_scene_lock_serialises_read_modify_write(store):
    store.put("scene", replace(STATE, last_update=0.0))

    def bump():
        for _ in range(10):
            with store.lock("scene"):
                current = store.get("scene")
                store.put("scene", replace(current, last_update=current.last_update + 1))

    threads = [threading.Thread(target=bump) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.get("scene").last_update == 40.0
