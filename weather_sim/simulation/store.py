"""Per-scene weather state storage."""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator, Optional

from weather_sim.world.climate import WeatherState


class WeatherStateStore(ABC):
    """Durable state, one ``WeatherState`` per scene.

    ``lock(scene_id)`` serialises read-modify-write cycles on one scene.
    """

    def __init__(self) -> None:
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @abstractmethod
    def get(self, scene_id: str) -> Optional[WeatherState]:
        """Return the scene's state, or None if it has never been initialised."""

    @abstractmethod
    def put(self, scene_id: str, state: WeatherState) -> None:
        """Replace the scene's state."""

    @abstractmethod
    def delete(self, scene_id: str) -> None:
        """Forget the scene's state."""

    @abstractmethod
    def scene_ids(self) -> list[str]:
        """All scenes with stored state."""

    @contextlib.contextmanager
    def lock(self, scene_id: str) -> Iterator[None]:
        with self._locks_guard:
            scene_lock = self._locks.setdefault(scene_id, threading.Lock())
        with scene_lock:
            yield


class InMemoryStateStore(WeatherStateStore):
    def __init__(self) -> None:
        super().__init__()
        self._states: dict[str, WeatherState] = {}

    def get(self, scene_id: str) -> Optional[WeatherState]:
        return self._states.get(scene_id)

    def put(self, scene_id: str, state: WeatherState) -> None:
        self._states[scene_id] = state

    def delete(self, scene_id: str) -> None:
        self._states.pop(scene_id, None)

    def scene_ids(self) -> list[str]:
        return list(self._states)


class JsonFileStateStore(WeatherStateStore):
    """All scenes in one JSON document, rewritten atomically on every change."""

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path)
        self._io_lock = threading.Lock()

    def _read(self) -> dict[str, dict]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def get(self, scene_id: str) -> Optional[WeatherState]:
        with self._io_lock:
            raw = self._read().get(scene_id)
        return WeatherState.from_dict(raw) if raw else None

    def put(self, scene_id: str, state: WeatherState) -> None:
        with self._io_lock:
            data = self._read()
            data[scene_id] = state.to_dict()
            self._write(data)

    def delete(self, scene_id: str) -> None:
        with self._io_lock:
            data = self._read()
            if data.pop(scene_id, None) is not None:
                self._write(data)

    def scene_ids(self) -> list[str]:
        with self._io_lock:
            return list(self._read())
