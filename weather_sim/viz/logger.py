"""Structured event logging for weather updates and debugging."""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from typing import Optional, TextIO


@dataclass
class LogEntry:
    """One recorded engine event."""

    timestamp: float
    category: str
    message: str
    scene_id: Optional[str] = None
    data: dict = field(default_factory=dict)

    def format(self) -> str:
        scene = f"[{self.scene_id}] " if self.scene_id else ""
        return f"[{self.category:<9}] {scene}{self.message}"


class WeatherLogger:
    """Categorised weather log, buffered until ``flush``.

    Entries are always kept in memory; verbosity only decides what is echoed
    to stdout and the log file.
    """

    # Category constants
    ERROR = "ERROR"
    SETTINGS = "SETTINGS"
    WEATHER = "WEATHER"
    FORECAST = "FORECAST"
    NARRATION = "NARRATION"
    TIME = "TIME"
    DEBUG = "DEBUG"

    _VERBOSITY_MAP = {
        ERROR: 0,
        SETTINGS: 0,
        WEATHER: 1,
        FORECAST: 2,
        NARRATION: 2,
        TIME: 2,
        DEBUG: 3,
    }

    def __init__(self, verbosity: int = 1, log_file: Optional[str] = None, stdout: bool = True) -> None:
        """
        verbosity levels:
            0 = errors and settings changes
            1 = + weather updates
            2 = + forecasts, narration, time periods
            3 = debug
        A negative verbosity silences output entirely.
        """
        self.verbosity = verbosity
        self._stdout = stdout
        self._pending: list[LogEntry] = []
        self._history: list[LogEntry] = []
        self._file: Optional[TextIO] = None

        if log_file:
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            self._file = open(log_file, "w", encoding="utf-8")

    @property
    def entries(self) -> list[LogEntry]:
        return self._history + self._pending

    def log(self, category: str, message: str, scene_id: Optional[str] = None, timestamp: float = 0.0, **data) -> None:
        self._pending.append(LogEntry(timestamp, category, message, scene_id, data))

    def _visible(self, entry: LogEntry) -> bool:
        return self._VERBOSITY_MAP.get(entry.category, 1) <= self.verbosity

    def flush(self) -> None:
        """Echo pending entries that pass the verbosity filter."""
        for line in (e.format() for e in self._pending if self._visible(e)):
            if self._stdout:
                print(line)
            if self._file:
                self._file.write(f"{line}\n")
        self._history.extend(self._pending)
        self._pending = []
        if self._file:
            self._file.flush()

    def get_narrative(self, scene_id: str) -> str:
        """Human-readable history of one scene."""
        scene_entries = [e for e in self.entries if e.scene_id == scene_id]
        if not scene_entries:
            return f"{scene_id}: Nothing notable happened."
        body = [f"  [{e.category}] {e.message}" for e in scene_entries]
        return "\n".join([f"=== {scene_id} ==="] + body)

    def export_json(self, filepath: str) -> None:
        out_dir = os.path.dirname(filepath)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump([asdict(e) for e in self.entries], f, indent=2, default=str)

    def close(self) -> None:
        self.flush()
        if self._file:
            self._file.close()
            self._file = None
