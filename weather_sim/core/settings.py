"""Deployment settings for the weather engine."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from weather_sim.core.config import (
    DEFAULT_CAMPAIGN,
    DEFAULT_OPENAI_MODEL,
    DEFAULT_UPDATE_FREQUENCY_HOURS,
    DEFAULT_VARIABILITY,
    UPDATE_FREQUENCY_RANGE,
    VARIABILITY_MAX,
    VARIABILITY_MIN,
)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def clamp_variability(value: float) -> int:
    return int(max(VARIABILITY_MIN, min(VARIABILITY_MAX, round(value))))


def clamp_update_frequency(value: float) -> int:
    lo, hi = UPDATE_FREQUENCY_RANGE
    return int(max(lo, min(hi, round(value))))


@dataclass
class WeatherSettings:
    """World-wide configuration read once at startup.

    ``time_source`` is one of ``system``, ``game`` or ``none``;
    ``period_mode`` is ``hours`` (fixed table) or ``solar`` (sunrise/sunset).
    """

    campaign: str = DEFAULT_CAMPAIGN
    campaign_path: Optional[str] = None
    terrain: Optional[str] = None
    season: Optional[str] = None
    variability: int = DEFAULT_VARIABILITY
    update_frequency: int = DEFAULT_UPDATE_FREQUENCY_HOURS
    manual_only: bool = False
    time_source: str = "system"
    period_mode: str = "hours"
    use_ai: bool = False
    openai_api_key: Optional[str] = None
    openai_model: str = DEFAULT_OPENAI_MODEL
    state_path: Optional[str] = None
    log_verbosity: int = 1
    log_file: Optional[str] = None

    def __post_init__(self) -> None:
        self.variability = clamp_variability(self.variability)
        self.update_frequency = clamp_update_frequency(self.update_frequency)
        if self.time_source not in ("system", "game", "none"):
            raise ValueError(f"Unknown time source: {self.time_source}")
        if self.period_mode not in ("hours", "solar"):
            raise ValueError(f"Unknown period mode: {self.period_mode}")

    @classmethod
    def from_env(cls, config_path: Optional[str] = None) -> "WeatherSettings":
        """Build settings from ``WEATHER_*`` environment variables.

        A ``key: value`` settings file (``config_path``, else
        ``WEATHER_CONFIG_PATH``) supplies defaults; environment variables win
        over the file.
        """
        config_path = config_path or os.getenv("WEATHER_CONFIG_PATH")
        file_config: dict[str, str] = {}
        if config_path and Path(config_path).exists():
            file_config = cls._load_settings_file(Path(config_path))

        def get_value(key: str, default: Optional[str] = None) -> Optional[str]:
            return os.getenv(f"WEATHER_{key.upper()}", file_config.get(key, default))

        def get_int(key: str, default: int) -> int:
            raw = get_value(key)
            if raw is None or raw == "":
                return default
            try:
                return int(float(raw))
            except ValueError:
                return default

        def get_bool(key: str, default: bool) -> bool:
            raw = get_value(key)
            if raw is None:
                return default
            return raw.strip().lower() in _TRUE_VALUES

        return cls(
            campaign=get_value("campaign", DEFAULT_CAMPAIGN) or DEFAULT_CAMPAIGN,
            campaign_path=get_value("campaign_path"),
            terrain=get_value("terrain"),
            season=get_value("season"),
            variability=get_int("variability", DEFAULT_VARIABILITY),
            update_frequency=get_int("update_frequency", DEFAULT_UPDATE_FREQUENCY_HOURS),
            manual_only=get_bool("manual_only", False),
            time_source=get_value("time_source", "system") or "system",
            period_mode=get_value("period_mode", "hours") or "hours",
            use_ai=get_bool("use_ai", False),
            openai_api_key=get_value("openai_api_key") or os.getenv("OPENAI_API_KEY"),
            openai_model=get_value("openai_model", DEFAULT_OPENAI_MODEL) or DEFAULT_OPENAI_MODEL,
            state_path=get_value("state_path"),
            log_verbosity=get_int("log_verbosity", 1),
            log_file=get_value("log_file"),
        )

    @classmethod
    def save_setting(cls, path: str | Path, key: str, value) -> None:
        """Write one ``key: value`` into the settings file, keeping the other keys."""
        path = Path(path)
        config = cls._load_settings_file(path) if path.exists() else {}
        config[key] = str(value)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("".join(f"{k}: {v}\n" for k, v in config.items()), encoding="utf-8")

    @staticmethod
    def _load_settings_file(path: Path) -> dict[str, str]:
        """Parse ``key: value`` lines, ignoring blanks and ``#`` comments."""
        config: dict[str, str] = {}
        for line in path.read_text(encoding="utf-8").splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#") or ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            value = raw_value.strip()
            if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
                value = value[1:-1]
            config[key.strip()] = value
        return config
