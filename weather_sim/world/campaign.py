"""Campaign reference data: terrains, seasons, modifiers and description tables."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from weather_sim.core.config import (
    DEFAULT_FAHRENHEIT_RANGE,
    DIMENSIONS,
    VALUE_MAX,
    VALUE_MIN,
)

DATA_DIR = Path(__file__).resolve().parent.parent / "data"

# Rule kind -> (dimension, comparison)
RULE_KINDS: dict[str, tuple[str, str]] = {
    "extremeHeat": ("temperature", ">="),
    "extremeCold": ("temperature", "<="),
    "strongWind": ("wind", ">="),
    "heavyPrecipitation": ("precipitation", ">="),
}


class CampaignDataError(ValueError):
    """Raised when a campaign document is malformed."""


@dataclass(frozen=True)
class ModifierRecord:
    """Additive deltas contributed by a season or a time period."""

    temperature: int = 0
    wind: int = 0
    precipitation: int = 0
    humidity: int = 0
    variability: int = 0

    @classmethod
    def zero(cls) -> "ModifierRecord":
        return cls()

    def get(self, dimension: str) -> int:
        return getattr(self, dimension)

    def plus(self, other: "ModifierRecord") -> "ModifierRecord":
        return ModifierRecord(
            temperature=self.temperature + other.temperature,
            wind=self.wind + other.wind,
            precipitation=self.precipitation + other.precipitation,
            humidity=self.humidity + other.humidity,
            variability=self.variability + other.variability,
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "temperature": self.temperature,
            "wind": self.wind,
            "precipitation": self.precipitation,
            "humidity": self.humidity,
            "variability": self.variability,
        }


@dataclass(frozen=True)
class Terrain:
    """A terrain type with its resting weather values."""

    id: str
    name: str
    temperature: int
    wind: int
    precipitation: int
    humidity: int
    description: str = ""
    time_modifiers: dict[str, ModifierRecord] = field(default_factory=dict)
    rules: tuple[str, ...] = ()

    def baseline(self, dimension: str) -> int:
        return getattr(self, dimension)

    def baselines(self) -> dict[str, int]:
        return {dim: self.baseline(dim) for dim in DIMENSIONS}


@dataclass(frozen=True)
class Season:
    id: str
    name: str
    modifiers: ModifierRecord = field(default_factory=ModifierRecord)
    description: str = ""


@dataclass(frozen=True)
class DimensionRule:
    """Narrative rule triggered when a dimension crosses a threshold."""

    kind: str  # one of RULE_KINDS
    threshold: int
    effect: str

    @property
    def dimension(self) -> str:
        return RULE_KINDS[self.kind][0]

    def applies(self, value: int) -> bool:
        if RULE_KINDS[self.kind][1] == ">=":
            return value >= self.threshold
        return value <= self.threshold


@dataclass(frozen=True)
class DimensionTable:
    descriptions: dict[int, str]
    rules: tuple[DimensionRule, ...] = ()


@dataclass(frozen=True)
class CampaignData:
    """Validated campaign configuration. Terrains and seasons keep file order."""

    id: str
    name: str
    terrains: dict[str, Terrain]
    seasons: dict[str, Season]
    time_modifiers: dict[str, ModifierRecord] = field(default_factory=dict)
    dimensions: dict[str, DimensionTable] = field(default_factory=dict)
    temperature_range_f: tuple[float, float] = DEFAULT_FAHRENHEIT_RANGE

    @property
    def default_terrain_id(self) -> str:
        return next(iter(self.terrains))

    @property
    def default_season_id(self) -> str:
        return next(iter(self.seasons))

    def terrain(self, terrain_id: Optional[str]) -> Optional[Terrain]:
        if terrain_id is None:
            return None
        return self.terrains.get(terrain_id)

    def season(self, season_id: Optional[str]) -> Optional[Season]:
        if season_id is None:
            return None
        return self.seasons.get(season_id)

    def season_modifiers(self, season_id: Optional[str]) -> ModifierRecord:
        season = self.season(season_id)
        return season.modifiers if season else ModifierRecord.zero()


def terrain_key(name: str) -> str:
    """Derive a terrain id from its display name ("Rocky Badlands" -> "rockybadlands")."""
    return re.sub(r"\s+", "", name.lower())


# ── Document schema ────────────────────────────────────────────────────


class _Modifiers(BaseModel):
    temperature: int = 0
    wind: int = 0
    precipitation: int = 0
    humidity: int = 0
    variability: int = 0


class _Terrain(BaseModel):
    name: str
    description: str = ""
    temperature: int = Field(ge=VALUE_MIN, le=VALUE_MAX)
    wind: int = Field(ge=VALUE_MIN, le=VALUE_MAX)
    precipitation: int = Field(ge=VALUE_MIN, le=VALUE_MAX)
    humidity: int = Field(ge=VALUE_MIN, le=VALUE_MAX)
    rules: list[str] = Field(default_factory=list)
    timeModifiers: dict[str, _Modifiers] = Field(default_factory=dict)


class _Season(BaseModel):
    name: str
    description: str = ""
    modifiers: _Modifiers = Field(default_factory=_Modifiers)


class _Rule(BaseModel):
    effect: str
    extremeHeat: Optional[int] = None
    extremeCold: Optional[int] = None
    strongWind: Optional[int] = None
    heavyPrecipitation: Optional[int] = None


class _Dimension(BaseModel):
    descriptions: dict[int, str]
    rules: list[_Rule] = Field(default_factory=list)

    @field_validator("descriptions")
    @classmethod
    def _non_empty(cls, value: dict[int, str]) -> dict[int, str]:
        if not value:
            raise ValueError("description table must define at least one level")
        return value


class _CampaignDocument(BaseModel):
    id: Optional[str] = None
    name: str = "Unnamed Campaign"
    terrains: dict[str, _Terrain]
    seasons: dict[str, _Season]
    timeModifiers: dict[str, _Modifiers] = Field(default_factory=dict)
    weatherDimensions: dict[str, _Dimension] = Field(default_factory=dict)
    temperatureRange: tuple[float, float] = DEFAULT_FAHRENHEIT_RANGE

    @field_validator("terrains", "seasons")
    @classmethod
    def _at_least_one(cls, value: dict) -> dict:
        if not value:
            raise ValueError("at least one entry is required")
        return value

    @field_validator("weatherDimensions")
    @classmethod
    def _known_dimensions(cls, value: dict) -> dict:
        unknown = set(value) - set(DIMENSIONS)
        if unknown:
            raise ValueError(f"unknown weather dimensions: {sorted(unknown)}")
        return value


def _modifier_record(raw: _Modifiers) -> ModifierRecord:
    return ModifierRecord(**raw.model_dump())


def _rules(raw_rules: list[_Rule]) -> tuple[DimensionRule, ...]:
    rules: list[DimensionRule] = []
    for raw in raw_rules:
        for kind in RULE_KINDS:
            threshold = getattr(raw, kind)
            if threshold is not None:
                rules.append(DimensionRule(kind=kind, threshold=threshold, effect=raw.effect))
    return tuple(rules)


def parse_campaign(payload: dict[str, Any], campaign_id: Optional[str] = None) -> CampaignData:
    """Validate a raw campaign document and build the reference data."""
    try:
        doc = _CampaignDocument.model_validate(payload)
    except ValidationError as exc:
        raise CampaignDataError(f"Invalid campaign data: {exc}") from exc

    terrains = {
        key: Terrain(
            id=key,
            name=raw.name,
            description=raw.description,
            temperature=raw.temperature,
            wind=raw.wind,
            precipitation=raw.precipitation,
            humidity=raw.humidity,
            time_modifiers={p: _modifier_record(m) for p, m in raw.timeModifiers.items()},
            rules=tuple(raw.rules),
        )
        for key, raw in doc.terrains.items()
    }
    seasons = {
        key: Season(
            id=key,
            name=raw.name,
            modifiers=_modifier_record(raw.modifiers),
            description=raw.description,
        )
        for key, raw in doc.seasons.items()
    }
    dimensions = {
        dim: DimensionTable(descriptions=dict(raw.descriptions), rules=_rules(raw.rules))
        for dim, raw in doc.weatherDimensions.items()
    }
    lo, hi = doc.temperatureRange
    if hi <= lo:
        raise CampaignDataError("temperatureRange must be increasing")

    return CampaignData(
        id=doc.id or campaign_id or terrain_key(doc.name),
        name=doc.name,
        terrains=terrains,
        seasons=seasons,
        time_modifiers={p: _modifier_record(m) for p, m in doc.timeModifiers.items()},
        dimensions=dimensions,
        temperature_range_f=(lo, hi),
    )


def load_campaign(path: str | Path) -> CampaignData:
    """Load and validate a campaign JSON file."""
    path = Path(path)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise CampaignDataError(f"Could not read campaign file {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise CampaignDataError(f"Campaign file {path} must contain a JSON object")
    return parse_campaign(payload, campaign_id=path.stem)


def bundled_campaigns() -> list[str]:
    return sorted(p.stem for p in DATA_DIR.glob("*.json"))


def bundled_campaign(name: str) -> CampaignData:
    """Load one of the campaigns shipped in ``weather_sim/data``."""
    path = DATA_DIR / f"{name}.json"
    if not path.exists():
        raise CampaignDataError(
            f"Unknown campaign '{name}'. Available: {', '.join(bundled_campaigns())}"
        )
    return load_campaign(path)
