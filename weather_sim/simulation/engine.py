"""Scene-level weather orchestration: initialise, update, forecast, report."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Optional

import numpy as np
from numpy.random import Generator

from weather_sim.core.clock import TimeSource, hours_since, is_update_needed
from weather_sim.core.config import CALCULATION_HISTORY_LIMIT, FORECAST_DAYS
from weather_sim.core.settings import WeatherSettings, clamp_variability
from weather_sim.narration.ai import DescriptionService
from weather_sim.narration.report import (
    ConditionsSummary,
    basic_description,
    build_conditions,
    render_forecast,
    render_report,
)
from weather_sim.simulation.store import WeatherStateStore
from weather_sim.viz.logger import WeatherLogger
from weather_sim.world.campaign import CampaignData, Terrain
from weather_sim.world.climate import CalculationTrace, WeatherCalculator, WeatherState
from weather_sim.world.forecast import ForecastDay, project_forecast
from weather_sim.world.periods import TimePeriod


class WeatherEngine:
    """Evolves the weather of each scene.

    All collaborators are passed in; the engine keeps only the bounded
    calculation history.
    """

    def __init__(
        self,
        campaign: CampaignData,
        store: WeatherStateStore,
        time_source: TimeSource,
        settings: Optional[WeatherSettings] = None,
        rng: Optional[Generator] = None,
        logger: Optional[WeatherLogger] = None,
        describer: Optional[DescriptionService] = None,
    ) -> None:
        self.campaign = campaign
        self.store = store
        self.time_source = time_source
        self.settings = settings or WeatherSettings()
        self.rng: Generator = rng if rng is not None else np.random.default_rng()
        self.logger = logger or WeatherLogger(stdout=False)
        self.describer = describer
        self.calculator = WeatherCalculator(self.rng)
        self._history: list[CalculationTrace] = []

    # ── Reference data resolution ───────────────────────────────────────

    def _resolve_terrain_id(self, terrain_id: Optional[str], scene_id: Optional[str] = None) -> str:
        if terrain_id in self.campaign.terrains:
            return terrain_id
        fallback = self.campaign.default_terrain_id
        if terrain_id is None:
            return fallback
        self.logger.log(
            WeatherLogger.ERROR,
            f"Invalid terrain '{terrain_id}', falling back to '{fallback}'",
            scene_id=scene_id,
        )
        return fallback

    def _resolve_season_id(self, season_id: Optional[str], scene_id: Optional[str] = None) -> str:
        if season_id in self.campaign.seasons:
            return season_id
        fallback = self.campaign.default_season_id
        if season_id is None:
            return fallback
        self.logger.log(
            WeatherLogger.ERROR,
            f"Invalid season '{season_id}', falling back to '{fallback}'",
            scene_id=scene_id,
        )
        return fallback

    def _effective_variability(self, season_id: Optional[str]) -> int:
        delta = self.campaign.season_modifiers(season_id).variability
        return clamp_variability(self.settings.variability + delta)

    # ── Scene lifecycle ─────────────────────────────────────────────────

    def initialize_scene(
        self,
        scene_id: str,
        terrain_id: Optional[str] = None,
        season_id: Optional[str] = None,
    ) -> WeatherState:
        """Seed a scene from terrain baselines. An existing state is kept."""
        with self.store.lock(scene_id):
            existing = self.store.get(scene_id)
            if existing is not None:
                self.logger.log(WeatherLogger.DEBUG, "Preserving existing weather state", scene_id=scene_id)
                self.logger.flush()
                return existing

            terrain = self._resolve_terrain_id(terrain_id or self.settings.terrain, scene_id)
            season = self._resolve_season_id(
                season_id or self.time_source.current_season() or self.settings.season,
                scene_id,
            )
            timestamp = self.time_source.current_timestamp()
            state = WeatherState.from_terrain(self.campaign.terrains[terrain], season, timestamp)
            self.store.put(scene_id, state)

        self.logger.log(
            WeatherLogger.WEATHER,
            f"Initialized weather on {terrain} during {season}",
            scene_id=scene_id,
            timestamp=timestamp,
            **state.values(),
        )
        self.logger.flush()
        return state

    def update_scene(self, scene_id: str, forced: bool = False) -> WeatherState:
        """Advance a scene's weather if due (or when forced)."""
        if self.store.get(scene_id) is None:
            return self.initialize_scene(scene_id)

        with self.store.lock(scene_id):
            state = self.store.get(scene_id)
            now = self.time_source.current_timestamp()

            if not forced and (
                self.settings.manual_only
                or not is_update_needed(state.last_update, self.settings.update_frequency, now)
            ):
                self.logger.log(
                    WeatherLogger.DEBUG,
                    f"Update skipped, {hours_since(state.last_update, now):.1f}h since last update",
                    scene_id=scene_id,
                )
                self.logger.flush()
                return state

            terrain_id = self._resolve_terrain_id(state.terrain, scene_id)
            season_id = self._resolve_season_id(self.time_source.current_season() or state.season, scene_id)
            if terrain_id != state.terrain or season_id != state.season:
                state = replace(state, terrain=terrain_id, season=season_id)
                self.store.put(scene_id, state)

            period = self.time_source.current_time_period()
            variability = self._effective_variability(season_id)
            new_state, trace = self.calculator.calculate(
                terrain=self.campaign.terrains[terrain_id],
                previous=state,
                variability=variability,
                season_id=season_id,
                campaign=self.campaign,
                time_period=period,
                timestamp=now,
            )
            self.store.put(scene_id, new_state)

        self._remember(trace)
        self.logger.log(
            WeatherLogger.WEATHER,
            f"Weather updated ({period.value}, variability {variability})",
            scene_id=scene_id,
            timestamp=now,
            **new_state.values(),
        )
        self.logger.flush()
        return new_state

    def reset_scene(self, scene_id: str) -> WeatherState:
        """Drop the stored state and seed it again from baselines."""
        with self.store.lock(scene_id):
            previous = self.store.get(scene_id)
            self.store.delete(scene_id)
        self.logger.log(WeatherLogger.SETTINGS, "Weather state reset", scene_id=scene_id)
        return self.initialize_scene(
            scene_id,
            terrain_id=previous.terrain if previous else None,
            season_id=previous.season if previous else None,
        )

    def set_terrain(self, scene_id: str, terrain_id: str) -> Optional[WeatherState]:
        """Switch terrain and recalculate. Returns None for an unknown terrain."""
        if terrain_id not in self.campaign.terrains:
            self.logger.log(WeatherLogger.ERROR, f"Unknown terrain '{terrain_id}'", scene_id=scene_id)
            self.logger.flush()
            return None
        state = self.initialize_scene(scene_id, terrain_id=terrain_id)
        with self.store.lock(scene_id):
            self.store.put(scene_id, replace(state, terrain=terrain_id))
        self.logger.log(WeatherLogger.SETTINGS, f"Terrain set to {terrain_id}", scene_id=scene_id)
        return self.update_scene(scene_id, forced=True)

    def set_season(self, scene_id: str, season_id: str) -> Optional[WeatherState]:
        """Switch season and recalculate.

        Returns None for an unknown season, or when the time source derives the
        season from its own calendar.
        """
        if season_id not in self.campaign.seasons:
            self.logger.log(WeatherLogger.ERROR, f"Unknown season '{season_id}'", scene_id=scene_id)
            self.logger.flush()
            return None
        if not self.time_source.set_season(season_id):
            self.logger.log(
                WeatherLogger.ERROR,
                "Season is driven by the game calendar and cannot be set manually",
                scene_id=scene_id,
            )
            self.logger.flush()
            return None
        state = self.initialize_scene(scene_id, season_id=season_id)
        with self.store.lock(scene_id):
            self.store.put(scene_id, replace(state, season=season_id))
        self.logger.log(WeatherLogger.SETTINGS, f"Season set to {season_id}", scene_id=scene_id)
        return self.update_scene(scene_id, forced=True)

    def set_variability(self, value: float) -> int:
        self.settings.variability = clamp_variability(value)
        self.logger.log(WeatherLogger.SETTINGS, f"Variability set to {self.settings.variability}")
        self.logger.flush()
        return self.settings.variability

    # ── Outputs ─────────────────────────────────────────────────────────

    def _scene_terrain(self, state: WeatherState) -> Terrain:
        return self.campaign.terrain(state.terrain) or self.campaign.terrains[self.campaign.default_terrain_id]

    def forecast(self, scene_id: str, days: int = FORECAST_DAYS) -> list[ForecastDay]:
        """Project the scene ahead with the same variability an update would use."""
        state = self.store.get(scene_id) or self.initialize_scene(scene_id)
        variability = self._effective_variability(self.time_source.current_season() or state.season)
        forecast = project_forecast(
            self._scene_terrain(state),
            state,
            variability,
            self.rng,
            days=days,
        )
        self.logger.log(
            WeatherLogger.FORECAST,
            f"Projected {days}-day forecast (variability {variability})",
            scene_id=scene_id,
        )
        self.logger.flush()
        return forecast

    def forecast_text(self, scene_id: str, days: int = FORECAST_DAYS) -> str:
        forecast = self.forecast(scene_id, days)
        state = self.store.get(scene_id)
        return render_forecast(forecast, self._scene_terrain(state).name)

    def conditions(self, scene_id: str) -> ConditionsSummary:
        state = self.store.get(scene_id) or self.initialize_scene(scene_id)
        return build_conditions(state, self.campaign, self.time_source.current_time_period())

    def describe(self, scene_id: str) -> str:
        """Narrative text, generated when a describer is configured."""
        conditions = self.conditions(scene_id)
        if self.describer is not None and self.settings.use_ai:
            text = self.describer.generate(conditions)
            self.logger.flush()
            return text
        return basic_description(conditions)

    def report(self, scene_id: str) -> str:
        state = self.store.get(scene_id) or self.initialize_scene(scene_id)
        period = self.time_source.current_time_period()
        return render_report(state, self.campaign, period, description=self.describe(scene_id))

    @property
    def last_calculation(self) -> Optional[CalculationTrace]:
        return self._history[0] if self._history else None

    @property
    def calculation_history(self) -> list[CalculationTrace]:
        """Most recent first."""
        return list(self._history)

    def _remember(self, trace: CalculationTrace) -> None:
        self._history.insert(0, trace)
        del self._history[CALCULATION_HISTORY_LIMIT:]

    def stats(self) -> dict[str, Any]:
        """Overview of the engine's configuration and stored scenes."""
        period: TimePeriod = self.time_source.current_time_period()
        return {
            "campaign": self.campaign.id,
            "terrains": len(self.campaign.terrains),
            "seasons": len(self.campaign.seasons),
            "scenes": self.store.scene_ids(),
            "variability": self.settings.variability,
            "update_frequency": self.settings.update_frequency,
            "time_period": period.value,
            "season": self.time_source.current_season(),
            "calculations": len(self._history),
        }


