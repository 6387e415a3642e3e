"""Run one scene's weather forward on a game clock."""

from __future__ import annotations

from typing import Callable, Optional

import numpy as np
from numpy.random import Generator

from weather_sim.core.clock import GameClock
from weather_sim.core.config import (
    DAYS_PER_SEASON,
    DEFAULT_SEED,
    DEFAULT_STEP_HOURS,
    DEFAULT_VARIABILITY,
)
from weather_sim.core.settings import WeatherSettings
from weather_sim.simulation.engine import WeatherEngine
from weather_sim.simulation.metrics import MetricsCollector
from weather_sim.simulation.store import InMemoryStateStore
from weather_sim.viz.logger import WeatherLogger
from weather_sim.world.campaign import CampaignData
from weather_sim.world.climate import WeatherState
from weather_sim.world.periods import PeriodClassifier

SCENE_ID = "simulation"


class WeatherSimulator:
    """Orchestrates a single-scene weather run."""

    def __init__(
        self,
        campaign: CampaignData,
        terrain_id: Optional[str] = None,
        season_id: Optional[str] = None,
        seed: int = DEFAULT_SEED,
        variability: int = DEFAULT_VARIABILITY,
        step_hours: float = DEFAULT_STEP_HOURS,
        period_mode: str = PeriodClassifier.SOLAR,
        logger: Optional[WeatherLogger] = None,
    ) -> None:
        if step_hours <= 0:
            raise ValueError("step_hours must be positive")
        self.rng: Generator = np.random.default_rng(seed)
        self.step_hours = step_hours
        self.campaign = campaign

        # Start the calendar at the requested season
        season_ids = list(campaign.seasons)
        start_day = 0
        if season_id in campaign.seasons:
            start_day = season_ids.index(season_id) * DAYS_PER_SEASON
        self.clock = GameClock(season_ids, start_day=start_day, classifier=PeriodClassifier(period_mode))

        self.settings = WeatherSettings(
            terrain=terrain_id,
            variability=variability,
            time_source="game",
            period_mode=period_mode,
        )
        self.logger = logger or WeatherLogger(stdout=False)
        self.engine = WeatherEngine(
            campaign=campaign,
            store=InMemoryStateStore(),
            time_source=self.clock,
            settings=self.settings,
            rng=self.rng,
            logger=self.logger,
        )
        self.metrics = MetricsCollector()
        self._tick = 0
        self._callback: Optional[Callable[[int, MetricsCollector], None]] = None

    def set_callback(self, callback: Callable[[int, MetricsCollector], None]) -> None:
        """Called after every tick with the tick number and the metrics."""
        self._callback = callback

    @property
    def state(self) -> Optional[WeatherState]:
        return self.engine.store.get(SCENE_ID)

    def initialize(self) -> WeatherState:
        state = self.engine.initialize_scene(SCENE_ID, terrain_id=self.settings.terrain)
        self._record(state)
        return state

    def tick(self) -> WeatherState:
        """Advance the clock one step and recalculate."""
        if self.state is None:
            self.initialize()
        self.clock.advance(self.step_hours)
        self._tick += 1
        state = self.engine.update_scene(SCENE_ID, forced=True)
        self._record(state)
        if self._callback:
            self._callback(self._tick, self.metrics)
        return state

    def run(self, hours: float) -> None:
        """Simulate ``hours`` of game time."""
        steps = int(hours // self.step_hours)
        for _ in range(steps):
            self.tick()

    def _record(self, state: WeatherState) -> None:
        self.metrics.collect(
            tick=self._tick,
            day=self.clock.day,
            hour=self.clock.hour,
            time_period=self.clock.current_time_period().value,
            state=state,
        )
