"""Data collection, statistics, and export for simulation runs."""

from __future__ import annotations

import csv
import os
import statistics
from dataclasses import dataclass
from typing import Optional

from weather_sim.core.config import DIMENSIONS, VALUE_MAX, VALUE_MIN
from weather_sim.world.climate import WeatherState


@dataclass
class WeatherSnapshot:
    """The weather of one scene at one simulated moment."""

    tick: int = 0
    day: int = 0
    hour: float = 0.0
    time_period: str = ""
    season: str = ""
    temperature: int = 0
    wind: int = 0
    precipitation: int = 0
    humidity: int = 0

    def value(self, dimension: str) -> int:
        return getattr(self, dimension)


class MetricsCollector:
    """Collects time-series data every tick."""

    def __init__(self) -> None:
        self.snapshots: list[WeatherSnapshot] = []

    def collect(
        self,
        tick: int,
        day: int,
        hour: float,
        time_period: str,
        state: WeatherState,
    ) -> WeatherSnapshot:
        snapshot = WeatherSnapshot(
            tick=tick,
            day=day,
            hour=hour,
            time_period=time_period,
            season=state.season or "",
            temperature=state.temperature,
            wind=state.wind,
            precipitation=state.precipitation,
            humidity=state.humidity,
        )
        self.snapshots.append(snapshot)
        return snapshot

    def series(self, dimension: str) -> list[int]:
        return [s.value(dimension) for s in self.snapshots]

    def period_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for s in self.snapshots:
            counts[s.time_period] = counts.get(s.time_period, 0) + 1
        return counts

    def extreme_counts(self) -> dict[str, int]:
        """Ticks spent pinned at either bound, per dimension."""
        return {
            dim: sum(1 for v in self.series(dim) if v in (VALUE_MIN, VALUE_MAX))
            for dim in DIMENSIONS
        }

    def dimension_stats(self) -> dict[str, dict[str, float]]:
        stats: dict[str, dict[str, float]] = {}
        for dim in DIMENSIONS:
            values = self.series(dim)
            if not values:
                continue
            stats[dim] = {
                "mean": statistics.mean(values),
                "std": statistics.stdev(values) if len(values) > 1 else 0.0,
                "min": min(values),
                "max": max(values),
            }
        return stats

    def export_csv(self, filepath: str) -> None:
        """Export all snapshots to CSV."""
        os.makedirs(os.path.dirname(filepath) if os.path.dirname(filepath) else ".", exist_ok=True)
        with open(filepath, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow([
                "tick", "day", "hour", "time_period", "season",
                "temperature", "wind", "precipitation", "humidity",
            ])
            for s in self.snapshots:
                writer.writerow([
                    s.tick, s.day, f"{s.hour:.1f}", s.time_period, s.season,
                    s.temperature, s.wind, s.precipitation, s.humidity,
                ])

    def summary_report(self, start_day: int = 0, end_day: Optional[int] = None) -> str:
        """Generate a human-readable summary of the simulated period."""
        relevant = [
            s for s in self.snapshots
            if s.day >= start_day and (end_day is None or s.day <= end_day)
        ]
        if not relevant:
            return "No data available for the specified period."

        first = relevant[0]
        last = relevant[-1]
        lines = [
            f"=== Weather Summary: Day {first.day} to Day {last.day} ===",
            f"Ticks: {len(relevant)}",
            "",
            "Dimensions:",
        ]
        for dim in DIMENSIONS:
            values = [s.value(dim) for s in relevant]
            avg = statistics.mean(values)
            std = statistics.stdev(values) if len(values) > 1 else 0.0
            pinned = sum(1 for v in values if v in (VALUE_MIN, VALUE_MAX))
            lines.append(
                f"  {dim:<14} mean={avg:+5.1f}  std={std:4.1f}  "
                f"min={min(values):+3d}  max={max(values):+3d}  at extreme={pinned}"
            )

        periods: dict[str, int] = {}
        for s in relevant:
            periods[s.time_period] = periods.get(s.time_period, 0) + 1
        lines.append("")
        lines.append("Time periods:")
        for period, count in sorted(periods.items(), key=lambda x: -x[1]):
            lines.append(f"  {period}: {count} ({count / len(relevant) * 100:.0f}%)")

        seasons = sorted({s.season for s in relevant if s.season})
        if seasons:
            lines.append("")
            lines.append(f"Seasons: {', '.join(seasons)}")

        return "\n".join(lines)
