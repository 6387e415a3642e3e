"""Static matplotlib charts for simulation runs and forecasts."""

from __future__ import annotations

import os

import matplotlib
matplotlib.use("Agg")  # files only, no display needed
import matplotlib.pyplot as plt
import numpy as np

from weather_sim.core.config import DIMENSIONS, VALUE_MAX, VALUE_MIN
from weather_sim.simulation.metrics import MetricsCollector
from weather_sim.world.forecast import ForecastDay

_COLORS = {
    "temperature": "tab:red",
    "wind": "tab:purple",
    "precipitation": "tab:cyan",
    "humidity": "tab:blue",
}
_SEASON_COLORS = ["#d4edda", "#fff3cd", "#f8d7da", "#d1ecf1"]


class Dashboard:
    """Saves PNG reports of a simulation's metrics."""

    @staticmethod
    def _shade_seasons(ax, metrics: MetricsCollector) -> None:
        snapshots = metrics.snapshots
        if not snapshots:
            return
        seasons: list[str] = []
        for s in snapshots:
            if s.season not in seasons:
                seasons.append(s.season)

        def shade(first, last):
            color = _SEASON_COLORS[seasons.index(first.season) % len(_SEASON_COLORS)]
            ax.axvspan(first.tick, last.tick, alpha=0.3, color=color, zorder=0)

        start = snapshots[0]
        for s in snapshots[1:]:
            if s.season != start.season:
                shade(start, s)
                start = s
        shade(start, snapshots[-1])

    @staticmethod
    def plot_dimensions(metrics: MetricsCollector, filepath: str) -> None:
        """One line per dimension over the whole run."""
        fig, ax = plt.subplots(figsize=(14, 6))
        ticks = [s.tick for s in metrics.snapshots]
        for dim in DIMENSIONS:
            ax.plot(ticks, metrics.series(dim), color=_COLORS[dim], linewidth=1.5, label=dim.capitalize())
        Dashboard._shade_seasons(ax, metrics)
        ax.set_ylim(VALUE_MIN - 0.5, VALUE_MAX + 0.5)
        ax.set_title("Weather Dimensions")
        ax.set_xlabel("Tick")
        ax.set_ylabel("Value")
        ax.legend(fontsize=8, loc="upper right")
        ax.grid(True, alpha=0.3)
        Dashboard._save(fig, filepath)

    @staticmethod
    def plot_distributions(metrics: MetricsCollector, filepath: str) -> None:
        """Histogram per dimension plus the time-period split."""
        fig, axes = plt.subplots(1, 5, figsize=(22, 4.5))
        bins = np.arange(VALUE_MIN - 0.5, VALUE_MAX + 1.5, 1.0)
        for ax, dim in zip(axes[:4], DIMENSIONS):
            ax.hist(metrics.series(dim), bins=bins, color=_COLORS[dim], alpha=0.8)
            ax.set_title(dim.capitalize())
            ax.grid(True, alpha=0.3)

        ax = axes[4]
        counts = metrics.period_counts()
        if counts:
            labels = list(counts)
            ax.pie([counts[k] for k in labels], labels=labels, autopct="%1.0f%%", textprops={"fontsize": 8})
        ax.set_title("Time Periods")
        Dashboard._save(fig, filepath)

    @staticmethod
    def plot_forecast(forecast: list[ForecastDay], filepath: str, title: str = "Forecast") -> None:
        fig, ax = plt.subplots(figsize=(8, 5))
        days = [d.day for d in forecast]
        for dim in DIMENSIONS:
            ax.plot(days, [d.value(dim) for d in forecast], "o-", color=_COLORS[dim], label=dim.capitalize())
        ax.set_xticks(days)
        ax.set_ylim(VALUE_MIN - 0.5, VALUE_MAX + 0.5)
        ax.set_title(title)
        ax.set_xlabel("Day")
        ax.legend(fontsize=8)
        ax.grid(True, alpha=0.3)
        Dashboard._save(fig, filepath)

    @staticmethod
    def comprehensive_report(metrics: MetricsCollector, output_dir: str) -> list[str]:
        """Save every chart for a run; returns the written paths."""
        os.makedirs(output_dir, exist_ok=True)
        paths = [
            os.path.join(output_dir, "dimensions.png"),
            os.path.join(output_dir, "distributions.png"),
        ]
        Dashboard.plot_dimensions(metrics, paths[0])
        Dashboard.plot_distributions(metrics, paths[1])
        return paths

    @staticmethod
    def _save(fig, filepath: str) -> None:
        os.makedirs(os.path.dirname(filepath) if os.path.dirname(filepath) else ".", exist_ok=True)
        fig.tight_layout()
        fig.savefig(filepath, dpi=120, bbox_inches="tight")
        plt.close(fig)
