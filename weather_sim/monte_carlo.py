"""Monte Carlo analysis: run N weather simulations with different seeds, aggregate statistics."""

from __future__ import annotations

import csv
import os
import statistics
import time
from dataclasses import dataclass
from typing import Optional

import numpy as np

from weather_sim.core.config import (
    DEFAULT_CAMPAIGN,
    DEFAULT_SIMULATION_DAYS,
    DEFAULT_STEP_HOURS,
    DEFAULT_VARIABILITY,
    DIMENSIONS,
    HOURS_PER_DAY,
    NO_RULES_MESSAGE,
)


@dataclass
class RunResult:
    """Summary of a single simulation run."""
    seed: int
    ticks: int
    means: dict[str, float]
    stds: dict[str, float]
    extremes: dict[str, int]  # ticks pinned at a bound
    rule_ticks: int  # ticks where any survival rule applied
    dominant_period: str
    elapsed_seconds: float


def run_single(
    seed: int,
    days: int,
    campaign_name: str = DEFAULT_CAMPAIGN,
    terrain_id: Optional[str] = None,
    season_id: Optional[str] = None,
    variability: int = DEFAULT_VARIABILITY,
    step_hours: float = DEFAULT_STEP_HOURS,
) -> RunResult:
    """Run one simulation and return summary."""
    from weather_sim.simulation.simulator import WeatherSimulator
    from weather_sim.world.campaign import bundled_campaign
    from weather_sim.world.descriptions import survival_rules

    campaign = bundled_campaign(campaign_name)
    sim = WeatherSimulator(
        campaign,
        terrain_id=terrain_id,
        season_id=season_id,
        seed=seed,
        variability=variability,
        step_hours=step_hours,
    )
    sim.logger.verbosity = -1

    rule_ticks = 0

    def count_rules(tick: int, metrics) -> None:
        nonlocal rule_ticks
        state = sim.state
        if survival_rules(state, campaign) != [NO_RULES_MESSAGE]:
            rule_ticks += 1

    sim.set_callback(count_rules)
    sim.initialize()

    t0 = time.time()
    sim.run(days * HOURS_PER_DAY)
    elapsed = time.time() - t0

    stats = sim.metrics.dimension_stats()
    periods = sim.metrics.period_counts()
    dominant = max(periods, key=periods.get) if periods else ""

    return RunResult(
        seed=seed,
        ticks=len(sim.metrics.snapshots),
        means={dim: stats[dim]["mean"] for dim in stats},
        stds={dim: stats[dim]["std"] for dim in stats},
        extremes=sim.metrics.extreme_counts(),
        rule_ticks=rule_ticks,
        dominant_period=dominant,
        elapsed_seconds=elapsed,
    )


def monte_carlo(
    n_runs: int = 20,
    days: int = DEFAULT_SIMULATION_DAYS,
    campaign_name: str = DEFAULT_CAMPAIGN,
    terrain_id: Optional[str] = None,
    season_id: Optional[str] = None,
    variability: int = DEFAULT_VARIABILITY,
    output_dir: str = "results/monte_carlo",
) -> list[RunResult]:
    """Run N simulations with generated seeds and report aggregate stats."""

    os.makedirs(output_dir, exist_ok=True)
    results: list[RunResult] = []
    rng = np.random.default_rng(0)
    seeds = [int(s) for s in rng.integers(0, 100_000, size=n_runs)]

    print("=== Monte Carlo Weather Simulation ===")
    print(f"Runs: {n_runs} | Days/run: {days} | Campaign: {campaign_name} | "
          f"Terrain: {terrain_id or 'default'} | Variability: {variability}")
    print(f"Seeds: {seeds[:5]}{'...' if n_runs > 5 else ''}")
    print()

    total_t0 = time.time()

    for i, seed in enumerate(seeds):
        result = run_single(seed, days, campaign_name, terrain_id, season_id, variability)
        results.append(result)
        means = " ".join(f"{dim[:4]}={result.means.get(dim, 0):+5.1f}" for dim in DIMENSIONS)
        print(
            f"  Run {i+1:>3}/{n_runs} | seed={seed:>5} | {means} | "
            f"rules={result.rule_ticks:>4}/{result.ticks} | {result.elapsed_seconds:.2f}s"
        )

    total_elapsed = time.time() - total_t0
    print(f"\nAll {n_runs} runs completed in {total_elapsed:.1f}s "
          f"({total_elapsed/max(1, n_runs):.2f}s avg)")

    # ── Aggregate Statistics ──────────────────────────────────────────
    print("\n" + "=" * 70)
    print("AGGREGATE RESULTS")
    print("=" * 70)

    def stat_line(label: str, values: list[float], fmt: str = ".2f") -> str:
        if not values:
            return f"  {label}: no data"
        avg = statistics.mean(values)
        med = statistics.median(values)
        std = statistics.stdev(values) if len(values) > 1 else 0
        return (f"  {label:<30s}  mean={avg:{fmt}}  median={med:{fmt}}  std={std:{fmt}}  "
                f"min={min(values):{fmt}}  max={max(values):{fmt}}")

    for dim in DIMENSIONS:
        print(f"\n{dim.upper()}")
        print(stat_line("Run mean", [r.means.get(dim, 0.0) for r in results]))
        print(stat_line("Run std", [r.stds.get(dim, 0.0) for r in results]))
        print(stat_line("Ticks at extreme", [r.extremes.get(dim, 0) for r in results], ".1f"))

    print("\nSURVIVAL RULES")
    print(stat_line("Ticks with rules", [r.rule_ticks for r in results], ".1f"))

    print("\nDOMINANT TIME PERIOD")
    period_freq: dict[str, int] = {}
    for r in results:
        period_freq[r.dominant_period] = period_freq.get(r.dominant_period, 0) + 1
    for period, count in sorted(period_freq.items(), key=lambda x: -x[1]):
        print(f"  '{period}': {count}/{n_runs} runs ({count/n_runs*100:.0f}%)")

    # ── Export CSV ────────────────────────────────────────────────────
    csv_path = os.path.join(output_dir, "monte_carlo_results.csv")
    with open(csv_path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(
            ["seed", "ticks"]
            + [f"{dim}_mean" for dim in DIMENSIONS]
            + [f"{dim}_std" for dim in DIMENSIONS]
            + [f"{dim}_extreme" for dim in DIMENSIONS]
            + ["rule_ticks", "dominant_period", "elapsed_s"]
        )
        for r in results:
            writer.writerow(
                [r.seed, r.ticks]
                + [f"{r.means.get(dim, 0.0):.3f}" for dim in DIMENSIONS]
                + [f"{r.stds.get(dim, 0.0):.3f}" for dim in DIMENSIONS]
                + [r.extremes.get(dim, 0) for dim in DIMENSIONS]
                + [r.rule_ticks, r.dominant_period, f"{r.elapsed_seconds:.2f}"]
            )
    print(f"\nResults exported to {csv_path}")

    return results


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Monte Carlo weather simulation")
    parser.add_argument("--runs", type=int, default=20, help="Number of runs")
    parser.add_argument("--days", type=int, default=DEFAULT_SIMULATION_DAYS, help="Days per run")
    parser.add_argument("--campaign", type=str, default=DEFAULT_CAMPAIGN)
    parser.add_argument("--terrain", type=str, default=None)
    parser.add_argument("--season", type=str, default=None)
    parser.add_argument("--variability", type=int, default=DEFAULT_VARIABILITY)
    parser.add_argument("--output-dir", type=str, default="results/monte_carlo")
    args = parser.parse_args()

    monte_carlo(
        n_runs=args.runs,
        days=args.days,
        campaign_name=args.campaign,
        terrain_id=args.terrain,
        season_id=args.season,
        variability=args.variability,
        output_dir=args.output_dir,
    )
