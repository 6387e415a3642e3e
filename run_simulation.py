"""
Weather Simulation Runner
=========================
Run one scene's weather over a game calendar and save the report, forecast, data and charts.

Usage:
    python run_simulation.py                                   # defaults: earth, 30 days, seed 42
    python run_simulation.py --campaign athas --days 90        # custom run
    python run_simulation.py --terrain desert --season summer  # pick a starting point
    python run_simulation.py --help                            # full options
"""

from __future__ import annotations

import argparse
import os
import sys
import time

# Ensure weather_sim package is importable
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))


def run() -> None:
    from weather_sim.core.config import (
        DEFAULT_CAMPAIGN,
        DEFAULT_SEED,
        DEFAULT_SIMULATION_DAYS,
        DEFAULT_STEP_HOURS,
        DEFAULT_VARIABILITY,
        HOURS_PER_DAY,
    )

    parser = argparse.ArgumentParser(
        description="Dimensional Weather Simulation - Run & Visualize",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--campaign", type=str, default=DEFAULT_CAMPAIGN, help="Bundled campaign name")
    parser.add_argument("--campaign-file", type=str, default=None, help="Path to a campaign JSON file")
    parser.add_argument("--terrain", type=str, default=None, help="Terrain id (defaults to the campaign's first)")
    parser.add_argument("--season", type=str, default=None, help="Starting season id")
    parser.add_argument("--days", type=int, default=DEFAULT_SIMULATION_DAYS, help="Number of days to simulate")
    parser.add_argument("--step-hours", type=float, default=DEFAULT_STEP_HOURS, help="Game hours per update")
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Random seed for reproducibility")
    parser.add_argument("--variability", type=int, default=DEFAULT_VARIABILITY, help="Weather variability 0-10")
    parser.add_argument("--period-mode", type=str, default="solar", choices=["hours", "solar"])
    parser.add_argument("--output-dir", type=str, default="results", help="Output directory")
    parser.add_argument("--verbosity", type=int, default=0, choices=[0, 1, 2, 3])
    parser.add_argument("--no-plot", action="store_true", help="Skip saving PNG charts")
    args = parser.parse_args()

    from weather_sim.narration.report import render_forecast
    from weather_sim.simulation.simulator import SCENE_ID, WeatherSimulator
    from weather_sim.viz.logger import WeatherLogger
    from weather_sim.world.campaign import CampaignDataError, bundled_campaign, load_campaign

    try:
        campaign = load_campaign(args.campaign_file) if args.campaign_file else bundled_campaign(args.campaign)
    except CampaignDataError as e:
        print(f"Error: {e}")
        sys.exit(1)

    # ── Banner ──────────────────────────────────────────────────────────
    print("=" * 60)
    print("  Dimensional Weather Simulation")
    print("=" * 60)
    print(f"  Campaign   : {campaign.name}")
    print(f"  Terrain    : {args.terrain or campaign.default_terrain_id}")
    print(f"  Season     : {args.season or campaign.default_season_id}")
    print(f"  Days       : {args.days}")
    print(f"  Seed       : {args.seed}")
    print(f"  Output     : {args.output_dir}/")
    print("=" * 60)
    print()

    # ── Initialize ──────────────────────────────────────────────────────
    logger = WeatherLogger(
        verbosity=args.verbosity,
        log_file=os.path.join(args.output_dir, "simulation.log"),
        stdout=(args.verbosity > 0),
    )
    sim = WeatherSimulator(
        campaign,
        terrain_id=args.terrain,
        season_id=args.season,
        seed=args.seed,
        variability=args.variability,
        step_hours=args.step_hours,
        period_mode=args.period_mode,
        logger=logger,
    )
    sim.initialize()

    # ── Run simulation with progress ────────────────────────────────────
    total = int(args.days * HOURS_PER_DAY // args.step_hours)
    print(f"Simulating {args.days} days ({total} updates) ...")
    t0 = time.time()
    milestone = max(1, total // 10)

    try:
        for i in range(total):
            state = sim.tick()
            if (i + 1) % milestone == 0 or (i + 1) == total:
                pct = (i + 1) / total * 100
                print(
                    f"  Day {sim.clock.day:>4}  ({pct:5.1f}%)  |  {sim.clock.season:<14}  |  "
                    f"T {state.temperature:+3d}  W {state.wind:+3d}  "
                    f"P {state.precipitation:+3d}  H {state.humidity:+3d}"
                )
    except KeyboardInterrupt:
        print("\n  Interrupted by user.")

    print(f"\nSimulation finished in {time.time() - t0:.2f}s")
    print()

    # ── Current conditions & forecast ───────────────────────────────────
    print(sim.engine.report(SCENE_ID))
    print()
    forecast = sim.engine.forecast(SCENE_ID)
    print(render_forecast(forecast, campaign.terrains[sim.state.terrain].name))
    print()

    # ── Export data ─────────────────────────────────────────────────────
    os.makedirs(args.output_dir, exist_ok=True)
    sim.metrics.export_csv(os.path.join(args.output_dir, "metrics.csv"))
    logger.export_json(os.path.join(args.output_dir, "events.json"))
    logger.close()

    # ── Print summary report ────────────────────────────────────────────
    print(sim.metrics.summary_report())

    # ── Save PNGs ───────────────────────────────────────────────────────
    if not args.no_plot:
        from weather_sim.viz.dashboard import Dashboard

        paths = Dashboard.comprehensive_report(sim.metrics, args.output_dir)
        forecast_path = os.path.join(args.output_dir, "forecast.png")
        Dashboard.plot_forecast(forecast, forecast_path, title=f"Forecast: {campaign.name}")
        paths.append(forecast_path)
        for path in paths:
            print(f"  Chart saved to {path}")


if __name__ == "__main__":
    run()
