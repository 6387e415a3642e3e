"""Scene command line: manage persisted per-scene weather."""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Optional

DEFAULT_STATE_PATH = "weather_state.json"


def settings_path(state_path: Optional[str]) -> str:
    """Settings file for the scene CLI: ``WEATHER_CONFIG_PATH``, else beside the state file."""
    explicit = os.getenv("WEATHER_CONFIG_PATH")
    if explicit:
        return explicit
    state = Path(state_path or os.getenv("WEATHER_STATE_PATH") or DEFAULT_STATE_PATH)
    return str(state.with_name(f"{state.stem}.settings"))


def build_engine(settings, scene_verbosity: Optional[int] = None):
    """Wire campaign, store, time source, logger and describer from settings."""
    from weather_sim.core.clock import build_time_source
    from weather_sim.narration.ai import DescriptionService
    from weather_sim.simulation.engine import WeatherEngine
    from weather_sim.simulation.store import JsonFileStateStore
    from weather_sim.viz.logger import WeatherLogger
    from weather_sim.world.campaign import bundled_campaign, load_campaign
    from weather_sim.world.periods import PeriodClassifier

    campaign = load_campaign(settings.campaign_path) if settings.campaign_path else bundled_campaign(settings.campaign)
    logger = WeatherLogger(
        verbosity=settings.log_verbosity if scene_verbosity is None else scene_verbosity,
        log_file=settings.log_file,
    )
    time_source = build_time_source(
        settings.time_source,
        list(campaign.seasons),
        manual_season=settings.season,
        classifier=PeriodClassifier(settings.period_mode),
    )
    describer = None
    if settings.use_ai:
        describer = DescriptionService(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            logger=logger,
        )
    return WeatherEngine(
        campaign=campaign,
        store=JsonFileStateStore(settings.state_path or DEFAULT_STATE_PATH),
        time_source=time_source,
        settings=settings,
        logger=logger,
        describer=describer,
    )


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Dimensional Weather - scene commands",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--scene", type=str, default="default", help="Scene id")
    parser.add_argument("--state-file", type=str, default=None, help="JSON state store path")
    parser.add_argument("--campaign", type=str, default=None, help="Bundled campaign name")
    parser.add_argument("--verbosity", type=int, default=None, choices=[0, 1, 2, 3], help="Log verbosity level")

    sub = parser.add_subparsers(dest="command", required=True)
    init = sub.add_parser("init", help="Seed the scene from terrain baselines")
    init.add_argument("--terrain", type=str, default=None)
    init.add_argument("--season", type=str, default=None)
    update = sub.add_parser("update", help="Recalculate the weather if due")
    update.add_argument("--force", action="store_true", help="Ignore the update frequency")
    sub.add_parser("report", help="Current conditions, description and survival rules")
    forecast = sub.add_parser("forecast", help="Multi-day forecast")
    forecast.add_argument("--days", type=int, default=5)
    sub.add_parser("trace", help="Recalculate now and show the breakdown")
    terrain = sub.add_parser("set-terrain", help="Switch terrain and recalculate")
    terrain.add_argument("terrain_id")
    season = sub.add_parser("set-season", help="Switch season and recalculate")
    season.add_argument("season_id")
    variability = sub.add_parser("set-variability", help="Change the variability for this run")
    variability.add_argument("value", type=float)
    sub.add_parser("reset", help="Re-seed the scene from baselines")
    sub.add_parser("stats", help="Engine and store overview")

    args = parser.parse_args(argv)

    from weather_sim.core.settings import WeatherSettings
    from weather_sim.narration.report import render_trace
    from weather_sim.world.campaign import CampaignDataError

    config_path = settings_path(args.state_file)
    settings = WeatherSettings.from_env(config_path)
    if args.state_file:
        settings.state_path = args.state_file
    if args.campaign:
        settings.campaign = args.campaign
        settings.campaign_path = None

    try:
        engine = build_engine(settings, args.verbosity)
    except CampaignDataError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    scene = args.scene
    status = 0
    if args.command == "init":
        state = engine.initialize_scene(scene, terrain_id=args.terrain, season_id=args.season)
        print(json.dumps(state.to_dict(), indent=2))
    elif args.command == "update":
        engine.update_scene(scene, forced=args.force)
        print(engine.report(scene))
    elif args.command == "report":
        print(engine.report(scene))
    elif args.command == "forecast":
        print(engine.forecast_text(scene, days=args.days))
    elif args.command == "trace":
        engine.initialize_scene(scene)
        engine.update_scene(scene, forced=True)
        print(render_trace(engine.last_calculation))
    elif args.command == "set-terrain":
        if engine.set_terrain(scene, args.terrain_id) is None:
            print(f"Unknown terrain '{args.terrain_id}'. Available: {', '.join(engine.campaign.terrains)}")
            status = 1
        else:
            print(engine.report(scene))
    elif args.command == "set-season":
        if engine.set_season(scene, args.season_id) is None:
            print(f"Season '{args.season_id}' cannot be set. Available: {', '.join(engine.campaign.seasons)}")
            status = 1
        else:
            print(engine.report(scene))
    elif args.command == "set-variability":
        value = engine.set_variability(args.value)
        WeatherSettings.save_setting(config_path, "variability", value)
        print(f"Variability set to {value}")
    elif args.command == "reset":
        engine.reset_scene(scene)
        print(engine.report(scene))
    elif args.command == "stats":
        print(json.dumps(engine.stats(), indent=2))

    engine.logger.close()
    return status


if __name__ == "__main__":
    sys.exit(main())
