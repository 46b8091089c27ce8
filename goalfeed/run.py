"""CLI entrypoint for running the monitoring engine without the HTTP surface."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import signal

from goalfeed.engine import Engine, build_engine, run_engine
from goalfeed.leagues.leagues import parse_leagues
from goalfeed.settings import Settings, load_settings
from goalfeed.targets.database import initialize_database
from goalfeed.telemetry import init_sentry


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Monitor live games and broadcast goals as they happen.",
    )
    parser.add_argument(
        "--leagues",
        type=str,
        default=None,
        help="Comma-separated list of leagues (e.g., NHL,MLB). Defaults to GOALFEED_LEAGUES.",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single discovery and watch pass, then exit.",
    )
    return parser.parse_args()


def _apply_leagues(settings: Settings, raw: str | None) -> Settings:
    if raw is None:
        return settings
    try:
        leagues = parse_leagues(raw)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc
    if not leagues:
        raise SystemExit("No leagues provided. Use --leagues NHL,MLB,...")
    return dataclasses.replace(settings, leagues=tuple(leagues))


async def _run_once(engine: Engine) -> None:
    await asyncio.to_thread(initialize_database)
    await engine.monitor.check_leagues_for_active_games()
    await engine.monitor.watch_active_games()


async def _run_forever(engine: Engine) -> None:
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            pass
    await run_engine(engine, stop_event)


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    args = _parse_args()
    try:
        settings = load_settings()
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc
    settings = _apply_leagues(settings, args.leagues)
    init_sentry(settings.sentry_dsn, settings.release_stage)

    engine = build_engine(settings)
    if args.once:
        asyncio.run(_run_once(engine))
        logging.info("Done: active games=%s", len(engine.registry.get_active_game_keys()))
        return

    try:
        asyncio.run(_run_forever(engine))
    except KeyboardInterrupt:
        logging.info("Engine interrupted.")


if __name__ == "__main__":
    main()
