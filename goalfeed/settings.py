from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from goalfeed.leagues.leagues import parse_leagues

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    leagues: tuple[str, ...]
    redis_url: str
    broadcast_channel: str
    discovery_interval_seconds: float
    watch_interval_seconds: float
    refresh_interval_seconds: float
    test_goal_interval_seconds: float
    test_goal_enabled: bool
    watch_concurrency: int
    game_ttl_seconds: int
    pregame_window_minutes: int
    sentry_dsn: str | None
    release_stage: str


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def load_settings() -> Settings:
    """Read settings from the environment (and `.env` when present)."""
    load_dotenv()
    leagues = parse_leagues(os.getenv("GOALFEED_LEAGUES", "NHL,MLB"))
    if not leagues:
        raise ValueError("No leagues configured. Set GOALFEED_LEAGUES=NHL,MLB,...")

    settings = Settings(
        leagues=tuple(leagues),
        redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        broadcast_channel=os.getenv("BROADCAST_CHANNEL", "goals"),
        discovery_interval_seconds=float(os.getenv("DISCOVERY_INTERVAL_SECONDS", "60")),
        watch_interval_seconds=float(os.getenv("WATCH_INTERVAL_SECONDS", "1")),
        refresh_interval_seconds=float(os.getenv("REFRESH_INTERVAL_SECONDS", "5")),
        test_goal_interval_seconds=float(os.getenv("TEST_GOAL_INTERVAL_SECONDS", "60")),
        test_goal_enabled=_env_bool("TEST_GOAL_ENABLED", True),
        watch_concurrency=int(os.getenv("WATCH_CONCURRENCY", "32")),
        game_ttl_seconds=int(os.getenv("GAME_TTL_SECONDS", str(24 * 60 * 60))),
        pregame_window_minutes=int(os.getenv("PREGAME_WINDOW_MINUTES", "15")),
        sentry_dsn=(os.getenv("SENTRY_DSN") or "").strip() or None,
        release_stage=os.getenv("RELEASE_STAGE", "development"),
    )
    logger.debug("Loaded settings: leagues=%s redis=%s", ",".join(settings.leagues), settings.redis_url)
    return settings
