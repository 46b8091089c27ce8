"""ESPN HTTP client for fetching scoreboards and single-game summaries."""

from __future__ import annotations

import json
import logging
import os
import re
import time
from datetime import date
from typing import Optional
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from goalfeed.leagues.leagues import get_league_path

logger = logging.getLogger(__name__)
ESPN_BASE_URL = os.getenv("ESPN_BASE_URL", "https://site.api.espn.com").rstrip("/")
SITE_BASE_PATH = "/apis/site/v2/sports"
DEFAULT_TIMEOUT_SECONDS = 12
DEFAULT_RETRIES = 3
DEFAULT_BACKOFF_SECONDS = 0.5
DEFAULT_USER_AGENT = "goalfeed/1.0 (+https://example.local)"


def normalize_dates(value: str | date | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, date):
        return value.strftime("%Y%m%d")
    cleaned = value.strip()
    if not cleaned:
        return None
    if cleaned.lower() == "today":
        return date.today().strftime("%Y%m%d")
    if re.fullmatch(r"\d{8}", cleaned):
        return cleaned
    if re.fullmatch(r"\d{4}-\d{2}-\d{2}", cleaned):
        return cleaned.replace("-", "")
    raise ValueError("dates must be YYYYMMDD or YYYY-MM-DD")


def _league_base_url(league_key: str) -> str:
    league_path = get_league_path(league_key)
    if league_path is None:
        raise ValueError(f"Unsupported league key: {league_key}")

    parts = league_path.split("/")
    if len(parts) < 3 or parts[0] != "sports":
        raise ValueError(f"Unsupported league path: {league_path}")

    return f"{ESPN_BASE_URL}{SITE_BASE_PATH}/{parts[1]}/{parts[2]}"


def build_scoreboard_url(league_key: str, game_date: Optional[date | str] = None) -> str:
    base_url = f"{_league_base_url(league_key)}/scoreboard"
    normalized_dates = normalize_dates(game_date)
    if normalized_dates:
        return f"{base_url}?{urlencode({'dates': normalized_dates})}"
    return base_url


def build_summary_url(league_key: str, event_id: str) -> str:
    return f"{_league_base_url(league_key)}/summary?{urlencode({'event': event_id})}"


def _fetch_json(url: str, context: dict) -> dict:
    """GET a JSON document with retries.

    Returns parsed JSON on success. On failure, returns a controlled error dict
    carrying `context` so callers can log what was being fetched.
    """

    headers = {
        "User-Agent": DEFAULT_USER_AGENT,
        "Accept": "application/json",
    }

    last_error: str | None = None
    last_status: int | None = None
    last_body_snippet: str | None = None
    for attempt in range(DEFAULT_RETRIES):
        try:
            request = Request(url, headers=headers)
            with urlopen(request, timeout=DEFAULT_TIMEOUT_SECONDS) as response:
                status = getattr(response, "status", None)
                payload = response.read().decode("utf-8")
                if status and status != 200:
                    body_snippet = payload[:300]
                    logger.error(
                        "ESPN non-200 status=%s url=%s body=%s",
                        status,
                        url,
                        body_snippet,
                    )
                    return {
                        "ok": False,
                        "error": "ESPN returned non-200 response",
                        "status": status,
                        "body": body_snippet,
                        "url": url,
                        **context,
                    }
                return json.loads(payload)
        except HTTPError as exc:
            last_status = exc.code
            body = exc.read().decode("utf-8") if exc.fp else ""
            last_body_snippet = body[:300]
            logger.error(
                "ESPN HTTPError status=%s url=%s body=%s",
                last_status,
                url,
                last_body_snippet,
            )
            last_error = str(exc)
            if attempt < DEFAULT_RETRIES - 1:
                time.sleep(DEFAULT_BACKOFF_SECONDS * (2**attempt))
        except (URLError, TimeoutError, json.JSONDecodeError) as exc:
            last_error = str(exc)
            if attempt < DEFAULT_RETRIES - 1:
                time.sleep(DEFAULT_BACKOFF_SECONDS * (2**attempt))

    return {
        "ok": False,
        "error": "Failed to fetch ESPN document",
        "details": last_error,
        "status": last_status,
        "body": last_body_snippet,
        "url": url,
        **context,
    }


def fetch_scoreboard(league_key: str, game_date: Optional[date | str] = None) -> dict:
    """Fetch ESPN scoreboard data for a league and optional date."""

    try:
        url = build_scoreboard_url(league_key, game_date)
    except ValueError as exc:
        return {"ok": False, "error": str(exc), "league": league_key}

    return _fetch_json(url, {"league": league_key, "date": normalize_dates(game_date)})


def fetch_summary(league_key: str, event_id: str) -> dict:
    """Fetch the ESPN summary document for a single game."""

    try:
        url = build_summary_url(league_key, event_id)
    except ValueError as exc:
        return {"ok": False, "error": str(exc), "league": league_key}

    return _fetch_json(url, {"league": league_key, "event_id": event_id})
