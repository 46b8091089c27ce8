"""
Sentry error reporting.

ERROR-level log records (including `logger.exception` calls from failed
ticks, provider failures and dispatch failures) become Sentry events.
"""

from __future__ import annotations

import logging

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

logger = logging.getLogger(__name__)

_sentry_initialized = False


def init_sentry(dsn: str | None, release_stage: str) -> bool:
    """Initialize Sentry when a DSN is configured. Returns True if enabled."""
    global _sentry_initialized

    if _sentry_initialized:
        return True
    if not dsn:
        logger.info("Sentry not configured (SENTRY_DSN not set)")
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=release_stage,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            LoggingIntegration(
                level=logging.INFO,
                event_level=logging.ERROR,
            ),
        ],
        traces_sample_rate=0.0,
        send_default_pii=False,
        ignore_errors=[KeyboardInterrupt, SystemExit],
    )
    _sentry_initialized = True
    logger.info("Sentry initialized: env=%s", release_stage)
    return True
