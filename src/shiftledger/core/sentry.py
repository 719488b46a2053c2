"""Sentry error tracking configuration and initialization."""

import os

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.utils import BadDsn

from shiftledger.core.logging import get_logger

logger = get_logger(__name__)

# Guard against multiple initializations
_sentry_initialized = False


def init_sentry() -> bool:
    """
    Initialize Sentry SDK for error tracking.

    Only initializes if SENTRY_DSN is set and looks like a real DSN, so
    local runs and CI placeholders stay silent. Returns whether Sentry is
    active after the call.
    """
    global _sentry_initialized

    if _sentry_initialized:
        return True

    sentry_dsn = (os.getenv("SENTRY_DSN") or "").strip()
    if not sentry_dsn:
        logger.info("sentry.disabled", message="Sentry DSN not found, error tracking disabled")
        return False

    if not sentry_dsn.startswith(("https://", "http://")):
        logger.info(
            "sentry.disabled",
            message="Sentry DSN appears to be invalid or placeholder, error tracking disabled",
        )
        return False

    environment = os.getenv("ENVIRONMENT", "development")

    try:
        sentry_sdk.init(
            dsn=sentry_dsn,
            environment=environment,
            traces_sample_rate=0.0,
            send_default_pii=False,
            integrations=[
                FastApiIntegration(transaction_style="endpoint"),
                # structlog already writes the log lines
                LoggingIntegration(level=None, event_level=None),
            ],
            before_send=_drop_sql_context,
        )
    except BadDsn as exc:
        logger.warning(
            "sentry.init_failed",
            message="Failed to initialize Sentry due to invalid DSN, error tracking disabled",
            error=str(exc),
        )
        return False

    _sentry_initialized = True
    logger.info("sentry.initialized", environment=environment)
    return True


def _drop_sql_context(event: dict, hint: dict) -> dict:
    """Strip extra entries and breadcrumbs that carry SQL text."""
    extra = event.get("extra")
    if isinstance(extra, dict):
        event["extra"] = {
            key: value
            for key, value in extra.items()
            if "sql" not in str(key).lower() and "sql" not in str(value).lower()
        }

    breadcrumbs = event.get("breadcrumbs")
    if isinstance(breadcrumbs, dict):
        values = breadcrumbs.get("values", [])
        breadcrumbs["values"] = [b for b in values if "sql" not in str(b.get("message", "")).lower()]
    elif isinstance(breadcrumbs, list):
        event["breadcrumbs"] = [
            b for b in breadcrumbs if "sql" not in str(b.get("message", "") if isinstance(b, dict) else b).lower()
        ]

    return event
