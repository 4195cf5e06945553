"""
Sentry SDK configuration with privacy-compliant settings.

Implements:
- Environment-based initialization
- PII scrubbing (logins, e-mail addresses, IPs)
- Loguru and SQLAlchemy integrations
"""

import os

import sentry_sdk
from sentry_sdk.integrations.loguru import LoguruIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sentry_sdk.types import Event, Hint

from core.correlation import get_correlation_id

_PII_USER_FIELDS = ("email", "username", "login")


def _before_send(event: Event, hint: Hint) -> Event | None:
    """
    Scrub PII before sending to Sentry.

    Only the numeric user ID is kept for traceability. The current correlation
    ID is attached as a tag so reports can be matched with log lines.

    Args:
        event: Sentry event.
        hint: Additional context about the event.

    Returns:
        Modified event with PII removed.
    """
    user = event.get("user")
    if user:
        for field in _PII_USER_FIELDS:
            user.pop(field, None)
        if "ip_address" in user:
            user["ip_address"] = "{{auto}}"  # Anonymized by Sentry

    extra = event.get("extra")
    if isinstance(extra, dict):
        for field in _PII_USER_FIELDS:
            extra.pop(field, None)

    correlation_id = get_correlation_id()
    if correlation_id:
        event.setdefault("tags", {})["correlation_id"] = correlation_id

    return event


def init_sentry() -> None:
    """
    Initialize Sentry SDK.

    Call this once per process, before the first worker runs.
    Sentry is disabled if SENTRY_DSN environment variable is not set.
    """
    dsn = os.getenv("SENTRY_DSN")

    if not dsn:
        return

    environment = os.getenv("ENVIRONMENT", "development")
    release = os.getenv("SENTRY_RELEASE", "unknown")

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        # Privacy: Do NOT send PII automatically
        send_default_pii=False,
        integrations=[
            SqlalchemyIntegration(),
            LoguruIntegration(),
        ],
        traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.2")),
        sample_rate=1.0,
        before_send=_before_send,
        attach_stacktrace=True,
        max_breadcrumbs=50,
        ignore_errors=[
            KeyboardInterrupt,
            SystemExit,
        ],
    )
