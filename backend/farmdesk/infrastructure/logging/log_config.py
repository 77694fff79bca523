"""Centralized logging configuration.

Applies per-category log levels from Settings so that noisy loggers
(e.g. SQLAlchemy SQL statements, httpx/httpcore) can be silenced without
affecting other parts of the application.

Usage:
    from farmdesk.infrastructure.logging.log_config import setup_logging
    setup_logging()   # Call once at startup (in main.py or lifespan)
"""

import logging
import sys
from contextvars import ContextVar

from farmdesk.config import Settings, get_settings


# Authenticated caller of the request being served; set by the auth dependency.
current_user_id: ContextVar[str | None] = ContextVar("current_user_id", default=None)


class UserContextFilter(logging.Filter):
    """Stamp each record with the caller's user id (``-`` outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.user_id = current_user_id.get() or "-"
        return True


# ── Logger-name → Settings-field mapping ────────────────────────────
#
# Each entry maps one or more Python logger names to a Settings field.
# When setup_logging() runs, it sets the level of each listed logger
# to the value of the corresponding setting.

_CATEGORY_MAP: dict[str, list[str]] = {
    "log_level_sql": [
        "sqlalchemy.engine",
        "sqlalchemy.pool",
        "aiosqlite",
    ],
    "log_level_http": [
        "httpx",
        "httpcore",
    ],
    "log_level_uvicorn": [
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
    ],
    "log_level_realtime": [
        "farmdesk.application.services.realtime_hub",
        "farmdesk.presentation.api.v1.endpoints.realtime",
    ],
    "log_level_upstream": [
        "farmdesk.infrastructure.openrouter",
        "farmdesk.infrastructure.weather",
    ],
    "log_level_client": [
        "farmdesk.client",
    ],
}


def setup_logging(settings: Settings | None = None) -> None:
    """Configure Python logging levels from application settings.

    Call this once during startup (e.g. in the FastAPI lifespan).
    """
    settings = settings or get_settings()
    root_level = _parse_level(settings.log_level)

    # ── Root logger ────────────────────────────────────────────────
    root = logging.getLogger()
    root.setLevel(root_level)

    # Ensure at least one handler exists (uvicorn usually adds one,
    # but when running tests or scripts it may not).
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)-8s %(name)s [%(user_id)s] - %(message)s",
            )
        )
        root.addHandler(handler)

    for handler in root.handlers:
        if not any(isinstance(f, UserContextFilter) for f in handler.filters):
            handler.addFilter(UserContextFilter())

    # ── Per-category loggers ───────────────────────────────────────
    for settings_field, logger_names in _CATEGORY_MAP.items():
        raw_level: str = getattr(settings, settings_field, "INFO")
        level = _parse_level(raw_level)

        for name in logger_names:
            logging.getLogger(name).setLevel(level)

    logging.getLogger(__name__).debug(
        "Logging configured: root=%s, sql=%s, http=%s, uvicorn=%s, realtime=%s, upstream=%s, client=%s",
        settings.log_level,
        settings.log_level_sql,
        settings.log_level_http,
        settings.log_level_uvicorn,
        settings.log_level_realtime,
        settings.log_level_upstream,
        settings.log_level_client,
    )


def _parse_level(raw: str) -> int:
    """Convert a level name string to a logging constant, defaulting to INFO."""
    numeric = getattr(logging, raw.upper(), None)
    if isinstance(numeric, int):
        return numeric
    return logging.INFO
