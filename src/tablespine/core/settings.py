"""
Centralized settings for tablespine.

:class:`TableSpineSettings` is the single validated source for the
connection URL used by :func:`~tablespine.core.connection.create_connection`
and for the logging configuration.  Values come from ``TABLESPINE_*``
environment variables or a ``.env`` file.

Examples:
    >>> get_settings().database_url
    'memory'

Tags:
    tablespine, configuration, settings, pydantic, caching

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from tablespine.core.logging import configure_logging


class TableSpineSettings(BaseSettings):
    """tablespine configuration.

    Fields
    ──────
    database_url   : Default URL for ``create_connection()``
    sqlite_timeout : Seconds SQLite waits on a locked database
    log_level      : Structlog log level
    log_format     : ``json`` for aggregation, ``console`` for development
    service_name   : ``service.name`` stamped on every log line
    """

    model_config = SettingsConfigDict(
        env_prefix="TABLESPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Database ─────────────────────────────────────────────────
    database_url: str = Field(default="memory")
    sqlite_timeout: float = Field(default=5.0, gt=0)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="json")
    service_name: str = Field(default="tablespine")


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, TableSpineSettings] = {}


def get_settings(*, _force_reload: bool = False) -> TableSpineSettings:
    """Load, validate, and cache a :class:`TableSpineSettings` instance.

    Parameters
    ----------
    _force_reload:
        Bypass the cache and re-read the environment (testing only).
    """
    if _force_reload or "default" not in _settings_cache:
        _settings_cache["default"] = TableSpineSettings()
    return _settings_cache["default"]


def clear_settings_cache() -> None:
    """Drop the cached settings so the next ``get_settings()`` re-reads."""
    _settings_cache.clear()


def configure_logging_from_settings(settings: TableSpineSettings | None = None) -> None:
    """Apply ``log_level`` / ``log_format`` / ``service_name`` to structlog."""
    settings = settings or get_settings()
    configure_logging(
        level=settings.log_level,
        json_format=settings.log_format == "json",
        service=settings.service_name,
    )


__all__ = [
    "TableSpineSettings",
    "get_settings",
    "clear_settings_cache",
    "configure_logging_from_settings",
]
