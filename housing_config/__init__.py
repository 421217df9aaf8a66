"""
housing_config -- settings and process bootstrap for the housing kernel.

Responsibility:
    ``load_settings()`` reads YAML plus environment overrides;
    ``bootstrap()`` turns settings into a configured process: structured
    logging, an initialized engine, and the schema created.

Architecture position:
    Configuration -- sits above ``housing_kernel``.  The kernel MUST NEVER
    import from ``housing_config``.
"""

from __future__ import annotations

from sqlalchemy.engine import Engine

from housing_config.settings import (
    ENV_DATABASE_URL,
    ENV_ECHO_SQL,
    ENV_LOG_LEVEL,
    HousingSettings,
    apply_env_overrides,
    load_settings,
    settings_from_dict,
)
from housing_kernel.db.engine import create_tables, init_engine_from_url
from housing_kernel.logging_config import configure_logging, get_logger

_logger = get_logger("config")


def bootstrap(settings: HousingSettings | None = None) -> Engine:
    """
    Configure logging, initialize the engine and create all tables.

    Returns the initialized engine.  Calling it twice replaces the engine;
    logging configuration is idempotent.
    """
    settings = settings or load_settings()
    configure_logging(level=settings.log_level_number)
    engine = init_engine_from_url(settings.database_url, echo=settings.echo_sql)
    create_tables(engine)
    _logger.info(
        "housing_bootstrapped",
        extra={"dialect": engine.dialect.name, "log_level": settings.log_level},
    )
    return engine


__all__ = [
    "ENV_DATABASE_URL",
    "ENV_ECHO_SQL",
    "ENV_LOG_LEVEL",
    "HousingSettings",
    "apply_env_overrides",
    "bootstrap",
    "load_settings",
    "settings_from_dict",
]
