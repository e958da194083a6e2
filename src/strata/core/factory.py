"""
Factory functions that build ready-to-use components from settings.

Features:
    - ``create_database()``: configure logging, then connect a Database

Tags:
    strata-core, configuration, factory-pattern

Doc-Types:
    api-reference
"""

from __future__ import annotations

from strata.core.database import Database
from strata.core.logging import configure_logging, get_logger
from strata.core.settings import DatabaseSettings, get_settings

logger = get_logger(__name__)


def create_database(settings: DatabaseSettings | None = None, *, setup_logging: bool = True) -> Database:
    """Create a :class:`Database` from *settings* (environment when omitted).

    Raises:
        FatalDatabaseError: The connection could not be established.
    """
    settings = settings or get_settings()
    if setup_logging:
        configure_logging(
            level=settings.log_level,
            json_format=settings.log_format == "json",
        )
    configuration = settings.to_configuration()
    logger.info("database_configured", source=configuration.to_dict())
    return Database(configuration)


__all__ = [
    "create_database",
]
