"""Initialize the database schema for local development."""

from loguru import logger
from sqlalchemy import Engine, inspect

import repositories.db_models  # noqa: F401  (registers the models on Base)
from core.correlation import correlation_scope
from core.logging_config import configure_logging
from core.sentry_config import init_sentry
from models.config import settings
from repositories.database import Base, engine


def missing_tables(bind: Engine) -> list[str]:
    """Names of mapped tables not present in the database yet."""
    existing = set(inspect(bind).get_table_names())
    return sorted(name for name in Base.metadata.tables if name not in existing)


def init_db(bind: Engine | None = None) -> list[str]:
    """
    Create every missing table.

    Args:
        bind: Engine to use, defaults to the application engine

    Returns:
        Names of the tables that were created
    """
    bind = bind or engine
    with correlation_scope():
        to_create = missing_tables(bind)
        if not to_create:
            logger.info("Database schema already up to date")
            return []

        try:
            Base.metadata.create_all(bind=bind)
        except Exception as e:
            logger.error(f"Error initializing database: {e}")
            raise

        logger.info(f"Created tables: {', '.join(to_create)}")
        return to_create


if __name__ == "__main__":
    configure_logging(settings.ENVIRONMENT, settings.LOGS_DIR)
    init_sentry()
    init_db()
