"""Create every table in the configured database for local development."""

import logging

from pulseboard.core.settings import settings
from pulseboard.db.session import create_tables

logger = logging.getLogger(__name__)


def init_db() -> None:
    """Initialize the database by creating all tables."""
    create_tables()
    logger.info("Database initialized at %s", settings.effective_database_url)


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level.upper())
    init_db()
