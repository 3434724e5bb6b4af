# src/pulseboard/scripts/migrate.py
from __future__ import annotations

import os

from alembic import command
from alembic.config import Config

from pulseboard.core.settings import settings

MIGRATIONS_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", "..", "migrations"))


def build_config() -> Config:
    """Alembic configuration pointing at the project's migrations folder."""
    cfg = Config()
    cfg.set_main_option("script_location", MIGRATIONS_DIR)
    cfg.set_main_option("sqlalchemy.url", settings.database_url_sync)
    return cfg


def run_upgrade_head() -> None:
    command.upgrade(build_config(), "head")


if __name__ == "__main__":
    run_upgrade_head()
