# src/unified_blog/scripts/migrate.py
"""Apply Alembic migrations to the configured database."""
from __future__ import annotations

import argparse
import logging
import os

from alembic import command
from alembic.config import Config

from unified_blog.core.settings import settings

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = os.path.abspath(
    os.path.join(os.path.dirname(__file__), "..", "..", "..", "migrations")
)


def build_config() -> Config:
    """Return an Alembic config pointing at the project's migrations."""
    cfg = Config()
    cfg.set_main_option("script_location", MIGRATIONS_DIR)
    cfg.set_main_option("sqlalchemy.url", settings.database_url_sync)
    return cfg


def run_upgrade(revision: str = "head") -> None:
    logger.info("Upgrading database to %s", revision)
    command.upgrade(build_config(), revision)


def run_downgrade(revision: str) -> None:
    logger.info("Downgrading database to %s", revision)
    command.downgrade(build_config(), revision)


def main() -> None:
    parser = argparse.ArgumentParser(description="Manage the Unified Blog schema")
    parser.add_argument("action", choices=["upgrade", "downgrade"], default="upgrade", nargs="?")
    parser.add_argument("revision", nargs="?", default="head")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    if args.action == "upgrade":
        run_upgrade(args.revision)
    else:
        run_downgrade(args.revision)


if __name__ == "__main__":
    main()
