"""
Migrations for the fleet schema (users, vehicles, usage logs, checklists,
maintenance, incidents, fines, audit trail).

    alembic revision --autogenerate -m "add workshop columns to maintenance"
    alembic upgrade head

The database URL always comes from fleetops.config.settings (DATABASE_URL),
never from alembic.ini, so migrations hit the same database as the API.
"""

import logging
import os
import sys
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from alembic import context

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from fleetops.config import settings
from fleetops.database import Base
import fleetops.models  # noqa: F401  every fleet table must be on Base.metadata

config = context.config
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")
target_metadata = Base.metadata

# Shared by offline and online runs. Type comparison matters here: the
# enum columns (vehicle status, maintenance status, fine status ...) change
# as the fleet workflow grows.
COMPARE = {"compare_type": True, "compare_server_default": True}


def skip_empty_revisions(context, revision, directives):
    """Do not write a revision file when autogenerate found nothing to do."""
    if getattr(config.cmd_opts, "autogenerate", False):
        script = directives[0]
        if script.upgrade_ops.is_empty():
            directives[:] = []
            logger.info("No changes in the fleet schema, no revision written")


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of touching the database (review before a deploy)."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **COMPARE,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            process_revision_directives=skip_empty_revisions,
            # SQLite (local development) cannot ALTER columns in place
            render_as_batch=connection.dialect.name == "sqlite",
            **COMPARE,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
