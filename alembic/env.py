"""
Migration environment for the task manager schema.

The target database is DATABASE_URL from taskapi.config, unless one is given
on the command line:

    alembic -x url=sqlite:///scratch.db upgrade head
"""

import os
import sys
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from alembic import context

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from taskapi.config import settings
from taskapi.database import Base
import taskapi.models  # noqa: F401 — users, refresh_tokens, tasks, task_assignees

config = context.config

if config.config_file_name is not None:
    # Leave the application's loggers alone when migrations run in-process
    fileConfig(config.config_file_name, disable_existing_loggers=False)


def _database_url() -> str:
    return context.get_x_argument(as_dictionary=True).get("url") or settings.DATABASE_URL


def _configure_options(url: str) -> dict:
    return {
        "target_metadata":        Base.metadata,
        "compare_type":           True,
        "compare_server_default": True,
        # SQLite cannot ALTER most constraints in place
        "render_as_batch":        url.startswith("sqlite"),
    }


def run_migrations_offline(url: str) -> None:
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_options(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online(url: str) -> None:
    config.set_main_option("sqlalchemy.url", url)
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, **_configure_options(url))
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline(_database_url())
else:
    run_migrations_online(_database_url())
