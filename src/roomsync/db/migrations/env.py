from __future__ import annotations

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool
from sqlalchemy.engine import make_url

from roomsync.config import get_settings

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# migrations are hand-written; there is no ORM metadata to autogenerate from
target_metadata = None


def _database_url() -> str:
    """Sync driver URL; ``alembic -x dsn=...`` overrides the DATABASE_URL setting."""
    override = context.get_x_argument(as_dictionary=True).get("dsn")
    url = make_url(override or get_settings().database_url)
    if url.drivername in {"postgres", "postgresql+asyncpg"}:
        url = url.set(drivername="postgresql")
    return url.render_as_string(hide_password=False)


def run_migrations_offline() -> None:
    context.configure(url=_database_url(), literal_binds=True, target_metadata=target_metadata)

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = create_engine(_database_url(), poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
