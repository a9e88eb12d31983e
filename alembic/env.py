from logging.config import fileConfig
import logging
import os
from sqlalchemy import create_engine, pool
from alembic import context

from app.db.database import Base
from app.models import models  # noqa: F401  registers tables on Base.metadata
from app.core.config import settings

# Alembic Config object
config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

target_metadata = Base.metadata


def get_url() -> str:
    """Database URL for migrations, with the async driver swapped for a sync one."""
    url = os.environ.get("DATABASE_URL")

    if not url:
        try:
            url = settings.get_database_url
        except ValueError:
            url = config.get_main_option("sqlalchemy.url")

    if not url:
        raise RuntimeError("No DATABASE_URL found in env, settings or alembic.ini")

    url = url.strip().strip('"').strip("'")

    if "mysql+aiomysql" in url:
        url = url.replace("mysql+aiomysql", "mysql+pymysql")
    elif url.startswith("mysql://"):
        url = url.replace("mysql://", "mysql+pymysql://")
    elif "sqlite+aiosqlite" in url:
        url = url.replace("sqlite+aiosqlite", "sqlite")

    logger.info("Running migrations against %s", url.split("@")[-1])
    return url


def run_migrations_offline() -> None:
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = create_engine(get_url(), poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
