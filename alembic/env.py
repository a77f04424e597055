"""
Alembic migration environment for the lutonai schema.

The URL comes from DATABASE_URL_SYNC (a sync driver; the app itself runs on
asyncpg), so no alembic.ini is needed. Enum columns are plain strings in the
database, so type comparison is on to catch length changes. SQLite URLs use
batch mode because SQLite cannot ALTER most column properties.
"""

from sqlalchemy import create_engine, pool
from alembic import context

from lutonai.db.base import Base
import lutonai.models  # noqa: F401 - registers every table on Base.metadata
from lutonai.core.config import get_settings
from lutonai.core.logging import get_logger, setup_logging

settings = get_settings()
logger = get_logger("alembic.env")

target_metadata = Base.metadata


def _database_url() -> str:
    return context.config.get_main_option("sqlalchemy.url") or settings.DATABASE_URL_SYNC


def _configure_options(url: str) -> dict:
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": url.startswith("sqlite"),
    }


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of touching a database."""
    url = _database_url()
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_options(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    url = _database_url()
    engine = create_engine(url, poolclass=pool.NullPool)
    logger.info("migrations_started", dialect=engine.dialect.name)
    with engine.connect() as connection:
        context.configure(connection=connection, **_configure_options(url))
        with context.begin_transaction():
            context.run_migrations()
    engine.dispose()
    logger.info("migrations_finished")


setup_logging()

if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
