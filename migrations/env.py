import os
import sys
from logging.config import fileConfig

# -------------------------------------------------
# Ensure project root is on PYTHONPATH
# -------------------------------------------------
sys.path.append(os.getcwd())

from alembic import context
from sqlalchemy import create_engine, pool

# -------------------------------------------------
# Alembic Config
# -------------------------------------------------
config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# -------------------------------------------------
# Load ALL models before metadata
# -------------------------------------------------
from trade_journal.db.database import Base
import trade_journal.models.trade  # noqa: F401  registers Trade on Base.metadata
from trade_journal.config import get_settings

target_metadata = Base.metadata


# -------------------------------------------------
# Database URL helper
# -------------------------------------------------
def get_database_url() -> str:
    """
    DATABASE_URL from the environment (or .env via settings).
    Alembic runs on a synchronous driver.
    """
    url = os.getenv("DATABASE_URL") or get_settings().database_url

    # Convert async URL -> sync for Alembic
    if url.startswith("postgresql+asyncpg://"):
        url = url.replace("postgresql+asyncpg://", "postgresql://", 1)

    return url


# -------------------------------------------------
# Offline migrations
# -------------------------------------------------
def run_migrations_offline() -> None:
    context.configure(
        url=get_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


# -------------------------------------------------
# Online migrations
# -------------------------------------------------
def run_migrations_online() -> None:
    engine = create_engine(get_database_url(), poolclass=pool.NullPool)

    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
