import os
from logging.config import fileConfig
from urllib.parse import quote_plus

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import engine_from_config, pool

load_dotenv()

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def database_url() -> str:
    """Same variables as charity_api.utils.db, as an SQLAlchemy URL."""
    url = os.getenv("DATABASE_URL")
    if url:
        # psycopg2 driver, whatever scheme the URL was written with
        return url.replace("postgres://", "postgresql+psycopg2://", 1).replace(
            "postgresql://", "postgresql+psycopg2://", 1
        )
    user = os.getenv("DB_USER", "dev")
    pwd = quote_plus(os.getenv("DB_PASSWORD", "dev"))
    host = os.getenv("DB_HOST", "127.0.0.1")
    port = os.getenv("DB_PORT", "65432")
    name = os.getenv("DB_NAME", "charity_dev")
    return f"postgresql+psycopg2://{user}:{pwd}@{host}:{port}/{name}"


config.set_main_option("sqlalchemy.url", database_url().replace("%", "%%"))

# revisions are raw SQL; no autogenerate metadata
target_metadata = None


def run_migrations_offline():
    context.configure(url=config.get_main_option("sqlalchemy.url"), literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    connectable = engine_from_config(
        config.get_section(config.config_ini_section),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
