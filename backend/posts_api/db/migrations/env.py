from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

import posts_api.models  # noqa: F401  (enregistre les tables dans la metadata)
from posts_api.core.settings import settings
from posts_api.db.base import Base

"""
Environnement Alembic (migrations embarquées).

Rôle (fonctionnel) :
- Relie Alembic à la metadata SQLAlchemy (autogénération) et à l’URL sync des settings.
- Deux usages :
  - programmatique (posts_api.db.migrate) : une connexion est fournie via config.attributes ;
  - CLI (`alembic upgrade head` depuis la racine du repo) : l’engine est construit ici.
"""

config = context.config

# Logging : uniquement en CLI (l’application configure déjà ses logs JSON)
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

if not config.get_main_option("sqlalchemy.url"):
    config.set_main_option("sqlalchemy.url", settings.DATABASE_URL_SYNC.replace("%", "%%"))

target_metadata = Base.metadata


def _configure_and_run(connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        # SQLite ne supporte pas ALTER TABLE complet : mode batch
        render_as_batch=connection.dialect.name == "sqlite",
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_offline() -> None:
    """Mode offline : génère le SQL sans connexion."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Mode online : réutilise la connexion fournie, sinon en ouvre une."""
    connection = config.attributes.get("connection")
    if connection is not None:
        _configure_and_run(connection)
        return

    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        _configure_and_run(connection)


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
