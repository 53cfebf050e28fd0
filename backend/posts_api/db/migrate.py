from __future__ import annotations

import argparse
import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine

from posts_api.core.settings import settings

"""
DB Migrate (migrations embarquées).

Rôle (fonctionnel) :
- Applique les migrations Alembic livrées dans le package (posts_api/db/migrations).
- Utilisé au démarrage de l’application (lifespan) et en CLI (`posts-api-migrate`).
- Expose la révision courante / la révision cible (head) pour le statut système.

Notes :
- Alembic travaille en mode sync : on utilise DATABASE_URL_SYNC.
- La connexion est partagée avec env.py via config.attributes (une seule transaction).
- Une erreur de migration est propagée : l’application ne démarre pas sur un schéma périmé.
- SQLite en mémoire : chaque engine a sa propre base, on migre donc sur l’engine async
  de l’application (run_migrations_on_engine), jamais sur un engine sync séparé.
"""

log = logging.getLogger("posts_api.migrations")

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def alembic_config(url: str | None = None) -> Config:
    """Config Alembic sans fichier .ini (script_location = dossier embarqué)."""
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    # ConfigParser interprète les '%' : on les échappe
    cfg.set_main_option("sqlalchemy.url", (url or settings.DATABASE_URL_SYNC).replace("%", "%%"))
    return cfg


def head_revision() -> str | None:
    """Révision cible (dernière migration embarquée)."""
    return ScriptDirectory.from_config(alembic_config()).get_current_head()


def revision_from_connection(connection: Connection) -> str | None:
    """Révision appliquée sur la base de cette connexion (None si jamais migrée)."""
    return MigrationContext.configure(connection).get_current_revision()


def _upgrade(connection: Connection, cfg: Config, revision: str) -> str | None:
    before = revision_from_connection(connection)
    cfg.attributes["connection"] = connection
    command.upgrade(cfg, revision)
    after = revision_from_connection(connection)

    if before != after:
        log.info("migrations_applied", extra={"revision": after})
    else:
        log.info("migrations_up_to_date", extra={"revision": after})
    return after


def run_migrations(url: str | None = None, revision: str = "head") -> str | None:
    """Applique les migrations jusqu’à `revision` et retourne la révision résultante."""
    url = url or settings.DATABASE_URL_SYNC
    engine = create_engine(url)
    try:
        with engine.begin() as connection:
            return _upgrade(connection, alembic_config(url), revision)
    finally:
        engine.dispose()


async def run_migrations_on_engine(async_engine: AsyncEngine, revision: str = "head") -> str | None:
    """
    Applique les migrations via une connexion de l’engine async donné.

    Indispensable pour SQLite en mémoire : la base n’existe que dans le pool de cet engine.
    """
    cfg = alembic_config()
    async with async_engine.begin() as conn:
        return await conn.run_sync(_upgrade, cfg, revision)


def current_revision(url: str | None = None) -> str | None:
    """Révision courante de la base (connexion sync dédiée)."""
    engine = create_engine(url or settings.DATABASE_URL_SYNC)
    try:
        with engine.connect() as connection:
            return revision_from_connection(connection)
    finally:
        engine.dispose()


def main(argv: list[str] | None = None) -> None:
    """CLI : applique les migrations embarquées sur la base configurée."""
    from posts_api.core.logging import setup_logging

    parser = argparse.ArgumentParser(description="Applique les migrations embarquées.")
    parser.add_argument("--url", default=None, help="URL SQLAlchemy sync (défaut : DATABASE_URL_SYNC)")
    parser.add_argument("--revision", default="head", help="Révision cible (défaut : head)")
    args = parser.parse_args(argv)

    setup_logging(settings.LOG_LEVEL)
    run_migrations(url=args.url, revision=args.revision)


if __name__ == "__main__":
    main()
