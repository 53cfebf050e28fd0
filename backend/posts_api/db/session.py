from __future__ import annotations

from typing import Any, AsyncIterator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from posts_api.core.settings import settings

"""
DB Session.

Rôle (fonctionnel) :
- Initialise l’engine SQLAlchemy en mode async (runtime FastAPI) avec son pool de connexions.
- Fournit une factory de sessions AsyncSession (AsyncSessionLocal).
- Expose `get_db()` comme dépendance FastAPI : une session par requête, toujours fermée.

Notes :
- expire_on_commit=False : permet de réutiliser les objets après commit sans rechargement automatique.
- echo=False : désactive le log SQL brut (on préfère les logs applicatifs en JSON).
- SQLite en mémoire : pas d’options de pool (le driver impose son propre pool).
"""


def is_memory_sqlite(url: str) -> bool:
    """True si l’URL pointe vers une base SQLite en mémoire."""
    parsed = make_url(url)
    return parsed.get_backend_name() == "sqlite" and parsed.database in (None, "", ":memory:")


def engine_options(url: str) -> dict[str, Any]:
    """Options de création d’engine (pool) adaptées à l’URL."""
    options: dict[str, Any] = {"echo": False}
    if not is_memory_sqlite(url):
        options["pool_size"] = settings.DB_POOL_SIZE
        options["pool_timeout"] = settings.DB_POOL_TIMEOUT
        options["pool_pre_ping"] = True
    return options


def build_engine(url: str | None = None) -> AsyncEngine:
    """Construit l’engine async (URL des settings par défaut)."""
    url = url or settings.DATABASE_URL
    return create_async_engine(url, **engine_options(url))


# Engine async utilisé par l’application (SQLAlchemy async)
engine = build_engine()

# Factory de sessions async
AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncIterator[AsyncSession]:
    """Dépendance FastAPI : yield une session DB et garantit sa fermeture."""
    async with AsyncSessionLocal() as session:
        yield session
