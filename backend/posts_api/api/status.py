from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from posts_api.db.migrate import head_revision, revision_from_connection
from posts_api.db.session import get_db
from posts_api.models.post import Post

"""
API System Status.

Rôle (fonctionnel) :
- Expose un endpoint de statut pour le monitoring.
- Vérifie la disponibilité de la base (requête simple).
- Expose la révision de migration appliquée vs la révision embarquée (head).
- Donne le nombre de posts stockés.
"""

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/status")
async def system_status(db: AsyncSession = Depends(get_db)):
    # 1) DB check (requête minimale)
    db_ok = True
    try:
        await db.execute(text("SELECT 1"))
    except Exception:
        db_ok = False

    # 2) Migrations : révision appliquée vs révision embarquée
    revision = None
    posts = None
    if db_ok:
        try:
            revision = await db.run_sync(lambda session: revision_from_connection(session.connection()))
            posts = (await db.execute(select(func.count()).select_from(Post))).scalar_one()
        except Exception:
            revision, posts = None, None
    head = head_revision()
    migrations_ok = revision is not None and revision == head

    # Réponse (format constant) pour monitoring / UI
    return {
        "ok": bool(db_ok and migrations_ok),
        "db": {"ok": db_ok},
        "migrations": {"ok": migrations_ok, "revision": revision, "head": head},
        "posts": posts,
        "ts": datetime.now(timezone.utc).isoformat(),
    }
