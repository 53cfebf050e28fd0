from __future__ import annotations

import logging
import secrets
from typing import Optional

from fastapi import Request

from posts_api.core.settings import settings
from posts_api.core.errors import AppHTTPException

"""
Core Security (API Key).

Garde des routes destructives (DELETE d’un post, purge de la table) :
- clé présentée via `Authorization: Bearer <clé>` ou `X-API-Key: <clé>` ;
- API_KEY vide : accès libre hors prod, 500 SERVER_MISCONFIG en prod ;
- clé absente ou fausse : 401 UNAUTHORIZED, rejet loggé (méthode + chemin, jamais la clé).
"""

log = logging.getLogger("posts_api.security")


def presented_api_key(request: Request) -> Optional[str]:
    """Clé fournie par le client (Bearer prioritaire sur X-API-Key), None si absente."""
    scheme, _, credentials = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return (request.headers.get("x-api-key") or "").strip() or None


async def require_api_key(request: Request) -> None:
    """Dépendance FastAPI : `dependencies=[Depends(require_api_key)]`."""
    expected = settings.API_KEY
    if not expected:
        if settings.ENV.lower() == "prod":
            raise AppHTTPException(500, "SERVER_MISCONFIG", "API_KEY manquante côté serveur")
        return

    presented = presented_api_key(request)
    if presented is None or not secrets.compare_digest(presented.encode(), expected.encode()):
        log.warning("api_key_rejected", extra={"method": request.method, "path": request.url.path})
        raise AppHTTPException(401, "UNAUTHORIZED", "Clé API requise pour supprimer des posts")
