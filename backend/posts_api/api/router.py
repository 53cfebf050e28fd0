from fastapi import APIRouter

from posts_api.api.health import router as health_router
from posts_api.api.posts import router as posts_router
from posts_api.api.status import router as status_router
from posts_api.core.settings import settings

"""
Router principal de l’API.

Rôle (fonctionnel) :
- Regroupe les routeurs (health, statut système, posts).
- Monte la ressource posts sous le préfixe configuré (POSTS_PREFIX).
- Sert de point d’entrée unique pour l’inclusion dans l’application FastAPI.
"""

api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(status_router)
api_router.include_router(posts_router, prefix=settings.POSTS_PREFIX)
