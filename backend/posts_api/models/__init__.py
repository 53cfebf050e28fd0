"""
posts_api.models

Package ORM (SQLAlchemy) : définition des entités persistées en base.

- Centralise les modèles de l’application (ici : Post).
- Importer ce package enregistre les tables dans Base.metadata (utile pour Alembic).
"""

from posts_api.models.post import Post

__all__ = ["Post"]
