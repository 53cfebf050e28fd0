"""
posts_api.schemas

Package des schémas API (Pydantic).

- Définit les modèles d’entrée/sortie utilisés par l’API (request/response).
- Sépare les modèles ORM (posts_api.models = persistance) des schémas Pydantic (contrat HTTP / validation).
"""

from posts_api.schemas.posts import PostCreate, PostOut

__all__ = ["PostCreate", "PostOut"]
