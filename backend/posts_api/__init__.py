"""
posts_api

Package racine de l’application : API CRUD sur une ressource « post ».

Rôle (fonctionnel) :
- Relie le routage HTTP (FastAPI) à l’ORM (SQLAlchemy async) pour créer, lister, lire et supprimer des posts.
- Au démarrage : attache le pool de connexions et applique les migrations embarquées (Alembic).

Organisation (haute-level) :
- posts_api.api      : routes FastAPI (contrats HTTP, dépendances, sérialisation)
- posts_api.core     : briques transverses (settings, errors, logs, sécurité, rate-limit…)
- posts_api.db       : base SQLAlchemy, session async, migrations embarquées
- posts_api.models   : modèles ORM (table posts)
- posts_api.schemas  : schémas Pydantic (entrées/sorties API)
"""

__version__ = "0.1.0"
