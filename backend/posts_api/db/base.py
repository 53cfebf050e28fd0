from sqlalchemy.orm import DeclarativeBase

"""
DB Base.

Rôle (fonctionnel) :
- Définit la classe Base SQLAlchemy commune aux modèles ORM.
- Sa metadata sert de cible à l’autogénération Alembic (db/migrations/env.py).
"""


class Base(DeclarativeBase):
    """Classe racine ORM (SQLAlchemy Declarative)."""
    pass
