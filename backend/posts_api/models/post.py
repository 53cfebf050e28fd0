from __future__ import annotations

from sqlalchemy import Boolean, Integer, String, false
from sqlalchemy.orm import Mapped, mapped_column

from posts_api.db.base import Base

"""
Model Post.

Rôle (fonctionnel) :
- Représente un billet (post) : titre, texte et statut de publication.
- Unique ressource exposée par l’API (create / list / read / delete / destroy).

Champs :
- id : identifiant entier auto-incrémenté, attribué par la base.
- title / text : contenu, obligatoires.
- published : faux à la création (jamais lu depuis le payload client).

Le schéma est créé par la migration embarquée `c4a1d2e3f5b6_create_posts_table`.
"""


class Post(Base):
    __tablename__ = "posts"

    # Identifiant technique (entier auto-incrémenté)
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String, nullable=False)
    text: Mapped[str] = mapped_column(String, nullable=False)

    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())

    def __repr__(self) -> str:
        return f"Post(id={self.id!r}, title={self.title!r}, published={self.published!r})"
