from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

"""
Schemas Posts (Pydantic).

Rôle (fonctionnel) :
- Définit le contrat HTTP de la ressource post (création, lecture).
- PostCreate : seuls title et text sont lus depuis le client.
  Un `id` ou un `published` envoyé par le client est ignoré (extra="ignore") :
  l’id est attribué par la base, published vaut faux à la création.
- PostOut : représentation complète, construite depuis l’objet ORM (from_attributes=True).
"""


class PostCreate(BaseModel):
    """Payload de création d’un post (title + text obligatoires)."""
    model_config = ConfigDict(extra="ignore")

    title: str
    text: str


class PostOut(BaseModel):
    """Sortie API pour un post."""
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    title: str
    text: str
    published: bool = False
