from __future__ import annotations

import uuid
from contextvars import ContextVar, Token

"""
Core Request ID.

Un identifiant de corrélation par requête HTTP, lié au contexte async courant :
- repris du header X-Request-Id (nettoyé, tronqué) ou généré (UUID4) ;
- lié par le middleware d’observabilité (bind_request_id) puis délié à la fin
  de la requête (reset_request_id) en restaurant la valeur précédente.
"""

MAX_REQUEST_ID_LEN = 64

_current: ContextVar[str | None] = ContextVar("posts_api_request_id", default=None)


def normalize_request_id(incoming: str | None) -> str:
    """Header entrant exploitable, sinon nouvel UUID."""
    cleaned = (incoming or "").strip()[:MAX_REQUEST_ID_LEN]
    return cleaned or str(uuid.uuid4())


def bind_request_id(incoming: str | None = None) -> tuple[str, Token]:
    """Lie un request_id au contexte courant ; le token sert à reset_request_id()."""
    rid = normalize_request_id(incoming)
    return rid, _current.set(rid)


def reset_request_id(token: Token) -> None:
    _current.reset(token)


def get_request_id() -> str | None:
    return _current.get()
