from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException

"""
Core Errors.

Rôle (fonctionnel) :
- Standardise le format des erreurs renvoyées par l’API (payload homogène).
- Fournit une exception applicative (AppHTTPException) pour lever des erreurs de façon cohérente.
- Champs stables : code, status, request_id, timestamp, details.

Convention de réponse (exemple) :
{
  "error": {
    "code": "NOT_FOUND",
    "message": "Post introuvable",
    "status": 404,
    "request_id": "...",
    "timestamp": "...",
    "details": {...}
  }
}
"""


def now_iso() -> str:
    """Timestamp ISO-8601 en UTC (utilisé dans toutes les erreurs)."""
    return datetime.now(timezone.utc).isoformat()


def error_payload(
    *,
    code: str,
    message: str,
    status: int,
    request_id: str,
    details: Optional[Any] = None,
) -> Dict[str, Any]:
    """Construit un payload d’erreur homogène pour l’API."""
    payload: Dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
            "status": status,
            "request_id": request_id,
            "timestamp": now_iso(),
        }
    }
    if details is not None:
        payload["error"]["details"] = details
    return payload


def split_detail(detail: Any, default_code: str, default_message: str) -> tuple[str, str, Any]:
    """Extrait (code, message, details) d’un detail d’exception (dict ou texte)."""
    if isinstance(detail, dict):
        return (
            str(detail.get("code", default_code)),
            str(detail.get("message", default_message)),
            detail.get("details", None),
        )
    return default_code, str(detail) if detail else default_message, None


class AppHTTPException(HTTPException):
    """
    Exception applicative standardisée.

    Exemple :
        raise AppHTTPException(404, "NOT_FOUND", "Post introuvable")
    """

    def __init__(self, status_code: int, code: str, message: str, details: Any = None):
        super().__init__(status_code=status_code, detail={"code": code, "message": message, "details": details})
