from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from .request_id import get_request_id

"""
Core Logging.

Un événement = une ligne JSON sur stdout, pour l’application, uvicorn et alembic
(les migrations du démarrage loggent donc au même format que les requêtes).

- RequestIdFilter : rattache le request_id au record. Un request_id passé
  explicitement (extra={"request_id": ...}) est conservé : c’est le cas des erreurs
  500, loggées après la fin du middleware d’observabilité.
- JsonFormatter : champs fixes (ts, level, logger, request_id, msg) + extras connus.
"""

# Extras reconnus (si fournis via logger.info(..., extra={...}))
STRUCTURED_KEYS = (
    "method",
    "path",
    "status_code",
    "duration_ms",
    "client_ip",
    "post_id",
    "affected",
    "revision",
)

# Loggers tiers alignés sur le handler JSON (sans propagation : pas de doublons)
ALIGNED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "alembic")


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = get_request_id() or "-"
        return True


class JsonFormatter(logging.Formatter):
    def __init__(self, fields: tuple[str, ...] = STRUCTURED_KEYS) -> None:
        super().__init__()
        self.fields = fields

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", "-"),
            "msg": record.getMessage(),
        }
        payload.update({key: record.__dict__[key] for key in self.fields if key in record.__dict__})

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO") -> logging.Handler:
    """Installe le handler JSON sur le root logger (en remplaçant l’existant) et le retourne."""
    lvl = level.upper()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(lvl)

    for name in ALIGNED_LOGGERS:
        aligned = logging.getLogger(name)
        aligned.handlers = [handler]
        aligned.propagate = False
        aligned.setLevel(lvl)

    return handler
