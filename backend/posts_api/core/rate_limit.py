from __future__ import annotations

import time
from dataclasses import dataclass
from threading import Lock
from typing import Dict, Tuple

from fastapi import Request

from posts_api.core.errors import AppHTTPException
from posts_api.core.settings import settings

"""
Core Rate Limit.

Rôle (fonctionnel) :
- Protège les routes posts contre les rafales de requêtes avec un rate limit simple.
- Implémentation “in-memory” par IP + route (method + path), fenêtre fixe (60 s par défaut).
- Conçu pour démo / local : en production, une implémentation distribuée (ex : Redis) est recommandée.

Activation via settings :
- RATE_LIMIT_ENABLED : active/désactive le rate limiting.
- RATE_LIMIT_RPM : limite de requêtes par fenêtre (par IP + route).
"""


@dataclass
class _Bucket:
    """État minimal d’un compteur sur une fenêtre fixe."""
    window_start: float
    count: int


class InMemoryRateLimiter:
    """
    Rate limiter en mémoire (best-effort).

    - Stocke un compteur par clé (IP, "METHOD /path").
    - Réinitialise le compteur à chaque nouvelle fenêtre.
    - Déclenche AppHTTPException(429) si la limite est dépassée.
    """

    def __init__(self, window: float = 60.0) -> None:
        self.window = window
        self._lock = Lock()
        self._buckets: Dict[Tuple[str, str], _Bucket] = {}

    def _client_ip(self, request: Request) -> str:
        return request.client.host if request.client else "unknown"

    def reset(self) -> None:
        """Vide tous les compteurs."""
        with self._lock:
            self._buckets.clear()

    def check(self, request: Request) -> None:
        """Vérifie la limite pour (IP + route). Lève 429 si dépassement."""
        if not settings.RATE_LIMIT_ENABLED:
            return

        limit = int(settings.RATE_LIMIT_RPM or 0)
        if limit <= 0:
            return

        key = (self._client_ip(request), f"{request.method} {request.url.path}")
        now = time.monotonic()

        with self._lock:
            bucket = self._buckets.get(key)

            # Nouvelle fenêtre : on réinitialise
            if bucket is None or (now - bucket.window_start) >= self.window:
                self._buckets[key] = _Bucket(window_start=now, count=1)
                return

            bucket.count += 1

            if bucket.count > limit:
                raise AppHTTPException(
                    429,
                    "RATE_LIMITED",
                    f"Trop de requêtes (limite: {limit}/min).",
                    details={"limit_rpm": limit},
                )


# Instance globale importable (utilisée dans le middleware)
rate_limiter = InMemoryRateLimiter()
