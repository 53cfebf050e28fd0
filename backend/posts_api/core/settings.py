from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

"""
Core Settings.

Rôle (fonctionnel) :
- Centralise la configuration de l’application via variables d’environnement (Pydantic Settings).
- Charge un fichier .env (par défaut backend/.env) pour faciliter le dev/local.
- Fournit un objet global `settings` importable dans tout le projet.

Organisation :
- App : nom, env, debug, niveau de log, seuil de requête lente.
- CORS : origines autorisées (front).
- Auth (démo) : API_KEY (protège les suppressions).
- Rate limit : activation + RPM.
- DB : URL async (runtime) + URL sync (migrations Alembic) + options du pool.
- Routes : préfixe de montage de la ressource posts.
"""

# Pointe toujours vers backend/.env (racine backend/)
ENV_PATH = Path(__file__).resolve().parents[2] / ".env"  # backend/.env


class Settings(BaseSettings):
    # --- App ---
    APP_NAME: str = "Posts API"
    ENV: str = "dev"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    SLOW_REQUEST_MS: int = 800

    # --- CORS ---
    # Liste CSV des origines autorisées (ex: front Vite)
    CORS_ORIGINS: str = "http://localhost:5173,http://127.0.0.1:5173"

    # --- Auth (démo) ---
    # Clé API optionnelle. Si vide : bypass en dev (voir core/security.py).
    API_KEY: str = ""

    # --- Rate limit (optionnel) ---
    RATE_LIMIT_ENABLED: bool = False
    RATE_LIMIT_RPM: int = 120

    # --- DB ---
    # Async : utilisé par l’app (SQLAlchemy async)
    DATABASE_URL: str = "sqlite+aiosqlite:///./posts.sqlite3"

    # Sync : utilisé par Alembic (migrations en mode sync)
    DATABASE_URL_SYNC: str = "sqlite:///./posts.sqlite3"

    # Pool de connexions (ignoré pour SQLite en mémoire)
    DB_POOL_SIZE: int = 10
    DB_POOL_TIMEOUT: int = 5  # secondes

    # Migrations embarquées appliquées au démarrage
    RUN_MIGRATIONS_ON_STARTUP: bool = True

    # --- Routes ---
    # Chemin de la collection : "/posts", "/api/posts"… (jamais "/" ni slash final)
    POSTS_PREFIX: str = "/posts"

    # Config Pydantic Settings
    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("POSTS_PREFIX")
    @classmethod
    def _posts_prefix_is_a_path(cls, v: str) -> str:
        """Les routes de collection ont un chemin vide : le préfixe porte tout le chemin."""
        v = v.strip()
        if not v.startswith("/") or v == "/":
            raise ValueError("POSTS_PREFIX doit commencer par '/' et ne pas être la racine (ex: /posts)")
        if v.endswith("/"):
            raise ValueError("POSTS_PREFIX ne doit pas se terminer par '/'")
        return v


# Instance globale importable
settings = Settings()
