from __future__ import annotations

import asyncio
import time
import uuid
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from starlette.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from posts_api.api.router import api_router
from posts_api.core.settings import settings
from posts_api.core.logging import setup_logging
from posts_api.core.errors import error_payload, split_detail, AppHTTPException
from posts_api.core.request_id import bind_request_id, get_request_id, reset_request_id
from posts_api.core.rate_limit import rate_limiter
from posts_api.db.migrate import run_migrations, run_migrations_on_engine
from posts_api.db.session import engine, is_memory_sqlite

"""
Application FastAPI (entrypoint).

Rôle (fonctionnel) :
- Cycle de vie (lifespan) : au démarrage, applique les migrations embarquées ;
  à l’arrêt, libère le pool de connexions (engine.dispose()).
- Configure l’application (settings, CORS, middlewares, routers).
- Centralise l’observabilité :
  - request_id propagé (X-Request-Id)
  - logs structurés JSON (timing, status, client_ip)
  - seuil de “slow request”
- Applique un rate-limit simple (optionnel) sur les routes posts.
- Uniformise les erreurs côté client (format error_payload).

Lancement : uvicorn posts_api.main:app
"""


class UTF8JSONResponse(JSONResponse):
    """Réponse JSON avec charset UTF-8 explicite (cohérent sur tous les endpoints)."""
    media_type = "application/json; charset=utf-8"


# --- Logging (niveau depuis .env si dispo) ---
setup_logging(settings.LOG_LEVEL)

# logger principal projet
log = logging.getLogger("posts_api")

# logger dédié observabilité HTTP (séparé du métier)
http_log = logging.getLogger("posts_api.http")

# seuil slow request (ms)
SLOW_MS = int(settings.SLOW_REQUEST_MS)


def _split_origins(value: str) -> list[str]:
    """Parse une liste d’origines CORS depuis une string 'a,b,c'."""
    if not value:
        return []
    return [o.strip() for o in value.split(",") if o.strip()]


def _rid(request: Request) -> str:
    return getattr(request.state, "request_id", None) or get_request_id() or str(uuid.uuid4())


def _is_posts_path(path: str) -> bool:
    """La collection elle-même ou une ressource sous la collection (pas "/postsXYZ")."""
    prefix = settings.POSTS_PREFIX
    return path == prefix or path.startswith(prefix + "/")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.RUN_MIGRATIONS_ON_STARTUP:
        if is_memory_sqlite(settings.DATABASE_URL):
            # Base en mémoire : visible uniquement depuis le pool de l’engine applicatif
            await run_migrations_on_engine(engine)
        else:
            # Migrations en mode sync (Alembic) hors de la boucle async
            await asyncio.to_thread(run_migrations)
    log.info("startup")
    try:
        yield
    finally:
        await engine.dispose()
        log.info("shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    debug=settings.DEBUG,
    default_response_class=UTF8JSONResponse,
    lifespan=lifespan,
)

# --- CORS ---
default_dev_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_split_origins(settings.CORS_ORIGINS) or default_dev_origins,
    allow_credentials=False,  # pas de cookies (API stateless)
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "X-API-Key",
        "X-Request-Id",
    ],
    expose_headers=["Location", "X-Request-Id"],
)

# --- Routers ---
app.include_router(api_router)


@app.middleware("http")
async def rate_limit_middleware(request: Request, call_next):
    """
    Rate-limit (optionnel) :
    - Ne bloque jamais les préflights CORS (OPTIONS).
    - S’applique uniquement sur les routes posts.
    """
    if request.method == "OPTIONS":
        return await call_next(request)

    if _is_posts_path(request.url.path):
        try:
            rate_limiter.check(request)
        except AppHTTPException as exc:
            code, message, details = split_detail(exc.detail, "RATE_LIMITED", "Trop de requêtes")
            return UTF8JSONResponse(
                status_code=exc.status_code,
                content=error_payload(
                    code=code,
                    message=message,
                    status=exc.status_code,
                    request_id=_rid(request),
                    details=details,
                ),
            )

    return await call_next(request)


# Déclaré après le rate-limit : c’est donc le middleware le plus externe
@app.middleware("http")
async def request_observability(request: Request, call_next):
    rid, token = bind_request_id(request.headers.get("X-Request-Id"))
    request.state.request_id = rid

    start = time.perf_counter()
    response = None
    try:
        response = await call_next(request)
        response.headers["X-Request-Id"] = rid
        return response
    finally:
        duration_ms = int((time.perf_counter() - start) * 1000)

        # Slow request => WARNING, sinon INFO
        level = logging.WARNING if duration_ms >= SLOW_MS else logging.INFO
        http_log.log(
            level,
            "request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": getattr(response, "status_code", None),
                "duration_ms": duration_ms,
                "client_ip": request.client.host if request.client else None,
            },
        )

        reset_request_id(token)


# --- Error handlers : format standard, pas de stacktrace côté client ---
@app.exception_handler(AppHTTPException)
async def app_http_exception_handler(request: Request, exc: AppHTTPException):
    """Erreurs applicatives (AppHTTPException) -> payload standard."""
    code, message, details = split_detail(exc.detail, "HTTP_ERROR", "Erreur HTTP")
    return UTF8JSONResponse(
        status_code=exc.status_code,
        content=error_payload(code=code, message=message, status=exc.status_code, request_id=_rid(request), details=details),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Erreurs HTTP natives (404, 405, etc.) -> payload standard."""
    default_code = "NOT_FOUND" if exc.status_code == 404 else "HTTP_ERROR"
    code, message, details = split_detail(exc.detail, default_code, "Erreur HTTP")
    return UTF8JSONResponse(
        status_code=exc.status_code,
        content=error_payload(code=code, message=message, status=exc.status_code, request_id=_rid(request), details=details),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Erreurs de validation Pydantic -> 422 + details=exc.errors()."""
    return UTF8JSONResponse(
        status_code=422,
        content=error_payload(
            code="VALIDATION_ERROR",
            message="Requête invalide",
            status=422,
            request_id=_rid(request),
            details=jsonable_encoder(exc.errors()),
        ),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Fallback : toute exception non gérée (dont erreurs ORM) -> 500 + log serveur."""
    # Le middleware d’observabilité a déjà délié le request_id : on le passe explicitement
    rid = _rid(request)
    log.exception("Unhandled error: %s", exc, extra={"request_id": rid})
    return UTF8JSONResponse(
        status_code=500,
        content=error_payload(
            code="INTERNAL_ERROR",
            message="Erreur interne du serveur",
            status=500,
            request_id=rid,
        ),
    )
