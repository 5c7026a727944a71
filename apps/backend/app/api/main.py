"""
===============================================================================
TARJETA CRC — app/api/main.py (Composición de la aplicación FastAPI)
===============================================================================

Responsabilidades:
  - Construir la app con `create_app()` (tabla de rutas armada una sola vez).
  - Configurar middlewares (body limit, security headers, request context, CORS).
  - Montar routers de /api, archivos estáticos de avatares y endpoints auxiliares
    (/, /health, /storage/health-check).
  - Lifespan: pool de DB (modo postgres), carpeta de uploads y seed admin local.

Colaboradores:
  - api.auth_routes / api.user_routes
  - crosscutting.middleware / crosscutting.security
  - infrastructure.db.pool
  - application.dev_seed_admin

Notas:
  - Orden de middlewares (el último agregado es el primero en ejecutarse):
    CORS -> RequestContext -> SecurityHeaders -> BodyLimit -> rutas.
===============================================================================
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.concurrency import run_in_threadpool

from ..application.dev_seed_admin import ensure_dev_admin
from ..container import get_avatar_storage, get_user_repository
from ..crosscutting.config import Settings, get_settings
from ..crosscutting.logger import logger
from ..crosscutting.middleware import BodyLimitMiddleware, RequestContextMiddleware
from ..crosscutting.security import SecurityHeadersMiddleware
from ..identity.auth_users import hash_password
from ..infrastructure.db.pool import close_pool, init_pool
from .auth_routes import router as auth_router
from .exception_handlers import register_exception_handlers
from .user_routes import router as user_router

API_TITLE = "Users API"
API_VERSION = "1.0.0"

_PUBLIC_PATHS = {"/", "/health", "/storage/health-check", "/api/auth/login", "/api/auth/register"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown: pool, carpeta de uploads y seed admin (solo local)."""
    settings = get_settings()
    uses_postgres = settings.user_repository == "postgres"

    if uses_postgres:
        init_pool(
            database_url=settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
        )

    try:
        await run_in_threadpool(get_avatar_storage().ensure_root)
        await run_in_threadpool(
            ensure_dev_admin,
            settings,
            user_repo=get_user_repository(),
            password_hasher=hash_password,
        )

        logger.info(
            "Users API starting up",
            extra={
                "app_env": settings.app_env,
                "user_repository": settings.user_repository,
                "upload_dir": settings.upload_dir,
                "max_upload_bytes": settings.max_upload_bytes,
            },
        )

        yield

    finally:
        if uses_postgres:
            close_pool()
        logger.info("Users API shutting down")


def _install_openapi(app: FastAPI) -> None:
    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema

        schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
        )
        schema.setdefault("components", {})["securitySchemes"] = {
            "BearerAuth": {
                "type": "http",
                "scheme": "bearer",
                "bearerFormat": "JWT",
                "description": "Authorization: Bearer <token>",
            }
        }
        for path, methods in schema.get("paths", {}).items():
            for operation in methods.values():
                if not isinstance(operation, dict):
                    continue
                operation["security"] = (
                    [] if path in _PUBLIC_PATHS else [{"BearerAuth": []}]
                )

        app.openapi_schema = schema
        return app.openapi_schema

    app.openapi = custom_openapi


def _register_ancillary_routes(app: FastAPI) -> None:
    @app.get("/", tags=["meta"])
    def root():
        return {
            "message": "Users API",
            "version": API_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "docs": "/docs",
        }

    @app.get("/health", tags=["meta"])
    def health(request: Request):
        """Liveness + ping al repositorio (503 si no responde)."""
        db_status = "disconnected"
        try:
            if get_user_repository().ping():
                db_status = "connected"
        except Exception as exc:
            logger.warning("Health check: DB unavailable", extra={"error": str(exc)})

        body = {
            "ok": db_status == "connected",
            "db": db_status,
            "request_id": getattr(request.state, "request_id", None),
        }
        return JSONResponse(body, status_code=200 if body["ok"] else 503)

    @app.get("/storage/health-check", tags=["meta"])
    def storage_health():
        """Verifica que la carpeta de uploads exista y sea escribible."""
        storage = get_avatar_storage()
        writable = storage.is_writable()
        return JSONResponse(
            {"ok": writable, "uploadDir": str(storage.root_dir)},
            status_code=200 if writable else 503,
        )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Arma la aplicación completa. Llamar una vez por proceso (o por test)."""
    settings = settings or get_settings()

    app = FastAPI(
        title=API_TITLE,
        version=API_VERSION,
        description="Registro, login y gestión de usuarios con avatares.",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "auth", "description": "Registro y login (JWT)"},
            {"name": "users", "description": "Gestión de usuarios y avatares"},
            {"name": "meta", "description": "Salud y metadatos del servicio"},
        ],
    )

    app.add_middleware(BodyLimitMiddleware, max_bytes=settings.max_body_bytes)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_allowed_origins_list(),
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-Id"],
        expose_headers=["X-Request-Id"],
    )

    app.include_router(auth_router)
    app.include_router(user_router)
    _register_ancillary_routes(app)

    # R: check_dir=False porque la carpeta se crea en el lifespan.
    app.mount(
        settings.upload_public_prefix,
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="avatars",
    )

    register_exception_handlers(app)
    _install_openapi(app)
    return app


app = create_app()
