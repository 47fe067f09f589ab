"""
═══════════════════════════════════════════════════════════════════════════════
Keysmith — Главная точка входа (Application Entry Point)
═══════════════════════════════════════════════════════════════════════════════

Фабрика приложения (Application Factory Pattern): HTTP-поверхность
одностраничного генератора паролей над AppController.
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

import uvicorn
from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from keysmith import __version__
from keysmith.api.health import router as health_router
from keysmith.api.session import router as session_router
from keysmith.api.workspace import router as workspace_router
from keysmith.config import get_settings
from keysmith.controller import AppController
from keysmith.database import close_pool, get_pool
from keysmith.exceptions import KeysmithError

# ═══════════════════════════════════════════════════════════════════════════════
# Настройка логирования
# ═══════════════════════════════════════════════════════════════════════════════
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

STATUS_MAP = {
    "AUTH_ERROR": 401,
    "SESSION_EXPIRED": 401,
    "NOT_AUTHENTICATED": 401,
    "CONFLICT": 409,
    "VALIDATION_ERROR": 422,
    "INSERT_REJECTED": 400,
    "FETCH_FAILED": 503,
    "SESSION_LOADING": 503,
}


# ═══════════════════════════════════════════════════════════════════════════════
# Автоматическое применение SQL-миграций
# ═══════════════════════════════════════════════════════════════════════════════

async def _apply_migrations(pool) -> None:
    """Применяет SQL-миграции из ``keysmith/db/migrations/``."""
    migrations_dir = Path(__file__).parent / "db" / "migrations"
    sql_files = sorted(migrations_dir.glob("*.sql"))
    if not sql_files:
        logger.info("No SQL migration files found, skipping")
        return

    async with pool.acquire() as conn:
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS _applied_migrations (
                filename TEXT PRIMARY KEY,
                applied_at TIMESTAMPTZ DEFAULT NOW()
            )
        """)

        rows = await conn.fetch("SELECT filename FROM _applied_migrations")
        applied = {row["filename"] for row in rows}

        for sql_file in sql_files:
            if sql_file.name in applied:
                continue

            logger.info("Applying migration: %s", sql_file.name)
            async with conn.transaction():
                await conn.execute(sql_file.read_text(encoding="utf-8"))
                await conn.execute(
                    "INSERT INTO _applied_migrations (filename) VALUES ($1)",
                    sql_file.name,
                )
            logger.info("Migration applied: %s", sql_file.name)

    logger.info("All Keysmith migrations up to date (%d files checked)", len(sql_files))


# ═══════════════════════════════════════════════════════════════════════════════
# Lifespan — управление жизненным циклом
# ═══════════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
        1. Пул PostgreSQL + миграции, либо memory store
           (явно через настройки или при недоступности БД).
        2. Контроллер: восстановление сессии.

    Shutdown:
        1. Отписка контроллера, закрытие пула.
    """
    settings = get_settings()
    logger.info("Keysmith v%s starting (log level %s)", __version__, settings.log_level)

    from keysmith.memory_store import activate_memory_store

    app.state.storage_mode = "memory"
    if settings.use_memory_store:
        activate_memory_store()
    else:
        try:
            pool = await get_pool()
            await _apply_migrations(pool)
            app.state.storage_mode = "postgres"
            logger.info("Keysmith database ready")
        except Exception as e:
            logger.warning("Database not available, activating memory store: %s", e)
            await close_pool()
            activate_memory_store()

    controller = AppController.self_hosted(settings)
    app.state.controller = controller
    await controller.start()

    yield

    controller.stop()
    await close_pool()
    logger.info("Keysmith stopped")


# ═══════════════════════════════════════════════════════════════════════════════
# Фабрика приложения
# ═══════════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Создаёт и конфигурирует Keysmith FastAPI-приложение."""
    settings = get_settings()
    _is_production = settings.app_env == "production"

    app = FastAPI(
        redirect_slashes=False,
        title="Keysmith",
        description="Password generator and per-user saved password list.",
        version=__version__,
        lifespan=lifespan,
        docs_url=None if _is_production else "/docs",
        redoc_url=None if _is_production else "/redoc",
        openapi_url=None if _is_production else "/api/v1/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Content-Type", "Accept"],
    )

    v1_router = APIRouter(prefix="/api/v1")
    v1_router.include_router(session_router)
    v1_router.include_router(workspace_router)
    v1_router.include_router(health_router)
    app.include_router(v1_router)

    @app.exception_handler(KeysmithError)
    async def keysmith_error_handler(request: Request, exc: KeysmithError) -> JSONResponse:
        """Маппинг кодов Keysmith на HTTP-статусы."""
        return JSONResponse(
            status_code=STATUS_MAP.get(exc.code, 500),
            content={
                "error": {
                    "code": exc.code,
                    "message": exc.message,
                    "details": exc.details,
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                }
            },
        )

    @app.get("/")
    async def root():
        return {
            "name": "Keysmith",
            "version": __version__,
            "docs": "/docs",
            "api": {
                "v1": {
                    "health": "/api/v1/health",
                    "session": "/api/v1/session",
                    "workspace": "/api/v1/workspace",
                },
            },
        }

    return app


app = create_app()


def main() -> None:
    """Запускает Keysmith через Uvicorn."""
    settings = get_settings()
    logger.info("Starting Keysmith on %s:%s", settings.api_host, settings.api_port)
    uvicorn.run(
        "keysmith.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
