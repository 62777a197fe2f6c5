"""
═══════════════════════════════════════════════════════════════════════════════
IdP — Главная точка входа сервиса (Application Entry Point)
═══════════════════════════════════════════════════════════════════════════════

Фабрика приложения (Application Factory Pattern): регистрация,
сессии, текущая учётная запись, OIDC userinfo и human check.
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from idp import __version__
from idp.config import get_settings
from idp.database import close_pool, get_pool
from idp.exceptions import IdpError
from idp.models.response import Response

# ── API роутеры ──────────────────────────────────────────────────────────
from idp.api.account import router as account_router
from idp.api.auth import router as auth_router
from idp.api.health import router as health_router

# ═══════════════════════════════════════════════════════════════════════════════
# Настройка логирования
# ═══════════════════════════════════════════════════════════════════════════════
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

STATUS_BY_CATEGORY = {
    "policy_violation": 400,
    "auth_required": 401,
    "not_found": 404,
    "state_conflict": 409,
    "collaborator_failure": 502,
}


# ═══════════════════════════════════════════════════════════════════════════════
# Автоматическое применение SQL-миграций
# ═══════════════════════════════════════════════════════════════════════════════

async def _apply_migrations(pool) -> None:
    """Применяет SQL-миграции из ``idp/db/migrations/``."""
    migrations_dir = Path(__file__).parent / "db" / "migrations"
    sql_files = sorted(migrations_dir.glob("*.sql"))
    if not sql_files:
        logger.info("No SQL migration files found — skipping")
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

            logger.info(f"📄 Applying migration: {sql_file.name}")
            sql_text = sql_file.read_text(encoding="utf-8")
            async with conn.transaction():
                await conn.execute(sql_text)
                await conn.execute(
                    "INSERT INTO _applied_migrations (filename) VALUES ($1)",
                    sql_file.name,
                )
            logger.info(f"✅ Migration applied: {sql_file.name}")

    logger.info(f"✅ All IdP migrations up to date ({len(sql_files)} files checked)")


# ═══════════════════════════════════════════════════════════════════════════════
# Lifespan — управление жизненным циклом
# ═══════════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan IdP-сервиса.

    Startup:
        1. Создаём пул соединений к PostgreSQL.
        2. Применяем миграции.
        3. При недоступности БД — graceful degradation (memory store).
        4. Подключаем NATS publisher.

    Shutdown:
        1. Дописываем очередь аудита.
        2. Закрываем NATS и пул БД.
    """
    settings = get_settings()
    logger.info(f"🚀 IdP v{__version__} starting...")
    logger.info(f"   Log level: {settings.log_level}")

    pool = None
    try:
        pool = await get_pool()
        logger.info("✅ IdP database pool initialized")
    except Exception as e:
        logger.warning(f"⚠️  IdP DB not available — activating memory store: {e}")
        from idp.memory_store import activate_idp_memory_store
        activate_idp_memory_store()

    if pool is not None:
        try:
            await _apply_migrations(pool)
        except Exception as e:
            logger.warning(f"⚠️  IdP migration apply failed (non-fatal): {e}")

    from idp import events
    await events.connect()

    yield

    # Shutdown: audit → NATS → DB
    from idp.services.audit import get_audit_sink
    await get_audit_sink().stop()
    try:
        await events.disconnect()
    except Exception as e:
        logger.warning(f"NATS disconnect failed: {e}")
    await close_pool()
    logger.info("🛑 IdP stopped")


# ═══════════════════════════════════════════════════════════════════════════════
# Фабрика приложения
# ═══════════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Создаёт и конфигурирует IdP FastAPI-приложение."""
    settings = get_settings()

    _is_production = settings.app_env == "production"

    app = FastAPI(
        redirect_slashes=False,
        title="IdP account lifecycle",
        description=(
            "Signup orchestration, caller sessions, current account, "
            "OIDC userinfo and human-check negotiation."
        ),
        version=__version__,
        lifespan=lifespan,
        docs_url=None if _is_production else "/docs",
        redoc_url=None if _is_production else "/redoc",
        openapi_url=None if _is_production else "/api/v1/openapi.json",
    )

    # ── CORS middleware ──────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "X-Request-ID"],
    )

    # ── Подключение API-роутеров ─────────────────────────────────────────
    v1_router = APIRouter(prefix="/api/v1")
    v1_router.include_router(auth_router)
    v1_router.include_router(account_router)
    v1_router.include_router(health_router)
    app.include_router(v1_router)

    # ── Глобальный обработчик IdpError ───────────────────────────────────
    @app.exception_handler(IdpError)
    async def idp_error_handler(request: Request, exc: IdpError) -> JSONResponse:
        """Маппинг категорий ошибок на HTTP-статусы."""
        status_code = STATUS_BY_CATEGORY.get(exc.category, 500)
        body = Response.error(exc.message, data={"code": exc.code, "details": exc.details})
        return JSONResponse(status_code=status_code, content=body.model_dump())

    return app


# ═══════════════════════════════════════════════════════════════════════════════
# Module-level singleton
# ═══════════════════════════════════════════════════════════════════════════════
app = create_app()


def main() -> None:
    """Запускает IdP-сервис через Uvicorn."""
    settings = get_settings()
    logger.info(f"Starting IdP server on {settings.api_host}:{settings.api_port}")
    uvicorn.run(
        "idp.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
