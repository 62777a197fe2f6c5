"""
═══════════════════════════════════════════════════════════════════════════════
IdP — Пул соединений к базе данных (Database Connection Pool)
═══════════════════════════════════════════════════════════════════════════════

Пул соединений asyncpg к PostgreSQL IdP-сервиса.
Параметры берутся из ``idp.config.get_settings()``.
"""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import asyncpg

from idp.config import get_settings

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Глобальная переменная пула (module-level singleton)
# ═══════════════════════════════════════════════════════════════════════════════
_pool: asyncpg.Pool | None = None


async def _init_connection(conn: asyncpg.Connection) -> None:
    """jsonb-колонки читаются и пишутся как обычные dict/list."""
    await conn.set_type_codec(
        "jsonb", encoder=json.dumps, decoder=json.loads, schema="pg_catalog"
    )


async def get_pool() -> asyncpg.Pool:
    """
    Возвращает глобальный пул соединений к PostgreSQL.

    Создаёт пул при первом вызове с параметрами из IdpSettings.
    """
    global _pool
    if _pool is None:
        settings = get_settings()
        _pool = await asyncpg.create_pool(
            dsn=settings.database_url,
            min_size=settings.database_pool_min,
            max_size=settings.database_pool_max,
            command_timeout=60,
            init=_init_connection,
        )
        logger.info(
            f"IdP DB pool created "
            f"(min={settings.database_pool_min}, max={settings.database_pool_max})"
        )
    return _pool


async def close_pool() -> None:
    """Закрывает глобальный пул соединений."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
        logger.info("IdP DB pool closed")


@asynccontextmanager
async def get_connection() -> AsyncGenerator[asyncpg.Connection, None]:
    """
    Выдаёт соединение из пула и возвращает его обратно.

    Использование::

        from idp.database import get_connection

        async with get_connection() as conn:
            row = await conn.fetchrow("SELECT * FROM users WHERE owner = $1", owner)
    """
    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn


async def check_connection() -> bool:
    """Проверяет доступность PostgreSQL (health check)."""
    try:
        async with get_connection() as conn:
            result = await conn.fetchval("SELECT 1")
            return result == 1
    except Exception as e:
        logger.error(f"IdP DB health check failed: {e}")
        return False
