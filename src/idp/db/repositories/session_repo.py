"""
idp/db/repositories/session_repo.py — Серверное хранилище сессий.

Ключ — токен из cookie вызывающего; значение — jsonb с состоянием.
"""

from __future__ import annotations

from datetime import datetime

from idp.database import get_connection


async def get_session(token: str) -> dict | None:
    """Состояние сессии, если она существует и не истекла."""
    async with get_connection() as conn:
        row = await conn.fetchrow(
            "SELECT data FROM sessions WHERE token = $1 AND expires_at > NOW()",
            token,
        )
        return row["data"] if row else None


async def save_session(token: str, data: dict, expires_at: datetime) -> None:
    async with get_connection() as conn:
        await conn.execute(
            """
            INSERT INTO sessions (token, data, expires_at)
            VALUES ($1, $2, $3)
            ON CONFLICT (token) DO UPDATE
                SET data = EXCLUDED.data, expires_at = EXCLUDED.expires_at
            """,
            token, data, expires_at,
        )


async def delete_session(token: str) -> None:
    """Удалить сессию целиком одной командой."""
    async with get_connection() as conn:
        await conn.execute("DELETE FROM sessions WHERE token = $1", token)
