"""
idp/db/repositories/application_repo.py — Репозиторий приложений (только чтение).
"""

from __future__ import annotations

from idp.database import get_connection


async def get_application(owner: str, name: str) -> dict | None:
    """Найти приложение по (owner, name)."""
    async with get_connection() as conn:
        row = await conn.fetchrow(
            "SELECT * FROM applications WHERE owner = $1 AND name = $2",
            owner, name,
        )
        return dict(row) if row else None
