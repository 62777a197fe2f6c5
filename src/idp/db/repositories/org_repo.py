"""
idp/db/repositories/org_repo.py — Репозиторий организаций (только чтение).
"""

from __future__ import annotations

from idp.database import get_connection


async def get_organization(owner: str, name: str) -> dict | None:
    """Найти организацию по (owner, name)."""
    async with get_connection() as conn:
        row = await conn.fetchrow(
            "SELECT * FROM organizations WHERE owner = $1 AND name = $2",
            owner, name,
        )
        return dict(row) if row else None
