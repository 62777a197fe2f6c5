"""
idp/db/repositories/provider_repo.py — Внешние провайдеры (human check и др.).
"""

from __future__ import annotations

from idp.database import get_connection


async def get_default_provider(category: str) -> dict | None:
    """Провайдер категории, отмеченный как используемый по умолчанию."""
    async with get_connection() as conn:
        row = await conn.fetchrow(
            """
            SELECT * FROM providers
            WHERE category = $1 AND is_default = TRUE
            ORDER BY name
            LIMIT 1
            """,
            category,
        )
        return dict(row) if row else None
