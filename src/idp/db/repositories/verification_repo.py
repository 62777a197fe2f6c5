"""
idp/db/repositories/verification_repo.py — Коды подтверждения email/телефона.
"""

from __future__ import annotations

from idp.database import get_connection


async def add_record(receiver: str, code: str) -> None:
    """Сохранить выданный код."""
    async with get_connection() as conn:
        await conn.execute(
            "INSERT INTO verification_records (receiver, code) VALUES ($1, $2)",
            receiver, code,
        )


async def get_latest_record(receiver: str) -> dict | None:
    """Последний выданный и ещё не использованный код для адресата."""
    async with get_connection() as conn:
        row = await conn.fetchrow(
            """
            SELECT receiver, code, created_at, is_used
            FROM verification_records
            WHERE receiver = $1 AND is_used = FALSE
            ORDER BY seq DESC
            LIMIT 1
            """,
            receiver,
        )
        return dict(row) if row else None


async def disable_records(receiver: str) -> None:
    """Пометить все коды адресата как использованные."""
    async with get_connection() as conn:
        await conn.execute(
            "UPDATE verification_records SET is_used = TRUE WHERE receiver = $1",
            receiver,
        )
