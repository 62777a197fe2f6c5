"""
idp/db/repositories/record_repo.py — Аудит-записи (append-only).
"""

from __future__ import annotations

from idp.database import get_connection


async def add_record(record: dict) -> None:
    """Записать аудит-событие."""
    async with get_connection() as conn:
        await conn.execute(
            """
            INSERT INTO records (name, owner, created_time, organization, "user",
                                 client_ip, method, request_uri, action)
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
            """,
            record["name"],
            record["owner"],
            record["created_time"],
            record["organization"],
            record["user"],
            record["client_ip"],
            record["method"],
            record["request_uri"],
            record["action"],
        )
