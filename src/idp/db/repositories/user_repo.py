"""
idp/db/repositories/user_repo.py — Репозиторий пользователей.

Вставка выполняется одной командой ``INSERT ... ON CONFLICT DO NOTHING``:
конфликт по (owner, name) или (owner, id) означает дубликат.
"""

from __future__ import annotations

from idp.database import get_connection

_USER_COLUMNS = (
    "owner", "name", "created_time", "id", "type", "password",
    "display_name", "first_name", "last_name", "avatar", "email",
    "email_verified", "phone", "address", "affiliation", "id_card",
    "region", "tag", "score", "karma", "is_admin", "is_global_admin",
    "is_forbidden", "is_deleted", "signup_application", "properties",
)


async def create_user_if_absent(user: dict) -> bool:
    """Создать пользователя, если (owner, name) и (owner, id) свободны."""
    columns = ", ".join(_USER_COLUMNS)
    placeholders = ", ".join(f"${i}" for i in range(1, len(_USER_COLUMNS) + 1))
    async with get_connection() as conn:
        row = await conn.fetchrow(
            f"""
            INSERT INTO users ({columns})
            VALUES ({placeholders})
            ON CONFLICT DO NOTHING
            RETURNING name
            """,
            *(user[c] for c in _USER_COLUMNS),
        )
        return row is not None


async def get_user(owner: str, name: str) -> dict | None:
    """Найти пользователя по (owner, name)."""
    async with get_connection() as conn:
        row = await conn.fetchrow(
            "SELECT * FROM users WHERE owner = $1 AND name = $2", owner, name
        )
        return dict(row) if row else None


async def get_last_user(owner: str) -> dict | None:
    """Последний созданный пользователь организации."""
    async with get_connection() as conn:
        row = await conn.fetchrow(
            "SELECT * FROM users WHERE owner = $1 ORDER BY seq DESC LIMIT 1", owner
        )
        return dict(row) if row else None
