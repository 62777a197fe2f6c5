"""
idp/services/user_store.py — Хранилище учётных записей.

    • create_user — атомарный create-if-absent (False → дубликат)
    • replicate_user — at-most-once копия во вторичное хранилище

Частичный сбой (основная запись создана, реплика нет) допустим и
этим сервисом не сверяется.
"""

from __future__ import annotations

import logging

import bcrypt

from idp import events
from idp.db.repositories import user_repo
from idp.models.user import UserIdentity

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# РАБОТА С ПАРОЛЯМИ
# ═══════════════════════════════════════════════════════════════════════════


def hash_password(password: str) -> str:
    """Хеширует пароль с помощью bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Сравнивает открытый пароль с хешем из БД."""
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))


# ═══════════════════════════════════════════════════════════════════════════
# ЗАПИСЬ И ЧТЕНИЕ
# ═══════════════════════════════════════════════════════════════════════════


async def create_user(user: UserIdentity) -> bool:
    """Создаёт пользователя, если пара (owner, name) свободна."""
    return await user_repo.create_user_if_absent(user.to_row())


async def get_user(full_id: str) -> UserIdentity | None:
    """Пользователь по составному id ``owner/name``."""
    owner, _, name = full_id.partition("/")
    if not owner or not name:
        return None
    row = await user_repo.get_user(owner, name)
    return UserIdentity(**row) if row else None


async def replicate_user(user: UserIdentity) -> None:
    """Одна попытка отправить копию пользователя; сбой только логируется."""
    try:
        delivered = await events.emit_user_replicate(user.model_dump())
    except Exception as exc:
        logger.warning("Replication of user %s failed: %s", user.full_id, exc)
        return
    if not delivered:
        logger.info("User %s was not replicated (secondary store unavailable)", user.full_id)
