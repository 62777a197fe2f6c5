"""
idp/services/id_allocator.py — Выделение идентификатора нового пользователя.

Incremental: id последнего пользователя организации + 1 (нет пользователей → 0).
Random: uuid4.

Чтение «последнего пользователя» и вставка нового не атомарны, поэтому
для Incremental вызывающий держит ``allocation_lock(owner)`` от выделения
до вставки. Блокировка действует в пределах процесса; между процессами
столкновения ловит уникальный индекс (owner, id) и они приходят как
конфликт вставки.
"""

from __future__ import annotations

import asyncio
from uuid import uuid4

from idp.db.repositories import user_repo
from idp.exceptions import AllocationError
from idp.models.enums import IdRule

_locks: dict[str, asyncio.Lock] = {}


def allocation_lock(owner: str) -> asyncio.Lock:
    """Блокировка выделения Incremental-id для организации."""
    lock = _locks.get(owner)
    if lock is None:
        lock = _locks[owner] = asyncio.Lock()
    return lock


def generate_id() -> str:
    return str(uuid4())


async def allocate_id(owner: str, rule: IdRule) -> str:
    """Новый id пользователя организации ``owner`` по правилу ``rule``."""
    if rule is not IdRule.INCREMENTAL:
        return generate_id()

    last_user = await user_repo.get_last_user(owner)
    last_id = -1
    if last_user is not None:
        try:
            last_id = int(last_user["id"])
        except (TypeError, ValueError) as exc:
            raise AllocationError(
                f"Cannot continue incremental ids after non-numeric id {last_user['id']!r}",
                details={"owner": owner, "last_user": last_user["name"]},
            ) from exc
    return str(last_id + 1)
