"""
═══════════════════════════════════════════════════════════════════════════════
IdP — In-Memory хранилище (замена PostgreSQL для локальной разработки)
═══════════════════════════════════════════════════════════════════════════════

In-memory реализации репозиториев ``idp.db.repositories.*`` и
функция ``activate_idp_memory_store()`` для monkey-patching.
Активируется из ``idp.main`` при недоступности БД и в тестах.
"""

from __future__ import annotations

import copy
import logging
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Хранилища данных
# ═══════════════════════════════════════════════════════════════════════════════
_users: dict[tuple[str, str], dict] = {}
_orgs: dict[tuple[str, str], dict] = {}
_apps: dict[tuple[str, str], dict] = {}
_providers: dict[tuple[str, str], dict] = {}
_verification_records: list[dict] = []
_sessions: dict[str, dict] = {}
_records: list[dict] = []

_now = lambda: datetime.now(timezone.utc)  # noqa: E731


def reset() -> None:
    """Очищает все in-memory таблицы."""
    for table in (_users, _orgs, _apps, _providers, _sessions):
        table.clear()
    _verification_records.clear()
    _records.clear()


# ═══════════════════════════════════════════════════════════════════════════════
# Наполнение справочников (организации / приложения / провайдеры
# управляются вне этого сервиса)
# ═══════════════════════════════════════════════════════════════════════════════

def seed_organization(org: dict) -> None:
    _orgs[(org["owner"], org["name"])] = copy.deepcopy(org)


def seed_application(app: dict) -> None:
    _apps[(app["owner"], app["name"])] = copy.deepcopy(app)


def seed_provider(provider: dict) -> None:
    _providers[(provider["owner"], provider["name"])] = copy.deepcopy(provider)


# ═══════════════════════════════════════════════════════════════════════════════
# user_repo in-memory
# ═══════════════════════════════════════════════════════════════════════════════

async def create_user_if_absent(user: dict) -> bool:
    """Вставка без await между проверкой и записью — атомарна в event loop."""
    key = (user["owner"], user["name"])
    if key in _users:
        return False
    if any(u["owner"] == user["owner"] and u["id"] == user["id"] for u in _users.values()):
        return False
    _users[key] = copy.deepcopy(user)
    logger.info("IdP memory store: created user %s/%s", user["owner"], user["name"])
    return True


async def get_user(owner: str, name: str) -> dict | None:
    user = _users.get((owner, name))
    return copy.deepcopy(user) if user else None


async def get_last_user(owner: str) -> dict | None:
    for user in reversed(_users.values()):
        if user["owner"] == owner:
            return copy.deepcopy(user)
    return None


# ═══════════════════════════════════════════════════════════════════════════════
# org_repo / application_repo / provider_repo in-memory
# ═══════════════════════════════════════════════════════════════════════════════

async def get_organization(owner: str, name: str) -> dict | None:
    org = _orgs.get((owner, name))
    return copy.deepcopy(org) if org else None


async def get_application(owner: str, name: str) -> dict | None:
    app = _apps.get((owner, name))
    return copy.deepcopy(app) if app else None


async def get_default_provider(category: str) -> dict | None:
    candidates = sorted(
        (p for p in _providers.values() if p["category"] == category and p.get("is_default")),
        key=lambda p: p["name"],
    )
    return copy.deepcopy(candidates[0]) if candidates else None


# ═══════════════════════════════════════════════════════════════════════════════
# verification_repo in-memory
# ═══════════════════════════════════════════════════════════════════════════════

async def add_verification_record(receiver: str, code: str) -> None:
    _verification_records.append({
        "receiver": receiver, "code": code,
        "created_at": _now(), "is_used": False,
    })


async def get_latest_verification_record(receiver: str) -> dict | None:
    for record in reversed(_verification_records):
        if record["receiver"] == receiver and not record["is_used"]:
            return dict(record)
    return None


async def disable_verification_records(receiver: str) -> None:
    for record in _verification_records:
        if record["receiver"] == receiver:
            record["is_used"] = True


# ═══════════════════════════════════════════════════════════════════════════════
# session_repo in-memory
# ═══════════════════════════════════════════════════════════════════════════════

async def get_session(token: str) -> dict | None:
    entry = _sessions.get(token)
    if not entry or entry["expires_at"] <= _now():
        return None
    return copy.deepcopy(entry["data"])


async def save_session(token: str, data: dict, expires_at: datetime) -> None:
    _sessions[token] = {"data": copy.deepcopy(data), "expires_at": expires_at}


async def delete_session(token: str) -> None:
    _sessions.pop(token, None)


# ═══════════════════════════════════════════════════════════════════════════════
# record_repo in-memory
# ═══════════════════════════════════════════════════════════════════════════════

async def add_audit_record(record: dict) -> None:
    _records.append(dict(record))


# ═══════════════════════════════════════════════════════════════════════════════
# Активация in-memory хранилища (monkey-patching)
# ═══════════════════════════════════════════════════════════════════════════════

def activate_idp_memory_store() -> None:
    """
    Подменяет функции в idp.db.repositories.* на in-memory реализации.

    Вызывается из idp.main → lifespan() при недоступности БД.
    """
    from idp.db.repositories import (
        application_repo,
        org_repo,
        provider_repo,
        record_repo,
        session_repo,
        user_repo,
        verification_repo,
    )

    # ── user_repo ──
    user_repo.create_user_if_absent = create_user_if_absent
    user_repo.get_user = get_user
    user_repo.get_last_user = get_last_user

    # ── справочники ──
    org_repo.get_organization = get_organization
    application_repo.get_application = get_application
    provider_repo.get_default_provider = get_default_provider

    # ── verification_repo ──
    verification_repo.add_record = add_verification_record
    verification_repo.get_latest_record = get_latest_verification_record
    verification_repo.disable_records = disable_verification_records

    # ── session_repo ──
    session_repo.get_session = get_session
    session_repo.save_session = save_session
    session_repo.delete_session = delete_session

    # ── record_repo ──
    record_repo.add_record = add_audit_record

    logger.warning(
        "🧠 IdP memory store ACTIVATED — all data is in-memory (lost on restart)."
    )
