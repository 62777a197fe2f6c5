"""
idp/events.py — NATS Event Publisher.

Публикует события IdP-сервиса в NATS:
    • ``idp.user.replicate``   — новый пользователь для вторичного хранилища
    • ``idp.audit.<action>``   — копия аудит-записи

Graceful degradation: если NATS недоступен или отключён
(``NATS_ENABLED=false``) — событие пропускается с записью в лог
и не ломает основной бизнес-процесс.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import nats
from nats.aio.client import Client as NATSClient

from idp.config import get_settings

logger = logging.getLogger(__name__)

# ── Singleton NATS connection ─────────────────────────────────────────────

_nc: NATSClient | None = None


async def connect() -> NATSClient | None:
    """Подключается к NATS (если ещё не подключён)."""
    global _nc
    settings = get_settings()
    if not settings.nats_enabled:
        return None
    if _nc is not None and _nc.is_connected:
        return _nc
    try:
        _nc = await nats.connect(settings.nats_url, connect_timeout=2)
        logger.info("NATS publisher connected: %s", settings.nats_url)
        return _nc
    except Exception as exc:
        logger.warning("NATS connect failed (events will be skipped): %s", exc)
        _nc = None
        return None


async def disconnect() -> None:
    """Закрывает соединение с NATS."""
    global _nc
    if _nc and _nc.is_connected:
        await _nc.drain()
        logger.info("NATS publisher disconnected")
    _nc = None


# ── Публикация событий ───────────────────────────────────────────────────

async def publish(subject: str, data: dict[str, Any]) -> bool:
    """
    Публикует JSON-событие в NATS.

    Args:
        subject: Тема сообщения (e.g. ``idp.user.replicate``).
        data: Payload (сериализуется в JSON).

    Returns:
        True, если событие передано в NATS.
    """
    nc = await connect()
    if nc is None:
        logger.debug("NATS unavailable — skipping event %s", subject)
        return False
    try:
        payload = json.dumps(data, default=str).encode("utf-8")
        await nc.publish(subject, payload)
        logger.info("NATS event published: %s", subject)
        return True
    except Exception as exc:
        logger.warning("NATS publish failed for %s: %s", subject, exc)
        return False


# ── Удобные функции для IdP-домена ───────────────────────────────────────

async def emit_user_replicate(user: dict[str, Any]) -> bool:
    """Событие: пользователь создан, копия для вторичного хранилища."""
    return await publish("idp.user.replicate", {
        "event": "user.replicate",
        "user": user,
    })


async def emit_audit(record: dict[str, Any]) -> bool:
    """Копия аудит-записи для подписчиков."""
    return await publish(f"idp.audit.{record['action']}", record)
