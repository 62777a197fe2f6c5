"""
idp/services/verification.py — Журнал кодов подтверждения (email / телефон).

Коды выдаются внешними отправителями через ``issue_code``; ядро только
проверяет (``check_code``) и гасит (``disable_code``) их.
Адресат — email или телефон в формате ``+<prefix><number>``.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone

from idp.config import get_settings
from idp.db.repositories import verification_repo

logger = logging.getLogger(__name__)


def phone_target(prefix: str, phone: str) -> str:
    """Нормализованный адресат для телефона: ``+<prefix><phone>``."""
    return f"+{prefix}{phone}"


def generate_code() -> str:
    """Генерирует 6-значный код подтверждения."""
    return f"{secrets.randbelow(10**6):06d}"


async def issue_code(target: str) -> str:
    """Записывает новый код для адресата и возвращает его отправителю."""
    code = generate_code()
    await verification_repo.add_record(target, code)
    if get_settings().app_env != "production":
        logger.info("Verification code for %s: %s (dev only)", target, code)
    return code


async def check_code(target: str, code: str) -> str:
    """Пустая строка — код верный; иначе причина отказа."""
    record = await verification_repo.get_latest_record(target)
    if record is None:
        return "Code has not been sent yet!"

    ttl = get_settings().verification_code_ttl_minutes
    if datetime.now(timezone.utc) - record["created_at"] > timedelta(minutes=ttl):
        return f"You should verify your code in {ttl} min!"

    if not secrets.compare_digest(record["code"].encode("utf-8"), code.encode("utf-8")):
        return "Wrong code!"
    return ""


async def disable_code(target: str) -> None:
    """Гасит коды адресата; пустой адресат — no-op."""
    if not target:
        return
    await verification_repo.disable_records(target)
