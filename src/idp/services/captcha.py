"""
idp/services/captcha.py — Генерация и проверка captcha-изображений.

Ответ хранится в памяти процесса по ``captcha_id`` и гасится после
первой проверки или по истечении ``captcha_ttl_seconds``.
"""

from __future__ import annotations

import base64
import secrets
import string
import time
from uuid import uuid4

from captcha.image import ImageCaptcha

from idp.config import get_settings

_challenges: dict[str, tuple[str, float]] = {}


def _generate_text(length: int) -> str:
    return "".join(secrets.choice(string.digits) for _ in range(length))


def _purge_expired(now: float) -> None:
    for captcha_id in [k for k, (_, exp) in _challenges.items() if exp <= now]:
        del _challenges[captcha_id]


def get_captcha() -> tuple[str, str]:
    """Новый challenge: (captcha_id, PNG в виде data URI)."""
    settings = get_settings()
    now = time.monotonic()
    _purge_expired(now)

    text = _generate_text(settings.captcha_length)
    image = ImageCaptcha(width=settings.captcha_width, height=settings.captcha_height)
    png = image.generate(text).getvalue()

    captcha_id = uuid4().hex
    _challenges[captcha_id] = (text, now + settings.captcha_ttl_seconds)
    return captcha_id, "data:image/png;base64," + base64.b64encode(png).decode("ascii")


def verify_captcha(captcha_id: str, answer: str) -> bool:
    """Проверяет ответ; challenge одноразовый."""
    entry = _challenges.pop(captcha_id, None)
    if entry is None:
        return False
    text, expires = entry
    if expires <= time.monotonic():
        return False
    return secrets.compare_digest(text.encode("utf-8"), answer.strip().encode("utf-8"))
