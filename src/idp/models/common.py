"""
idp/models/common.py — Базовые типы IdP-домена.
"""

from datetime import datetime, timezone

from pydantic import BaseModel


class IdpBase(BaseModel):
    """Базовая Pydantic-модель для IdP-схем."""

    model_config = {"str_strip_whitespace": True}


def utc_now_iso() -> str:
    """Текущее время UTC в ISO-формате (created_time записей)."""
    return datetime.now(timezone.utc).isoformat()
