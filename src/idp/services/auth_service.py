"""
idp/services/auth_service.py — Завершение сессии.
"""

from __future__ import annotations

import logging

from idp.models.enums import AuditAction
from idp.models.record import AuditRecord, RequestMeta
from idp.services.audit import get_audit_sink
from idp.services.session import SessionManager

logger = logging.getLogger(__name__)


async def logout(session: SessionManager, meta: RequestMeta) -> tuple[str, str]:
    """Выход: (имя пользователя до выхода, redirect или пустая строка)."""
    application = await session.current_application()
    username, redirect = await session.logout()
    logger.info("API: [%s] logged out", username)

    if username:
        get_audit_sink().emit(
            AuditRecord.from_request(
                meta,
                AuditAction.LOGOUT.value,
                organization=application.organization if application else "",
                user=username,
            )
        )
    return username, redirect
