"""
═══════════════════════════════════════════════════════════════════════════════
IdP — Зависимости FastAPI (Dependency Injection)
═══════════════════════════════════════════════════════════════════════════════

``get_session()`` выдаёт ``SessionManager`` для токена из cookie
вызывающего; ``get_request_meta()`` — данные запроса для аудита.
"""

from __future__ import annotations

import secrets

from fastapi import Request, Response

from idp.config import get_settings
from idp.models.record import RequestMeta
from idp.services.session import SessionManager


def get_session(request: Request, response: Response) -> SessionManager:
    """
    Сессия вызывающего по cookie ``session_cookie_name``.

    Если cookie нет — создаётся новый токен и ставится в ответ.
    """
    settings = get_settings()
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        token = secrets.token_urlsafe(32)
        response.set_cookie(
            settings.session_cookie_name,
            token,
            max_age=settings.session_ttl_minutes * 60,
            httponly=True,
            samesite="lax",
            secure=settings.session_cookie_secure,
        )
    return SessionManager(token)


def get_request_meta(request: Request) -> RequestMeta:
    return RequestMeta(
        client_ip=request.client.host if request.client else "",
        method=request.method,
        request_uri=str(request.url.path),
        host=request.headers.get("host", ""),
    )
