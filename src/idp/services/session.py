"""
idp/services/session.py — Серверные сессии вызывающих.

Состояние сессии (имя вошедшего пользователя, контекст приложения,
OIDC scope/audience) хранится в ``session_repo`` по токену из cookie.
``SessionManager`` создаётся на каждый запрос и явно передаётся в
сервисы — глобального состояния сессии нет.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from pydantic import BaseModel

from idp.config import get_settings
from idp.db.repositories import session_repo
from idp.services.policy import ApplicationPolicy

logger = logging.getLogger(__name__)


class SessionState(BaseModel):
    username: str = ""
    application: ApplicationPolicy | None = None
    oidc_scope: str = ""
    oidc_audience: str = ""


class SessionManager:
    """Доступ к состоянию одной сессии (одного вызывающего)."""

    def __init__(self, token: str) -> None:
        self.token = token
        self._state: SessionState | None = None

    async def _load(self) -> SessionState:
        if self._state is None:
            data = await session_repo.get_session(self.token)
            self._state = SessionState.model_validate(data) if data else SessionState()
        return self._state

    async def _save(self) -> None:
        expires_at = datetime.now(timezone.utc) + timedelta(
            minutes=get_settings().session_ttl_minutes
        )
        await session_repo.save_session(
            self.token, self._state.model_dump(mode="json"), expires_at
        )

    async def current_username(self) -> str:
        return (await self._load()).username

    async def set_username(self, username: str) -> None:
        state = await self._load()
        state.username = username
        await self._save()

    async def current_application(self) -> ApplicationPolicy | None:
        return (await self._load()).application

    async def set_application(self, application: ApplicationPolicy | None) -> None:
        state = await self._load()
        state.application = application
        await self._save()

    async def oidc_context(self) -> tuple[str, str]:
        state = await self._load()
        return state.oidc_scope, state.oidc_audience

    async def set_oidc(self, scope: str, audience: str) -> None:
        state = await self._load()
        state.oidc_scope = scope
        state.oidc_audience = audience
        await self._save()

    async def logout(self) -> tuple[str, str]:
        """
        Удаляет сессию целиком и возвращает (username, redirect).

        redirect пуст, если контекста приложения нет, это встроенное
        приложение или у него не задан homepage.
        """
        state = await self._load()
        username = state.username
        application = state.application

        await session_repo.delete_session(self.token)
        self._state = SessionState()

        if (
            application is None
            or application.name == get_settings().built_in_application
            or not application.homepage_url
        ):
            return username, ""
        return username, application.homepage_url
