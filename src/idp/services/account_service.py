"""
idp/services/account_service.py — Чтение текущей учётной записи.

    • get_account  — пользователь + маскированная организация
    • get_userinfo — OIDC claims текущей сессии
"""

from __future__ import annotations

import logging

from idp.config import get_settings
from idp.db.repositories import org_repo
from idp.exceptions import NotSignedIn, UserNotFound
from idp.models.organization import Organization
from idp.models.response import Userinfo
from idp.models.user import UserIdentity
from idp.services import claims, user_store
from idp.services.session import SessionManager

logger = logging.getLogger(__name__)

MASK = "***"


def mask_organization(org: Organization | None) -> Organization | None:
    """Копия организации без секретов (мастер-пароль, соль паролей)."""
    if org is None:
        return None
    masked = org.model_copy()
    if masked.master_password:
        masked.master_password = MASK
    if masked.password_salt:
        masked.password_salt = MASK
    return masked


async def _require_signed_in(session: SessionManager) -> str:
    username = await session.current_username()
    if not username:
        raise NotSignedIn()
    return username


async def get_account(session: SessionManager) -> tuple[UserIdentity, Organization | None]:
    """Текущий пользователь и его организация (в маскированном виде)."""
    user_id = await _require_signed_in(session)

    user = await user_store.get_user(user_id)
    if user is None:
        raise UserNotFound(user_id)

    row = await org_repo.get_organization(get_settings().default_owner, user.owner)
    organization = Organization(**row) if row else None
    return user, mask_organization(organization)


async def get_userinfo(session: SessionManager, host: str) -> Userinfo:
    """OIDC userinfo для scope/audience, сохранённых в сессии."""
    user_id = await _require_signed_in(session)
    scope, audience = await session.oidc_context()
    return await claims.get_userinfo(user_id, scope, audience, host)
