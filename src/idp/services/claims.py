"""
idp/services/claims.py — Сборка OIDC userinfo claims по scope и audience.
"""

from __future__ import annotations

from idp.config import get_settings
from idp.exceptions import ClaimsError
from idp.models.response import Userinfo
from idp.services import user_store


def origin_from_host(host: str) -> str:
    """Issuer: из настроек, иначе из Host запроса."""
    settings = get_settings()
    if settings.origin:
        return settings.origin.rstrip("/")
    if host.startswith("localhost") or host.startswith("127.0.0.1"):
        return f"http://{host}"
    return f"https://{host}"


async def get_userinfo(user_id: str, scope: str, audience: str, host: str) -> Userinfo:
    """Claims пользователя ``owner/name``, отфильтрованные по scope."""
    user = await user_store.get_user(user_id)
    if user is None:
        raise ClaimsError(f"the user: {user_id} doesn't exist")

    scopes = set(scope.split())
    info = Userinfo(sub=user.id, iss=origin_from_host(host), aud=audience)

    if "profile" in scopes:
        info.preferred_username = user.name
        info.name = user.display_name
        info.given_name = user.first_name or None
        info.family_name = user.last_name or None
        info.picture = user.avatar or None
    if "email" in scopes:
        info.email = user.email
        info.email_verified = user.email_verified
    if "address" in scopes:
        info.address = {"formatted": ", ".join(user.address)}
    if "phone" in scopes:
        info.phone_number = user.phone

    return info
