"""
idp/api/account.py — Эндпоинты текущей учётной записи и OIDC userinfo.
"""

from fastapi import APIRouter, Depends

from idp.dependencies import get_request_meta, get_session
from idp.models.record import RequestMeta
from idp.models.response import Response, Userinfo
from idp.services import account_service
from idp.services.session import SessionManager

router = APIRouter(tags=["account"])


@router.get("/get-account", response_model=Response, summary="Текущая учётная запись")
async def get_account(session: SessionManager = Depends(get_session)):
    """Пользователь в ``data``, маскированная организация в ``data2``."""
    user, organization = await account_service.get_account(session)
    return Response.ok(
        user.model_dump(),
        organization.model_dump() if organization else None,
        sub=user.id,
        name=user.name,
    )


@router.get(
    "/userinfo",
    response_model=Userinfo,
    response_model_exclude_none=True,
    summary="OIDC userinfo",
)
async def userinfo(
    session: SessionManager = Depends(get_session),
    meta: RequestMeta = Depends(get_request_meta),
):
    return await account_service.get_userinfo(session, meta.host)
