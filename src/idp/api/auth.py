"""
idp/api/auth.py — Эндпоинты регистрации, выхода и human check.
"""

from fastapi import APIRouter, Depends
from pydantic import ConfigDict
from pydantic.alias_generators import to_camel

from idp.dependencies import get_request_meta, get_session
from idp.models.common import IdpBase
from idp.models.record import RequestMeta
from idp.models.response import HumanCheck, Response
from idp.models.user import SignupRequest
from idp.services import auth_service, captcha, human_check, signup_service
from idp.services.session import SessionManager

router = APIRouter(tags=["auth"])


class VerifyCaptchaRequest(IdpBase):
    model_config = ConfigDict(
        str_strip_whitespace=True, alias_generator=to_camel, populate_by_name=True
    )

    captcha_id: str
    captcha_answer: str


@router.post("/signup", response_model=Response, summary="Регистрация нового пользователя")
async def signup(
    body: SignupRequest,
    session: SessionManager = Depends(get_session),
    meta: RequestMeta = Depends(get_request_meta),
):
    """Возвращает ``owner/name`` созданного пользователя в ``data``."""
    user_id = await signup_service.signup(body, session, meta)
    return Response.ok(user_id)


@router.post("/logout", response_model=Response, summary="Выход текущего пользователя")
async def logout(
    session: SessionManager = Depends(get_session),
    meta: RequestMeta = Depends(get_request_meta),
):
    """``data`` — пользователь до выхода, ``data2`` — homepage приложения."""
    username, redirect = await auth_service.logout(session, meta)
    return Response.ok(username, redirect or None)


@router.get("/get-human-check", response_model=HumanCheck, summary="Нужна ли проверка «не робот»")
async def get_human_check():
    return await human_check.decide()


@router.post("/verify-captcha", response_model=Response, summary="Проверка ответа captcha")
async def verify_captcha(body: VerifyCaptchaRequest):
    return Response.ok(captcha.verify_captcha(body.captcha_id, body.captcha_answer))
