"""
idp/models/response.py — Конверт ответа API и дескрипторы read-путей.

Каждая точка входа возвращает либо ``status="ok"`` с основным
(``data``) и необязательным дополнительным (``data2``) payload,
либо ``status="error"`` с сообщением ``msg``.
"""

from typing import Any

from pydantic import BaseModel

from idp.models.enums import HumanCheckType


class Response(BaseModel):
    status: str = "ok"
    msg: str = ""
    sub: str = ""
    name: str = ""
    data: Any = None
    data2: Any = None

    @classmethod
    def ok(cls, data: Any = None, data2: Any = None, **kwargs) -> "Response":
        return cls(status="ok", data=data, data2=data2, **kwargs)

    @classmethod
    def error(cls, msg: str, data: Any = None) -> "Response":
        return cls(status="error", msg=msg, data=data)


class HumanCheck(BaseModel):
    """Дескриптор проверки «не робот»; по умолчанию проверка не нужна."""
    type: str = HumanCheckType.NONE.value
    app_key: str = ""
    scene: str = ""
    captcha_id: str = ""
    captcha_image: str | None = None


class Userinfo(BaseModel):
    """Набор OIDC-claims; пустые claims не сериализуются."""
    sub: str
    iss: str
    aud: str
    preferred_username: str | None = None
    name: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    picture: str | None = None
    email: str | None = None
    email_verified: bool | None = None
    address: dict[str, str] | None = None
    phone_number: str | None = None
