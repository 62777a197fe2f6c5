"""
idp/models/user.py — Модели пользователя и формы регистрации.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

from idp.models.common import IdpBase


class SignupRequest(IdpBase):
    """
    Поля формы регистрации.

    Принимает и camelCase (как отправляет фронтенд), и snake_case.
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    type: str = ""
    organization: str
    application: str
    username: str = ""
    # пароль хешируется ровно в том виде, в каком его ввели
    password: Annotated[str, StringConstraints(strip_whitespace=False)] = ""
    name: str = ""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    phone_prefix: str = ""
    affiliation: str = ""
    id_card: str = ""
    region: str = ""
    email_code: str = ""
    phone_code: str = ""
    redirect_uri: str = ""
    auto_signin: bool = False


class UserIdentity(IdpBase):
    """
    Учётная запись пользователя.

    Уникальность: пара (owner, name); ``id`` уникален в пределах owner.
    Пароль хранится в виде bcrypt-хеша и никогда не сериализуется.
    """

    owner: str
    name: str
    created_time: str = ""
    id: str
    type: str = "normal-user"
    password: str = Field(default="", exclude=True)
    display_name: str = ""
    first_name: str = ""
    last_name: str = ""
    avatar: str = ""
    email: str = ""
    email_verified: bool = False
    phone: str = ""
    address: list[str] = Field(default_factory=list)
    affiliation: str = ""
    id_card: str = ""
    region: str = ""
    tag: str = ""
    score: int = 0
    karma: int = 0
    is_admin: bool = False
    is_global_admin: bool = False
    is_forbidden: bool = False
    is_deleted: bool = False
    signup_application: str = ""
    properties: dict[str, str] = Field(default_factory=dict)

    @property
    def full_id(self) -> str:
        """Составной идентификатор ``owner/name``."""
        return f"{self.owner}/{self.name}"

    def to_row(self) -> dict:
        """Строка для репозитория (включая хеш пароля)."""
        row = self.model_dump()
        row["password"] = self.password
        return row
