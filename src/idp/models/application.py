"""
idp/models/application.py — Приложение и его signup-конфигурация.
"""

from pydantic import Field

from idp.models.common import IdpBase


class SignupItem(IdpBase):
    """Настройка одного поля формы регистрации."""
    name: str
    visible: bool = True
    required: bool = True
    prompted: bool = False
    rule: str = ""


class Application(IdpBase):
    owner: str = "admin"
    name: str
    created_time: str = ""
    display_name: str = ""
    organization: str
    homepage_url: str = ""
    enable_sign_up: bool = True
    signup_items: list[SignupItem] = Field(default_factory=list)
