"""
idp/models/enums.py — Перечисления IdP-домена.

Содержит enum'ы signup-политики и human check:
    • SignupField — распознаваемые поля формы регистрации
    • IdRule — правило генерации идентификатора пользователя
    • HumanCheckType — тип проверки «не робот»
    • AuditAction — аудируемые действия
"""

from enum import Enum


class SignupField(str, Enum):
    """Поле формы регистрации (имя signup item в настройках приложения)."""
    ID = "ID"
    USERNAME = "Username"
    DISPLAY_NAME = "Display name"
    AFFILIATION = "Affiliation"
    COUNTRY_REGION = "Country/Region"
    ID_CARD = "ID card"
    EMAIL = "Email"
    PASSWORD = "Password"
    CONFIRM_PASSWORD = "Confirm password"
    PHONE = "Phone"
    AGREEMENT = "Agreement"


class IdRule(str, Enum):
    """Правило генерации ``UserIdentity.id``."""
    INCREMENTAL = "Incremental"
    RANDOM = "Random"


FIRST_LAST_RULE = "First, last"


class HumanCheckType(str, Enum):
    NONE = "none"
    CAPTCHA = "captcha"


class AuditAction(str, Enum):
    """Типы аудируемых действий."""
    SIGNUP = "signup"
    LOGOUT = "logout"
