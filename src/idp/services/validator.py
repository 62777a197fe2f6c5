"""
idp/services/validator.py — Бизнес-валидация полей формы регистрации.

Чистая функция: пустая строка — успех, иначе причина отказа.
Проверяется только формат; уникальность обеспечивает ``user_store``.
"""

from __future__ import annotations

import re

from idp.models.enums import FIRST_LAST_RULE, SignupField
from idp.models.user import SignupRequest
from idp.services.policy import ApplicationPolicy, OrganizationPolicy

USERNAME_MAX_LENGTH = 39
PASSWORD_MIN_LENGTH = 6

_USERNAME_RE = re.compile(r"^[a-zA-Z0-9]+((?:-[a-zA-Z0-9]+)|(?:_[a-zA-Z0-9]+))*$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_PHONE_RE = re.compile(r"^\d{4,20}$")


def check_user_signup(
    form: SignupRequest,
    application: ApplicationPolicy,
    organization: OrganizationPolicy,
) -> str:
    """Проверяет поля формы по правилам приложения."""
    if application.is_visible(SignupField.USERNAME):
        if len(form.username) <= 1:
            return "Username must have at least 2 characters"
        if len(form.username) > USERNAME_MAX_LENGTH:
            return f"Username is too long (maximum is {USERNAME_MAX_LENGTH} characters)"
        if not _USERNAME_RE.match(form.username):
            return (
                "The username may only contain alphanumeric characters, underlines or hyphens, "
                "cannot have consecutive hyphens or underlines, "
                "and cannot begin or end with a hyphen or underline"
            )

    if len(form.password) < PASSWORD_MIN_LENGTH:
        return f"Password must have at least {PASSWORD_MIN_LENGTH} characters"

    if application.is_visible(SignupField.EMAIL):
        if not form.email:
            if application.is_required(SignupField.EMAIL):
                return "Email cannot be empty"
        elif not _EMAIL_RE.match(form.email):
            return "Email is invalid"

    if application.is_visible(SignupField.PHONE):
        if not form.phone:
            if application.is_required(SignupField.PHONE):
                return "Phone cannot be empty"
        elif not _PHONE_RE.match(form.phone):
            return "Phone number is invalid"

    if application.is_required(SignupField.DISPLAY_NAME):
        if application.display_name_rule == FIRST_LAST_RULE:
            if not form.first_name:
                return "First name cannot be blank"
            if not form.last_name:
                return "Last name cannot be blank"
        elif not form.name:
            return "Display name cannot be blank"

    if application.is_required(SignupField.AFFILIATION) and not form.affiliation:
        return "Affiliation cannot be blank"

    return ""
