"""
═══════════════════════════════════════════════════════════════════════════════
IdP — Иерархия доменных ошибок (Custom Exception Hierarchy)
═══════════════════════════════════════════════════════════════════════════════

Базовый класс ``IdpError`` и пять категорий:

    • policy_violation      — пользователь может исправить запрос (400)
    • not_found             — приложение / организация / пользователь (404)
    • state_conflict        — дубликат пользователя, без повторов (409)
    • auth_required         — нет активной сессии (401)
    • collaborator_failure  — ошибка внешнего компонента (502)

HTTP-маппинг категорий выполняется в ``idp.main:idp_error_handler``.
"""


class IdpError(Exception):
    """
    Базовое исключение для всех доменных ошибок IdP.

    Атрибуты
    ────────
        message (str):  Описание ошибки. Передаётся клиенту как ``msg``.
        code (str):     Строковый код конкретной ошибки.
        details (dict): Дополнительные данные (entity, id и т.д.).
    """

    category = "error"

    def __init__(
        self,
        message: str,
        code: str = "IDP_ERROR",
        details: dict | None = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)


# ═══════════════════════════════════════════════════════════════════════════════
# Категории
# ═══════════════════════════════════════════════════════════════════════════════

class PolicyViolation(IdpError):
    category = "policy_violation"


class NotFoundError(IdpError):
    category = "not_found"


class ConflictError(IdpError):
    category = "state_conflict"


class AuthRequiredError(IdpError):
    category = "auth_required"


class CollaboratorError(IdpError):
    category = "collaborator_failure"


# ═══════════════════════════════════════════════════════════════════════════════
# Конкретные ошибки signup/session-потока
# ═══════════════════════════════════════════════════════════════════════════════

class AlreadySignedIn(PolicyViolation):
    """Регистрация при активной сессии."""

    def __init__(self, username: str):
        super().__init__(
            "Please sign out first before signing up",
            code="IDP_ALREADY_SIGNED_IN",
            details={"username": username},
        )


class SignupDisabled(PolicyViolation):
    def __init__(self, application: str):
        super().__init__(
            "The application does not allow to sign up new account",
            code="IDP_SIGNUP_DISABLED",
            details={"application": application},
        )


class ValidationFailed(PolicyViolation):
    """Сообщение валидатора передаётся клиенту без изменений."""

    def __init__(self, message: str):
        super().__init__(message, code="IDP_VALIDATION_FAILED")


class EmailCodeInvalid(PolicyViolation):
    def __init__(self, reason: str):
        super().__init__(f"Email: {reason}", code="IDP_EMAIL_CODE_INVALID")


class PhoneCodeInvalid(PolicyViolation):
    def __init__(self, reason: str):
        super().__init__(f"Phone: {reason}", code="IDP_PHONE_CODE_INVALID")


class ApplicationNotFound(NotFoundError):
    def __init__(self, application_id: str):
        super().__init__(
            f"The application: {application_id} does not exist",
            code="IDP_APPLICATION_NOT_FOUND",
            details={"entity": "Application", "id": application_id},
        )


class OrganizationNotFound(NotFoundError):
    def __init__(self, organization_id: str):
        super().__init__(
            f"The organization: {organization_id} does not exist",
            code="IDP_ORGANIZATION_NOT_FOUND",
            details={"entity": "Organization", "id": organization_id},
        )


class UserNotFound(NotFoundError):
    def __init__(self, user_id: str):
        super().__init__(
            f"The user: {user_id} doesn't exist",
            code="IDP_USER_NOT_FOUND",
            details={"entity": "User", "id": user_id},
        )


class UserCreationFailed(ConflictError):
    """Конфликт при вставке; ``snapshot`` — JSON попытки без пароля."""

    def __init__(self, snapshot: str):
        super().__init__(
            f"Failed to create user, user information is invalid: {snapshot}",
            code="IDP_USER_CREATION_FAILED",
        )


class NotSignedIn(AuthRequiredError):
    def __init__(self, message: str = "Please sign in first"):
        super().__init__(message, code="IDP_NOT_SIGNED_IN")


class ClaimsError(CollaboratorError):
    def __init__(self, message: str):
        super().__init__(message, code="IDP_CLAIMS_ERROR")


class AllocationError(CollaboratorError):
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, code="IDP_ALLOCATION_ERROR", details=details)


__all__ = [
    "IdpError",
    "PolicyViolation",
    "NotFoundError",
    "ConflictError",
    "AuthRequiredError",
    "CollaboratorError",
    "AlreadySignedIn",
    "SignupDisabled",
    "ValidationFailed",
    "EmailCodeInvalid",
    "PhoneCodeInvalid",
    "ApplicationNotFound",
    "OrganizationNotFound",
    "UserNotFound",
    "UserCreationFailed",
    "NotSignedIn",
    "ClaimsError",
    "AllocationError",
]
