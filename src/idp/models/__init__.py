"""
idp.models — Модели данных IdP-домена.

Реэкспорт основных классов для удобства:
    from idp.models import UserIdentity, SignupRequest
"""

from idp.models.enums import AuditAction, HumanCheckType, IdRule, SignupField  # noqa: F401
from idp.models.application import Application, SignupItem  # noqa: F401
from idp.models.organization import Organization  # noqa: F401
from idp.models.record import AuditRecord, RequestMeta  # noqa: F401
from idp.models.response import HumanCheck, Response, Userinfo  # noqa: F401
from idp.models.user import SignupRequest, UserIdentity  # noqa: F401
