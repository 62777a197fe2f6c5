"""
idp/services/policy.py — Разрешение signup-политик приложения и организации.

Конфигурация приложения читается один раз на запрос и сворачивается в
``ApplicationPolicy`` — типизированный набор возможностей (SignupField →
visible/required), который дальше передаётся по цепочке вместо повторных
запросов по каждому полю.
"""

from __future__ import annotations

import logging

from pydantic import Field

from idp.config import get_settings
from idp.db.repositories import application_repo, org_repo
from idp.models.application import Application
from idp.models.common import IdpBase
from idp.models.enums import IdRule, SignupField
from idp.models.organization import Organization

logger = logging.getLogger(__name__)


class ApplicationPolicy(IdpBase):
    """Неизменяемое в пределах запроса представление signup-настроек."""

    name: str
    organization: str
    enable_sign_up: bool = False
    homepage_url: str = ""
    visible: dict[SignupField, bool] = Field(default_factory=dict)
    required: dict[SignupField, bool] = Field(default_factory=dict)
    id_rule: IdRule = IdRule.RANDOM
    display_name_rule: str = ""
    has_prompt_page: bool = False

    @classmethod
    def from_application(cls, app: Application) -> "ApplicationPolicy":
        visible: dict[SignupField, bool] = {}
        required: dict[SignupField, bool] = {}
        rules: dict[SignupField, str] = {}
        for item in app.signup_items:
            try:
                field = SignupField(item.name)
            except ValueError:
                logger.debug("Unknown signup item %r in application %s", item.name, app.name)
                continue
            visible[field] = item.visible
            required[field] = item.visible and item.required
            rules[field] = item.rule

        id_rule = IdRule.INCREMENTAL if rules.get(SignupField.ID) == IdRule.INCREMENTAL.value else IdRule.RANDOM
        return cls(
            name=app.name,
            organization=app.organization,
            enable_sign_up=app.enable_sign_up,
            homepage_url=app.homepage_url,
            visible=visible,
            required=required,
            id_rule=id_rule,
            display_name_rule=rules.get(SignupField.DISPLAY_NAME, ""),
            has_prompt_page=any(item.prompted for item in app.signup_items),
        )

    def is_visible(self, field: SignupField) -> bool:
        return self.visible.get(field, False)

    def is_required(self, field: SignupField) -> bool:
        return self.required.get(field, False)


class OrganizationPolicy(IdpBase):
    """Значения по умолчанию для пользователей организации."""

    owner: str
    name: str
    default_avatar: str = ""
    tags: list[str] = Field(default_factory=list)

    @classmethod
    def from_organization(cls, org: Organization) -> "OrganizationPolicy":
        return cls(
            owner=org.owner,
            name=org.name,
            default_avatar=org.default_avatar,
            tags=list(org.tags),
        )

    @property
    def signup_tag(self) -> str:
        """Первый токен первой группы тегов (``"staff|guest"`` → ``staff``)."""
        if not self.tags:
            return ""
        return self.tags[0].split("|")[0]


async def resolve_application(name: str) -> ApplicationPolicy | None:
    """Политика приложения ``<default_owner>/<name>``; None — приложения нет."""
    row = await application_repo.get_application(get_settings().default_owner, name)
    if row is None:
        return None
    return ApplicationPolicy.from_application(Application(**row))


async def resolve_organization(name: str) -> OrganizationPolicy | None:
    """Политика организации ``<default_owner>/<name>``; None — организации нет."""
    row = await org_repo.get_organization(get_settings().default_owner, name)
    if row is None:
        return None
    return OrganizationPolicy.from_organization(Organization(**row))
