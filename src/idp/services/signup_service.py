"""
idp/services/signup_service.py — Оркестратор регистрации.

Порядок шагов фиксирован; первая ошибка прерывает конвейер:

    1. вызывающий не должен быть в сессии
    2. приложение существует и разрешает регистрацию
    3. организация существует
    4. бизнес-валидация полей
    5-6. коды подтверждения email / телефона
    7-9. выделение id, имя пользователя, сборка UserIdentity
    10. атомарная вставка (дубликат → UserCreationFailed)
    11-14. репликация, сессия для prompt-страницы, гашение кодов, аудит

До успешной вставки (шаг 10) наружу ничего не пишется. Шаги 11-14
не откатывают созданную учётную запись.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging

from idp.config import get_settings
from idp.exceptions import (
    AlreadySignedIn,
    ApplicationNotFound,
    EmailCodeInvalid,
    OrganizationNotFound,
    PhoneCodeInvalid,
    SignupDisabled,
    UserCreationFailed,
    ValidationFailed,
)
from idp.models.common import utc_now_iso
from idp.models.enums import FIRST_LAST_RULE, AuditAction, IdRule, SignupField
from idp.models.record import AuditRecord, RequestMeta
from idp.models.user import SignupRequest, UserIdentity
from idp.services import id_allocator, policy, user_store, validator, verification
from idp.services.audit import get_audit_sink
from idp.services.policy import ApplicationPolicy, OrganizationPolicy
from idp.services.session import SessionManager

logger = logging.getLogger(__name__)


def _build_user(
    form: SignupRequest,
    application: ApplicationPolicy,
    organization: OrganizationPolicy,
    user_id: str,
    password_hash: str,
    email_verified: bool,
) -> UserIdentity:
    """Собирает запись нового пользователя с умолчаниями организации."""
    username = form.username
    if not application.is_visible(SignupField.USERNAME):
        username = user_id

    user = UserIdentity(
        owner=form.organization,
        name=username,
        created_time=utc_now_iso(),
        id=user_id,
        password=password_hash,
        display_name=form.name,
        avatar=organization.default_avatar,
        email=form.email,
        email_verified=email_verified,
        phone=form.phone,
        affiliation=form.affiliation,
        id_card=form.id_card,
        region=form.region,
        tag=organization.signup_tag,
        score=get_settings().init_score,
        signup_application=application.name,
    )

    if application.display_name_rule == FIRST_LAST_RULE and (form.first_name or form.last_name):
        user.display_name = f"{form.first_name} {form.last_name}"
        user.first_name = form.first_name
        user.last_name = form.last_name
    return user


async def signup(form: SignupRequest, session: SessionManager, meta: RequestMeta) -> str:
    """
    Регистрирует нового пользователя.

    Returns:
        Составной идентификатор ``owner/name``.

    Raises:
        PolicyViolation, NotFoundError: запрос не прошёл проверки.
        ConflictError: пользователь уже существует.
    """
    settings = get_settings()

    # ── Шаг 1: нет активной сессии ──
    current = await session.current_username()
    if current:
        raise AlreadySignedIn(current)

    # ── Шаг 2: приложение ──
    application = await policy.resolve_application(form.application)
    if application is None:
        raise ApplicationNotFound(f"{settings.default_owner}/{form.application}")
    if not application.enable_sign_up:
        raise SignupDisabled(application.name)

    # ── Шаг 3: организация ──
    organization = await policy.resolve_organization(form.organization)
    if organization is None:
        raise OrganizationNotFound(f"{settings.default_owner}/{form.organization}")

    # ── Шаг 4: бизнес-валидация ──
    msg = validator.check_user_signup(form, application, organization)
    if msg:
        raise ValidationFailed(msg)

    # ── Шаги 5-6: коды подтверждения ──
    email_checked = application.is_visible(SignupField.EMAIL) and bool(form.email)
    if email_checked:
        result = await verification.check_code(form.email, form.email_code)
        if result:
            raise EmailCodeInvalid(result)

    phone_target = ""
    if application.is_visible(SignupField.PHONE) and form.phone:
        phone_target = verification.phone_target(form.phone_prefix, form.phone)
        result = await verification.check_code(phone_target, form.phone_code)
        if result:
            raise PhoneCodeInvalid(result)

    # ── Шаги 7-10: id, сборка, вставка ──
    # bcrypt вне event loop и до взятия блокировки
    password_hash = await asyncio.to_thread(user_store.hash_password, form.password)

    if application.id_rule is IdRule.INCREMENTAL:
        allocation = id_allocator.allocation_lock(form.organization)
    else:
        allocation = contextlib.nullcontext()

    async with allocation:
        user_id = await id_allocator.allocate_id(form.organization, application.id_rule)
        user = _build_user(
            form, application, organization, user_id, password_hash, email_checked
        )
        if not await user_store.create_user(user):
            raise UserCreationFailed(user.model_dump_json())

    # ── Шаги 11-14: побочные эффекты после вставки ──
    await user_store.replicate_user(user)

    if application.has_prompt_page:
        # prompt-странице нужен вошедший пользователь
        await session.set_username(user.full_id)

    await verification.disable_code(form.email)
    await verification.disable_code(phone_target)

    get_audit_sink().emit(
        AuditRecord.from_request(
            meta,
            AuditAction.SIGNUP.value,
            organization=application.organization,
            user=user.name,
        )
    )

    logger.info("API: [%s] is signed up as new user", user.full_id)
    return user.full_id
