"""
idp/services/human_check.py — Выбор проверки «не робот».
"""

from __future__ import annotations

import logging

from idp.config import get_settings
from idp.db.repositories import provider_repo
from idp.models.enums import HumanCheckType
from idp.models.response import HumanCheck
from idp.services import captcha

logger = logging.getLogger(__name__)

HUMAN_CHECK_CATEGORY = "HumanCheck"


async def decide() -> HumanCheck:
    """
    Дескриптор проверки для формы входа/регистрации.

    Провайдер по умолчанию → его тип как есть; иначе сгенерированная
    captcha (если fallback включён); иначе проверка не нужна.
    Дескриптор провайдера передаётся как есть, а не сводится к type="none".
    """
    provider = await provider_repo.get_default_provider(HUMAN_CHECK_CATEGORY)
    if provider is not None:
        return HumanCheck(
            type=provider["type"],
            app_key=provider.get("client_id", ""),
            scene=provider.get("scene", ""),
        )

    if not get_settings().captcha_fallback_enabled:
        return HumanCheck()

    captcha_id, image = captcha.get_captcha()
    logger.debug("Generated captcha challenge %s", captcha_id)
    return HumanCheck(
        type=HumanCheckType.CAPTCHA.value,
        captcha_id=captcha_id,
        captcha_image=image,
    )
