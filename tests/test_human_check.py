# tests/test_human_check.py — Human check negotiation and captcha
import pytest
from httpx import AsyncClient

from idp import memory_store
from idp.services import captcha, human_check


def seed_provider(**overrides) -> dict:
    provider = {
        "owner": "admin",
        "name": "provider_geetest",
        "category": "HumanCheck",
        "type": "GEETEST",
        "client_id": "app-key-1",
        "scene": "login",
        "is_default": True,
    }
    provider.update(overrides)
    memory_store.seed_provider(provider)
    return provider


@pytest.mark.asyncio
class TestDecide:
    async def test_default_provider_is_passed_through(self):
        seed_provider()
        check = await human_check.decide()
        assert check.type == "GEETEST"
        assert check.app_key == "app-key-1"
        assert check.scene == "login"
        assert check.captcha_id == ""
        assert captcha._challenges == {}

    async def test_non_default_provider_is_ignored(self):
        seed_provider(is_default=False)
        check = await human_check.decide()
        assert check.type == "captcha"

    async def test_captcha_fallback(self):
        check = await human_check.decide()
        assert check.type == "captcha"
        assert check.captcha_id in captcha._challenges
        assert check.captcha_image.startswith("data:image/png;base64,")

    async def test_no_challenge_when_fallback_disabled(self, monkeypatch):
        from idp.config import get_settings

        monkeypatch.setattr(get_settings(), "captcha_fallback_enabled", False)
        check = await human_check.decide()
        assert check.type == "none"
        assert check.captcha_image is None


class TestCaptcha:
    def test_correct_answer(self):
        captcha_id, _ = captcha.get_captcha()
        answer = captcha._challenges[captcha_id][0]
        assert len(answer) == 5
        assert captcha.verify_captcha(captcha_id, answer)

    def test_single_use(self):
        captcha_id, _ = captcha.get_captcha()
        answer = captcha._challenges[captcha_id][0]
        assert captcha.verify_captcha(captcha_id, answer)
        assert not captcha.verify_captcha(captcha_id, answer)

    def test_wrong_answer_consumes_challenge(self):
        captcha_id, _ = captcha.get_captcha()
        answer = captcha._challenges[captcha_id][0]
        assert not captcha.verify_captcha(captcha_id, "x")
        assert not captcha.verify_captcha(captcha_id, answer)

    def test_expired_challenge(self):
        captcha_id, _ = captcha.get_captcha()
        answer, _ = captcha._challenges[captcha_id]
        captcha._challenges[captcha_id] = (answer, 0.0)
        assert not captcha.verify_captcha(captcha_id, answer)

    def test_unknown_challenge(self):
        assert not captcha.verify_captcha("nope", "12345")


@pytest.mark.asyncio
class TestHumanCheckApi:
    async def test_get_human_check(self, client: AsyncClient):
        res = await client.get("/api/v1/get-human-check")
        assert res.status_code == 200
        body = res.json()
        assert body["type"] == "captcha"

        answer = captcha._challenges[body["captcha_id"]][0]
        res = await client.post(
            "/api/v1/verify-captcha",
            json={"captchaId": body["captcha_id"], "captchaAnswer": answer},
        )
        assert res.json()["data"] is True
