# tests/test_signup.py — Signup orchestration tests
import asyncio

import pytest
from httpx import AsyncClient

from idp import memory_store
from idp.exceptions import (
    AllocationError,
    AlreadySignedIn,
    ApplicationNotFound,
    EmailCodeInvalid,
    OrganizationNotFound,
    PhoneCodeInvalid,
    SignupDisabled,
    UserCreationFailed,
    ValidationFailed,
)
from idp.models.user import SignupRequest
from idp.services import signup_service, user_store, verification
from tests.conftest import APP, COOKIE, ORG, seed_application, sign_in, signup_form, with_items


def form(**overrides) -> SignupRequest:
    return SignupRequest(**signup_form(**overrides))


@pytest.mark.asyncio
class TestSignupPipeline:
    async def test_signup_success(self, session, meta):
        user_id = await signup_service.signup(form(), session, meta)
        assert user_id == f"{ORG}/alice"

        user = await user_store.get_user(user_id)
        assert user is not None
        assert user.display_name == "Alice"
        assert user.type == "normal-user"
        assert user.score == 2000
        assert user.signup_application == APP
        assert user.avatar == "https://cdn.example.com/avatar.png"
        assert user.tag == "staff"
        assert user.address == []
        assert user.properties == {}
        assert not user.is_admin and not user.is_deleted

    async def test_password_is_hashed(self, session, meta):
        await signup_service.signup(form(), session, meta)
        row = memory_store._users[(ORG, "alice")]
        assert row["password"] != "123456"
        assert user_store.verify_password("123456", row["password"])

    async def test_signed_in_caller_is_rejected(self, meta):
        session = await sign_in("busy", f"{ORG}/bob")
        with pytest.raises(AlreadySignedIn):
            await signup_service.signup(form(), session, meta)
        assert memory_store._users == {}

    async def test_unknown_application(self, session, meta):
        with pytest.raises(ApplicationNotFound):
            await signup_service.signup(form(application="nope"), session, meta)

    async def test_signup_disabled_creates_nothing(self, session, meta):
        seed_application(enable_sign_up=False)
        with pytest.raises(SignupDisabled):
            await signup_service.signup(form(), session, meta)
        assert memory_store._users == {}

    async def test_unknown_organization(self, session, meta):
        with pytest.raises(OrganizationNotFound):
            await signup_service.signup(form(organization="ghost"), session, meta)

    async def test_validation_message_is_surfaced(self, session, meta):
        with pytest.raises(ValidationFailed) as exc:
            await signup_service.signup(form(password="123"), session, meta)
        assert exc.value.message == "Password must have at least 6 characters"

    async def test_password_whitespace_is_kept(self, session, meta):
        await signup_service.signup(form(password="  secret pw  "), session, meta)
        row = memory_store._users[(ORG, "alice")]
        assert user_store.verify_password("  secret pw  ", row["password"])
        assert not user_store.verify_password("secret pw", row["password"])

    async def test_password_whitespace_counts_towards_length(self, session, meta):
        with pytest.raises(ValidationFailed):
            await signup_service.signup(form(password="    a"), session, meta)
        await signup_service.signup(form(password="     a"), session, meta)

    async def test_same_invalid_input_fails_the_same_way(self, session, meta):
        seed_application(enable_sign_up=False)
        for _ in range(2):
            with pytest.raises(SignupDisabled):
                await signup_service.signup(form(), session, meta)


@pytest.mark.asyncio
class TestVerificationCodes:
    async def test_wrong_email_code_creates_nothing(self, session, meta):
        await verification.issue_code("alice@example.com")
        with pytest.raises(EmailCodeInvalid) as exc:
            await signup_service.signup(
                form(email="alice@example.com", email_code="000000x"), session, meta
            )
        assert exc.value.message == "Email: Wrong code!"
        assert memory_store._users == {}

    async def test_email_code_never_sent(self, session, meta):
        with pytest.raises(EmailCodeInvalid) as exc:
            await signup_service.signup(form(email="alice@example.com", email_code="1"), session, meta)
        assert exc.value.message == "Email: Code has not been sent yet!"

    async def test_email_code_is_consumed(self, session, meta):
        code = await verification.issue_code("alice@example.com")
        await signup_service.signup(form(email="alice@example.com", email_code=code), session, meta)

        user = await user_store.get_user(f"{ORG}/alice")
        assert user.email_verified is True
        assert await verification.check_code("alice@example.com", code) == "Code has not been sent yet!"

    async def test_hidden_email_skips_code_check(self, session, meta):
        seed_application(signup_items=with_items({"name": "Email", "visible": False}))
        await signup_service.signup(form(email="alice@example.com"), session, meta)
        user = await user_store.get_user(f"{ORG}/alice")
        assert user.email_verified is False

    async def test_phone_code_uses_prefixed_target(self, session, meta):
        code = await verification.issue_code("+15550100")
        user_id = await signup_service.signup(
            form(phone="5550100", phone_prefix="1", phone_code=code), session, meta
        )
        assert user_id == f"{ORG}/alice"
        assert await verification.check_code("+15550100", code) == "Code has not been sent yet!"

    async def test_wrong_phone_code(self, session, meta):
        await verification.issue_code("+15550100")
        with pytest.raises(PhoneCodeInvalid) as exc:
            await signup_service.signup(
                form(phone="5550100", phone_prefix="1", phone_code="nope"), session, meta
            )
        assert exc.value.message.startswith("Phone: ")


@pytest.mark.asyncio
class TestIdentifiers:
    async def test_incremental_ids_increase(self, session, meta):
        seed_application(signup_items=with_items({"name": "ID", "rule": "Incremental"}))
        ids = []
        for username in ("ann", "ben", "cid"):
            full_id = await signup_service.signup(form(username=username), session, meta)
            ids.append(int((await user_store.get_user(full_id)).id))
        assert ids == [0, 1, 2]

    async def test_incremental_after_non_numeric_id(self, session, meta):
        await signup_service.signup(form(username="ann"), session, meta)
        seed_application(signup_items=with_items({"name": "ID", "rule": "Incremental"}))
        with pytest.raises(AllocationError):
            await signup_service.signup(form(username="ben"), session, meta)
        assert (ORG, "ben") not in memory_store._users

    async def test_concurrent_incremental_signups(self, session, meta):
        seed_application(signup_items=with_items({"name": "ID", "rule": "Incremental"}))
        names = ["ann", "ben", "cid", "dan", "eve"]
        full_ids = await asyncio.gather(
            *(signup_service.signup(form(username=n), session, meta) for n in names)
        )
        ids = sorted([int((await user_store.get_user(f)).id) for f in full_ids])
        assert ids == [0, 1, 2, 3, 4]

    async def test_id_collision_is_not_created(self):
        first = {"owner": ORG, "name": "ann", "id": "7"}
        assert await memory_store.create_user_if_absent(first) is True
        assert await memory_store.create_user_if_absent({**first, "name": "ben"}) is False
        assert await memory_store.create_user_if_absent({**first, "owner": "other"}) is True
        assert (ORG, "ben") not in memory_store._users

    async def test_random_ids_are_unique(self, session, meta):
        await signup_service.signup(form(username="ann"), session, meta)
        await signup_service.signup(form(username="ben"), session, meta)
        ann = await user_store.get_user(f"{ORG}/ann")
        ben = await user_store.get_user(f"{ORG}/ben")
        assert ann.id != ben.id
        assert len(ann.id) == 36

    async def test_hidden_username_becomes_the_id(self, session, meta):
        seed_application(
            signup_items=with_items(
                {"name": "Username", "visible": False},
                {"name": "ID", "rule": "Incremental"},
            )
        )
        full_id = await signup_service.signup(form(username=""), session, meta)
        assert full_id == f"{ORG}/0"
        user = await user_store.get_user(full_id)
        assert user.name == user.id

    async def test_display_name_from_first_and_last(self, session, meta):
        seed_application(
            signup_items=with_items({"name": "Display name", "rule": "First, last"})
        )
        await signup_service.signup(
            form(name="", first_name="Ada", last_name="Lovelace"), session, meta
        )
        user = await user_store.get_user(f"{ORG}/alice")
        assert user.display_name == "Ada Lovelace"
        assert user.first_name == "Ada"
        assert user.last_name == "Lovelace"


@pytest.mark.asyncio
class TestDuplicatesAndSideEffects:
    async def test_duplicate_username_conflicts(self, session, meta):
        await signup_service.signup(form(name="First"), session, meta)
        before = dict(memory_store._users[(ORG, "alice")])

        with pytest.raises(UserCreationFailed) as exc:
            await signup_service.signup(form(name="Second"), session, meta)

        assert exc.value.category == "state_conflict"
        assert '"name":"alice"' in exc.value.message
        assert "123456" not in exc.value.message
        assert memory_store._users[(ORG, "alice")] == before

    async def test_prompt_page_signs_the_user_in(self, session, meta):
        seed_application(signup_items=with_items({"name": "Agreement", "prompted": True}))
        user_id = await signup_service.signup(form(), session, meta)
        assert await session.current_username() == user_id

    async def test_no_prompt_page_keeps_session_empty(self, session, meta):
        await signup_service.signup(form(), session, meta)
        assert await session.current_username() == ""

    async def test_audit_record_is_written(self, session, meta, audit_sink):
        await signup_service.signup(form(), session, meta)
        await audit_sink.drain()
        assert len(memory_store._records) == 1
        record = memory_store._records[0]
        assert record["action"] == "signup"
        assert record["organization"] == ORG
        assert record["user"] == "alice"
        assert record["client_ip"] == "10.0.0.1"

    async def test_audit_failure_does_not_fail_signup(self, session, meta, audit_sink, monkeypatch):
        from idp.db.repositories import record_repo

        async def broken(record):
            raise RuntimeError("audit store down")

        monkeypatch.setattr(record_repo, "add_record", broken)
        user_id = await signup_service.signup(form(), session, meta)
        await audit_sink.drain()
        assert user_id == f"{ORG}/alice"
        assert audit_sink.buffer_size == 1

    async def test_replication_failure_does_not_fail_signup(self, session, meta, monkeypatch):
        from idp import events

        async def broken(user):
            raise ConnectionError("secondary store down")

        monkeypatch.setattr(events, "emit_user_replicate", broken)
        assert await signup_service.signup(form(), session, meta) == f"{ORG}/alice"


@pytest.mark.asyncio
class TestSignupApi:
    async def test_signup_endpoint(self, client: AsyncClient):
        res = await client.post("/api/v1/signup", json=signup_form(firstName="A", phonePrefix="1"))
        assert res.status_code == 200
        assert res.json()["status"] == "ok"
        assert res.json()["data"] == f"{ORG}/alice"

    async def test_signup_disabled_endpoint(self, client: AsyncClient):
        seed_application(enable_sign_up=False)
        res = await client.post("/api/v1/signup", json=signup_form())
        assert res.status_code == 400
        body = res.json()
        assert body["status"] == "error"
        assert body["msg"] == "The application does not allow to sign up new account"
        assert body["data"]["code"] == "IDP_SIGNUP_DISABLED"

    async def test_duplicate_endpoint(self, client: AsyncClient):
        await client.post("/api/v1/signup", json=signup_form())
        res = await client.post("/api/v1/signup", json=signup_form())
        assert res.status_code == 409

    async def test_signed_in_cookie_blocks_signup(self, client: AsyncClient):
        await sign_in("cookie-token", f"{ORG}/bob")
        client.cookies.set(COOKIE, "cookie-token")
        res = await client.post("/api/v1/signup", json=signup_form())
        assert res.status_code == 400
        assert res.json()["data"]["details"]["username"] == f"{ORG}/bob"
