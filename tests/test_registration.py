from __future__ import annotations

import base64
import json
from datetime import timedelta

import pytest

from forum.core.errors import Conflict, ExternalFailure, InvalidInput, InvalidToken
from forum.services.auth import create_access_token, verify_password
from forum.services.registration import RegistrationService, email_allowed
from forum.services.tokens import registration_codec


class FailingNotifier:
    async def send_verification_email(self, email: str, token: str) -> None:
        raise ExternalFailure("smtp down")


class TestSignup:
    async def test_signup_issues_token_and_sends_email(self, registration, notifier, users_repo):
        token = await registration.signup("bob", "bob@allowed.edu", "pw12345")

        assert notifier.sent == [("bob@allowed.edu", token)]
        # nothing is persisted until verification
        assert await users_repo.find_by_name("bob") is None

    async def test_email_suffix_must_be_allowed(self, registration, notifier):
        with pytest.raises(InvalidInput, match="Email domain is not allowed"):
            await registration.signup("bob", "bob@gmail.com", "pw12345")
        assert notifier.sent == []

    async def test_existing_name_conflicts(self, registration, alice):
        with pytest.raises(Conflict, match="User already exists"):
            await registration.signup("alice", "other@school.edu", "pw12345")

    @pytest.mark.parametrize(
        "name,email,password",
        [("", "a@x.edu", "pw12345"), ("bob", "", "pw12345"), ("bob", "b@x.edu", ""), ("b!", "b@x.edu", "pw12345")],
    )
    async def test_missing_or_bad_fields(self, registration, name, email, password):
        with pytest.raises(InvalidInput):
            await registration.signup(name, email, password)

    async def test_notifier_failure_surfaces(self, users_repo, test_settings):
        service = RegistrationService(users_repo, registration_codec(), FailingNotifier(), test_settings)

        with pytest.raises(ExternalFailure):
            await service.signup("bob", "bob@allowed.edu", "pw12345")

    def test_email_allowed_is_case_insensitive(self):
        assert email_allowed("Bob@School.EDU ", [".edu"])
        assert not email_allowed("bob@school.education.com", [".edu"])


class TestVerify:
    async def test_verify_creates_user_once(self, registration):
        token = await registration.signup("bob", "bob@allowed.edu", "pw12345")

        user = await registration.verify(token)

        assert user.name == "bob"
        assert user.is_admin is False
        assert verify_password("pw12345", user.credentials)

        with pytest.raises(Conflict, match="User already exists"):
            await registration.verify(token)

    async def test_first_of_two_tokens_wins(self, registration, users_repo):
        first = await registration.signup("alice", "alice@a.edu", "pw12345")
        second = await registration.signup("alice", "alice@b.edu", "other123")

        created = await registration.verify(first)
        with pytest.raises(Conflict, match="User already exists"):
            await registration.verify(second)

        stored = await users_repo.find_by_name("alice")
        assert stored.id == created.id
        assert stored.email == "alice@a.edu"

    async def test_expired_token_fails_closed(self, registration, users_repo):
        codec = registration_codec()
        token = codec.sign(
            {"name": "late", "email": "late@x.edu", "credentials": {"salt": "00", "hash": "h"}},
            timedelta(seconds=-10),
        )

        with pytest.raises(InvalidToken):
            await registration.verify(token)
        assert await users_repo.find_by_name("late") is None

    async def test_tampered_token_fails_closed(self, registration, users_repo):
        token = await registration.signup("bob", "bob@allowed.edu", "pw12345")
        header, payload, signature = token.split(".")
        claims = json.loads(base64.urlsafe_b64decode(payload + "=" * (-len(payload) % 4)))
        claims["name"] = "mallory"
        forged = base64.urlsafe_b64encode(json.dumps(claims).encode()).rstrip(b"=").decode()

        with pytest.raises(InvalidToken):
            await registration.verify(f"{header}.{forged}.{signature}")
        assert await users_repo.find_by_name("mallory") is None

    async def test_access_token_is_not_a_registration_token(self, registration, alice):
        with pytest.raises(InvalidToken):
            await registration.verify(create_access_token(alice.id))

    async def test_garbage_token(self, registration):
        with pytest.raises(InvalidToken):
            await registration.verify("not.a.token")
        with pytest.raises(InvalidToken):
            await registration.verify("")
