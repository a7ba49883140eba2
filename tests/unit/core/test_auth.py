"""Tests for password hashing and admin session tokens."""

import time

import pytest
from authlib.jose import JsonWebToken

from src.luxgold.core.services.auth import (
    AdminSessionService,
    InvalidSessionError,
    hash_password,
    verify_password,
)
from src.luxgold.entities.core.user import User
from src.luxgold.runtime.config.config_data import AuthConfig

SECRET = "unit-test-session-secret-value"


@pytest.fixture
def user() -> User:
    return User(email="admin@luxgold.test", name="Admin", role="ADMIN")


@pytest.fixture
def sessions() -> AdminSessionService:
    return AdminSessionService(AuthConfig(), secret=SECRET)


class TestPasswords:
    def test_hash_and_verify(self):
        password_hash = hash_password("gold and silver", rounds=4)
        assert password_hash.startswith("$2")
        assert verify_password("gold and silver", password_hash)
        assert not verify_password("gold and bronze", password_hash)

    def test_salted(self):
        assert hash_password("same", rounds=4) != hash_password("same", rounds=4)

    def test_malformed_hash(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False


class TestAdminSessionService:
    def test_round_trip(self, sessions, user):
        session_user = sessions.verify(sessions.issue(user))
        assert session_user.id == user.id
        assert session_user.email == "admin@luxgold.test"
        assert session_user.role == "ADMIN"
        assert sessions.is_admin(session_user)

    def test_customer_is_not_admin(self, sessions):
        customer = User(email="buyer@example.com", role="CUSTOMER")
        assert not sessions.is_admin(sessions.verify(sessions.issue(customer)))

    def test_expiry(self, sessions, user):
        issued = int(time.time())
        token = sessions.issue(user, now=issued)
        later = issued + sessions.max_age_seconds + AuthConfig().clock_skew + 1
        with pytest.raises(InvalidSessionError):
            sessions.verify(token, now=later)

    def test_expired_within_skew_is_accepted(self, sessions, user):
        issued = int(time.time())
        token = sessions.issue(user, now=issued)
        assert sessions.verify(token, now=issued + sessions.max_age_seconds + 10).id == user.id

    def test_wrong_secret(self, user):
        token = AdminSessionService(AuthConfig(), secret="another-secret").issue(user)
        with pytest.raises(InvalidSessionError):
            AdminSessionService(AuthConfig(), secret=SECRET).verify(token)

    def test_wrong_audience(self, user):
        token = AdminSessionService(AuthConfig(audience="storefront"), secret=SECRET).issue(user)
        with pytest.raises(InvalidSessionError):
            AdminSessionService(AuthConfig(), secret=SECRET).verify(token)

    def test_other_algorithm_is_refused(self, sessions, user):
        now = int(time.time())
        claims = {
            "iss": "luxgold-catalog",
            "aud": "luxgold-admin",
            "sub": user.id,
            "iat": now,
            "exp": now + 60,
            "email": user.email,
            "role": "ADMIN",
        }
        token = JsonWebToken(["HS512"]).encode({"alg": "HS512"}, claims, SECRET)
        with pytest.raises(InvalidSessionError):
            sessions.verify(token.decode())

    def test_garbage(self, sessions):
        with pytest.raises(InvalidSessionError):
            sessions.verify("not.a.token")

    def test_missing_role_claim(self, sessions, user):
        now = int(time.time())
        claims = {
            "iss": "luxgold-catalog",
            "aud": "luxgold-admin",
            "sub": user.id,
            "exp": now + 60,
            "email": user.email,
        }
        token = JsonWebToken(["HS256"]).encode({"alg": "HS256"}, claims, SECRET)
        with pytest.raises(InvalidSessionError):
            sessions.verify(token.decode())
