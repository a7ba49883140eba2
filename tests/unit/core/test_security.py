"""Tests for the double-submit cookie CSRF guard."""

import re

import pytest
from fastapi import Response
from starlette.requests import Request

from src.luxgold.core.security import (
    CsrfFailure,
    build_csrf_cookie_value,
    check_csrf_token,
    generate_csrf_token,
    get_csrf_secret,
    is_csrf_protected_method,
    parse_csrf_cookie,
    set_csrf_cookie,
    sign_csrf_token,
    validate_csrf_request,
    verify_csrf_signature,
)
from src.luxgold.runtime.config.config_data import AppConfig, ConfigData, SecurityConfig
from src.luxgold.runtime.context import with_context

SECRET = "s" * 40


def _request(method: str, headers: dict[str, str]) -> Request:
    scope = {
        "type": "http",
        "method": method,
        "path": "/api/admin/products",
        "query_string": b"",
        "headers": [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in headers.items()],
    }
    return Request(scope)


class TestTokenGeneration:
    """Test CSRF token and signature generation."""

    def test_token_is_64_hex_chars(self):
        """Tokens carry 32 random bytes, hex encoded."""
        token = generate_csrf_token()
        assert re.fullmatch(r"[0-9a-f]{64}", token)

    def test_tokens_are_unique(self):
        tokens = {generate_csrf_token() for _ in range(50)}
        assert len(tokens) == 50

    def test_signature_is_truncated_sha256(self):
        """Signature is the first 16 hex chars of sha256('token.secret')."""
        import hashlib

        expected = hashlib.sha256(b"abc.secret").hexdigest()[:16]
        assert sign_csrf_token("abc", "secret") == expected

    def test_signature_depends_on_secret(self):
        assert sign_csrf_token("abc", "one") != sign_csrf_token("abc", "two")

    def test_cookie_value_is_token_dot_signature(self):
        token = generate_csrf_token()
        value = build_csrf_cookie_value(token, SECRET)
        assert value == f"{token}.{sign_csrf_token(token, SECRET)}"


class TestSecretResolution:
    """Test which configured secret signs tokens."""

    def test_prefers_csrf_secret(self):
        override = ConfigData(app=AppConfig(csrf_signing_secret="c" * 32, session_signing_secret="x" * 32))
        with with_context(override):
            assert get_csrf_secret() == "c" * 32

    def test_falls_back_to_session_secret(self):
        override = ConfigData(app=AppConfig(csrf_signing_secret=None, session_signing_secret="x" * 32))
        with with_context(override):
            assert get_csrf_secret() == "x" * 32

    def test_development_default_when_unset(self):
        override = ConfigData(app=AppConfig(csrf_signing_secret=None, session_signing_secret=None))
        with with_context(override):
            assert get_csrf_secret()


class TestCookieParsing:
    """Test splitting of the cookie payload."""

    def test_valid_cookie(self):
        assert parse_csrf_cookie("abc.def") == ("abc", "def")

    @pytest.mark.parametrize("value", [None, "", "abc", "abc.", ".def", "a.b.c"])
    def test_malformed_cookie(self, value):
        """Anything but exactly two non-empty parts is rejected."""
        assert parse_csrf_cookie(value) is None


class TestSignatureVerification:
    """Test signature checks."""

    def test_round_trip(self):
        token = generate_csrf_token()
        assert verify_csrf_signature(token, sign_csrf_token(token, SECRET), SECRET)

    def test_single_character_change_fails(self):
        """Mutating any character of a valid signature fails verification."""
        token = generate_csrf_token()
        signature = sign_csrf_token(token, SECRET)
        for i, char in enumerate(signature):
            replacement = "0" if char != "0" else "1"
            mutated = signature[:i] + replacement + signature[i + 1 :]
            assert not verify_csrf_signature(token, mutated, SECRET)

    def test_wrong_length_fails(self):
        token = generate_csrf_token()
        signature = sign_csrf_token(token, SECRET)
        assert not verify_csrf_signature(token, signature[:-1], SECRET)
        assert not verify_csrf_signature(token, signature + "0", SECRET)

    def test_other_secret_fails(self):
        token = generate_csrf_token()
        assert not verify_csrf_signature(token, sign_csrf_token(token, "other"), SECRET)


class TestCheckCsrfToken:
    """Test header and cookie validation."""

    @pytest.fixture(autouse=True)
    def secret_context(self):
        with with_context(ConfigData(app=AppConfig(csrf_signing_secret=SECRET))):
            yield

    def test_matching_header_and_cookie_pass(self):
        token = generate_csrf_token()
        check = check_csrf_token(token, build_csrf_cookie_value(token))
        assert check.valid
        assert check.failure is None

    def test_missing_header(self):
        token = generate_csrf_token()
        check = check_csrf_token(None, build_csrf_cookie_value(token))
        assert check.failure == CsrfFailure.MISSING_HEADER

    def test_missing_cookie(self):
        check = check_csrf_token(generate_csrf_token(), None)
        assert check.failure == CsrfFailure.MISSING_COOKIE

    def test_malformed_cookie(self):
        token = generate_csrf_token()
        check = check_csrf_token(token, token)
        assert check.failure == CsrfFailure.MALFORMED_COOKIE

    def test_header_mismatch(self):
        """A different header token fails even with a valid cookie."""
        token = generate_csrf_token()
        check = check_csrf_token(generate_csrf_token(), build_csrf_cookie_value(token))
        assert check.failure == CsrfFailure.TOKEN_MISMATCH

    def test_forged_signature(self):
        """A cookie whose signature was not made with the server secret fails."""
        token = generate_csrf_token()
        forged = f"{token}.{sign_csrf_token(token, 'attacker')}"
        check = check_csrf_token(token, forged)
        assert check.failure == CsrfFailure.BAD_SIGNATURE

    def test_validate_request_reads_configured_names(self):
        token = generate_csrf_token()
        request = _request(
            "POST",
            {
                "X-CSRF-Token": token,
                "Cookie": f"csrf-token={build_csrf_cookie_value(token)}",
            },
        )
        assert validate_csrf_request(request).valid


class TestProtectedMethods:
    """Test which methods require a token."""

    @pytest.mark.parametrize("method", ["POST", "PUT", "PATCH", "DELETE", "post"])
    def test_state_changing_methods_are_protected(self, method):
        assert is_csrf_protected_method(method)

    @pytest.mark.parametrize("method", ["GET", "HEAD", "OPTIONS"])
    def test_safe_methods_are_exempt(self, method):
        assert not is_csrf_protected_method(method)

    @pytest.mark.parametrize("method", ["GET", "head", "OPTIONS"])
    def test_safe_methods_stay_exempt_when_configured(self, method):
        override = ConfigData(
            security=SecurityConfig(csrf_protected_methods=["GET", "HEAD", "OPTIONS", "POST"])
        )
        with with_context(override):
            assert not is_csrf_protected_method(method)
            assert is_csrf_protected_method("POST")


class TestSetCookie:
    """Test the cookie attributes."""

    def test_development_cookie(self):
        response = Response()
        with with_context(ConfigData(app=AppConfig(environment="development"))):
            set_csrf_cookie(response, "abc")
        header = response.headers["set-cookie"]
        assert header.startswith("csrf-token=abc.")
        assert "HttpOnly" in header
        assert "Max-Age=86400" in header
        assert "Path=/" in header
        assert "SameSite=lax" in header
        assert "Secure" not in header

    def test_production_cookie_is_secure(self):
        response = Response()
        with with_context(ConfigData(app=AppConfig(environment="production"))):
            set_csrf_cookie(response, "abc")
        assert "Secure" in response.headers["set-cookie"]
