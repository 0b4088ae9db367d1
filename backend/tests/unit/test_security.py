"""Unit tests for token generation, hashing and producer JWTs."""

import hashlib
from datetime import timedelta

from jose import jwt

from portal.core.security import (
    access_tokens_match,
    create_access_token,
    decode_token,
    generate_secure_token,
    generate_share_token,
    hash_share_token,
    is_allowed_admin_email,
    is_valid_share_token_format,
    is_valid_token_format,
)


class TestAccessTokens:
    """Tests for per-shoot access tokens."""

    def test_format_is_32_lowercase_hex(self):
        token = generate_secure_token()
        assert len(token) == 32
        assert is_valid_token_format(token)
        assert token == token.lower()

    def test_tokens_are_unique(self):
        tokens = {generate_secure_token() for _ in range(1000)}
        assert len(tokens) == 1000

    def test_invalid_formats(self):
        assert not is_valid_token_format(None)
        assert not is_valid_token_format("")
        assert not is_valid_token_format("A" * 32)
        assert not is_valid_token_format("a" * 31)
        assert not is_valid_token_format("g" * 32)
        assert not is_valid_token_format(12345)

    def test_match_requires_exact_equality(self):
        token = generate_secure_token()
        assert access_tokens_match(token, token)
        assert not access_tokens_match(generate_secure_token(), token)

    def test_malformed_presented_token_never_matches(self):
        assert not access_tokens_match("x" * 32, "x" * 32)
        assert not access_tokens_match(None, generate_secure_token())

    def test_missing_stored_token_never_matches(self):
        assert not access_tokens_match(generate_secure_token(), None)


class TestShareTokens:
    """Tests for share link tokens."""

    def test_token_is_43_char_base64url(self):
        token = generate_share_token()
        assert len(token) == 43
        assert "=" not in token
        assert is_valid_share_token_format(token)

    def test_tokens_are_unique(self):
        assert len({generate_share_token() for _ in range(1000)}) == 1000

    def test_formats_do_not_overlap_with_access_tokens(self):
        assert not is_valid_share_token_format(generate_secure_token())
        assert not is_valid_token_format(generate_share_token())

    def test_invalid_share_formats(self):
        assert not is_valid_share_token_format(None)
        assert not is_valid_share_token_format("a" * 42)
        assert not is_valid_share_token_format("a" * 42 + "+")

    def test_hash_is_sha256_hex(self):
        token = generate_share_token()
        assert hash_share_token(token) == hashlib.sha256(token.encode()).hexdigest()
        assert len(hash_share_token(token)) == 64


class TestProducerTokens:
    """Tests for producer JWTs and the allow-list."""

    def test_round_trip_claims(self):
        token = create_access_token("Producer@Studio.Example.com")
        payload = decode_token(token)
        assert payload["sub"] == "producer@studio.example.com"
        assert payload["email"] == "producer@studio.example.com"
        assert payload["type"] == "access"

    def test_expired_token_is_rejected(self):
        token = create_access_token("producer@studio.example.com", expires_delta=timedelta(seconds=-1))
        assert decode_token(token) is None

    def test_token_signed_with_other_key_is_rejected(self):
        forged = jwt.encode(
            {"sub": "producer@studio.example.com", "email": "producer@studio.example.com", "type": "access"},
            "some-other-secret",
            algorithm="HS256",
        )
        assert decode_token(forged) is None

    def test_allow_list_is_case_insensitive(self):
        assert is_allowed_admin_email("PRODUCER@studio.example.com")
        assert is_allowed_admin_email("assistant@studio.example.com")

    def test_unknown_email_denied(self):
        assert not is_allowed_admin_email("intruder@example.com")
        assert not is_allowed_admin_email(None)

    def test_empty_allow_list_denies_everyone(self, monkeypatch, portal_settings):
        monkeypatch.setattr(portal_settings, "ADMIN_EMAIL_ALLOWLIST", "")
        assert not is_allowed_admin_email("producer@studio.example.com")
