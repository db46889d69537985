from datetime import timedelta

import pytest
from jose import jwt

from taskapi.utils.exceptions import InvalidTokenException
from taskapi.utils.security import ACCESS, REFRESH


class TestPasswordHashing:

    def test_hash_is_not_plaintext_and_verifies(self, credentials):
        hashed = credentials.hash_password("secret123")

        assert hashed != "secret123"
        assert credentials.verify_password("secret123", hashed)
        assert not credentials.verify_password("wrong", hashed)

    def test_same_password_hashes_differently(self, credentials):
        assert credentials.hash_password("secret123") != credentials.hash_password("secret123")


class TestTokens:

    def test_access_token_round_trip(self, credentials):
        token = credentials.issue_access_token("user-1", "a@b.com")

        payload = credentials.verify_token(token, ACCESS)

        assert payload["userId"] == "user-1"
        assert payload["email"] == "a@b.com"

    def test_expired_access_token_is_rejected(self, credentials):
        token = credentials.issue_access_token("user-1", "a@b.com", expires_delta=timedelta(seconds=-5))

        with pytest.raises(InvalidTokenException):
            credentials.verify_token(token, ACCESS)

    def test_refresh_token_expiry_matches_settings(self, credentials, settings):
        token, expires_at = credentials.issue_refresh_token("user-1", "a@b.com")

        claims = jwt.get_unverified_claims(token)
        assert claims["exp"] == int(expires_at.timestamp())
        assert claims["type"] == REFRESH

    def test_token_kinds_are_not_interchangeable(self, credentials):
        access = credentials.issue_access_token("user-1", "a@b.com")
        refresh, _ = credentials.issue_refresh_token("user-1", "a@b.com")

        with pytest.raises(InvalidTokenException):
            credentials.verify_token(access, REFRESH)
        with pytest.raises(InvalidTokenException):
            credentials.verify_token(refresh, ACCESS)

    def test_tampered_token_is_rejected(self, credentials):
        token = credentials.issue_access_token("user-1", "a@b.com")
        forged = jwt.encode(
            {**jwt.get_unverified_claims(token), "userId": "user-2"},
            "not-the-secret",
            algorithm="HS256",
        )

        with pytest.raises(InvalidTokenException):
            credentials.verify_token(forged, ACCESS)

    def test_garbage_is_rejected(self, credentials):
        with pytest.raises(InvalidTokenException):
            credentials.verify_token("not-a-jwt", ACCESS)

    def test_tokens_issued_together_are_unique(self, credentials):
        first, _ = credentials.issue_refresh_token("user-1", "a@b.com")
        second, _ = credentials.issue_refresh_token("user-1", "a@b.com")

        assert first != second
