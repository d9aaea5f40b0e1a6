"""Tests for JWT, password and header helpers in grh.core.auth."""

import uuid
from datetime import timedelta
from unittest.mock import patch

import jwt
import pytest
from pydantic import SecretStr

from grh.core.auth import (
    bearer_token,
    check_password,
    create_jwt,
    decode_jwt,
    hash_password,
    validate_password_strength,
)
from grh.core.errors import ValidationError
from tests.conftest import TEST_AUTH_SECRET


@pytest.fixture
def auth_secret():
    with patch("grh.core.auth.settings.auth_secret", SecretStr(TEST_AUTH_SECRET)):
        yield TEST_AUTH_SECRET


class TestJwt:
    def test_round_trip(self, auth_secret):
        """A token created with the secret should decode to its subject."""
        user_id = str(uuid.uuid4())
        token = create_jwt(user_id=user_id, secret=auth_secret)
        claims = decode_jwt(token)
        assert claims["sub"] == user_id
        assert claims["aud"] == "grh-backend"

    def test_expired_token_rejected(self, auth_secret):
        """An expired token should fail verification."""
        token = create_jwt(
            user_id=str(uuid.uuid4()),
            secret=auth_secret,
            expires_delta=timedelta(seconds=-5),
        )
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_jwt(token)

    def test_wrong_secret_rejected(self, auth_secret):
        """A token signed with another secret should fail verification."""
        token = create_jwt(user_id=str(uuid.uuid4()), secret="x" * 40)
        with pytest.raises(jwt.InvalidSignatureError):
            decode_jwt(token)


class TestBearerToken:
    @pytest.mark.parametrize(
        "header,expected",
        [
            ("Bearer abc.def", "abc.def"),
            ("bearer  abc ", "abc"),
            ("Basic abc", None),
            ("Bearer ", None),
            (None, None),
        ],
    )
    def test_extract(self, header, expected):
        """Only well-formed Bearer headers should yield a token."""
        assert bearer_token(header) == expected


class TestPasswords:
    def test_hash_and_check(self):
        """A hashed password should verify and a wrong one should not."""
        hashed = hash_password("s3cret!pass")
        assert check_password("s3cret!pass", hashed) is True
        assert check_password("other!pass1", hashed) is False

    def test_missing_hash(self):
        """Accounts without a hash should never verify."""
        assert check_password("s3cret!pass", None) is False

    @pytest.mark.parametrize(
        "password,message",
        [
            ("a1!", "at least 8 characters"),
            ("a1!" * 50, "at most 128 characters"),
            ("12345678!", "at least one letter"),
            ("abcdefgh!", "at least one number"),
            ("abcdefgh1", "at least one special character"),
        ],
    )
    def test_strength_rules(self, password, message):
        """Weak passwords should be rejected with a specific message."""
        with pytest.raises(ValidationError, match=message):
            validate_password_strength(password)

    def test_strong_password(self):
        """A password meeting every rule should pass."""
        validate_password_strength("Correct-horse-9")
