"""Tests for the slowapi key function and the 429 handler."""

import json
import uuid
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from pydantic import SecretStr
from starlette.requests import Request

from grh.core.auth import create_jwt
from grh.core.rate_limiting import (
    DEFAULT_RETRY_AFTER_SECONDS,
    client_key,
    rate_limit_exceeded_handler,
    retry_after_seconds,
    setting_limit,
)
from tests.conftest import TEST_AUTH_SECRET


def _request(authorization: str | None = None) -> Request:
    headers = [(b"authorization", authorization.encode())] if authorization else []
    return Request(
        {
            "type": "http",
            "method": "POST",
            "path": "/api/v1/missions/1/report",
            "headers": headers,
            "client": ("203.0.113.7", 50000),
            "query_string": b"",
        }
    )


def _exceeded(detail: str, expiry: int | None):
    window = SimpleNamespace(get_expiry=lambda: expiry)
    return SimpleNamespace(detail=detail, limit=SimpleNamespace(limit=window))


@pytest.fixture
def hosted_mode():
    with (
        patch("grh.core.rate_limiting.settings.auth_enabled", True),
        patch("grh.core.auth.settings.auth_secret", SecretStr(TEST_AUTH_SECRET)),
    ):
        yield


# =============================================================================
# Keying
# =============================================================================


class TestClientKey:
    def test_local_mode_keys_on_address(self):
        """Without hosted auth every caller should be keyed by address."""
        with patch("grh.core.rate_limiting.settings.auth_enabled", False):
            assert client_key(_request("Bearer whatever")) == "ip:203.0.113.7"

    def test_valid_token_keys_on_account(self, hosted_mode):
        """Two employees behind one proxy should get separate buckets."""
        user_id = uuid.uuid4()
        token = create_jwt(user_id=str(user_id), secret=TEST_AUTH_SECRET)
        assert client_key(_request(f"Bearer {token}")) == f"user:{user_id}"

    def test_forged_token_falls_back_to_address(self, hosted_mode):
        token = create_jwt(user_id=str(uuid.uuid4()), secret="y" * 40)
        assert client_key(_request(f"Bearer {token}")) == "ip:203.0.113.7"

    def test_non_uuid_subject_falls_back_to_address(self, hosted_mode):
        token = create_jwt(user_id="x" * 200, secret=TEST_AUTH_SECRET)
        assert client_key(_request(f"Bearer {token}")) == "ip:203.0.113.7"

    def test_anonymous(self, hosted_mode):
        assert client_key(_request()) == "ip:203.0.113.7"


class TestSettingLimit:
    def test_reads_setting_per_call(self):
        """A changed setting should apply without rebuilding the limiter."""
        provider = setting_limit("rate_limit_upload")
        with patch("grh.core.rate_limiting.settings.rate_limit_upload", "2/minute"):
            assert provider() == "2/minute"


# =============================================================================
# 429 handler
# =============================================================================


class TestExceededHandler:
    def test_retry_after_is_the_window(self):
        """Retry-After should be the window length of the exceeded limit."""
        response = rate_limit_exceeded_handler(_request(), _exceeded("5 per 15 minute", 900))

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "900"
        body = json.loads(response.body)
        assert body["success"] is False
        assert body["error"]["code"] == "RATE_LIMITED"

    def test_unknown_window_defaults(self):
        exc = SimpleNamespace(detail="limit exceeded", limit=None)
        assert retry_after_seconds(exc) == DEFAULT_RETRY_AFTER_SECONDS
