"""
Tests for core security module.

Tests BearerAuth, ApiKeyAuth and get_auth_context.
"""

from unittest.mock import MagicMock

import pytest
from django.test import RequestFactory, override_settings
from ninja.errors import HttpError

from apps.accounts.models import User
from apps.core.auth import AuthContext
from apps.core.security import (
    COMMAND_CENTRE_PRINCIPAL,
    ApiKeyAuth,
    BearerAuth,
    get_auth_context,
)
from tests.conftest import MockRequest


class TestBearerAuth:
    """Tests for BearerAuth authentication class."""

    def test_returns_context_when_user_signed_in(self) -> None:
        request = MockRequest()
        context = AuthContext(user=MagicMock(spec=User))
        request.auth = context

        assert BearerAuth().authenticate(request, "jwt") is context

    def test_returns_none_without_context(self) -> None:
        assert BearerAuth().authenticate(MockRequest(), "jwt") is None

    def test_returns_none_when_auth_failed(self) -> None:
        request = MockRequest()
        request.auth = AuthContext(failed=True)

        assert BearerAuth().authenticate(request, "jwt") is None


class TestApiKeyAuth:
    """Tests for the command centre shared-secret check."""

    def test_accepts_matching_x_api_key(self, request_factory: RequestFactory) -> None:
        auth = ApiKeyAuth()
        request = request_factory.post("/api/v1/sync/case", HTTP_X_API_KEY="test-sync-key")

        assert auth(request) == COMMAND_CENTRE_PRINCIPAL

    def test_accepts_bearer_fallback(self, request_factory: RequestFactory) -> None:
        auth = ApiKeyAuth()
        request = request_factory.post(
            "/api/v1/sync/case", HTTP_AUTHORIZATION="Bearer test-sync-key"
        )

        assert auth(request) == COMMAND_CENTRE_PRINCIPAL

    def test_rejects_wrong_key(self, request_factory: RequestFactory) -> None:
        auth = ApiKeyAuth()
        request = request_factory.post("/api/v1/sync/case", HTTP_X_API_KEY="guess")

        assert auth(request) is None

    def test_rejects_missing_key(self, request_factory: RequestFactory) -> None:
        auth = ApiKeyAuth()
        request = request_factory.post("/api/v1/sync/case")

        assert auth(request) is None

    @override_settings(SYNC_API_KEY="")
    def test_unconfigured_secret_rejects_everything(self, request_factory: RequestFactory) -> None:
        auth = ApiKeyAuth()
        request = request_factory.post("/api/v1/sync/case", HTTP_X_API_KEY="")

        assert auth.authenticate(request, "") is None
        assert auth.authenticate(request, "anything") is None


class TestGetAuthContext:
    """Tests for get_auth_context."""

    def test_returns_user(self) -> None:
        user = MagicMock(spec=User)
        request = MockRequest()
        request.auth = AuthContext(user=user)

        assert get_auth_context(request) is user

    def test_raises_401_when_not_signed_in(self) -> None:
        request = MockRequest()
        request.auth = AuthContext()

        with pytest.raises(HttpError) as exc_info:
            get_auth_context(request)

        assert exc_info.value.status_code == 401

    def test_raises_401_without_context(self) -> None:
        with pytest.raises(HttpError) as exc_info:
            get_auth_context(MockRequest())

        assert exc_info.value.status_code == 401
