"""
Shared pytest fixtures.

Factories live beside the tests of the app that owns the model:

    from tests.accounts.factories import UserFactory
    from tests.cases.factories import CaseFactory, PersonFactory
    from tests.documents.factories import ClientDocumentFactory
"""

from collections.abc import Callable
from typing import Any, cast

import pytest
from django.core.cache import cache
from django.http import HttpRequest
from django.test import Client, RequestFactory

from apps.core.auth import AuthContext
from apps.core.types import AuthenticatedHttpRequest

# Matches SYNC_API_KEY in config.settings.test
TEST_API_KEY = "test-sync-key"


class MockRequest(HttpRequest):
    """Bare request whose auth attribute tests may assign."""

    auth: AuthContext


@pytest.fixture(autouse=True)
def _clear_cache():
    """Rate limit counters live in the cache; start every test from zero."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def request_factory() -> RequestFactory:
    return RequestFactory()


@pytest.fixture
def api_client() -> Client:
    """Test client for requests that go through middleware and routing."""
    return Client()


@pytest.fixture
def api_key_headers() -> dict[str, str]:
    """Headers carrying the command centre's shared secret."""
    return {"HTTP_X_API_KEY": TEST_API_KEY}


@pytest.fixture
def authenticated_request(
    request_factory: RequestFactory,
) -> Callable[..., AuthenticatedHttpRequest]:
    """
    Build requests signed in as a portal account, for calling endpoint
    functions directly:

        request = authenticated_request(user, path="/api/v1/portal/cases")
        cases = list_cases(request)

    A fresh account is created when no user is passed.
    """
    from tests.accounts.factories import UserFactory

    def _build(
        user: Any = None,
        method: str = "get",
        path: str = "/",
        data: dict | None = None,
    ) -> AuthenticatedHttpRequest:
        account = user if user is not None else UserFactory.create()
        kwargs: dict[str, Any] = {}
        if data is not None:
            kwargs = {"data": data, "content_type": "application/json"}

        request = getattr(request_factory, method.lower())(path, **kwargs)
        request.auth = AuthContext(user=account)
        return cast(AuthenticatedHttpRequest, request)

    return _build
