"""
Core security - authentication classes for API.

Two callers reach this API:
- portal clients, with a Stytch session JWT (BearerAuth)
- the command centre, with a shared secret (ApiKeyAuth)
"""

import hmac
from typing import TYPE_CHECKING

from django.conf import settings
from django.http import HttpRequest
from ninja.errors import HttpError
from ninja.security import APIKeyHeader, HttpBearer

from apps.core.auth import AuthContext
from apps.core.logging import get_logger

if TYPE_CHECKING:
    from apps.accounts.models import User

logger = get_logger(__name__)

# Value attached to request.auth for shared-secret callers
COMMAND_CENTRE_PRINCIPAL = "command-centre"


class BearerAuth(HttpBearer):
    """
    Bearer token authentication for portal endpoints.

    JWT validation is performed by StytchAuthMiddleware, which stores an
    AuthContext on the request. This class turns that context into the
    ninja auth result and documents the scheme in OpenAPI.
    """

    def authenticate(self, request: HttpRequest, token: str) -> AuthContext | None:
        """
        Return the request's AuthContext if the middleware signed a user in.

        Returns None otherwise (triggers 401).
        """
        auth = getattr(request, "auth", None)
        if isinstance(auth, AuthContext) and auth.user is not None:
            return auth
        return None


class ApiKeyAuth(APIKeyHeader):
    """
    Shared-secret authentication for command centre endpoints.

    Accepts the key in ``X-API-Key`` or as ``Authorization: Bearer <key>``
    and compares it against settings.SYNC_API_KEY in constant time. An
    unconfigured secret rejects every call.
    """

    param_name = "X-API-Key"

    def _get_key(self, request: HttpRequest) -> str | None:
        key = super()._get_key(request)
        if key:
            return key
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            return auth_header[len("Bearer ") :].strip() or None
        return None

    def authenticate(self, request: HttpRequest, key: str | None) -> str | None:
        expected = getattr(settings, "SYNC_API_KEY", "")
        if not expected:
            logger.error("sync_api_key_not_configured", path=request.path)
            return None

        if not key or not hmac.compare_digest(key.encode("utf-8"), expected.encode("utf-8")):
            logger.warning("api_key_rejected", path=request.path, key_present=bool(key))
            return None

        return COMMAND_CENTRE_PRINCIPAL


def get_auth_context(request: HttpRequest) -> "User":
    """
    Get the signed-in portal user or raise 401.

    Use in portal endpoints after BearerAuth has run.

    Raises:
        HttpError 401: If the request is not authenticated
    """
    auth = getattr(request, "auth", None)
    if not isinstance(auth, AuthContext):
        raise HttpError(401, "Not authenticated")
    return auth.require_auth()
