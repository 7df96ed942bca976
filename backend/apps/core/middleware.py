"""
Core middleware.

RequestContextMiddleware binds per-request logging context.
StytchAuthMiddleware validates portal session JWTs and attaches an AuthContext.
"""

import time
import uuid
from collections.abc import Callable

from django.http import HttpRequest, HttpResponse
from stytch.core.response_base import StytchError

from apps.core.auth import AuthContext
from apps.core.logging import bind_contextvars, clear_contextvars, get_logger
from apps.core.utils import get_client_ip

logger = get_logger(__name__)

# Paths that never carry a portal session. Command centre endpoints present a
# shared secret in the Authorization header, which must not be treated as a JWT.
PUBLIC_PATH_PREFIXES = (
    "/admin/",
    "/api/v1/health",
    "/api/v1/docs",
    "/api/v1/openapi.json",
    "/api/v1/sync/",
    "/api/v1/documents",
    "/api/v1/invites",
    "/api/v1/registration/",
)


class RequestContextMiddleware:
    """
    Bind a trace_id and HTTP fields to the structlog context for each request.

    The trace_id comes from X-Request-ID when present and is echoed back.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        trace_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        clear_contextvars()
        bind_contextvars(
            trace_id=trace_id,
            **{
                "http.method": request.method,
                "http.url_details.path": request.path,
                "network.client.ip": get_client_ip(request),
            },
        )

        start = time.monotonic()
        try:
            response = self.get_response(request)
            logger.info(
                "request_completed",
                duration_ms=(time.monotonic() - start) * 1000,
                **{"http.status_code": response.status_code},
            )
            response["X-Request-ID"] = trace_id
            return response
        finally:
            clear_contextvars()


class StytchAuthMiddleware:
    """
    Authenticate portal requests from a Stytch session JWT.

    Sets request.auth to an AuthContext. Unknown Stytch users are synced
    just-in-time into the local User table. Any failure leaves the context
    unauthenticated; endpoints decide whether that is a 401.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        request.auth = AuthContext()  # type: ignore[attr-defined]

        if not request.path.startswith(PUBLIC_PATH_PREFIXES):
            auth_header = request.headers.get("Authorization", "")
            if auth_header.startswith("Bearer "):
                token = auth_header[len("Bearer ") :].strip()
                if token:
                    self._authenticate_jwt(request, token)

        return self.get_response(request)

    def _authenticate_jwt(self, request: HttpRequest, token: str) -> None:
        from apps.accounts import stytch_client
        from apps.accounts.models import User

        client = stytch_client.get_stytch_client()
        try:
            response = client.sessions.authenticate_jwt(session_jwt=token)
        except StytchError as e:
            logger.info(
                "session_jwt_rejected",
                error=e.details.error_message if e.details else str(e),
            )
            request.auth = AuthContext(failed=True)  # type: ignore[attr-defined]
            return

        stytch_user_id = response.session.user_id
        user = User.objects.filter(stytch_user_id=stytch_user_id, is_active=True).first()
        if user is None:
            user = self._sync_user(client, stytch_user_id)
            if user is None or not user.is_active:
                request.auth = AuthContext(failed=True)  # type: ignore[attr-defined]
                return

        request.auth = AuthContext(user=user)  # type: ignore[attr-defined]
        bind_contextvars(**{"usr.id": str(user.id), "usr.email": user.email})

    def _sync_user(self, client, stytch_user_id: str):
        """Fetch a Stytch user and mirror it locally. Returns None on failure."""
        from apps.accounts.services import sync_user_from_stytch

        try:
            stytch_user = client.users.get(user_id=stytch_user_id)
        except StytchError as e:
            logger.warning(
                "stytch_user_fetch_failed",
                stytch_user_id=stytch_user_id,
                error=e.details.error_message if e.details else str(e),
            )
            return None

        user = sync_user_from_stytch(stytch_user)
        if user is None:
            logger.warning("stytch_user_without_email", stytch_user_id=stytch_user_id)
        return user
