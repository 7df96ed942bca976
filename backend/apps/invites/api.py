"""
Invite and registration API endpoints.

Invites are issued by the command centre (API key). Validating and
consuming a token, and checking a case reference before sign-up, are
public and rate limited per client IP.
"""

from django.http import HttpRequest, JsonResponse
from ninja import Router
from ninja.errors import HttpError

from apps.core.logging import get_logger
from apps.core.schemas import ErrorResponse, MessageResponse
from apps.core.security import ApiKeyAuth
from apps.core.throttling import RateLimit, enforce_client_limit
from apps.invites.exceptions import InviteNotUsableError, VerificationUnavailableError
from apps.invites.models import InviteToken
from apps.invites.schemas import (
    InviteCreateIn,
    InviteOut,
    RegistrationErrorResponse,
    RegistrationVerifyIn,
)
from apps.invites.services import (
    consume_invite,
    get_invite,
    upsert_invite_token,
    verify_case_access,
)

logger = get_logger(__name__)

router = Router(tags=["invites"])
registration_router = Router(tags=["registration"])
api_key_auth = ApiKeyAuth()

# Public endpoints, per client IP
INVITE_LOOKUP_LIMIT = RateLimit("invite_lookup", max_requests=20, window_seconds=600)
INVITE_CONSUME_LIMIT = RateLimit("invite_consume", max_requests=20, window_seconds=600)
REGISTRATION_VERIFY_LIMIT = RateLimit("registration_verify", max_requests=20, window_seconds=600)


def _invite_out(invite: InviteToken) -> InviteOut:
    return InviteOut(
        status=invite.state_at(),
        email=invite.email,
        first_name=invite.first_name,
        last_name=invite.last_name,
        case_reference=invite.case_reference,
        pipeline_name=invite.pipeline_name,
    )


@router.post(
    "",
    response={200: MessageResponse, 401: ErrorResponse},
    auth=api_key_auth,
    operation_id="createInviteToken",
    summary="Create or refresh an invite token",
)
def create_invite(request: HttpRequest, payload: InviteCreateIn) -> MessageResponse:
    """
    Store an invite for an email.

    An outstanding unused invite for the same email is overwritten.
    """
    fields = payload.model_dump(exclude={"token", "email"})
    _, created = upsert_invite_token(payload.token, payload.email, **fields)
    verb = "created" if created else "updated"
    return MessageResponse(message=f"Invite token {verb} for {payload.email.strip().lower()}")


@router.get(
    "/{token}",
    response={200: InviteOut, 404: ErrorResponse, 429: ErrorResponse},
    auth=None,
    operation_id="getInviteToken",
    summary="Check an invite token",
)
def get_invite_token(request: HttpRequest, token: str) -> InviteOut:
    enforce_client_limit(request, INVITE_LOOKUP_LIMIT)
    invite = get_invite(token)
    if invite is None:
        raise HttpError(404, "Invalid invite token.")
    return _invite_out(invite)


@router.post(
    "/{token}/consume",
    response={200: InviteOut, 400: ErrorResponse, 404: ErrorResponse, 429: ErrorResponse},
    auth=None,
    operation_id="consumeInviteToken",
    summary="Mark an invite token as used",
)
def consume_invite_token(request: HttpRequest, token: str) -> InviteOut:
    """Called once the invited client has created their account."""
    enforce_client_limit(request, INVITE_CONSUME_LIMIT)
    invite = get_invite(token)
    if invite is None:
        raise HttpError(404, "Invalid invite token.")
    try:
        invite = consume_invite(invite)
    except InviteNotUsableError as e:
        if e.state == InviteToken.State.USED:
            raise HttpError(400, "This invite has already been used.") from e
        raise HttpError(400, "This invite link has expired.") from e
    return _invite_out(invite)


@registration_router.post(
    "/verify",
    response={400: RegistrationErrorResponse, 429: ErrorResponse, 500: RegistrationErrorResponse},
    auth=None,
    operation_id="verifyRegistration",
    summary="Verify a case reference before sign-up",
)
def verify_registration(request: HttpRequest, payload: RegistrationVerifyIn):
    """
    Relay a case reference check to the command centre.

    The command centre's JSON answer and status are passed through.
    """
    enforce_client_limit(request, REGISTRATION_VERIFY_LIMIT)

    if not payload.case_reference or not payload.email:
        return 400, RegistrationErrorResponse(error="Missing case reference or email")

    try:
        status, data = verify_case_access(payload.case_reference, payload.email)
    except VerificationUnavailableError as e:
        return 500, RegistrationErrorResponse(error=str(e))

    return JsonResponse(data, status=status, safe=False)
