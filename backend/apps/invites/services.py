"""
Invite and registration services.
"""

from typing import Any

import httpx
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.core.logging import get_logger
from apps.core.utils import normalize_email
from apps.invites.exceptions import InviteNotUsableError, VerificationUnavailableError
from apps.invites.models import InviteToken

logger = get_logger(__name__)

VERIFY_TIMEOUT_SECONDS = 10.0

# Fields copied verbatim from the command centre payload
INVITE_FIELDS = (
    "person_id",
    "case_id",
    "first_name",
    "last_name",
    "case_reference",
    "pipeline_name",
    "expires_at",
)


def upsert_invite_token(token: str, email: str, **fields: Any) -> tuple[InviteToken, bool]:
    """
    Store an invite, replacing the email's outstanding unused one.

    Returns:
        Tuple of (invite, created)
    """
    email = normalize_email(email)
    values = {}
    for name in INVITE_FIELDS:
        value = fields.get(name)
        if value is None and name not in ("person_id", "case_id", "expires_at"):
            value = ""
        values[name] = value

    with transaction.atomic():
        invite = (
            InviteToken.objects.select_for_update()
            .filter(email=email, used_at__isnull=True)
            .order_by("-created_at")
            .first()
        )
        if invite is not None:
            invite.token = token
            for name, value in values.items():
                setattr(invite, name, value)
            invite.save()
            logger.info("invite_token_updated", invite_id=invite.id)
            return invite, False

        invite = InviteToken.objects.create(token=token, email=email, **values)

    logger.info("invite_token_created", invite_id=invite.id)
    return invite, True


def get_invite(token: str) -> InviteToken | None:
    return InviteToken.objects.filter(token=token).first()


def consume_invite(invite: InviteToken) -> InviteToken:
    """
    Mark a valid invite as used.

    The update is conditional on used_at still being empty, so two
    concurrent consumers cannot both succeed.

    Raises:
        InviteNotUsableError: If the invite is expired or already used
    """
    now = timezone.now()
    state = invite.state_at(now)
    if state != InviteToken.State.VALID:
        raise InviteNotUsableError(state)

    updated = InviteToken.objects.filter(pk=invite.pk, used_at__isnull=True).update(
        used_at=now, updated_at=now
    )
    if not updated:
        raise InviteNotUsableError(InviteToken.State.USED)

    invite.used_at = now
    logger.info("invite_token_consumed", invite_id=invite.id)
    return invite


def verify_case_access(case_reference: str, email: str) -> tuple[int, Any]:
    """
    Ask the command centre whether a case reference belongs to an email.

    Returns the upstream status (200 for any 2xx) and its JSON body.

    Raises:
        VerificationUnavailableError: If the call is not configured, fails
            in transport, or the answer is not JSON
    """
    api_key = settings.COMMAND_CENTRE_API_KEY
    url = settings.COMMAND_CENTRE_VERIFY_URL
    if not api_key or not url:
        logger.error("command_centre_verification_not_configured")
        raise VerificationUnavailableError("Service temporarily unavailable")

    try:
        response = httpx.post(
            url,
            json={
                "case_reference": case_reference.strip().upper(),
                "email": normalize_email(email),
            },
            headers={"x-api-key": api_key},
            timeout=VERIFY_TIMEOUT_SECONDS,
        )
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("command_centre_verification_failed", error=str(e))
        raise VerificationUnavailableError("Verification service unavailable") from e

    status = 200 if response.is_success else response.status_code
    logger.info("command_centre_verification_completed", upstream_status=response.status_code)
    return status, data
