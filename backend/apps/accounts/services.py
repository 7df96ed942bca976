"""
Account services.

Mirrors Stytch users into the local User table and finds accounts by email
for person linking.
"""

from typing import Any

from django.db import IntegrityError, transaction
from stytch.consumer.models.users import SearchUsersQuery, SearchUsersQueryOperator
from stytch.core.response_base import StytchError

from apps.accounts.models import User
from apps.accounts.stytch_client import get_stytch_client, is_stytch_configured
from apps.core.logging import get_logger
from apps.core.utils import normalize_email

logger = get_logger(__name__)


def _primary_email(stytch_user: Any) -> str | None:
    emails = getattr(stytch_user, "emails", None) or []
    for entry in emails:
        if getattr(entry, "verified", False) and entry.email:
            return normalize_email(entry.email)
    for entry in emails:
        if entry.email:
            return normalize_email(entry.email)
    return None


def _display_name(stytch_user: Any) -> str:
    name = getattr(stytch_user, "name", None)
    if name is None:
        return ""
    parts = [getattr(name, "first_name", ""), getattr(name, "last_name", "")]
    return " ".join(p for p in parts if p)


def sync_user_from_stytch(stytch_user: Any) -> User | None:
    """
    Create or update the local replica of a Stytch user.

    Matches by stytch_user_id first, then adopts an existing row with the
    same email (accounts created before the user first signed in).
    Returns None when the Stytch user has no email address.
    """
    email = _primary_email(stytch_user)
    if email is None:
        return None

    stytch_user_id = stytch_user.user_id
    name = _display_name(stytch_user)

    with transaction.atomic():
        user = (
            User.objects.select_for_update().filter(stytch_user_id=stytch_user_id).first()
            or User.objects.select_for_update().filter(email__iexact=email).first()
        )
        if user is not None:
            user.stytch_user_id = stytch_user_id
            user.email = email
            if name:
                user.name = name
            user.save(update_fields=["stytch_user_id", "email", "name", "updated_at"])
            return user

        try:
            with transaction.atomic():
                user = User.objects.create_user(
                    email=email,
                    name=name,
                    stytch_user_id=stytch_user_id,
                )
        except IntegrityError:
            # Concurrent insert won the race, fetch the winner
            return User.objects.get(stytch_user_id=stytch_user_id)

    logger.info("account_replicated", stytch_user_id=stytch_user_id)
    return user


def _search_stytch_by_email(email: str) -> Any | None:
    client = get_stytch_client()
    query = SearchUsersQuery(
        operator=SearchUsersQueryOperator.AND,
        operands=[{"filter_name": "email_address", "filter_value": [email]}],
    )
    try:
        response = client.users.search(limit=1, query=query)
    except StytchError as e:
        logger.warning(
            "stytch_user_search_failed",
            error=e.details.error_message if e.details else str(e),
        )
        return None
    return response.results[0] if response.results else None


def find_account_by_email(email: str) -> User | None:
    """
    Find the portal account registered under an email address.

    Checks the local replica first (indexed, case-insensitive). When Stytch
    is configured, falls back to an email-filtered user search and mirrors
    the hit locally. Returns None when no account exists.
    """
    email = normalize_email(email)
    if not email:
        return None

    user = User.objects.filter(email__iexact=email, is_active=True).first()
    if user is not None:
        return user

    if not is_stytch_configured():
        return None

    stytch_user = _search_stytch_by_email(email)
    if stytch_user is None:
        return None
    return sync_user_from_stytch(stytch_user)
