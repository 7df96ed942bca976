"""
Organization services.
"""

from django.db import IntegrityError, transaction

from apps.core.logging import get_logger
from apps.organizations.models import Organization

logger = get_logger(__name__)


def get_or_create_default_organization() -> tuple[Organization, bool]:
    """
    Resolve the organization used when a sync carries no org_id.

    Prefers the organization flagged is_default, then the oldest existing
    organization. When none exist, inserts "Default Organization" inside a
    savepoint; the partial unique constraint makes a concurrent first call
    fail with IntegrityError, in which case the winner is re-read.

    Returns:
        Tuple of (organization, created)
    """
    org = Organization.objects.filter(is_default=True).first()
    if org is not None:
        return org, False

    org = Organization.objects.order_by("created_at", "id").first()
    if org is not None:
        return org, False

    try:
        with transaction.atomic():
            org = Organization.objects.create(
                name=Organization.DEFAULT_NAME,
                slug=Organization.DEFAULT_SLUG,
                is_default=True,
            )
    except IntegrityError:
        # Concurrent insert won the race, fetch the winner
        logger.info("default_organization_race_lost")
        return Organization.objects.get(is_default=True), False

    logger.info("default_organization_created", org_id=str(org.id))
    return org, True
