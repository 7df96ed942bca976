"""
Tests for organization services.
"""

from unittest.mock import patch

import pytest
from django.db import IntegrityError

from apps.organizations.models import Organization
from apps.organizations.services import get_or_create_default_organization
from tests.organizations.factories import OrganizationFactory


@pytest.mark.django_db
class TestGetOrCreateDefaultOrganization:
    """Tests for resolving the fallback organization."""

    def test_creates_default_when_none_exist(self) -> None:
        org, created = get_or_create_default_organization()

        assert created is True
        assert org.is_default is True
        assert org.name == "Default Organization"
        assert Organization.objects.count() == 1

    def test_second_call_reuses_default(self) -> None:
        first, _ = get_or_create_default_organization()
        second, created = get_or_create_default_organization()

        assert created is False
        assert second.id == first.id
        assert Organization.objects.count() == 1

    def test_prefers_flagged_default(self) -> None:
        OrganizationFactory.create(name="Older")
        flagged = OrganizationFactory.create(name="Flagged", is_default=True)

        org, created = get_or_create_default_organization()

        assert created is False
        assert org.id == flagged.id

    def test_falls_back_to_oldest_organization(self) -> None:
        oldest = OrganizationFactory.create(name="Oldest")
        OrganizationFactory.create(name="Newer")

        org, created = get_or_create_default_organization()

        assert created is False
        assert org.id == oldest.id
        assert Organization.objects.count() == 2

    def test_lost_race_returns_winner(self) -> None:
        """An IntegrityError on insert means another request created the default."""
        winner = OrganizationFactory.create(name="Winner", is_default=True)

        with (
            patch.object(Organization.objects, "filter") as mock_filter,
            patch.object(Organization.objects, "order_by") as mock_order_by,
            patch.object(Organization.objects, "create", side_effect=IntegrityError),
        ):
            mock_filter.return_value.first.return_value = None
            mock_order_by.return_value.first.return_value = None
            org, created = get_or_create_default_organization()

        assert created is False
        assert org.id == winner.id


@pytest.mark.django_db
class TestSingleDefaultConstraint:
    """Only one organization may carry is_default."""

    def test_second_default_rejected(self) -> None:
        OrganizationFactory.create(is_default=True)

        with pytest.raises(IntegrityError):
            OrganizationFactory.create(is_default=True)

    def test_many_non_default_allowed(self) -> None:
        OrganizationFactory.create_batch(3)

        assert Organization.objects.filter(is_default=False).count() == 3
