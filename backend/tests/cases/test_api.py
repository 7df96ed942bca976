"""
Tests for the client portal API.

Endpoint functions are called directly with a signed-in request; a couple
of tests go through the full HTTP stack to check authentication.
"""

from uuid import uuid4

import pytest
from django.test import Client
from ninja.errors import HttpError

from apps.cases.api import (
    PERSON_NOT_FOUND,
    get_case,
    get_case_summary,
    get_me,
    list_case_documents,
    list_cases,
)
from apps.cases.models import Case
from tests.accounts.factories import UserFactory
from tests.cases.factories import (
    CaseFactory,
    CaseStageHistoryFactory,
    ClientNoteFactory,
    PersonFactory,
    PipelineFactory,
    PipelineStageFactory,
)
from tests.documents.factories import ClientDocumentFactory


@pytest.fixture
def client_user():
    return UserFactory.create(email="ada@example.com")


@pytest.fixture
def person(client_user):
    return PersonFactory.create(email="ada@example.com", first_name="Ada")


@pytest.mark.django_db
class TestGetMe:
    """Tests for GET /portal/me."""

    def test_returns_profile_and_counts(self, authenticated_request, client_user, person) -> None:
        CaseFactory.create(person=person, status=Case.Status.ACTIVE)
        CaseFactory.create(person=person, status=Case.Status.COMPLETED)

        result = get_me(authenticated_request(client_user, path="/api/v1/portal/me"))

        assert result.person.id == person.id
        assert result.person.first_name == "Ada"
        assert result.active_cases == 1
        assert result.completed_cases == 1
        assert result.total_cases == 2

    def test_no_person_is_404(self, authenticated_request, client_user) -> None:
        with pytest.raises(HttpError) as exc_info:
            get_me(authenticated_request(client_user))

        assert exc_info.value.status_code == 404
        assert str(exc_info.value) == PERSON_NOT_FOUND


@pytest.mark.django_db
class TestListCases:
    """Tests for GET /portal/cases."""

    def test_lists_own_cases(self, authenticated_request, client_user, person) -> None:
        pipeline = PipelineFactory.create(name="Nursing Licence")
        stages = [PipelineStageFactory.create(pipeline=pipeline, order_index=i) for i in range(4)]
        case = CaseFactory.create(person=person, pipeline=pipeline, current_stage=stages[1])
        CaseFactory.create()

        result = list_cases(authenticated_request(client_user))

        assert [c.id for c in result.cases] == [case.id]
        assert result.cases[0].pipeline.name == "Nursing Licence"
        assert result.cases[0].progress == 50
        assert len(result.cases[0].stages) == 4

    def test_person_without_cases(self, authenticated_request, client_user, person) -> None:
        result = list_cases(authenticated_request(client_user))

        assert result.cases == []


@pytest.mark.django_db
class TestGetCase:
    """Tests for GET /portal/cases/{case_id}."""

    def test_returns_detail(self, authenticated_request, client_user, person) -> None:
        case = CaseFactory.create(person=person)
        stage = PipelineStageFactory.create(pipeline=case.pipeline, order_index=0)
        CaseStageHistoryFactory.create(case=case, to_stage=stage)
        ClientNoteFactory.create(case=case, content="We received your transcript")

        result = get_case(authenticated_request(client_user), case.id)

        assert result.id == case.id
        assert len(result.stage_history) == 1
        assert [n.content for n in result.notes] == ["We received your transcript"]

    def test_other_persons_case_is_404(self, authenticated_request, client_user, person) -> None:
        other = CaseFactory.create()

        with pytest.raises(HttpError) as exc_info:
            get_case(authenticated_request(client_user), other.id)

        assert exc_info.value.status_code == 404

    def test_unknown_case_is_404(self, authenticated_request, client_user, person) -> None:
        with pytest.raises(HttpError) as exc_info:
            get_case(authenticated_request(client_user), uuid4())

        assert exc_info.value.status_code == 404


@pytest.mark.django_db
class TestGetCaseSummary:
    """Tests for GET /portal/cases/{case_id}/summary."""

    def test_fallback_without_gemini(self, authenticated_request, client_user, person) -> None:
        case = CaseFactory.create(person=person)
        case.current_stage = PipelineStageFactory.create(pipeline=case.pipeline, slug="in-review")
        case.save()

        result = get_case_summary(authenticated_request(client_user), case.id)

        assert result.source == "fallback"
        assert result.estimated_progress == 55


@pytest.mark.django_db
class TestListCaseDocuments:
    """Tests for GET /portal/cases/{case_id}/documents."""

    def test_visible_and_own_uploads(self, authenticated_request, client_user, person) -> None:
        case = CaseFactory.create(person=person)
        visible = ClientDocumentFactory.create(case=case)
        own_upload = ClientDocumentFactory.create(
            case=case, is_client_visible=False, uploaded_by=client_user
        )
        ClientDocumentFactory.create(case=case, is_client_visible=False)
        ClientDocumentFactory.create()

        result = list_case_documents(authenticated_request(client_user), case.id)

        assert {d.id for d in result.documents} == {visible.id, own_upload.id}


@pytest.mark.django_db
class TestPortalAuthentication:
    """Portal endpoints through the HTTP stack."""

    def test_missing_token_is_401(self, api_client: Client) -> None:
        response = api_client.get("/api/v1/portal/cases")

        assert response.status_code == 401

    def test_health_is_public(self, api_client: Client) -> None:
        response = api_client.get("/api/v1/health")

        assert response.status_code == 200
