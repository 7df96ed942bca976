"""
Client portal API endpoints.

Read-only views of the signed-in person's cases. All endpoints require a
Stytch session JWT.
"""

from uuid import UUID

from ninja import Router
from ninja.errors import HttpError

from apps.cases.models import Case, Person
from apps.cases.schemas import (
    CaseDetailOut,
    CaseListResponse,
    CaseSummaryOut,
    MeResponse,
    PersonOut,
)
from apps.cases.services import (
    get_case_counts,
    get_case_detail,
    get_case_for_person,
    list_cases_for_person,
    resolve_person,
)
from apps.cases.summary import generate_case_summary
from apps.core.logging import get_logger
from apps.core.schemas import ErrorResponse
from apps.core.security import BearerAuth, get_auth_context
from apps.core.types import AuthenticatedHttpRequest
from apps.documents.schemas import DocumentListResponse
from apps.documents.services import list_portal_documents

logger = get_logger(__name__)

router = Router(tags=["portal"])
bearer_auth = BearerAuth()

PERSON_NOT_FOUND = "No account found for this email. Please contact support."


def _get_person(request: AuthenticatedHttpRequest) -> Person:
    user = get_auth_context(request)
    person = resolve_person(user)
    if person is None:
        logger.info("portal_person_not_found", user_id=user.id)
        raise HttpError(404, PERSON_NOT_FOUND)
    return person


def _get_case(request: AuthenticatedHttpRequest, case_id: UUID) -> Case:
    case = get_case_for_person(_get_person(request), case_id)
    if case is None:
        raise HttpError(404, "Case not found")
    return case


@router.get(
    "/me",
    response={200: MeResponse, 401: ErrorResponse, 404: ErrorResponse},
    auth=bearer_auth,
    operation_id="getPortalProfile",
    summary="Get the signed-in person's profile",
)
def get_me(request: AuthenticatedHttpRequest) -> MeResponse:
    """Profile of the person behind the session, with case counts."""
    person = _get_person(request)
    return MeResponse(person=PersonOut.from_orm(person), **get_case_counts(person))


@router.get(
    "/cases",
    response={200: CaseListResponse, 401: ErrorResponse, 404: ErrorResponse},
    auth=bearer_auth,
    operation_id="listPortalCases",
    summary="List the signed-in person's cases",
)
def list_cases(request: AuthenticatedHttpRequest) -> CaseListResponse:
    """
    Cases newest first.

    Each case carries its pipeline, current stage, the pipeline's ordered
    stages and a progress percentage.
    """
    person = _get_person(request)
    return CaseListResponse(cases=list_cases_for_person(person))


@router.get(
    "/cases/{case_id}",
    response={200: CaseDetailOut, 401: ErrorResponse, 404: ErrorResponse},
    auth=bearer_auth,
    operation_id="getPortalCase",
    summary="Get one case with history and notes",
)
def get_case(request: AuthenticatedHttpRequest, case_id: UUID) -> CaseDetailOut:
    return get_case_detail(_get_case(request, case_id))


@router.get(
    "/cases/{case_id}/summary",
    response={200: CaseSummaryOut, 401: ErrorResponse, 404: ErrorResponse},
    auth=bearer_auth,
    operation_id="getPortalCaseSummary",
    summary="Get a plain-language summary of a case",
)
def get_case_summary(request: AuthenticatedHttpRequest, case_id: UUID) -> CaseSummaryOut:
    """AI-written when Gemini is configured, rule-based otherwise."""
    summary = generate_case_summary(_get_case(request, case_id))
    return CaseSummaryOut(
        summary=summary.summary,
        next_steps=summary.next_steps,
        estimated_progress=summary.estimated_progress,
        alerts=summary.alerts,
        source=summary.source,
    )


@router.get(
    "/cases/{case_id}/documents",
    response={200: DocumentListResponse, 401: ErrorResponse, 404: ErrorResponse},
    auth=bearer_auth,
    operation_id="listPortalCaseDocuments",
    summary="List documents on a case",
)
def list_case_documents(
    request: AuthenticatedHttpRequest, case_id: UUID
) -> DocumentListResponse:
    """Documents that are client-visible or were uploaded by the caller."""
    case = _get_case(request, case_id)
    user = get_auth_context(request)
    return DocumentListResponse(documents=list_portal_documents(case, user))
