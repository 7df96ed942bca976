"""
Sync API endpoints.

Server-to-server endpoint the command centre uses to push case data.
"""

from django.http import HttpRequest
from ninja import Router

from apps.core.logging import get_logger
from apps.core.security import ApiKeyAuth
from apps.sync.exceptions import SyncAuthenticationError, SyncError
from apps.sync.models import SyncRun
from apps.sync.schemas import (
    CreatedFlags,
    SyncCasePayload,
    SyncCaseResponse,
    SyncErrorResponse,
    SyncedPipelineOut,
)
from apps.sync.services import record_sync_run, sync_case

logger = get_logger(__name__)

router = Router(tags=["sync"])


class SyncApiKeyAuth(ApiKeyAuth):
    """Shared-secret auth that answers in the sync error format."""

    def authenticate(self, request: HttpRequest, key: str | None) -> str | None:
        principal = super().authenticate(request, key)
        if principal is None:
            raise SyncAuthenticationError("Unauthorized - Invalid API key", step="auth")
        return principal


sync_api_key_auth = SyncApiKeyAuth()


@router.post(
    "/case",
    response={
        200: SyncCaseResponse,
        400: SyncErrorResponse,
        401: SyncErrorResponse,
        500: SyncErrorResponse,
    },
    auth=sync_api_key_auth,
    operation_id="syncCase",
    summary="Sync a case from the command centre",
    description="Upsert a person, case, pipeline and stages in one transaction.",
)
def sync_case_endpoint(request: HttpRequest, payload: SyncCasePayload):
    """
    Reconcile one case payload.

    Every call is audited as a SyncRun, including rejected and failed ones.
    """
    try:
        outcome = sync_case(payload)
    except SyncError as e:
        logger.warning("sync_case_rejected", step=e.step, error=e.message)
        record_sync_run(payload, SyncRun.Status.REJECTED, error=e)
        return e.status_code, SyncErrorResponse(error=e.message, step=e.step, details=e.details)
    except Exception as e:
        logger.exception("sync_case_failed", error=str(e))
        record_sync_run(payload, SyncRun.Status.FAILED, error=e)
        return 500, SyncErrorResponse(error="Internal server error", details=str(e))

    record_sync_run(payload, SyncRun.Status.APPLIED, outcome=outcome)

    pipeline = outcome.pipeline
    return SyncCaseResponse(
        person_id=outcome.person.id,
        case_id=outcome.case.id,
        org_id=outcome.organization.id,
        pipeline=SyncedPipelineOut(
            id=pipeline.id,
            name=pipeline.name,
            slug=pipeline.slug,
            org_id=pipeline.organization_id,
        ),
        created=CreatedFlags(**outcome.created),
        stages_synced=outcome.stages_synced,
        account_linked=outcome.account_linked,
    )
