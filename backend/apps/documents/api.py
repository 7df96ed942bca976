"""
Documents API endpoints for the command centre.

One path, routed by the ``action`` query parameter:
- GET  ?action=list           documents by case, case reference, person or email
- GET  ?action=download       signed download URL for one document
- POST ?action=update_status  record a review outcome
- POST ?action=delete         remove blob and row
"""

from django.conf import settings
from django.http import HttpRequest
from ninja import Query, Router

from apps.core.logging import get_logger
from apps.core.schemas import MessageResponse
from apps.core.security import ApiKeyAuth
from apps.documents.schemas import (
    DocumentActionIn,
    DocumentActionQuery,
    DocumentDownloadResponse,
    DocumentErrorResponse,
    DocumentListResponse,
    DocumentOut,
    DocumentQueryParams,
    DocumentUpdateResponse,
)
from apps.documents.services import (
    delete_document,
    get_document,
    get_download_url,
    list_documents,
    update_document_status,
)

logger = get_logger(__name__)

router = Router(tags=["documents"])
api_key_auth = ApiKeyAuth()

VALID_ACTIONS = ["list", "download", "update_status", "delete"]

DOCUMENT_RESPONSES = {
    200: dict,
    400: DocumentErrorResponse,
    404: DocumentErrorResponse,
}


def _invalid_action() -> tuple[int, DocumentErrorResponse]:
    return 400, DocumentErrorResponse(error="Invalid action", valid_actions=VALID_ACTIONS)


def _not_found() -> tuple[int, DocumentErrorResponse]:
    return 404, DocumentErrorResponse(error="Document not found")


@router.get(
    "",
    response=DOCUMENT_RESPONSES,
    auth=api_key_auth,
    operation_id="readDocuments",
    summary="List documents or get a download URL",
)
def read_documents(request: HttpRequest, params: Query[DocumentQueryParams]):
    if params.action == "list":
        try:
            documents = list_documents(
                case_id=params.case_id,
                case_reference=params.case_reference,
                person_id=params.person_id,
                email=params.email,
            )
        except ValueError as e:
            return 400, DocumentErrorResponse(error=str(e))

        results = [DocumentOut.from_orm(d) for d in documents]
        logger.info("documents_listed", count=len(results))
        return DocumentListResponse(documents=results).model_dump()

    if params.action == "download":
        if params.document_id is None:
            return 400, DocumentErrorResponse(error="document_id is required")
        document = get_document(params.document_id)
        if document is None:
            return _not_found()

        expires_in = settings.DOCUMENT_URL_EXPIRY_SECONDS
        url = get_download_url(document, expires_in)
        logger.info("document_download_url_issued", document_id=str(document.id))
        return DocumentDownloadResponse(
            document=DocumentOut.from_orm(document),
            download_url=url,
            expires_in=expires_in,
        ).model_dump()

    return _invalid_action()


@router.post(
    "",
    response=DOCUMENT_RESPONSES,
    auth=api_key_auth,
    operation_id="modifyDocument",
    summary="Update a document's review status or delete it",
)
def modify_document(
    request: HttpRequest,
    params: Query[DocumentActionQuery],
    payload: DocumentActionIn,
):
    if params.action not in ("update_status", "delete"):
        return _invalid_action()

    if params.action == "update_status":
        if payload.document_id is None or not payload.status:
            return 400, DocumentErrorResponse(error="document_id and status are required")
        document = get_document(payload.document_id)
        if document is None:
            return _not_found()
        try:
            document = update_document_status(
                document,
                status=payload.status,
                reviewed_by=payload.reviewed_by,
                review_notes=payload.review_notes,
            )
        except ValueError as e:
            return 400, DocumentErrorResponse(error=str(e))
        return DocumentUpdateResponse(document=DocumentOut.from_orm(document)).model_dump()

    if payload.document_id is None:
        return 400, DocumentErrorResponse(error="document_id is required")
    document = get_document(payload.document_id)
    if document is None:
        return _not_found()
    delete_document(document, deleted_by=payload.deleted_by)
    return MessageResponse(message="Document deleted").model_dump()
