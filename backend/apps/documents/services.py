"""
Document services - listing, review status and deletion.
"""

from uuid import UUID

from django.db.models import Q, QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.cases.models import Case, Person
from apps.core.logging import get_logger
from apps.core.utils import normalize_email
from apps.documents.models import ClientDocument
from apps.documents.schemas import DocumentOut
from apps.documents.storage import get_storage_service

logger = get_logger(__name__)

VALID_STATUSES = [choice.value for choice in ClientDocument.Status]


def list_documents(
    *,
    case_id: UUID | None = None,
    case_reference: str | None = None,
    person_id: UUID | None = None,
    email: str | None = None,
) -> QuerySet[ClientDocument]:
    """
    Documents matching the first supplied filter, newest upload first.

    Filters are tried in order case_id, case_reference, person_id, email.
    An email with no matching person yields an empty queryset.

    Raises:
        ValueError: If no filter is supplied
    """
    documents = ClientDocument.objects.order_by("-uploaded_at", "-id")

    if case_id:
        return documents.filter(case_id=case_id)
    if case_reference:
        return documents.filter(case_reference=case_reference)
    if person_id:
        return documents.filter(person_id=person_id)
    if email:
        normalized = normalize_email(email)
        person = (
            Person.objects.filter(
                Q(email__iexact=normalized) | Q(primary_email__iexact=normalized)
            )
            .order_by("created_at", "id")
            .first()
        )
        if person is None:
            logger.info("documents_person_not_found")
            return documents.none()
        return documents.filter(person=person)

    raise ValueError("Must provide case_id, person_id, case_reference, or email")


def get_document(document_id: UUID) -> ClientDocument | None:
    return ClientDocument.objects.filter(id=document_id).first()


def update_document_status(
    document: ClientDocument,
    status: str,
    reviewed_by: str | None = None,
    review_notes: str | None = None,
) -> ClientDocument:
    """
    Record a review outcome.

    Only the reviewer fields that are supplied are overwritten.

    Raises:
        ValueError: If status is not a document status
    """
    if status not in VALID_STATUSES:
        raise ValueError(f"Invalid status. Must be one of: {', '.join(VALID_STATUSES)}")

    document.status = status
    document.reviewed_at = timezone.now()
    update_fields = ["status", "reviewed_at", "updated_at"]
    if reviewed_by is not None:
        document.reviewed_by = reviewed_by
        update_fields.append("reviewed_by")
    if review_notes is not None:
        document.review_notes = review_notes
        update_fields.append("review_notes")
    document.save(update_fields=update_fields)

    logger.info("document_status_updated", document_id=str(document.id), status=status)
    return document


def delete_document(document: ClientDocument, deleted_by: str | None = None) -> None:
    """
    Remove a document's blob and then its row.

    A blob that cannot be removed is logged and the row is deleted anyway;
    the file may already be gone.
    """
    document_id = str(document.id)
    get_storage_service().delete(document.storage_path)

    document.delete()

    logger.info("document_deleted", document_id=document_id, deleted_by=deleted_by)


def get_download_url(document: ClientDocument, expires_in: int) -> str:
    return get_storage_service().get_download_url(document.storage_path, expires_in)


def list_portal_documents(case: Case, user: User) -> list[DocumentOut]:
    """Documents on a case that the client may see or uploaded themselves."""
    documents = (
        ClientDocument.objects.filter(case=case)
        .filter(Q(is_client_visible=True) | Q(uploaded_by=user))
        .order_by("-uploaded_at", "-id")
    )
    return [DocumentOut.from_orm(d) for d in documents]
