"""
Pydantic schemas for the documents API.
"""

from datetime import datetime
from uuid import UUID

from ninja import Field, Schema


class DocumentOut(Schema):
    id: UUID
    case_id: UUID | None = None
    person_id: UUID | None = None
    case_reference: str
    name: str
    document_type: str
    storage_path: str
    mime_type: str
    size_bytes: int
    status: str
    reviewed_by: str
    reviewed_at: datetime | None = None
    review_notes: str
    uploaded_by_id: int | None = None
    uploaded_at: datetime
    notes: str
    is_client_visible: bool
    created_at: datetime
    updated_at: datetime


class DocumentListResponse(Schema):
    documents: list[DocumentOut]


class DocumentDownloadResponse(Schema):
    document: DocumentOut
    download_url: str
    expires_in: int


class DocumentUpdateResponse(Schema):
    success: bool = True
    document: DocumentOut


class DocumentQueryParams(Schema):
    """Query parameters for GET /documents."""

    action: str | None = None
    case_id: UUID | None = None
    case_reference: str | None = None
    person_id: UUID | None = None
    email: str | None = None
    document_id: UUID | None = None


class DocumentActionQuery(Schema):
    action: str | None = None


class DocumentActionIn(Schema):
    """Body for POST /documents; which fields matter depends on the action."""

    document_id: UUID | None = None
    status: str | None = None
    reviewed_by: str | None = Field(default=None, max_length=255)
    review_notes: str | None = None
    deleted_by: str | None = None


class DocumentErrorResponse(Schema):
    error: str
    valid_actions: list[str] | None = None
