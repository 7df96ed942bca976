"""
Pydantic schemas for the command centre sync API.
"""

from datetime import date
from typing import Any, Literal
from uuid import UUID

from ninja import Field, Schema

CaseStatus = Literal["active", "completed", "on_hold", "cancelled"]


class PersonIn(Schema):
    """Applicant as known to the command centre. Omitted fields are left alone."""

    id: UUID | None = None
    email: str | None = Field(default=None, max_length=254)
    primary_email: str | None = Field(default=None, max_length=254)
    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)


class CaseDataIn(Schema):
    id: UUID | None = None
    case_reference: str = Field(default="", max_length=100)
    status: CaseStatus = "active"
    priority: str | None = Field(default=None, max_length=50)
    pipeline_id: UUID | None = None
    current_stage_id: UUID | None = None
    org_id: UUID | None = None
    start_date: date | None = None
    metadata: dict[str, Any] | None = None


class PipelineIn(Schema):
    id: UUID
    name: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=255)


class StageIn(Schema):
    id: UUID
    name: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=255)
    order_index: int = 0
    pipeline_id: UUID


class SyncCasePayload(Schema):
    """Request body for POST /sync/case."""

    person: PersonIn | None = None
    case_data: CaseDataIn | None = None
    pipeline: PipelineIn | None = None
    stages: list[StageIn] | None = None


class SyncedPipelineOut(Schema):
    id: UUID
    name: str
    slug: str
    org_id: UUID


class CreatedFlags(Schema):
    """Which records this call inserted (False means matched and updated)."""

    organization: bool
    pipeline: bool
    person: bool
    case: bool


class SyncCaseResponse(Schema):
    success: bool = True
    message: str = "Case synced successfully"
    person_id: UUID
    case_id: UUID
    org_id: UUID
    pipeline: SyncedPipelineOut | None = None
    created: CreatedFlags
    stages_synced: int
    account_linked: bool


class SyncErrorResponse(Schema):
    success: bool = False
    error: str
    step: str | None = None
    details: Any = None
