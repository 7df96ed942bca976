"""
Pydantic schemas for the client portal API.
"""

from datetime import date, datetime
from typing import Literal
from uuid import UUID

from ninja import Schema


class PipelineOut(Schema):
    id: UUID
    name: str
    slug: str


class StageOut(Schema):
    id: UUID
    name: str
    slug: str
    order_index: int


class PersonOut(Schema):
    """Signed-in person's profile."""

    id: UUID
    email: str
    primary_email: str
    first_name: str
    last_name: str
    phone: str


class MeResponse(Schema):
    """Profile plus case counts for the portal dashboard."""

    person: PersonOut
    active_cases: int
    completed_cases: int
    total_cases: int


class CaseOut(Schema):
    """A case joined with its pipeline, stages and progress."""

    id: UUID
    case_reference: str
    status: str
    priority: str
    start_date: date | None = None
    metadata: dict
    created_at: datetime
    updated_at: datetime
    pipeline: PipelineOut
    current_stage: StageOut | None = None
    stages: list[StageOut]
    progress: int


class CaseListResponse(Schema):
    cases: list[CaseOut]


class StageHistoryOut(Schema):
    id: int
    from_stage: StageOut | None = None
    to_stage: StageOut
    notes: str
    created_at: datetime


class NoteOut(Schema):
    id: int
    content: str
    created_at: datetime


class CaseDetailOut(CaseOut):
    """Case with its stage history (oldest first) and client-visible notes."""

    stage_history: list[StageHistoryOut]
    notes: list[NoteOut]


class CaseSummaryOut(Schema):
    """Plain-language status summary for the applicant."""

    summary: str
    next_steps: list[str]
    estimated_progress: int
    alerts: list[str]
    source: Literal["ai", "fallback"]
