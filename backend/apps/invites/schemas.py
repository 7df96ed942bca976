"""
Pydantic schemas for invites and registration.
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from ninja import Field, Schema


class InviteCreateIn(Schema):
    """Invite issued by the command centre."""

    token: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=254)
    person_id: UUID | None = None
    case_id: UUID | None = None
    first_name: str | None = None
    last_name: str | None = None
    case_reference: str | None = None
    pipeline_name: str | None = None
    expires_at: datetime | None = None


class InviteOut(Schema):
    """What the accept-invite page needs to prefill registration."""

    status: Literal["valid", "expired", "used"]
    email: str
    first_name: str
    last_name: str
    case_reference: str
    pipeline_name: str


class RegistrationVerifyIn(Schema):
    case_reference: str | None = None
    email: str | None = None


class RegistrationErrorResponse(Schema):
    valid: bool = False
    error: str
