"""
Portal read services.

Every query here is scoped to a single Person; the API layer resolves the
signed-in account to that Person first.
"""

from collections import defaultdict
from collections.abc import Iterable, Sequence
from typing import Protocol
from uuid import UUID

from django.db.models import Count, Q

from apps.accounts.models import User
from apps.cases.models import Case, CaseStageHistory, ClientNote, Person, PipelineStage
from apps.cases.schemas import (
    CaseDetailOut,
    CaseOut,
    NoteOut,
    PipelineOut,
    StageHistoryOut,
    StageOut,
)
from apps.core.utils import normalize_email, round_half_up

# Progress shown for an active case whose pipeline has no stages yet
NO_STAGES_PROGRESS = 45
# Progress shown when the current stage is missing from the stage list
UNKNOWN_STAGE_PROGRESS = 20


class _Stage(Protocol):
    id: UUID
    order_index: int


def compute_progress(
    status: str,
    stages: Sequence[_Stage],
    current_stage_id: UUID | None,
) -> int:
    """
    Percentage of the pipeline a case has reached.

    The current stage's 1-based position over the stage count, rounded half
    up, with stages sorted by order_index. The 2nd of 4 stages is 50.
    """
    if not stages:
        if status == Case.Status.COMPLETED:
            return 100
        if status == Case.Status.CANCELLED:
            return 0
        return NO_STAGES_PROGRESS

    ordered = sorted(stages, key=lambda s: s.order_index)
    for index, stage in enumerate(ordered):
        if stage.id == current_stage_id:
            return round_half_up((index + 1) / len(ordered) * 100)
    return UNKNOWN_STAGE_PROGRESS


def resolve_person(user: User) -> Person | None:
    """
    Find the Person behind a portal account.

    Prefers an explicit account link, then a case-insensitive match of the
    account email on email or primary_email (oldest person first).
    """
    person = Person.objects.filter(auth_user=user).order_by("created_at", "id").first()
    if person is not None:
        return person

    email = normalize_email(user.email)
    if not email:
        return None
    return (
        Person.objects.filter(Q(email__iexact=email) | Q(primary_email__iexact=email))
        .order_by("created_at", "id")
        .first()
    )


def get_case_counts(person: Person) -> dict[str, int]:
    """Active, completed and total case counts for a person."""
    return person.cases.aggregate(
        active_cases=Count("id", filter=Q(status=Case.Status.ACTIVE)),
        completed_cases=Count("id", filter=Q(status=Case.Status.COMPLETED)),
        total_cases=Count("id"),
    )


def _stages_by_pipeline(pipeline_ids: Iterable[UUID]) -> dict[UUID, list[PipelineStage]]:
    grouped: dict[UUID, list[PipelineStage]] = defaultdict(list)
    for stage in PipelineStage.objects.filter(pipeline_id__in=set(pipeline_ids)).order_by(
        "order_index"
    ):
        grouped[stage.pipeline_id].append(stage)
    return grouped


def _stage_out(stage: PipelineStage | None) -> StageOut | None:
    if stage is None:
        return None
    return StageOut(id=stage.id, name=stage.name, slug=stage.slug, order_index=stage.order_index)


def _case_fields(case: Case, stages: list[PipelineStage]) -> dict:
    return {
        "id": case.id,
        "case_reference": case.case_reference,
        "status": case.status,
        "priority": case.priority,
        "start_date": case.start_date,
        "metadata": case.metadata or {},
        "created_at": case.created_at,
        "updated_at": case.updated_at,
        "pipeline": PipelineOut(id=case.pipeline.id, name=case.pipeline.name, slug=case.pipeline.slug),
        "current_stage": _stage_out(case.current_stage),
        "stages": [_stage_out(s) for s in stages],
        "progress": compute_progress(case.status, stages, case.current_stage_id),
    }


def list_cases_for_person(person: Person) -> list[CaseOut]:
    """The person's cases, newest first, with stages and progress."""
    cases = list(
        Case.objects.filter(person=person)
        .select_related("pipeline", "current_stage")
        .order_by("-created_at", "-id")
    )
    stages = _stages_by_pipeline(c.pipeline_id for c in cases)
    return [CaseOut(**_case_fields(c, stages.get(c.pipeline_id, []))) for c in cases]


def get_case_for_person(person: Person, case_id: UUID) -> Case | None:
    """Load one of the person's cases, or None if it isn't theirs."""
    return (
        Case.objects.filter(id=case_id, person=person)
        .select_related("pipeline", "current_stage", "person")
        .first()
    )


def get_case_detail(case: Case) -> CaseDetailOut:
    """Build the detail view: stages, history oldest first, visible notes newest first."""
    stages = list(case.pipeline.stages.order_by("order_index"))

    history = (
        CaseStageHistory.objects.filter(case=case)
        .select_related("from_stage", "to_stage")
        .order_by("created_at", "id")
    )
    notes = ClientNote.objects.filter(case=case, is_client_visible=True).order_by(
        "-created_at", "-id"
    )

    return CaseDetailOut(
        **_case_fields(case, stages),
        stage_history=[
            StageHistoryOut(
                id=h.id,
                from_stage=_stage_out(h.from_stage),
                to_stage=_stage_out(h.to_stage),
                notes=h.notes,
                created_at=h.created_at,
            )
            for h in history
        ],
        notes=[NoteOut(id=n.id, content=n.content, created_at=n.created_at) for n in notes],
    )
