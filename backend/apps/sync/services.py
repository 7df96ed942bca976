"""
Command centre sync services.

Reconciles one case payload into organizations, pipelines, stages,
persons and cases. The command centre owns the ids, so every record is
upserted by the id it sends and resubmitting a payload converges.
"""

from dataclasses import dataclass, field
from typing import Any

from django.db import IntegrityError, transaction
from django.db.models import Q

from apps.accounts.models import User
from apps.accounts.services import find_account_by_email
from apps.cases.models import Case, CaseStageHistory, Person, Pipeline, PipelineStage
from apps.core.logging import get_logger
from apps.core.utils import normalize_email
from apps.organizations.models import Organization
from apps.organizations.services import get_or_create_default_organization
from apps.sync.exceptions import (
    IntegrityConflictError,
    ReferenceNotFoundError,
    SyncError,
    SyncValidationError,
)
from apps.sync.models import SyncRun
from apps.sync.schemas import CaseDataIn, PersonIn, StageIn, SyncCasePayload

logger = get_logger(__name__)

STAGE_CHANGE_NOTE = "Stage updated by command centre sync"


@dataclass
class SyncOutcome:
    """Records a sync call resolved to, and which of them it inserted."""

    organization: Organization
    pipeline: Pipeline
    person: Person
    case: Case
    created: dict[str, bool] = field(default_factory=dict)
    stages_synced: int = 0
    account_linked: bool = False

    def summary(self) -> dict[str, Any]:
        return {
            "org_id": str(self.organization.id),
            "pipeline_id": str(self.pipeline.id),
            "person_id": str(self.person.id),
            "case_id": str(self.case.id),
            "created": self.created,
            "stages_synced": self.stages_synced,
            "account_linked": self.account_linked,
        }


def sync_case(payload: SyncCasePayload) -> SyncOutcome:
    """
    Apply a command centre case payload.

    Steps run in order inside one transaction, so a failure in any of them
    leaves no partial writes:
    1. organization  - case_data.org_id, else the default organization
    2. pipeline      - pipeline.id, else case_data.pipeline_id
    3. stages        - upsert each stage by id
    4. person        - match on email/primary_email, else insert
    5. account link  - attach the portal account registered under person.email,
                       else primary_email
    6. case          - upsert by id, appending stage history on change

    Raises:
        SyncError: With the failing step; nothing has been written
    """
    person_in, case_in = _require_fields(payload)
    # Stytch may be searched here; keep it outside the row locks below
    account = find_account_for_person(person_in)

    with transaction.atomic():
        organization, org_created = _resolve_organization(case_in)
        pipeline, pipeline_created = _resolve_pipeline(payload, case_in, organization)
        stages_synced = _sync_stages(payload.stages or [])
        person, person_created = _resolve_person(person_in)
        account_linked = _link_account(person, account)
        case, case_created = _upsert_case(case_in, person, organization, pipeline)

    outcome = SyncOutcome(
        organization=organization,
        pipeline=pipeline,
        person=person,
        case=case,
        created={
            "organization": org_created,
            "pipeline": pipeline_created,
            "person": person_created,
            "case": case_created,
        },
        stages_synced=stages_synced,
        account_linked=account_linked,
    )
    logger.info(
        "sync_case_applied",
        case_id=str(case.id),
        person_id=str(person.id),
        org_id=str(organization.id),
        pipeline_id=str(pipeline.id),
        stages_synced=stages_synced,
        account_linked=account_linked,
        **{f"created_{k}": v for k, v in outcome.created.items()},
    )
    return outcome


def _require_fields(payload: SyncCasePayload) -> tuple[PersonIn, CaseDataIn]:
    person_in = payload.person
    case_in = payload.case_data
    if (
        person_in is None
        or not (person_in.email or "").strip()
        or case_in is None
        or case_in.id is None
    ):
        raise SyncValidationError(
            "Missing required fields: person.email and case_data.id are required",
            step="validation",
        )
    return person_in, case_in


def _resolve_organization(case_in: CaseDataIn) -> tuple[Organization, bool]:
    if case_in.org_id is None:
        return get_or_create_default_organization()

    organization = Organization.objects.filter(id=case_in.org_id).first()
    if organization is None:
        raise ReferenceNotFoundError(
            "Organization not found",
            step="organization",
            details=f"Organization {case_in.org_id} does not exist",
        )
    return organization, False


def _resolve_pipeline(
    payload: SyncCasePayload,
    case_in: CaseDataIn,
    organization: Organization,
) -> tuple[Pipeline, bool]:
    pipeline_in = payload.pipeline
    # The pipeline object wins over case_data.pipeline_id when both are sent
    target_id = pipeline_in.id if pipeline_in is not None else case_in.pipeline_id
    if target_id is None:
        raise SyncValidationError(
            "Pipeline is required",
            step="pipeline",
            details="Provide a pipeline object or case_data.pipeline_id",
        )

    created = False
    pipeline = Pipeline.objects.select_for_update().filter(id=target_id).first()
    if pipeline is not None:
        if pipeline_in is not None:
            pipeline.name = pipeline_in.name
            pipeline.slug = pipeline_in.slug
            pipeline.save(update_fields=["name", "slug", "updated_at"])
    elif pipeline_in is not None:
        try:
            with transaction.atomic():
                Pipeline.objects.create(
                    id=target_id,
                    name=pipeline_in.name,
                    slug=pipeline_in.slug,
                    organization=organization,
                )
        except IntegrityError as e:
            raise IntegrityConflictError(
                "Failed to create pipeline", step="pipeline", details=str(e)
            ) from e
        created = True
    else:
        raise ReferenceNotFoundError(
            "Pipeline not found",
            step="pipeline",
            details=f"Pipeline {target_id} does not exist and no pipeline data was provided",
        )

    pipeline = Pipeline.objects.filter(id=target_id).first()
    if pipeline is None:
        raise ReferenceNotFoundError(
            "Pipeline verification failed",
            step="pipeline",
            details=f"Pipeline {target_id} still does not exist after sync attempt",
        )
    return pipeline, created


def _sync_stages(stages: list[StageIn]) -> int:
    if not stages:
        return 0

    referenced = {s.pipeline_id for s in stages}
    existing = set(Pipeline.objects.filter(id__in=referenced).values_list("id", flat=True))
    missing = referenced - existing
    if missing:
        raise ReferenceNotFoundError(
            "Stage references an unknown pipeline",
            step="stages",
            details={"pipeline_ids": sorted(str(p) for p in missing)},
        )

    for stage in stages:
        PipelineStage.objects.update_or_create(
            id=stage.id,
            defaults={
                "name": stage.name,
                "slug": stage.slug,
                "order_index": stage.order_index,
                "pipeline_id": stage.pipeline_id,
            },
        )
    return len(stages)


def find_person_by_email(*emails: str) -> Person | None:
    """Oldest person whose email or primary_email matches any address, ignoring case."""
    query = Q()
    for email in {normalize_email(e) for e in emails if e}:
        query |= Q(email__iexact=email) | Q(primary_email__iexact=email)
    if not query:
        return None
    return Person.objects.select_for_update().filter(query).order_by("created_at", "id").first()


def _resolve_person(person_in: PersonIn) -> tuple[Person, bool]:
    email = normalize_email(person_in.email or "")
    primary_email = normalize_email(person_in.primary_email or "") or email

    person = find_person_by_email(email, primary_email)
    if person is not None:
        person.primary_email = primary_email
        update_fields = ["primary_email", "updated_at"]
        for name in ("first_name", "last_name", "phone"):
            value = getattr(person_in, name)
            if value is not None:
                setattr(person, name, value)
                update_fields.append(name)
        person.save(update_fields=update_fields)
        return person, False

    if person_in.id is not None and Person.objects.filter(id=person_in.id).exists():
        raise IntegrityConflictError(
            "Failed to create person",
            step="person",
            details=f"Person {person_in.id} already exists with a different email",
        )

    values = {
        "email": email,
        "primary_email": primary_email,
        "first_name": person_in.first_name or "",
        "last_name": person_in.last_name or "",
        "phone": person_in.phone or "",
    }
    if person_in.id is not None:
        values["id"] = person_in.id
    try:
        with transaction.atomic():
            person = Person.objects.create(**values)
    except IntegrityError as e:
        raise IntegrityConflictError("Failed to create person", step="person", details=str(e)) from e
    return person, True


def find_account_for_person(person_in: PersonIn) -> User | None:
    """Portal account registered under person.email, else under primary_email."""
    for email in (person_in.email, person_in.primary_email):
        user = find_account_by_email(email or "")
        if user is not None:
            return user
    return None


def _link_account(person: Person, user: User | None) -> bool:
    """Attach the portal account found for the payload. A missing account is fine."""
    if user is None:
        return person.auth_user_id is not None

    if person.auth_user_id != user.id:
        person.auth_user = user
        person.save(update_fields=["auth_user", "updated_at"])
        logger.info("person_account_linked", person_id=str(person.id), user_id=user.id)
    return True


def _upsert_case(
    case_in: CaseDataIn,
    person: Person,
    organization: Organization,
    pipeline: Pipeline,
) -> tuple[Case, bool]:
    stage = None
    if case_in.current_stage_id is not None:
        stage = PipelineStage.objects.filter(id=case_in.current_stage_id).first()
        if stage is None:
            raise ReferenceNotFoundError(
                "Failed to sync case",
                step="case",
                details=f"Stage {case_in.current_stage_id} does not exist",
            )

    values = {
        "case_reference": case_in.case_reference,
        "person": person,
        "organization": organization,
        "pipeline": pipeline,
        "current_stage": stage,
        "status": case_in.status,
        "priority": case_in.priority or "",
        "start_date": case_in.start_date,
        "metadata": case_in.metadata or {},
    }

    case = Case.objects.select_for_update().filter(id=case_in.id).first()
    created = case is None
    previous_stage_id = None if case is None else case.current_stage_id

    if case is None:
        try:
            with transaction.atomic():
                case = Case.objects.create(id=case_in.id, **values)
        except IntegrityError as e:
            raise IntegrityConflictError("Failed to sync case", step="case", details=str(e)) from e
    else:
        for name, value in values.items():
            setattr(case, name, value)
        case.save()

    if stage is not None and stage.id != previous_stage_id:
        CaseStageHistory.objects.create(
            case=case,
            from_stage_id=previous_stage_id,
            to_stage=stage,
            notes=STAGE_CHANGE_NOTE,
        )
    return case, created


def record_sync_run(
    payload: SyncCasePayload,
    status: str,
    *,
    outcome: SyncOutcome | None = None,
    error: SyncError | Exception | None = None,
) -> SyncRun:
    """Write the audit row for a sync call. Runs outside the sync transaction."""
    case_id = payload.case_data.id if payload.case_data else None
    email = normalize_email(payload.person.email or "") if payload.person else ""

    return SyncRun.objects.create(
        case_id=case_id,
        person_email=email,
        status=status,
        step=(getattr(error, "step", None) or "") if error is not None else "",
        error=str(error) if error is not None else "",
        summary=outcome.summary() if outcome is not None else None,
        payload=payload.model_dump(mode="json"),
    )
