"""
Pytest fixtures for sync tests.

Provides a builder for command centre payloads with stable ids, so a test
can send the same payload twice or tweak one field.
"""

from collections.abc import Callable
from typing import Any
from uuid import UUID, uuid4

import pytest


@pytest.fixture
def sync_ids() -> dict[str, UUID]:
    """Command centre ids shared by every payload built in one test."""
    return {
        "person": uuid4(),
        "case": uuid4(),
        "pipeline": uuid4(),
        "stage_intake": uuid4(),
        "stage_review": uuid4(),
        "stage_complete": uuid4(),
    }


@pytest.fixture
def build_payload(sync_ids: dict[str, UUID]) -> Callable[..., dict[str, Any]]:
    """
    Factory fixture for sync payloads as the command centre sends them.

    Example:
        payload = build_payload(current_stage="review", email="ada@example.com")
    """

    def _build(
        email: str = "ada@example.com",
        current_stage: str | None = "intake",
        with_pipeline: bool = True,
        with_stages: bool = True,
        **case_overrides: Any,
    ) -> dict[str, Any]:
        pipeline_id = str(sync_ids["pipeline"])
        stages = [
            {
                "id": str(sync_ids[f"stage_{slug}"]),
                "name": slug.title(),
                "slug": slug,
                "order_index": index,
                "pipeline_id": pipeline_id,
            }
            for index, slug in enumerate(["intake", "review", "complete"])
        ]
        case_data: dict[str, Any] = {
            "id": str(sync_ids["case"]),
            "case_reference": "ELAB-2041",
            "status": "active",
            "priority": "high",
            "pipeline_id": pipeline_id,
            "current_stage_id": (
                str(sync_ids[f"stage_{current_stage}"]) if current_stage else None
            ),
            "start_date": "2026-03-02",
            "metadata": {"missingDocument": "Transcript"},
        }
        case_data.update(case_overrides)

        payload: dict[str, Any] = {
            "person": {
                "id": str(sync_ids["person"]),
                "email": email,
                "first_name": "Ada",
                "last_name": "Lovelace",
                "phone": "+15550100",
            },
            "case_data": case_data,
        }
        if with_pipeline:
            payload["pipeline"] = {"id": pipeline_id, "name": "Nursing Licence", "slug": "nursing"}
        if with_stages:
            payload["stages"] = stages
        return payload

    return _build
