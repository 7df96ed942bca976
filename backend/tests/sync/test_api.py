"""
Tests for the sync API endpoint.

These go through the full HTTP stack so authentication, payload
validation and the error envelope are exercised together.
"""

import json
from unittest.mock import patch

import pytest
from django.test import Client

from apps.cases.models import Case, Person
from apps.organizations.models import Organization
from apps.sync.models import SyncRun

SYNC_URL = "/api/v1/sync/case"


def post_sync(client: Client, payload: dict, **headers):
    return client.post(SYNC_URL, data=json.dumps(payload), content_type="application/json", **headers)


@pytest.mark.django_db
class TestSyncCaseEndpoint:
    """Tests for POST /sync/case."""

    def test_success_response(self, api_client: Client, api_key_headers, build_payload, sync_ids) -> None:
        response = post_sync(api_client, build_payload(), **api_key_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Case synced successfully"
        assert body["person_id"] == str(sync_ids["person"])
        assert body["case_id"] == str(sync_ids["case"])
        assert body["pipeline"]["id"] == str(sync_ids["pipeline"])
        assert body["pipeline"]["org_id"] == body["org_id"]
        assert body["created"] == {
            "organization": True,
            "pipeline": True,
            "person": True,
            "case": True,
        }
        assert body["stages_synced"] == 3
        assert body["account_linked"] is False

    def test_resend_is_idempotent(self, api_client: Client, api_key_headers, build_payload) -> None:
        post_sync(api_client, build_payload(), **api_key_headers)
        response = post_sync(api_client, build_payload(), **api_key_headers)

        assert response.status_code == 200
        assert not any(response.json()["created"].values())
        assert Case.objects.count() == 1
        assert Person.objects.count() == 1

    def test_bearer_key_accepted(self, api_client: Client, build_payload) -> None:
        response = post_sync(api_client, build_payload(), HTTP_AUTHORIZATION="Bearer test-sync-key")

        assert response.status_code == 200

    def test_records_applied_run(self, api_client: Client, api_key_headers, build_payload, sync_ids) -> None:
        post_sync(api_client, build_payload(), **api_key_headers)

        run = SyncRun.objects.get()
        assert run.status == SyncRun.Status.APPLIED
        assert run.case_id == sync_ids["case"]


@pytest.mark.django_db
class TestSyncCaseAuth:
    """Shared-secret checks."""

    def test_wrong_key_is_401_without_writes(self, api_client: Client, build_payload) -> None:
        response = post_sync(api_client, build_payload(), HTTP_X_API_KEY="wrong-key")

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "error": "Unauthorized - Invalid API key",
            "step": "auth",
            "details": None,
        }
        assert Case.objects.count() == 0
        assert SyncRun.objects.count() == 0

    def test_missing_key_is_401(self, api_client: Client, build_payload) -> None:
        response = post_sync(api_client, build_payload())

        assert response.status_code == 401
        assert Person.objects.count() == 0


@pytest.mark.django_db
class TestSyncCaseErrors:
    """Error envelope for rejected and failed payloads."""

    def test_missing_fields_is_400(self, api_client: Client, api_key_headers, build_payload) -> None:
        payload = build_payload()
        del payload["person"]

        response = post_sync(api_client, payload, **api_key_headers)

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["step"] == "validation"
        assert body["error"] == (
            "Missing required fields: person.email and case_data.id are required"
        )
        assert Case.objects.count() == 0
        assert Person.objects.count() == 0
        assert Organization.objects.count() == 0
        # Only the audit row is written
        run = SyncRun.objects.get()
        assert run.status == SyncRun.Status.REJECTED
        assert run.step == "validation"

    def test_bad_status_is_400(self, api_client: Client, api_key_headers, build_payload) -> None:
        response = post_sync(api_client, build_payload(status="archived"), **api_key_headers)

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Invalid request payload"
        assert body["step"] == "validation"

    def test_unknown_stage_is_400_and_rolls_back(
        self, api_client: Client, api_key_headers, build_payload
    ) -> None:
        payload = build_payload()
        payload["case_data"]["current_stage_id"] = "0192f5c4-0000-7000-8000-000000000000"

        response = post_sync(api_client, payload, **api_key_headers)

        assert response.status_code == 400
        assert response.json()["step"] == "case"
        assert Person.objects.count() == 0
        assert SyncRun.objects.get().status == SyncRun.Status.REJECTED

    def test_unexpected_error_is_500(self, api_client: Client, api_key_headers, build_payload) -> None:
        with patch("apps.sync.api.sync_case", side_effect=RuntimeError("database went away")):
            response = post_sync(api_client, build_payload(), **api_key_headers)

        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"
        assert response.json()["details"] == "database went away"
        run = SyncRun.objects.get()
        assert run.status == SyncRun.Status.FAILED
        assert run.error == "database went away"
