"""
Tests for the invite and registration API.
"""

import json
from datetime import timedelta
from unittest.mock import MagicMock, patch

import httpx
import pytest
from django.test import Client, override_settings
from django.utils import timezone

from apps.invites.api import INVITE_LOOKUP_LIMIT, REGISTRATION_VERIFY_LIMIT
from apps.invites.models import InviteToken
from tests.invites.factories import InviteTokenFactory

INVITES_URL = "/api/v1/invites"
VERIFY_URL = "/api/v1/registration/verify"


def post_json(client: Client, url: str, body: dict, **headers):
    return client.post(url, data=json.dumps(body), content_type="application/json", **headers)


def upstream_response(status_code: int, body) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.is_success = 200 <= status_code < 300
    response.json.return_value = body
    return response


@pytest.mark.django_db
class TestCreateInvite:
    """Tests for POST /invites."""

    def test_creates_invite(self, api_client: Client, api_key_headers) -> None:
        response = post_json(
            api_client,
            INVITES_URL,
            {
                "token": "tok-1",
                "email": "Ada@Example.com",
                "first_name": "Ada",
                "case_reference": "ELAB-2041",
            },
            **api_key_headers,
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Invite token created for ada@example.com",
        }
        invite = InviteToken.objects.get(token="tok-1")
        assert invite.email == "ada@example.com"
        assert invite.first_name == "Ada"
        assert invite.last_name == ""

    def test_replaces_outstanding_invite(self, api_client: Client, api_key_headers) -> None:
        InviteTokenFactory.create(token="tok-old", email="ada@example.com")

        response = post_json(
            api_client, INVITES_URL, {"token": "tok-new", "email": "ada@example.com"}, **api_key_headers
        )

        assert response.json()["message"] == "Invite token updated for ada@example.com"
        assert list(InviteToken.objects.values_list("token", flat=True)) == ["tok-new"]

    def test_used_invite_is_not_replaced(self, api_client: Client, api_key_headers) -> None:
        InviteTokenFactory.create(token="tok-old", email="ada@example.com", used_at=timezone.now())

        post_json(
            api_client, INVITES_URL, {"token": "tok-new", "email": "ada@example.com"}, **api_key_headers
        )

        assert InviteToken.objects.count() == 2

    def test_requires_api_key(self, api_client: Client) -> None:
        response = post_json(api_client, INVITES_URL, {"token": "t", "email": "a@example.com"})

        assert response.status_code == 401


@pytest.mark.django_db
class TestGetInvite:
    """Tests for GET /invites/{token}."""

    def test_valid_invite(self, api_client: Client) -> None:
        InviteTokenFactory.create(token="tok-1", email="ada@example.com", first_name="Ada")

        response = api_client.get(f"{INVITES_URL}/tok-1")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "valid"
        assert body["email"] == "ada@example.com"
        assert body["first_name"] == "Ada"

    def test_expired_invite(self, api_client: Client) -> None:
        InviteTokenFactory.create(token="tok-1", expires_at=timezone.now() - timedelta(minutes=1))

        response = api_client.get(f"{INVITES_URL}/tok-1")

        assert response.json()["status"] == "expired"

    def test_used_invite(self, api_client: Client) -> None:
        InviteTokenFactory.create(token="tok-1", used_at=timezone.now())

        response = api_client.get(f"{INVITES_URL}/tok-1")

        assert response.json()["status"] == "used"

    def test_unknown_token_is_404(self, api_client: Client) -> None:
        response = api_client.get(f"{INVITES_URL}/nope")

        assert response.status_code == 404
        assert response.json() == {"detail": "Invalid invite token."}

    def test_rate_limited(self, api_client: Client) -> None:
        for _ in range(INVITE_LOOKUP_LIMIT.max_requests):
            api_client.get(f"{INVITES_URL}/nope")

        response = api_client.get(f"{INVITES_URL}/nope")

        assert response.status_code == 429


@pytest.mark.django_db
class TestConsumeInvite:
    """Tests for POST /invites/{token}/consume."""

    def test_consumes_valid_invite(self, api_client: Client) -> None:
        InviteTokenFactory.create(token="tok-1")

        response = api_client.post(f"{INVITES_URL}/tok-1/consume")

        assert response.status_code == 200
        assert response.json()["status"] == "used"
        assert InviteToken.objects.get(token="tok-1").used_at is not None

    def test_second_consume_is_400(self, api_client: Client) -> None:
        InviteTokenFactory.create(token="tok-1")
        api_client.post(f"{INVITES_URL}/tok-1/consume")

        response = api_client.post(f"{INVITES_URL}/tok-1/consume")

        assert response.status_code == 400
        assert response.json() == {"detail": "This invite has already been used."}

    def test_expired_invite_is_400(self, api_client: Client) -> None:
        InviteTokenFactory.create(token="tok-1", expires_at=timezone.now() - timedelta(days=1))

        response = api_client.post(f"{INVITES_URL}/tok-1/consume")

        assert response.status_code == 400
        assert response.json() == {"detail": "This invite link has expired."}
        assert InviteToken.objects.get(token="tok-1").used_at is None

    def test_unknown_token_is_404(self, api_client: Client) -> None:
        response = api_client.post(f"{INVITES_URL}/nope/consume")

        assert response.status_code == 404


@pytest.mark.django_db
class TestVerifyRegistration:
    """Tests for POST /registration/verify."""

    def test_relays_upstream_answer(self, api_client: Client) -> None:
        answer = {"valid": True, "case_id": "c-1", "first_name": "Ada"}

        with patch(
            "apps.invites.services.httpx.post", return_value=upstream_response(200, answer)
        ) as mock_post:
            response = post_json(
                api_client, VERIFY_URL, {"case_reference": " elab-2041 ", "email": "Ada@Example.com"}
            )

        assert response.status_code == 200
        assert response.json() == answer
        args, kwargs = mock_post.call_args
        assert args[0] == "https://command-centre.test/functions/v1/verify-case-access"
        assert kwargs["json"] == {"case_reference": "ELAB-2041", "email": "ada@example.com"}
        assert kwargs["headers"] == {"x-api-key": "test-command-centre-key"}

    def test_relays_upstream_rejection_status(self, api_client: Client) -> None:
        answer = {"valid": False, "error": "Case reference not found"}

        with patch(
            "apps.invites.services.httpx.post", return_value=upstream_response(404, answer)
        ):
            response = post_json(
                api_client, VERIFY_URL, {"case_reference": "ELAB-1", "email": "a@example.com"}
            )

        assert response.status_code == 404
        assert response.json() == answer

    def test_missing_fields_is_400(self, api_client: Client) -> None:
        with patch("apps.invites.services.httpx.post") as mock_post:
            response = post_json(api_client, VERIFY_URL, {"email": "a@example.com"})

        assert response.status_code == 400
        assert response.json() == {"valid": False, "error": "Missing case reference or email"}
        mock_post.assert_not_called()

    def test_transport_error_is_500(self, api_client: Client) -> None:
        with patch(
            "apps.invites.services.httpx.post", side_effect=httpx.ConnectError("refused")
        ):
            response = post_json(
                api_client, VERIFY_URL, {"case_reference": "ELAB-1", "email": "a@example.com"}
            )

        assert response.status_code == 500
        assert response.json() == {"valid": False, "error": "Verification service unavailable"}

    @override_settings(COMMAND_CENTRE_API_KEY="")
    def test_unconfigured_is_500(self, api_client: Client) -> None:
        response = post_json(
            api_client, VERIFY_URL, {"case_reference": "ELAB-1", "email": "a@example.com"}
        )

        assert response.status_code == 500
        assert response.json()["error"] == "Service temporarily unavailable"

    def test_rate_limited(self, api_client: Client) -> None:
        for _ in range(REGISTRATION_VERIFY_LIMIT.max_requests):
            post_json(api_client, VERIFY_URL, {})

        response = post_json(api_client, VERIFY_URL, {})

        assert response.status_code == 429
