"""Integration tests for the HTTP API.

Run with: pytest tests/test_api.py -v
"""

import hashlib
import hmac
import json
from uuid import uuid4

import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from events import deps
from tests.fakes import ORGANIZER, FakeEmailClient, FakePaymentGateway, RecordingDispatcher

OTHER = "someone@example.com"
WEBHOOK_SECRET = "whsec_api"


@pytest.fixture
def queued(monkeypatch) -> RecordingDispatcher:
    dispatcher = RecordingDispatcher()
    monkeypatch.setattr(deps, "dispatcher", lambda: dispatcher)
    monkeypatch.setattr(deps, "email_client", lambda: FakeEmailClient())
    monkeypatch.setattr(deps, "payment_gateway", lambda: FakePaymentGateway())
    return dispatcher


@pytest.fixture
def organizer(api_client: APIClient) -> APIClient:
    api_client.credentials(HTTP_X_USER_EMAIL=ORGANIZER)
    return api_client


def _create_event(client: APIClient, **fields) -> dict:
    body = {"title": "PyCon Meetup", "date": "2030-01-15", "location": "Hall A", **fields}
    response = client.post(reverse("event-list"), body, format="json")
    assert response.status_code == 201
    return response.json()


def _register(client: APIClient, event_id: str, name: str) -> dict:
    response = client.post(
        reverse("event-registrations", args=[event_id]),
        {"name": name, "email": f"{name.lower()}@example.com"},
        format="json",
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.django_db
class TestEvents:
    """Tests for /api/events"""

    def test_create_and_list(self, queued, organizer):
        """Created events are owned by the caller and listed publicly."""
        event = _create_event(organizer, participant_limit=2)

        assert event["created_by"] == ORGANIZER
        assert event["participant_limit"] == 2
        assert event["registration_closed"] is False

        listed = APIClient().get(reverse("event-list"))
        assert listed.status_code == 200
        assert [e["id"] for e in listed.json()] == [event["id"]]

    def test_create_requires_identity(self, queued, api_client):
        """Anonymous callers cannot create events."""
        response = api_client.post(reverse("event-list"), {"title": "X", "date": "2030-01-15"}, format="json")
        assert response.status_code == 401

    def test_create_validates_input(self, queued, organizer):
        """Missing fields are a 400."""
        response = organizer.post(reverse("event-list"), {"date": "2030-01-15"}, format="json")
        assert response.status_code == 400

    def test_detail(self, queued, organizer):
        """Event details are public."""
        event = _create_event(organizer)
        response = APIClient().get(reverse("event-detail", args=[event["id"]]))
        assert response.status_code == 200
        assert response.json()["title"] == "PyCon Meetup"

    def test_detail_not_found(self, queued, api_client):
        """Unknown events are a 404 with an error code."""
        response = api_client.get(reverse("event-detail", args=[str(uuid4())]))
        assert response.status_code == 404
        assert response.json()["error"] == "EVENT_NOT_FOUND"

    def test_detail_invalid_id(self, queued, api_client):
        """Malformed ids are a 400."""
        response = api_client.get(reverse("event-detail", args=["not-a-uuid"]))
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_ID"

    def test_update(self, queued, organizer):
        """Owners can edit their events."""
        event = _create_event(organizer)
        response = organizer.put(
            reverse("event-detail", args=[event["id"]]),
            {"title": "PyCon Sprint", "date": "2030-01-16", "participant_limit": None},
            format="json",
        )
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["event"]["title"] == "PyCon Sprint"

    def test_update_requires_explicit_limit(self, queued, organizer):
        """Leaving the limit out of a PUT is refused instead of removing it."""
        event = _create_event(organizer, participant_limit=1)
        _register(APIClient(), event["id"], "Ada")
        _register(APIClient(), event["id"], "Bob")
        emails_before = len(queued.queued)

        response = organizer.put(
            reverse("event-detail", args=[event["id"]]),
            {"title": "PyCon Meetup", "date": "2030-01-15"},
            format="json",
        )

        assert response.status_code == 400
        assert "participant_limit" in response.json()
        assert organizer.get(reverse("event-detail", args=[event["id"]])).json()["participant_limit"] == 1
        assert [r["name"] for r in organizer.get(reverse("event-waitlist", args=[event["id"]])).json()] == ["Bob"]
        assert len(queued.queued) == emails_before

    def test_update_removes_limit_with_null(self, queued, organizer):
        """An explicit null removes the limit and admits the waitlist."""
        event = _create_event(organizer, participant_limit=1)
        _register(APIClient(), event["id"], "Ada")
        _register(APIClient(), event["id"], "Bob")

        response = organizer.put(
            reverse("event-detail", args=[event["id"]]),
            {"title": "PyCon Meetup", "date": "2030-01-15", "participant_limit": None},
            format="json",
        )

        assert response.status_code == 200
        assert response.json()["event"]["participant_limit"] is None
        assert [r["name"] for r in response.json()["promoted"]] == ["Bob"]

    def test_only_owner_can_delete(self, queued, organizer):
        """Another user gets a 403 and the event survives."""
        event = _create_event(organizer)
        url = reverse("event-detail", args=[event["id"]])

        stranger = APIClient()
        stranger.credentials(HTTP_X_USER_EMAIL=OTHER)
        response = stranger.delete(url)

        assert response.status_code == 403
        assert response.json()["error"] == "NOT_AUTHORIZED"
        assert organizer.delete(url).status_code == 204
        assert organizer.get(url).status_code == 404

    def test_toggle_registration(self, queued, organizer):
        """Toggling flips registration_closed."""
        event = _create_event(organizer)
        response = organizer.post(reverse("event-toggle-registration", args=[event["id"]]))
        assert response.json() == {"registration_closed": True}

    def test_mine(self, queued, organizer):
        """The owner listing only holds the caller's events."""
        _create_event(organizer)
        stranger = APIClient()
        stranger.credentials(HTTP_X_USER_EMAIL=OTHER)
        assert stranger.get(reverse("event-mine")).json() == []
        assert len(organizer.get(reverse("event-mine")).json()) == 1


@pytest.mark.django_db
class TestRegistrations:
    """Tests for registration and waitlist endpoints."""

    def test_public_registration_and_confirmation(self, queued, organizer):
        """Anyone can register and a confirmation email is queued."""
        event = _create_event(organizer)
        registration = _register(APIClient(), event["id"], "Ada")

        assert registration["status"] == "registered"
        assert registration["waitlist_position"] is None
        assert queued.recipients() == ["ada@example.com"]

    def test_duplicate_registration(self, queued, organizer):
        """A second live registration for the same email is a 409."""
        event = _create_event(organizer)
        _register(APIClient(), event["id"], "Ada")
        response = APIClient().post(
            reverse("event-registrations", args=[event["id"]]),
            {"name": "Ada", "email": "ada@example.com"},
            format="json",
        )
        assert response.status_code == 409
        assert response.json()["error"] == "ALREADY_REGISTERED"

    def test_full_event_waitlists(self, queued, organizer):
        """Registrations past the limit join the waitlist in order."""
        event = _create_event(organizer, participant_limit=1)
        _register(APIClient(), event["id"], "Ada")
        bob = _register(APIClient(), event["id"], "Bob")

        assert (bob["status"], bob["waitlist_position"]) == ("waitlisted", 1)
        counts = APIClient().get(reverse("registration-counts", args=[event["id"]])).json()
        assert counts == {"registered": 1, "waitlisted": 1, "cancelled": 0, "total": 2}

    def test_check(self, queued, organizer):
        """The check endpoint reports live registrations by email."""
        event = _create_event(organizer)
        _register(APIClient(), event["id"], "Ada")
        url = reverse("registration-check", args=[event["id"]])
        assert APIClient().get(url, {"email": "ada@example.com"}).json() == {"registered": True}
        assert APIClient().get(url, {"email": "bob@example.com"}).json() == {"registered": False}

    def test_listing_is_owner_only(self, queued, organizer):
        """Registrations are listed for the owner and hidden from others."""
        event = _create_event(organizer)
        _register(APIClient(), event["id"], "Ada")
        url = reverse("event-registrations", args=[event["id"]])

        assert APIClient().get(url).status_code == 401
        stranger = APIClient()
        stranger.credentials(HTTP_X_USER_EMAIL=OTHER)
        assert stranger.get(url).status_code == 403
        assert [r["name"] for r in organizer.get(url).json()] == ["Ada"]

    def test_cancel_promotes_waitlist(self, queued, organizer):
        """Cancelling a participant promotes the head of the waitlist."""
        event = _create_event(organizer, participant_limit=1)
        ada = _register(APIClient(), event["id"], "Ada")
        bob = _register(APIClient(), event["id"], "Bob")

        response = organizer.post(reverse("registration-cancel", args=[ada["id"]]))

        assert response.status_code == 200
        body = response.json()
        assert body["registration"]["status"] == "cancelled"
        assert body["promoted"]["id"] == bob["id"]
        assert body["promoted"]["status"] == "registered"

    def test_promote_all(self, queued, organizer):
        """Raising the limit then promoting fills the new seats."""
        event = _create_event(organizer, participant_limit=1)
        _register(APIClient(), event["id"], "Ada")
        _register(APIClient(), event["id"], "Bob")
        _register(APIClient(), event["id"], "Cy")

        organizer.put(
            reverse("event-detail", args=[event["id"]]),
            {"title": "PyCon Meetup", "date": "2030-01-15", "participant_limit": 2},
            format="json",
        )
        waitlist = organizer.get(reverse("event-waitlist", args=[event["id"]])).json()
        response = organizer.post(reverse("event-waitlist-promote", args=[event["id"]]))

        assert [r["name"] for r in waitlist] == ["Cy"]
        assert response.json()["count"] == 0

    def test_closed_registration(self, queued, organizer):
        """Registration is refused once the organizer closes it."""
        event = _create_event(organizer)
        organizer.post(reverse("event-toggle-registration", args=[event["id"]]))
        response = APIClient().post(
            reverse("event-registrations", args=[event["id"]]),
            {"name": "Ada", "email": "ada@example.com"},
            format="json",
        )
        assert response.status_code == 409
        assert response.json()["error"] == "REGISTRATION_CLOSED"


@pytest.mark.django_db
class TestRazorpayWebhook:
    """Tests for POST /api/webhooks/razorpay"""

    def _post(self, body: bytes, signature: str | None):
        headers = {"HTTP_X_RAZORPAY_SIGNATURE": signature} if signature else {}
        return APIClient().post(
            reverse("webhook-razorpay"), data=body, content_type="application/json", **headers
        )

    def test_bad_signature(self, queued, settings):
        """A wrong signature is a 401."""
        settings.RAZORPAY_WEBHOOK_SECRET = WEBHOOK_SECRET
        response = self._post(b"{}", "deadbeef")
        assert response.status_code == 401
        assert response.json()["error"] == "INVALID_WEBHOOK_SIGNATURE"

    def test_signed_event_is_acknowledged(self, queued, settings):
        """A correctly signed event the service ignores still returns 200."""
        settings.RAZORPAY_WEBHOOK_SECRET = WEBHOOK_SECRET
        body = json.dumps({"event": "payment_link.expired"}).encode()
        signature = hmac.new(WEBHOOK_SECRET.encode(), body, hashlib.sha256).hexdigest()

        response = self._post(body, signature)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Webhook processed"}
