"""Unit tests for UpdateService."""

import pytest

from events.domain import RegistrationStatus, UpdateStatus
from events.domain.errors import UpdateNotFoundError, ValidationFailedError
from events.domain.value_objects import UpdateId
from events.services.update_service import UpdateService
from tests.fakes import ORGANIZER, FakeUpdateStore


@pytest.fixture
def update_store():
    return FakeUpdateStore()


@pytest.fixture
def updates(event_store, registration_store, update_store, email_client):
    return UpdateService(event_store, registration_store, update_store, email_client)


class TestUpdateService:
    """Tests for update drafting and delivery."""

    def test_create_starts_as_draft(self, updates, make_event):
        """New updates are drafts owned by their author."""
        event = make_event()
        update = updates.create_update(str(event.id), "Venue change", "Room 4", ORGANIZER)
        assert update.status == UpdateStatus.DRAFT
        assert updates.list_updates_by_author(ORGANIZER) == [update]

    def test_create_requires_title(self, updates, make_event):
        """Blank titles are rejected."""
        event = make_event()
        with pytest.raises(ValidationFailedError):
            updates.create_update(str(event.id), "", "Room 4", ORGANIZER)

    def test_edit_to_published_stamps_time(self, updates, make_event):
        """Publishing sets published_at and leaves other fields alone."""
        event = make_event()
        update = updates.create_update(str(event.id), "Venue change", "Room 4", ORGANIZER)

        edited = updates.edit_update(str(update.id), status=UpdateStatus.PUBLISHED)

        assert edited.status == UpdateStatus.PUBLISHED
        assert edited.published_at is not None
        assert edited.title == "Venue change"

    def test_edit_cannot_set_failed(self, updates, make_event):
        """Failed is reserved for delivery outcomes."""
        event = make_event()
        update = updates.create_update(str(event.id), "Venue change", "Room 4", ORGANIZER)
        with pytest.raises(ValidationFailedError):
            updates.edit_update(str(update.id), status=UpdateStatus.FAILED)

    def test_send_reaches_active_registrants(self, updates, email_client, make_event, make_registration):
        """Sending emails every non-cancelled registrant and records the ids."""
        event = make_event()
        make_registration(event, "Ada")
        make_registration(event, "Bob", status=RegistrationStatus.CANCELLED)
        update = updates.create_update(str(event.id), "Venue change", "Room 4", ORGANIZER)

        sent = updates.send_update(str(update.id))

        assert sent.status == UpdateStatus.SENT
        assert sent.email_ids == ("email-1",)
        assert sent.sent_at is not None
        assert [e.subject for e in email_client.sent] == ["Event Update: Venue change"]

    def test_send_without_registrants_fails(self, updates, make_event):
        """An update with nobody to reach ends up failed."""
        event = make_event()
        update = updates.create_update(str(event.id), "Venue change", "Room 4", ORGANIZER)

        sent = updates.send_update(str(update.id))

        assert sent.status == UpdateStatus.FAILED
        assert sent.error == "No registrations found for this event"

    def test_send_when_provider_rejects_everything(self, updates, email_client, make_event, make_registration):
        """Total provider failure marks the update failed."""
        event = make_event()
        make_registration(event, "Ada")
        update = updates.create_update(str(event.id), "Venue change", "Room 4", ORGANIZER)
        email_client.fail_for = {"*"}

        assert updates.send_update(str(update.id)).status == UpdateStatus.FAILED

    def test_publish_and_send(self, updates, make_event, make_registration):
        """publish_and_send stamps publication and delivers."""
        event = make_event()
        make_registration(event, "Ada")
        update = updates.create_update(str(event.id), "Venue change", "Room 4", ORGANIZER)

        result = updates.publish_and_send(str(update.id))

        assert result.status == UpdateStatus.SENT
        assert result.published_at is not None

    def test_stats(self, updates, make_event, make_registration):
        """Stats count updates per status."""
        event = make_event()
        make_registration(event, "Ada")
        updates.create_update(str(event.id), "One", "Body", ORGANIZER)
        second = updates.create_update(str(event.id), "Two", "Body", ORGANIZER)
        updates.send_update(str(second.id))

        stats = updates.update_stats(str(event.id))

        assert (stats.total, stats.draft, stats.sent, stats.failed) == (2, 1, 1, 0)

    def test_delete_unknown(self, updates):
        """Deleting a missing update raises UpdateNotFoundError."""
        with pytest.raises(UpdateNotFoundError):
            updates.delete_update(str(UpdateId.new()))
