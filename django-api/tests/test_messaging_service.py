"""Unit tests for MessagingService."""

from datetime import date, datetime, timedelta

import pytest
from django.utils import timezone

from events.domain import RegistrationId, RegistrationStatus, ScheduledEmailStatus
from events.domain.errors import (
    InvalidStatusError,
    NoRecipientsError,
    ScheduledEmailNotFoundError,
    ValidationFailedError,
)
from events.domain.value_objects import ScheduledEmailId
from events.services.messaging_service import MessagingService
from tests.fakes import FakeScheduledEmailStore


@pytest.fixture
def scheduled_store():
    return FakeScheduledEmailStore()


@pytest.fixture
def messaging(event_store, registration_store, scheduled_store, email_client, dispatcher):
    return MessagingService(event_store, registration_store, scheduled_store, email_client, dispatcher)


class TestImmediateSends:
    """Tests for bulk and selected sends."""

    def test_bulk_skips_cancelled(self, messaging, email_client, make_event, make_registration):
        """Bulk email reaches registered and waitlisted people only."""
        event = make_event()
        make_registration(event, "Ada")
        make_registration(event, "Bob", status=RegistrationStatus.WAITLISTED, position=1)
        make_registration(event, "Cy", status=RegistrationStatus.CANCELLED)

        result = messaging.send_bulk_email(str(event.id), "Parking", "Use gate B")

        assert result.sent == 2
        assert sorted(e.to for e in email_client.sent) == ["ada@example.com", "bob@example.com"]
        assert all(e.subject == "Parking" for e in email_client.sent)

    def test_bulk_without_recipients(self, messaging, make_event):
        """An event with nobody to email raises NoRecipientsError."""
        event = make_event()
        with pytest.raises(NoRecipientsError) as exc:
            messaging.send_bulk_email(str(event.id), "Hi", "Body")
        assert exc.value.message == "No registrations found for this event"

    def test_bulk_requires_subject(self, messaging, make_event, make_registration):
        """Blank subjects are rejected."""
        event = make_event()
        make_registration(event, "Ada")
        with pytest.raises(ValidationFailedError):
            messaging.send_bulk_email(str(event.id), " ", "Body")

    def test_bulk_reports_per_recipient_failures(self, messaging, email_client, make_event, make_registration):
        """Failed recipients are listed while the rest are sent."""
        event = make_event()
        make_registration(event, "Ada")
        make_registration(event, "Bob")
        email_client.fail_for = {"ada@example.com"}

        result = messaging.send_bulk_email(str(event.id), "Hi", "Body")

        assert result.sent == 1
        assert [f.recipient for f in result.failures] == ["ada@example.com"]

    def test_selected_ignores_other_events(self, messaging, email_client, make_event, make_registration):
        """Selected sends drop ids from other events and cancelled rows."""
        event, other = make_event(), make_event(title="Other")
        ada = make_registration(event, "Ada")
        cy = make_registration(event, "Cy", status=RegistrationStatus.CANCELLED)
        stranger = make_registration(other, "Stranger")

        result = messaging.send_to_selected(str(event.id), [str(ada.id), str(cy.id), str(stranger.id)], "Hi", "Body")

        assert result.sent == 1
        assert [e.to for e in email_client.sent] == ["ada@example.com"]

    def test_selected_with_no_valid_ids(self, messaging, make_event):
        """Ids that match nobody raise NoRecipientsError."""
        event = make_event()
        with pytest.raises(NoRecipientsError) as exc:
            messaging.send_to_selected(str(event.id), [str(RegistrationId.new())], "Hi", "Body")
        assert exc.value.message == "No valid registrations found"

    def test_selected_with_empty_list(self, messaging, make_event):
        """An empty selection is a validation error."""
        event = make_event()
        with pytest.raises(ValidationFailedError):
            messaging.send_to_selected(str(event.id), [], "Hi", "Body")


class TestScheduledEmails:
    """Tests for scheduling and processing deferred sends."""

    def test_schedule_to_everyone(self, messaging, scheduled_store, make_event):
        """Omitting registration ids targets every registrant."""
        event = make_event()
        when = timezone.now() + timedelta(hours=1)

        scheduled = messaging.schedule_email(str(event.id), "Soon", "Body", when)

        assert scheduled.status == ScheduledEmailStatus.PENDING
        assert scheduled.send_to_all is True
        assert scheduled_store.get(scheduled.id) == scheduled

    def test_schedule_naive_time_becomes_aware(self, messaging, make_event):
        """Naive datetimes are interpreted in the current timezone."""
        event = make_event()
        scheduled = messaging.schedule_email(str(event.id), "Soon", "Body", datetime(2030, 1, 1, 9, 0))
        assert timezone.is_aware(scheduled.scheduled_for)

    def test_process_due_sends_only_due_rows(self, messaging, scheduled_store, email_client, make_event, make_registration):
        """Rows in the future stay pending."""
        event = make_event()
        make_registration(event, "Ada")
        now = timezone.now()
        due = messaging.schedule_email(str(event.id), "Due", "Body", now - timedelta(minutes=1))
        later = messaging.schedule_email(str(event.id), "Later", "Body", now + timedelta(hours=1))

        report = messaging.process_due(now)

        assert (report.processed, report.sent, report.failed) == (1, 1, 0)
        sent = scheduled_store.get(due.id)
        assert sent.status == ScheduledEmailStatus.SENT
        assert sent.sent_at == now
        assert sent.email_ids == ("email-1",)
        assert scheduled_store.get(later.id).status == ScheduledEmailStatus.PENDING
        assert messaging.process_due(now).processed == 0

    def test_process_due_marks_total_failure(self, messaging, scheduled_store, email_client, make_event, make_registration):
        """A row whose every send fails ends up failed with the errors."""
        event = make_event()
        make_registration(event, "Ada")
        now = timezone.now()
        scheduled = messaging.schedule_email(str(event.id), "Due", "Body", now)
        email_client.fail_for = {"*"}

        report = messaging.process_due(now)

        assert report.failed == 1
        failed = scheduled_store.get(scheduled.id)
        assert failed.status == ScheduledEmailStatus.FAILED
        assert "ada@example.com" in failed.error

    def test_process_due_partial_failure_is_sent(self, messaging, scheduled_store, email_client, make_event, make_registration):
        """Partial failures still count as sent but keep the error text."""
        event = make_event()
        make_registration(event, "Ada")
        make_registration(event, "Bob")
        now = timezone.now()
        scheduled = messaging.schedule_email(str(event.id), "Due", "Body", now)
        email_client.fail_for = {"bob@example.com"}

        messaging.process_due(now)

        row = scheduled_store.get(scheduled.id)
        assert row.status == ScheduledEmailStatus.SENT
        assert row.error.startswith("bob@example.com")

    def test_process_due_without_recipients_fails(self, messaging, scheduled_store, make_event):
        """Nobody to email marks the row failed."""
        event = make_event()
        now = timezone.now()
        scheduled = messaging.schedule_email(str(event.id), "Due", "Body", now)

        messaging.process_due(now)

        row = scheduled_store.get(scheduled.id)
        assert row.status == ScheduledEmailStatus.FAILED
        assert row.error == "No valid registrations found"

    def test_process_due_for_selected_registrations(
        self, messaging, scheduled_store, email_client, make_event, make_registration
    ):
        """Scheduled selected sends only reach the chosen registrants."""
        event = make_event()
        ada = make_registration(event, "Ada")
        make_registration(event, "Bob")
        now = timezone.now()
        messaging.schedule_email(str(event.id), "Due", "Body", now, registration_ids=[str(ada.id)])

        messaging.process_due(now)

        assert [e.to for e in email_client.sent] == ["ada@example.com"]

    def test_cancel_scheduled(self, messaging, make_event):
        """Pending rows can be cancelled once."""
        event = make_event()
        scheduled = messaging.schedule_email(str(event.id), "Soon", "Body", timezone.now() + timedelta(hours=1))

        cancelled = messaging.cancel_scheduled(str(scheduled.id))

        assert cancelled.status == ScheduledEmailStatus.CANCELLED
        with pytest.raises(InvalidStatusError):
            messaging.cancel_scheduled(str(scheduled.id))

    def test_cancel_unknown_scheduled(self, messaging):
        """Unknown scheduled emails raise ScheduledEmailNotFoundError."""
        with pytest.raises(ScheduledEmailNotFoundError):
            messaging.cancel_scheduled(str(ScheduledEmailId.new()))


class TestProviderCalls:
    """Tests for status, cancel and reminders."""

    def test_email_status(self, messaging):
        """Status responses are passed through."""
        result = messaging.email_status("email-9")
        assert result.success is True
        assert result.data["last_event"] == "delivered"

    def test_cancel_email_failure_is_a_result(self, messaging, email_client):
        """Provider errors come back as an unsuccessful result."""
        email_client.fail_for = {"*"}
        result = messaging.cancel_email("email-9")
        assert result.success is False
        assert result.error == "cannot cancel"

    def test_reminders_for_tomorrow(self, messaging, dispatcher, make_event, make_registration):
        """Registered attendees of tomorrow's events get a reminder."""
        tomorrow = make_event(title="Tomorrow", date="2030-01-16T18:00")
        later = make_event(title="Later", date="2030-01-20")
        make_registration(tomorrow, "Ada")
        make_registration(tomorrow, "Bob", status=RegistrationStatus.WAITLISTED, position=1)
        make_registration(later, "Cy")

        queued = messaging.send_event_reminders(date(2030, 1, 15))

        assert queued == 1
        assert dispatcher.recipients() == ["ada@example.com"]
        assert dispatcher.subjects == ["Reminder: Tomorrow is tomorrow!"]


class TestOverlappingRuns:
    """Scheduled rows are claimed before sending."""

    def _during_first_send(self, monkeypatch, email_client, action):
        send = email_client.send
        outcomes = []

        def send_and_interleave(email):
            if not outcomes:
                outcomes.append(action())
            return send(email)

        monkeypatch.setattr(email_client, "send", send_and_interleave)
        return outcomes

    def test_second_run_skips_claimed_rows(
        self, monkeypatch, messaging, scheduled_store, email_client, make_event, make_registration
    ):
        """A run that starts while another is sending sends nothing again."""
        event = make_event()
        make_registration(event, "Ada")
        now = timezone.now()
        scheduled = messaging.schedule_email(str(event.id), "Due", "Body", now)
        outcomes = self._during_first_send(monkeypatch, email_client, lambda: messaging.process_due(now))

        messaging.process_due(now)

        assert outcomes[0].processed == 0
        assert [e.to for e in email_client.sent] == ["ada@example.com"]
        assert scheduled_store.get(scheduled.id).status == ScheduledEmailStatus.SENT

    def test_cancel_during_run_is_refused(
        self, monkeypatch, messaging, scheduled_store, email_client, make_event, make_registration
    ):
        """A row being sent can no longer be cancelled."""
        event = make_event()
        make_registration(event, "Ada")
        now = timezone.now()
        scheduled = messaging.schedule_email(str(event.id), "Due", "Body", now)

        def cancel():
            with pytest.raises(InvalidStatusError):
                messaging.cancel_scheduled(str(scheduled.id))
            return scheduled_store.get(scheduled.id).status

        outcomes = self._during_first_send(monkeypatch, email_client, cancel)

        messaging.process_due(now)

        assert outcomes == [ScheduledEmailStatus.PROCESSING]
        assert scheduled_store.get(scheduled.id).status == ScheduledEmailStatus.SENT
