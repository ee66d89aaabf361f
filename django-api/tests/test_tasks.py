"""Tests for celery tasks and the deferred email dispatcher."""

from datetime import timedelta

import pytest
from django.utils import timezone
from freezegun import freeze_time

from events import deps, tasks
from events.domain import ScheduledEmailStatus
from events.integrations.email import OutboundEmail
from events.services.dispatch import CeleryEmailDispatcher
from events.services.messaging_service import MessagingService
from tests.fakes import FakeScheduledEmailStore


@pytest.fixture
def scheduled_store():
    return FakeScheduledEmailStore()


@pytest.fixture
def patched_messaging(monkeypatch, event_store, registration_store, scheduled_store, email_client, dispatcher):
    service = MessagingService(event_store, registration_store, scheduled_store, email_client, dispatcher)
    monkeypatch.setattr(deps, "messaging_service", lambda: service)
    return service


class TestSendEmailTask:
    """Tests for send_email."""

    def test_delivers_payload(self, monkeypatch, email_client):
        """The task rebuilds the email and returns the provider id."""
        monkeypatch.setattr(deps, "email_client", lambda: email_client)
        payload = OutboundEmail(to="ada@example.com", subject="Hi", html="<p>Hi</p>").to_payload()

        assert tasks.send_email(payload) == "email-1"
        assert email_client.sent[0].subject == "Hi"

    def test_failure_is_dropped(self, monkeypatch, email_client):
        """Delivery failures return None instead of raising."""
        email_client.fail_for = {"*"}
        monkeypatch.setattr(deps, "email_client", lambda: email_client)
        payload = OutboundEmail(to="ada@example.com", subject="Hi", html="x").to_payload()

        assert tasks.send_email(payload) is None


class TestPeriodicTasks:
    """Tests for the beat-driven tasks."""

    def test_process_scheduled_emails(self, patched_messaging, scheduled_store, make_event, make_registration):
        """Due rows are sent and the report is returned as a dict."""
        event = make_event()
        make_registration(event, "Ada")
        with freeze_time("2030-01-10 09:00:00"):
            scheduled = patched_messaging.schedule_email(
                str(event.id), "Doors open", "Body", timezone.now() - timedelta(minutes=5)
            )
            report = tasks.process_scheduled_emails()

        assert report == {"processed": 1, "sent": 1, "failed": 0}
        assert scheduled_store.get(scheduled.id).status == ScheduledEmailStatus.SENT

    @pytest.mark.django_db
    def test_send_event_reminders(self, patched_messaging, dispatcher, make_event, make_registration):
        """Reminders go out for events dated tomorrow."""
        event = make_event(date="2030-01-11")
        make_registration(event, "Ada")
        with freeze_time("2030-01-10 09:00:00"):
            queued = tasks.send_event_reminders()

        assert queued == 1
        assert dispatcher.recipients() == ["ada@example.com"]


@pytest.mark.django_db
class TestCeleryEmailDispatcher:
    """Tests for CeleryEmailDispatcher."""

    def test_enqueues_after_commit(self, monkeypatch, django_capture_on_commit_callbacks):
        """The task is only queued once the transaction commits."""
        queued = []
        monkeypatch.setattr(tasks.send_email, "delay", queued.append)
        email = OutboundEmail(to="ada@example.com", subject="Hi", html="x")

        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            CeleryEmailDispatcher().enqueue(email)
            assert queued == []

        assert len(callbacks) == 1
        assert queued == [email.to_payload()]
