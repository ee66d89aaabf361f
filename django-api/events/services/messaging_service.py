"""Organizer messages to registrants: immediate, selected and scheduled sends.

Scheduled rows are picked up by a periodic task. Each due row is attempted
once and ends up sent or failed; nothing is retried.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Any

import structlog
from django.utils import timezone

from events.domain import (
    Event,
    EventId,
    Registration,
    RegistrationId,
    RegistrationStatus,
    ScheduledEmail,
    ScheduledEmailId,
    ScheduledEmailStatus,
)
from events.domain.errors import (
    InvalidStatusError,
    NoRecipientsError,
    ScheduledEmailNotFoundError,
    ValidationFailedError,
)
from events.integrations.email import EmailClient, EmailDeliveryError
from events.services import emails
from events.services.common import load_event, parse_id, require_text
from events.services.delivery import BulkSendResult, deliver_all
from events.services.dispatch import EmailDispatcher
from events.stores.interfaces import EventStore, RegistrationStore, ScheduledEmailStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ProviderResult:
    """Response of a status or cancel call to the email API."""

    success: bool
    data: dict[str, Any] | None = None
    error: str | None = None


@dataclass(frozen=True)
class ProcessingReport:
    processed: int
    sent: int
    failed: int


class MessagingService:
    def __init__(
        self,
        events: EventStore,
        registrations: RegistrationStore,
        scheduled: ScheduledEmailStore,
        email_client: EmailClient,
        dispatcher: EmailDispatcher,
        bulk_limit: int = 500,
    ) -> None:
        self._events = events
        self._registrations = registrations
        self._scheduled = scheduled
        self._email_client = email_client
        self._dispatcher = dispatcher
        self._bulk_limit = bulk_limit

    def send_bulk_email(self, event_id: str, subject: str, content: str) -> BulkSendResult:
        """Email every registrant that has not cancelled.

        Raises:
            NoRecipientsError: If the event has no such registrants.
        """
        eid = parse_id(EventId, event_id, "event")
        event = load_event(self._events, eid)
        subject = require_text(subject, "Subject")
        content = require_text(content, "Content")
        recipients = self._active_registrations(eid)
        if not recipients:
            raise NoRecipientsError()
        result = self._send(event, recipients, subject, content)
        logger.info("bulk_email_sent", event_id=event_id, sent=result.sent, errors=result.error_count)
        return result

    def send_to_selected(
        self,
        event_id: str,
        registration_ids: list[str],
        subject: str,
        content: str,
    ) -> BulkSendResult:
        eid = parse_id(EventId, event_id, "event")
        event = load_event(self._events, eid)
        subject = require_text(subject, "Subject")
        content = require_text(content, "Content")
        if not registration_ids:
            raise ValidationFailedError("No registrations selected")
        ids = [parse_id(RegistrationId, r, "registration") for r in registration_ids]
        recipients = self._resolve(eid, ids)
        if not recipients:
            raise NoRecipientsError("No valid registrations found")
        result = self._send(event, recipients, subject, content)
        logger.info("selected_email_sent", event_id=event_id, sent=result.sent, errors=result.error_count)
        return result

    def schedule_email(
        self,
        event_id: str,
        subject: str,
        content: str,
        scheduled_for: datetime,
        registration_ids: list[str] | None = None,
    ) -> ScheduledEmail:
        """Queue a message for later; ``registration_ids=None`` targets every registrant."""
        eid = parse_id(EventId, event_id, "event")
        load_event(self._events, eid)
        if timezone.is_naive(scheduled_for):
            scheduled_for = timezone.make_aware(scheduled_for)
        if registration_ids is not None and not registration_ids:
            raise ValidationFailedError("No registrations selected")
        scheduled = ScheduledEmail(
            id=ScheduledEmailId.new(),
            event_id=eid,
            subject=require_text(subject, "Subject"),
            content=require_text(content, "Content"),
            scheduled_for=scheduled_for,
            status=ScheduledEmailStatus.PENDING,
            created_at=timezone.now(),
            registration_ids=tuple(parse_id(RegistrationId, r, "registration") for r in registration_ids or ()),
            send_to_all=registration_ids is None,
        )
        self._scheduled.save(scheduled)
        logger.info(
            "email_scheduled",
            event_id=event_id,
            scheduled_email_id=str(scheduled.id),
            scheduled_for=scheduled_for.isoformat(),
        )
        return scheduled

    def list_scheduled(self, event_id: str) -> list[ScheduledEmail]:
        return self._scheduled.list_for_event(parse_id(EventId, event_id, "event"))

    def get_scheduled(self, scheduled_email_id: str) -> ScheduledEmail:
        scheduled = self._scheduled.get(parse_id(ScheduledEmailId, scheduled_email_id, "scheduled email"))
        if scheduled is None:
            raise ScheduledEmailNotFoundError(scheduled_email_id)
        return scheduled

    def cancel_scheduled(self, scheduled_email_id: str) -> ScheduledEmail:
        scheduled = self.get_scheduled(scheduled_email_id)
        if scheduled.status != ScheduledEmailStatus.PENDING:
            raise InvalidStatusError("Cannot cancel email that has already been sent or failed")
        cancelled = replace(scheduled, status=ScheduledEmailStatus.CANCELLED)
        if not self._scheduled.save_if_status(cancelled, ScheduledEmailStatus.PENDING):
            raise InvalidStatusError("Cannot cancel email that is already being sent")
        logger.info("scheduled_email_cancelled", scheduled_email_id=scheduled_email_id)
        return cancelled

    def process_due(self, now: datetime) -> ProcessingReport:
        """Send every pending row scheduled at or before ``now``, once.

        Rows are claimed before sending, so overlapping runs never pick up the
        same row and a claimed row can no longer be cancelled.
        """
        due = self._scheduled.claim_due(now, self._bulk_limit)
        sent = failed = 0
        for scheduled in due:
            outcome = self._dispatch_scheduled(scheduled, now)
            if outcome.status == ScheduledEmailStatus.SENT:
                sent += 1
            else:
                failed += 1
        if due:
            logger.info("scheduled_emails_processed", processed=len(due), sent=sent, failed=failed)
        return ProcessingReport(processed=len(due), sent=sent, failed=failed)

    def email_status(self, email_id: str) -> ProviderResult:
        try:
            return ProviderResult(success=True, data=self._email_client.status(email_id))
        except EmailDeliveryError as e:
            return ProviderResult(success=False, error=str(e))

    def cancel_email(self, email_id: str) -> ProviderResult:
        try:
            data = self._email_client.cancel(email_id)
        except EmailDeliveryError as e:
            logger.warning("email_cancel_failed", email_id=email_id, error=str(e))
            return ProviderResult(success=False, error=str(e))
        logger.info("email_cancelled", email_id=email_id)
        return ProviderResult(success=True, data=data)

    def send_event_reminders(self, today: date) -> int:
        """Queue reminders for registered attendees of events happening tomorrow."""
        tomorrow = (today + timedelta(days=1)).isoformat()
        queued = 0
        for event in self._events.list_events_on_date(tomorrow):
            attendees = self._registrations.list_by_status(event.id, RegistrationStatus.REGISTERED)
            for registration in attendees[: self._bulk_limit]:
                self._dispatcher.enqueue(emails.event_reminder(event, registration))
                queued += 1
        logger.info("event_reminders_queued", date=tomorrow, queued=queued)
        return queued

    def _dispatch_scheduled(self, scheduled: ScheduledEmail, now: datetime) -> ScheduledEmail:
        event = self._events.get_event(scheduled.event_id)
        if event is None:
            return self._finish(scheduled, ScheduledEmailStatus.FAILED, error="Event not found")

        if scheduled.send_to_all:
            recipients = self._active_registrations(scheduled.event_id)
        else:
            recipients = self._resolve(scheduled.event_id, list(scheduled.registration_ids))
        if not recipients:
            return self._finish(scheduled, ScheduledEmailStatus.FAILED, error="No valid registrations found")

        result = self._send(event, recipients, scheduled.subject, scheduled.content)
        error = "; ".join(f"{f.recipient}: {f.error}" for f in result.failures) or None
        if not result.email_ids:
            return self._finish(scheduled, ScheduledEmailStatus.FAILED, error=error)
        return self._finish(
            scheduled,
            ScheduledEmailStatus.SENT,
            sent_at=now,
            email_ids=tuple(result.email_ids),
            error=error,
        )

    def _finish(self, scheduled: ScheduledEmail, status: ScheduledEmailStatus, **changes) -> ScheduledEmail:
        finished = replace(scheduled, status=status, **changes)
        if not self._scheduled.save_if_status(finished, ScheduledEmailStatus.PROCESSING):
            logger.warning("scheduled_email_claim_lost", scheduled_email_id=str(scheduled.id))
            return finished
        if status == ScheduledEmailStatus.FAILED:
            logger.warning("scheduled_email_failed", scheduled_email_id=str(scheduled.id), error=finished.error)
        return finished

    def _send(self, event: Event, recipients: list[Registration], subject: str, content: str) -> BulkSendResult:
        messages = [(str(r.id), emails.event_message(event, r, subject, content)) for r in recipients]
        return deliver_all(self._email_client, messages, self._bulk_limit)

    def _active_registrations(self, event_id: EventId) -> list[Registration]:
        return [r for r in self._registrations.list_for_event(event_id) if r.is_active]

    def _resolve(self, event_id: EventId, registration_ids: list[RegistrationId]) -> list[Registration]:
        found = (self._registrations.get(rid) for rid in registration_ids)
        return [r for r in found if r is not None and r.event_id == event_id and r.is_active]
