"""Event update announcements: draft, publish, send."""

from dataclasses import dataclass, replace

import structlog
from django.utils import timezone

from events.domain import EventId, Update, UpdateId, UpdateStatus
from events.domain.errors import UpdateNotFoundError, ValidationFailedError
from events.integrations.email import EmailClient
from events.services import emails
from events.services.common import load_event, parse_id, require_text
from events.services.delivery import deliver_all
from events.stores.interfaces import EventStore, RegistrationStore, UpdateStore

logger = structlog.get_logger(__name__)

EDITABLE_STATUSES = (UpdateStatus.DRAFT, UpdateStatus.PUBLISHED, UpdateStatus.SENT)


@dataclass(frozen=True)
class UpdateStats:
    total: int
    draft: int
    published: int
    sent: int
    failed: int


class UpdateService:
    def __init__(
        self,
        events: EventStore,
        registrations: RegistrationStore,
        updates: UpdateStore,
        email_client: EmailClient,
        bulk_limit: int = 500,
    ) -> None:
        self._events = events
        self._registrations = registrations
        self._updates = updates
        self._email_client = email_client
        self._bulk_limit = bulk_limit

    def create_update(self, event_id: str, title: str, content: str, created_by: str) -> Update:
        eid = parse_id(EventId, event_id, "event")
        load_event(self._events, eid)
        update = Update(
            id=UpdateId.new(),
            event_id=eid,
            title=require_text(title, "Title"),
            content=require_text(content, "Content"),
            status=UpdateStatus.DRAFT,
            created_by=created_by,
            created_at=timezone.now(),
        )
        self._updates.save(update)
        logger.info("update_created", event_id=event_id, update_id=str(update.id))
        return update

    def get_update(self, update_id: str) -> Update:
        update = self._updates.get(parse_id(UpdateId, update_id, "update"))
        if update is None:
            raise UpdateNotFoundError(update_id)
        return update

    def list_updates(self, event_id: str) -> list[Update]:
        return self._updates.list_for_event(parse_id(EventId, event_id, "event"))

    def list_updates_by_author(self, created_by: str) -> list[Update]:
        return self._updates.list_by_author(created_by)

    def edit_update(
        self,
        update_id: str,
        title: str | None = None,
        content: str | None = None,
        status: UpdateStatus | None = None,
    ) -> Update:
        """Edit fields of an update; moving it to published stamps ``published_at``."""
        update = self.get_update(update_id)
        changes = {}
        if title is not None:
            changes["title"] = require_text(title, "Title")
        if content is not None:
            changes["content"] = require_text(content, "Content")
        if status is not None:
            if status not in EDITABLE_STATUSES:
                raise ValidationFailedError(f"Status cannot be set to {status.value}")
            changes["status"] = status
            if status == UpdateStatus.PUBLISHED:
                changes["published_at"] = timezone.now()
        edited = replace(update, **changes)
        self._updates.save(edited)
        return edited

    def delete_update(self, update_id: str) -> None:
        update = self.get_update(update_id)
        self._updates.delete(update.id)
        logger.info("update_deleted", update_id=update_id)

    def send_update(self, update_id: str) -> Update:
        """Email the update to every registrant that has not cancelled.

        The update ends up ``sent`` with the provider ids, or ``failed`` with
        the reason.
        """
        update = self.get_update(update_id)
        event = load_event(self._events, update.event_id)
        recipients = [r for r in self._registrations.list_for_event(update.event_id) if r.is_active]
        if not recipients:
            return self._finish(update, UpdateStatus.FAILED, error="No registrations found for this event")

        messages = [(str(r.id), emails.event_update(event, r, update.title, update.content)) for r in recipients]
        result = deliver_all(self._email_client, messages, self._bulk_limit)
        error = "; ".join(f"{f.recipient}: {f.error}" for f in result.failures) or None
        if not result.email_ids:
            return self._finish(update, UpdateStatus.FAILED, error=error)
        return self._finish(
            update,
            UpdateStatus.SENT,
            sent_at=timezone.now(),
            email_ids=tuple(result.email_ids),
            error=error,
        )

    def publish_and_send(self, update_id: str) -> Update:
        self.edit_update(update_id, status=UpdateStatus.PUBLISHED)
        return self.send_update(update_id)

    def update_stats(self, event_id: str) -> UpdateStats:
        updates = self.list_updates(event_id)
        return UpdateStats(
            total=len(updates),
            draft=sum(1 for u in updates if u.status == UpdateStatus.DRAFT),
            published=sum(1 for u in updates if u.status == UpdateStatus.PUBLISHED),
            sent=sum(1 for u in updates if u.status == UpdateStatus.SENT),
            failed=sum(1 for u in updates if u.status == UpdateStatus.FAILED),
        )

    def _finish(self, update: Update, status: UpdateStatus, **changes) -> Update:
        finished = replace(update, status=status, **changes)
        self._updates.save(finished)
        log = logger.warning if status == UpdateStatus.FAILED else logger.info
        log("update_send_finished", update_id=str(update.id), status=status.value, error=finished.error)
        return finished
