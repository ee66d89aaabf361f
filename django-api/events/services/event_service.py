"""Event service - all business logic lives here.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

from dataclasses import dataclass, field, replace

import structlog
from django.utils import timezone

from events.domain import Event, EventId, ParticipantLimit, Registration, RegistrationStatus
from events.domain.errors import NotAuthorizedError, ValidationFailedError
from events.services.common import load_event, parse_id, require_text
from events.services.registration_service import RegistrationService
from events.stores.interfaces import EventStore, RegistrationStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class EventDraft:
    """Organizer-editable event fields."""

    title: str
    date: str
    description: str | None = None
    location: str | None = None
    header_image: str | None = None
    participant_limit: int | None = None


@dataclass(frozen=True)
class EventUpdateResult:
    """Outcome of an event edit.

    A limit decrease below the registered count is not applied until the
    caller confirms it; in that case ``warning`` is set and nothing changed.
    """

    success: bool
    event: Event | None = None
    warning: bool = False
    message: str | None = None
    current_registered_count: int | None = None
    new_limit: int | None = None
    promoted: list[Registration] = field(default_factory=list)
    demoted: list[Registration] = field(default_factory=list)


def _limit(value: int | None) -> ParticipantLimit | None:
    if value is None:
        return None
    try:
        return ParticipantLimit(value)
    except ValueError as e:
        raise ValidationFailedError(str(e)) from None


class EventService:
    """Service for event catalog operations."""

    def __init__(
        self,
        store: EventStore,
        registrations: RegistrationStore,
        registration_service: RegistrationService,
    ) -> None:
        self._store = store
        self._registrations = registrations
        self._registration_service = registration_service

    def list_events(self) -> list[Event]:
        """Return all events, newest first."""
        return self._store.list_events()

    def list_events_for_owner(self, owner_email: str) -> list[Event]:
        return self._store.list_events_by_owner(owner_email)

    def get_event(self, event_id: str) -> Event:
        """Return an event by ID.

        Raises:
            InvalidIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        return load_event(self._store, parse_id(EventId, event_id, "event"))

    def require_owner(self, event_id: str, user_email: str, action: str = "manage") -> Event:
        """Return the event if ``user_email`` created it.

        Raises:
            NotAuthorizedError: If someone else owns the event.
        """
        event = self.get_event(event_id)
        if event.created_by != user_email:
            raise NotAuthorizedError(action)
        return event

    def create_event(self, draft: EventDraft, owner_email: str) -> Event:
        now = timezone.now()
        event = Event(
            id=EventId.new(),
            title=require_text(draft.title, "Title"),
            date=require_text(draft.date, "Date"),
            description=draft.description,
            location=draft.location,
            header_image=draft.header_image,
            participant_limit=_limit(draft.participant_limit),
            created_by=owner_email,
            created_at=now,
            updated_at=now,
        )
        self._store.save_event(event)
        logger.info("event_created", event_id=str(event.id), created_by=owner_email)
        return event

    def update_event(
        self,
        event_id: str,
        draft: EventDraft,
        user_email: str,
        confirmed_limit_decrease: bool = False,
    ) -> EventUpdateResult:
        """Apply an organizer edit and reconcile the waitlist with the new limit.

        Raising or removing the limit promotes from the waitlist head. Lowering
        it below the registered count demotes the newest participants, but
        only once the caller confirms.
        """
        eid = parse_id(EventId, event_id, "event")
        event = load_event(self._store, eid, lock=True)
        if event.created_by != user_email:
            raise NotAuthorizedError("update")

        new_limit = _limit(draft.participant_limit)
        registered_count = self._registrations.count_by_status(eid, RegistrationStatus.REGISTERED)
        old_value = event.participant_limit.value if event.participant_limit else None
        new_value = new_limit.value if new_limit else None
        limit_increased = (new_value is None and old_value is not None) or (
            new_value is not None and old_value is not None and new_value > old_value
        )
        limit_decreased = new_value is not None and new_value < registered_count

        if limit_decreased and not confirmed_limit_decrease:
            logger.info(
                "event_limit_decrease_needs_confirmation",
                event_id=event_id,
                new_limit=new_value,
                registered=registered_count,
            )
            return EventUpdateResult(
                success=False,
                warning=True,
                message=(
                    f"The new participant limit ({new_value}) is less than the current number of "
                    f"registered participants ({registered_count}). Some participants will need to be "
                    "moved to the waitlist to continue."
                ),
                current_registered_count=registered_count,
                new_limit=new_value,
            )

        updated = replace(
            event,
            title=require_text(draft.title, "Title"),
            date=require_text(draft.date, "Date"),
            description=draft.description,
            location=draft.location,
            header_image=draft.header_image,
            participant_limit=new_limit,
            updated_at=timezone.now(),
        )
        self._store.save_event(updated)

        demoted: list[Registration] = []
        promoted: list[Registration] = []
        if limit_decreased:
            demoted = self._registration_service.demote_excess(updated)
        elif limit_increased:
            promoted = self._registration_service.promote_after_limit_increase(updated).promoted

        logger.info(
            "event_updated",
            event_id=event_id,
            participant_limit=new_value,
            promoted=len(promoted),
            demoted=len(demoted),
        )
        return EventUpdateResult(success=True, event=updated, promoted=promoted, demoted=demoted)

    def delete_event(self, event_id: str, user_email: str) -> None:
        event = self.require_owner(event_id, user_email, action="delete")
        self._store.delete_event(event.id)
        logger.info("event_deleted", event_id=event_id, deleted_by=user_email)

    def toggle_registration(self, event_id: str, user_email: str) -> bool:
        """Flip the registration-closed flag and return its new value."""
        eid = parse_id(EventId, event_id, "event")
        event = load_event(self._store, eid, lock=True)
        if event.created_by != user_email:
            raise NotAuthorizedError("update")
        updated = replace(event, registration_closed=not event.registration_closed, updated_at=timezone.now())
        self._store.save_event(updated)
        logger.info("event_registration_toggled", event_id=event_id, registration_closed=updated.registration_closed)
        return updated.registration_closed
