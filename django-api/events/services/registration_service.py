"""Registration lifecycle and waitlist reconciliation.

State changes happen while the event row is locked, so capacity checks for
one event never interleave. Callers own the surrounding transaction.
Notification emails go through the dispatcher and never affect the state
that was written.
"""

from collections.abc import Callable
from dataclasses import dataclass, field, replace

import structlog
from django.utils import timezone

from events.domain import (
    Event,
    EventId,
    Registration,
    RegistrationId,
    RegistrationStatus,
)
from events.domain.errors import (
    AlreadyRegisteredError,
    EventAtCapacityError,
    InvalidStatusError,
    NoParticipantLimitError,
    RegistrationClosedError,
    RegistrationNotFoundError,
)
from events.integrations.email import OutboundEmail
from events.services import emails, waitlist
from events.services.common import load_event, parse_id, require_text
from events.services.dispatch import EmailDispatcher
from events.stores.interfaces import EventStore, RegistrationStore

logger = structlog.get_logger(__name__)

Compose = Callable[[Event, Registration], OutboundEmail]


@dataclass(frozen=True)
class RegistrationCounts:
    registered: int
    waitlisted: int
    cancelled: int

    @property
    def total(self) -> int:
        return self.registered + self.waitlisted + self.cancelled


@dataclass(frozen=True)
class PromotionResult:
    """Outcome of a bulk promotion pass."""

    promoted: list[Registration] = field(default_factory=list)
    truncated: bool = False

    @property
    def count(self) -> int:
        return len(self.promoted)


@dataclass(frozen=True)
class CancellationResult:
    registration: Registration
    promoted: Registration | None = None


class RegistrationService:
    """Service for attendee registrations and the waitlist."""

    def __init__(
        self,
        events: EventStore,
        registrations: RegistrationStore,
        dispatcher: EmailDispatcher,
        bulk_limit: int = 500,
    ) -> None:
        self._events = events
        self._registrations = registrations
        self._dispatcher = dispatcher
        self._bulk_limit = bulk_limit

    def register(self, event_id: str, name: str, email: str) -> Registration:
        """Register an attendee, placing them on the waitlist when full.

        Raises:
            InvalidIdError: If the event_id is malformed.
            EventNotFoundError: If the event does not exist.
            RegistrationClosedError: If the organizer closed registration.
            AlreadyRegisteredError: If the email already holds a live registration.
        """
        eid = parse_id(EventId, event_id, "event")
        name = require_text(name, "Name")
        email = require_text(email, "Email")
        event = load_event(self._events, eid, lock=True)
        if event.registration_closed:
            raise RegistrationClosedError()
        if self._registrations.find_active(eid, email) is not None:
            raise AlreadyRegisteredError()

        pending = Registration(
            id=RegistrationId.new(),
            event_id=eid,
            name=name,
            email=email,
            status=RegistrationStatus.REGISTERED,
            registered_at=timezone.now(),
        )
        registration = self._admit(event, pending)
        logger.info(
            "registration_created",
            event_id=str(eid),
            registration_id=str(registration.id),
            status=registration.status.value,
            waitlist_position=registration.waitlist_position,
        )
        return registration

    def is_registered(self, event_id: str, email: str) -> bool:
        eid = parse_id(EventId, event_id, "event")
        return self._registrations.find_active(eid, email.strip()) is not None

    def get_registration(self, registration_id: str) -> Registration:
        rid = parse_id(RegistrationId, registration_id, "registration")
        registration = self._registrations.get(rid)
        if registration is None:
            raise RegistrationNotFoundError(registration_id)
        return registration

    def list_registrations(self, event_id: str) -> list[Registration]:
        """Return every registration of an event, newest first."""
        eid = parse_id(EventId, event_id, "event")
        return self._registrations.list_for_event(eid)

    def list_all_registrations(self) -> list[Registration]:
        return self._registrations.list_all()

    def count_registrations(self, event_id: str) -> RegistrationCounts:
        eid = parse_id(EventId, event_id, "event")
        return RegistrationCounts(
            registered=self._registrations.count_by_status(eid, RegistrationStatus.REGISTERED),
            waitlisted=self._registrations.count_by_status(eid, RegistrationStatus.WAITLISTED),
            cancelled=self._registrations.count_by_status(eid, RegistrationStatus.CANCELLED),
        )

    def get_waitlist(self, event_id: str) -> list[Registration]:
        """Return waitlisted registrations, head of the queue first."""
        eid = parse_id(EventId, event_id, "event")
        return waitlist.queue_order(self._registrations.list_by_status(eid, RegistrationStatus.WAITLISTED))

    def cancel(self, registration_id: str) -> CancellationResult:
        """Cancel a registration.

        Freeing a registered slot promotes the head of the waitlist. Cancelling
        a waitlisted registration leaves the remaining positions untouched.
        """
        event, registration = self._lock_registration(registration_id)
        if registration.status == RegistrationStatus.CANCELLED:
            raise InvalidStatusError("Registration is already cancelled")

        was_registered = registration.status == RegistrationStatus.REGISTERED
        cancelled = replace(registration, status=RegistrationStatus.CANCELLED, waitlist_position=None)
        self._registrations.save(cancelled)
        logger.info(
            "registration_cancelled",
            event_id=str(event.id),
            registration_id=str(registration.id),
            was_registered=was_registered,
        )

        promoted = None
        if was_registered:
            result = self._fill(event, cap=1, compose=emails.waitlist_promotion)
            promoted = result.promoted[0] if result.promoted else None
        return CancellationResult(registration=cancelled, promoted=promoted)

    def restore(self, registration_id: str) -> Registration:
        """Bring a cancelled registration back as if it registered again."""
        event, registration = self._lock_registration(registration_id)
        if registration.status != RegistrationStatus.CANCELLED:
            raise InvalidStatusError("Only cancelled registrations can be restored")
        if self._registrations.find_active(event.id, registration.email) is not None:
            raise AlreadyRegisteredError()

        restored = self._admit(event, registration)
        logger.info(
            "registration_restored",
            event_id=str(event.id),
            registration_id=str(restored.id),
            status=restored.status.value,
        )
        return restored

    def promote(self, registration_id: str) -> Registration:
        """Move one waitlisted registration onto the participant list.

        Raises:
            InvalidStatusError: If the registration is not waitlisted.
            EventAtCapacityError: If the event has no free slot.
        """
        event, registration = self._lock_registration(registration_id)
        if registration.status != RegistrationStatus.WAITLISTED:
            raise InvalidStatusError("Only waitlisted registrations can be promoted")
        registered_count = self._registrations.count_by_status(event.id, RegistrationStatus.REGISTERED)
        if not event.has_room(registered_count):
            raise EventAtCapacityError()

        waitlisted = self._registrations.list_by_status(event.id, RegistrationStatus.WAITLISTED)
        remaining = [r for r in waitlisted if r.id != registration.id]
        promoted = waitlist.promote(registration)
        self._registrations.save_many([promoted, *waitlist.changed(remaining, waitlist.renumber(remaining))])
        self._dispatcher.enqueue(emails.waitlist_promotion(event, promoted))
        logger.info("registration_promoted", event_id=str(event.id), registration_id=str(promoted.id))
        return promoted

    def promote_till_limit(self, event_id: str) -> PromotionResult:
        """Promote from the waitlist head until the event is full."""
        eid = parse_id(EventId, event_id, "event")
        event = load_event(self._events, eid, lock=True)
        if event.participant_limit is None:
            raise NoParticipantLimitError()
        result = self._fill(event, cap=self._bulk_limit, compose=emails.waitlist_promotion)
        logger.info("waitlist_bulk_promoted", event_id=event_id, promoted=result.count, truncated=result.truncated)
        return result

    def promote_after_limit_increase(self, event: Event) -> PromotionResult:
        """Fill the slots opened by a raised or removed limit.

        ``event`` must already hold the new limit and be locked by the caller.
        """
        new_limit = event.participant_limit.value if event.participant_limit else None
        result = self._fill(
            event,
            cap=self._bulk_limit,
            compose=lambda e, r: emails.limit_increase_promotion(e, r, new_limit),
        )
        logger.info("waitlist_limit_increase_promoted", event_id=str(event.id), promoted=result.count)
        return result

    def demote_excess(self, event: Event) -> list[Registration]:
        """Move the newest participants above the event's limit to the waitlist tail.

        ``event`` must already hold the new limit and be locked by the caller.
        """
        if event.participant_limit is None:
            return []
        registered = self._registrations.list_by_status(event.id, RegistrationStatus.REGISTERED)
        waitlisted = self._registrations.list_by_status(event.id, RegistrationStatus.WAITLISTED)
        start = waitlist.next_position(waitlisted)
        demoted = [
            waitlist.demote(r, start + i)
            for i, r in enumerate(waitlist.pick_demotions(registered, event.participant_limit))
        ]
        self._registrations.save_many(demoted)
        for registration in demoted:
            self._dispatcher.enqueue(emails.moved_to_waitlist(event, registration))
        logger.info("registrations_demoted", event_id=str(event.id), demoted=len(demoted))
        return demoted

    def move_to_waitlist(self, registration_id: str) -> Registration:
        """Send one registered participant to the back of the waitlist."""
        event, registration = self._lock_registration(registration_id)
        if registration.status != RegistrationStatus.REGISTERED:
            raise InvalidStatusError("Only registered participants can be moved to the waitlist")

        waitlisted = self._registrations.list_by_status(event.id, RegistrationStatus.WAITLISTED)
        moved = waitlist.demote(registration, waitlist.next_position(waitlisted))
        self._registrations.save(moved)
        self._dispatcher.enqueue(emails.moved_to_waitlist(event, moved))
        logger.info(
            "registration_moved_to_waitlist",
            event_id=str(event.id),
            registration_id=str(moved.id),
            waitlist_position=moved.waitlist_position,
        )
        return moved

    def delete_registration(self, registration_id: str) -> None:
        registration = self.get_registration(registration_id)
        self._registrations.delete(registration.id)
        logger.info("registration_deleted", event_id=str(registration.event_id), registration_id=registration_id)

    def _lock_registration(self, registration_id: str) -> tuple[Event, Registration]:
        """Lock the owning event, then read the registration as it stands under that lock."""
        registration = self.get_registration(registration_id)
        event = load_event(self._events, registration.event_id, lock=True)
        return event, self.get_registration(registration_id)

    def _admit(self, event: Event, registration: Registration) -> Registration:
        registered_count = self._registrations.count_by_status(event.id, RegistrationStatus.REGISTERED)
        waitlisted = self._registrations.list_by_status(event.id, RegistrationStatus.WAITLISTED)
        admitted = waitlist.admit(registration, event.has_room(registered_count), waitlisted)
        self._registrations.save(admitted)
        self._dispatcher.enqueue(emails.registration_confirmation(event, admitted))
        return admitted

    def _fill(self, event: Event, cap: int, compose: Compose) -> PromotionResult:
        """Promote the waitlist head into free slots and renumber the rest."""
        registered_count = self._registrations.count_by_status(event.id, RegistrationStatus.REGISTERED)
        waitlisted = self._registrations.list_by_status(event.id, RegistrationStatus.WAITLISTED)
        chosen = waitlist.pick_promotions(waitlisted, event.participant_limit, registered_count, cap)
        chosen_ids = {r.id for r in chosen}
        remaining = [r for r in waitlisted if r.id not in chosen_ids]
        renumbered = waitlist.renumber(remaining)
        promoted = [waitlist.promote(r) for r in chosen]

        self._registrations.save_many([*promoted, *waitlist.changed(remaining, renumbered)])
        for registration in promoted:
            self._dispatcher.enqueue(compose(event, registration))

        slots_left = waitlist.open_slots(event.participant_limit, registered_count + len(promoted))
        truncated = len(chosen) == cap and bool(renumbered) and slots_left != 0
        return PromotionResult(promoted=promoted, truncated=truncated)
