"""Helpers shared by the services."""

from typing import TypeVar

from events.domain import Event, EventId
from events.domain.errors import EventNotFoundError, InvalidIdError, ValidationFailedError
from events.domain.value_objects import Identifier
from events.stores.interfaces import EventStore

IdT = TypeVar("IdT", bound=Identifier)


def parse_id(id_type: type[IdT], value: str, kind: str) -> IdT:
    """Parse a raw identifier, raising InvalidIdError when malformed."""
    try:
        return id_type.from_string(value)
    except ValueError:
        raise InvalidIdError(kind) from None


def load_event(store: EventStore, event_id: EventId, lock: bool = False) -> Event:
    event = store.lock_event(event_id) if lock else store.get_event(event_id)
    if event is None:
        raise EventNotFoundError(str(event_id))
    return event


def require_text(value: str | None, field: str) -> str:
    """Return ``value`` stripped, or raise when it is missing or blank."""
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationFailedError(f"{field} is required")
    return cleaned
