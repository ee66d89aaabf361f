"""Waitlist reconciliation rules.

Pure functions over registration snapshots. They decide who moves and which
positions they get; persistence and notifications are left to the caller.
"""

from dataclasses import replace

from events.domain import ParticipantLimit, Registration, RegistrationStatus


def queue_order(waitlisted: list[Registration]) -> list[Registration]:
    """Sort waitlisted registrations head first.

    Position decides; registration time breaks ties and places rows that lost
    their position at the back.
    """
    return sorted(
        waitlisted,
        key=lambda r: (r.waitlist_position is None, r.waitlist_position or 0, r.registered_at),
    )


def renumber(waitlisted: list[Registration]) -> list[Registration]:
    """Return the waitlist with dense positions 1..N in queue order."""
    return [replace(r, waitlist_position=i) for i, r in enumerate(queue_order(waitlisted), start=1)]


def changed(before: list[Registration], after: list[Registration]) -> list[Registration]:
    """Return the members of ``after`` that differ from their ``before`` snapshot."""
    previous = {r.id: r for r in before}
    return [r for r in after if previous.get(r.id) != r]


def next_position(waitlisted: list[Registration]) -> int:
    """Position for a registration joining the back of the queue."""
    return max((r.waitlist_position or 0 for r in waitlisted), default=0) + 1


def open_slots(limit: ParticipantLimit | None, registered_count: int) -> int | None:
    """Free registered slots, or None when the event is unlimited."""
    if limit is None:
        return None
    return max(limit.value - registered_count, 0)


def pick_promotions(
    waitlisted: list[Registration],
    limit: ParticipantLimit | None,
    registered_count: int,
    cap: int,
) -> list[Registration]:
    """Select the waitlist head that fits under ``limit``, at most ``cap`` rows."""
    slots = open_slots(limit, registered_count)
    count = cap if slots is None else min(slots, cap)
    return queue_order(waitlisted)[:count]


def pick_demotions(registered: list[Registration], limit: ParticipantLimit) -> list[Registration]:
    """Select the most recently registered participants above ``limit``.

    The returned list is ordered newest first, which is also the order in
    which they join the back of the waitlist.
    """
    excess = len(registered) - limit.value
    if excess <= 0:
        return []
    return sorted(registered, key=lambda r: r.registered_at, reverse=True)[:excess]


def promote(registration: Registration) -> Registration:
    return replace(registration, status=RegistrationStatus.REGISTERED, waitlist_position=None)


def demote(registration: Registration, position: int) -> Registration:
    return replace(registration, status=RegistrationStatus.WAITLISTED, waitlist_position=position)


def admit(registration: Registration, has_room: bool, waitlisted: list[Registration]) -> Registration:
    """Place a new or restored registration on the list or the waitlist tail."""
    if has_room:
        return replace(registration, status=RegistrationStatus.REGISTERED, waitlist_position=None)
    return demote(registration, next_position(waitlisted))
