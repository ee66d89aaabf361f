"""Event export: an HTML summary plus the figures it is built from."""

from dataclasses import dataclass, field

import structlog
from django.template.loader import render_to_string

from events.domain import (
    DigitalProduct,
    Event,
    EventId,
    Money,
    PassStatus,
    Registration,
    RegistrationStatus,
)
from events.services import emails
from events.services.common import load_event, parse_id
from events.services.dispatch import EmailDispatcher
from events.stores.interfaces import (
    EventStore,
    PassStore,
    ProductStore,
    RegistrationStore,
    SalesAnalyticsStore,
)

logger = structlog.get_logger(__name__)

NO_LIMIT = "No Limit"


@dataclass(frozen=True)
class ExportStats:
    total_registrations: int
    registered: int
    waitlisted: int
    cancelled: int
    available_spots: int | str
    products: int
    revenue: Money
    passes_total: int
    passes_active: int
    passes_used: int


@dataclass(frozen=True)
class EventExport:
    event: Event
    stats: ExportStats
    html: str
    registrations: list[Registration] = field(default_factory=list)
    products: list[DigitalProduct] = field(default_factory=list)


class ExportService:
    def __init__(
        self,
        events: EventStore,
        registrations: RegistrationStore,
        products: ProductStore,
        passes: PassStore,
        analytics: SalesAnalyticsStore,
        dispatcher: EmailDispatcher,
    ) -> None:
        self._events = events
        self._registrations = registrations
        self._products = products
        self._passes = passes
        self._analytics = analytics
        self._dispatcher = dispatcher

    def export_event(self, event_id: str, requested_by: str) -> EventExport:
        export = self._build(parse_id(EventId, event_id, "event"))
        logger.info(
            "event_exported",
            event_id=event_id,
            requested_by=requested_by,
            total_registrations=export.stats.total_registrations,
        )
        return export

    def email_export_report(self, event_id: str, admin_email: str) -> EventExport:
        """Build the export and queue it to ``admin_email``."""
        export = self._build(parse_id(EventId, event_id, "event"))
        self._dispatcher.enqueue(emails.export_report(export.event, admin_email, export.html))
        logger.info("event_export_emailed", event_id=event_id, recipient=admin_email)
        return export

    def _build(self, event_id: EventId) -> EventExport:
        event = load_event(self._events, event_id)
        registrations = self._registrations.list_for_event(event_id)
        products = self._products.list_for_event(event_id)
        passes = self._passes.list_for_event(event_id)
        analytics = self._analytics.list_for_event(event_id)

        by_status = {status: 0 for status in RegistrationStatus}
        for registration in registrations:
            by_status[registration.status] += 1
        registered = by_status[RegistrationStatus.REGISTERED]
        if event.participant_limit is None:
            available: int | str = NO_LIMIT
        else:
            available = max(0, event.participant_limit.value - registered)

        stats = ExportStats(
            total_registrations=len(registrations),
            registered=registered,
            waitlisted=by_status[RegistrationStatus.WAITLISTED],
            cancelled=by_status[RegistrationStatus.CANCELLED],
            available_spots=available,
            products=len(products),
            revenue=Money(sum(a.total_sales.amount for a in analytics)),
            passes_total=len(passes),
            passes_active=sum(1 for p in passes if p.status == PassStatus.ACTIVE),
            passes_used=sum(1 for p in passes if p.status == PassStatus.USED),
        )
        html = render_to_string(
            "events/exports/event_report.html",
            {"event": event, "stats": stats, "registrations": registrations, "products": products},
        )
        return EventExport(event=event, stats=stats, html=html, registrations=registrations, products=products)
