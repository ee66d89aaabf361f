"""Integration tests for the ORM-backed stores."""

from dataclasses import replace
from datetime import timedelta

import pytest
from django.db import IntegrityError, transaction
from django.utils import timezone

from events.domain import (
    AnalyticsId,
    CustomerPurchase,
    DigitalProduct,
    Event,
    EventId,
    Money,
    ParticipantLimit,
    Payment,
    PaymentId,
    PaymentStatus,
    ProductId,
    Registration,
    RegistrationId,
    RegistrationStatus,
    SalesAnalytics,
    ScheduledEmail,
    ScheduledEmailId,
    ScheduledEmailStatus,
)
from events.services.registration_service import RegistrationService
from events.stores.django_store import (
    DjangoEventStore,
    DjangoPaymentStore,
    DjangoProductStore,
    DjangoRegistrationStore,
    DjangoSalesAnalyticsStore,
    DjangoScheduledEmailStore,
)
from tests.fakes import ORGANIZER, RecordingDispatcher

NOW = timezone.now()


def _event(title="Meetup", date="2030-01-15", limit=None, minutes=0):
    at = NOW + timedelta(minutes=minutes)
    return Event(
        id=EventId.new(),
        title=title,
        date=date,
        created_by=ORGANIZER,
        created_at=at,
        updated_at=at,
        participant_limit=ParticipantLimit(limit) if limit else None,
    )


def _registration(event, name, status=RegistrationStatus.REGISTERED, position=None, minutes=0):
    return Registration(
        id=RegistrationId.new(),
        event_id=event.id,
        name=name,
        email=f"{name.lower()}@example.com",
        status=status,
        registered_at=NOW + timedelta(minutes=minutes),
        waitlist_position=position,
    )


def _product(event):
    return DigitalProduct(
        id=ProductId.new(),
        event_id=event.id,
        name="Slides",
        price=Money(50000),
        file_storage_id="uploads/a/slides.pdf",
        file_name="slides.pdf",
        file_size=10,
        file_type="application/pdf",
        created_by=ORGANIZER,
        created_at=NOW,
        updated_at=NOW,
    )


@pytest.mark.django_db
class TestEventStore:
    """Tests for DjangoEventStore."""

    def test_round_trip(self):
        """Saved events come back equal, limit included."""
        store = DjangoEventStore()
        event = store.save_event(_event(limit=10))
        assert store.get_event(event.id) == event
        assert store.lock_event(event.id) == event

    def test_list_order_and_owner_filter(self):
        """Events list newest first."""
        store = DjangoEventStore()
        older = store.save_event(_event(title="Older", minutes=0))
        newer = store.save_event(_event(title="Newer", minutes=5))
        assert store.list_events() == [newer, older]
        assert store.list_events_by_owner("nobody@example.com") == []

    def test_events_on_date_matches_prefix(self):
        """Date lookups match events whose date starts with the day."""
        store = DjangoEventStore()
        evening = store.save_event(_event(date="2030-01-16T18:00"))
        store.save_event(_event(date="2030-01-17"))
        assert store.list_events_on_date("2030-01-16") == [evening]

    def test_delete(self):
        """Deleted events are gone."""
        store = DjangoEventStore()
        event = store.save_event(_event())
        store.delete_event(event.id)
        assert store.get_event(event.id) is None


@pytest.mark.django_db
class TestRegistrationStore:
    """Tests for DjangoRegistrationStore."""

    def test_orderings(self):
        """Status lists run oldest first while event lists run newest first."""
        event = DjangoEventStore().save_event(_event())
        store = DjangoRegistrationStore()
        first = store.save(_registration(event, "A", minutes=1))
        second = store.save(_registration(event, "B", minutes=2))
        assert store.list_by_status(event.id, RegistrationStatus.REGISTERED) == [first, second]
        assert store.list_for_event(event.id) == [second, first]
        assert store.count_by_status(event.id, RegistrationStatus.REGISTERED) == 2

    def test_find_active_ignores_case_and_cancelled(self):
        """Live registrations are found case-insensitively."""
        event = DjangoEventStore().save_event(_event())
        store = DjangoRegistrationStore()
        store.save(_registration(event, "Old", status=RegistrationStatus.CANCELLED))
        live = store.save(_registration(event, "Ada"))
        assert store.find_active(event.id, "ADA@example.com") == live
        assert store.find_active(event.id, "old@example.com") is None

    def test_one_live_registration_per_email(self):
        """The database refuses a second live registration for an email."""
        event = DjangoEventStore().save_event(_event())
        store = DjangoRegistrationStore()
        store.save(_registration(event, "Ada"))
        with pytest.raises(IntegrityError), transaction.atomic():
            store.save(_registration(event, "Ada", status=RegistrationStatus.WAITLISTED, position=1))

    def test_save_many_updates_positions(self):
        """save_many writes every changed row."""
        event = DjangoEventStore().save_event(_event())
        store = DjangoRegistrationStore()
        a = store.save(_registration(event, "A", status=RegistrationStatus.WAITLISTED, position=2))
        b = store.save(_registration(event, "B", status=RegistrationStatus.WAITLISTED, position=5))
        store.save_many([
            replace(a, waitlist_position=1),
            replace(b, waitlist_position=2),
        ])
        assert [r.waitlist_position for r in store.list_by_status(event.id, RegistrationStatus.WAITLISTED)] == [1, 2]

    def test_registration_flow_over_orm(self):
        """Cancelling a participant promotes the waitlist head in the database."""
        events, registrations = DjangoEventStore(), DjangoRegistrationStore()
        service = RegistrationService(events, registrations, RecordingDispatcher())
        event = events.save_event(_event(limit=1))

        with transaction.atomic():
            a = service.register(str(event.id), "A", "a@example.com")
            b = service.register(str(event.id), "B", "b@example.com")
            c = service.register(str(event.id), "C", "c@example.com")
        with transaction.atomic():
            service.cancel(str(a.id))

        assert registrations.get(b.id).status == RegistrationStatus.REGISTERED
        assert registrations.get(c.id).waitlist_position == 1


@pytest.mark.django_db
class TestCommerceStores:
    """Tests for product, payment and analytics stores."""

    def test_payment_lookup_by_link(self):
        """Payments can be found by gateway link id."""
        event = DjangoEventStore().save_event(_event())
        product = DjangoProductStore().save(_product(event))
        payment = Payment(
            id=PaymentId.new(),
            product_id=product.id,
            event_id=event.id,
            customer_name="Ada",
            customer_email="ada@example.com",
            amount=Money(50000),
            payment_link_id="plink_1",
            payment_link_url="https://rzp.io/i/plink_1",
            status=PaymentStatus.PENDING,
            created_at=NOW,
            updated_at=NOW,
        )
        store = DjangoPaymentStore()
        store.save(payment)
        assert store.get_by_link_id("plink_1") == payment

    def test_payments_survive_product_delete(self):
        """Deleting a product keeps its payment history."""
        event = DjangoEventStore().save_event(_event())
        products = DjangoProductStore()
        product = products.save(_product(event))
        payment = Payment(
            id=PaymentId.new(),
            product_id=product.id,
            event_id=event.id,
            customer_name="Ada",
            customer_email="ada@example.com",
            amount=Money(50000),
            payment_link_id="plink_2",
            payment_link_url="https://rzp.io/i/plink_2",
            status=PaymentStatus.COMPLETED,
            created_at=NOW,
            updated_at=NOW,
        )
        store = DjangoPaymentStore()
        store.save(payment)

        products.delete(product.id)

        assert products.get(product.id) is None
        assert store.lock(payment.id) == payment
        assert store.list_for_event(event.id) == [payment]

    def test_analytics_ledger_round_trip(self):
        """The customer ledger survives JSON storage with its totals."""
        event = DjangoEventStore().save_event(_event())
        product = DjangoProductStore().save(_product(event))
        record = SalesAnalytics(
            id=AnalyticsId.new(),
            event_id=event.id,
            product_id=product.id,
            product_name="Slides",
            created_at=NOW,
            updated_at=NOW,
            customers=(
                CustomerPurchase("Ada", "ada@example.com", Money(50000), NOW, PaymentId.new()),
                CustomerPurchase("Bob", "bob@example.com", Money(30000), NOW + timedelta(minutes=1), PaymentId.new()),
            ),
        )
        store = DjangoSalesAnalyticsStore()
        store.save(record)

        loaded = store.get_for_product(event.id, product.id)

        assert loaded.customers == record.customers
        assert loaded.total_sales == Money(80000)
        assert store.delete_for_product(product.id) == 1


@pytest.mark.django_db
class TestScheduledEmailStore:
    """Tests for DjangoScheduledEmailStore."""

    def _scheduled(self, store, event, minutes, status=ScheduledEmailStatus.PENDING):
        return store.save(
            ScheduledEmail(
                id=ScheduledEmailId.new(),
                event_id=event.id,
                subject="Hi",
                content="Body",
                scheduled_for=NOW + timedelta(minutes=minutes),
                status=status,
                created_at=NOW,
                send_to_all=True,
            )
        )

    def test_claim_due(self):
        """Only pending rows at or before now are claimed, and only once."""
        event = DjangoEventStore().save_event(_event())
        store = DjangoScheduledEmailStore()
        due = self._scheduled(store, event, -5)
        self._scheduled(store, event, -10, status=ScheduledEmailStatus.CANCELLED)
        self._scheduled(store, event, 30)

        claimed = store.claim_due(NOW, limit=10)

        assert [e.id for e in claimed] == [due.id]
        assert claimed[0].status == ScheduledEmailStatus.PROCESSING
        assert store.get(due.id).status == ScheduledEmailStatus.PROCESSING
        assert store.claim_due(NOW, limit=10) == []

    def test_save_if_status(self):
        """Conditional saves only land while the stored status matches."""
        event = DjangoEventStore().save_event(_event())
        store = DjangoScheduledEmailStore()
        pending = self._scheduled(store, event, -5)

        cancelled = replace(pending, status=ScheduledEmailStatus.CANCELLED)
        assert store.save_if_status(cancelled, ScheduledEmailStatus.PENDING) is True
        sent = replace(pending, status=ScheduledEmailStatus.SENT, email_ids=("re_1",))
        assert store.save_if_status(sent, ScheduledEmailStatus.PROCESSING) is False
        assert store.get(pending.id) == cancelled
