"""Pytest configuration and shared fixtures."""

from collections.abc import Callable

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from events.domain import (
    Event,
    EventId,
    ParticipantLimit,
    Registration,
    RegistrationId,
    RegistrationStatus,
)
from events.services.event_service import EventService
from events.services.registration_service import RegistrationService
from tests.fakes import (
    Clock,
    FakeEmailClient,
    FakeEventStore,
    FakePassStore,
    FakePaymentGateway,
    FakeProductStore,
    FakeRegistrationStore,
    FakeSalesAnalyticsStore,
    ORGANIZER,
    RecordingDispatcher,
)


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def event_store() -> FakeEventStore:
    return FakeEventStore()


@pytest.fixture
def registration_store() -> FakeRegistrationStore:
    return FakeRegistrationStore()


@pytest.fixture
def pass_store() -> FakePassStore:
    return FakePassStore()


@pytest.fixture
def product_store() -> FakeProductStore:
    return FakeProductStore()


@pytest.fixture
def analytics_store() -> FakeSalesAnalyticsStore:
    return FakeSalesAnalyticsStore()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def email_client() -> FakeEmailClient:
    return FakeEmailClient()


@pytest.fixture
def gateway() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest.fixture
def registration_service(event_store, registration_store, dispatcher) -> RegistrationService:
    return RegistrationService(event_store, registration_store, dispatcher, bulk_limit=500)


@pytest.fixture
def event_service(event_store, registration_store, registration_service) -> EventService:
    return EventService(event_store, registration_store, registration_service)


@pytest.fixture
def make_event(event_store, clock) -> Callable[..., Event]:
    def _make(
        title: str = "PyCon Meetup",
        limit: int | None = None,
        date: str = "2030-01-15",
        owner: str = ORGANIZER,
        closed: bool = False,
    ) -> Event:
        now = clock.tick()
        event = Event(
            id=EventId.new(),
            title=title,
            date=date,
            created_by=owner,
            created_at=now,
            updated_at=now,
            location="Hall A",
            participant_limit=ParticipantLimit(limit) if limit is not None else None,
            registration_closed=closed,
        )
        return event_store.save_event(event)

    return _make


@pytest.fixture
def make_registration(registration_store, clock) -> Callable[..., Registration]:
    def _make(
        event: Event,
        name: str,
        status: RegistrationStatus = RegistrationStatus.REGISTERED,
        position: int | None = None,
    ) -> Registration:
        registration = Registration(
            id=RegistrationId.new(),
            event_id=event.id,
            name=name,
            email=f"{name.lower()}@example.com",
            status=status,
            registered_at=clock.tick(),
            waitlist_position=position,
        )
        return registration_store.save(registration)

    return _make


@pytest.fixture
def now():
    return timezone.now()
