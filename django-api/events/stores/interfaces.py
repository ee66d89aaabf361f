"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from events.domain import (
    DigitalProduct,
    Event,
    EventId,
    FileId,
    Pass,
    PassCode,
    PassId,
    Payment,
    PaymentId,
    ProductId,
    Registration,
    RegistrationId,
    RegistrationStatus,
    SalesAnalytics,
    ScheduledEmail,
    ScheduledEmailId,
    ScheduledEmailStatus,
    StoredFile,
    Update,
    UpdateId,
    User,
)


class EventStore(ABC):
    """Interface for event persistence operations."""

    @abstractmethod
    def list_events(self) -> list[Event]:
        """Return all events ordered by created_at descending."""
        ...

    @abstractmethod
    def list_events_by_owner(self, owner_email: str) -> list[Event]:
        """Return events created by ``owner_email``, newest first."""
        ...

    @abstractmethod
    def list_events_on_date(self, date: str) -> list[Event]:
        """Return events whose date string starts with ``date`` (YYYY-MM-DD)."""
        ...

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    def lock_event(self, event_id: EventId) -> Event | None:
        """Return an event and hold it for the rest of the current transaction.

        Every mutation that reads registration counts goes through this so
        capacity checks for one event are serialized.
        """
        ...

    @abstractmethod
    def save_event(self, event: Event) -> Event:
        ...

    @abstractmethod
    def delete_event(self, event_id: EventId) -> None:
        ...


class RegistrationStore(ABC):
    """Interface for registration persistence operations."""

    @abstractmethod
    def get(self, registration_id: RegistrationId) -> Registration | None:
        ...

    @abstractmethod
    def list_for_event(self, event_id: EventId) -> list[Registration]:
        """Return all registrations of an event, newest first."""
        ...

    @abstractmethod
    def list_all(self) -> list[Registration]:
        ...

    @abstractmethod
    def list_by_status(self, event_id: EventId, status: RegistrationStatus) -> list[Registration]:
        """Return registrations of an event with ``status``, oldest first."""
        ...

    @abstractmethod
    def count_by_status(self, event_id: EventId, status: RegistrationStatus) -> int:
        ...

    @abstractmethod
    def find_active(self, event_id: EventId, email: str) -> Registration | None:
        """Return the non-cancelled registration for (event, email), if any."""
        ...

    @abstractmethod
    def save(self, registration: Registration) -> Registration:
        ...

    @abstractmethod
    def save_many(self, registrations: list[Registration]) -> None:
        ...

    @abstractmethod
    def delete(self, registration_id: RegistrationId) -> None:
        ...


class PassStore(ABC):
    """Interface for entry pass persistence operations."""

    @abstractmethod
    def get(self, pass_id: PassId) -> Pass | None:
        ...

    @abstractmethod
    def get_by_code(self, code: PassCode) -> Pass | None:
        ...

    @abstractmethod
    def get_for_registration(self, registration_id: RegistrationId) -> Pass | None:
        ...

    @abstractmethod
    def list_for_event(self, event_id: EventId) -> list[Pass]:
        ...

    @abstractmethod
    def save(self, entry_pass: Pass) -> Pass:
        ...

    @abstractmethod
    def delete(self, pass_id: PassId) -> None:
        ...


class ProductStore(ABC):
    """Interface for digital product persistence operations."""

    @abstractmethod
    def get(self, product_id: ProductId) -> DigitalProduct | None:
        ...

    @abstractmethod
    def list_for_event(self, event_id: EventId) -> list[DigitalProduct]:
        """Return products of an event, newest first."""
        ...

    @abstractmethod
    def list_by_owner(self, owner_email: str) -> list[DigitalProduct]:
        ...

    @abstractmethod
    def save(self, product: DigitalProduct) -> DigitalProduct:
        ...

    @abstractmethod
    def delete(self, product_id: ProductId) -> None:
        ...


class PaymentStore(ABC):
    """Interface for payment persistence operations."""

    @abstractmethod
    def get(self, payment_id: PaymentId) -> Payment | None:
        ...

    @abstractmethod
    def lock(self, payment_id: PaymentId) -> Payment | None:
        """Return a payment and hold it for the rest of the current transaction."""
        ...

    @abstractmethod
    def get_by_link_id(self, payment_link_id: str) -> Payment | None:
        ...

    @abstractmethod
    def list_for_event(self, event_id: EventId) -> list[Payment]:
        ...

    @abstractmethod
    def save(self, payment: Payment) -> Payment:
        ...


class SalesAnalyticsStore(ABC):
    """Interface for the per-product sales ledger."""

    @abstractmethod
    def get_for_product(self, event_id: EventId, product_id: ProductId) -> SalesAnalytics | None:
        ...

    @abstractmethod
    def list_for_event(self, event_id: EventId) -> list[SalesAnalytics]:
        ...

    @abstractmethod
    def list_for_events(self, event_ids: list[EventId]) -> list[SalesAnalytics]:
        ...

    @abstractmethod
    def save(self, analytics: SalesAnalytics) -> SalesAnalytics:
        ...

    @abstractmethod
    def delete_for_product(self, product_id: ProductId) -> int:
        """Delete all records of a product and return how many were removed."""
        ...


class ScheduledEmailStore(ABC):
    """Interface for scheduled email persistence operations."""

    @abstractmethod
    def get(self, email_id: ScheduledEmailId) -> ScheduledEmail | None:
        ...

    @abstractmethod
    def list_for_event(self, event_id: EventId) -> list[ScheduledEmail]:
        ...

    @abstractmethod
    def claim_due(self, now: datetime, limit: int) -> list[ScheduledEmail]:
        """Move at most ``limit`` pending rows due by ``now`` to processing and return them.

        Rows already claimed by a concurrent run are skipped.
        """
        ...

    @abstractmethod
    def save_if_status(self, email: ScheduledEmail, expected: ScheduledEmailStatus) -> bool:
        """Save ``email`` only if the stored row still has status ``expected``."""
        ...

    @abstractmethod
    def save(self, email: ScheduledEmail) -> ScheduledEmail:
        ...


class UpdateStore(ABC):
    """Interface for update announcement persistence operations."""

    @abstractmethod
    def get(self, update_id: UpdateId) -> Update | None:
        ...

    @abstractmethod
    def list_for_event(self, event_id: EventId) -> list[Update]:
        ...

    @abstractmethod
    def list_by_author(self, created_by: str) -> list[Update]:
        ...

    @abstractmethod
    def save(self, update: Update) -> Update:
        ...

    @abstractmethod
    def delete(self, update_id: UpdateId) -> None:
        ...


class UserStore(ABC):
    """Interface for organizer profile persistence operations."""

    @abstractmethod
    def get_by_clerk_id(self, clerk_id: str) -> User | None:
        ...

    @abstractmethod
    def get_by_email(self, email: str) -> User | None:
        ...

    @abstractmethod
    def save(self, user: User) -> User:
        ...


class FileStore(ABC):
    """Interface for stored file metadata."""

    @abstractmethod
    def get(self, file_id: FileId) -> StoredFile | None:
        ...

    @abstractmethod
    def get_by_storage_id(self, storage_id: str) -> StoredFile | None:
        ...

    @abstractmethod
    def save(self, stored_file: StoredFile) -> StoredFile:
        ...

    @abstractmethod
    def delete_by_storage_id(self, storage_id: str) -> None:
        ...
