"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in events/models.py (persistence layer).
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from events.domain.value_objects import (
    AnalyticsId,
    EventId,
    FileId,
    Money,
    ParticipantLimit,
    PassCode,
    PassId,
    PaymentId,
    ProductId,
    RegistrationId,
    ScheduledEmailId,
    UpdateId,
    UserId,
)


class RegistrationStatus(str, Enum):
    REGISTERED = "registered"
    WAITLISTED = "waitlisted"
    CANCELLED = "cancelled"


class PassStatus(str, Enum):
    ACTIVE = "active"
    USED = "used"
    EXPIRED = "expired"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class ScheduledEmailStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SENT = "sent"
    CANCELLED = "cancelled"
    FAILED = "failed"


class UpdateStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    SENT = "sent"
    FAILED = "failed"


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: EventId
    title: str
    date: str
    created_by: str
    created_at: datetime
    updated_at: datetime
    description: str | None = None
    location: str | None = None
    header_image: str | None = None
    participant_limit: ParticipantLimit | None = None
    registration_closed: bool = False

    def has_room(self, registered_count: int) -> bool:
        """Whether another participant fits under the limit."""
        if self.participant_limit is None:
            return True
        return registered_count < self.participant_limit.value


@dataclass(frozen=True)
class Registration:
    """Domain representation of a Registration."""

    id: RegistrationId
    event_id: EventId
    name: str
    email: str
    status: RegistrationStatus
    registered_at: datetime
    waitlist_position: int | None = None
    attended_at: datetime | None = None
    attended_by: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status != RegistrationStatus.CANCELLED


@dataclass(frozen=True)
class Pass:
    """Domain representation of an entry Pass."""

    id: PassId
    event_id: EventId
    registration_id: RegistrationId
    code: PassCode
    attendee_name: str
    attendee_email: str
    status: PassStatus
    generated_at: datetime
    generated_by: str
    used_at: datetime | None = None


@dataclass(frozen=True)
class DigitalProduct:
    """Domain representation of a DigitalProduct."""

    id: ProductId
    event_id: EventId
    name: str
    price: Money
    file_storage_id: str
    file_name: str
    file_size: int
    file_type: str
    created_by: str
    created_at: datetime
    updated_at: datetime
    description: str | None = None
    downloads: int = 0


@dataclass(frozen=True)
class Payment:
    """Domain representation of a Payment."""

    id: PaymentId
    product_id: ProductId
    event_id: EventId
    customer_name: str
    customer_email: str
    amount: Money
    payment_link_id: str
    payment_link_url: str
    status: PaymentStatus
    created_at: datetime
    updated_at: datetime
    email_sent: bool = False
    email_sent_at: datetime | None = None


@dataclass(frozen=True)
class CustomerPurchase:
    """One entry of the append-only sales ledger."""

    customer_name: str
    customer_email: str
    amount: Money
    purchase_date: datetime
    payment_id: PaymentId


@dataclass(frozen=True)
class SalesAnalytics:
    """Per (event, product) sales record.

    Totals are derived from ``customers`` so they can never drift.
    """

    id: AnalyticsId
    event_id: EventId
    product_id: ProductId
    product_name: str
    created_at: datetime
    updated_at: datetime
    customers: tuple[CustomerPurchase, ...] = ()

    @property
    def total_sales(self) -> Money:
        return Money(sum(c.amount.amount for c in self.customers))

    @property
    def total_units(self) -> int:
        return len(self.customers)

    @property
    def customer_count(self) -> int:
        return len({c.customer_email for c in self.customers})

    @property
    def last_sale_date(self) -> datetime | None:
        if not self.customers:
            return None
        return max(c.purchase_date for c in self.customers)


@dataclass(frozen=True)
class ScheduledEmail:
    """Domain representation of a time-deferred bulk email."""

    id: ScheduledEmailId
    event_id: EventId
    subject: str
    content: str
    scheduled_for: datetime
    status: ScheduledEmailStatus
    created_at: datetime
    registration_ids: tuple[RegistrationId, ...] = ()
    send_to_all: bool = False
    sent_at: datetime | None = None
    email_ids: tuple[str, ...] = ()
    error: str | None = None


@dataclass(frozen=True)
class Update:
    """Domain representation of an event Update announcement."""

    id: UpdateId
    event_id: EventId
    title: str
    content: str
    status: UpdateStatus
    created_by: str
    created_at: datetime
    published_at: datetime | None = None
    sent_at: datetime | None = None
    email_ids: tuple[str, ...] = ()
    error: str | None = None


@dataclass(frozen=True)
class User:
    """Organizer profile; ``clerk_id`` holds the identity provider email."""

    id: UserId
    clerk_id: str
    name: str
    email: str
    created_at: datetime
    razorpay_key_id: str | None = None
    razorpay_key_secret: str | None = field(default=None, repr=False)

    @property
    def has_payment_credentials(self) -> bool:
        return bool(self.razorpay_key_id and self.razorpay_key_secret)


@dataclass(frozen=True)
class StoredFile:
    """Metadata for a blob held in file storage."""

    id: FileId
    storage_id: str
    name: str
    content_type: str
    size: int
    uploaded_at: datetime
    uploaded_by: str | None = None
