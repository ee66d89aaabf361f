from events.domain.models import (
    CustomerPurchase,
    DigitalProduct,
    Event,
    Pass,
    PassStatus,
    Payment,
    PaymentStatus,
    Registration,
    RegistrationStatus,
    SalesAnalytics,
    ScheduledEmail,
    ScheduledEmailStatus,
    StoredFile,
    Update,
    UpdateStatus,
    User,
)
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

__all__ = [
    "CustomerPurchase",
    "DigitalProduct",
    "Event",
    "Pass",
    "PassStatus",
    "Payment",
    "PaymentStatus",
    "Registration",
    "RegistrationStatus",
    "SalesAnalytics",
    "ScheduledEmail",
    "ScheduledEmailStatus",
    "StoredFile",
    "Update",
    "UpdateStatus",
    "User",
    "AnalyticsId",
    "EventId",
    "FileId",
    "Money",
    "ParticipantLimit",
    "PassCode",
    "PassId",
    "PaymentId",
    "ProductId",
    "RegistrationId",
    "ScheduledEmailId",
    "UpdateId",
    "UserId",
]
