"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.db import models
from django.db.models import Q


class Event(models.Model):
    """Persistence model for events."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    date = models.CharField(max_length=64)
    location = models.CharField(max_length=255, blank=True, null=True)
    header_image = models.CharField(max_length=255, blank=True, null=True)
    participant_limit = models.PositiveIntegerField(blank=True, null=True)
    registration_closed = models.BooleanField(default=False)
    created_by = models.EmailField(max_length=254)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"]),
            models.Index(fields=["created_by"]),
            models.Index(fields=["date"]),
        ]

    def __str__(self) -> str:
        return self.title


class Registration(models.Model):
    """Persistence model for event registrations."""

    class Status(models.TextChoices):
        REGISTERED = "registered", "Registered"
        WAITLISTED = "waitlisted", "Waitlisted"
        CANCELLED = "cancelled", "Cancelled"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="registrations")
    name = models.CharField(max_length=255)
    email = models.EmailField(max_length=254)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.REGISTERED)
    waitlist_position = models.PositiveIntegerField(blank=True, null=True)
    registered_at = models.DateTimeField()
    attended_at = models.DateTimeField(blank=True, null=True)
    attended_by = models.CharField(max_length=254, blank=True, null=True)

    class Meta:
        ordering = ["-registered_at"]
        indexes = [
            models.Index(fields=["event", "status"]),
            models.Index(fields=["event", "email"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["event", "email"],
                condition=~Q(status="cancelled"),
                name="unique_active_registration_per_email",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} <{self.email}> - {self.status}"


class Pass(models.Model):
    """Persistence model for entry passes."""

    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        USED = "used", "Used"
        EXPIRED = "expired", "Expired"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="passes")
    registration = models.OneToOneField(Registration, on_delete=models.CASCADE, related_name="entry_pass")
    code = models.CharField(max_length=6, unique=True)
    attendee_name = models.CharField(max_length=255)
    attendee_email = models.EmailField(max_length=254)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.ACTIVE)
    generated_at = models.DateTimeField()
    generated_by = models.CharField(max_length=254)
    used_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        indexes = [
            models.Index(fields=["event"]),
        ]

    def __str__(self) -> str:
        return f"{self.code} - {self.attendee_email}"


class DigitalProduct(models.Model):
    """Persistence model for downloadable products sold per event."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="digital_products")
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    price = models.PositiveIntegerField(help_text="Minor currency units")
    file_storage_id = models.CharField(max_length=255)
    file_name = models.CharField(max_length=255)
    file_size = models.PositiveBigIntegerField()
    file_type = models.CharField(max_length=127)
    downloads = models.PositiveIntegerField(default=0)
    created_by = models.EmailField(max_length=254)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["event"]),
            models.Index(fields=["created_by"]),
        ]

    def __str__(self) -> str:
        return f"{self.name} - {self.price}"


class Payment(models.Model):
    """Persistence model for payment-link checkouts."""

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        COMPLETED = "completed", "Completed"
        FAILED = "failed", "Failed"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    # Payments outlive their product.
    product_id = models.UUIDField(db_index=True)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="payments")
    customer_name = models.CharField(max_length=255)
    customer_email = models.EmailField(max_length=254)
    amount = models.PositiveIntegerField()
    payment_link_id = models.CharField(max_length=64, unique=True)
    payment_link_url = models.URLField(max_length=500)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    email_sent = models.BooleanField(default=False)
    email_sent_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["event"]),
        ]

    def __str__(self) -> str:
        return f"{self.payment_link_id} - {self.status}"


class SalesAnalytics(models.Model):
    """Per (event, product) sales ledger with denormalised totals."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="sales_analytics")
    product = models.ForeignKey(DigitalProduct, on_delete=models.CASCADE, related_name="sales_analytics")
    product_name = models.CharField(max_length=255)
    total_sales = models.PositiveBigIntegerField(default=0)
    total_units = models.PositiveIntegerField(default=0)
    customer_count = models.PositiveIntegerField(default=0)
    customers = models.JSONField(default=list)
    last_sale_date = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        verbose_name_plural = "sales analytics"
        constraints = [
            models.UniqueConstraint(fields=["event", "product"], name="unique_analytics_per_product"),
        ]

    def __str__(self) -> str:
        return f"{self.product_name} - {self.total_units} sold"


class ScheduledEmail(models.Model):
    """Persistence model for time-deferred bulk emails."""

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        PROCESSING = "processing", "Processing"
        SENT = "sent", "Sent"
        CANCELLED = "cancelled", "Cancelled"
        FAILED = "failed", "Failed"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="scheduled_emails")
    registration_ids = models.JSONField(default=list)
    send_to_all = models.BooleanField(default=False)
    subject = models.CharField(max_length=255)
    content = models.TextField()
    scheduled_for = models.DateTimeField()
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    created_at = models.DateTimeField()
    sent_at = models.DateTimeField(blank=True, null=True)
    email_ids = models.JSONField(default=list)
    error = models.TextField(blank=True, null=True)

    class Meta:
        ordering = ["scheduled_for"]
        indexes = [
            models.Index(fields=["status", "scheduled_for"]),
            models.Index(fields=["event"]),
        ]

    def __str__(self) -> str:
        return f"{self.subject} @ {self.scheduled_for}"


class Update(models.Model):
    """Persistence model for organizer announcements."""

    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        PUBLISHED = "published", "Published"
        SENT = "sent", "Sent"
        FAILED = "failed", "Failed"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="updates")
    title = models.CharField(max_length=255)
    content = models.TextField()
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.DRAFT)
    created_by = models.EmailField(max_length=254)
    created_at = models.DateTimeField()
    published_at = models.DateTimeField(blank=True, null=True)
    sent_at = models.DateTimeField(blank=True, null=True)
    email_ids = models.JSONField(default=list)
    error = models.TextField(blank=True, null=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["event"]),
            models.Index(fields=["created_by"]),
        ]

    def __str__(self) -> str:
        return self.title


class UserProfile(models.Model):
    """Organizer profile keyed by the identity provider email."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    clerk_id = models.CharField(max_length=254, unique=True)
    name = models.CharField(max_length=255)
    email = models.EmailField(max_length=254, db_index=True)
    razorpay_key_id = models.CharField(max_length=255, blank=True, null=True)
    razorpay_key_secret = models.CharField(max_length=255, blank=True, null=True)
    created_at = models.DateTimeField()

    def __str__(self) -> str:
        return self.email


class StoredFile(models.Model):
    """Metadata for blobs kept in the configured file storage."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    storage_id = models.CharField(max_length=255, unique=True)
    name = models.CharField(max_length=255)
    content_type = models.CharField(max_length=127)
    size = models.PositiveBigIntegerField()
    uploaded_by = models.CharField(max_length=254, blank=True, null=True)
    uploaded_at = models.DateTimeField()

    def __str__(self) -> str:
        return self.name
