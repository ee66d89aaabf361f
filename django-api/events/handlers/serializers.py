"""Serializers for request validation and for rendering domain models.

Output serializers read frozen domain dataclasses; they are never bound to
ORM models.
"""

from rest_framework import serializers


class EnumValueField(serializers.Field):
    """Render a str enum member as its value."""

    def to_representation(self, value):
        return value.value


class EventSerializer(serializers.Serializer):
    """Serializer for Event domain model."""

    id = serializers.CharField()
    title = serializers.CharField()
    description = serializers.CharField(allow_null=True)
    date = serializers.CharField()
    location = serializers.CharField(allow_null=True)
    header_image = serializers.CharField(allow_null=True)
    participant_limit = serializers.SerializerMethodField()
    registration_closed = serializers.BooleanField()
    created_by = serializers.CharField()
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()

    def get_participant_limit(self, event) -> int | None:
        return event.participant_limit.value if event.participant_limit else None


class EventInputSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    date = serializers.CharField(max_length=64)
    description = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    location = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=255)
    header_image = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=255)
    participant_limit = serializers.IntegerField(required=False, allow_null=True)
    confirm_limit_decrease = serializers.BooleanField(required=False, default=False)


class EventReplaceSerializer(EventInputSerializer):
    """Full replacement of an event; dropping the limit takes an explicit null."""

    participant_limit = serializers.IntegerField(required=True, allow_null=True)


class RegistrationSerializer(serializers.Serializer):
    id = serializers.CharField()
    event_id = serializers.CharField()
    name = serializers.CharField()
    email = serializers.EmailField()
    status = EnumValueField()
    waitlist_position = serializers.IntegerField(allow_null=True)
    registered_at = serializers.DateTimeField()
    attended_at = serializers.DateTimeField(allow_null=True)
    attended_by = serializers.CharField(allow_null=True)


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()


class RegistrationCountsSerializer(serializers.Serializer):
    registered = serializers.IntegerField()
    waitlisted = serializers.IntegerField()
    cancelled = serializers.IntegerField()
    total = serializers.IntegerField()


class PassSerializer(serializers.Serializer):
    id = serializers.CharField()
    event_id = serializers.CharField()
    registration_id = serializers.CharField()
    code = serializers.CharField(source="code.value")
    attendee_name = serializers.CharField()
    attendee_email = serializers.EmailField()
    status = EnumValueField()
    generated_at = serializers.DateTimeField()
    generated_by = serializers.CharField()
    used_at = serializers.DateTimeField(allow_null=True)


class PassOutcomeSerializer(serializers.Serializer):
    registration_id = serializers.CharField()
    attendee_name = serializers.CharField()
    attendee_email = serializers.EmailField()
    status = serializers.CharField()
    pass_code = serializers.CharField(allow_null=True)
    pass_id = serializers.CharField(allow_null=True)
    error = serializers.CharField(allow_null=True)


class BulkPassResultSerializer(serializers.Serializer):
    total_registrations = serializers.IntegerField()
    generated = serializers.IntegerField()
    already_exists = serializers.IntegerField()
    error_count = serializers.IntegerField()
    truncated = serializers.BooleanField()
    results = PassOutcomeSerializer(many=True)
    errors = PassOutcomeSerializer(many=True)


class PassCodeSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=32)


class PassValidationSerializer(serializers.Serializer):
    valid = serializers.BooleanField()
    error = serializers.CharField(allow_null=True)
    entry_pass = PassSerializer(allow_null=True)


class AttendanceResultSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField()
    attendee_name = serializers.CharField(allow_null=True)
    attendee_email = serializers.CharField(allow_null=True)
    already_marked = serializers.BooleanField()
    email_sent = serializers.BooleanField()


class PassStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    active = serializers.IntegerField()
    used = serializers.IntegerField()
    expired = serializers.IntegerField()


class SendResultSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    email_id = serializers.CharField(allow_null=True)
    error = serializers.CharField(allow_null=True)


class DeliveryFailureSerializer(serializers.Serializer):
    recipient = serializers.CharField()
    error = serializers.CharField()
    reference = serializers.CharField(allow_null=True)


class BulkSendResultSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    sent = serializers.IntegerField()
    error_count = serializers.IntegerField()
    email_ids = serializers.ListField(child=serializers.CharField())
    sent_to = serializers.ListField(child=serializers.CharField())
    failures = DeliveryFailureSerializer(many=True)
    truncated = serializers.BooleanField()


class ProductSerializer(serializers.Serializer):
    id = serializers.CharField()
    event_id = serializers.CharField()
    name = serializers.CharField()
    description = serializers.CharField(allow_null=True)
    price = serializers.IntegerField(source="price.amount")
    file_storage_id = serializers.CharField()
    file_name = serializers.CharField()
    file_size = serializers.IntegerField()
    file_type = serializers.CharField()
    downloads = serializers.IntegerField()
    created_by = serializers.CharField()
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class ProductInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    price = serializers.IntegerField()
    file_storage_id = serializers.CharField(max_length=255)
    file_name = serializers.CharField(max_length=255)
    file_size = serializers.IntegerField(min_value=0)
    file_type = serializers.CharField(max_length=128)


class CheckoutSerializer(serializers.Serializer):
    customer_name = serializers.CharField(max_length=255)
    customer_email = serializers.EmailField()


class PaymentSerializer(serializers.Serializer):
    id = serializers.CharField()
    product_id = serializers.CharField()
    event_id = serializers.CharField()
    customer_name = serializers.CharField()
    customer_email = serializers.EmailField()
    amount = serializers.IntegerField(source="amount.amount")
    payment_link_id = serializers.CharField()
    payment_link_url = serializers.CharField()
    status = EnumValueField()
    email_sent = serializers.BooleanField()
    email_sent_at = serializers.DateTimeField(allow_null=True)
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class CustomerPurchaseSerializer(serializers.Serializer):
    customer_name = serializers.CharField()
    customer_email = serializers.EmailField()
    amount = serializers.IntegerField(source="amount.amount")
    purchase_date = serializers.DateTimeField()
    payment_id = serializers.CharField()


class SalesAnalyticsSerializer(serializers.Serializer):
    id = serializers.CharField()
    event_id = serializers.CharField()
    product_id = serializers.CharField()
    product_name = serializers.CharField()
    total_sales = serializers.IntegerField(source="total_sales.amount")
    total_units = serializers.IntegerField()
    customer_count = serializers.IntegerField()
    last_sale_date = serializers.DateTimeField(allow_null=True)
    customers = CustomerPurchaseSerializer(many=True)


class SalesReportSerializer(serializers.Serializer):
    event_id = serializers.CharField()
    total_revenue = serializers.IntegerField(source="total_revenue.amount")
    total_units = serializers.IntegerField()
    total_customers = serializers.IntegerField()
    product_count = serializers.IntegerField()
    products = SalesAnalyticsSerializer(many=True)


class MessageSerializer(serializers.Serializer):
    subject = serializers.CharField(max_length=255)
    content = serializers.CharField()
    registration_ids = serializers.ListField(child=serializers.CharField(), required=False, allow_null=True)


class ScheduleEmailSerializer(MessageSerializer):
    scheduled_for = serializers.DateTimeField()


class ScheduledEmailSerializer(serializers.Serializer):
    id = serializers.CharField()
    event_id = serializers.CharField()
    subject = serializers.CharField()
    content = serializers.CharField()
    scheduled_for = serializers.DateTimeField()
    status = EnumValueField()
    send_to_all = serializers.BooleanField()
    registration_ids = serializers.ListField(child=serializers.CharField())
    created_at = serializers.DateTimeField()
    sent_at = serializers.DateTimeField(allow_null=True)
    email_ids = serializers.ListField(child=serializers.CharField())
    error = serializers.CharField(allow_null=True)


class ProviderResultSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    data = serializers.DictField(allow_null=True)
    error = serializers.CharField(allow_null=True)


class UpdateSerializer(serializers.Serializer):
    id = serializers.CharField()
    event_id = serializers.CharField()
    title = serializers.CharField()
    content = serializers.CharField()
    status = EnumValueField()
    created_by = serializers.CharField()
    created_at = serializers.DateTimeField()
    published_at = serializers.DateTimeField(allow_null=True)
    sent_at = serializers.DateTimeField(allow_null=True)
    email_ids = serializers.ListField(child=serializers.CharField())
    error = serializers.CharField(allow_null=True)


class UpdateInputSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    content = serializers.CharField()


class UpdateChangesSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255, required=False)
    content = serializers.CharField(required=False)
    status = serializers.ChoiceField(choices=["draft", "published", "sent"], required=False)


class UpdateStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    draft = serializers.IntegerField()
    published = serializers.IntegerField()
    sent = serializers.IntegerField()
    failed = serializers.IntegerField()


class UserSerializer(serializers.Serializer):
    """Organizer profile; the gateway secret is never rendered."""

    id = serializers.CharField()
    clerk_id = serializers.CharField()
    name = serializers.CharField()
    email = serializers.EmailField()
    created_at = serializers.DateTimeField()
    razorpay_key_id = serializers.CharField(allow_null=True)
    has_payment_credentials = serializers.BooleanField()


class UserInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)


class RazorpayCredentialsSerializer(serializers.Serializer):
    key_id = serializers.CharField(max_length=255)
    key_secret = serializers.CharField(max_length=255, write_only=True)


class StoredFileSerializer(serializers.Serializer):
    id = serializers.CharField()
    storage_id = serializers.CharField()
    name = serializers.CharField()
    content_type = serializers.CharField()
    size = serializers.IntegerField()
    uploaded_at = serializers.DateTimeField()
    uploaded_by = serializers.CharField(allow_null=True)


class FileMetadataSerializer(serializers.Serializer):
    storage_id = serializers.CharField(max_length=255)
    name = serializers.CharField(max_length=255)
    content_type = serializers.CharField(max_length=128)
    size = serializers.IntegerField(min_value=0)


class ExportStatsSerializer(serializers.Serializer):
    total_registrations = serializers.IntegerField()
    registered = serializers.IntegerField()
    waitlisted = serializers.IntegerField()
    cancelled = serializers.IntegerField()
    available_spots = serializers.SerializerMethodField()
    products = serializers.IntegerField()
    revenue = serializers.IntegerField(source="revenue.amount")
    passes_total = serializers.IntegerField()
    passes_active = serializers.IntegerField()
    passes_used = serializers.IntegerField()

    def get_available_spots(self, stats) -> int | str:
        return stats.available_spots


class EventUpdateResultSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    event = EventSerializer(allow_null=True)
    warning = serializers.BooleanField()
    message = serializers.CharField(allow_null=True)
    current_registered_count = serializers.IntegerField(allow_null=True)
    new_limit = serializers.IntegerField(allow_null=True)
    promoted = RegistrationSerializer(many=True)
    demoted = RegistrationSerializer(many=True)


class PromotionResultSerializer(serializers.Serializer):
    count = serializers.IntegerField()
    truncated = serializers.BooleanField()
    promoted = RegistrationSerializer(many=True)


class CancellationResultSerializer(serializers.Serializer):
    registration = RegistrationSerializer()
    promoted = RegistrationSerializer(allow_null=True)
