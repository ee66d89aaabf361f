from django.contrib import admin

from events.models import (
    DigitalProduct,
    Event,
    Pass,
    Payment,
    Registration,
    SalesAnalytics,
    ScheduledEmail,
    StoredFile,
    Update,
    UserProfile,
)


class RegistrationInline(admin.TabularInline):
    model = Registration
    extra = 0
    fields = ["name", "email", "status", "waitlist_position", "registered_at"]
    readonly_fields = ["registered_at"]


class DigitalProductInline(admin.TabularInline):
    model = DigitalProduct
    extra = 0
    fields = ["name", "price", "downloads"]


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["title", "date", "location", "participant_limit", "registration_closed", "created_by"]
    list_filter = ["registration_closed"]
    search_fields = ["title", "location", "created_by"]
    inlines = [RegistrationInline, DigitalProductInline]


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display = ["name", "email", "event", "status", "waitlist_position", "registered_at"]
    list_filter = ["status", "event"]
    search_fields = ["name", "email"]


@admin.register(Pass)
class PassAdmin(admin.ModelAdmin):
    list_display = ["code", "attendee_name", "event", "status", "generated_at", "used_at"]
    list_filter = ["status", "event"]
    search_fields = ["code", "attendee_email"]


@admin.register(DigitalProduct)
class DigitalProductAdmin(admin.ModelAdmin):
    list_display = ["name", "event", "price", "downloads", "created_by"]
    list_filter = ["event"]


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ["customer_email", "product_id", "amount", "status", "email_sent", "created_at"]
    list_filter = ["status", "email_sent"]
    search_fields = ["customer_email", "payment_link_id"]


@admin.register(SalesAnalytics)
class SalesAnalyticsAdmin(admin.ModelAdmin):
    list_display = ["product_name", "event", "total_sales", "total_units", "customer_count", "last_sale_date"]
    list_filter = ["event"]


@admin.register(ScheduledEmail)
class ScheduledEmailAdmin(admin.ModelAdmin):
    list_display = ["subject", "event", "scheduled_for", "status", "send_to_all"]
    list_filter = ["status"]


@admin.register(Update)
class UpdateAdmin(admin.ModelAdmin):
    list_display = ["title", "event", "status", "created_by", "sent_at"]
    list_filter = ["status"]


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ["email", "name", "created_at"]
    search_fields = ["email", "name"]
    exclude = ["razorpay_key_secret"]


@admin.register(StoredFile)
class StoredFileAdmin(admin.ModelAdmin):
    list_display = ["name", "storage_id", "content_type", "size", "uploaded_by", "uploaded_at"]
    search_fields = ["name", "storage_id"]
