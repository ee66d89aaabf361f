from django.urls import path

from events.handlers import (
    AttendanceView,
    CancelEmailView,
    CancelRegistrationView,
    CancelScheduledEmailView,
    CheckoutView,
    EmailStatusView,
    EventDetailView,
    EventEmailView,
    EventExportEmailView,
    EventExportView,
    EventListView,
    EventPassesSendView,
    EventPassesView,
    EventPaymentsView,
    EventProductsView,
    EventRegistrationsView,
    EventSalesView,
    EventUpdatesView,
    FileDetailView,
    FileListView,
    MeView,
    MoveToWaitlistView,
    MyEventListView,
    MyProductsView,
    MyRegistrationsView,
    MySalesView,
    MyUpdatesView,
    PassDetailView,
    PassSendView,
    PassStatsView,
    PassUseView,
    PassValidateView,
    PaymentCheckView,
    PaymentDetailView,
    PaymentVerifyView,
    ProductDetailView,
    ProductSalesView,
    PromoteAllView,
    PromoteRegistrationView,
    PublishUpdateView,
    RazorpayCredentialsView,
    RazorpayWebhookView,
    RegistrationCheckView,
    RegistrationCountsView,
    RegistrationDetailView,
    RegistrationPassView,
    RestoreRegistrationView,
    ScheduledEmailListView,
    SendUpdateView,
    StoredFileView,
    ToggleRegistrationView,
    UpdateDetailView,
    UpdateStatsView,
    UploadUrlView,
    UploadView,
    WaitlistView,
    WelcomeEmailView,
)

urlpatterns = [
    # Events
    path("events", EventListView.as_view(), name="event-list"),
    path("events/mine", MyEventListView.as_view(), name="event-mine"),
    path("events/<str:event_id>", EventDetailView.as_view(), name="event-detail"),
    path(
        "events/<str:event_id>/toggle-registration",
        ToggleRegistrationView.as_view(),
        name="event-toggle-registration",
    ),
    path("events/<str:event_id>/export", EventExportView.as_view(), name="event-export"),
    path("events/<str:event_id>/export/email", EventExportEmailView.as_view(), name="event-export-email"),
    # Registrations and waitlist
    path("events/<str:event_id>/registrations", EventRegistrationsView.as_view(), name="event-registrations"),
    path(
        "events/<str:event_id>/registrations/check",
        RegistrationCheckView.as_view(),
        name="registration-check",
    ),
    path(
        "events/<str:event_id>/registrations/counts",
        RegistrationCountsView.as_view(),
        name="registration-counts",
    ),
    path("events/<str:event_id>/waitlist", WaitlistView.as_view(), name="event-waitlist"),
    path("events/<str:event_id>/waitlist/promote", PromoteAllView.as_view(), name="event-waitlist-promote"),
    path("registrations", MyRegistrationsView.as_view(), name="registration-list"),
    path("registrations/<str:registration_id>", RegistrationDetailView.as_view(), name="registration-detail"),
    path(
        "registrations/<str:registration_id>/cancel",
        CancelRegistrationView.as_view(),
        name="registration-cancel",
    ),
    path(
        "registrations/<str:registration_id>/restore",
        RestoreRegistrationView.as_view(),
        name="registration-restore",
    ),
    path(
        "registrations/<str:registration_id>/promote",
        PromoteRegistrationView.as_view(),
        name="registration-promote",
    ),
    path(
        "registrations/<str:registration_id>/move-to-waitlist",
        MoveToWaitlistView.as_view(),
        name="registration-move-to-waitlist",
    ),
    # Passes and check-in
    path("events/<str:event_id>/passes", EventPassesView.as_view(), name="event-passes"),
    path("events/<str:event_id>/passes/send", EventPassesSendView.as_view(), name="event-passes-send"),
    path("events/<str:event_id>/passes/stats", PassStatsView.as_view(), name="event-passes-stats"),
    path("events/<str:event_id>/passes/validate", PassValidateView.as_view(), name="event-passes-validate"),
    path("registrations/<str:registration_id>/pass", RegistrationPassView.as_view(), name="registration-pass"),
    path(
        "registrations/<str:registration_id>/attendance",
        AttendanceView.as_view(),
        name="registration-attendance",
    ),
    path(
        "registrations/<str:registration_id>/welcome-email",
        WelcomeEmailView.as_view(),
        name="registration-welcome-email",
    ),
    path("passes/<str:pass_id>", PassDetailView.as_view(), name="pass-detail"),
    path("passes/<str:pass_id>/use", PassUseView.as_view(), name="pass-use"),
    path("passes/<str:pass_id>/send", PassSendView.as_view(), name="pass-send"),
    # Products, payments and sales
    path("events/<str:event_id>/products", EventProductsView.as_view(), name="event-products"),
    path("events/<str:event_id>/payments", EventPaymentsView.as_view(), name="event-payments"),
    path("events/<str:event_id>/sales", EventSalesView.as_view(), name="event-sales"),
    path("products/mine", MyProductsView.as_view(), name="product-mine"),
    path("products/<str:product_id>", ProductDetailView.as_view(), name="product-detail"),
    path("products/<str:product_id>/sales", ProductSalesView.as_view(), name="product-sales"),
    path("products/<str:product_id>/checkout", CheckoutView.as_view(), name="product-checkout"),
    path("payments/<str:payment_id>", PaymentDetailView.as_view(), name="payment-detail"),
    path("payments/<str:payment_id>/verify", PaymentVerifyView.as_view(), name="payment-verify"),
    path("payments/<str:payment_id>/check", PaymentCheckView.as_view(), name="payment-check"),
    path("sales/mine", MySalesView.as_view(), name="sales-mine"),
    path("webhooks/razorpay", RazorpayWebhookView.as_view(), name="webhook-razorpay"),
    # Messaging and updates
    path("events/<str:event_id>/emails", EventEmailView.as_view(), name="event-emails"),
    path(
        "events/<str:event_id>/scheduled-emails",
        ScheduledEmailListView.as_view(),
        name="event-scheduled-emails",
    ),
    path(
        "scheduled-emails/<str:scheduled_email_id>/cancel",
        CancelScheduledEmailView.as_view(),
        name="scheduled-email-cancel",
    ),
    path("emails/<str:email_id>", EmailStatusView.as_view(), name="email-status"),
    path("emails/<str:email_id>/cancel", CancelEmailView.as_view(), name="email-cancel"),
    path("events/<str:event_id>/updates", EventUpdatesView.as_view(), name="event-updates"),
    path("events/<str:event_id>/updates/stats", UpdateStatsView.as_view(), name="event-updates-stats"),
    path("updates/mine", MyUpdatesView.as_view(), name="update-mine"),
    path("updates/<str:update_id>", UpdateDetailView.as_view(), name="update-detail"),
    path("updates/<str:update_id>/send", SendUpdateView.as_view(), name="update-send"),
    path("updates/<str:update_id>/publish", PublishUpdateView.as_view(), name="update-publish"),
    # Users and files
    path("users/me", MeView.as_view(), name="user-me"),
    path("users/me/razorpay", RazorpayCredentialsView.as_view(), name="user-razorpay"),
    path("files", FileListView.as_view(), name="file-list"),
    path("files/upload-url", UploadUrlView.as_view(), name="file-upload-url"),
    path("files/upload/<str:token>", UploadView.as_view(), name="file-upload"),
    path("files/storage/<path:storage_id>", StoredFileView.as_view(), name="file-storage"),
    path("files/<str:file_id>", FileDetailView.as_view(), name="file-detail"),
]
