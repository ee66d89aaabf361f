from events.handlers.account_views import (
    FileDetailView,
    FileListView,
    MeView,
    RazorpayCredentialsView,
    StoredFileView,
    UploadUrlView,
    UploadView,
)
from events.handlers.commerce_views import (
    CheckoutView,
    EventPaymentsView,
    EventProductsView,
    EventSalesView,
    MyProductsView,
    MySalesView,
    PaymentCheckView,
    PaymentDetailView,
    PaymentVerifyView,
    ProductDetailView,
    ProductSalesView,
    RazorpayWebhookView,
)
from events.handlers.messaging_views import (
    CancelEmailView,
    CancelScheduledEmailView,
    EmailStatusView,
    EventEmailView,
    EventUpdatesView,
    MyUpdatesView,
    PublishUpdateView,
    ScheduledEmailListView,
    SendUpdateView,
    UpdateDetailView,
    UpdateStatsView,
)
from events.handlers.pass_views import (
    AttendanceView,
    EventPassesSendView,
    EventPassesView,
    PassDetailView,
    PassSendView,
    PassStatsView,
    PassUseView,
    PassValidateView,
    RegistrationPassView,
    WelcomeEmailView,
)
from events.handlers.views import (
    CancelRegistrationView,
    EventDetailView,
    EventExportEmailView,
    EventExportView,
    EventListView,
    EventRegistrationsView,
    MoveToWaitlistView,
    MyEventListView,
    MyRegistrationsView,
    PromoteAllView,
    PromoteRegistrationView,
    RegistrationCheckView,
    RegistrationCountsView,
    RegistrationDetailView,
    RestoreRegistrationView,
    ToggleRegistrationView,
    WaitlistView,
)
