"""Service wiring.

Builds services and their collaborators from Django settings. Handlers and
tasks call these factories per request so tests can patch any of them.
"""

from django.conf import settings
from django.core.files.storage import default_storage

from events.integrations.email import EmailClient, ResendEmailClient
from events.integrations.payments import PaymentGateway, RazorpayGateway
from events.services.dispatch import CeleryEmailDispatcher, EmailDispatcher
from events.services.event_service import EventService
from events.services.export_service import ExportService
from events.services.file_service import FileService
from events.services.messaging_service import MessagingService
from events.services.pass_service import PassService
from events.services.payment_service import PaymentService
from events.services.product_service import ProductService
from events.services.registration_service import RegistrationService
from events.services.sales_analytics import SalesAnalyticsService
from events.services.update_service import UpdateService
from events.services.user_service import UserService
from events.stores.django_store import (
    DjangoEventStore,
    DjangoFileStore,
    DjangoPassStore,
    DjangoPaymentStore,
    DjangoProductStore,
    DjangoRegistrationStore,
    DjangoSalesAnalyticsStore,
    DjangoScheduledEmailStore,
    DjangoUpdateStore,
    DjangoUserStore,
)


def email_client() -> EmailClient:
    return ResendEmailClient(
        api_key=settings.RESEND_API_KEY,
        default_sender=settings.EMAIL_SENDER,
        base_url=settings.RESEND_BASE_URL,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )


def payment_gateway() -> PaymentGateway:
    return RazorpayGateway(base_url=settings.RAZORPAY_BASE_URL, timeout=settings.HTTP_TIMEOUT_SECONDS)


def dispatcher() -> EmailDispatcher:
    return CeleryEmailDispatcher()


def registration_service() -> RegistrationService:
    return RegistrationService(
        events=DjangoEventStore(),
        registrations=DjangoRegistrationStore(),
        dispatcher=dispatcher(),
        bulk_limit=settings.BULK_OPERATION_LIMIT,
    )


def event_service() -> EventService:
    return EventService(
        store=DjangoEventStore(),
        registrations=DjangoRegistrationStore(),
        registration_service=registration_service(),
    )


def pass_service() -> PassService:
    return PassService(
        events=DjangoEventStore(),
        registrations=DjangoRegistrationStore(),
        passes=DjangoPassStore(),
        email_client=email_client(),
        max_attempts=settings.PASS_CODE_MAX_ATTEMPTS,
        bulk_limit=settings.BULK_OPERATION_LIMIT,
    )


def file_service() -> FileService:
    return FileService(
        store=DjangoFileStore(),
        storage=default_storage,
        max_age=settings.FILE_UPLOAD_URL_MAX_AGE,
        public_base_url=settings.PUBLIC_BASE_URL,
    )


def product_service() -> ProductService:
    return ProductService(
        events=DjangoEventStore(),
        products=DjangoProductStore(),
        analytics=DjangoSalesAnalyticsStore(),
        files=file_service(),
    )


def sales_analytics_service() -> SalesAnalyticsService:
    return SalesAnalyticsService(
        analytics=DjangoSalesAnalyticsStore(),
        products=DjangoProductStore(),
        events=DjangoEventStore(),
    )


def payment_service() -> PaymentService:
    return PaymentService(
        events=DjangoEventStore(),
        products=DjangoProductStore(),
        payments=DjangoPaymentStore(),
        users=DjangoUserStore(),
        gateway=payment_gateway(),
        email_client=email_client(),
        files=file_service(),
        analytics=sales_analytics_service(),
        currency=settings.PAYMENT_CURRENCY,
        webhook_secret=settings.RAZORPAY_WEBHOOK_SECRET,
    )


def messaging_service() -> MessagingService:
    return MessagingService(
        events=DjangoEventStore(),
        registrations=DjangoRegistrationStore(),
        scheduled=DjangoScheduledEmailStore(),
        email_client=email_client(),
        dispatcher=dispatcher(),
        bulk_limit=settings.BULK_OPERATION_LIMIT,
    )


def update_service() -> UpdateService:
    return UpdateService(
        events=DjangoEventStore(),
        registrations=DjangoRegistrationStore(),
        updates=DjangoUpdateStore(),
        email_client=email_client(),
        bulk_limit=settings.BULK_OPERATION_LIMIT,
    )


def user_service() -> UserService:
    return UserService(store=DjangoUserStore())


def export_service() -> ExportService:
    return ExportService(
        events=DjangoEventStore(),
        registrations=DjangoRegistrationStore(),
        products=DjangoProductStore(),
        passes=DjangoPassStore(),
        analytics=DjangoSalesAnalyticsStore(),
        dispatcher=dispatcher(),
    )
