"""Product checkout through gateway payment links.

Gateway and email failures come back as unsuccessful results so the caller
can show the message; missing records still raise domain errors.
"""

import hashlib
import hmac
import json
from dataclasses import dataclass, replace
from typing import Any

import structlog
from django.utils import timezone

from events.domain import DigitalProduct, EventId, Payment, PaymentId, PaymentStatus, ProductId
from events.domain.errors import (
    EventNotFoundError,
    InvalidWebhookSignatureError,
    PaymentNotFoundError,
    ProductNotFoundError,
    ValidationFailedError,
)
from events.integrations.email import EmailClient
from events.integrations.payments import (
    GatewayCredentials,
    PaymentGateway,
    PaymentGatewayError,
    PaymentLinkRequest,
)
from events.services import emails
from events.services.common import parse_id, require_text
from events.services.delivery import deliver
from events.services.file_service import FileService
from events.services.sales_analytics import SalesAnalyticsService
from events.stores.interfaces import EventStore, PaymentStore, ProductStore, UserStore

logger = structlog.get_logger(__name__)

PAID_EVENT = "payment_link.paid"


@dataclass(frozen=True)
class PaymentLinkResult:
    success: bool
    payment_id: str | None = None
    payment_link_url: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class VerificationResult:
    success: bool
    is_paid: bool = False
    status: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class PaymentCheckResult:
    success: bool
    message: str
    payment_status: str | None = None


@dataclass(frozen=True)
class WebhookResult:
    success: bool
    message: str


class CredentialsUnavailable(Exception):
    """The product owner cannot take payments yet."""


class PaymentService:
    def __init__(
        self,
        events: EventStore,
        products: ProductStore,
        payments: PaymentStore,
        users: UserStore,
        gateway: PaymentGateway,
        email_client: EmailClient,
        files: FileService,
        analytics: SalesAnalyticsService,
        currency: str = "INR",
        webhook_secret: str = "",
    ) -> None:
        self._events = events
        self._products = products
        self._payments = payments
        self._users = users
        self._gateway = gateway
        self._email_client = email_client
        self._files = files
        self._analytics = analytics
        self._currency = currency
        self._webhook_secret = webhook_secret

    def generate_payment_link(self, product_id: str, customer_name: str, customer_email: str) -> PaymentLinkResult:
        """Create a checkout link for a product and record a pending payment."""
        product = self._get_product(product_id)
        customer_name = require_text(customer_name, "Customer name")
        customer_email = require_text(customer_email, "Customer email")
        try:
            credentials = self._credentials_for(product)
        except CredentialsUnavailable as e:
            return PaymentLinkResult(success=False, error=str(e))

        request = PaymentLinkRequest(
            amount=product.price.amount,
            currency=self._currency,
            description=f"Purchase: {product.name}",
            customer_name=customer_name,
            customer_email=customer_email,
        )
        try:
            link = self._gateway.create_payment_link(credentials, request)
        except PaymentGatewayError as e:
            logger.warning("payment_link_failed", product_id=product_id, error=str(e))
            return PaymentLinkResult(success=False, error=str(e))

        now = timezone.now()
        payment = Payment(
            id=PaymentId.new(),
            product_id=product.id,
            event_id=product.event_id,
            customer_name=customer_name,
            customer_email=customer_email,
            amount=product.price,
            payment_link_id=link.link_id,
            payment_link_url=link.url,
            status=PaymentStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        self._payments.save(payment)
        logger.info("payment_link_created", payment_id=str(payment.id), product_id=product_id, link_id=link.link_id)
        return PaymentLinkResult(success=True, payment_id=str(payment.id), payment_link_url=link.url)

    def verify_payment(self, payment_id: str) -> VerificationResult:
        """Ask the gateway whether the payment link has been paid.

        A link the gateway reports as expired or cancelled fails the payment.
        """
        payment = self.get_payment(payment_id)
        product = self._get_product(str(payment.product_id))
        try:
            credentials = self._credentials_for(product)
            status = self._gateway.fetch_payment_link(credentials, payment.payment_link_id)
        except (CredentialsUnavailable, PaymentGatewayError) as e:
            logger.warning("payment_verification_failed", payment_id=payment_id, error=str(e))
            return VerificationResult(success=False, error=str(e))

        if status.is_closed_unpaid and payment.status == PaymentStatus.PENDING:
            self._payments.save(replace(payment, status=PaymentStatus.FAILED, updated_at=timezone.now()))
            logger.info("payment_failed", payment_id=payment_id, gateway_status=status.status)
        return VerificationResult(success=True, is_paid=status.is_paid, status=status.status)

    def manual_payment_check(self, payment_id: str) -> PaymentCheckResult:
        """Verify with the gateway and complete the payment once paid."""
        verification = self.verify_payment(payment_id)
        if not verification.success:
            return PaymentCheckResult(
                success=False,
                message=f"Payment verification failed: {verification.error}",
            )
        if not verification.is_paid:
            return PaymentCheckResult(
                success=False,
                message=f"Payment not completed. Status: {verification.status}",
                payment_status=verification.status,
            )
        completed = self.complete_payment(self.get_payment(payment_id))
        message = (
            "Payment verified and email sent successfully"
            if completed.email_sent
            else "Payment verified but the product email could not be sent"
        )
        return PaymentCheckResult(success=True, message=message, payment_status="paid")

    def handle_webhook(self, body: bytes, signature: str | None) -> WebhookResult:
        """Process a gateway webhook delivery.

        Raises:
            InvalidWebhookSignatureError: If a secret is configured and the
                signature does not match the raw body.
            PaymentNotFoundError: If a paid link has no payment record.
        """
        if self._webhook_secret and not self.signature_matches(body, signature):
            logger.warning("webhook_signature_rejected")
            raise InvalidWebhookSignatureError()
        try:
            payload: dict[str, Any] = json.loads(body)
        except ValueError:
            raise ValidationFailedError("Webhook body is not valid JSON") from None

        event = payload.get("event")
        if event != PAID_EVENT:
            logger.info("webhook_ignored", webhook_event=event)
            return WebhookResult(success=True, message="Webhook processed")

        try:
            link_id = payload["payload"]["payment_link"]["entity"]["id"]
        except (KeyError, TypeError):
            raise ValidationFailedError("Webhook payload is missing the payment link") from None
        payment = self._payments.get_by_link_id(link_id)
        if payment is None:
            raise PaymentNotFoundError(link_id)
        self.complete_payment(payment)
        return WebhookResult(success=True, message="Payment processed successfully")

    def signature_matches(self, body: bytes, signature: str | None) -> bool:
        if not signature:
            return False
        expected = hmac.new(self._webhook_secret.encode(), body, hashlib.sha256).hexdigest()
        return hmac.compare_digest(expected, signature)

    def complete_payment(self, payment: Payment) -> Payment:
        """Mark a payment completed, record the sale and deliver the product.

        The payment is re-read under a row lock, so concurrent deliveries of
        the same webhook complete it once. Completing an already completed
        payment changes nothing.
        """
        current = self._payments.lock(payment.id)
        if current is None:
            raise PaymentNotFoundError(str(payment.id))
        if current.status == PaymentStatus.COMPLETED:
            logger.info("payment_already_completed", payment_id=str(payment.id))
            return current

        completed = replace(current, status=PaymentStatus.COMPLETED, updated_at=timezone.now())
        self._payments.save(completed)

        product = self._products.get(current.product_id)
        if product is None:
            logger.warning("payment_product_missing", payment_id=str(payment.id), product_id=str(current.product_id))
            return completed

        self._analytics.record_sale(completed)
        self._products.save(replace(product, downloads=product.downloads + 1, updated_at=timezone.now()))

        file_url = self._files.file_url(product.file_storage_id)
        if file_url is None:
            logger.warning("product_file_missing", payment_id=str(payment.id), product_id=str(product.id))
            return completed

        sent = deliver(
            self._email_client,
            emails.product_delivery(product, current.customer_name, current.customer_email, file_url),
        )
        if sent.success:
            completed = replace(completed, email_sent=True, email_sent_at=timezone.now())
            self._payments.save(completed)
        logger.info("payment_completed", payment_id=str(payment.id), email_sent=completed.email_sent)
        return completed

    def get_payment(self, payment_id: str) -> Payment:
        payment = self._payments.get(parse_id(PaymentId, payment_id, "payment"))
        if payment is None:
            raise PaymentNotFoundError(payment_id)
        return payment

    def list_payments(self, event_id: str) -> list[Payment]:
        return self._payments.list_for_event(parse_id(EventId, event_id, "event"))

    def _get_product(self, product_id: str) -> DigitalProduct:
        product = self._products.get(parse_id(ProductId, product_id, "product"))
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def _credentials_for(self, product: DigitalProduct) -> GatewayCredentials:
        event = self._events.get_event(product.event_id)
        if event is None:
            raise EventNotFoundError(str(product.event_id))
        owner = self._users.get_by_clerk_id(event.created_by)
        if owner is None:
            raise CredentialsUnavailable("Product owner not found")
        if not owner.has_payment_credentials:
            raise CredentialsUnavailable(
                "Razorpay credentials not configured. Please add your Razorpay API keys in settings."
            )
        return GatewayCredentials(key_id=owner.razorpay_key_id, key_secret=owner.razorpay_key_secret)
