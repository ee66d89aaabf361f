from events.integrations.email import EmailClient, EmailDeliveryError, OutboundEmail, ResendEmailClient
from events.integrations.payments import (
    GatewayCredentials,
    PaymentGateway,
    PaymentGatewayError,
    PaymentLink,
    PaymentLinkRequest,
    PaymentLinkStatus,
    RazorpayGateway,
)

__all__ = [
    "EmailClient",
    "EmailDeliveryError",
    "OutboundEmail",
    "ResendEmailClient",
    "GatewayCredentials",
    "PaymentGateway",
    "PaymentGatewayError",
    "PaymentLink",
    "PaymentLinkRequest",
    "PaymentLinkStatus",
    "RazorpayGateway",
]
