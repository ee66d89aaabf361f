"""Payment gateway client.

Payment links are created and polled over plain HTTP. Credentials belong to
the organizer selling the product, so they are passed per call.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager, nullcontext
from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

logger = structlog.get_logger(__name__)

PAID_STATUS = "paid"
TERMINAL_UNPAID_STATUSES = frozenset({"expired", "cancelled"})


class PaymentGatewayError(Exception):
    """Raised when the gateway cannot be reached or rejects a request."""


@dataclass(frozen=True)
class GatewayCredentials:
    key_id: str
    key_secret: str = field(repr=False)


@dataclass(frozen=True)
class PaymentLinkRequest:
    """Parameters for creating a payment link."""

    amount: int  # In smallest currency unit
    currency: str
    description: str
    customer_name: str
    customer_email: str


@dataclass(frozen=True)
class PaymentLink:
    link_id: str
    url: str


@dataclass(frozen=True)
class PaymentLinkStatus:
    """Current status of a payment link."""

    link_id: str
    status: str
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_paid(self) -> bool:
        return self.status == PAID_STATUS

    @property
    def is_closed_unpaid(self) -> bool:
        return self.status in TERMINAL_UNPAID_STATUSES


class PaymentGateway(ABC):
    """Interface for payment-link providers."""

    @abstractmethod
    def create_payment_link(self, credentials: GatewayCredentials, request: PaymentLinkRequest) -> PaymentLink:
        ...

    @abstractmethod
    def fetch_payment_link(self, credentials: GatewayCredentials, link_id: str) -> PaymentLinkStatus:
        ...


class RazorpayGateway(PaymentGateway):
    """Razorpay payment links API."""

    def __init__(
        self,
        base_url: str = "https://api.razorpay.com/v1",
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client

    def create_payment_link(self, credentials: GatewayCredentials, request: PaymentLinkRequest) -> PaymentLink:
        payload = {
            "amount": request.amount,
            "currency": request.currency,
            "description": request.description,
            "customer": {
                "name": request.customer_name,
                "email": request.customer_email,
            },
            "notify": {"sms": False, "email": True},
            "reminder_enable": True,
        }
        data = self._request("POST", "/payment_links", credentials, json=payload)
        return PaymentLink(link_id=data["id"], url=data["short_url"])

    def fetch_payment_link(self, credentials: GatewayCredentials, link_id: str) -> PaymentLinkStatus:
        data = self._request("GET", f"/payment_links/{link_id}", credentials)
        return PaymentLinkStatus(link_id=link_id, status=data.get("status", "unknown"), raw=data)

    def _session(self) -> AbstractContextManager[httpx.Client]:
        """An injected client stays open; otherwise each call gets its own."""
        if self._client is not None:
            return nullcontext(self._client)
        return httpx.Client(timeout=self._timeout)

    def _request(
        self,
        method: str,
        path: str,
        credentials: GatewayCredentials,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        try:
            with self._session() as client:
                response = client.request(
                    method,
                    f"{self._base_url}{path}",
                    json=json,
                    auth=(credentials.key_id, credentials.key_secret),
                )
        except httpx.HTTPError as e:
            logger.error("razorpay_request_failed", path=path, error=str(e))
            raise PaymentGatewayError(f"Razorpay API error: {e}") from e
        if response.is_error:
            logger.warning("razorpay_error_response", path=path, status_code=response.status_code)
            raise PaymentGatewayError(f"Razorpay API error: {response.status_code}")
        return response.json()
