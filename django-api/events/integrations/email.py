"""Transactional email API client."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager, nullcontext
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

logger = structlog.get_logger(__name__)


class EmailDeliveryError(Exception):
    """Raised when the email API cannot be reached or rejects a request."""


@dataclass(frozen=True)
class OutboundEmail:
    to: str
    subject: str
    html: str
    sender: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return {"to": self.to, "subject": self.subject, "html": self.html, "sender": self.sender}

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "OutboundEmail":
        return cls(
            to=payload["to"],
            subject=payload["subject"],
            html=payload["html"],
            sender=payload.get("sender"),
        )


class EmailClient(ABC):
    """Interface for the email-delivery provider."""

    @abstractmethod
    def send(self, email: OutboundEmail) -> str:
        """Send ``email`` and return the provider's message id."""
        ...

    @abstractmethod
    def status(self, email_id: str) -> dict[str, Any]:
        ...

    @abstractmethod
    def cancel(self, email_id: str) -> dict[str, Any]:
        ...


class ResendEmailClient(EmailClient):
    """Resend REST API."""

    def __init__(
        self,
        api_key: str,
        default_sender: str,
        base_url: str = "https://api.resend.com",
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._default_sender = default_sender
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client

    def send(self, email: OutboundEmail) -> str:
        payload = {
            "from": email.sender or self._default_sender,
            "to": [email.to],
            "subject": email.subject,
            "html": email.html,
        }
        data = self._request("POST", "/emails", json=payload)
        logger.info("email_sent", to=email.to, email_id=data.get("id"))
        return data["id"]

    def status(self, email_id: str) -> dict[str, Any]:
        return self._request("GET", f"/emails/{email_id}")

    def cancel(self, email_id: str) -> dict[str, Any]:
        return self._request("POST", f"/emails/{email_id}/cancel")

    def _session(self) -> AbstractContextManager[httpx.Client]:
        """An injected client stays open; otherwise each call gets its own."""
        if self._client is not None:
            return nullcontext(self._client)
        return httpx.Client(timeout=self._timeout)

    def _request(self, method: str, path: str, json: dict[str, Any] | None = None) -> dict[str, Any]:
        if not self._api_key:
            raise EmailDeliveryError("Resend API key not configured")
        try:
            with self._session() as client:
                response = client.request(
                    method,
                    f"{self._base_url}{path}",
                    json=json,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
        except httpx.HTTPError as e:
            raise EmailDeliveryError(f"Resend API error: {e}") from e
        if response.is_error:
            try:
                message = response.json().get("message") or response.status_code
            except ValueError:
                message = response.status_code
            raise EmailDeliveryError(f"Resend API error: {message}")
        return response.json()
