"""Synchronous email delivery with failures captured as results.

Used where the caller needs the provider's message ids or a per-recipient
report. Fire-and-forget notifications go through the dispatcher instead.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

import structlog

from events.integrations.email import EmailClient, EmailDeliveryError, OutboundEmail

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SendResult:
    success: bool
    email_id: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class DeliveryFailure:
    recipient: str
    error: str
    reference: str | None = None


@dataclass(frozen=True)
class BulkSendResult:
    """Per-recipient report of a bulk send."""

    total: int
    email_ids: list[str] = field(default_factory=list)
    sent_to: list[str] = field(default_factory=list)
    failures: list[DeliveryFailure] = field(default_factory=list)
    truncated: bool = False

    @property
    def sent(self) -> int:
        return len(self.email_ids)

    @property
    def error_count(self) -> int:
        return len(self.failures)


def deliver(client: EmailClient, email: OutboundEmail) -> SendResult:
    try:
        email_id = client.send(email)
    except EmailDeliveryError as e:
        logger.warning("email_delivery_failed", to=email.to, subject=email.subject, error=str(e))
        return SendResult(success=False, error=str(e))
    return SendResult(success=True, email_id=email_id)


def deliver_all(
    client: EmailClient,
    messages: Sequence[tuple[str, OutboundEmail]],
    limit: int,
) -> BulkSendResult:
    """Send at most ``limit`` of ``messages``; each item is (reference, email)."""
    batch = messages[:limit]
    email_ids: list[str] = []
    sent_to: list[str] = []
    failures: list[DeliveryFailure] = []
    for reference, email in batch:
        result = deliver(client, email)
        if result.success:
            email_ids.append(result.email_id)
            sent_to.append(reference)
        else:
            failures.append(DeliveryFailure(recipient=email.to, error=result.error, reference=reference))
    truncated = len(messages) > limit
    if truncated:
        logger.warning("bulk_send_truncated", total=len(messages), limit=limit)
    return BulkSendResult(
        total=len(messages),
        email_ids=email_ids,
        sent_to=sent_to,
        failures=failures,
        truncated=truncated,
    )
