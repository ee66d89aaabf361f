"""Deferred email dispatch.

Enqueued emails are delivered after the enqueuing transaction commits. A
delivery failure never touches the state that was committed.
"""

from abc import ABC, abstractmethod

import structlog
from django.db import transaction

from events.integrations.email import OutboundEmail

logger = structlog.get_logger(__name__)


class EmailDispatcher(ABC):
    """Interface for fire-and-forget email delivery."""

    @abstractmethod
    def enqueue(self, email: OutboundEmail) -> None:
        ...


class CeleryEmailDispatcher(EmailDispatcher):
    """Queues ``events.tasks.send_email`` once the current transaction commits."""

    def enqueue(self, email: OutboundEmail) -> None:
        from events.tasks import send_email

        payload = email.to_payload()
        transaction.on_commit(lambda: send_email.delay(payload))
        logger.info("email_enqueued", to=email.to, subject=email.subject)
