"""Celery tasks: deferred email delivery and periodic triggers."""

import typing as t
from dataclasses import asdict

import structlog
from celery import shared_task
from django.db import transaction
from django.utils import timezone

from events import deps
from events.integrations.email import OutboundEmail
from events.services.delivery import deliver

logger = structlog.get_logger(__name__)


@shared_task(acks_late=True)
def send_email(payload: dict[str, t.Any]) -> str | None:
    """Deliver one queued email.

    A delivery failure is logged and dropped; nothing is retried.
    """
    email = OutboundEmail.from_payload(payload)
    result = deliver(deps.email_client(), email)
    return result.email_id


@shared_task
def process_scheduled_emails() -> dict[str, int]:
    """Send scheduled emails whose time has come."""
    report = deps.messaging_service().process_due(timezone.now())
    return asdict(report)


@shared_task
def send_event_reminders() -> int:
    """Queue reminders for events taking place tomorrow."""
    with transaction.atomic():
        queued = deps.messaging_service().send_event_reminders(timezone.localdate())
    return queued
