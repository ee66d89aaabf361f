"""Email composition.

Each builder renders one Django template and returns an OutboundEmail ready
for the dispatcher or the email client.
"""

from django.template.loader import render_to_string

from events.domain import DigitalProduct, Event, Pass, Registration
from events.integrations.email import OutboundEmail

TEMPLATE_DIR = "events/emails"


def _render(template: str, **context) -> str:
    return render_to_string(f"{TEMPLATE_DIR}/{template}", context)


def registration_confirmation(event: Event, registration: Registration) -> OutboundEmail:
    waitlisted = registration.waitlist_position is not None
    subject = f"Waitlisted: {event.title}" if waitlisted else f"Registration Confirmed: {event.title}"
    return OutboundEmail(
        to=registration.email,
        subject=subject,
        html=_render("registration_confirmation.html", event=event, registration=registration, waitlisted=waitlisted),
    )


def waitlist_promotion(event: Event, registration: Registration) -> OutboundEmail:
    return OutboundEmail(
        to=registration.email,
        subject=f"You're In: {event.title}",
        html=_render("waitlist_promotion.html", event=event, registration=registration),
    )


def limit_increase_promotion(event: Event, registration: Registration, new_limit: int | None) -> OutboundEmail:
    return OutboundEmail(
        to=registration.email,
        subject=f"\U0001f389 You're Confirmed: {event.title}",
        html=_render("limit_increase_promotion.html", event=event, registration=registration, new_limit=new_limit),
    )


def moved_to_waitlist(event: Event, registration: Registration) -> OutboundEmail:
    return OutboundEmail(
        to=registration.email,
        subject=f"Moved to Waitlist: {event.title}",
        html=_render("moved_to_waitlist.html", event=event, registration=registration),
    )


def event_reminder(event: Event, registration: Registration) -> OutboundEmail:
    return OutboundEmail(
        to=registration.email,
        subject=f"Reminder: {event.title} is tomorrow!",
        html=_render("event_reminder.html", event=event, registration=registration),
    )


def event_message(event: Event, registration: Registration, subject: str, content: str) -> OutboundEmail:
    """Organizer-authored message used by bulk, selected and scheduled sends."""
    return OutboundEmail(
        to=registration.email,
        subject=subject,
        html=_render("event_message.html", event=event, registration=registration, subject=subject, content=content),
    )


def event_update(event: Event, registration: Registration, title: str, content: str) -> OutboundEmail:
    return OutboundEmail(
        to=registration.email,
        subject=f"Event Update: {title}",
        html=_render("event_update.html", event=event, registration=registration, title=title, content=content),
    )


def entry_pass(event: Event, entry_pass: Pass) -> OutboundEmail:
    return OutboundEmail(
        to=entry_pass.attendee_email,
        subject=f"Your Event Pass - {event.title}",
        html=_render("entry_pass.html", event=event, entry_pass=entry_pass),
    )


def attendance_welcome(event: Event, registration: Registration) -> OutboundEmail:
    return OutboundEmail(
        to=registration.email,
        subject=f"Welcome to {event.title} - Thank you for attending!",
        html=_render("attendance_welcome.html", event=event, registration=registration),
    )


def product_delivery(product: DigitalProduct, customer_name: str, customer_email: str, file_url: str) -> OutboundEmail:
    return OutboundEmail(
        to=customer_email,
        subject=f"Your Digital Product: {product.name}",
        html=_render("product_delivery.html", product=product, customer_name=customer_name, file_url=file_url),
    )


def export_report(event: Event, recipient: str, html: str) -> OutboundEmail:
    return OutboundEmail(to=recipient, subject=f"Event Export: {event.title}", html=html)
