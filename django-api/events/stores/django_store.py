"""Django ORM implementation of the stores.

Each store queries the ORM and converts rows to domain models.
"""

from datetime import datetime

from django.db import transaction
from django.utils.dateparse import parse_datetime

from events import models
from events.domain import (
    AnalyticsId,
    CustomerPurchase,
    DigitalProduct,
    Event,
    EventId,
    FileId,
    Money,
    ParticipantLimit,
    Pass,
    PassCode,
    PassId,
    PassStatus,
    Payment,
    PaymentId,
    PaymentStatus,
    ProductId,
    Registration,
    RegistrationId,
    RegistrationStatus,
    SalesAnalytics,
    ScheduledEmail,
    ScheduledEmailId,
    ScheduledEmailStatus,
    StoredFile,
    Update,
    UpdateId,
    UpdateStatus,
    User,
    UserId,
)
from events.stores.interfaces import (
    EventStore,
    FileStore,
    PassStore,
    PaymentStore,
    ProductStore,
    RegistrationStore,
    SalesAnalyticsStore,
    ScheduledEmailStore,
    UpdateStore,
    UserStore,
)


def _event_to_domain(row: models.Event) -> Event:
    return Event(
        id=EventId(row.id),
        title=row.title,
        description=row.description,
        date=row.date,
        location=row.location,
        header_image=row.header_image,
        participant_limit=ParticipantLimit(row.participant_limit) if row.participant_limit else None,
        registration_closed=row.registration_closed,
        created_by=row.created_by,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _registration_to_domain(row: models.Registration) -> Registration:
    return Registration(
        id=RegistrationId(row.id),
        event_id=EventId(row.event_id),
        name=row.name,
        email=row.email,
        status=RegistrationStatus(row.status),
        waitlist_position=row.waitlist_position,
        registered_at=row.registered_at,
        attended_at=row.attended_at,
        attended_by=row.attended_by,
    )


def _pass_to_domain(row: models.Pass) -> Pass:
    return Pass(
        id=PassId(row.id),
        event_id=EventId(row.event_id),
        registration_id=RegistrationId(row.registration_id),
        code=PassCode(row.code),
        attendee_name=row.attendee_name,
        attendee_email=row.attendee_email,
        status=PassStatus(row.status),
        generated_at=row.generated_at,
        generated_by=row.generated_by,
        used_at=row.used_at,
    )


def _product_to_domain(row: models.DigitalProduct) -> DigitalProduct:
    return DigitalProduct(
        id=ProductId(row.id),
        event_id=EventId(row.event_id),
        name=row.name,
        description=row.description,
        price=Money(row.price),
        file_storage_id=row.file_storage_id,
        file_name=row.file_name,
        file_size=row.file_size,
        file_type=row.file_type,
        downloads=row.downloads,
        created_by=row.created_by,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _payment_to_domain(row: models.Payment) -> Payment:
    return Payment(
        id=PaymentId(row.id),
        product_id=ProductId(row.product_id),
        event_id=EventId(row.event_id),
        customer_name=row.customer_name,
        customer_email=row.customer_email,
        amount=Money(row.amount),
        payment_link_id=row.payment_link_id,
        payment_link_url=row.payment_link_url,
        status=PaymentStatus(row.status),
        email_sent=row.email_sent,
        email_sent_at=row.email_sent_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _purchase_from_json(data: dict) -> CustomerPurchase:
    return CustomerPurchase(
        customer_name=data["customer_name"],
        customer_email=data["customer_email"],
        amount=Money(data["amount"]),
        purchase_date=parse_datetime(data["purchase_date"]),
        payment_id=PaymentId.from_string(data["payment_id"]),
    )


def _purchase_to_json(purchase: CustomerPurchase) -> dict:
    return {
        "customer_name": purchase.customer_name,
        "customer_email": purchase.customer_email,
        "amount": purchase.amount.amount,
        "purchase_date": purchase.purchase_date.isoformat(),
        "payment_id": str(purchase.payment_id),
    }


def _analytics_to_domain(row: models.SalesAnalytics) -> SalesAnalytics:
    return SalesAnalytics(
        id=AnalyticsId(row.id),
        event_id=EventId(row.event_id),
        product_id=ProductId(row.product_id),
        product_name=row.product_name,
        customers=tuple(_purchase_from_json(c) for c in row.customers),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _scheduled_email_to_domain(row: models.ScheduledEmail) -> ScheduledEmail:
    return ScheduledEmail(
        id=ScheduledEmailId(row.id),
        event_id=EventId(row.event_id),
        registration_ids=tuple(RegistrationId.from_string(r) for r in row.registration_ids),
        send_to_all=row.send_to_all,
        subject=row.subject,
        content=row.content,
        scheduled_for=row.scheduled_for,
        status=ScheduledEmailStatus(row.status),
        created_at=row.created_at,
        sent_at=row.sent_at,
        email_ids=tuple(row.email_ids),
        error=row.error,
    )


def _update_to_domain(row: models.Update) -> Update:
    return Update(
        id=UpdateId(row.id),
        event_id=EventId(row.event_id),
        title=row.title,
        content=row.content,
        status=UpdateStatus(row.status),
        created_by=row.created_by,
        created_at=row.created_at,
        published_at=row.published_at,
        sent_at=row.sent_at,
        email_ids=tuple(row.email_ids),
        error=row.error,
    )


def _user_to_domain(row: models.UserProfile) -> User:
    return User(
        id=UserId(row.id),
        clerk_id=row.clerk_id,
        name=row.name,
        email=row.email,
        razorpay_key_id=row.razorpay_key_id,
        razorpay_key_secret=row.razorpay_key_secret,
        created_at=row.created_at,
    )


def _file_to_domain(row: models.StoredFile) -> StoredFile:
    return StoredFile(
        id=FileId(row.id),
        storage_id=row.storage_id,
        name=row.name,
        content_type=row.content_type,
        size=row.size,
        uploaded_by=row.uploaded_by,
        uploaded_at=row.uploaded_at,
    )


class DjangoEventStore(EventStore):
    """PostgreSQL-backed event store using Django ORM."""

    def list_events(self) -> list[Event]:
        return [_event_to_domain(row) for row in models.Event.objects.order_by("-created_at")]

    def list_events_by_owner(self, owner_email: str) -> list[Event]:
        rows = models.Event.objects.filter(created_by=owner_email).order_by("-created_at")
        return [_event_to_domain(row) for row in rows]

    def list_events_on_date(self, date: str) -> list[Event]:
        return [_event_to_domain(row) for row in models.Event.objects.filter(date__startswith=date)]

    def get_event(self, event_id: EventId) -> Event | None:
        row = models.Event.objects.filter(pk=event_id.value).first()
        return _event_to_domain(row) if row else None

    def lock_event(self, event_id: EventId) -> Event | None:
        row = models.Event.objects.select_for_update().filter(pk=event_id.value).first()
        return _event_to_domain(row) if row else None

    def save_event(self, event: Event) -> Event:
        models.Event.objects.update_or_create(
            pk=event.id.value,
            defaults={
                "title": event.title,
                "description": event.description,
                "date": event.date,
                "location": event.location,
                "header_image": event.header_image,
                "participant_limit": event.participant_limit.value if event.participant_limit else None,
                "registration_closed": event.registration_closed,
                "created_by": event.created_by,
                "created_at": event.created_at,
                "updated_at": event.updated_at,
            },
        )
        return event

    def delete_event(self, event_id: EventId) -> None:
        models.Event.objects.filter(pk=event_id.value).delete()


class DjangoRegistrationStore(RegistrationStore):
    def get(self, registration_id: RegistrationId) -> Registration | None:
        row = models.Registration.objects.filter(pk=registration_id.value).first()
        return _registration_to_domain(row) if row else None

    def list_for_event(self, event_id: EventId) -> list[Registration]:
        rows = models.Registration.objects.filter(event_id=event_id.value).order_by("-registered_at")
        return [_registration_to_domain(row) for row in rows]

    def list_all(self) -> list[Registration]:
        return [_registration_to_domain(row) for row in models.Registration.objects.order_by("-registered_at")]

    def list_by_status(self, event_id: EventId, status: RegistrationStatus) -> list[Registration]:
        rows = models.Registration.objects.filter(event_id=event_id.value, status=status.value).order_by(
            "registered_at"
        )
        return [_registration_to_domain(row) for row in rows]

    def count_by_status(self, event_id: EventId, status: RegistrationStatus) -> int:
        return models.Registration.objects.filter(event_id=event_id.value, status=status.value).count()

    def find_active(self, event_id: EventId, email: str) -> Registration | None:
        row = (
            models.Registration.objects.filter(event_id=event_id.value, email__iexact=email)
            .exclude(status=models.Registration.Status.CANCELLED)
            .first()
        )
        return _registration_to_domain(row) if row else None

    def save(self, registration: Registration) -> Registration:
        models.Registration.objects.update_or_create(
            pk=registration.id.value,
            defaults={
                "event_id": registration.event_id.value,
                "name": registration.name,
                "email": registration.email,
                "status": registration.status.value,
                "waitlist_position": registration.waitlist_position,
                "registered_at": registration.registered_at,
                "attended_at": registration.attended_at,
                "attended_by": registration.attended_by,
            },
        )
        return registration

    @transaction.atomic
    def save_many(self, registrations: list[Registration]) -> None:
        for registration in registrations:
            self.save(registration)

    def delete(self, registration_id: RegistrationId) -> None:
        models.Registration.objects.filter(pk=registration_id.value).delete()


class DjangoPassStore(PassStore):
    def get(self, pass_id: PassId) -> Pass | None:
        row = models.Pass.objects.filter(pk=pass_id.value).first()
        return _pass_to_domain(row) if row else None

    def get_by_code(self, code: PassCode) -> Pass | None:
        row = models.Pass.objects.filter(code=code.value).first()
        return _pass_to_domain(row) if row else None

    def get_for_registration(self, registration_id: RegistrationId) -> Pass | None:
        row = models.Pass.objects.filter(registration_id=registration_id.value).first()
        return _pass_to_domain(row) if row else None

    def list_for_event(self, event_id: EventId) -> list[Pass]:
        rows = models.Pass.objects.filter(event_id=event_id.value).order_by("generated_at")
        return [_pass_to_domain(row) for row in rows]

    def save(self, entry_pass: Pass) -> Pass:
        models.Pass.objects.update_or_create(
            pk=entry_pass.id.value,
            defaults={
                "event_id": entry_pass.event_id.value,
                "registration_id": entry_pass.registration_id.value,
                "code": entry_pass.code.value,
                "attendee_name": entry_pass.attendee_name,
                "attendee_email": entry_pass.attendee_email,
                "status": entry_pass.status.value,
                "generated_at": entry_pass.generated_at,
                "generated_by": entry_pass.generated_by,
                "used_at": entry_pass.used_at,
            },
        )
        return entry_pass

    def delete(self, pass_id: PassId) -> None:
        models.Pass.objects.filter(pk=pass_id.value).delete()


class DjangoProductStore(ProductStore):
    def get(self, product_id: ProductId) -> DigitalProduct | None:
        row = models.DigitalProduct.objects.filter(pk=product_id.value).first()
        return _product_to_domain(row) if row else None

    def list_for_event(self, event_id: EventId) -> list[DigitalProduct]:
        rows = models.DigitalProduct.objects.filter(event_id=event_id.value).order_by("-created_at")
        return [_product_to_domain(row) for row in rows]

    def list_by_owner(self, owner_email: str) -> list[DigitalProduct]:
        rows = models.DigitalProduct.objects.filter(created_by=owner_email).order_by("-created_at")
        return [_product_to_domain(row) for row in rows]

    def save(self, product: DigitalProduct) -> DigitalProduct:
        models.DigitalProduct.objects.update_or_create(
            pk=product.id.value,
            defaults={
                "event_id": product.event_id.value,
                "name": product.name,
                "description": product.description,
                "price": product.price.amount,
                "file_storage_id": product.file_storage_id,
                "file_name": product.file_name,
                "file_size": product.file_size,
                "file_type": product.file_type,
                "downloads": product.downloads,
                "created_by": product.created_by,
                "created_at": product.created_at,
                "updated_at": product.updated_at,
            },
        )
        return product

    def delete(self, product_id: ProductId) -> None:
        models.DigitalProduct.objects.filter(pk=product_id.value).delete()


class DjangoPaymentStore(PaymentStore):
    def get(self, payment_id: PaymentId) -> Payment | None:
        row = models.Payment.objects.filter(pk=payment_id.value).first()
        return _payment_to_domain(row) if row else None

    def lock(self, payment_id: PaymentId) -> Payment | None:
        row = models.Payment.objects.select_for_update().filter(pk=payment_id.value).first()
        return _payment_to_domain(row) if row else None

    def get_by_link_id(self, payment_link_id: str) -> Payment | None:
        row = models.Payment.objects.filter(payment_link_id=payment_link_id).first()
        return _payment_to_domain(row) if row else None

    def list_for_event(self, event_id: EventId) -> list[Payment]:
        rows = models.Payment.objects.filter(event_id=event_id.value).order_by("-created_at")
        return [_payment_to_domain(row) for row in rows]

    def save(self, payment: Payment) -> Payment:
        models.Payment.objects.update_or_create(
            pk=payment.id.value,
            defaults={
                "product_id": payment.product_id.value,
                "event_id": payment.event_id.value,
                "customer_name": payment.customer_name,
                "customer_email": payment.customer_email,
                "amount": payment.amount.amount,
                "payment_link_id": payment.payment_link_id,
                "payment_link_url": payment.payment_link_url,
                "status": payment.status.value,
                "email_sent": payment.email_sent,
                "email_sent_at": payment.email_sent_at,
                "created_at": payment.created_at,
                "updated_at": payment.updated_at,
            },
        )
        return payment


class DjangoSalesAnalyticsStore(SalesAnalyticsStore):
    def get_for_product(self, event_id: EventId, product_id: ProductId) -> SalesAnalytics | None:
        row = models.SalesAnalytics.objects.filter(event_id=event_id.value, product_id=product_id.value).first()
        return _analytics_to_domain(row) if row else None

    def list_for_event(self, event_id: EventId) -> list[SalesAnalytics]:
        rows = models.SalesAnalytics.objects.filter(event_id=event_id.value).order_by("created_at")
        return [_analytics_to_domain(row) for row in rows]

    def list_for_events(self, event_ids: list[EventId]) -> list[SalesAnalytics]:
        rows = models.SalesAnalytics.objects.filter(event_id__in=[e.value for e in event_ids]).order_by("created_at")
        return [_analytics_to_domain(row) for row in rows]

    def save(self, analytics: SalesAnalytics) -> SalesAnalytics:
        models.SalesAnalytics.objects.update_or_create(
            pk=analytics.id.value,
            defaults={
                "event_id": analytics.event_id.value,
                "product_id": analytics.product_id.value,
                "product_name": analytics.product_name,
                "total_sales": analytics.total_sales.amount,
                "total_units": analytics.total_units,
                "customer_count": analytics.customer_count,
                "customers": [_purchase_to_json(c) for c in analytics.customers],
                "last_sale_date": analytics.last_sale_date,
                "created_at": analytics.created_at,
                "updated_at": analytics.updated_at,
            },
        )
        return analytics

    def delete_for_product(self, product_id: ProductId) -> int:
        deleted, _ = models.SalesAnalytics.objects.filter(product_id=product_id.value).delete()
        return deleted


class DjangoScheduledEmailStore(ScheduledEmailStore):
    def get(self, email_id: ScheduledEmailId) -> ScheduledEmail | None:
        row = models.ScheduledEmail.objects.filter(pk=email_id.value).first()
        return _scheduled_email_to_domain(row) if row else None

    def list_for_event(self, event_id: EventId) -> list[ScheduledEmail]:
        rows = models.ScheduledEmail.objects.filter(event_id=event_id.value).order_by("scheduled_for")
        return [_scheduled_email_to_domain(row) for row in rows]

    @transaction.atomic
    def claim_due(self, now: datetime, limit: int) -> list[ScheduledEmail]:
        rows = list(
            models.ScheduledEmail.objects.select_for_update(skip_locked=True)
            .filter(status=models.ScheduledEmail.Status.PENDING, scheduled_for__lte=now)
            .order_by("scheduled_for")[:limit]
        )
        models.ScheduledEmail.objects.filter(pk__in=[row.pk for row in rows]).update(
            status=models.ScheduledEmail.Status.PROCESSING
        )
        for row in rows:
            row.status = models.ScheduledEmail.Status.PROCESSING
        return [_scheduled_email_to_domain(row) for row in rows]

    def save(self, email: ScheduledEmail) -> ScheduledEmail:
        models.ScheduledEmail.objects.update_or_create(pk=email.id.value, defaults=_scheduled_email_fields(email))
        return email

    def save_if_status(self, email: ScheduledEmail, expected: ScheduledEmailStatus) -> bool:
        updated = models.ScheduledEmail.objects.filter(pk=email.id.value, status=expected.value).update(
            **_scheduled_email_fields(email)
        )
        return updated == 1


def _scheduled_email_fields(email: ScheduledEmail) -> dict:
    return {
        "event_id": email.event_id.value,
        "registration_ids": [str(r) for r in email.registration_ids],
        "send_to_all": email.send_to_all,
        "subject": email.subject,
        "content": email.content,
        "scheduled_for": email.scheduled_for,
        "status": email.status.value,
        "created_at": email.created_at,
        "sent_at": email.sent_at,
        "email_ids": list(email.email_ids),
        "error": email.error,
    }


class DjangoUpdateStore(UpdateStore):
    def get(self, update_id: UpdateId) -> Update | None:
        row = models.Update.objects.filter(pk=update_id.value).first()
        return _update_to_domain(row) if row else None

    def list_for_event(self, event_id: EventId) -> list[Update]:
        rows = models.Update.objects.filter(event_id=event_id.value).order_by("-created_at")
        return [_update_to_domain(row) for row in rows]

    def list_by_author(self, created_by: str) -> list[Update]:
        rows = models.Update.objects.filter(created_by=created_by).order_by("-created_at")
        return [_update_to_domain(row) for row in rows]

    def save(self, update: Update) -> Update:
        models.Update.objects.update_or_create(
            pk=update.id.value,
            defaults={
                "event_id": update.event_id.value,
                "title": update.title,
                "content": update.content,
                "status": update.status.value,
                "created_by": update.created_by,
                "created_at": update.created_at,
                "published_at": update.published_at,
                "sent_at": update.sent_at,
                "email_ids": list(update.email_ids),
                "error": update.error,
            },
        )
        return update

    def delete(self, update_id: UpdateId) -> None:
        models.Update.objects.filter(pk=update_id.value).delete()


class DjangoUserStore(UserStore):
    def get_by_clerk_id(self, clerk_id: str) -> User | None:
        row = models.UserProfile.objects.filter(clerk_id=clerk_id).first()
        return _user_to_domain(row) if row else None

    def get_by_email(self, email: str) -> User | None:
        row = models.UserProfile.objects.filter(email__iexact=email).first()
        return _user_to_domain(row) if row else None

    def save(self, user: User) -> User:
        models.UserProfile.objects.update_or_create(
            pk=user.id.value,
            defaults={
                "clerk_id": user.clerk_id,
                "name": user.name,
                "email": user.email,
                "razorpay_key_id": user.razorpay_key_id,
                "razorpay_key_secret": user.razorpay_key_secret,
                "created_at": user.created_at,
            },
        )
        return user


class DjangoFileStore(FileStore):
    def get(self, file_id: FileId) -> StoredFile | None:
        row = models.StoredFile.objects.filter(pk=file_id.value).first()
        return _file_to_domain(row) if row else None

    def get_by_storage_id(self, storage_id: str) -> StoredFile | None:
        row = models.StoredFile.objects.filter(storage_id=storage_id).first()
        return _file_to_domain(row) if row else None

    def save(self, stored_file: StoredFile) -> StoredFile:
        models.StoredFile.objects.update_or_create(
            pk=stored_file.id.value,
            defaults={
                "storage_id": stored_file.storage_id,
                "name": stored_file.name,
                "content_type": stored_file.content_type,
                "size": stored_file.size,
                "uploaded_by": stored_file.uploaded_by,
                "uploaded_at": stored_file.uploaded_at,
            },
        )
        return stored_file

    def delete_by_storage_id(self, storage_id: str) -> None:
        models.StoredFile.objects.filter(storage_id=storage_id).delete()
