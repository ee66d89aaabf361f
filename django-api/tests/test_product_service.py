"""Unit tests for ProductService, SalesAnalyticsService and UserService."""

from dataclasses import replace
from datetime import timedelta

import pytest
from django.core.files.base import ContentFile
from django.core.files.storage import FileSystemStorage
from django.utils import timezone

from events.domain import Money, Payment, PaymentId, PaymentStatus
from events.domain.errors import (
    EventNotFoundError,
    InvalidStatusError,
    ProductNotFoundError,
    UserNotFoundError,
    ValidationFailedError,
)
from events.domain.value_objects import EventId
from events.services.file_service import FileService
from events.services.product_service import ProductChanges, ProductDraft, ProductService
from events.services.sales_analytics import SalesAnalyticsService
from events.services.user_service import UserService
from tests.fakes import ORGANIZER, FakeFileStore, FakeUserStore


@pytest.fixture
def files(tmp_path):
    return FileService(FakeFileStore(), FileSystemStorage(location=str(tmp_path), base_url="/media/"))


@pytest.fixture
def products(event_store, product_store, analytics_store, files):
    return ProductService(event_store, product_store, analytics_store, files)


@pytest.fixture
def sales(analytics_store, product_store, event_store):
    return SalesAnalyticsService(analytics_store, product_store, event_store)


def _draft(**overrides):
    fields = dict(
        name="Workshop slides",
        price=50000,
        file_storage_id="uploads/a/slides.pdf",
        file_name="slides.pdf",
        file_size=1024,
        file_type="application/pdf",
    )
    fields.update(overrides)
    return ProductDraft(**fields)


def _payment(product, email="ada@example.com", amount=50000, minutes=0):
    at = timezone.now() + timedelta(minutes=minutes)
    return Payment(
        id=PaymentId.new(),
        product_id=product.id,
        event_id=product.event_id,
        customer_name=email.split("@")[0].title(),
        customer_email=email,
        amount=Money(amount),
        payment_link_id=f"plink_{minutes}",
        payment_link_url="https://rzp.io/i/x",
        status=PaymentStatus.COMPLETED,
        created_at=at,
        updated_at=at,
    )


class TestProductService:
    """Tests for product CRUD."""

    def test_create_product(self, products, make_event):
        """Products belong to an event and keep their price in minor units."""
        event = make_event()
        product = products.create_product(str(event.id), _draft(), ORGANIZER)
        assert product.price == Money(50000)
        assert product.downloads == 0
        assert products.list_products(str(event.id)) == [product]
        assert products.list_products_for_owner(ORGANIZER) == [product]

    def test_create_for_missing_event(self, products):
        """Products need an existing event."""
        with pytest.raises(EventNotFoundError):
            products.create_product(str(EventId.new()), _draft(), ORGANIZER)

    def test_negative_price_is_rejected(self, products, make_event):
        """Prices cannot be negative."""
        event = make_event()
        with pytest.raises(ValidationFailedError):
            products.create_product(str(event.id), _draft(price=-1), ORGANIZER)

    def test_partial_update(self, products, make_event):
        """Only provided fields change."""
        event = make_event()
        product = products.create_product(str(event.id), _draft(), ORGANIZER)

        updated = products.update_product(str(product.id), ProductChanges(price=70000))

        assert updated.price == Money(70000)
        assert updated.name == "Workshop slides"

    def test_delete_removes_file_and_analytics(
        self, products, sales, files, product_store, analytics_store, make_event
    ):
        """Deleting a product clears its blob and its sales ledger."""
        event = make_event()
        ticket = files.issue_upload_url()
        storage_id = files.upload(ticket.token, ContentFile(b"x", name="slides.pdf"))
        product = products.create_product(str(event.id), _draft(file_storage_id=storage_id), ORGANIZER)
        sales.record_sale(_payment(product))

        products.delete_product(str(product.id))

        assert product_store.products == {}
        assert analytics_store.records == {}
        assert files.file_url(storage_id) is None

    def test_get_unknown_product(self, products):
        """Unknown products raise ProductNotFoundError."""
        with pytest.raises(ProductNotFoundError):
            products.get_product("5b0c1f8e-4d7e-4a37-9a51-3f7f2a4b9c11")

    def test_set_downloads(self, products, make_event):
        """Download counts cannot go negative."""
        event = make_event()
        product = products.create_product(str(event.id), _draft(), ORGANIZER)
        assert products.set_downloads(str(product.id), 3).downloads == 3
        with pytest.raises(ValidationFailedError):
            products.set_downloads(str(product.id), -1)


class TestSalesAnalytics:
    """Tests for the per-product sales ledger."""

    def test_two_sales_accumulate(self, products, sales, make_event):
        """Two purchases add up in totals and units."""
        event = make_event()
        product = products.create_product(str(event.id), _draft(), ORGANIZER)

        sales.record_sale(_payment(product, amount=50000))
        record = sales.record_sale(_payment(product, amount=30000, minutes=5))

        assert record.total_sales == Money(80000)
        assert record.total_units == 2
        assert record.product_name == "Workshop slides"

    def test_recording_twice_is_idempotent(self, products, sales, make_event):
        """The same payment is only counted once."""
        event = make_event()
        product = products.create_product(str(event.id), _draft(), ORGANIZER)
        payment = _payment(product)

        sales.record_sale(payment)
        record = sales.record_sale(payment)

        assert record.total_units == 1

    def test_pending_payment_is_refused(self, products, sales, make_event):
        """Only completed payments are recorded."""
        event = make_event()
        product = products.create_product(str(event.id), _draft(), ORGANIZER)
        pending = replace(_payment(product), status=PaymentStatus.PENDING)
        with pytest.raises(InvalidStatusError):
            sales.record_sale(pending)

    def test_event_report_totals(self, products, sales, make_event):
        """The event report sums revenue and counts distinct customers."""
        event = make_event()
        slides = products.create_product(str(event.id), _draft(), ORGANIZER)
        video = products.create_product(str(event.id), _draft(name="Recording", price=30000), ORGANIZER)
        sales.record_sale(_payment(slides, "ada@example.com", 50000))
        sales.record_sale(_payment(video, "ada@example.com", 30000, minutes=1))
        sales.record_sale(_payment(video, "bob@example.com", 30000, minutes=2))

        report = sales.event_sales_report(str(event.id))

        assert report.total_revenue == Money(110000)
        assert report.total_units == 3
        assert report.total_customers == 2
        assert report.product_count == 2

    def test_owner_analytics(self, products, sales, make_event):
        """Organizers see records for their own events only."""
        mine = make_event()
        theirs = make_event(owner="other@example.com")
        sales.record_sale(_payment(products.create_product(str(mine.id), _draft(), ORGANIZER)))
        sales.record_sale(_payment(products.create_product(str(theirs.id), _draft(), "other@example.com")))

        records = sales.owner_analytics(ORGANIZER)

        assert [r.event_id for r in records] == [mine.id]
        assert sales.owner_analytics("nobody@example.com") == []


class TestUserService:
    """Tests for organizer profiles."""

    def test_upsert_creates_then_updates(self):
        """The first upsert creates the profile and later ones refresh it."""
        users = UserService(FakeUserStore())
        created = users.upsert_user(ORGANIZER, "Ada", ORGANIZER)
        renamed = users.upsert_user(ORGANIZER, "Ada L.", ORGANIZER)
        assert renamed.id == created.id
        assert users.get_user(ORGANIZER).name == "Ada L."

    def test_credentials_round_trip(self):
        """Stored gateway keys are returned as credentials."""
        users = UserService(FakeUserStore())
        users.upsert_user(ORGANIZER, "Ada", ORGANIZER)
        assert users.get_razorpay_credentials(ORGANIZER) is None

        users.update_razorpay_credentials(ORGANIZER, "rzp_test_1", "s3cret")

        credentials = users.get_razorpay_credentials(ORGANIZER)
        assert (credentials.key_id, credentials.key_secret) == ("rzp_test_1", "s3cret")

    def test_unknown_user(self):
        """Credentials cannot be set for a missing profile."""
        users = UserService(FakeUserStore())
        with pytest.raises(UserNotFoundError):
            users.update_razorpay_credentials("ghost@example.com", "k", "s")
