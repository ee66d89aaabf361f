"""Per-product sales ledger.

Each completed payment appends one purchase to the (event, product) record.
Totals are properties of the purchase list, so they cannot drift from it.
"""

from dataclasses import dataclass, field, replace

import structlog
from django.utils import timezone

from events.domain import (
    AnalyticsId,
    CustomerPurchase,
    EventId,
    Money,
    Payment,
    PaymentStatus,
    ProductId,
    SalesAnalytics,
)
from events.domain.errors import InvalidStatusError, ProductNotFoundError
from events.services.common import parse_id
from events.stores.interfaces import EventStore, ProductStore, SalesAnalyticsStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SalesReport:
    event_id: str
    products: list[SalesAnalytics] = field(default_factory=list)

    @property
    def total_revenue(self) -> Money:
        return Money(sum(a.total_sales.amount for a in self.products))

    @property
    def total_units(self) -> int:
        return sum(a.total_units for a in self.products)

    @property
    def total_customers(self) -> int:
        """Distinct customer emails across every product."""
        return len({c.customer_email for a in self.products for c in a.customers})

    @property
    def product_count(self) -> int:
        return len(self.products)


class SalesAnalyticsService:
    def __init__(self, analytics: SalesAnalyticsStore, products: ProductStore, events: EventStore) -> None:
        self._analytics = analytics
        self._products = products
        self._events = events

    def record_sale(self, payment: Payment) -> SalesAnalytics:
        """Append a completed payment to its product's ledger.

        Recording the same payment twice leaves the ledger unchanged.
        """
        if payment.status != PaymentStatus.COMPLETED:
            raise InvalidStatusError("Payment not found or not completed")
        product = self._products.get(payment.product_id)
        if product is None:
            raise ProductNotFoundError(str(payment.product_id))

        now = timezone.now()
        existing = self._analytics.get_for_product(payment.event_id, payment.product_id)
        if existing is not None and any(c.payment_id == payment.id for c in existing.customers):
            logger.info("sale_already_recorded", payment_id=str(payment.id))
            return existing

        purchase = CustomerPurchase(
            customer_name=payment.customer_name,
            customer_email=payment.customer_email,
            amount=payment.amount,
            purchase_date=payment.updated_at,
            payment_id=payment.id,
        )
        if existing is None:
            record = SalesAnalytics(
                id=AnalyticsId.new(),
                event_id=payment.event_id,
                product_id=payment.product_id,
                product_name=product.name,
                customers=(purchase,),
                created_at=now,
                updated_at=now,
            )
        else:
            record = replace(existing, customers=(*existing.customers, purchase), updated_at=now)
        self._analytics.save(record)
        logger.info(
            "sale_recorded",
            event_id=str(payment.event_id),
            product_id=str(payment.product_id),
            total_sales=record.total_sales.amount,
            total_units=record.total_units,
        )
        return record

    def delete_for_product(self, product_id: str) -> int:
        deleted = self._analytics.delete_for_product(parse_id(ProductId, product_id, "product"))
        logger.info("sales_analytics_deleted", product_id=product_id, deleted=deleted)
        return deleted

    def event_analytics(self, event_id: str) -> list[SalesAnalytics]:
        return self._analytics.list_for_event(parse_id(EventId, event_id, "event"))

    def product_analytics(self, product_id: str) -> SalesAnalytics | None:
        product = self._products.get(parse_id(ProductId, product_id, "product"))
        if product is None:
            raise ProductNotFoundError(product_id)
        return self._analytics.get_for_product(product.event_id, product.id)

    def owner_analytics(self, owner_email: str) -> list[SalesAnalytics]:
        event_ids = [e.id for e in self._events.list_events_by_owner(owner_email)]
        if not event_ids:
            return []
        return self._analytics.list_for_events(event_ids)

    def event_sales_report(self, event_id: str) -> SalesReport:
        return SalesReport(event_id=event_id, products=self.event_analytics(event_id))
