"""Digital products sold per event."""

from dataclasses import dataclass, replace

import structlog
from django.utils import timezone

from events.domain import DigitalProduct, EventId, Money, ProductId
from events.domain.errors import ProductNotFoundError, ValidationFailedError
from events.services.common import load_event, parse_id, require_text
from events.services.file_service import FileService
from events.stores.interfaces import EventStore, ProductStore, SalesAnalyticsStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ProductDraft:
    name: str
    price: int
    file_storage_id: str
    file_name: str
    file_size: int
    file_type: str
    description: str | None = None


@dataclass(frozen=True)
class ProductChanges:
    """Partial product edit; ``None`` leaves a field as it is."""

    name: str | None = None
    description: str | None = None
    price: int | None = None
    file_storage_id: str | None = None
    file_name: str | None = None
    file_size: int | None = None
    file_type: str | None = None


def _price(value: int) -> Money:
    try:
        return Money(value)
    except ValueError as e:
        raise ValidationFailedError(str(e)) from None


class ProductService:
    def __init__(
        self,
        events: EventStore,
        products: ProductStore,
        analytics: SalesAnalyticsStore,
        files: FileService,
    ) -> None:
        self._events = events
        self._products = products
        self._analytics = analytics
        self._files = files

    def create_product(self, event_id: str, draft: ProductDraft, created_by: str) -> DigitalProduct:
        eid = parse_id(EventId, event_id, "event")
        load_event(self._events, eid)
        now = timezone.now()
        product = DigitalProduct(
            id=ProductId.new(),
            event_id=eid,
            name=require_text(draft.name, "Name"),
            description=draft.description,
            price=_price(draft.price),
            file_storage_id=require_text(draft.file_storage_id, "File"),
            file_name=draft.file_name,
            file_size=draft.file_size,
            file_type=draft.file_type,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        self._products.save(product)
        logger.info("product_created", event_id=event_id, product_id=str(product.id), price=product.price.amount)
        return product

    def list_products(self, event_id: str) -> list[DigitalProduct]:
        return self._products.list_for_event(parse_id(EventId, event_id, "event"))

    def list_products_for_owner(self, owner_email: str) -> list[DigitalProduct]:
        return self._products.list_by_owner(owner_email)

    def get_product(self, product_id: str) -> DigitalProduct:
        product = self._products.get(parse_id(ProductId, product_id, "product"))
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def update_product(self, product_id: str, changes: ProductChanges) -> DigitalProduct:
        product = self.get_product(product_id)
        fields = {
            name: value
            for name, value in vars(changes).items()
            if value is not None and name != "price"
        }
        if "name" in fields:
            fields["name"] = require_text(fields["name"], "Name")
        if changes.price is not None:
            fields["price"] = _price(changes.price)
        updated = replace(product, **fields, updated_at=timezone.now())
        self._products.save(updated)
        logger.info("product_updated", product_id=product_id, fields=sorted(fields))
        return updated

    def delete_product(self, product_id: str) -> None:
        """Remove the product, its file and its sales records."""
        product = self.get_product(product_id)
        self._files.delete_file(product.file_storage_id)
        removed = self._analytics.delete_for_product(product.id)
        self._products.delete(product.id)
        logger.info("product_deleted", product_id=product_id, analytics_removed=removed)

    def set_downloads(self, product_id: str, downloads: int) -> DigitalProduct:
        if downloads < 0:
            raise ValidationFailedError("Downloads cannot be negative")
        product = self.get_product(product_id)
        updated = replace(product, downloads=downloads, updated_at=timezone.now())
        return self._products.save(updated)
