"""Product aggregate: the sellable unit a vendor store lists on the marketplace."""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


class ProductStatus(Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


@marketplace.aggregate
class Product:
    """Product aggregate root.

    ``stock`` is the live inventory count carts are reconciled against.
    ``consumer_points`` is the loyalty reward earned per unit bought.
    """

    name: String(required=True, max_length=255)
    store_id: Identifier(required=True)
    regular_price: Float(required=True, min_value=0.0)
    promotional_price: Float(min_value=0.0)
    stock: Integer(default=0, min_value=0)
    consumer_points: Integer(default=0, min_value=0)
    status: String(choices=ProductStatus, default=ProductStatus.ACTIVE.value)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def promotional_price_must_undercut_regular_price(self):
        if self.promotional_price and self.promotional_price >= self.regular_price:
            raise ValidationError(
                {"promotional_price": ["Promotional price must be lower than the regular price"]}
            )

    @classmethod
    def register(cls, name, store_id, regular_price, promotional_price=None, stock=0, consumer_points=0):
        from marketplace.catalogue.events import ProductRegistered

        now = datetime.now(UTC)
        product = cls(
            name=name,
            store_id=store_id,
            regular_price=regular_price,
            promotional_price=promotional_price,
            stock=stock,
            consumer_points=consumer_points,
            status=ProductStatus.ACTIVE.value,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductRegistered(
                product_id=str(product.id),
                store_id=str(store_id),
                name=name,
                regular_price=regular_price,
                promotional_price=promotional_price,
                stock=stock,
            )
        )
        return product

    @property
    def current_price(self):
        """Promotional price when one is set, otherwise the regular price."""
        if self.promotional_price:
            return self.promotional_price
        return self.regular_price

    @property
    def is_active(self):
        return self.status == ProductStatus.ACTIVE.value

    @property
    def sellable_stock(self):
        """Units a cart may hold; inactive products have none."""
        return (self.stock or 0) if self.is_active else 0

    def adjust_stock(self, stock):
        from marketplace.catalogue.events import StockAdjusted

        if stock is None or stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

        previous = self.stock or 0
        self.stock = stock
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockAdjusted(
                product_id=str(self.id),
                previous_stock=previous,
                new_stock=stock,
            )
        )

    def change_pricing(self, regular_price, promotional_price=None):
        from marketplace.catalogue.events import PricingChanged

        with atomic_change(self):
            self.regular_price = regular_price
            self.promotional_price = promotional_price
        self.updated_at = datetime.now(UTC)

        self.raise_(
            PricingChanged(
                product_id=str(self.id),
                regular_price=regular_price,
                promotional_price=promotional_price,
            )
        )

    def deactivate(self):
        from marketplace.catalogue.events import ProductDeactivated

        if not self.is_active:
            raise ValidationError({"status": ["Product is already inactive"]})

        self.status = ProductStatus.INACTIVE.value
        self.updated_at = datetime.now(UTC)
        self.raise_(ProductDeactivated(product_id=str(self.id)))

    def reserve_stock(self, quantity, cart_id=None):
        """Take ``quantity`` units out of stock for a checked-out cart."""
        from marketplace.catalogue.events import StockReserved

        if quantity < 1:
            raise ValidationError({"quantity": ["Reserved quantity must be at least 1"]})
        if quantity > self.sellable_stock:
            raise ValidationError(
                {"stock": [f"Insufficient stock for {self.name}. Available: {self.sellable_stock}"]}
            )

        self.stock = self.stock - quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockReserved(
                product_id=str(self.id),
                cart_id=str(cart_id) if cart_id else None,
                quantity=quantity,
                remaining_stock=self.stock,
            )
        )
