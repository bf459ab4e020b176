"""Cart aggregate: a user's shopping cart and its line items.

A user owns any number of carts over time but at most one of them is
Active. Carts left Active by concurrent requests are folded into the
newest one by consolidation (see ``marketplace.cart.consolidation``) and
end up Merged. A cart that went through checkout is Archived.

Each product appears at most once per cart; adding the same product again
increments the existing row. ``price_at_add`` is the product price at the
moment the row was first inserted.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from marketplace.cart.config import MAX_ITEM_QUANTITY
from marketplace.cart.events import (
    CartCheckedOut,
    CartCleared,
    CartItemAdded,
    CartItemQuantityChanged,
    CartItemRemoved,
    CartMerged,
    CartOpened,
    CartsConsolidated,
)
from marketplace.domain import marketplace


class CartStatus(Enum):
    ACTIVE = "Active"
    MERGED = "Merged"
    ARCHIVED = "Archived"


@marketplace.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    price_at_add = Float(required=True, min_value=0.0)
    added_at = DateTime()


@marketplace.aggregate
class Cart:
    user_id = Identifier(required=True)
    status = String(choices=CartStatus, default=CartStatus.ACTIVE.value)
    merged_into = Identifier()
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def each_product_appears_once(self):
        product_ids = [str(item.product_id) for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"items": ["A product can only appear once per cart"]})

    @invariant.post
    def item_quantities_within_limit(self):
        for item in self.items:
            if item.quantity > MAX_ITEM_QUANTITY:
                raise ValidationError({"quantity": [f"Quantity cannot exceed {MAX_ITEM_QUANTITY} per product"]})

    @invariant.post
    def only_active_carts_hold_items_after_merge(self):
        if self.status == CartStatus.MERGED.value and self.items:
            raise ValidationError({"items": ["A merged cart cannot keep items"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def open(cls, user_id, created_at=None):
        now = created_at or datetime.now(UTC)
        cart = cls(
            user_id=user_id,
            status=CartStatus.ACTIVE.value,
            created_at=now,
            updated_at=now,
        )
        cart.raise_(CartOpened(cart_id=str(cart.id), user_id=str(user_id)))
        return cart

    # -------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------
    @property
    def is_active(self):
        return self.status == CartStatus.ACTIVE.value

    @property
    def total_quantity(self):
        return sum(item.quantity for item in self.items)

    def find_item(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def find_item_by_id(self, item_id):
        return next((i for i in self.items if str(i.id) == str(item_id)), None)

    def get_item(self, item_id):
        item = self.find_item_by_id(item_id)
        if item is None:
            raise ValidationError({"item_id": ["Item not found in cart"]})
        return item

    def _ensure_active(self, action):
        if not self.is_active:
            raise ValidationError({"status": [f"Cannot {action} a {self.status.lower()} cart"]})

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity, unit_price, available_stock):
        """Add ``quantity`` units of a product, or top up its existing row.

        A new row must fit in ``available_stock`` outright. An existing row is
        incremented and the result capped at ``available_stock`` and at
        ``MAX_ITEM_QUANTITY``; a row already at its cap cannot grow.

        Returns the affected row and whether the quantity was capped.
        """
        self._ensure_active("add items to")
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        limit = min(available_stock, MAX_ITEM_QUANTITY)
        existing = self.find_item(product_id)
        now = datetime.now(UTC)

        if existing:
            if existing.quantity >= limit:
                raise ValidationError(
                    {"quantity": [f"Cannot add more units. Only {limit} available for this product"]}
                )
            requested = existing.quantity + quantity
            existing.quantity = min(requested, limit)
            item = existing
        else:
            if quantity > available_stock:
                raise ValidationError({"stock": [f"Insufficient stock. Available: {available_stock}"]})
            requested = quantity
            item = CartItem(
                product_id=product_id,
                quantity=min(requested, MAX_ITEM_QUANTITY),
                price_at_add=unit_price,
                added_at=now,
            )
            self.add_items(item)

        capped = item.quantity < requested
        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product_id),
                quantity=quantity,
                new_quantity=item.quantity,
                price_at_add=item.price_at_add,
                capped=capped,
            )
        )
        return item, capped

    def update_item_quantity(self, item_id, new_quantity):
        """Set a row's quantity outright; stock is checked by the caller."""
        self._ensure_active("update items in")
        if new_quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if new_quantity > MAX_ITEM_QUANTITY:
            raise ValidationError({"quantity": [f"Quantity cannot exceed {MAX_ITEM_QUANTITY} per product"]})

        item = self.get_item(item_id)
        previous_quantity = item.quantity
        item.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemQuantityChanged(
                cart_id=str(self.id),
                item_id=str(item.id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )

    def remove_item(self, item_id):
        self._ensure_active("remove items from")

        item = self.get_item(item_id)
        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                item_id=str(item_id),
                product_id=str(item.product_id),
            )
        )

    def clear(self):
        self._ensure_active("clear")

        removed = len(self.items)
        for item in list(self.items):
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartCleared(cart_id=str(self.id), items_removed=removed))

    # -------------------------------------------------------------------
    # Consolidation
    # -------------------------------------------------------------------
    def absorb(self, source):
        """Move every row of ``source`` into this cart and retire ``source``.

        Rows for a product already present here are summed (capped at
        ``MAX_ITEM_QUANTITY``) and keep this cart's price snapshot; other
        rows are copied with their original snapshot. ``source`` ends up
        Merged and empty.

        Returns the number of rows moved.
        """
        self._ensure_active("merge into")
        if str(source.id) == str(self.id):
            raise ValidationError({"cart": ["A cart cannot be merged into itself"]})
        if str(source.user_id) != str(self.user_id):
            raise ValidationError({"cart": ["Only carts of the same user can be merged"]})

        now = datetime.now(UTC)
        moved = 0
        for source_item in list(source.items):
            existing = self.find_item(source_item.product_id)
            if existing:
                existing.quantity = min(existing.quantity + source_item.quantity, MAX_ITEM_QUANTITY)
            else:
                self.add_items(
                    CartItem(
                        product_id=source_item.product_id,
                        quantity=min(source_item.quantity, MAX_ITEM_QUANTITY),
                        price_at_add=source_item.price_at_add,
                        added_at=source_item.added_at or now,
                    )
                )
            moved += 1

        source.mark_merged(into=self.id)
        self.updated_at = now

        self.raise_(
            CartsConsolidated(
                cart_id=str(self.id),
                source_cart_id=str(source.id),
                items_moved=moved,
            )
        )
        return moved

    def mark_merged(self, into):
        self._ensure_active("merge")

        for item in list(self.items):
            self.remove_items(item)
        self.status = CartStatus.MERGED.value
        self.merged_into = into
        self.updated_at = datetime.now(UTC)

        self.raise_(CartMerged(cart_id=str(self.id), merged_into=str(into)))

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def archive(self):
        """Retire the cart after checkout."""
        self._ensure_active("archive")
        if not self.items:
            raise ValidationError({"cart": ["Cannot check out an empty cart"]})

        self.status = CartStatus.ARCHIVED.value
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartCheckedOut(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                total_items=self.total_quantity,
            )
        )
