"""Checkout-time stock validation and reconciliation.

Before a cart can be checked out every row is compared with live stock:

- the product is gone, inactive or out of stock: the row is *invalid*;
- some stock is left but less than the row asks for: the row is
  *adjustable* down to what is left.

Reconciliation applies the outcome to the cart: adjustable rows are
lowered to the available stock and invalid rows are removed.
"""

from dataclasses import dataclass, field

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.cart.consolidation import ensure_single_active_cart
from marketplace.cart.stock import validate_cart_items_stock
from marketplace.domain import marketplace

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class InvalidStockItem:
    item_id: str
    product_id: str
    requested_quantity: int
    available_stock: int
    product_name: str


@dataclass(frozen=True)
class AdjustedStockItem:
    item_id: str
    product_id: str
    old_quantity: int
    new_quantity: int
    product_name: str


@dataclass(frozen=True)
class StockValidationResult:
    is_valid: bool
    invalid_items: list[InvalidStockItem] = field(default_factory=list)
    adjusted_items: list[AdjustedStockItem] = field(default_factory=list)
    cart_id: str | None = None

    @property
    def needs_changes(self) -> bool:
        return bool(self.invalid_items or self.adjusted_items)


def validate_cart_stock(cart: Cart) -> StockValidationResult:
    invalid_items = []
    adjusted_items = []

    for short in validate_cart_items_stock(cart):
        if short.available_stock == 0:
            invalid_items.append(
                InvalidStockItem(
                    item_id=short.item_id,
                    product_id=short.product_id,
                    requested_quantity=short.quantity,
                    available_stock=0,
                    product_name=short.product_name,
                )
            )
        else:
            adjusted_items.append(
                AdjustedStockItem(
                    item_id=short.item_id,
                    product_id=short.product_id,
                    old_quantity=short.quantity,
                    new_quantity=short.available_stock,
                    product_name=short.product_name,
                )
            )

    result = StockValidationResult(
        is_valid=not invalid_items,
        invalid_items=invalid_items,
        adjusted_items=adjusted_items,
        cart_id=str(cart.id),
    )
    logger.info(
        "Cart stock validated",
        cart_id=str(cart.id),
        is_valid=result.is_valid,
        invalid_count=len(invalid_items),
        adjusted_count=len(adjusted_items),
    )
    return result


def apply_stock_validation(cart: Cart, result: StockValidationResult) -> None:
    """Lower adjustable rows to available stock and drop invalid rows."""
    for adjusted in result.adjusted_items:
        cart.update_item_quantity(adjusted.item_id, adjusted.new_quantity)
    for invalid in result.invalid_items:
        cart.remove_item(invalid.item_id)


@marketplace.command(part_of="Cart")
class ReconcileCartStock:
    """Bring every row of the user's cart back within live stock."""

    user_id = Identifier(required=True)


@marketplace.command_handler(part_of=Cart)
class ReconcileCartStockHandler:
    @handle(ReconcileCartStock)
    def reconcile_cart_stock(self, command):
        cart = ensure_single_active_cart(command.user_id)
        result = validate_cart_stock(cart)
        if result.needs_changes:
            apply_stock_validation(cart, result)
            current_domain.repository_for(Cart).add(cart)
            logger.info(
                "Cart reconciled against stock",
                user_id=str(command.user_id),
                cart_id=str(cart.id),
                removed=len(result.invalid_items),
                adjusted=len(result.adjusted_items),
            )
        return result
