"""Stock checks for cart rows against live product inventory."""

from dataclasses import dataclass

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StockCheck:
    """Whether a product can cover a requested quantity."""

    has_stock: bool
    error: str | None = None
    product: Product | None = None
    not_found: bool = False

    @property
    def available(self) -> int:
        return self.product.sellable_stock if self.product else 0


@dataclass(frozen=True)
class InvalidItem:
    """A cart row asking for more units than the product has."""

    item_id: str
    product_id: str
    quantity: int
    available_stock: int
    product_name: str = "Product not found"


def find_product(product_id) -> Product | None:
    try:
        return current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        return None


def check_product_stock(product_id, quantity) -> StockCheck:
    """Check that ``quantity`` units of a product are available."""
    product = find_product(product_id)
    if product is None:
        logger.warning("Stock check for unknown product", product_id=str(product_id))
        return StockCheck(has_stock=False, error="Product not found", not_found=True)

    if not product.is_active:
        return StockCheck(has_stock=False, error="Product is no longer available", product=product)

    if product.sellable_stock < quantity:
        logger.info(
            "Insufficient stock",
            product_id=str(product_id),
            requested=quantity,
            available=product.sellable_stock,
        )
        return StockCheck(
            has_stock=False,
            error=f"Insufficient stock. Available: {product.sellable_stock}",
            product=product,
        )

    return StockCheck(has_stock=True, product=product)


def check_total_stock_availability(product_id, additional_quantity, existing_quantity) -> StockCheck:
    """Check stock for a row that already holds ``existing_quantity`` units."""
    return check_product_stock(product_id, existing_quantity + additional_quantity)


def validate_cart_items_stock(cart) -> list[InvalidItem]:
    """Rows of ``cart`` whose quantity exceeds current stock.

    Rows pointing at a product that no longer exists count as having no stock.
    """
    invalid = []
    for item in cart.items:
        product = find_product(item.product_id)
        available = product.sellable_stock if product else 0
        if available < item.quantity:
            invalid.append(
                InvalidItem(
                    item_id=str(item.id),
                    product_id=str(item.product_id),
                    quantity=item.quantity,
                    available_stock=available,
                    product_name=product.name if product else "Product not found",
                )
            )
    return invalid
