"""Marketplace bounded context: product stock and shopping carts.

Holds the vendor product catalogue (prices, stock, loyalty points), the
per-user shopping cart with duplicate-cart consolidation, and the
checkout-time stock validation that keeps cart quantities within
available inventory.
"""

from protean.domain import Domain

from marketplace.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

marketplace = Domain(name="marketplace")
