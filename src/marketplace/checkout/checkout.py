"""Cart checkout: validate stock, reserve it and archive the cart.

Checkout refuses to proceed while any row is invalid or adjustable; the
shopper reconciles first. Reserving stock on every product and archiving
the cart happen in the handler's single unit of work, so either all of
it is committed or none.
"""

from dataclasses import dataclass

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.cart.consolidation import ensure_single_active_cart
from marketplace.cart.results import error_message
from marketplace.cart.summary import CartSummary, build_cart_view
from marketplace.catalogue.product import Product
from marketplace.checkout.stock_validation import StockValidationResult, validate_cart_stock
from marketplace.domain import marketplace

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CheckoutResult:
    success: bool
    cart_id: str | None = None
    summary: CartSummary | None = None
    validation: StockValidationResult | None = None
    error: str | None = None


@marketplace.command(part_of="Cart")
class CheckoutCart:
    user_id = Identifier(required=True)


@marketplace.command_handler(part_of=Cart)
class CheckoutCartHandler:
    @handle(CheckoutCart)
    def checkout_cart(self, command):
        log = logger.bind(user_id=str(command.user_id))
        cart = ensure_single_active_cart(command.user_id)

        if not cart.items:
            return CheckoutResult(success=False, cart_id=str(cart.id), error="Cart is empty")

        validation = validate_cart_stock(cart)
        if validation.needs_changes:
            log.info("Checkout blocked by stock", cart_id=str(cart.id))
            return CheckoutResult(
                success=False,
                cart_id=str(cart.id),
                validation=validation,
                error="Some products do not have enough stock",
            )

        summary = build_cart_view(cart).summary
        product_repo = current_domain.repository_for(Product)
        try:
            products = []
            for item in cart.items:
                product = product_repo.get(item.product_id)
                product.reserve_stock(item.quantity, cart_id=cart.id)
                products.append(product)
            cart.archive()
        except ValidationError as exc:
            log.warning("Checkout failed", cart_id=str(cart.id), error=error_message(exc))
            return CheckoutResult(success=False, cart_id=str(cart.id), error=error_message(exc))

        for product in products:
            product_repo.add(product)
        current_domain.repository_for(Cart).add(cart)

        log.info("Cart checked out", cart_id=str(cart.id), total_items=summary.total_items)
        return CheckoutResult(success=True, cart_id=str(cart.id), summary=summary, validation=validation)
