"""Cart item management: commands and handler.

Every command resolves the user's single Active cart first (see
``marketplace.cart.consolidation``), then applies the change to it.
Rule violations come back as a failed ``CartOperationResult``.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.cart.config import MAX_ITEM_QUANTITY
from marketplace.cart.consolidation import ensure_single_active_cart
from marketplace.cart.results import CartOperationResult, error_message
from marketplace.cart.stock import check_product_stock, check_total_stock_availability
from marketplace.domain import marketplace

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Cart")
class AddToCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(default=1, min_value=1)


@marketplace.command(part_of="Cart")
class UpdateCartItemQuantity:
    """Set a row's quantity; zero or less removes the row."""

    user_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True)


@marketplace.command(part_of="Cart")
class RemoveFromCart:
    user_id = Identifier(required=True)
    item_id = Identifier(required=True)


@marketplace.command(part_of="Cart")
class ClearCart:
    user_id = Identifier(required=True)


@marketplace.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        log = logger.bind(user_id=str(command.user_id), product_id=str(command.product_id))
        quantity = command.quantity or 1

        stock = check_product_stock(command.product_id, quantity)
        if not stock.has_stock:
            log.info("Add to cart rejected", reason=stock.error)
            return CartOperationResult.failure(
                stock.error, stock_error=not stock.not_found, not_found=stock.not_found
            )

        cart = ensure_single_active_cart(command.user_id)
        try:
            item, capped = cart.add_item(
                product_id=command.product_id,
                quantity=quantity,
                unit_price=stock.product.current_price,
                available_stock=stock.available,
            )
        except ValidationError as exc:
            log.info("Add to cart rejected", cart_id=str(cart.id), reason=error_message(exc))
            return CartOperationResult.failure(error_message(exc), cart_id=str(cart.id), stock_error=True)

        current_domain.repository_for(Cart).add(cart)
        log.info("Item added to cart", cart_id=str(cart.id), quantity=item.quantity, capped=capped)
        return CartOperationResult(
            success=True,
            cart_id=str(cart.id),
            item_id=str(item.id),
            quantity=item.quantity,
            capped=capped,
        )

    @handle(UpdateCartItemQuantity)
    def update_cart_item_quantity(self, command):
        log = logger.bind(user_id=str(command.user_id), item_id=str(command.item_id))

        cart = ensure_single_active_cart(command.user_id)
        item = cart.find_item_by_id(command.item_id)
        if item is None:
            return CartOperationResult.failure("Item not found in cart", cart_id=str(cart.id), not_found=True)

        if command.quantity <= 0:
            cart.remove_item(item.id)
            current_domain.repository_for(Cart).add(cart)
            log.info("Item removed through zero quantity", cart_id=str(cart.id))
            return CartOperationResult(success=True, cart_id=str(cart.id), item_id=str(item.id), quantity=0)

        stock = check_total_stock_availability(
            item.product_id,
            additional_quantity=command.quantity - item.quantity,
            existing_quantity=item.quantity,
        )
        if not stock.has_stock:
            log.info("Quantity update rejected", cart_id=str(cart.id), reason=stock.error)
            return CartOperationResult.failure(
                stock.error, cart_id=str(cart.id), stock_error=not stock.not_found, not_found=stock.not_found
            )

        if command.quantity > MAX_ITEM_QUANTITY:
            return CartOperationResult.failure(
                f"Quantity cannot exceed {MAX_ITEM_QUANTITY} per product", cart_id=str(cart.id)
            )

        cart.update_item_quantity(item.id, command.quantity)
        current_domain.repository_for(Cart).add(cart)
        return CartOperationResult(
            success=True,
            cart_id=str(cart.id),
            item_id=str(item.id),
            quantity=command.quantity,
        )

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        cart = ensure_single_active_cart(command.user_id)
        if cart.find_item_by_id(command.item_id) is None:
            return CartOperationResult.failure("Item not found in cart", cart_id=str(cart.id), not_found=True)

        cart.remove_item(command.item_id)
        current_domain.repository_for(Cart).add(cart)
        return CartOperationResult(success=True, cart_id=str(cart.id), item_id=str(command.item_id))

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = ensure_single_active_cart(command.user_id)
        cart.clear()
        current_domain.repository_for(Cart).add(cart)
        logger.info("Cart cleared", user_id=str(command.user_id), cart_id=str(cart.id))
        return CartOperationResult(success=True, cart_id=str(cart.id), quantity=0)
