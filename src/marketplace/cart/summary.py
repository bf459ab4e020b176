"""Cart view: priced lines and totals for displaying a user's cart.

Line prices come from the ``price_at_add`` snapshot; product details
(name, store, stock, points) are read live. Shipping is a flat fee per
vendor store present in the cart.
"""

from dataclasses import dataclass, field

from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.cart.config import SHIPPING_PER_STORE
from marketplace.cart.consolidation import ConsolidateCarts
from marketplace.cart.stock import find_product

UNAVAILABLE_PRODUCT_NAME = "Unavailable product"


@dataclass(frozen=True)
class CartLine:
    item_id: str
    product_id: str
    name: str
    quantity: int
    unit_price: float
    subtotal: float
    store_id: str | None = None
    stock: int = 0
    points: int = 0
    available: bool = True


@dataclass(frozen=True)
class CartSummary:
    subtotal: float = 0.0
    shipping: float = 0.0
    total_points: int = 0
    total_items: int = 0

    @property
    def total(self) -> float:
        return round(self.subtotal + self.shipping, 2)


@dataclass(frozen=True)
class CartView:
    cart_id: str
    user_id: str
    status: str
    lines: list[CartLine] = field(default_factory=list)
    summary: CartSummary = field(default_factory=CartSummary)


def _build_line(item) -> CartLine:
    product = find_product(item.product_id)
    unit_price = item.price_at_add or 0.0

    if product is None:
        # The row stays visible so the shopper can remove it.
        return CartLine(
            item_id=str(item.id),
            product_id=str(item.product_id),
            name=UNAVAILABLE_PRODUCT_NAME,
            quantity=item.quantity,
            unit_price=unit_price,
            subtotal=0.0,
            available=False,
        )

    return CartLine(
        item_id=str(item.id),
        product_id=str(item.product_id),
        name=product.name,
        quantity=item.quantity,
        unit_price=unit_price,
        subtotal=round(unit_price * item.quantity, 2),
        store_id=str(product.store_id),
        stock=product.sellable_stock,
        points=(product.consumer_points or 0) * item.quantity,
        available=product.is_active,
    )


def build_cart_view(cart: Cart) -> CartView:
    lines = [_build_line(item) for item in cart.items]
    store_ids = {line.store_id for line in lines if line.store_id}

    summary = CartSummary(
        subtotal=round(sum(line.subtotal for line in lines), 2),
        shipping=round(len(store_ids) * SHIPPING_PER_STORE, 2),
        total_points=sum(line.points for line in lines),
        total_items=sum(line.quantity for line in lines),
    )
    return CartView(
        cart_id=str(cart.id),
        user_id=str(cart.user_id),
        status=cart.status,
        lines=lines,
        summary=summary,
    )


def get_cart_view(user_id) -> CartView:
    """Consolidate the user's carts, then describe the resulting Active cart."""
    result = current_domain.process(ConsolidateCarts(user_id=user_id), asynchronous=False)
    cart = current_domain.repository_for(Cart).get(result.cart_id)
    return build_cart_view(cart)
