"""Domain events for the Cart aggregate."""

from protean.fields import Boolean, Float, Identifier, Integer

from marketplace.domain import marketplace


@marketplace.event(part_of="Cart")
class CartOpened:
    """A new active cart was created for a user."""

    __version__ = 1

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)


@marketplace.event(part_of="Cart")
class CartItemAdded:
    """Units of a product were put in the cart.

    ``quantity`` is what was asked for, ``new_quantity`` the resulting row
    quantity after capping at stock and the per-product limit.
    """

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    price_at_add = Float(required=True)
    capped = Boolean(default=False)


@marketplace.event(part_of="Cart")
class CartItemQuantityChanged:
    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@marketplace.event(part_of="Cart")
class CartItemRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)


@marketplace.event(part_of="Cart")
class CartCleared:
    __version__ = 1

    cart_id = Identifier(required=True)
    items_removed = Integer(required=True)


@marketplace.event(part_of="Cart")
class CartsConsolidated:
    """Rows of a duplicate active cart were folded into this (canonical) cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    source_cart_id = Identifier(required=True)
    items_moved = Integer(required=True)


@marketplace.event(part_of="Cart")
class CartMerged:
    """A duplicate active cart was emptied into the canonical cart and retired."""

    __version__ = 1

    cart_id = Identifier(required=True)
    merged_into = Identifier(required=True)


@marketplace.event(part_of="Cart")
class CartCheckedOut:
    """The cart's stock was reserved at checkout and the cart archived."""

    __version__ = 1

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    total_items = Integer(required=True)
