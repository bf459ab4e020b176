"""Domain events for the Product aggregate."""

from protean.fields import Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Product")
class ProductRegistered:
    """A vendor store listed a new product."""

    __version__ = 1

    product_id: Identifier(required=True)
    store_id: Identifier(required=True)
    name: String(required=True)
    regular_price: Float(required=True)
    promotional_price: Float()
    stock: Integer(required=True)


@marketplace.event(part_of="Product")
class StockAdjusted:
    """The vendor set a new stock count for a product."""

    __version__ = 1

    product_id: Identifier(required=True)
    previous_stock: Integer(required=True)
    new_stock: Integer(required=True)


@marketplace.event(part_of="Product")
class PricingChanged:
    __version__ = 1

    product_id: Identifier(required=True)
    regular_price: Float(required=True)
    promotional_price: Float()


@marketplace.event(part_of="Product")
class ProductDeactivated:
    __version__ = 1

    product_id: Identifier(required=True)


@marketplace.event(part_of="Product")
class StockReserved:
    """Units were taken out of stock by a cart checkout."""

    __version__ = 1

    product_id: Identifier(required=True)
    cart_id: Identifier()
    quantity: Integer(required=True)
    remaining_stock: Integer(required=True)
