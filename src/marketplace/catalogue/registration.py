"""Product registration: command and handler."""

from protean import handle
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.domain import marketplace


@marketplace.command(part_of="Product")
class RegisterProduct:
    name: String(required=True, max_length=255)
    store_id: Identifier(required=True)
    regular_price: Float(required=True, min_value=0.0)
    promotional_price: Float(min_value=0.0)
    stock: Integer(default=0, min_value=0)
    consumer_points: Integer(default=0, min_value=0)


@marketplace.command_handler(part_of=Product)
class RegisterProductHandler:
    @handle(RegisterProduct)
    def register_product(self, command):
        product = Product.register(
            name=command.name,
            store_id=command.store_id,
            regular_price=command.regular_price,
            promotional_price=command.promotional_price,
            stock=command.stock or 0,
            consumer_points=command.consumer_points or 0,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)
