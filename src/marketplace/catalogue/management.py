"""Vendor-side product management: stock, pricing and deactivation."""

from protean import handle
from protean.fields import Float, Identifier, Integer
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.domain import marketplace


@marketplace.command(part_of="Product")
class AdjustStock:
    product_id: Identifier(required=True)
    stock: Integer(required=True, min_value=0)


@marketplace.command(part_of="Product")
class ChangePricing:
    product_id: Identifier(required=True)
    regular_price: Float(required=True, min_value=0.0)
    promotional_price: Float(min_value=0.0)


@marketplace.command(part_of="Product")
class DeactivateProduct:
    product_id: Identifier(required=True)


@marketplace.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(AdjustStock)
    def adjust_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.adjust_stock(command.stock)
        repo.add(product)

    @handle(ChangePricing)
    def change_pricing(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.change_pricing(command.regular_price, command.promotional_price)
        repo.add(product)

    @handle(DeactivateProduct)
    def deactivate_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.deactivate()
        repo.add(product)
