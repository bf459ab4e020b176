"""BDD tests for adding products to the cart."""

from marketplace.cart.cart import Cart
from protean import current_domain
from pytest_bdd import parsers, scenarios, then

scenarios("features/add_to_cart.feature")


@then(parsers.cfparse('the "{name}" row was priced at {price:f}'))
def row_price(shopper, products, name, price):
    cart = current_domain.repository_for(Cart).latest_active_for_user(shopper)
    assert cart.find_item(products[name]).price_at_add == price


@then("the quantity was capped")
def quantity_capped(outcome):
    assert outcome["result"].capped is True
