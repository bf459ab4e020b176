"""Shared BDD fixtures and step definitions for the marketplace cart."""

from datetime import UTC, datetime, timedelta

import pytest
from marketplace.cart.cart import Cart
from marketplace.cart.items import AddToCart
from marketplace.catalogue.registration import RegisterProduct
from protean import current_domain
from pytest_bdd import given, parsers, then, when


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def shopper():
    return "user-bdd-001"


@pytest.fixture()
def products():
    """Product ids by name."""
    return {}


@pytest.fixture()
def opened_carts():
    """Seeded cart ids by age in minutes."""
    return {}


@pytest.fixture()
def outcome():
    return {"result": None}


def _active_carts(user_id):
    return current_domain.repository_for(Cart).active_for_user(user_id)


def _active_cart(user_id):
    carts = _active_carts(user_id)
    assert len(carts) == 1, f"Expected one active cart, found {len(carts)}"
    return carts[0]


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" with stock {stock:d} priced at {price:f}'))
def registered_product(products, name, stock, price):
    products[name] = current_domain.process(
        RegisterProduct(name=name, store_id="store-001", regular_price=price, stock=stock),
        asynchronous=False,
    )


@given(parsers.cfparse('the shopper has an active cart opened {minutes:d} minutes ago holding {qty:d} of "{name}"'))
def seeded_cart(shopper, products, opened_carts, minutes, qty, name):
    cart = Cart.open(shopper, created_at=datetime.now(UTC) - timedelta(minutes=minutes))
    cart.add_item(products[name], qty, 10.0, available_stock=qty)
    current_domain.repository_for(Cart).add(cart)
    opened_carts[minutes] = str(cart.id)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the shopper adds {qty:d} of "{name}" to the cart'))
def add_to_cart(shopper, products, outcome, qty, name):
    outcome["result"] = current_domain.process(
        AddToCart(user_id=shopper, product_id=products[name], quantity=qty),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the operation succeeds")
def operation_succeeds(outcome):
    assert outcome["result"].success, outcome["result"].error


@then(parsers.cfparse('the operation fails with "{message}"'))
def operation_fails(outcome, message):
    assert outcome["result"].success is False
    assert outcome["result"].error == message


@then(parsers.cfparse("the shopper has {count:d} active cart"))
def active_cart_count(shopper, count):
    assert len(_active_carts(shopper)) == count


@then("the active cart is empty")
def active_cart_is_empty(shopper):
    carts = _active_carts(shopper)
    assert all(len(cart.items) == 0 for cart in carts)


@then(parsers.cfparse('the active cart holds {qty:d} of "{name}"'))
def active_cart_holds(shopper, products, qty, name):
    item = _active_cart(shopper).find_item(products[name])
    assert item is not None, f"No row for {name}"
    assert item.quantity == qty
