"""Shared fixtures for marketplace tests: registered products and seeded carts."""

from datetime import UTC, datetime, timedelta

import pytest
from marketplace.cart.cart import Cart
from marketplace.catalogue.registration import RegisterProduct
from protean import current_domain


@pytest.fixture()
def user_id():
    return "user-001"


@pytest.fixture()
def make_product():
    """Register a product through its command and return the id."""

    def _make_product(**overrides):
        defaults = {
            "name": "Porcelain tile 60x60",
            "store_id": "store-001",
            "regular_price": 50.0,
            "stock": 10,
            "consumer_points": 2,
        }
        defaults.update(overrides)
        return current_domain.process(RegisterProduct(**defaults), asynchronous=False)

    return _make_product


@pytest.fixture()
def seed_cart():
    """Persist an Active cart directly, bypassing consolidation.

    Reproduces what concurrent requests leave behind: several Active carts
    for one user. ``age_minutes`` pushes ``created_at`` into the past so the
    newest cart is predictable. ``items`` is a list of
    ``(product_id, quantity, price)`` tuples.
    """

    def _seed_cart(user_id, age_minutes=0, items=()):
        created_at = datetime.now(UTC) - timedelta(minutes=age_minutes)
        cart = Cart.open(user_id, created_at=created_at)
        for product_id, quantity, price in items:
            cart.add_item(product_id, quantity, price, available_stock=quantity)
        current_domain.repository_for(Cart).add(cart)
        return cart

    return _seed_cart
