"""Application tests for cart item management commands."""

from marketplace.cart.cart import Cart
from marketplace.cart.config import MAX_ITEM_QUANTITY
from marketplace.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartItemQuantity
from marketplace.catalogue.management import AdjustStock, ChangePricing, DeactivateProduct
from protean import current_domain


def _add(user_id, product_id, quantity=1):
    return current_domain.process(
        AddToCart(user_id=user_id, product_id=product_id, quantity=quantity),
        asynchronous=False,
    )


def _cart(result):
    return current_domain.repository_for(Cart).get(result.cart_id)


class TestAddToCartCommand:
    def test_add_item_persists(self, user_id, make_product):
        product_id = make_product(regular_price=50.0, stock=10)

        result = _add(user_id, product_id, 2)

        assert result.success is True
        assert result.quantity == 2
        assert result.capped is False
        cart = _cart(result)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 2
        assert cart.items[0].price_at_add == 50.0

    def test_first_add_opens_the_cart(self, user_id, make_product):
        product_id = make_product()
        result = _add(user_id, product_id)

        assert current_domain.repository_for(Cart).latest_active_for_user(user_id).id == result.cart_id

    def test_price_snapshot_uses_promotional_price(self, user_id, make_product):
        product_id = make_product(regular_price=50.0, promotional_price=39.9)

        result = _add(user_id, product_id)

        assert _cart(result).items[0].price_at_add == 39.9

    def test_price_snapshot_survives_price_change(self, user_id, make_product):
        product_id = make_product(regular_price=50.0)
        result = _add(user_id, product_id)

        current_domain.process(ChangePricing(product_id=product_id, regular_price=80.0), asynchronous=False)
        _add(user_id, product_id)

        item = _cart(result).items[0]
        assert item.quantity == 2
        assert item.price_at_add == 50.0

    def test_adding_again_increments_the_row(self, user_id, make_product):
        product_id = make_product(stock=10)
        _add(user_id, product_id, 1)

        result = _add(user_id, product_id, 3)

        cart = _cart(result)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 4

    def test_increment_is_capped_at_stock(self, user_id, make_product):
        product_id = make_product(stock=5)
        _add(user_id, product_id, 3)

        result = _add(user_id, product_id, 4)

        assert result.success is True
        assert result.capped is True
        assert result.quantity == 5

    def test_row_at_stock_cannot_grow(self, user_id, make_product):
        product_id = make_product(stock=5)
        _add(user_id, product_id, 5)

        result = _add(user_id, product_id, 1)

        assert result.success is False
        assert result.stock_error is True
        assert "Only 5 available" in result.error

    def test_insufficient_stock_fails_without_raising(self, user_id, make_product):
        product_id = make_product(stock=2)

        result = _add(user_id, product_id, 3)

        assert result.success is False
        assert result.error == "Insufficient stock. Available: 2"
        assert result.stock_error is True

    def test_out_of_stock_product_is_rejected(self, user_id, make_product):
        product_id = make_product(stock=0)

        result = _add(user_id, product_id)

        assert result.success is False
        assert result.error == "Insufficient stock. Available: 0"

    def test_unknown_product_is_rejected(self, user_id):
        result = _add(user_id, "prod-missing")

        assert result.success is False
        assert result.error == "Product not found"
        assert result.not_found is True
        assert result.stock_error is False

    def test_inactive_product_is_rejected(self, user_id, make_product):
        product_id = make_product()
        current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)

        result = _add(user_id, product_id)

        assert result.success is False
        assert result.error == "Product is no longer available"

    def test_add_consolidates_duplicate_carts_first(self, user_id, make_product, seed_cart):
        product_id = make_product(stock=10)
        seed_cart(user_id, age_minutes=10, items=[(product_id, 2, 50.0)])
        newer = seed_cart(user_id, age_minutes=1)

        result = _add(user_id, product_id, 1)

        assert result.cart_id == str(newer.id)
        cart = _cart(result)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 3
        assert len(current_domain.repository_for(Cart).active_for_user(user_id)) == 1


class TestUpdateCartItemQuantityCommand:
    def _cart_with_item(self, user_id, make_product, stock=10, quantity=1):
        product_id = make_product(stock=stock)
        result = _add(user_id, product_id, quantity)
        return product_id, result.item_id

    def test_update_quantity_persists(self, user_id, make_product):
        _, item_id = self._cart_with_item(user_id, make_product)

        result = current_domain.process(
            UpdateCartItemQuantity(user_id=user_id, item_id=item_id, quantity=5),
            asynchronous=False,
        )

        assert result.success is True
        assert _cart(result).items[0].quantity == 5

    def test_zero_quantity_removes_the_row(self, user_id, make_product):
        _, item_id = self._cart_with_item(user_id, make_product)

        result = current_domain.process(
            UpdateCartItemQuantity(user_id=user_id, item_id=item_id, quantity=0),
            asynchronous=False,
        )

        assert result.success is True
        assert result.quantity == 0
        assert len(_cart(result).items) == 0

    def test_quantity_above_stock_fails(self, user_id, make_product):
        _, item_id = self._cart_with_item(user_id, make_product, stock=3)

        result = current_domain.process(
            UpdateCartItemQuantity(user_id=user_id, item_id=item_id, quantity=4),
            asynchronous=False,
        )

        assert result.success is False
        assert result.stock_error is True
        assert result.error == "Insufficient stock. Available: 3"
        assert _cart(result).items[0].quantity == 1

    def test_quantity_above_max_fails(self, user_id, make_product):
        _, item_id = self._cart_with_item(user_id, make_product, stock=500)

        result = current_domain.process(
            UpdateCartItemQuantity(user_id=user_id, item_id=item_id, quantity=MAX_ITEM_QUANTITY + 1),
            asynchronous=False,
        )

        assert result.success is False
        assert result.stock_error is False

    def test_stock_limit_is_reported_before_max_quantity(self, user_id, make_product):
        _, item_id = self._cart_with_item(user_id, make_product, stock=50)

        result = current_domain.process(
            UpdateCartItemQuantity(user_id=user_id, item_id=item_id, quantity=MAX_ITEM_QUANTITY + 21),
            asynchronous=False,
        )

        assert result.success is False
        assert result.stock_error is True
        assert result.error == "Insufficient stock. Available: 50"

    def test_unknown_item_is_not_found(self, user_id, make_product):
        self._cart_with_item(user_id, make_product)

        result = current_domain.process(
            UpdateCartItemQuantity(user_id=user_id, item_id="item-missing", quantity=2),
            asynchronous=False,
        )

        assert result.success is False
        assert result.not_found is True

    def test_update_after_stock_drop_fails(self, user_id, make_product):
        product_id, item_id = self._cart_with_item(user_id, make_product, stock=10, quantity=2)
        current_domain.process(AdjustStock(product_id=product_id, stock=2), asynchronous=False)

        result = current_domain.process(
            UpdateCartItemQuantity(user_id=user_id, item_id=item_id, quantity=3),
            asynchronous=False,
        )

        assert result.success is False
        assert result.error == "Insufficient stock. Available: 2"


class TestRemoveFromCartCommand:
    def test_remove_item_persists(self, user_id, make_product):
        added = _add(user_id, make_product())

        result = current_domain.process(
            RemoveFromCart(user_id=user_id, item_id=added.item_id),
            asynchronous=False,
        )

        assert result.success is True
        assert len(_cart(result).items) == 0

    def test_remove_unknown_item_is_not_found(self, user_id):
        result = current_domain.process(
            RemoveFromCart(user_id=user_id, item_id="item-missing"),
            asynchronous=False,
        )

        assert result.success is False
        assert result.not_found is True


class TestClearCartCommand:
    def test_clear_removes_every_row(self, user_id, make_product):
        _add(user_id, make_product(name="Tile"))
        _add(user_id, make_product(name="Grout"))

        result = current_domain.process(ClearCart(user_id=user_id), asynchronous=False)

        assert result.success is True
        assert len(_cart(result).items) == 0

    def test_clear_empty_cart_succeeds(self, user_id):
        result = current_domain.process(ClearCart(user_id=user_id), asynchronous=False)
        assert result.success is True
