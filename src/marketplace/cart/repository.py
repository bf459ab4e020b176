"""Repository for the Cart aggregate."""

from marketplace.cart import config
from marketplace.cart.cart import Cart, CartStatus
from marketplace.domain import marketplace


@marketplace.repository(part_of=Cart)
class CartRepository:
    def active_for_user(self, user_id, limit=None) -> list[Cart]:
        """A user's Active carts, newest first.

        More than one result means concurrent requests each opened a cart.
        Only the newest ``ACTIVE_CART_SCAN_LIMIT`` carts are returned unless
        ``limit`` says otherwise.
        """
        results = (
            self._dao.query.filter(user_id=str(user_id), status=CartStatus.ACTIVE.value)
            .order_by("-created_at")
            .limit(limit or config.ACTIVE_CART_SCAN_LIMIT)
            .all()
            .items
        )
        # Reload through the repository so that line items come along.
        return [self.get(cart.id) for cart in results]

    def latest_active_for_user(self, user_id) -> Cart | None:
        carts = self.active_for_user(user_id, limit=1)
        return carts[0] if carts else None
