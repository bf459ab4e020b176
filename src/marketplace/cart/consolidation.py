"""Active-cart consolidation: keeps a user down to a single Active cart.

Concurrent add-to-cart requests can each find no Active cart and open one,
leaving the user with several. Every cart operation therefore starts by
resolving the user's carts:

1. Load the user's Active carts, newest first.
2. None: open one.
3. One: use it.
4. Several: the newest is canonical. Each older cart has its rows moved
   into the canonical one (quantities summed per product) and is marked
   Merged.

A duplicate that fails to merge is logged and left Active, so the next
request runs the same reconciliation again. Running it on an already
consolidated user changes nothing.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.cart.results import ConsolidationResult, error_message
from marketplace.domain import marketplace

logger = structlog.get_logger(__name__)


def consolidate_user_carts(user_id) -> tuple[Cart, ConsolidationResult]:
    """Resolve the user's canonical Active cart, merging duplicates into it.

    Must run inside a unit of work (a command handler) so that the
    canonical cart and the carts merged into it are committed together.
    """
    repo = current_domain.repository_for(Cart)
    carts = repo.active_for_user(user_id)

    if not carts:
        cart = Cart.open(user_id)
        repo.add(cart)
        logger.info("Opened new cart", user_id=str(user_id), cart_id=str(cart.id))
        return cart, ConsolidationResult(success=True, cart_id=str(cart.id))

    canonical, duplicates = carts[0], carts[1:]
    if not duplicates:
        return canonical, ConsolidationResult(success=True, cart_id=str(canonical.id))

    logger.warning(
        "Multiple active carts found, consolidating",
        user_id=str(user_id),
        cart_id=str(canonical.id),
        duplicate_count=len(duplicates),
    )

    merged, failed = [], []
    items_moved = 0
    for duplicate in duplicates:
        try:
            items_moved += canonical.absorb(duplicate)
        except ValidationError as exc:
            logger.error(
                "Failed to merge duplicate cart",
                user_id=str(user_id),
                cart_id=str(canonical.id),
                source_cart_id=str(duplicate.id),
                error=error_message(exc),
            )
            failed.append(str(duplicate.id))
            continue
        merged.append(duplicate)

    # Canonical cart first: if the unit of work is cut short after this
    # point, the duplicates are still Active and get merged again later.
    repo.add(canonical)
    for duplicate in merged:
        repo.add(duplicate)

    logger.info(
        "Cart consolidation complete",
        user_id=str(user_id),
        cart_id=str(canonical.id),
        merged_count=len(merged),
        failed_count=len(failed),
        items_moved=items_moved,
    )
    return canonical, ConsolidationResult(
        success=not failed,
        cart_id=str(canonical.id),
        merged_cart_ids=[str(cart.id) for cart in merged],
        items_moved=items_moved,
        failed_cart_ids=failed,
        error=f"{len(failed)} cart(s) could not be merged" if failed else None,
    )


def ensure_single_active_cart(user_id) -> Cart:
    """The user's single Active cart, opened or consolidated as needed."""
    cart, _ = consolidate_user_carts(user_id)
    return cart


@marketplace.command(part_of="Cart")
class ConsolidateCarts:
    """Fold a user's duplicate Active carts into the newest one."""

    user_id = Identifier(required=True)


@marketplace.command_handler(part_of=Cart)
class ConsolidateCartsHandler:
    @handle(ConsolidateCarts)
    def consolidate_carts(self, command):
        _, result = consolidate_user_carts(command.user_id)
        return result
