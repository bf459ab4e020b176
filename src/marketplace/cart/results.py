"""Outcome types returned by cart operations.

Cart operations report failures through these objects instead of raising,
so callers can show the message to the shopper as-is.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CartOperationResult:
    """Result of a cart-mutating operation."""

    success: bool
    error: str | None = None
    cart_id: str | None = None
    item_id: str | None = None
    quantity: int | None = None
    capped: bool = False
    # Set when the failure is about inventory rather than the request itself.
    stock_error: bool = False
    not_found: bool = False

    @classmethod
    def failure(cls, error, cart_id=None, stock_error=False, not_found=False):
        return cls(success=False, error=error, cart_id=cart_id, stock_error=stock_error, not_found=not_found)


@dataclass(frozen=True)
class ConsolidationResult:
    """Result of folding a user's duplicate active carts into one."""

    success: bool
    cart_id: str | None = None
    merged_cart_ids: list[str] = field(default_factory=list)
    items_moved: int = 0
    failed_cart_ids: list[str] = field(default_factory=list)
    error: str | None = None


def error_message(exc) -> str:
    """First human-readable message carried by a Protean ``ValidationError``."""
    messages = getattr(exc, "messages", None) or {}
    for errors in messages.values():
        if isinstance(errors, list | tuple) and errors:
            return str(errors[0])
        if errors:
            return str(errors)
    return str(exc)
