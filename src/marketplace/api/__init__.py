"""Marketplace API package."""

from marketplace.api.routes import cart_router, product_router

__all__ = ["cart_router", "product_router"]
