"""Cart business limits, overridable through the environment."""

import os

# Upper bound for a single cart row, independent of stock.
MAX_ITEM_QUANTITY = int(os.getenv("MARKETPLACE_MAX_ITEM_QUANTITY", "99"))

# How many of a user's most recent active carts one consolidation pass scans.
ACTIVE_CART_SCAN_LIMIT = int(os.getenv("MARKETPLACE_ACTIVE_CART_SCAN_LIMIT", "50"))

# Flat shipping fee charged once per vendor store present in the cart.
SHIPPING_PER_STORE = float(os.getenv("MARKETPLACE_SHIPPING_PER_STORE", "15.90"))
