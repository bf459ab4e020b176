"""Pydantic request/response schemas for the Marketplace API.

These are external contracts, kept apart from the Protean commands and
the result objects the handlers return.
"""

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Product Request Schemas
# ---------------------------------------------------------------------------
class RegisterProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Porcelain tile 60x60",
                    "store_id": "store-017",
                    "regular_price": 89.9,
                    "promotional_price": 79.9,
                    "stock": 120,
                    "consumer_points": 8,
                }
            ]
        }
    }

    name: str = Field(..., max_length=255)
    store_id: str
    regular_price: float = Field(ge=0)
    promotional_price: float | None = Field(None, ge=0)
    stock: int = Field(0, ge=0)
    consumer_points: int = Field(0, ge=0)


class AdjustStockRequest(BaseModel):
    stock: int = Field(ge=0)


class ChangePricingRequest(BaseModel):
    regular_price: float = Field(ge=0)
    promotional_price: float | None = Field(None, ge=0)


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)


class UpdateCartItemRequest(BaseModel):
    # Zero or less removes the row.
    quantity: int


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class ProductIdResponse(BaseModel):
    product_id: str


class StatusResponse(BaseModel):
    status: str = "ok"


class CartOperationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    cart_id: str | None = None
    item_id: str | None = None
    quantity: int | None = None
    capped: bool = False


class ConsolidationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    cart_id: str
    merged_cart_ids: list[str] = []
    failed_cart_ids: list[str] = []
    items_moved: int = 0


class CartLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    item_id: str
    product_id: str
    name: str
    quantity: int
    unit_price: float
    subtotal: float
    store_id: str | None = None
    stock: int = 0
    points: int = 0
    available: bool = True


class CartSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    subtotal: float
    shipping: float
    total: float
    total_points: int
    total_items: int


class CartResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    cart_id: str
    user_id: str
    status: str
    lines: list[CartLineResponse]
    summary: CartSummaryResponse


class InvalidStockItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    item_id: str
    product_id: str
    requested_quantity: int
    available_stock: int
    product_name: str


class AdjustedStockItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    item_id: str
    product_id: str
    old_quantity: int
    new_quantity: int
    product_name: str


class StockValidationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    cart_id: str | None = None
    is_valid: bool
    invalid_items: list[InvalidStockItemResponse] = []
    adjusted_items: list[AdjustedStockItemResponse] = []


class CheckoutResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    success: bool
    cart_id: str | None = None
    summary: CartSummaryResponse | None = None
    validation: StockValidationResponse | None = None
    error: str | None = None
