"""FastAPI routes for the Marketplace domain: products and user carts.

The caller's user id travels in the path; authenticating it is left to
whatever sits in front of this service.
"""

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse
from protean.utils.globals import current_domain

from marketplace.api.schemas import (
    AddToCartRequest,
    AdjustStockRequest,
    CartOperationResponse,
    CartResponse,
    ChangePricingRequest,
    CheckoutResponse,
    ConsolidationResponse,
    ProductIdResponse,
    RegisterProductRequest,
    StatusResponse,
    StockValidationResponse,
    UpdateCartItemRequest,
)
from marketplace.cart.cart import Cart
from marketplace.cart.consolidation import ConsolidateCarts
from marketplace.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartItemQuantity
from marketplace.cart.summary import get_cart_view
from marketplace.catalogue.management import AdjustStock, ChangePricing, DeactivateProduct
from marketplace.catalogue.registration import RegisterProduct
from marketplace.checkout.checkout import CheckoutCart
from marketplace.checkout.stock_validation import ReconcileCartStock, validate_cart_stock


def _raise_for_failure(result) -> None:
    """Turn a failed cart operation into an HTTP error carrying its message."""
    if result.success:
        return
    if result.not_found:
        raise HTTPException(status_code=404, detail=result.error)
    if result.stock_error:
        raise HTTPException(status_code=409, detail=result.error)
    raise HTTPException(status_code=422, detail=result.error)


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def register_product(body: RegisterProductRequest) -> ProductIdResponse:
    command = RegisterProduct(
        name=body.name,
        store_id=body.store_id,
        regular_price=body.regular_price,
        promotional_price=body.promotional_price,
        stock=body.stock,
        consumer_points=body.consumer_points,
    )
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@product_router.put("/{product_id}/stock", response_model=StatusResponse)
async def adjust_stock(product_id: str, body: AdjustStockRequest) -> StatusResponse:
    current_domain.process(AdjustStock(product_id=product_id, stock=body.stock), asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/pricing", response_model=StatusResponse)
async def change_pricing(product_id: str, body: ChangePricingRequest) -> StatusResponse:
    command = ChangePricing(
        product_id=product_id,
        regular_price=body.regular_price,
        promotional_price=body.promotional_price,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/deactivate", response_model=StatusResponse)
async def deactivate_product(product_id: str) -> StatusResponse:
    current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/users/{user_id}/cart", tags=["carts"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(user_id: str) -> CartResponse:
    return CartResponse.model_validate(get_cart_view(user_id))


@cart_router.post("/items", response_model=CartOperationResponse)
async def add_cart_item(user_id: str, body: AddToCartRequest) -> CartOperationResponse:
    command = AddToCart(
        user_id=user_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    result = current_domain.process(command, asynchronous=False)
    _raise_for_failure(result)
    return CartOperationResponse.model_validate(result)


@cart_router.put("/items/{item_id}", response_model=CartOperationResponse)
async def update_cart_item(user_id: str, item_id: str, body: UpdateCartItemRequest) -> CartOperationResponse:
    command = UpdateCartItemQuantity(
        user_id=user_id,
        item_id=item_id,
        quantity=body.quantity,
    )
    result = current_domain.process(command, asynchronous=False)
    _raise_for_failure(result)
    return CartOperationResponse.model_validate(result)


@cart_router.delete("/items/{item_id}", response_model=CartOperationResponse)
async def remove_cart_item(user_id: str, item_id: str) -> CartOperationResponse:
    result = current_domain.process(RemoveFromCart(user_id=user_id, item_id=item_id), asynchronous=False)
    _raise_for_failure(result)
    return CartOperationResponse.model_validate(result)


@cart_router.delete("/items", response_model=CartOperationResponse)
async def clear_cart(user_id: str) -> CartOperationResponse:
    result = current_domain.process(ClearCart(user_id=user_id), asynchronous=False)
    _raise_for_failure(result)
    return CartOperationResponse.model_validate(result)


@cart_router.post("/consolidate", response_model=ConsolidationResponse)
async def consolidate_carts(user_id: str) -> ConsolidationResponse:
    result = current_domain.process(ConsolidateCarts(user_id=user_id), asynchronous=False)
    return ConsolidationResponse.model_validate(result)


@cart_router.get("/stock-validation", response_model=StockValidationResponse)
async def get_stock_validation(user_id: str) -> StockValidationResponse:
    result = current_domain.process(ConsolidateCarts(user_id=user_id), asynchronous=False)
    cart = current_domain.repository_for(Cart).get(result.cart_id)
    return StockValidationResponse.model_validate(validate_cart_stock(cart))


@cart_router.post("/reconcile", response_model=StockValidationResponse)
async def reconcile_cart(user_id: str) -> StockValidationResponse:
    result = current_domain.process(ReconcileCartStock(user_id=user_id), asynchronous=False)
    return StockValidationResponse.model_validate(result)


@cart_router.post("/checkout", response_model=CheckoutResponse)
async def checkout_cart(user_id: str):
    result = current_domain.process(CheckoutCart(user_id=user_id), asynchronous=False)
    response = CheckoutResponse.model_validate(result)
    if not result.success:
        return JSONResponse(status_code=409, content=response.model_dump())
    return response
