"""Cart models for the mock cart store

Response models serialize with the storefront's camelCase field names.
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class CartEntry(BaseModel):
    """Stored line of a user's cart"""
    item_id: str
    product_id: str
    variant_id: Optional[str] = None
    quantity: int = Field(gt=0)
    added_at: datetime


class WireModel(BaseModel):
    class Config:
        populate_by_name = True


class Inventory(WireModel):
    quantity: int


class CartProduct(WireModel):
    id: str = Field(alias="_id")
    name: str
    price: float
    discount: float = 0.0
    final_price: float = Field(alias="finalPrice")
    inventory: Inventory
    category: str


class CartItem(WireModel):
    """Populated cart line returned to clients"""
    id: str = Field(alias="_id")
    product: CartProduct
    variant: Optional[str] = None
    quantity: int
    added_at: datetime = Field(alias="addedAt")
    item_total: float = Field(alias="itemTotal")


class CartSummary(WireModel):
    total_items: int = Field(alias="totalItems")
    subtotal: float
    total_discount: float = Field(alias="totalDiscount")
    shipping_cost: float = Field(alias="shippingCost")
    shipping_threshold: float = Field(alias="shippingThreshold")
    total: float
    is_empty: bool = Field(alias="isEmpty")


class CartResponse(WireModel):
    """Cart API response"""
    items: list[CartItem] = []
    summary: CartSummary


class AddToCartRequest(WireModel):
    """Request to add item to cart"""
    product_id: str = Field(alias="productId", min_length=1)
    variant_id: Optional[str] = Field(default=None, alias="variantId")
    quantity: int = Field(default=1, gt=0)


class UpdateCartItemRequest(WireModel):
    """Request to update cart item quantity"""
    quantity: int = Field(gt=0)


class CartMutationResponse(WireModel):
    message: str
    cart_items_count: int = Field(alias="cartItemsCount")
    item: Optional[CartItem] = None


class CartCountResponse(WireModel):
    item_count: int = Field(alias="itemCount")
    total_quantity: int = Field(alias="totalQuantity")


class CartIssue(WireModel):
    """Reason a cart line blocks checkout"""
    item_id: str = Field(alias="itemId")
    type: str
    message: str
    product_id: Optional[str] = Field(default=None, alias="productId")
    product_name: Optional[str] = Field(default=None, alias="productName")
    available_stock: Optional[int] = Field(default=None, alias="availableStock")
    requested_quantity: Optional[int] = Field(default=None, alias="requestedQuantity")


class ValidItem(WireModel):
    item_id: str = Field(alias="itemId")
    product_id: str = Field(alias="productId")
    product_name: str = Field(alias="productName")
    quantity: int
    price: float
    discount: float


class ValidateCartResponse(WireModel):
    is_valid: bool = Field(alias="isValid")
    issues: list[CartIssue] = []
    valid_items: list[ValidItem] = Field(default=[], alias="validItems")
    message: str
