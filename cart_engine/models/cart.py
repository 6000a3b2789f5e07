"""Cart models for the cart engine"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class CartStatus(str, Enum):
    """Fetch lifecycle of the displayed cart"""
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class CouponType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class LineItem(BaseModel):
    """One product (plus optional variant) and its quantity"""
    id: str
    product_id: str
    product_name: str
    variant_id: Optional[str] = None
    quantity: int = Field(gt=0)
    unit_price: float = Field(ge=0)
    discount_percent: float = Field(default=0.0, ge=0, le=100)
    available_stock: int = Field(default=0, ge=0)

    @property
    def unit_discount(self) -> float:
        return self.unit_price * self.discount_percent / 100

    @property
    def line_subtotal(self) -> float:
        return round(self.unit_price * self.quantity, 2)

    @property
    def discount_total(self) -> float:
        return round(self.unit_discount * self.quantity, 2)

    @property
    def line_total(self) -> float:
        return round(self.line_subtotal - self.discount_total, 2)

    @classmethod
    def from_store(cls, payload: dict[str, Any]) -> "LineItem":
        """Build a line item from the store's populated cart entry"""
        product = payload.get("product") or {}
        inventory = product.get("inventory") or {}
        variant = payload.get("variant")
        if isinstance(variant, dict):
            variant = variant.get("_id")

        return cls(
            id=str(payload["_id"]),
            product_id=str(product.get("_id", "")),
            product_name=product.get("name", ""),
            variant_id=variant,
            quantity=payload["quantity"],
            unit_price=product.get("price", 0.0),
            discount_percent=product.get("discount") or 0.0,
            available_stock=inventory.get("quantity") or 0,
        )


class Cart(BaseModel):
    """Server-confirmed line items"""
    items: list[LineItem] = []
    # Store-reported figures, compared against the local summary
    server_subtotal: Optional[float] = None
    server_shipping_cost: Optional[float] = None
    server_shipping_threshold: Optional[float] = None

    def find(self, item_id: str) -> Optional[LineItem]:
        return next((item for item in self.items if item.id == item_id), None)

    @classmethod
    def from_store(cls, payload: dict[str, Any]) -> "Cart":
        summary = payload.get("summary") or {}
        return cls(
            items=[LineItem.from_store(item) for item in payload.get("items", [])],
            server_subtotal=summary.get("subtotal"),
            server_shipping_cost=summary.get("shippingCost"),
            server_shipping_threshold=summary.get("shippingThreshold"),
        )


class Coupon(BaseModel):
    """Discount terms resolved by the coupon validator"""
    code: str
    type: CouponType
    value: float = Field(ge=0)
    min_amount: float = 0.0
    discount_amount: float = 0.0

    class Config:
        frozen = True

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> Any:
        # The store calls fixed-amount coupons "flat"
        if isinstance(value, str) and value.lower() == "flat":
            return CouponType.FIXED
        return value

    @classmethod
    def from_store(cls, payload: dict[str, Any]) -> "Coupon":
        coupon = payload.get("coupon") or payload
        return cls(
            code=coupon["code"],
            type=coupon["type"],
            value=coupon.get("discount", 0.0),
            min_amount=coupon.get("minAmount") or 0.0,
            discount_amount=coupon.get("discountAmount") or 0.0,
        )


class Summary(BaseModel):
    """Derived monetary totals for a cart"""
    item_count: int = 0
    total_items: int = 0
    subtotal: float = 0.0
    item_discount: float = 0.0
    coupon_discount: float = 0.0
    coupon_code: Optional[str] = None
    shipping_cost: float = 0.0
    shipping_threshold: float = 0.0
    amount_to_free_shipping: float = 0.0
    total: float = 0.0
    is_empty: bool = True


class CartView(BaseModel):
    """Render-ready cart state handed to the UI"""
    status: CartStatus = CartStatus.IDLE
    items: list[LineItem] = []
    summary: Summary = Field(default_factory=Summary)
    coupon: Optional[Coupon] = None
    loading: bool = False
    updating: dict[str, bool] = {}
    coupon_pending: bool = False
    clearing: bool = False
    error: Optional[str] = None
    messages: list[str] = []
    redirect: Optional[str] = None


class CheckoutIssue(BaseModel):
    """A line item that blocks checkout"""
    item_id: str
    type: str
    message: str
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    available_stock: Optional[int] = None
    requested_quantity: Optional[int] = None

    @classmethod
    def from_store(cls, payload: dict[str, Any]) -> "CheckoutIssue":
        return cls(
            item_id=str(payload.get("itemId", "")),
            type=payload.get("type", "unknown"),
            message=payload.get("message", ""),
            product_id=payload.get("productId"),
            product_name=payload.get("productName"),
            available_stock=payload.get("availableStock"),
            requested_quantity=payload.get("requestedQuantity"),
        )


class CheckoutSummary(BaseModel):
    """Aggregate handed to the checkout step"""
    ready: bool
    issues: list[CheckoutIssue] = []
    items: list[LineItem] = []
    summary: Summary
    coupon: Optional[Coupon] = None
    message: Optional[str] = None
