# Mock Cart Store Models

from .product import Product, ProductCategory
from .cart import (
    AddToCartRequest,
    CartCountResponse,
    CartEntry,
    CartIssue,
    CartItem,
    CartMutationResponse,
    CartProduct,
    CartResponse,
    CartSummary,
    Inventory,
    UpdateCartItemRequest,
    ValidateCartResponse,
    ValidItem,
)
from .coupon import (
    AppliedCoupon,
    ApplyCouponRequest,
    ApplyCouponResponse,
    CouponKind,
    CouponRule,
    CouponTotals,
)

__all__ = [
    "Product",
    "ProductCategory",
    "AddToCartRequest",
    "CartCountResponse",
    "CartEntry",
    "CartIssue",
    "CartItem",
    "CartMutationResponse",
    "CartProduct",
    "CartResponse",
    "CartSummary",
    "Inventory",
    "UpdateCartItemRequest",
    "ValidateCartResponse",
    "ValidItem",
    "AppliedCoupon",
    "ApplyCouponRequest",
    "ApplyCouponResponse",
    "CouponKind",
    "CouponRule",
    "CouponTotals",
]
