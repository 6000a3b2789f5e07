# Cart Engine Models

from .cart import (
    Cart,
    CartStatus,
    CartView,
    CheckoutIssue,
    CheckoutSummary,
    Coupon,
    CouponType,
    LineItem,
    Summary,
)

__all__ = [
    "Cart",
    "CartStatus",
    "CartView",
    "CheckoutIssue",
    "CheckoutSummary",
    "Coupon",
    "CouponType",
    "LineItem",
    "Summary",
]
