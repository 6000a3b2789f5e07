"""Coupon models for the mock cart store"""

from enum import Enum

from pydantic import BaseModel, Field


class CouponKind(str, Enum):
    PERCENTAGE = "percentage"
    FLAT = "flat"


class CouponRule(BaseModel):
    """Discount terms behind a coupon code"""
    code: str
    discount: float = Field(gt=0)
    min_amount: float = Field(default=0.0, ge=0)
    type: CouponKind


class ApplyCouponRequest(BaseModel):
    coupon_code: str = Field(default="", alias="couponCode")

    class Config:
        populate_by_name = True


class AppliedCoupon(BaseModel):
    code: str
    discount: float
    type: CouponKind
    discount_amount: float = Field(alias="discountAmount")
    min_amount: float = Field(alias="minAmount")

    class Config:
        populate_by_name = True


class CouponTotals(BaseModel):
    subtotal: float
    discount_amount: float = Field(alias="discountAmount")
    final_amount: float = Field(alias="finalAmount")

    class Config:
        populate_by_name = True


class ApplyCouponResponse(BaseModel):
    message: str
    coupon: AppliedCoupon
    cart_total: CouponTotals = Field(alias="cartTotal")

    class Config:
        populate_by_name = True
