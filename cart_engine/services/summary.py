"""Cart summary computation"""

from typing import Optional

from ..models.cart import Cart, Coupon, CouponType, Summary

DEFAULT_FREE_SHIPPING_THRESHOLD = 500.0
DEFAULT_SHIPPING_FEE = 50.0


def coupon_discount_for(coupon: Optional[Coupon], discounted_subtotal: float) -> float:
    """
    Discount a coupon grants against the item-discounted subtotal.

    Percentage coupons take their rate of the subtotal, fixed coupons take
    their amount. Neither may exceed the subtotal itself.
    """
    if coupon is None or discounted_subtotal <= 0:
        return 0.0

    if coupon.type == CouponType.PERCENTAGE:
        amount = discounted_subtotal * coupon.value / 100
    else:
        amount = coupon.value

    return round(min(amount, discounted_subtotal), 2)


def compute_summary(
    cart: Cart,
    coupon: Optional[Coupon] = None,
    free_shipping_threshold: float = DEFAULT_FREE_SHIPPING_THRESHOLD,
    shipping_fee: float = DEFAULT_SHIPPING_FEE,
) -> Summary:
    """
    Derive the totals shown for a cart.

    total = subtotal - item discounts - coupon discount + shipping,
    clamped at zero. Shipping is free once the subtotal after item
    discounts reaches the threshold, matching what the store charges.
    """
    subtotal = round(sum(item.line_subtotal for item in cart.items), 2)
    item_discount = round(sum(item.discount_total for item in cart.items), 2)
    discounted_subtotal = round(subtotal - item_discount, 2)
    coupon_discount = coupon_discount_for(coupon, discounted_subtotal)

    if discounted_subtotal >= free_shipping_threshold:
        shipping_cost = 0.0
    else:
        shipping_cost = shipping_fee

    total = round(subtotal - item_discount - coupon_discount + shipping_cost, 2)

    return Summary(
        item_count=len(cart.items),
        total_items=sum(item.quantity for item in cart.items),
        subtotal=subtotal,
        item_discount=item_discount,
        coupon_discount=coupon_discount,
        coupon_code=coupon.code if coupon else None,
        shipping_cost=shipping_cost,
        shipping_threshold=free_shipping_threshold,
        amount_to_free_shipping=round(max(free_shipping_threshold - discounted_subtotal, 0.0), 2),
        total=max(total, 0.0),
        is_empty=not cart.items,
    )
