"""
Cart summary: test suite
=========================
Run with:  pytest tests/test_summary.py -v
"""

import pytest

from cart_engine.models.cart import Cart, Coupon, CouponType, LineItem
from cart_engine.services.summary import compute_summary, coupon_discount_for


def line(item_id="i1", price=50.0, quantity=2, discount=0.0, stock=10):
    return LineItem(
        id=item_id,
        product_id=f"p-{item_id}",
        product_name="Thing",
        quantity=quantity,
        unit_price=price,
        discount_percent=discount,
        available_stock=stock,
    )


def cart_of(*items):
    return Cart(items=list(items))


SAVE10 = Coupon(code="SAVE10", type=CouponType.PERCENTAGE, value=10)
FLAT15 = Coupon(code="FLAT15", type=CouponType.FIXED, value=15)


# ---------------------------------------------------------------------------
# Shipping
# ---------------------------------------------------------------------------

class TestShipping:
    def test_free_at_threshold(self):
        summary = compute_summary(cart_of(line(price=37.5)), free_shipping_threshold=75, shipping_fee=10)
        assert summary.subtotal == 75.0
        assert summary.shipping_cost == 0.0

    def test_fee_below_threshold(self):
        summary = compute_summary(cart_of(line(price=30)), free_shipping_threshold=75, shipping_fee=10)
        assert summary.shipping_cost == 10.0
        assert summary.total == 70.0
        assert summary.amount_to_free_shipping == 15.0

    def test_empty_cart_is_charged_the_fee(self):
        summary = compute_summary(Cart(), free_shipping_threshold=75, shipping_fee=10)
        assert summary.is_empty
        assert summary.subtotal == 0.0
        assert summary.shipping_cost == 10.0

    def test_item_discounts_can_drop_below_threshold(self):
        summary = compute_summary(
            cart_of(line(price=50, quantity=2, discount=30)), free_shipping_threshold=75, shipping_fee=10
        )
        assert summary.subtotal == 100.0
        assert summary.item_discount == 30.0
        assert summary.shipping_cost == 10.0
        assert summary.amount_to_free_shipping == 5.0
        assert summary.total == 80.0


# ---------------------------------------------------------------------------
# Totals
# ---------------------------------------------------------------------------

class TestTotals:
    @pytest.mark.parametrize(
        "price,quantity,discount,coupon",
        [
            (50.0, 2, 0, None),
            (19.99, 3, 15, None),
            (120.0, 1, 25, SAVE10),
            (8.5, 4, 0, FLAT15),
        ],
    )
    def test_total_formula(self, price, quantity, discount, coupon):
        summary = compute_summary(
            cart_of(line(price=price, quantity=quantity, discount=discount)),
            coupon,
            free_shipping_threshold=75,
            shipping_fee=10,
        )
        expected = (
            summary.subtotal - summary.item_discount
            - summary.coupon_discount + summary.shipping_cost
        )
        assert summary.total == pytest.approx(max(expected, 0.0))

    def test_item_discounts_are_summed(self):
        summary = compute_summary(
            cart_of(line("a", price=100, quantity=1, discount=10), line("b", price=20, quantity=3, discount=50)),
            free_shipping_threshold=0,
        )
        assert summary.subtotal == 160.0
        assert summary.item_discount == 40.0
        assert summary.total == 120.0

    def test_counts(self):
        summary = compute_summary(cart_of(line("a", quantity=2), line("b", quantity=3)))
        assert summary.item_count == 2
        assert summary.total_items == 5
        assert not summary.is_empty

    def test_example_cart_without_coupon(self):
        summary = compute_summary(cart_of(line(price=50, quantity=2)), free_shipping_threshold=75, shipping_fee=10)
        assert summary.subtotal == 100.0
        assert summary.shipping_cost == 0.0
        assert summary.total == 100.0

    def test_fixed_coupon_lowers_total(self):
        summary = compute_summary(cart_of(line(price=50, quantity=2)), FLAT15, free_shipping_threshold=75)
        assert summary.coupon_discount == 15.0
        assert summary.coupon_code == "FLAT15"
        assert summary.total == 85.0


# ---------------------------------------------------------------------------
# Coupons
# ---------------------------------------------------------------------------

class TestCouponDiscount:
    def test_percentage_of_subtotal(self):
        summary = compute_summary(cart_of(line(price=100, quantity=2)), SAVE10, free_shipping_threshold=75)
        assert summary.coupon_discount == pytest.approx(20.0)
        assert summary.total == pytest.approx(180.0)

    def test_percentage_applies_after_item_discounts(self):
        assert coupon_discount_for(SAVE10, 90.0) == 9.0

    def test_fixed_discount_capped_at_subtotal(self):
        big = Coupon(code="BIG", type=CouponType.FIXED, value=500)
        summary = compute_summary(cart_of(line(price=10, quantity=1)), big, free_shipping_threshold=75, shipping_fee=10)
        assert summary.coupon_discount == 10.0
        assert summary.total == 10.0

    def test_total_never_negative(self):
        big = Coupon(code="BIG", type=CouponType.FIXED, value=10_000)
        summary = compute_summary(cart_of(line(price=5, quantity=1, discount=100)), big, shipping_fee=0)
        assert summary.total == 0.0

    def test_no_coupon_no_discount(self):
        assert coupon_discount_for(None, 100.0) == 0.0

    def test_flat_alias_parses_as_fixed(self):
        coupon = Coupon.from_store({"coupon": {"code": "SAVE50", "type": "flat", "discount": 50}})
        assert coupon.type == CouponType.FIXED
        assert coupon.value == 50
