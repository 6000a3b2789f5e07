"""Coupon rules for the mock cart store"""

from typing import Optional

from ..models.coupon import CouponKind, CouponRule

DEFAULT_COUPONS = [
    CouponRule(code="WELCOME10", discount=10, min_amount=200, type=CouponKind.PERCENTAGE),
    CouponRule(code="SAVE50", discount=50, min_amount=500, type=CouponKind.FLAT),
    CouponRule(code="FIRST20", discount=20, min_amount=300, type=CouponKind.PERCENTAGE),
    CouponRule(code="LUXURY15", discount=15, min_amount=1000, type=CouponKind.PERCENTAGE),
]


class CouponDatabase:
    """In-memory coupon rules keyed by upper-case code"""

    def __init__(self, rules: Optional[list[CouponRule]] = None):
        self.rules: dict[str, CouponRule] = {}
        for rule in (rules if rules is not None else DEFAULT_COUPONS):
            self.add_rule(rule)

    def add_rule(self, rule: CouponRule) -> None:
        self.rules[rule.code.upper()] = rule

    def get_rule(self, code: str) -> Optional[CouponRule]:
        return self.rules.get(code.strip().upper())

    @staticmethod
    def discount_for(rule: CouponRule, subtotal: float) -> float:
        """Amount a rule takes off a subtotal, never more than the subtotal"""
        if rule.type == CouponKind.PERCENTAGE:
            amount = subtotal * rule.discount / 100
        else:
            amount = rule.discount
        return round(min(amount, subtotal), 2)


# Singleton instance
coupon_db = CouponDatabase()
