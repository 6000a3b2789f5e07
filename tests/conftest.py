import copy

import pytest

from cart_engine.core.errors import CouponRejected, ServerError


@pytest.fixture
def anyio_backend():
    return "asyncio"


def wire_item(item_id, product_id, name="Item", price=10.0, quantity=1, discount=0, stock=10):
    """A cart line shaped like the store's GET /api/cart entries"""
    return {
        "_id": item_id,
        "product": {
            "_id": product_id,
            "name": name,
            "price": price,
            "discount": discount,
            "finalPrice": price - price * discount / 100,
            "inventory": {"quantity": stock},
            "category": "home",
        },
        "quantity": quantity,
    }


def wire_coupon(code, type_, discount, min_amount=0, discount_amount=0):
    return {
        "code": code,
        "type": type_,
        "discount": discount,
        "minAmount": min_amount,
        "discountAmount": discount_amount,
    }


class FakeStore:
    """In-memory stand-in for CartStoreClient that records every call"""

    def __init__(self, items=None, coupons=None):
        self.items = list(items or [])
        self.coupons = coupons or {}
        self.calls = []
        self.fail_with = {}
        self.issues = []
        self.summary = None
        self.closed = False

    def _record(self, name, *args):
        self.calls.append((name, *args))
        if name in self.fail_with:
            raise self.fail_with[name]

    def call_names(self):
        return [call[0] for call in self.calls]

    def _find(self, item_id):
        item = next((i for i in self.items if i["_id"] == item_id), None)
        if item is None:
            raise ServerError("Cart item not found", status_code=404)
        return item

    async def get_cart(self):
        self._record("get_cart")
        payload = {"items": copy.deepcopy(self.items)}
        if self.summary is not None:
            payload["summary"] = dict(self.summary)
        return payload

    async def add_item(self, product_id, quantity=1, variant_id=None):
        self._record("add_item", product_id, quantity, variant_id)
        self.items.append(wire_item(f"item-{len(self.items) + 1}", product_id, quantity=quantity))
        return {"message": "Item added to cart successfully"}

    async def update_item(self, item_id, quantity):
        self._record("update_item", item_id, quantity)
        self._find(item_id)["quantity"] = quantity
        return {"message": "Cart item updated successfully"}

    async def remove_item(self, item_id):
        self._record("remove_item", item_id)
        self.items.remove(self._find(item_id))
        return {"message": "Item removed from cart successfully"}

    async def clear_cart(self):
        self._record("clear_cart")
        self.items = []
        return {"message": "Cart cleared successfully"}

    async def apply_coupon(self, code):
        self._record("apply_coupon", code)
        coupon = self.coupons.get(code.upper())
        if coupon is None:
            raise CouponRejected("Invalid coupon code")
        return {"message": "Coupon applied successfully", "coupon": coupon}

    async def validate(self):
        self._record("validate")
        if not self.items:
            raise ServerError("Cart is empty", status_code=400)
        return {
            "isValid": not self.issues,
            "issues": self.issues,
            "message": "Cart is valid for checkout" if not self.issues else "Cart has issues that need attention",
        }

    async def close(self):
        self.closed = True
