"""
Cart engine: test suite
========================
Run with:  pytest tests/test_cart_engine.py -v

The engine runs against FakeStore (see conftest.py), so every store call it
makes is visible in store.calls.
"""

import anyio
import pytest

from cart_engine.core.errors import AuthError, NetworkError
from cart_engine.models.cart import CartStatus, CouponType
from cart_engine.services.cart_engine import CLEAR_CART_PROMPT, CartEngine

from .conftest import FakeStore, wire_coupon, wire_item

pytestmark = pytest.mark.anyio


class Recorder:
    """Collects notifications and redirects raised by the engine"""

    def __init__(self):
        self.notifications = []
        self.redirects = []

    def notify(self, level, message):
        self.notifications.append((level, message))

    def redirect(self, path):
        self.redirects.append(path)

    def errors(self):
        return [message for level, message in self.notifications if level == "error"]


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def store():
    return FakeStore(
        items=[wire_item("i1", "p1", name="Mug", price=50.0, quantity=2, stock=5)],
        coupons={
            "SAVE10": wire_coupon("SAVE10", "percentage", 10, discount_amount=20),
            "FLAT15": wire_coupon("FLAT15", "fixed", 15, discount_amount=15),
            "BIGSPEND": wire_coupon("BIGSPEND", "percentage", 5, min_amount=150),
        },
    )


@pytest.fixture
def engine(store, recorder):
    return CartEngine(
        store=store,
        free_shipping_threshold=75.0,
        shipping_fee=10.0,
        notify=recorder.notify,
        on_auth_required=recorder.redirect,
    )


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------

class TestFetch:
    async def test_starts_idle(self, engine):
        assert engine.status == CartStatus.IDLE
        assert engine.items == []

    async def test_fetch_populates_cart(self, engine):
        cart = await engine.fetch_cart()

        assert len(cart.items) == 1
        assert engine.status == CartStatus.READY
        assert engine.items[0].product_name == "Mug"
        assert engine.summary.subtotal == 100.0
        assert engine.summary.total == 100.0

    async def test_fetch_failure_keeps_stale_cart(self, engine, store, recorder):
        await engine.fetch_cart()
        store.fail_with["get_cart"] = NetworkError("Could not reach the store")

        result = await engine.refresh()

        assert not result.success
        assert result.error == "Could not reach the store"
        assert engine.status == CartStatus.ERROR
        assert [item.id for item in engine.items] == ["i1"]
        assert recorder.errors() == ["Could not reach the store"]

    async def test_fetch_raises_for_direct_callers(self, engine, store):
        store.fail_with["get_cart"] = NetworkError("down")
        with pytest.raises(NetworkError):
            await engine.fetch_cart()
        assert engine.error == "down"
        assert not engine.loading

    async def test_auth_error_redirects_to_login(self, engine, store, recorder):
        store.fail_with["get_cart"] = AuthError()

        result = await engine.refresh()

        assert not result.success
        assert recorder.redirects == ["/login"]

    async def test_matching_store_totals_are_quiet(self, engine, store, caplog):
        store.summary = {"subtotal": 100.0, "shippingCost": 0.0, "shippingThreshold": 75.0}

        cart = await engine.fetch_cart()

        assert cart.server_subtotal == 100.0
        assert engine._check_store_totals(cart)
        assert "differ from the store" not in caplog.text

    async def test_store_price_drift_is_logged(self, engine, store, caplog):
        store.summary = {"subtotal": 100.0, "shippingCost": 50.0, "shippingThreshold": 500.0}

        with caplog.at_level("WARNING", logger="cart_engine.services.cart_engine"):
            cart = await engine.fetch_cart()

        assert not engine._check_store_totals(cart)
        assert "shipping 0.00 vs 50.00" in caplog.text
        assert "free shipping threshold 75.00 vs 500.00" in caplog.text
        # The local summary stays authoritative for display
        assert engine.summary.shipping_cost == 0.0

    async def test_view_is_render_ready(self, engine):
        await engine.fetch_cart()
        view = engine.view()

        assert view.status == CartStatus.READY
        assert view.items[0].id == "i1"
        assert view.summary.total == 100.0
        assert view.updating == {}
        assert not view.loading


# ---------------------------------------------------------------------------
# Quantities
# ---------------------------------------------------------------------------

class TestSetQuantity:
    async def test_valid_quantity_writes_then_refetches(self, engine, store):
        await engine.fetch_cart()

        result = await engine.set_quantity("i1", 3)

        assert result.success
        assert store.call_names() == ["get_cart", "update_item", "get_cart"]
        assert engine.items[0].quantity == 3
        assert engine.summary.subtotal == 150.0

    async def test_above_stock_is_rejected_without_store_call(self, engine, store, recorder):
        await engine.fetch_cart()

        result = await engine.set_quantity("i1", 6)

        assert not result.success
        assert result.error == "Only 5 items available in stock"
        assert store.call_names() == ["get_cart"]
        assert engine.items[0].quantity == 2
        assert engine.status == CartStatus.READY

    @pytest.mark.parametrize("quantity", [0, -1])
    async def test_non_positive_quantity_is_ignored(self, engine, store, quantity):
        await engine.fetch_cart()

        result = await engine.set_quantity("i1", quantity)

        assert result.skipped
        assert store.call_names() == ["get_cart"]
        assert engine.items[0].quantity == 2

    async def test_item_already_updating_is_skipped(self, engine, store):
        await engine.fetch_cart()
        engine.updating["i1"] = True

        result = await engine.set_quantity("i1", 3)

        assert result.skipped
        assert "update_item" not in store.call_names()

    async def test_updating_flag_released_after_failure(self, engine, store):
        await engine.fetch_cart()
        store.fail_with["update_item"] = NetworkError("The store took too long to respond")

        result = await engine.set_quantity("i1", 3)

        assert not result.success
        assert engine.updating == {}
        assert engine.items[0].quantity == 2

    async def test_different_items_update_concurrently(self, store, recorder):
        store.items.append(wire_item("i2", "p2", price=5.0, quantity=1, stock=10))
        engine = CartEngine(store=store, notify=recorder.notify)
        await engine.fetch_cart()

        results = {}

        async def update(item_id, quantity):
            results[item_id] = await engine.set_quantity(item_id, quantity)

        async with anyio.create_task_group() as tg:
            tg.start_soon(update, "i1", 4)
            tg.start_soon(update, "i2", 7)

        assert results["i1"].success and results["i2"].success
        assert {item.id: item.quantity for item in engine.items} == {"i1": 4, "i2": 7}
        assert engine.updating == {}


# ---------------------------------------------------------------------------
# Removing and clearing
# ---------------------------------------------------------------------------

class TestRemoveAndClear:
    async def test_remove_line_item(self, engine, store):
        await engine.fetch_cart()

        result = await engine.remove_line_item("i1")

        assert result.success
        assert engine.items == []
        assert store.call_names()[-2:] == ["remove_item", "get_cart"]

    async def test_remove_unknown_item_keeps_cart(self, engine, store, recorder):
        await engine.fetch_cart()

        result = await engine.remove_line_item("missing")

        assert not result.success
        assert result.error == "Cart item not found"
        assert engine.status == CartStatus.ERROR
        assert [item.id for item in engine.items] == ["i1"]
        assert "Cart item not found" in recorder.errors()

    async def test_clear_without_confirmation_does_nothing(self, engine, store):
        await engine.fetch_cart()
        prompts = []

        def decline(prompt):
            prompts.append(prompt)
            return False

        result = await engine.clear_cart(confirm=decline)

        assert result.skipped
        assert prompts == [CLEAR_CART_PROMPT]
        assert "clear_cart" not in store.call_names()
        assert len(engine.items) == 1

    async def test_clear_defaults_to_declining(self, engine, store):
        await engine.fetch_cart()
        result = await engine.clear_cart()
        assert result.skipped
        assert "clear_cart" not in store.call_names()

    async def test_clear_with_async_confirmation(self, engine, store):
        await engine.fetch_cart()
        await engine.apply_coupon("FLAT15")

        async def accept(prompt):
            return True

        result = await engine.clear_cart(confirm=accept)

        assert result.success
        assert engine.items == []
        assert engine.coupon is None
        assert engine.summary.is_empty


# ---------------------------------------------------------------------------
# Coupons
# ---------------------------------------------------------------------------

class TestCoupons:
    async def test_percentage_coupon_on_200(self, store, recorder):
        store.items = [wire_item("i1", "p1", price=100.0, quantity=2, stock=5)]
        engine = CartEngine(store=store, notify=recorder.notify)
        await engine.fetch_cart()
        before = engine.summary.total

        result = await engine.apply_coupon("SAVE10")

        assert result.success
        assert engine.coupon.type == CouponType.PERCENTAGE
        assert engine.summary.coupon_discount == pytest.approx(20.0)
        assert engine.summary.total == pytest.approx(before - 20.0)

    async def test_fixed_coupon_round_trip(self, engine):
        await engine.fetch_cart()
        assert engine.summary.total == 100.0

        await engine.apply_coupon("FLAT15")
        assert engine.summary.total == 85.0

        result = engine.remove_coupon()
        assert result.success
        assert engine.summary.total == 100.0

    async def test_empty_code_is_rejected_locally(self, engine, store):
        result = await engine.apply_coupon("   ")

        assert not result.success
        assert result.error == "Please enter a coupon code"
        assert store.call_names() == []

    async def test_rejection_message_is_verbatim(self, engine, store, recorder):
        await engine.fetch_cart()
        await engine.apply_coupon("FLAT15")

        result = await engine.apply_coupon("NOPE")

        assert result.error == "Invalid coupon code"
        assert "Invalid coupon code" in recorder.errors()
        assert engine.coupon.code == "FLAT15"

    async def test_new_coupon_replaces_previous(self, engine):
        await engine.fetch_cart()
        await engine.apply_coupon("FLAT15")
        await engine.apply_coupon("save10")

        assert engine.coupon.code == "SAVE10"
        assert engine.summary.coupon_discount == pytest.approx(10.0)

    async def test_one_validation_in_flight(self, engine, store):
        engine.coupon_pending = True

        result = await engine.apply_coupon("SAVE10")

        assert result.skipped
        assert "apply_coupon" not in store.call_names()

    async def test_pending_flag_released(self, engine):
        await engine.apply_coupon("NOPE")
        assert engine.coupon_pending is False

    async def test_coupon_survives_refetch(self, engine):
        await engine.fetch_cart()
        await engine.apply_coupon("FLAT15")
        await engine.refresh()
        assert engine.coupon.code == "FLAT15"

    async def test_coupon_dropped_when_minimum_no_longer_met(self, engine, recorder):
        await engine.fetch_cart()
        await engine.set_quantity("i1", 4)
        await engine.apply_coupon("BIGSPEND")
        assert engine.coupon.code == "BIGSPEND"

        await engine.set_quantity("i1", 2)

        assert engine.coupon is None
        assert any("BIGSPEND removed" in message for message in recorder.errors())

    async def test_remove_without_coupon_is_noop(self, engine):
        assert engine.remove_coupon().skipped


# ---------------------------------------------------------------------------
# Adding, lookups and checkout
# ---------------------------------------------------------------------------

class TestAddAndCheckout:
    async def test_add_item_refetches(self, engine, store):
        await engine.fetch_cart()

        result = await engine.add_item("p9", 2)

        assert result.success
        assert engine.is_in_cart("p9")
        assert engine.get_item_quantity("p9") == 2
        assert store.call_names()[-2:] == ["add_item", "get_cart"]

    async def test_add_item_rejects_zero(self, engine, store):
        result = await engine.add_item("p9", 0)
        assert not result.success
        assert store.call_names() == []

    async def test_lookups(self, engine):
        await engine.fetch_cart()
        assert engine.get_item("i1").quantity == 2
        assert engine.get_item("nope") is None
        assert not engine.is_in_cart("p2")
        assert engine.get_item_quantity("p2") == 0

    async def test_checkout_ready(self, engine):
        await engine.fetch_cart()
        await engine.apply_coupon("FLAT15")

        checkout = await engine.checkout()

        assert checkout.ready
        assert checkout.issues == []
        assert checkout.summary.total == 85.0
        assert checkout.coupon.code == "FLAT15"

    async def test_checkout_blocked_by_issues(self, engine, store):
        store.issues = [{
            "itemId": "i1",
            "type": "insufficient_stock",
            "message": "Only 1 items available, but 2 in cart",
            "availableStock": 1,
            "requestedQuantity": 2,
        }]

        checkout = await engine.checkout()

        assert not checkout.ready
        assert checkout.issues[0].type == "insufficient_stock"
        assert checkout.issues[0].available_stock == 1

    async def test_checkout_of_empty_cart(self, engine, store):
        store.items = []
        checkout = await engine.checkout()
        assert not checkout.ready
        assert checkout.message == "Cart is empty"
