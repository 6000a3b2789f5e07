"""
Cart Engine

Keeps the displayed cart consistent with server-confirmed line items and
layers an optional, session-local coupon discount on top:
1. Every mutation is written to the store, then the whole cart is re-read
2. Failures keep the last known-good cart on screen
3. Quantity and coupon input is validated before any store call
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

from pydantic import ValidationError as SchemaError

from ..core.errors import AuthError, CartError, ServerError, ValidationError
from ..models.cart import (
    Cart,
    CartStatus,
    CartView,
    CheckoutIssue,
    CheckoutSummary,
    Coupon,
    LineItem,
    Summary,
)
from .store_client import CartStoreClient
from .summary import DEFAULT_FREE_SHIPPING_THRESHOLD, DEFAULT_SHIPPING_FEE, compute_summary

logger = logging.getLogger(__name__)

Notifier = Callable[[str, str], None]
ConfirmCallback = Callable[[str], Union[bool, Awaitable[bool]]]
AuthRedirect = Callable[[str], None]

CLEAR_CART_PROMPT = "Are you sure you want to clear your cart?"


@dataclass
class ActionResult:
    """Outcome of a cart action"""
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    skipped: bool = False  # Nothing was sent to the store


def _log_notification(level: str, message: str) -> None:
    logger.info(f"[{level}] {message}")


def _deny(message: str) -> bool:
    return False


class CartEngine:
    """
    Cart aggregation and coupon engine for one session.

    Collaborators are injected: the store client, a notifier for
    user-visible messages, a confirmation hook for destructive actions and
    a hook that sends the user to the login page.
    """

    def __init__(
        self,
        store: CartStoreClient,
        free_shipping_threshold: float = DEFAULT_FREE_SHIPPING_THRESHOLD,
        shipping_fee: float = DEFAULT_SHIPPING_FEE,
        notify: Optional[Notifier] = None,
        confirm: Optional[ConfirmCallback] = None,
        on_auth_required: Optional[AuthRedirect] = None,
        login_path: str = "/login",
    ):
        self.store = store
        self.free_shipping_threshold = free_shipping_threshold
        self.shipping_fee = shipping_fee
        self.login_path = login_path
        self._notify = notify or _log_notification
        self._confirm = confirm or _deny
        self._on_auth_required = on_auth_required

        self.cart: Optional[Cart] = None
        self.coupon: Optional[Coupon] = None
        self.status = CartStatus.IDLE
        self.error: Optional[str] = None
        self.updating: dict[str, bool] = {}
        self.coupon_pending = False
        self.clearing = False
        self._in_flight = 0

    # ==================== State ====================

    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    @property
    def items(self) -> list[LineItem]:
        return self.cart.items if self.cart else []

    @property
    def summary(self) -> Summary:
        return compute_summary(
            self.cart or Cart(),
            self.coupon,
            free_shipping_threshold=self.free_shipping_threshold,
            shipping_fee=self.shipping_fee,
        )

    def view(self, **extra: Any) -> CartView:
        """Render-ready snapshot of the cart"""
        return CartView(
            status=self.status,
            items=self.items,
            summary=self.summary,
            coupon=self.coupon,
            loading=self.loading,
            updating={item_id: True for item_id, busy in self.updating.items() if busy},
            coupon_pending=self.coupon_pending,
            clearing=self.clearing,
            error=self.error,
            **extra,
        )

    def get_item(self, item_id: str) -> Optional[LineItem]:
        return self.cart.find(item_id) if self.cart else None

    def _matching(self, product_id: str, variant_id: Optional[str]) -> Optional[LineItem]:
        return next(
            (
                item for item in self.items
                if item.product_id == product_id
                and (not variant_id or item.variant_id == variant_id)
            ),
            None,
        )

    def is_in_cart(self, product_id: str, variant_id: Optional[str] = None) -> bool:
        return self._matching(product_id, variant_id) is not None

    def get_item_quantity(self, product_id: str, variant_id: Optional[str] = None) -> int:
        item = self._matching(product_id, variant_id)
        return item.quantity if item else 0

    def _begin(self) -> None:
        self._in_flight += 1
        self.status = CartStatus.LOADING

    def _end(self) -> None:
        self._in_flight -= 1

    def _mark_failed(self, error: CartError) -> None:
        # The last good cart stays in place
        self.status = CartStatus.ERROR
        self.error = error.message

    def _handle_error(self, error: CartError) -> ActionResult:
        logger.warning(f"Cart action failed ({type(error).__name__}): {error.message}")
        self.error = error.message
        if not isinstance(error, ValidationError):
            self.status = CartStatus.ERROR
        self._notify("error", error.message)

        if isinstance(error, AuthError) and self._on_auth_required:
            self._on_auth_required(self.login_path)

        return ActionResult(success=False, error=error.message)

    async def _guarded(
        self,
        operation: Callable[[], Awaitable[Optional[str]]],
        success_message: Optional[str] = None,
    ) -> ActionResult:
        """Run an operation, turning cart errors into a failed result"""
        try:
            message = await operation()
        except CartError as e:
            return self._handle_error(e)

        message = message or success_message
        if message:
            self._notify("success", message)
        return ActionResult(success=True, message=message)

    # ==================== Fetch ====================

    async def fetch_cart(self) -> Cart:
        """
        Re-read the canonical cart from the store.

        Raises the store's CartError after recording it; the previous cart
        is left untouched.
        """
        self._begin()
        try:
            payload = await self.store.get_cart()
            cart = Cart.from_store(payload)
        except CartError as e:
            self._mark_failed(e)
            raise
        except (KeyError, TypeError, SchemaError) as e:
            error = ServerError("Malformed cart returned by the store")
            self._mark_failed(error)
            raise error from e
        finally:
            self._end()

        self.cart = cart
        self.status = CartStatus.READY
        self.error = None
        logger.debug(f"Cart fetched: {len(cart.items)} line items")

        self._check_store_totals(cart)
        self._drop_unqualified_coupon()
        return cart

    async def refresh(self) -> ActionResult:
        """Fetch the cart, surfacing any failure as a message"""
        async def operation() -> None:
            await self.fetch_cart()

        return await self._guarded(operation)

    async def _mutate(self, call: Callable[[], Awaitable[Any]]) -> None:
        """Send one write to the store, then re-read the cart"""
        self._begin()
        try:
            await call()
        except CartError as e:
            self._mark_failed(e)
            raise
        finally:
            self._end()

        await self.fetch_cart()

    # ==================== Line items ====================

    async def add_item(
        self,
        product_id: str,
        quantity: int = 1,
        variant_id: Optional[str] = None,
    ) -> ActionResult:
        """Add a product to the cart"""
        if quantity < 1:
            return self._handle_error(ValidationError("Quantity must be positive"))

        async def operation() -> None:
            await self._mutate(lambda: self.store.add_item(product_id, quantity, variant_id))

        return await self._guarded(operation, "Added to cart successfully!")

    async def set_quantity(self, item_id: str, quantity: int) -> ActionResult:
        """
        Change a line item's quantity.

        Quantities below one are ignored. Quantities above the item's stock
        are rejected without contacting the store.
        """
        if quantity < 1:
            return ActionResult(success=False, skipped=True)

        if self.updating.get(item_id):
            return ActionResult(success=False, skipped=True, message="Update already in progress")

        item = self.get_item(item_id)
        if item is not None and quantity > item.available_stock:
            return self._handle_error(
                ValidationError(f"Only {item.available_stock} items available in stock")
            )

        async def operation() -> None:
            await self._mutate(lambda: self.store.update_item(item_id, quantity))

        self.updating[item_id] = True
        try:
            return await self._guarded(operation, "Cart updated")
        finally:
            self.updating.pop(item_id, None)

    async def remove_line_item(self, item_id: str) -> ActionResult:
        """Remove a line item. There is no undo."""
        if self.updating.get(item_id):
            return ActionResult(success=False, skipped=True, message="Update already in progress")

        async def operation() -> None:
            await self._mutate(lambda: self.store.remove_item(item_id))

        self.updating[item_id] = True
        try:
            return await self._guarded(operation, "Item removed from cart")
        finally:
            self.updating.pop(item_id, None)

    async def clear_cart(self, confirm: Optional[ConfirmCallback] = None) -> ActionResult:
        """Empty the cart once the user has confirmed"""
        if self.clearing:
            return ActionResult(success=False, skipped=True, message="Cart is already being cleared")

        approved = (confirm or self._confirm)(CLEAR_CART_PROMPT)
        if inspect.isawaitable(approved):
            approved = await approved
        if not approved:
            return ActionResult(success=False, skipped=True)

        async def clear() -> None:
            await self.store.clear_cart()
            self.coupon = None

        async def operation() -> None:
            await self._mutate(clear)

        self.clearing = True
        try:
            return await self._guarded(operation, "Cart cleared successfully")
        finally:
            self.clearing = False

    # ==================== Coupons ====================

    async def apply_coupon(self, code: str) -> ActionResult:
        """
        Validate a coupon code and keep it as the active coupon.

        Only one validation may be in flight. A new coupon replaces the
        previous one; a rejected code leaves the previous one in place.
        """
        code = (code or "").strip()
        if not code:
            return self._handle_error(ValidationError("Please enter a coupon code"))

        if self.coupon_pending:
            return ActionResult(success=False, skipped=True, message="Coupon validation in progress")

        async def operation() -> str:
            payload = await self.store.apply_coupon(code)
            try:
                coupon = Coupon.from_store(payload)
            except (KeyError, TypeError, SchemaError) as e:
                raise ServerError("Malformed coupon returned by the store") from e

            self.coupon = coupon
            logger.info(f"Coupon {coupon.code} applied ({coupon.type.value} {coupon.value})")
            return payload.get("message") or f"Coupon {coupon.code} applied"

        self.coupon_pending = True
        try:
            return await self._guarded(operation)
        finally:
            self.coupon_pending = False

    def remove_coupon(self) -> ActionResult:
        """Drop the active coupon"""
        if self.coupon is None:
            return ActionResult(success=False, skipped=True)

        logger.info(f"Coupon {self.coupon.code} removed")
        self.coupon = None
        return ActionResult(success=True, message="Coupon removed")

    def _check_store_totals(self, cart: Cart) -> bool:
        """Warn when the store prices the cart differently. Returns True on a match."""
        if cart.server_subtotal is None:
            return True

        summary = compute_summary(
            cart,
            free_shipping_threshold=self.free_shipping_threshold,
            shipping_fee=self.shipping_fee,
        )
        local_subtotal = round(summary.subtotal - summary.item_discount, 2)
        drift = []
        if abs(local_subtotal - cart.server_subtotal) > 0.01:
            drift.append(f"subtotal {local_subtotal:.2f} vs {cart.server_subtotal:.2f}")
        if cart.server_shipping_cost is not None and summary.shipping_cost != cart.server_shipping_cost:
            drift.append(f"shipping {summary.shipping_cost:.2f} vs {cart.server_shipping_cost:.2f}")
        if (
            cart.server_shipping_threshold is not None
            and cart.server_shipping_threshold != self.free_shipping_threshold
        ):
            drift.append(
                f"free shipping threshold {self.free_shipping_threshold:.2f} "
                f"vs {cart.server_shipping_threshold:.2f}"
            )

        if drift:
            logger.warning(f"Cart totals differ from the store: {', '.join(drift)}")
        return not drift

    def _drop_unqualified_coupon(self) -> None:
        if self.coupon is None or not self.coupon.min_amount:
            return

        summary = compute_summary(
            self.cart or Cart(),
            free_shipping_threshold=self.free_shipping_threshold,
            shipping_fee=self.shipping_fee,
        )
        if summary.subtotal - summary.item_discount < self.coupon.min_amount:
            coupon, self.coupon = self.coupon, None
            self._notify(
                "error",
                f"Coupon {coupon.code} removed: minimum order amount of "
                f"{coupon.min_amount:.2f} no longer met",
            )

    # ==================== Checkout ====================

    async def checkout(self) -> CheckoutSummary:
        """
        Check availability and hand the aggregate to the checkout step.

        The cart is re-read so the summary matches what the store just
        validated.
        """
        try:
            payload = await self.store.validate()
            await self.fetch_cart()
        except CartError as e:
            result = self._handle_error(e)
            return CheckoutSummary(
                ready=False,
                items=self.items,
                summary=self.summary,
                coupon=self.coupon,
                message=result.error,
            )

        issues = [CheckoutIssue.from_store(issue) for issue in payload.get("issues", [])]
        return CheckoutSummary(
            ready=bool(payload.get("isValid")) and not issues,
            issues=issues,
            items=self.items,
            summary=self.summary,
            coupon=self.coupon,
            message=payload.get("message"),
        )
