"""
Cart Store Client

HTTP client for the cart store and its coupon validator.
Maps transport failures and error responses onto the cart error taxonomy.
"""

import json
import logging
from typing import Optional, Any

import httpx

from ..core.errors import AuthError, CouponRejected, NetworkError, ServerError

logger = logging.getLogger(__name__)


class CartStoreClient:
    """
    Client for the cart store API.

    Every request carries the session's bearer token. A missing token fails
    with AuthError before anything goes over the wire.
    """

    def __init__(
        self,
        store_base_url: str,
        token: Optional[str] = None,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize store client.

        Args:
            store_base_url: Base URL of the cart store API
            token: Bearer token of the authenticated session
            timeout: Seconds before an in-flight request is abandoned
            http_client: Pre-configured client, mainly for tests
        """
        self.base_url = store_base_url.rstrip("/")
        self.token = token
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        """Close HTTP client"""
        if self._owns_client:
            await self._http_client.aclose()

    def _generate_headers(self) -> dict[str, str]:
        if not self.token:
            raise AuthError()

        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Authorization": f"Bearer {self.token}",
        }

    @staticmethod
    def _error_message(response: httpx.Response, default: str) -> str:
        try:
            payload = response.json()
        except ValueError:
            return default
        if isinstance(payload, dict):
            return payload.get("message") or payload.get("detail") or default
        return default

    async def _request(
        self,
        method: str,
        path: str,
        body: Optional[dict] = None,
        failure_message: str = "Cart request failed",
    ) -> dict[str, Any]:
        """Make an authenticated request and decode the JSON reply"""
        url = f"{self.base_url}{path}"
        headers = self._generate_headers()
        body_str = json.dumps(body) if body is not None else None

        try:
            response = await self._http_client.request(
                method=method,
                url=url,
                headers=headers,
                content=body_str,
            )
        except httpx.TimeoutException as e:
            logger.error(f"Request timed out: {method} {url}")
            raise NetworkError("The store took too long to respond") from e
        except httpx.TransportError as e:
            logger.error(f"Request failed: {method} {url} - {e}")
            raise NetworkError("Could not reach the store") from e

        if response.status_code in (401, 403):
            logger.warning(f"Unauthorized: {method} {url}")
            raise AuthError(self._error_message(response, "Session expired, please log in again"))

        if response.status_code >= 400:
            logger.error(f"Request failed: {response.status_code} - {response.text}")
            raise ServerError(
                self._error_message(response, failure_message),
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ServerError("Malformed response from the store", response.status_code) from e

    # ==================== Cart APIs ====================

    async def get_cart(self) -> dict:
        """Get the session's cart with its server-computed summary"""
        return await self._request("GET", "/api/cart", failure_message="Failed to fetch cart")

    async def add_item(
        self,
        product_id: str,
        quantity: int = 1,
        variant_id: Optional[str] = None,
    ) -> dict:
        """Add item to cart"""
        body: dict[str, Any] = {"productId": product_id, "quantity": quantity}
        if variant_id:
            body["variantId"] = variant_id
        return await self._request(
            "POST", "/api/cart/add", body=body, failure_message="Failed to add to cart"
        )

    async def update_item(self, item_id: str, quantity: int) -> dict:
        """Update item quantity in cart"""
        return await self._request(
            "PUT",
            f"/api/cart/update/{item_id}",
            body={"quantity": quantity},
            failure_message="Failed to update cart item",
        )

    async def remove_item(self, item_id: str) -> dict:
        """Remove item from cart"""
        return await self._request(
            "DELETE", f"/api/cart/remove/{item_id}", failure_message="Failed to remove item"
        )

    async def clear_cart(self) -> dict:
        """Remove every item from the cart"""
        return await self._request("DELETE", "/api/cart/clear", failure_message="Failed to clear cart")

    async def validate(self) -> dict:
        """Check the cart's availability before checkout"""
        return await self._request(
            "POST", "/api/cart/validate", failure_message="Failed to validate cart"
        )

    # ==================== Coupon APIs ====================

    async def apply_coupon(self, code: str) -> dict:
        """
        Validate a coupon code against the current cart.

        A 400 from the validator is a rejection of the code itself and is
        raised as CouponRejected with the validator's message.
        """
        try:
            return await self._request(
                "POST",
                "/api/cart/apply-coupon",
                body={"couponCode": code},
                failure_message="Failed to apply coupon",
            )
        except ServerError as e:
            if e.status_code == 400:
                raise CouponRejected(e.message) from e
            raise
