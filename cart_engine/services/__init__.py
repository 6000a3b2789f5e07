# Cart Engine Services

from .store_client import CartStoreClient
from .summary import compute_summary, coupon_discount_for
from .cart_engine import ActionResult, CartEngine

__all__ = [
    "ActionResult",
    "CartEngine",
    "CartStoreClient",
    "compute_summary",
    "coupon_discount_for",
]
