# Database modules

from ..config import settings
from .products import product_db, ProductDatabase
from .carts import CartDatabase
from .coupons import coupon_db, CouponDatabase

cart_db = CartDatabase(
    shipping_threshold=settings.shipping_threshold,
    shipping_fee=settings.shipping_fee,
)

__all__ = [
    "product_db",
    "ProductDatabase",
    "cart_db",
    "CartDatabase",
    "coupon_db",
    "CouponDatabase",
]
