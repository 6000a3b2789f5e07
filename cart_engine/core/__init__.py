# Core modules

from .config import settings, get_settings, Settings
from .errors import (
    AuthError,
    CartError,
    CouponRejected,
    NetworkError,
    ServerError,
    ValidationError,
)

__all__ = [
    "settings",
    "get_settings",
    "Settings",
    "AuthError",
    "CartError",
    "CouponRejected",
    "NetworkError",
    "ServerError",
    "ValidationError",
]
