"""Cart engine error taxonomy"""

from typing import Optional


class CartError(Exception):
    """Base exception for cart engine errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthError(CartError):
    """Missing or expired session token. Callers redirect to login."""

    def __init__(self, message: str = "Please log in to continue"):
        super().__init__(message)


class ValidationError(CartError):
    """Rejected client-side before any store call is made"""
    pass


class NetworkError(CartError):
    """Transport failure or timeout talking to the cart store"""
    pass


class ServerError(CartError):
    """Non-2xx response from the cart store"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class CouponRejected(CartError):
    """Coupon validator refused the code. The message is shown verbatim."""
    pass
