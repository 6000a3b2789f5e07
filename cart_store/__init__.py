"""Mock cart store and coupon validator"""

__version__ = "1.0.0"
