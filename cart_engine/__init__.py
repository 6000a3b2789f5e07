"""Cart aggregation and coupon engine"""

__version__ = "1.0.0"
