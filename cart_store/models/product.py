"""Product models for the mock cart store"""

from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum


class ProductCategory(str, Enum):
    ELECTRONICS = "electronics"
    CLOTHING = "clothing"
    HOME = "home"
    SPORTS = "sports"
    BOOKS = "books"


class Product(BaseModel):
    """Product in the catalog"""
    id: str
    name: str
    price: float = Field(gt=0)
    discount: float = Field(default=0.0, ge=0, le=100)  # Percent off
    category: ProductCategory
    sku: str
    image_url: Optional[str] = None
    stock_quantity: int = Field(ge=0, default=100)
    is_active: bool = True

    @property
    def final_price(self) -> float:
        return self.price - self.price * self.discount / 100
