"""Mock product database"""

from typing import Optional
from ..models.product import Product, ProductCategory


def _catalog() -> dict[str, Product]:
    products = [
        Product(
            id="prod-001",
            name="Sony WH-1000XM5 Wireless Headphones",
            price=349.99,
            discount=10,
            category=ProductCategory.ELECTRONICS,
            sku="SONY-WH1000XM5-BLK",
            image_url="/static/images/sony-headphones.jpg",
            stock_quantity=50,
        ),
        Product(
            id="prod-002",
            name="Apple AirPods Pro (2nd Gen)",
            price=249.00,
            category=ProductCategory.ELECTRONICS,
            sku="APPLE-APP2-WHT",
            image_url="/static/images/airpods-pro.jpg",
            stock_quantity=100,
        ),
        Product(
            id="prod-003",
            name="Patagonia Better Sweater Jacket",
            price=139.00,
            discount=20,
            category=ProductCategory.CLOTHING,
            sku="PATA-BSJKT-NVY-M",
            image_url="/static/images/patagonia-sweater.jpg",
            stock_quantity=5,
        ),
        Product(
            id="prod-004",
            name="Nike Air Max 90",
            price=130.00,
            category=ProductCategory.CLOTHING,
            sku="NIKE-AM90-WHT-10",
            image_url="/static/images/airmax90.jpg",
            stock_quantity=60,
        ),
        Product(
            id="prod-005",
            name="KitchenAid Stand Mixer",
            price=449.99,
            category=ProductCategory.HOME,
            sku="KA-MIXER-RED-55",
            image_url="/static/images/kitchenaid.jpg",
            stock_quantity=3,
        ),
        Product(
            id="prod-006",
            name="Hydro Flask 32oz Water Bottle",
            price=44.95,
            category=ProductCategory.SPORTS,
            sku="HF-32OZ-BLK",
            image_url="/static/images/hydroflask.jpg",
            stock_quantity=200,
        ),
        Product(
            id="prod-007",
            name="The Pragmatic Programmer",
            price=49.99,
            discount=5,
            category=ProductCategory.BOOKS,
            sku="BOOK-PRAGPROG-20",
            image_url="/static/images/pragmatic.jpg",
            stock_quantity=80,
        ),
    ]
    return {product.id: product for product in products}


class ProductDatabase:
    """In-memory product catalog"""

    def __init__(self, products: Optional[dict[str, Product]] = None):
        self.products: dict[str, Product] = products if products is not None else _catalog()

    def get_product(self, product_id: str) -> Optional[Product]:
        """Get a product by ID"""
        return self.products.get(product_id)

    def get_all_products(self) -> list[Product]:
        """Get all products"""
        return list(self.products.values())

    def update_stock(self, product_id: str, quantity_change: int) -> bool:
        """
        Update product stock.

        Args:
            product_id: Product to update
            quantity_change: Positive to add, negative to remove

        Returns:
            True if successful
        """
        product = self.products.get(product_id)
        if not product:
            return False

        new_quantity = product.stock_quantity + quantity_change
        if new_quantity < 0:
            return False

        product.stock_quantity = new_quantity
        return True

    def set_active(self, product_id: str, is_active: bool) -> bool:
        """Publish or retire a product"""
        product = self.products.get(product_id)
        if not product:
            return False
        product.is_active = is_active
        return True


# Singleton instance
product_db = ProductDatabase()
