"""Cart storage for the mock cart store"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from ..models.cart import (
    CartEntry,
    CartItem,
    CartProduct,
    CartResponse,
    CartSummary,
    Inventory,
)
from ..models.product import Product
from .products import ProductDatabase


class CartDatabase:
    """In-memory carts, one per user"""

    def __init__(self, shipping_threshold: float = 500.0, shipping_fee: float = 50.0):
        self.carts: dict[str, list[CartEntry]] = {}
        self.shipping_threshold = shipping_threshold
        self.shipping_fee = shipping_fee

    def get_entries(self, user_id: str) -> list[CartEntry]:
        """Get a user's cart lines, creating an empty cart on first use"""
        return self.carts.setdefault(user_id, [])

    def get_entry(self, user_id: str, item_id: str) -> Optional[CartEntry]:
        return next(
            (entry for entry in self.get_entries(user_id) if entry.item_id == item_id),
            None,
        )

    def find_product_entry(
        self,
        user_id: str,
        product_id: str,
        variant_id: Optional[str] = None,
    ) -> Optional[CartEntry]:
        return next(
            (
                entry for entry in self.get_entries(user_id)
                if entry.product_id == product_id and entry.variant_id == variant_id
            ),
            None,
        )

    def add_item(
        self,
        user_id: str,
        product: Product,
        quantity: int = 1,
        variant_id: Optional[str] = None,
    ) -> CartEntry:
        """Add a product, merging with an existing line for the same product"""
        now = datetime.now(timezone.utc)
        existing = self.find_product_entry(user_id, product.id, variant_id)

        if existing:
            existing.quantity += quantity
            existing.added_at = now
            return existing

        entry = CartEntry(
            item_id=uuid.uuid4().hex,
            product_id=product.id,
            variant_id=variant_id,
            quantity=quantity,
            added_at=now,
        )
        self.get_entries(user_id).append(entry)
        return entry

    def update_quantity(self, user_id: str, item_id: str, quantity: int) -> Optional[CartEntry]:
        """Set a line's quantity. Returns None if the line does not exist."""
        entry = self.get_entry(user_id, item_id)
        if not entry:
            return None

        entry.quantity = quantity
        entry.added_at = datetime.now(timezone.utc)
        return entry

    def remove_item(self, user_id: str, item_id: str) -> bool:
        """Remove a line from the cart"""
        entries = self.get_entries(user_id)
        remaining = [entry for entry in entries if entry.item_id != item_id]
        if len(remaining) == len(entries):
            return False
        self.carts[user_id] = remaining
        return True

    def clear_cart(self, user_id: str) -> None:
        """Clear all items from cart"""
        self.carts[user_id] = []

    def populate(self, entry: CartEntry, product: Product) -> CartItem:
        """Join a cart line with its product and price it"""
        return CartItem(
            id=entry.item_id,
            product=CartProduct(
                id=product.id,
                name=product.name,
                price=product.price,
                discount=product.discount,
                final_price=product.final_price,
                inventory=Inventory(quantity=product.stock_quantity),
                category=product.category.value,
            ),
            variant=entry.variant_id,
            quantity=entry.quantity,
            added_at=entry.added_at,
            item_total=product.final_price * entry.quantity,
        )

    def build_cart(self, user_id: str, products: ProductDatabase) -> CartResponse:
        """Price a user's cart. Lines for inactive products are left out."""
        items: list[CartItem] = []
        subtotal = 0.0
        total_discount = 0.0
        total_items = 0

        for entry in self.get_entries(user_id):
            product = products.get_product(entry.product_id)
            if not product or not product.is_active:
                continue

            item = self.populate(entry, product)
            items.append(item)
            subtotal += item.item_total
            total_discount += (product.price - product.final_price) * entry.quantity
            total_items += entry.quantity

        shipping_cost = 0.0 if subtotal >= self.shipping_threshold else self.shipping_fee

        return CartResponse(
            items=items,
            summary=CartSummary(
                total_items=total_items,
                subtotal=round(subtotal, 2),
                total_discount=round(total_discount, 2),
                shipping_cost=shipping_cost,
                shipping_threshold=self.shipping_threshold,
                total=round(subtotal + shipping_cost, 2),
                is_empty=not items,
            ),
        )

    def discounted_subtotal(self, user_id: str, products: ProductDatabase) -> float:
        return self.build_cart(user_id, products).summary.subtotal
