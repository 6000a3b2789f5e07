"""Cart API routes for the mock cart store"""

import logging
from fastapi import APIRouter, HTTPException, Depends

from ..models.cart import (
    AddToCartRequest,
    CartCountResponse,
    CartIssue,
    CartMutationResponse,
    CartResponse,
    UpdateCartItemRequest,
    ValidateCartResponse,
    ValidItem,
)
from ..models.coupon import (
    AppliedCoupon,
    ApplyCouponRequest,
    ApplyCouponResponse,
    CouponTotals,
)
from ..database import cart_db, coupon_db, product_db
from ..database.carts import CartDatabase
from ..database.coupons import CouponDatabase
from ..database.products import ProductDatabase
from ..security.auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cart", tags=["Cart"])


def get_cart_db() -> CartDatabase:
    return cart_db


def get_product_db() -> ProductDatabase:
    return product_db


def get_coupon_db() -> CouponDatabase:
    return coupon_db


@router.get("", response_model=CartResponse)
async def get_cart(
    user_id: str = Depends(get_current_user),
    carts: CartDatabase = Depends(get_cart_db),
    products: ProductDatabase = Depends(get_product_db),
):
    """Get the user's cart with totals"""
    return carts.build_cart(user_id, products)


@router.post("/add", response_model=CartMutationResponse)
async def add_to_cart(
    request: AddToCartRequest,
    user_id: str = Depends(get_current_user),
    carts: CartDatabase = Depends(get_cart_db),
    products: ProductDatabase = Depends(get_product_db),
):
    """Add an item to the cart"""
    product = products.get_product(request.product_id)
    if not product or not product.is_active:
        raise HTTPException(status_code=404, detail="Product not found or inactive")

    if product.stock_quantity < request.quantity:
        raise HTTPException(
            status_code=400,
            detail=f"Only {product.stock_quantity} items available in stock",
        )

    existing = carts.find_product_entry(user_id, product.id, request.variant_id)
    if existing and existing.quantity + request.quantity > product.stock_quantity:
        raise HTTPException(
            status_code=400,
            detail=(
                f"Cannot add {request.quantity} more. "
                f"Only {product.stock_quantity} items available in stock"
            ),
        )

    entry = carts.add_item(user_id, product, request.quantity, request.variant_id)
    logger.info(f"User {user_id} added {request.quantity}x {product.id}")

    return CartMutationResponse(
        message="Item added to cart successfully",
        item=carts.populate(entry, product),
        cart_items_count=len(carts.get_entries(user_id)),
    )


@router.put("/update/{item_id}", response_model=CartMutationResponse)
async def update_cart_item(
    item_id: str,
    request: UpdateCartItemRequest,
    user_id: str = Depends(get_current_user),
    carts: CartDatabase = Depends(get_cart_db),
    products: ProductDatabase = Depends(get_product_db),
):
    """Update item quantity in cart"""
    entry = carts.get_entry(user_id, item_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Cart item not found")

    product = products.get_product(entry.product_id)
    if not product or not product.is_active:
        raise HTTPException(status_code=404, detail="Product not found or inactive")

    if request.quantity > product.stock_quantity:
        raise HTTPException(
            status_code=400,
            detail=f"Only {product.stock_quantity} items available in stock",
        )

    entry = carts.update_quantity(user_id, item_id, request.quantity)
    return CartMutationResponse(
        message="Cart item updated successfully",
        item=carts.populate(entry, product),
        cart_items_count=len(carts.get_entries(user_id)),
    )


@router.delete("/remove/{item_id}", response_model=CartMutationResponse)
async def remove_from_cart(
    item_id: str,
    user_id: str = Depends(get_current_user),
    carts: CartDatabase = Depends(get_cart_db),
):
    """Remove an item from the cart"""
    if not carts.remove_item(user_id, item_id):
        raise HTTPException(status_code=404, detail="Cart item not found")

    return CartMutationResponse(
        message="Item removed from cart successfully",
        cart_items_count=len(carts.get_entries(user_id)),
    )


@router.delete("/clear", response_model=CartMutationResponse)
async def clear_cart(
    user_id: str = Depends(get_current_user),
    carts: CartDatabase = Depends(get_cart_db),
):
    """Clear all items from cart"""
    carts.clear_cart(user_id)
    return CartMutationResponse(message="Cart cleared successfully", cart_items_count=0)


@router.post("/apply-coupon", response_model=ApplyCouponResponse)
async def apply_coupon(
    request: ApplyCouponRequest,
    user_id: str = Depends(get_current_user),
    carts: CartDatabase = Depends(get_cart_db),
    products: ProductDatabase = Depends(get_product_db),
    coupons: CouponDatabase = Depends(get_coupon_db),
):
    """
    Validate a coupon code against the user's cart.

    Nothing is stored; the caller keeps the returned terms.
    """
    if not request.coupon_code.strip():
        raise HTTPException(status_code=400, detail="Coupon code is required")

    if not carts.get_entries(user_id):
        raise HTTPException(status_code=400, detail="Cart is empty")

    subtotal = carts.discounted_subtotal(user_id, products)

    rule = coupons.get_rule(request.coupon_code)
    if not rule:
        raise HTTPException(status_code=400, detail="Invalid coupon code")

    if subtotal < rule.min_amount:
        raise HTTPException(
            status_code=400,
            detail=f"Minimum order amount of {rule.min_amount:g} required for this coupon",
        )

    discount_amount = coupons.discount_for(rule, subtotal)

    return ApplyCouponResponse(
        message="Coupon applied successfully",
        coupon=AppliedCoupon(
            code=rule.code.upper(),
            discount=rule.discount,
            type=rule.type,
            discount_amount=discount_amount,
            min_amount=rule.min_amount,
        ),
        cart_total=CouponTotals(
            subtotal=subtotal,
            discount_amount=discount_amount,
            final_amount=round(subtotal - discount_amount, 2),
        ),
    )


@router.get("/count", response_model=CartCountResponse)
async def cart_count(
    user_id: str = Depends(get_current_user),
    carts: CartDatabase = Depends(get_cart_db),
):
    """Get cart line and quantity counts"""
    entries = carts.get_entries(user_id)
    return CartCountResponse(
        item_count=len(entries),
        total_quantity=sum(entry.quantity for entry in entries),
    )


@router.post("/validate", response_model=ValidateCartResponse)
async def validate_cart(
    user_id: str = Depends(get_current_user),
    carts: CartDatabase = Depends(get_cart_db),
    products: ProductDatabase = Depends(get_product_db),
):
    """Check cart items availability before checkout"""
    entries = carts.get_entries(user_id)
    if not entries:
        raise HTTPException(status_code=400, detail="Cart is empty")

    issues: list[CartIssue] = []
    valid_items: list[ValidItem] = []

    for entry in entries:
        product = products.get_product(entry.product_id)

        if not product:
            issues.append(CartIssue(
                item_id=entry.item_id,
                type="product_not_found",
                message="Product no longer exists",
            ))
            continue

        if not product.is_active:
            issues.append(CartIssue(
                item_id=entry.item_id,
                product_id=product.id,
                product_name=product.name,
                type="product_inactive",
                message="Product is no longer available",
            ))
            continue

        if product.stock_quantity < entry.quantity:
            issues.append(CartIssue(
                item_id=entry.item_id,
                product_id=product.id,
                product_name=product.name,
                type="insufficient_stock",
                message=(
                    f"Only {product.stock_quantity} items available, "
                    f"but {entry.quantity} in cart"
                ),
                available_stock=product.stock_quantity,
                requested_quantity=entry.quantity,
            ))
            continue

        valid_items.append(ValidItem(
            item_id=entry.item_id,
            product_id=product.id,
            product_name=product.name,
            quantity=entry.quantity,
            price=product.price,
            discount=product.discount,
        ))

    return ValidateCartResponse(
        is_valid=not issues,
        issues=issues,
        valid_items=valid_items,
        message="Cart is valid for checkout" if not issues else "Cart has issues that need attention",
    )
