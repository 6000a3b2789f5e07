"""Cart API routes for the cart engine"""

from typing import Optional
from pydantic import BaseModel, Field
from fastapi import APIRouter, HTTPException, Depends, Query

from ..core.config import settings
from ..core.session import SessionManager, CartSession
from ..models.cart import CartView, CheckoutSummary

router = APIRouter(prefix="/api/cart", tags=["Cart"])

session_manager: Optional[SessionManager] = None


def get_session_manager() -> SessionManager:
    """Get or create the session manager"""
    global session_manager
    if session_manager is None:
        session_manager = SessionManager(settings)
    return session_manager


def get_cart_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> CartSession:
    session = manager.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


class SessionRequest(BaseModel):
    """Bearer token of an authenticated shopper"""
    token: str = Field(min_length=1)


class SessionResponse(BaseModel):
    session_id: str
    view: CartView


class AddItemRequest(BaseModel):
    product_id: str
    quantity: int = 1
    variant_id: Optional[str] = None


class QuantityRequest(BaseModel):
    quantity: int


class CouponRequest(BaseModel):
    code: str = ""


@router.post("/session", response_model=SessionResponse)
async def create_session(
    request: SessionRequest,
    manager: SessionManager = Depends(get_session_manager),
):
    """Start a cart session and load its cart"""
    await manager.cleanup_old_sessions()
    session = manager.create_session(request.token)
    await session.engine.refresh()
    return SessionResponse(session_id=session.session_id, view=session.view())


@router.get("/{session_id}", response_model=CartView)
async def get_cart(session: CartSession = Depends(get_cart_session)):
    """Re-read the cart from the store"""
    await session.engine.refresh()
    return session.view()


@router.post("/{session_id}/items", response_model=CartView)
async def add_item(request: AddItemRequest, session: CartSession = Depends(get_cart_session)):
    await session.engine.add_item(request.product_id, request.quantity, request.variant_id)
    return session.view()


@router.put("/{session_id}/items/{item_id}", response_model=CartView)
async def set_quantity(
    item_id: str,
    request: QuantityRequest,
    session: CartSession = Depends(get_cart_session),
):
    await session.engine.set_quantity(item_id, request.quantity)
    return session.view()


@router.delete("/{session_id}/items/{item_id}", response_model=CartView)
async def remove_item(item_id: str, session: CartSession = Depends(get_cart_session)):
    await session.engine.remove_line_item(item_id)
    return session.view()


@router.delete("/{session_id}", response_model=CartView)
async def clear_cart(
    confirm: bool = Query(False, description="User confirmed clearing the cart"),
    session: CartSession = Depends(get_cart_session),
):
    """Clear the cart. Nothing happens unless confirm=true."""
    await session.engine.clear_cart(confirm=lambda prompt: confirm)
    return session.view()


@router.post("/{session_id}/coupon", response_model=CartView)
async def apply_coupon(request: CouponRequest, session: CartSession = Depends(get_cart_session)):
    await session.engine.apply_coupon(request.code)
    return session.view()


@router.delete("/{session_id}/coupon", response_model=CartView)
async def remove_coupon(session: CartSession = Depends(get_cart_session)):
    session.engine.remove_coupon()
    return session.view()


@router.get("/{session_id}/checkout", response_model=CheckoutSummary)
async def checkout(session: CartSession = Depends(get_cart_session)):
    """Validate the cart and return the aggregate for checkout"""
    return await session.engine.checkout()


@router.delete("/{session_id}/session")
async def end_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
):
    """End a cart session"""
    if await manager.delete_session(session_id):
        return {"message": "Session ended"}
    raise HTTPException(status_code=404, detail="Session not found")
