"""
Cart Engine Application

Keeps a shopper's cart view in step with the cart store and layers
coupons on top of it.
"""

import os
import asyncio
import logging
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from .routes import cart_router
from .routes import cart as cart_routes
from .core.config import settings

# Load environment variables
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "config", ".env"))

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def sweep_sessions(app: FastAPI, interval: float) -> None:
    """Periodically drop sessions idle past session_max_age_hours"""
    while True:
        await asyncio.sleep(interval)
        provider = app.dependency_overrides.get(
            cart_routes.get_session_manager, cart_routes.get_session_manager
        )
        await provider().cleanup_old_sessions()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Cart Engine starting up...")
    logger.info(f"Cart store URL: {settings.store_base_url}")
    logger.info(
        f"Free shipping from {settings.free_shipping_threshold:.2f}, "
        f"otherwise {settings.shipping_fee:.2f}"
    )

    sweeper = asyncio.create_task(sweep_sessions(app, settings.session_sweep_interval_seconds))

    yield

    logger.info("Cart Engine shutting down...")
    sweeper.cancel()
    with suppress(asyncio.CancelledError):
        await sweeper
    if cart_routes.session_manager:
        await cart_routes.session_manager.close()


# Create FastAPI app
app = FastAPI(
    title="Cart Engine",
    description="Cart aggregation and coupon engine",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict this
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(cart_router)


@app.get("/")
async def home():
    return {
        "message": "Cart Engine API",
        "docs": "/docs",
        "endpoints": {
            "cart": "/api/cart",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "cart-engine",
        "store_configured": bool(settings.store_base_url),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "cart_engine.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
