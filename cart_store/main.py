"""
Mock Cart Store Application

A simulated cart store and coupon validator for exercising the cart engine.
Carts live in memory and are keyed by the user id in the bearer token.
"""

import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from dotenv import load_dotenv

from .routes import cart_router
from .config import settings

# Load environment variables
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "config", ".env"))

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Mock Cart Store starting up...")
    logger.info(
        f"Free shipping from {settings.shipping_threshold:.2f}, "
        f"otherwise {settings.shipping_fee:.2f}"
    )
    yield
    logger.info("Mock Cart Store shutting down...")


# Create FastAPI app
app = FastAPI(
    title="Mock Cart Store",
    description="Simulated cart store and coupon validator",
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


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render errors as {"message": ...} like the storefront expects"""
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=400,
        content={"message": f"{field}: {message}" if field else message},
    )


app.include_router(cart_router)


@app.get("/")
async def home():
    return {
        "message": "Mock Cart Store API",
        "docs": "/docs",
        "endpoints": {
            "cart": "/api/cart",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "mock-cart-store"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "cart_store.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
