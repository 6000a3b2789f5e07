"""Cart Store Configuration"""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Mock store settings loaded from environment"""

    app_name: str = "Mock Cart Store"
    debug: bool = True
    host: str = "0.0.0.0"
    port: int = 8001

    # Bearer tokens
    jwt_secret: str = "dev-secret-change-me"
    jwt_algorithm: str = "HS256"
    token_expire_minutes: int = 60 * 24 * 7

    # Shipping is free from this subtotal on
    shipping_threshold: float = 500.0
    shipping_fee: float = 50.0

    class Config:
        env_file = "config/.env"
        env_file_encoding = "utf-8"
        env_prefix = "CART_STORE_"
        case_sensitive = False
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
