"""Cart Engine Configuration"""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    # Application
    app_name: str = "Cart Engine"
    debug: bool = True
    host: str = "0.0.0.0"
    port: int = 8000

    # Cart store
    store_base_url: str = "http://localhost:8001"
    request_timeout: float = 30.0

    # Pricing
    free_shipping_threshold: float = 500.0
    shipping_fee: float = 50.0

    # Sessions
    login_path: str = "/login"
    session_max_age_hours: int = 24
    session_sweep_interval_seconds: float = 600.0
    max_messages: int = 20

    class Config:
        env_file = "config/.env"
        env_file_encoding = "utf-8"
        env_prefix = "CART_ENGINE_"
        case_sensitive = False
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
