from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import List


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # App
    APP_NAME: str = "Luis Carlos Gago Store"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = True
    API_V1_PREFIX: str = "/api/v1"

    # Storefront backend (catalog + Stripe checkout sessions)
    BACKEND_API_URL: str = Field(
        default="http://localhost:5000",
        description="Base URL of the storefront backend API"
    )
    BACKEND_API_TIMEOUT: float = 15.0  # seconds

    # Redis (cart persistence)
    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL"
    )

    # Cart
    CART_STORAGE_KEY: str = "mariachi-cart-storage"
    CART_COOKIE_NAME: str = "cart_id"
    CART_COOKIE_MAX_AGE: int = 60 * 60 * 24 * 30  # 30 days
    CART_CACHE_SIZE: int = 10000  # carts (and checkout flows) kept in process memory

    # Frontend
    FRONTEND_URL: str = "http://localhost:3000"

    # CORS
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ])

    # Rate limiting
    RATE_LIMIT_PER_MINUTE: str = "60/minute"
    CHECKOUT_RATE_LIMIT: str = "10/minute"

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _assemble_cors_origins(cls, value):
        """Ensure CORS origins env value always becomes a list of strings."""
        if isinstance(value, str):
            value = value.strip()
            if value.startswith("[") and value.endswith("]"):
                import json
                return json.loads(value)
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        if isinstance(value, (list, tuple)):
            return list(value)
        return value

    @field_validator("BACKEND_API_URL")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


settings = Settings()
