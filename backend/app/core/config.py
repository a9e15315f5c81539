"""
Centralized application settings
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings, loaded from the environment and .env"""

    # API Settings
    API_TITLE: str = "Tawabil API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Storefront and order backend for Tawabil Spices"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 5000
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = ""

    # CORS - Can be string (comma-separated) or JSON array
    # Example: "http://localhost:8080,https://tawabil.in" or '["http://localhost:8080"]'
    ALLOWED_ORIGINS: Optional[str] = "http://localhost:8080"

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        if not self.ALLOWED_ORIGINS:
            return ["http://localhost:8080"]

        # Try JSON parse first (for array format)
        import json
        try:
            origins = json.loads(self.ALLOWED_ORIGINS)
            if isinstance(origins, list):
                return origins
        except (json.JSONDecodeError, ValueError):
            pass

        # Fall back to comma-separated string
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    # Razorpay (empty key secret = demo mode)
    RAZORPAY_KEY_ID: str = ""
    RAZORPAY_KEY_SECRET: str = ""
    RAZORPAY_WEBHOOK_SECRET: str = ""
    RAZORPAY_API_URL: str = "https://api.razorpay.com/v1"

    # Operator endpoints (order status updates)
    ADMIN_API_KEY: str = ""

    # Business rules
    CURRENCY: str = "INR"
    DELIVERY_CHARGE: int = 40
    FREE_DELIVERY_ABOVE: int = 500
    MIN_ORDER_AMOUNT: int = 200
    MAX_ITEM_QUANTITY: int = 100
    DELIVERY_CITY: str = "Bengaluru"
    PINCODE_PATTERN: str = r"^560[0-9]{3}$"
    DEFAULT_DELIVERY_WINDOW: str = "10 AM - 6 PM"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
