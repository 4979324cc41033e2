"""Configuration settings for the storefront."""
from pydantic_settings import BaseSettings
from pydantic import Field
from dotenv import load_dotenv

# Make .env values visible in os.environ for anything reading it at import time.
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    database_url: str = Field(default="sqlite:///./storefront.db", alias="DATABASE_URL")
    # Echo SQL statements to the console
    db_echo: bool = Field(default=False, alias="DB_ECHO")
    # Checkout pricing
    free_shipping_threshold: float = Field(default=1000.0, alias="FREE_SHIPPING_THRESHOLD")
    shipping_flat_rate: float = Field(default=100.0, alias="SHIPPING_FLAT_RATE")
    tax_rate: float = Field(default=0.18, alias="TAX_RATE")
    currency_symbol: str = Field(default="₹", alias="CURRENCY_SYMBOL")
    # Print user-facing notifications to the console as well
    echo_notifications: bool = Field(default=True, alias="ECHO_NOTIFICATIONS")
    # Shopper sessions kept in memory; persisted carts survive eviction
    session_max_count: int = Field(default=10000, alias="SESSION_MAX_COUNT")
    session_idle_seconds: float = Field(default=3600.0, alias="SESSION_IDLE_SECONDS")
    # Orders shown on the profile overview
    profile_recent_orders: int = Field(default=3, alias="PROFILE_RECENT_ORDERS")
    project_name: str = "Storefront"
    api_version: str = "v1"
    
    class Config:
        env_file = ".env"
        case_sensitive = False
        populate_by_name = True


settings = Settings()
