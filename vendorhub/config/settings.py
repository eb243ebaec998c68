"""
Application configuration settings.
Handles environment variables and application-wide settings.
"""
from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Application settings
    app_name: str = Field(default="VendorHub API", validation_alias="APP_NAME")
    app_version: str = Field(default="1.0.0", validation_alias="APP_VERSION")
    app_description: str = Field(
        default="Vendor marketplace backend: admins, vendors, products, OTP login, addresses and checkout",
        validation_alias="APP_DESCRIPTION"
    )
    debug: bool = Field(default=False, validation_alias="DEBUG")

    # Server settings
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=5000, validation_alias="PORT")
    reload: bool = Field(default=False, validation_alias="RELOAD")

    # Database settings
    mongodb_url: str = Field(default="mongodb://localhost:27017", validation_alias="MONGODB_URL")
    database_name: str = Field(default="vendorhub", validation_alias="DATABASE_NAME")

    # MongoDB connection settings
    server_selection_timeout_ms: int = Field(default=5000, validation_alias="MONGODB_SERVER_SELECTION_TIMEOUT_MS")
    connect_timeout_ms: int = Field(default=5000, validation_alias="MONGODB_CONNECT_TIMEOUT_MS")
    socket_timeout_ms: int = Field(default=30000, validation_alias="MONGODB_SOCKET_TIMEOUT_MS")
    max_pool_size: int = Field(default=10, validation_alias="MONGODB_MAX_POOL_SIZE")
    min_pool_size: int = Field(default=1, validation_alias="MONGODB_MIN_POOL_SIZE")
    retry_writes: bool = Field(default=True, validation_alias="MONGODB_RETRY_WRITES")

    # Logging settings
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # Auth settings
    jwt_secret: str = Field(default="your-secret-key-change-in-env", validation_alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
    jwt_expire_days: int = Field(default=7, validation_alias="JWT_EXPIRE_DAYS")
    bcrypt_rounds: int = Field(default=10, validation_alias="BCRYPT_ROUNDS")

    # OTP settings
    otp_length: int = Field(default=6, validation_alias="OTP_LENGTH")
    otp_expire_minutes: int = Field(default=10, validation_alias="OTP_EXPIRE_MINUTES")

    # Upload settings
    upload_path: str = Field(default="./uploads", validation_alias="UPLOAD_PATH")
    file_url: str = Field(default="http://localhost:5000", validation_alias="FILE_URL")
    max_upload_size: int = Field(default=5 * 1024 * 1024, validation_alias="MAX_UPLOAD_SIZE")
    allowed_image_types: List[str] = Field(
        default=["image/jpeg", "image/png", "image/gif", "image/webp", "image/svg+xml"],
        validation_alias="ALLOWED_IMAGE_TYPES"
    )

    # Payment settings (Stripe Checkout is enabled only when a secret key is present)
    stripe_secret_key: Optional[str] = Field(default=None, validation_alias="STRIPE_SECRET_KEY")
    stripe_webhook_secret: Optional[str] = Field(default=None, validation_alias="STRIPE_WEBHOOK_SECRET")
    stripe_currency: str = Field(default="inr", validation_alias="STRIPE_CURRENCY")
    frontend_url: str = Field(default="http://localhost:5173", validation_alias="FRONTEND_URL")

    # Pagination defaults
    default_page_size: int = Field(default=10, validation_alias="DEFAULT_PAGE_SIZE")
    max_page_size: int = Field(default=100, validation_alias="MAX_PAGE_SIZE")

    # Business logic settings
    new_vendor_days: int = Field(default=7, validation_alias="NEW_VENDOR_DAYS")

    @property
    def payments_enabled(self) -> bool:
        return bool(self.stripe_secret_key)


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings
