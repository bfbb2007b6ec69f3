from pydantic_settings import BaseSettings
from typing import Optional
from urllib.parse import urlparse

from listings.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Listings API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = True

    # Database (required for anything that touches the relational store)
    DATABASE_URL: Optional[str] = None
    DATABASE_SSL: bool = False

    # Read model (document store used for search)
    MONGODB_URI: Optional[str] = None
    MONGODB_DB: Optional[str] = None
    MONGODB_COLLECTION: str = "property_documents"

    # Denormalized documents carry one currency for the whole system
    DEFAULT_CURRENCY: str = "USD"

    # Placeholder owner for listings created before sellers existed
    DEFAULT_SELLER_ID: str = "seller123"

    # Protects the sync endpoint
    ADMIN_SECRET: Optional[str] = None

    # Blob storage for property images
    BLOB_API_URL: str = "https://blob.vercel-storage.com"
    BLOB_PUBLIC_URL: Optional[str] = None
    BLOB_READ_WRITE_TOKEN: Optional[str] = None
    BLOB_UPLOAD_TIMEOUT: float = 30.0

    # Geocoding (Google when a key is present, Nominatim otherwise)
    GOOGLE_MAPS_API_KEY: Optional[str] = None
    GEOCODING_USER_AGENT: str = "listings-backend/1.0"
    GEOCODING_TIMEOUT: float = 10.0

    # Query cache
    CACHE_TTL: int = 300  # 5 minutes
    REFERENCE_CACHE_TTL: int = 3600  # lookup lists rarely change

    # CORS
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
    ]

    class Config:
        env_file = ".env"
        case_sensitive = True

    def require_database_url(self) -> str:
        """Return DATABASE_URL or fail before any connection is attempted."""
        if not self.DATABASE_URL:
            raise ConfigurationError("DATABASE_URL is not set")
        return self.DATABASE_URL

    @property
    def mongodb_database(self) -> Optional[str]:
        """
        Database name for the read model.

        Falls back to the path component of MONGODB_URI so we never silently
        write into the driver's default "test" database.
        """
        if self.MONGODB_DB:
            return self.MONGODB_DB
        if not self.MONGODB_URI:
            return None
        path = urlparse(self.MONGODB_URI).path.strip("/")
        if not path:
            raise ConfigurationError(
                "MONGODB_DB is required when MONGODB_URI does not include a database path"
            )
        return path


settings = Settings()
