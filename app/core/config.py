from pydantic_settings import BaseSettings
from typing import Optional, List


def _parse_csv(v: str) -> List[str]:
    """Parse comma-separated string; strip whitespace; keep non-empty."""
    if not v or not v.strip():
        return []
    return [o.strip() for o in v.split(",") if o.strip()]


_DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:4321",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:4321",
]


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "postgresql+asyncpg://postgres:postgres@db:5432/maya"
    DATABASE_ECHO: bool = False

    # CORS: comma-separated extra origins for the deployed dashboard
    ALLOWED_ORIGINS_EXTRA: str = ""

    def get_allowed_origins(self) -> List[str]:
        """Return CORS allowed origins: default localhost + ALLOWED_ORIGINS_EXTRA."""
        return _DEFAULT_CORS_ORIGINS + _parse_csv(self.ALLOWED_ORIGINS_EXTRA)

    def get_async_database_url(self) -> str:
        """DATABASE_URL with the asyncpg driver forced for plain postgres URLs."""
        url = self.DATABASE_URL
        if url.startswith("postgres://"):
            return url.replace("postgres://", "postgresql+asyncpg://", 1)
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    # Razorpay
    RAZORPAY_KEY_ID: Optional[str] = None
    RAZORPAY_KEY_SECRET: Optional[str] = None
    RAZORPAY_API_BASE: str = "https://api.razorpay.com/v1"
    RAZORPAY_TIMEOUT_SECONDS: float = 30.0

    # Payment enumeration
    PAYMENTS_CACHE_TTL_SECONDS: int = 120
    PAYMENTS_BATCH_SIZE: int = 100
    PAYMENTS_MAX_SKIP: int = 10000  # Safety limit on upstream enumeration

    # Test accounts excluded from stats (comma-separated phone numbers / emails)
    IGNORED_CONTACTS: str = ""

    def get_ignored_contacts(self) -> List[str]:
        return _parse_csv(self.IGNORED_CONTACTS)

    # Devices
    PREMIUM_USER_TYPE: str = "premium_user"

    # Charts
    DAILY_STATS_DEFAULT_DAYS: int = 14
    DAILY_STATS_MAX_DAYS: int = 90

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        # Environment variables win over the .env file


settings = Settings()
