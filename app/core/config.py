from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from decimal import Decimal
from pydantic import field_validator

class Settings(BaseSettings):
    # Database settings
    POSTGRES_USER: str = 'mostrador_user'
    POSTGRES_PASSWORD: str = 'mostrador_pass'
    POSTGRES_DB: str = 'mostrador_db'
    POSTGRES_HOST: str = 'postgres'
    POSTGRES_PORT: int = 5432
    # Full URL override (tests, local sqlite)
    DATABASE_URL: Optional[str] = None

    # MinIO settings
    MINIO_HOST: str = 'minio'
    MINIO_PORT: int = 9000
    MINIO_ACCESS_KEY: str = 'minioadmin'
    MINIO_SECRET_KEY: str = 'minioadmin'
    MINIO_BUCKET_NAME: str = 'mostrador'
    MINIO_USE_SSL: bool = False

    # Upload limits (bytes)
    MAX_LOGO_SIZE: int = 2 * 1024 * 1024  # 2MB
    MAX_CERTIFICATE_SIZE: int = 100 * 1024  # 100KB
    MAX_ATTACHMENT_SIZE: int = 10 * 1024 * 1024  # 10MB

    # Pagination
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    # Business defaults
    CURRENCY: str = "ARS"
    DEFAULT_TAX_RATE: Decimal = Decimal("21")
    DEFAULT_MAX_DISCOUNT_PERCENTAGE: Decimal = Decimal("100")
    SPLIT_PAYMENT_TOLERANCE: Decimal = Decimal("0.01")
    DEFAULT_POINT_OF_SALE: int = 1

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def minio_endpoint(self) -> str:
        return f"{self.MINIO_HOST}:{self.MINIO_PORT}"

    model_config = SettingsConfigDict(
        extra="allow",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @field_validator("DEBUG", "MINIO_USE_SSL", mode="before")
    @classmethod
    def parse_bool(cls, v):
        if isinstance(v, str):
            return v.lower().strip('"').strip("'") in ("true", "1", "yes", "on")
        return bool(v)

settings = Settings()
