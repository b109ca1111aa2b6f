"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database (set DATABASE_URL=postgresql+psycopg2://... in production)
    database_url: str = "sqlite:///./discount_gateway.db"

    # Service
    service_name: str = "discount-gateway"
    log_level: str = "INFO"

    # Invoices
    default_currency: str = "USD"
    import_max_rows: int = 10_000
    default_page_size: int = 50
    max_page_size: int = 100


settings = Settings()
