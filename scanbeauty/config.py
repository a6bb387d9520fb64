from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # API Keys
    claude_api_key: str | None = None
    database_url: str = "postgresql+asyncpg://localhost:5432/scanbeauty"

    # AI models
    analysis_model: str = "anthropic:claude-sonnet-4-5-20250929"
    advisor_model: str = "anthropic:claude-sonnet-4-5-20250929"

    # HTTP
    cors_origins: str = "*"
    admin_username: str = "admin"
    admin_password: str | None = None

    # Funnel
    brand_name: str = "Alma Natural Beauty"
    discount_code_prefix: str = "ALMA15"
    discount_rate: float = 0.15
    analysis_daily_limit: int = 10
    # Proxies in front of the app that append to X-Forwarded-For; 0 ignores the header
    trusted_proxy_hops: int = 0

    # Recommendation policy
    anti_aging_age: int = 36
    stack_targeted_products: bool = False

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
