"""Application configuration via Pydantic Settings."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database (empty -> in-memory storage)
    database_url: str = ""
    db_pool_size: int = 10
    db_pool_timeout_seconds: int = 10
    db_pool_recycle_seconds: int = 20
    db_connect_timeout_seconds: int = 10
    db_echo: bool = False

    # LLM
    llm_provider: str = "mock"  # "openai" | "anthropic" | "mock"
    llm_api_key: str = ""
    llm_base_url: str = "https://api.openai.com/v1"
    llm_model: str = ""  # empty -> the provider's default model
    llm_timeout_seconds: float = 15.0
    llm_max_retries: int = 3

    # Caches
    suggestion_cache_ttl_seconds: int = 3600
    suggestion_cache_max_entries: int = 1000
    stats_cache_ttl_seconds: int = 30
    history_cache_ttl_seconds: int = 10
    settings_cache_ttl_seconds: int = 600

    # Auth / JWT
    jwt_secret_key: str = "dev-secret-change-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440  # 24 hours

    # Payments (Stripe)
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    default_origin: str = "http://localhost:5000"
    flip_price: float = 0.5
    flip_currency: str = "usd"
    require_payment: bool = False

    # App
    app_env: str = "development"
    app_host: str = "0.0.0.0"
    app_port: int = 5000
    app_debug: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def async_database_url(self) -> str:
        """DATABASE_URL rewritten to an async driver (postgres:// -> postgresql+asyncpg://)."""
        url = self.database_url
        for prefix in ("postgres://", "postgresql://"):
            if url.startswith(prefix):
                return "postgresql+asyncpg://" + url[len(prefix):]
        return url


settings = Settings()
