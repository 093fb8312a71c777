"""
Application configuration settings.
"""
from typing import List, Literal, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Environment
    environment: str = Field(default="development")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # API Configuration
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    api_reload: bool = Field(default=False)

    # Supabase (Required for authentication and storage)
    supabase_url: str = Field(..., description="Supabase project URL")
    supabase_key: str = Field(..., description="Supabase anon key")
    supabase_service_key: str = Field(..., description="Supabase service role key")

    # OpenAI
    openai_api_key: Optional[str] = Field(default=None)
    openai_model: str = Field(default="gpt-4o")
    openai_temperature: float = Field(default=0.7)
    openai_max_tokens: int = Field(default=4000)

    # Rate Limiting
    rate_limit_enabled: bool = Field(default=True)
    rate_limit_backend: Literal["memory", "redis"] = Field(default="memory")
    rate_limit_requests: int = Field(default=10, ge=1)
    rate_limit_window_seconds: int = Field(default=60, ge=1)
    rate_limit_storage_url: str = Field(default="redis://localhost:6379/3")
    redis_password: Optional[str] = Field(default=None)

    # Retry policy for external calls
    retry_max_retries: int = Field(default=3, ge=0)
    retry_base_delay: float = Field(default=1.0, ge=0)
    retry_max_jitter: float = Field(default=1.0, ge=0)

    # Shotstack
    shotstack_environment: Literal["sandbox", "production"] = Field(default="sandbox")
    shotstack_api_key: Optional[str] = Field(default=None)
    shotstack_sandbox_api_key: Optional[str] = Field(default=None)
    shotstack_production_api_key: Optional[str] = Field(default=None)
    shotstack_sandbox_owner_id: Optional[str] = Field(default=None)
    shotstack_production_owner_id: Optional[str] = Field(default=None)
    shotstack_webhook_url: Optional[str] = Field(default=None)
    shotstack_max_retries: int = Field(default=3, ge=0)
    shotstack_retry_delay: float = Field(default=2.0, ge=0)
    shotstack_poll_interval: float = Field(default=5.0, gt=0)
    shotstack_poll_timeout: float = Field(default=600.0, gt=0)

    # Pixabay
    pixabay_api_key: Optional[str] = Field(default=None)
    pixabay_base_url: str = Field(default="https://pixabay.com/api/")

    # Make.com automation
    make_webhook_url: Optional[str] = Field(default=None)
    make_webhook_delay: float = Field(default=0.5, ge=0)

    # CORS
    cors_origins: str = Field(default="http://localhost:3000,https://localhost:3000")
    cors_allow_credentials: bool = Field(default=True)

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


# Global settings instance
settings = Settings()
