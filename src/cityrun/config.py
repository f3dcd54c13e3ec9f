"""Application configuration using Pydantic Settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # System Configuration
    api_prefix: str = "/api"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:5173,http://localhost:3000"
    rate_limit_enabled: bool = True

    # Credential Store (Supabase)
    supabase_url: str = "https://test.supabase.co"
    supabase_service_role_key: str = "test-service-role-key"
    users_table: str = "users"
    routes_table: str = "user_routes"

    # Session Store (Redis)
    redis_url: str = "redis://localhost:6379/0"
    redis_socket_timeout_seconds: float = 5.0
    session_ttl_seconds: int = 1800  # 30 minutes
    session_key_prefix: str = "session:"
    session_cookie_name: str = "SESSION"
    session_header_name: str = "X-Session-Id"
    session_cookie_secure: bool = False

    # Password hashing
    bcrypt_rounds: int = 12

    # Geo-engine
    geo_engine_base_url: str = "http://cityrun-geo:3000"
    geo_engine_score_path: str = "/score-route"
    geo_engine_timeout_seconds: float = 60.0
    geo_engine_connect_timeout_seconds: float = 10.0

    # PostHog Configuration
    posthog_api_key: str | None = None
    posthog_host: str = "https://app.posthog.com"


settings = Settings()
