"""
Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""
    
    # ==========================================================================
    # Environment
    # ==========================================================================
    
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    
    # ==========================================================================
    # API Server
    # ==========================================================================
    
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: str = "http://localhost:3000"
    
    # ==========================================================================
    # Database
    # ==========================================================================
    
    database_url: str = "sqlite+aiosqlite:///./orchlink.db"
    database_timeout_seconds: float = 5.0
    
    # ==========================================================================
    # Authentication
    # ==========================================================================
    
    # No default: the process refuses to start without a signing secret.
    jwt_secret_key: str = ""
    jwt_algorithm: str = "HS256"
    session_ttl_hours: int = 24
    session_cookie_name: str = "auth-token"
    
    # Shared role passwords. An empty value disables login for that role.
    admin_password: str = ""
    viewer_password: str = ""
    admin_email: str = "admin@orch-link.com"
    
    # ==========================================================================
    # Optional Services
    # ==========================================================================
    
    sentry_dsn: str = ""
    
    # ==========================================================================
    # Helpers
    # ==========================================================================
    
    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
    
    @property
    def is_production(self) -> bool:
        return self.environment == "production"
    
    @property
    def session_ttl_seconds(self) -> int:
        return self.session_ttl_hours * 60 * 60
    
    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
