"""
Centralized settings configuration using Pydantic BaseSettings.

All environment variables are defined here with types, defaults, and validation.
Use get_settings() for process-wide cached access.

Usage:
    from backend.settings import get_settings, Settings

    settings = get_settings()
    print(settings.semantic_fix_max_iterations)

    # Tests construct settings explicitly
    settings = Settings(environment="test", storage_backend="memory")
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Core Environment
    # -------------------------------------------------------------------------
    environment: str = Field(
        default="development",
        description="Runtime environment: development, staging, production, test",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level for the CLI entry point",
    )

    # -------------------------------------------------------------------------
    # Language Model Provider - Anthropic
    # -------------------------------------------------------------------------
    anthropic_api_key: Optional[str] = Field(
        default=None,
        description="Anthropic API key",
    )
    llm_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Client timeout for a single model call",
    )
    fast_model_id: str = Field(
        default="claude-3-5-haiku-20241022",
        description="Provider model id for the fast tier (read only by the gateway)",
    )
    strong_model_id: str = Field(
        default="claude-sonnet-4-5-20250929",
        description="Provider model id for the strong tier (read only by the gateway)",
    )
    llm_default_temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Sampling temperature when a call does not specify one",
    )
    llm_default_max_tokens: int = Field(
        default=4000,
        ge=1,
        description="Output token cap when a call does not specify one",
    )
    llm_max_tool_rounds: int = Field(
        default=10,
        ge=1,
        description="Maximum model round trips in one tool-use exchange",
    )

    # -------------------------------------------------------------------------
    # Observability - Helicone proxy
    # -------------------------------------------------------------------------
    helicone_enabled: bool = Field(
        default=False,
        description="Route model calls through the Helicone proxy",
    )
    helicone_api_key: Optional[str] = Field(
        default=None,
        description="Helicone API key",
    )

    # -------------------------------------------------------------------------
    # Parsing Pipeline
    # -------------------------------------------------------------------------
    max_workout_text_length: int = Field(
        default=10000,
        ge=1,
        description="Maximum accepted workout text length in characters",
    )
    workout_confidence_threshold: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Minimum classifier confidence to accept text as a workout",
    )
    semantic_fix_max_iterations: int = Field(
        default=3,
        ge=0,
        description="Validate/repair rounds in the semantic fixer",
    )
    schema_fix_max_iterations: int = Field(
        default=3,
        ge=0,
        description="Repair rounds for draft schema violations",
    )

    # -------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------
    storage_backend: str = Field(
        default="memory",
        description="Repository backend: memory or supabase",
    )
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL",
    )
    supabase_service_role_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key (full access)",
    )
    supabase_anon_key: Optional[str] = Field(
        default=None,
        description="Supabase anonymous key (limited access)",
    )

    @property
    def supabase_key(self) -> Optional[str]:
        """Get the best available Supabase key (service role preferred)."""
        return self.supabase_service_role_key or self.supabase_anon_key

    # -------------------------------------------------------------------------
    # Exercise Name Cache
    # -------------------------------------------------------------------------
    cache_backend: str = Field(
        default="memory",
        description="Exercise name cache backend: memory or redis",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )
    exercise_cache_ttl_seconds: int = Field(
        default=86400,
        ge=1,
        description="TTL for exercise name cache entries",
    )

    # -------------------------------------------------------------------------
    # Observability - Sentry
    # -------------------------------------------------------------------------
    sentry_dsn: Optional[str] = Field(
        default=None,
        description="Sentry DSN for error tracking",
    )

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is a valid value."""
        valid_environments = {"development", "staging", "production", "test"}
        if v.lower() not in valid_environments:
            raise ValueError(
                f"Invalid environment '{v}'. Must be one of: {valid_environments}"
            )
        return v.lower()

    @field_validator("storage_backend")
    @classmethod
    def validate_storage_backend(cls, v: str) -> str:
        valid_backends = {"memory", "supabase"}
        if v.lower() not in valid_backends:
            raise ValueError(
                f"Invalid storage_backend '{v}'. Must be one of: {valid_backends}"
            )
        return v.lower()

    @field_validator("cache_backend")
    @classmethod
    def validate_cache_backend(cls, v: str) -> str:
        valid_backends = {"memory", "redis"}
        if v.lower() not in valid_backends:
            raise ValueError(
                f"Invalid cache_backend '{v}'. Must be one of: {valid_backends}"
            )
        return v.lower()

    # -------------------------------------------------------------------------
    # Helper Properties
    # -------------------------------------------------------------------------
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    For testing, you can clear the cache with get_settings.cache_clear().

    Returns:
        Settings: Application settings instance
    """
    return Settings()
