"""
Configuration settings for the Sahay scheduling assistant.
Loads from environment variables with validation.
"""

from datetime import time
from typing import Literal, Optional

from pydantic import Field, ValidationError as SettingsValidationError, model_validator
from pydantic_settings import BaseSettings

from sahay.errors import ConfigurationError
from sahay.services.matching import MatchStrategy
from sahay.services.providers import ProviderType


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Environment
    environment: Literal["development", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # LLM Configuration (one provider per process, no fallback)
    llm_provider: ProviderType = ProviderType.GEMINI
    gemini_api_key: Optional[str] = Field(default=None, description="Google Gemini API key")
    gemini_model: str = Field(
        default="gemini-2.5-flash",
        description="Gemini model to use"
    )
    groq_api_key: Optional[str] = Field(default=None, description="Groq API key")
    groq_model: str = Field(
        default="llama-3.3-70b-versatile",
        description="Groq model to use"
    )
    llm_max_tokens: int = 1024

    # Storage Configuration
    storage_backend: Literal["supabase", "memory"] = "supabase"
    supabase_url: Optional[str] = Field(default=None, description="Supabase project URL")
    supabase_service_role_key: Optional[str] = Field(default=None, description="Supabase service role key")
    doctors_seed_file: str = Field(
        default="data/doctors.json",
        description="Doctor roster used by the in-memory backend"
    )

    # Agent Configuration
    hospital_name: str = "Prudence Hospitals"
    agent_name: str = "Sahay"
    response_timeout_seconds: float = 20.0
    tool_call_timeout_seconds: float = 10.0

    # Appointment Configuration
    slot_duration_minutes: int = Field(default=30, gt=0)
    slot_breaks: str = Field(
        default="",
        description="Comma-separated HH:MM-HH:MM windows with no slots, e.g. 13:00-14:00"
    )
    afternoon_start: time = time(12, 0)
    evening_start: time = time(17, 0)
    doctor_match_strategy: MatchStrategy = MatchStrategy.SUBSTRING

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 8082

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @model_validator(mode="after")
    def _check_day_parts(self) -> "Settings":
        if self.evening_start <= self.afternoon_start:
            raise ValueError("evening_start must come after afternoon_start")
        return self

    @property
    def break_windows(self) -> list[str]:
        """Configured break windows, one 'HH:MM-HH:MM' string each."""
        return [part.strip() for part in self.slot_breaks.split(",") if part.strip()]


def require(settings: Settings, *names: str) -> None:
    """
    Check that the named settings are present.

    Raises:
        ConfigurationError: Listing every missing setting
    """
    missing = [name.upper() for name in names if not getattr(settings, name, None)]
    if missing:
        raise ConfigurationError(f"Missing required settings: {', '.join(missing)}")


def get_settings() -> Settings:
    """
    Load settings and check the credentials the chosen backends need.

    Raises:
        ConfigurationError: On invalid values or missing credentials
    """
    try:
        settings = Settings()
    except SettingsValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    if settings.llm_provider == ProviderType.GEMINI:
        require(settings, "gemini_api_key")
    else:
        require(settings, "groq_api_key")

    if settings.storage_backend == "supabase":
        require(settings, "supabase_url", "supabase_service_role_key")

    return settings
