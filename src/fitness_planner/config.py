"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

COMPLETION_BACKENDS = {"openai", "edge_function"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    api_token: str
    openai_api_key: str
    openai_model: str = "llama-3.3-70b-versatile"
    openai_base_url: str | None = "https://api.groq.com/openai/v1"
    completion_backend: str = "openai"
    completion_temperature: float = 0.2
    completion_max_tokens: int = 3500
    completion_timeout_seconds: float = 60.0
    edge_function_name: str = "generate-plan"
    plan_cache_ttl_seconds: int = 300
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_completion_backend(raw: str | None) -> str:
    """Normalize the completion backend name, defaulting to OpenAI."""
    if raw is None:
        return "openai"
    cleaned = raw.strip().lower().replace("-", "_")
    if cleaned in {"", "groq"}:
        return "openai"
    if cleaned not in COMPLETION_BACKENDS:
        raise ValueError(f"Unknown completion backend: {raw}")
    return cleaned
