"""
Configuration module - centralized settings for the entire application.
Uses pydantic-settings to load values from environment variables and .env file.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Pydantic-settings automatically:
    1. Reads from environment variables (highest priority)
    2. Falls back to .env file values
    3. Uses default values if neither exists

    To override in production, set environment variables:
        export GEMINI_API_KEY=...
        export DEFAULT_AI_PROVIDER=anthropic
    """

    # ---------------------------------------------------------------------------
    # PYDANTIC SETTINGS CONFIGURATION
    # ---------------------------------------------------------------------------
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",         # Ignore extra env vars not defined here
    )

    # ---------------------------------------------------------------------------
    # APPLICATION SETTINGS
    # ---------------------------------------------------------------------------
    # APP_NAME: Display name shown in API docs and logging
    APP_NAME: str = "HR Defender AI Gateway"

    # DEBUG: Enable debug mode (more verbose errors, auto-reload in dev)
    DEBUG: bool = False

    # ---------------------------------------------------------------------------
    # AI/LLM PROVIDER SETTINGS
    # ---------------------------------------------------------------------------
    # A provider is only registered when its key is present.
    GEMINI_API_KEY: str = ""
    OPENAI_API_KEY: str = ""
    ANTHROPIC_API_KEY: str = ""

    # ---------------------------------------------------------------------------
    # AI MODEL CONFIGURATION
    # ---------------------------------------------------------------------------
    GEMINI_MODEL: str = "gemini-2.5-flash"
    OPENAI_MODEL: str = "gpt-4o"
    ANTHROPIC_MODEL: str = "claude-sonnet-4-5"

    # Upper bound used when a request does not set max_tokens
    DEFAULT_MAX_TOKENS: int = 2048

    # ---------------------------------------------------------------------------
    # PROVIDER SELECTION
    # ---------------------------------------------------------------------------
    # DEFAULT_AI_PROVIDER: used when no routing rule matches
    DEFAULT_AI_PROVIDER: str = "gemini"

    # ENABLE_MOCK_PROVIDER: register the deterministic mock backend
    # - Keeps the API usable in development without any API key
    ENABLE_MOCK_PROVIDER: bool = True

    # STRICT_PROVIDER_SELECTION: reject unknown preferred providers with 400
    # - False: log a warning and fall back to the routing table
    STRICT_PROVIDER_SELECTION: bool = False

    # ---------------------------------------------------------------------------
    # CHAT SESSION SETTINGS
    # ---------------------------------------------------------------------------
    # Sessions idle for longer than this are swept (30 minutes)
    SESSION_IDLE_TIMEOUT_SECONDS: int = 30 * 60

    # How often the background sweep runs
    SESSION_CLEANUP_INTERVAL_SECONDS: int = 5 * 60

    # Hard bound on the in-memory session map (least recently active evicted)
    MAX_CHAT_SESSIONS: int = 500

    # Messages kept per session history
    MAX_SESSION_MESSAGES: int = 50


# ---------------------------------------------------------------------------
# GLOBAL SETTINGS INSTANCE
# ---------------------------------------------------------------------------
# Usage: from hrdefender.core.config import settings
settings = Settings()


def get_settings() -> Settings:
    """Return the process-wide settings (overridable in tests)."""
    return settings
