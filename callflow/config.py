"""Configuration management for CallFlow."""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Application configuration."""

    # OpenAI Configuration
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    OPENAI_TEMPERATURE: float = float(os.getenv("OPENAI_TEMPERATURE", "0.25"))
    OPENAI_MAX_TOKENS: int = int(os.getenv("OPENAI_MAX_TOKENS", "600"))
    # Single attempt per request; the SDK's own retries are disabled.
    OPENAI_TIMEOUT_SECONDS: float = float(os.getenv("OPENAI_TIMEOUT_SECONDS", "60"))

    # Timestamps in the rendered board context use this IANA zone.
    # Naive timestamps coming from the board are assumed to be in it as well.
    DISPLAY_TIMEZONE: str = os.getenv("DISPLAY_TIMEZONE", "UTC")

    # Application Settings
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    CORS_ALLOW_ORIGINS: str = os.getenv("CORS_ALLOW_ORIGINS", "*")

    # Where the dashboard client sends chat requests
    BASE_URL: str = os.getenv("CALLFLOW_BASE_URL", "http://localhost:8000")

    @classmethod
    def has_openai_key(cls) -> bool:
        """Check if OpenAI API key is configured."""
        return bool(cls.OPENAI_API_KEY)

    @classmethod
    def cors_origins(cls) -> list[str]:
        return [origin.strip() for origin in cls.CORS_ALLOW_ORIGINS.split(",") if origin.strip()]


# Create a global config instance
config = Config()
