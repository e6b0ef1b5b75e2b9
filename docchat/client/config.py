"""Client configuration with environment variable loading.

Pydantic-based configuration for the chat client. Values are read once at
session start and injected into the session controller, which never reads
the environment itself.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from docchat.models import BotSettings

# Load environment variables from .env file
load_dotenv()

DEFAULT_API_URL = "http://localhost:5000"
DEFAULT_MODEL_NAME = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 0.3

# Choices offered by the settings dialog
ALLOWED_MODELS = ["gpt-4o-mini", "gpt-4o", "gpt-4-turbo", "gpt-3.5-turbo"]


class ClientConfig(BaseModel):
    """Configuration for a chat session.

    Attributes:
        api_url: Backend base URL; a trailing slash is stripped.
        api_key: Backend API key, passed through as an opaque string.
        openai_api_key: Optional OpenAI key forwarded to the backend.
        model_name: Model identifier sent in bot settings.
        temperature: Sampling temperature sent in bot settings.
        request_timeout: Upper bound in seconds for a single request.
    """

    api_url: str = Field(
        default_factory=lambda: os.getenv("DOCCHAT_API_URL", DEFAULT_API_URL),
        description="Backend base URL",
    )
    api_key: str = Field(
        default_factory=lambda: os.getenv("DOCCHAT_API_KEY", ""),
        description="Backend API key",
    )
    openai_api_key: str | None = Field(
        default_factory=lambda: os.getenv("OPENAI_API_KEY") or None,
        description="Optional OpenAI API key forwarded to the backend",
    )
    model_name: str = Field(
        default_factory=lambda: os.getenv("DEFAULT_MODEL_NAME", DEFAULT_MODEL_NAME),
        description="Model to request",
    )
    temperature: float = Field(
        default_factory=lambda: float(os.getenv("DEFAULT_TEMPERATURE", DEFAULT_TEMPERATURE)),
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )
    request_timeout: float = Field(
        default_factory=lambda: float(os.getenv("DOCCHAT_REQUEST_TIMEOUT", "120")),
        gt=0.0,
        description="Seconds before an in-flight request is abandoned",
    )

    @field_validator("api_url")
    @classmethod
    def normalize_api_url(cls, v: str) -> str:
        """Strip whitespace and trailing slashes from the base URL."""
        v = v.strip().rstrip("/")
        if not v:
            raise ValueError("API URL required. Set DOCCHAT_API_URL in .env")
        return v

    @field_validator("api_key")
    @classmethod
    def strip_api_key(cls, v: str) -> str:
        return v.strip()

    @field_validator("openai_api_key")
    @classmethod
    def blank_openai_key_is_none(cls, v: str | None) -> str | None:
        """Treat an empty OpenAI key as not provided."""
        if v is None or not v.strip():
            return None
        return v.strip()

    def bot_settings(self) -> BotSettings:
        """Build the bot settings passed through on every request."""
        return BotSettings(llm_model_name=self.model_name, temperature=self.temperature)


def get_client_config(**overrides: object) -> ClientConfig:
    """Create client configuration from environment.

    Args:
        **overrides: Field values that take precedence over the environment.

    Returns:
        Configured ClientConfig instance.

    Raises:
        ValueError: If a value fails validation.
    """
    return ClientConfig(**overrides)
