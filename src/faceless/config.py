"""Configuration management."""

import os
from pathlib import Path
from pydantic import BaseModel, Field
from dotenv import load_dotenv

from .errors import ConfigError

# Load environment variables
load_dotenv()

# Accepted FACELESS_IMAGE_FALLBACK values
IMAGE_FALLBACK_POLICIES = ("always", "rate_limit", "never")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


class Config(BaseModel):
    """Application configuration."""

    # API Keys
    anthropic_api_key: str = Field(
        default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""),
        description="Anthropic API key (script generation)"
    )
    google_application_credentials: str = Field(
        default_factory=lambda: os.getenv("GOOGLE_APPLICATION_CREDENTIALS", ""),
        description="Path to Google Cloud service account JSON"
    )
    google_cloud_project: str = Field(
        default_factory=lambda: os.getenv("GOOGLE_CLOUD_PROJECT", ""),
        description="Google Cloud project ID"
    )
    google_cloud_location: str = Field(
        default_factory=lambda: os.getenv("GOOGLE_CLOUD_LOCATION", "us-central1"),
        description="Vertex AI region"
    )

    # Paths
    workspace: Path = Field(
        default_factory=lambda: Path(os.getenv("FACELESS_WORKSPACE", ".")),
        description="Directory generated assets are written to"
    )

    # Model settings
    default_model: str = Field(
        default_factory=lambda: os.getenv("FACELESS_SCRIPT_MODEL", "claude-sonnet-4-20250514"),
        description="Claude model used for script writing"
    )
    imagen_model: str = Field(
        default_factory=lambda: os.getenv("FACELESS_IMAGEN_MODEL", "imagen-3.0-generate-002"),
        description="Imagen model used for scene imagery"
    )
    tts_model: str = Field(
        default_factory=lambda: os.getenv("FACELESS_TTS_MODEL", "gemini-2.5-flash-preview-tts"),
        description="Gemini model used for narration"
    )

    # Asset pipeline
    image_retry_backoff: float = Field(
        default_factory=lambda: _env_float("FACELESS_IMAGE_RETRY_BACKOFF", 3.0),
        description="Seconds to wait before retrying a rate-limited image request"
    )
    image_throttle_delay: float = Field(
        default_factory=lambda: _env_float("FACELESS_IMAGE_THROTTLE_DELAY", 1.5),
        description="Seconds to pause after each generated image"
    )
    image_fallback: str = Field(
        default_factory=lambda: os.getenv("FACELESS_IMAGE_FALLBACK", "always"),
        description="When to substitute a placeholder image: always, rate_limit or never"
    )
    placeholder_url_template: str = Field(
        default="https://picsum.photos/seed/{seed}/1280/720",
        description="Placeholder image URL, formatted with a random seed"
    )

    class Config:
        """Pydantic config."""
        frozen = False

    def validate_required(self) -> None:
        """Validate that script generation credentials are set."""
        if not self.anthropic_api_key:
            raise ConfigError("ANTHROPIC_API_KEY not set", code="missing_config")

    def validate_google_required(self) -> None:
        """Validate that Vertex AI credentials for image and speech are set.

        Raises:
            ConfigError: If any required Google Cloud configuration is missing
                or the image fallback policy is unknown.
        """
        missing: list[str] = []

        if not self.google_cloud_project:
            missing.append("GOOGLE_CLOUD_PROJECT")
        if not self.google_cloud_location:
            missing.append("GOOGLE_CLOUD_LOCATION")

        if missing:
            raise ConfigError(
                f"Missing required Google Cloud configuration: {', '.join(missing)}. "
                "Set the corresponding environment variables.",
                code="missing_config",
            )

        self.validate_image_fallback()

    def validate_image_fallback(self) -> None:
        """Validate that the placeholder fallback policy is a known value.

        Raises:
            ConfigError: If FACELESS_IMAGE_FALLBACK is not one of the accepted policies.
        """
        if self.image_fallback not in IMAGE_FALLBACK_POLICIES:
            raise ConfigError(
                f"Invalid FACELESS_IMAGE_FALLBACK {self.image_fallback!r}. "
                f"Use one of: {', '.join(IMAGE_FALLBACK_POLICIES)}.",
                code="bad_config",
            )


# Global config instance
config = Config()
