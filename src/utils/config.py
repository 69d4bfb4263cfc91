"""Configuration management for Pirinku.

Loads environment variables from system environment and .env file.
Priority order: system environment > .env file > hardcoded defaults
"""

import os
from typing import Optional

from dotenv import load_dotenv


# Load .env file (if exists, silently continues if missing)
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        self.GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
        # Text model used for recipe suggestions (structured output)
        self.GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        # Image model: must support the IMAGE response modality
        self.IMAGE_GENERATION_MODEL: str = os.getenv(
            "IMAGE_GENERATION_MODEL", "gemini-2.0-flash-preview-image-generation"
        )
        # Temperature: 0.7 keeps suggestions varied between submissions
        self.TEMPERATURE: float = float(os.getenv("TEMPERATURE", "0.7"))
        self.MAX_OUTPUT_TOKENS: int = int(os.getenv("MAX_OUTPUT_TOKENS", "4096"))
        # Number of recipes requested from the model per submission
        self.MAX_RECIPES: int = int(os.getenv("MAX_RECIPES", "3"))
        # Language of titles, descriptions and steps
        self.RESPONSE_LANGUAGE: str = os.getenv("RESPONSE_LANGUAGE", "Indonesian")

        # Image shown before generation finishes or when it fails
        self.PLACEHOLDER_IMAGE_URL: str = os.getenv(
            "PLACEHOLDER_IMAGE_URL", "https://placehold.co/600x400.png"
        )
        self.IMAGE_TIMEOUT_SECONDS: float = float(os.getenv("IMAGE_TIMEOUT_SECONDS", "60"))
        # Re-encode generated images larger than the threshold before inlining them as data URIs
        self.COMPRESS_IMG: bool = _env_bool("COMPRESS_IMG", "true")
        self.COMPRESS_IMG_THRESHOLD_KB: int = int(os.getenv("COMPRESS_IMG_THRESHOLD_KB", "300"))
        self.MAX_IMAGE_WIDTH: int = int(os.getenv("MAX_IMAGE_WIDTH", "1024"))

        # Form validation
        self.MIN_INGREDIENTS_LENGTH: int = int(os.getenv("MIN_INGREDIENTS_LENGTH", "3"))
        # Tool selector: "freeform" (typed tags) or "predefined-ranked" (fixed vocabulary sorted by usage)
        self.TOOL_SELECTOR_MODE: str = os.getenv("TOOL_SELECTOR_MODE", "freeform")
        # Local persisted tool usage counts
        self.TOOL_FREQUENCY_FILE: str = os.getenv("TOOL_FREQUENCY_FILE", "tmp/pirinku_state.json")
        self.TOOL_FREQUENCY_KEY: str = os.getenv("TOOL_FREQUENCY_KEY", "toolFrequency")
        # Speech recognition locale passed to the capability
        self.SPEECH_LANG: str = os.getenv("SPEECH_LANG", "id-ID")
        # Accept a new submission while one is in flight (older responses are then discarded)
        self.ALLOW_RESUBMIT: bool = _env_bool("ALLOW_RESUBMIT", "false")

    def validate(self) -> None:
        """Validate required configuration.

        Raises:
            ValueError: If required API keys are missing or invalid values provided.
        """
        if not self.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY environment variable is required")
        if self.TOOL_SELECTOR_MODE not in ("freeform", "predefined-ranked"):
            raise ValueError(
                f"TOOL_SELECTOR_MODE must be 'freeform' or 'predefined-ranked', got: {self.TOOL_SELECTOR_MODE}"
            )
        if not (0.0 <= self.TEMPERATURE <= 1.0):
            raise ValueError(
                f"TEMPERATURE must be between 0.0 and 1.0, got: {self.TEMPERATURE}"
            )
        if self.MAX_OUTPUT_TOKENS < 512:
            raise ValueError(
                f"MAX_OUTPUT_TOKENS must be at least 512, got: {self.MAX_OUTPUT_TOKENS}"
            )
        if self.MAX_RECIPES < 1:
            raise ValueError(f"MAX_RECIPES must be at least 1, got: {self.MAX_RECIPES}")
        if self.IMAGE_TIMEOUT_SECONDS <= 0:
            raise ValueError(
                f"IMAGE_TIMEOUT_SECONDS must be positive, got: {self.IMAGE_TIMEOUT_SECONDS}"
            )
        if self.MIN_INGREDIENTS_LENGTH < 1:
            raise ValueError(
                f"MIN_INGREDIENTS_LENGTH must be at least 1, got: {self.MIN_INGREDIENTS_LENGTH}"
            )
        if not self.PLACEHOLDER_IMAGE_URL:
            raise ValueError("PLACEHOLDER_IMAGE_URL must not be empty")


# Create module-level config instance and validate immediately
config = Config()
config.validate()
