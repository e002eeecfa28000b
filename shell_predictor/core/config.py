from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from .strategies.types import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    DEFAULT_TOP_P,
    MAX_GENERATED_SUGGESTIONS,
    MIN_GENERATIVE_INPUT_LENGTH,
)

DEFAULT_MODEL_DIR = Path.home() / ".shell-predictor" / "models" / "phi3"

_LOG_LEVEL_ALIASES = {"warn": "warning", "fatal": "critical"}


class Settings(BaseSettings):
    """Predictor settings loaded from environment variables."""

    # App Configuration
    app_name: str = "shell-predictor"
    app_version: str = "0.1.0"

    # Strategy Configuration
    strategy: Literal["known_commands", "completer", "local_model"] = Field(
        default="known_commands", alias="PREDICTOR_STRATEGY"
    )

    # Local Model Configuration
    model_dir: Path = Field(default=DEFAULT_MODEL_DIR, alias="PREDICTOR_MODEL_DIR")
    min_input_length: int = Field(default=MIN_GENERATIVE_INPUT_LENGTH, ge=1, alias="PREDICTOR_MIN_INPUT_LENGTH")
    max_suggestions: int = Field(
        default=MAX_GENERATED_SUGGESTIONS, ge=1, le=MAX_GENERATED_SUGGESTIONS, alias="PREDICTOR_MAX_SUGGESTIONS"
    )
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, ge=1, alias="PREDICTOR_MAX_TOKENS")
    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, alias="PREDICTOR_TEMPERATURE")
    top_p: float = Field(default=DEFAULT_TOP_P, gt=0.0, le=1.0, alias="PREDICTOR_TOP_P")

    # Logging
    log_level: str = Field(default="warning", alias="LOG_LEVEL")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "populate_by_name": True,
        "extra": "ignore",
        "protected_namespaces": (),
    }

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, v: object) -> str:
        level = str(v).strip().lower()
        return _LOG_LEVEL_ALIASES.get(level, level)


# Global settings instance
settings = Settings()
