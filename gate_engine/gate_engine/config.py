"""Feature gate configuration loaded from environment variables."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from gate_engine.context.models import CliMode

logger = logging.getLogger(__name__)


class GateSettings(BaseSettings):
    """Settings loaded from environment variables with FEATUREGATE_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="FEATUREGATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    debug: bool = False

    # Environment facts
    edition_code: str = "oss"
    mode: CliMode = CliMode.SERVER

    # Feeds read from disk (optional)
    license_path: Path | None = None
    entitlements_path: Path | None = None

    # Descriptor catalogue overriding the built-in features
    registry_path: Path | None = None

    # Logging
    structured_logging: bool = False


def load_settings(**overrides: object) -> GateSettings:
    """Load settings from environment, with optional overrides for testing."""
    settings = GateSettings(**overrides)  # type: ignore[arg-type]

    if settings.debug:
        logger.info("Loaded settings: edition=%s mode=%s", settings.edition_code, settings.mode.value)

    return settings
