"""Configuration system for the OPAL dump extractor.

Settings are read once at startup (environment, optional ``.env``, then
command line overrides) into a frozen Settings value that is passed to every
component explicitly.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from opal_dump.core.dump_constants import (
    DEFAULT_MAX_DUMPS,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_SYSFS_PATH,
    DUMP_SYSFS_SUBPATH,
)
from opal_dump.core.logging import resolve_level

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """OPAL Dump Extractor Configuration."""

    # Locations
    sysfs_path: Path = Field(
        default=Path(DEFAULT_SYSFS_PATH),
        description="sysfs mount point; dumps are read from <sysfs>/firmware/opal/dump",
    )
    output_dir: Path = Field(
        default=Path(DEFAULT_OUTPUT_DIR),
        description="Directory to save extracted dumps",
    )

    # Retention
    max_dumps: int = Field(
        default=DEFAULT_MAX_DUMPS,
        description="Maximum number of dumps of a specific type to keep",
    )

    # Behaviour
    ack_dumps: bool = Field(
        default=True,
        description="Acknowledge each dump so firmware can release it",
    )
    wait: bool = Field(
        default=False,
        description="After draining, wait for new dumps indefinitely",
    )

    # Logging
    log_level: str = Field(
        default="NOTICE",
        description="Logging level (DEBUG, INFO, NOTICE, WARNING, ERROR)",
    )
    json_logs: bool = Field(
        default=False,
        description="Emit console logs as JSON lines",
    )
    syslog: bool = Field(
        default=True,
        description="Send log records to the local system log",
    )

    model_config = {
        "env_prefix": "OPAL_DUMP_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "frozen": True,
    }

    @field_validator("max_dumps", mode="after")
    @classmethod
    def default_non_positive_max(cls, value: int) -> int:
        if value <= 0:
            logger.error(
                "Invalid value specified for max dumps (%d), using default value %d",
                value,
                DEFAULT_MAX_DUMPS,
            )
            return DEFAULT_MAX_DUMPS
        return value

    @field_validator("log_level", mode="after")
    @classmethod
    def known_log_level(cls, value: str) -> str:
        resolve_level(value)
        return value.upper()

    @property
    def dump_root(self) -> Path:
        """Directory holding one subdirectory per pending dump."""
        return self.sysfs_path / DUMP_SYSFS_SUBPATH


def load_settings(**overrides: Any) -> Settings:
    """Build the Settings value used for one run.

    Args:
        **overrides: Explicit values (e.g. from the command line). ``None``
            values are ignored so unset options fall through to the
            environment and defaults.

    Returns:
        Frozen Settings instance.

    Example:
        from opal_dump.config import load_settings
        settings = load_settings(output_dir="/tmp/dumps", max_dumps=2)
        print(settings.dump_root)
    """
    return Settings(**{k: v for k, v in overrides.items() if v is not None})
