"""
Settings — process configuration read from the environment.

Settings are never cached: ``Settings.from_env()`` reads ``os.environ``
each time it is called, so changing ``ARRAYBAG`` at runtime takes effect
on the next load.

Environment variables:
    ARRAYBAG                 config filename (default: arraybag.js)
    ARRAYBAG_LOG_LEVEL       log level for the CLI (default: WARNING)
    ARRAYBAG_LOG_FILE        optional log file path
    ARRAYBAG_LOG_FILE_LEVEL  optional separate level for the log file
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, field_validator

DEFAULT_FILENAME = "arraybag.js"

FILENAME_ENV = "ARRAYBAG"
LOG_LEVEL_ENV = "ARRAYBAG_LOG_LEVEL"
LOG_FILE_ENV = "ARRAYBAG_LOG_FILE"
LOG_FILE_LEVEL_ENV = "ARRAYBAG_LOG_FILE_LEVEL"


class Settings(BaseModel):
    """Environment-derived settings."""

    filename: str = DEFAULT_FILENAME
    log_level: str = "WARNING"
    log_file: str | None = None
    log_file_level: str | None = None

    @field_validator("filename", mode="before")
    @classmethod
    def _default_filename(cls, value: object) -> object:
        # An empty ARRAYBAG behaves like an unset one
        return value or DEFAULT_FILENAME

    @field_validator("log_level", mode="before")
    @classmethod
    def _default_level(cls, value: object) -> object:
        return value or "WARNING"

    @field_validator("log_file", "log_file_level", mode="before")
    @classmethod
    def _blank_is_none(cls, value: object) -> object:
        return value or None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``environ`` (default: ``os.environ``)."""
        env = os.environ if environ is None else environ
        return cls(
            filename=env.get(FILENAME_ENV, ""),
            log_level=env.get(LOG_LEVEL_ENV, ""),
            log_file=env.get(LOG_FILE_ENV),
            log_file_level=env.get(LOG_FILE_LEVEL_ENV),
        )


def get_filename() -> str:
    """Return the config filename currently in effect."""
    return Settings.from_env().filename
