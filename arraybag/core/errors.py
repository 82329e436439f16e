"""
Error taxonomy — every failure the library raises on its own.

Each class carries a stable, machine-readable ``code`` so callers can
tell failures apart without matching on messages.
"""

from __future__ import annotations

from pathlib import Path


class BagError(Exception):
    """Base class for all arraybag errors."""

    code = "ARRAYBAG_ERROR"


class NotFoundError(BagError):
    """Raised when a project has no configuration file."""

    code = "ARRAYBAG_NOTFOUND"

    def __init__(self, message: str = "", root: Path | None = None, path: Path | None = None):
        super().__init__(message)
        self.root = root
        self.path = path


class UndefinedKeyError(BagError):
    """Raised when a key has no value and no default was given."""

    code = "ARRAYBAG_UNDEFINEDKEY"

    def __init__(self, message: str = "", key: str | None = None):
        super().__init__(message)
        self.key = key


class MalformedError(BagError):
    """Raised when a data document (YAML/JSON) is not a mapping."""

    code = "ARRAYBAG_MALFORMED"


class RootNotFoundError(BagError):
    """Raised when no ancestor directory looks like a project root."""

    code = "ARRAYBAG_NOROOT"
