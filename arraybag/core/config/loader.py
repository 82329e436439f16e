"""
Config loaders — turn a config file into the value a bag is built from.

A loader is anything with ``load(path) -> value``.  The store never
cares about the file format; swapping the loader swaps the format.

    PythonLoader   imports the file as a Python module (any extension,
                   including the default ``arraybag.js``)
    YamlLoader     yaml.safe_load, must produce a mapping
    JsonLoader     json.loads, must produce a mapping
    SuffixLoader   picks one of the above by file suffix (the default)

Loaders let failures propagate as-is.  A missing file surfaces as
``FileNotFoundError`` with ``filename`` set; the store relies on that to
tell "no config" apart from "broken config".
"""

from __future__ import annotations

import errno
import importlib.machinery
import importlib.util
import inspect
import json
import logging
import os
import sys
import types
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from arraybag.core.errors import MalformedError

logger = logging.getLogger(__name__)

# Module attribute a Python config file may define to export a single value
EXPORT_NAME = "arraybag"


class Loader(ABC):
    """Abstract base class for config loaders."""

    @abstractmethod
    def load(self, path: Path) -> Any:
        """Load ``path`` and return its exported value."""


class _ConfigSourceLoader(importlib.machinery.SourceFileLoader):
    """Source loader for config files; never writes bytecode beside them."""

    def set_data(self, path: str, data: bytes, *, _mode: int = 0o666) -> None:
        pass


class PythonLoader(Loader):
    """Execute a config file as a Python module.

    The file is imported under a private module name (any extension,
    including ``.js``) and is registered in ``sys.modules`` only while it
    runs.  Every load executes it afresh, so reloading after invalidation
    always produces new objects.

    If the module defines ``arraybag``, that value is exported (it may be
    an ``ArrayBag`` or a mapping).  Otherwise its public globals become
    entries, except modules and classes or functions imported from
    elsewhere.
    """

    def load(self, path: Path) -> Any:
        if not path.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path))

        name = f"arraybag_config_{path.parent.name}"
        spec = importlib.util.spec_from_file_location(
            name, path, loader=_ConfigSourceLoader(name, str(path)),
        )
        module = importlib.util.module_from_spec(spec)

        sys.modules[name] = module
        try:
            spec.loader.exec_module(module)
        finally:
            sys.modules.pop(name, None)

        exported = getattr(module, EXPORT_NAME, None)
        if exported is not None and not isinstance(exported, types.ModuleType):
            logger.debug("Config %s exports '%s' explicitly", path, EXPORT_NAME)
            return exported

        return {
            key: value
            for key, value in vars(module).items()
            if not key.startswith("_") and _is_entry(value, module.__name__)
        }


def _is_entry(value: Any, module_name: str) -> bool:
    """True unless ``value`` is a module or something imported into the config."""
    if isinstance(value, types.ModuleType):
        return False
    if type(value).__module__ == "__future__":
        return False
    if inspect.isclass(value) or inspect.isroutine(value):
        return getattr(value, "__module__", module_name) == module_name
    return True


class YamlLoader(Loader):
    """Load a YAML mapping."""

    def load(self, path: Path) -> Any:
        raw = path.read_text(encoding="utf-8")
        data = yaml.safe_load(raw)
        if data is None:
            return {}
        if not isinstance(data, Mapping):
            raise MalformedError(
                f"Expected a YAML mapping in {path}, got {type(data).__name__}"
            )
        return data


class JsonLoader(Loader):
    """Load a JSON object."""

    def load(self, path: Path) -> Any:
        raw = path.read_text(encoding="utf-8")
        data = json.loads(raw)
        if not isinstance(data, Mapping):
            raise MalformedError(
                f"Expected a JSON object in {path}, got {type(data).__name__}"
            )
        return data


class SuffixLoader(Loader):
    """Dispatch on the file suffix, falling back to Python source.

    Args:
        loaders: Suffix → loader overrides, merged over the defaults.
        fallback: Loader for unknown suffixes.
    """

    def __init__(
        self,
        loaders: Mapping[str, Loader] | None = None,
        fallback: Loader | None = None,
    ):
        yaml_loader = YamlLoader()
        self._loaders: dict[str, Loader] = {
            ".yml": yaml_loader,
            ".yaml": yaml_loader,
            ".json": JsonLoader(),
        }
        for suffix, loader in (loaders or {}).items():
            self._loaders[suffix.lower()] = loader
        self._fallback = fallback or PythonLoader()

    def loader_for(self, path: Path) -> Loader:
        """Return the loader that handles ``path``."""
        return self._loaders.get(path.suffix.lower(), self._fallback)

    def load(self, path: Path) -> Any:
        loader = self.loader_for(path)
        logger.debug("Loading %s with %s", path, type(loader).__name__)
        return loader.load(path)


def default_loader() -> Loader:
    """Return the loader used when a store is created without one."""
    return SuffixLoader()
