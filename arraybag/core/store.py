"""
Bag store — the registry mapping project roots to their bags.

A store loads each project's config file at most once and hands out the
same ``ArrayBag`` instance until it is invalidated.  The process owns
one default store (used by ``ArrayBag.registry``, the module-level
functions and the ``arraybag.bag`` proxy); tests and embedders can build
their own.

Roots are cache keys after normalization to absolute resolved paths, so
``"."``, ``"./"`` and ``os.getcwd()`` name the same project.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Union

from arraybag.core.bag import ArrayBag
from arraybag.core.config.loader import Loader, default_loader
from arraybag.core.config.settings import get_filename
from arraybag.core.errors import NotFoundError

logger = logging.getLogger(__name__)

RootLike = Union[str, os.PathLike]


def root_key(root: RootLike | None) -> Path:
    """Normalize a root argument (default: cwd) to the path used as cache key."""
    return Path(root if root is not None else ".").resolve()


def config_path(root: RootLike | None = None) -> Path:
    """Return the absolute config file path for ``root``."""
    return root_key(root) / get_filename()


class BagStore:
    """Cache of loaded bags, keyed by project root.

    Args:
        loader: Loader used to read config files.  Defaults to the
            suffix-dispatching loader (Python source, YAML, JSON).
    """

    def __init__(self, loader: Loader | None = None):
        self._loader = loader or default_loader()
        self._bags: dict[Path, ArrayBag] = {}

    @property
    def loader(self) -> Loader:
        return self._loader

    def load(self, root: RootLike | None = None) -> ArrayBag:
        """Load a project's config file into a bag, bypassing the cache.

        Args:
            root: Project root, joined with ``ArrayBag.FILENAME``
                (default: current directory).

        Returns:
            The bag exported by the file if it exported an ``ArrayBag``,
            otherwise a new bag wrapping the exported mapping.

        Raises:
            NotFoundError: If the config file does not exist.  Every
                other failure (syntax errors, missing nested imports,
                malformed documents) propagates unchanged.
        """
        base = root_key(root)
        path = base / get_filename()

        logger.debug("Loading arraybag '%s'", path)
        try:
            value = self._loader.load(path)
        except FileNotFoundError as e:
            # Only the config file itself counts as "not found"
            if e.filename is None or Path(e.filename) != path:
                raise
            raise NotFoundError(
                f"Cannot find an arraybag for {base.name or base} module",
                root=base,
                path=path,
            ) from e

        if isinstance(value, ArrayBag):
            logger.debug("Returning already existing ArrayBag")
            return value

        logger.debug("Returning an ArrayBag upon creation")
        return ArrayBag(value)

    def get_or_create(self, root: RootLike, freeze: bool = True) -> ArrayBag:
        """Return the bag bound to ``root``, loading and caching it on first use.

        Args:
            root: Project root the bag is bound to.
            freeze: Freeze a newly loaded bag (default True).  Has no
                effect on a bag that is already cached.
        """
        key = root_key(root)
        bag = self._bags.get(key)
        if bag is None:
            bag = self.load(key)
            if freeze is not False:
                bag.freeze()
            self._bags[key] = bag
            logger.debug("Registered bag for %s (frozen=%s)", key, bag.frozen)
        return bag

    def invalidate(self, root: RootLike) -> None:
        """Drop the cached bag for ``root``.  Unknown roots are ignored."""
        key = root_key(root)
        if self._bags.pop(key, None) is not None:
            logger.debug("Invalidated bag for %s", key)

    def invalidate_all(self) -> None:
        """Drop every cached bag."""
        logger.debug("Invalidating %d cached bag(s)", len(self._bags))
        self._bags.clear()

    def roots(self) -> list[Path]:
        """Return the roots that currently have a cached bag."""
        return list(self._bags.keys())

    def __contains__(self, root: object) -> bool:
        if not isinstance(root, (str, os.PathLike)):
            return False
        return root_key(root) in self._bags

    def __len__(self) -> int:
        return len(self._bags)


# ── Default store ──────────────────────────────────────────────────

_default_store = BagStore()


def get_store() -> BagStore:
    """Return the process-wide default store."""
    return _default_store


def load(root: RootLike | None = None) -> ArrayBag:
    """Load a project's bag without caching it.  See ``BagStore.load``."""
    return _default_store.load(root)


def registry(root: RootLike, freeze: bool = True) -> ArrayBag:
    """Get-or-create the cached bag for ``root`` in the default store."""
    return _default_store.get_or_create(root, freeze=freeze)


def invalidate(root: RootLike | None = None) -> None:
    """Drop one cached bag, or all of them when ``root`` is omitted."""
    if root is None:
        _default_store.invalidate_all()
    else:
        _default_store.invalidate(root)
