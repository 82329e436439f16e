"""
Bag proxy — attribute-style access to the calling project's bag.

    from arraybag import bag

    bag.database_url          # → registry(<caller's root>).get("database_url")
    "database_url" in bag     # → registry(<caller's root>).has("database_url")

The explicit forms are ``resolve(location, key)`` and
``contains(location, key)``; attribute access and ``in`` are shorthands
that first work out the location:

    1. the location the proxy was bound to (``bag.bind(__file__)``)
    2. the process context root (``arraybag.core.context``)
    3. the file of the first caller outside this package
    4. the current directory

An undefined key raises ``UndefinedKeyError``, not ``AttributeError``, so
``hasattr(bag, "key")`` does not answer "is it set?"; it raises.  Test
presence with ``"key" in bag`` or ``bag.contains(location, "key")``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

from arraybag.core import context, errors
from arraybag.core.bag import MISSING, ArrayBag
from arraybag.core.project import caller_file, find_project_root
from arraybag.core.store import BagStore, RootLike, get_store

logger = logging.getLogger(__name__)

_PACKAGE_DIR = Path(__file__).resolve().parent.parent

ArrayBag.errors = errors  # type: ignore[attr-defined]


class BagProxy:
    """Resolve keys against the bag of whichever project is asking.

    Args:
        store: Store to read bags from (default: the process-wide store).
        location: Optional file or directory pinning the project.
        root_finder: Maps a location to its project root.
    """

    ArrayBag = ArrayBag

    __slots__ = ("_store", "_location", "_root_finder")

    def __init__(
        self,
        store: BagStore | None = None,
        location: RootLike | None = None,
        root_finder: Callable[[RootLike], Path] = find_project_root,
    ):
        object.__setattr__(self, "_store", store)
        object.__setattr__(self, "_location", location)
        object.__setattr__(self, "_root_finder", root_finder)

    # ── Explicit API ───────────────────────────────────────────────

    @property
    def store(self) -> BagStore:
        return self._store if self._store is not None else get_store()

    def root_for(self, location: RootLike) -> Path:
        """Return the project root that ``location`` belongs to."""
        return self._root_finder(location)

    def bag_for(self, location: RootLike) -> ArrayBag:
        """Return the (cached, frozen) bag of the project containing ``location``."""
        return self.store.get_or_create(self.root_for(location))

    def resolve(self, location: RootLike, key: str, default: Any = MISSING) -> Any:
        """Look ``key`` up in the bag of the project containing ``location``."""
        return self.bag_for(location).get(key, default)

    def contains(self, location: RootLike, key: str) -> bool:
        """True if the bag of the project containing ``location`` defines ``key``."""
        return self.bag_for(location).has(key)

    def bind(self, location: RootLike) -> BagProxy:
        """Return a proxy pinned to ``location`` (typically ``__file__``)."""
        return BagProxy(store=self._store, location=location, root_finder=self._root_finder)

    def get(self, key: str, default: Any = MISSING) -> Any:
        """Like attribute access, with an optional default."""
        return self.resolve(self._current_location(), key, default)

    # ── Dynamic access ─────────────────────────────────────────────

    def __getattr__(self, name: str) -> Any:
        # Only called for names not found normally; keep private and
        # dunder lookups (copy, pickle, pytest introspection) out of it.
        if name.startswith("_"):
            raise AttributeError(name)
        return self.resolve(self._current_location(), name)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return self.contains(self._current_location(), name)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is read-only; set values on the bag itself")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is read-only")

    def __repr__(self) -> str:
        where = self._location if self._location is not None else "caller"
        return f"<BagProxy location={where}>"

    def _current_location(self) -> RootLike:
        if self._location is not None:
            return self._location

        root = context.get_project_root()
        if root is not None:
            return root

        caller = caller_file(depth=1, skip=[_PACKAGE_DIR])
        if caller is not None:
            logger.debug("Resolving bag for caller %s", caller)
            return caller

        return os.getcwd()
