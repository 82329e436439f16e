"""
ArrayBag — the key/value container holding one project's configuration.

A bag is mutable until ``freeze()`` is called.  Freezing swaps ``data``
for a read-only view of a private copy, so every later write (through
``set``, directly on ``data``, or by replacing ``data``) raises
``TypeError``.

Absence is signalled with the ``MISSING`` sentinel rather than ``None``,
so ``None``, ``0``, ``""`` and ``False`` are ordinary stored values.
"""

from __future__ import annotations

import logging
import types
from collections.abc import Mapping, MutableMapping
from typing import TYPE_CHECKING, Any

from arraybag.core.config.settings import get_filename
from arraybag.core.errors import UndefinedKeyError

if TYPE_CHECKING:
    from arraybag.core.store import RootLike

logger = logging.getLogger(__name__)


class _Missing:
    """Type of the ``MISSING`` sentinel."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"

    def __reduce__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


class _ArrayBagMeta(type):
    """Gives ``ArrayBag`` a class-level ``FILENAME`` read on every access."""

    @property
    def FILENAME(cls) -> str:
        """The config file a project's bag is loaded from (``ARRAYBAG`` env var)."""
        return get_filename()


class ArrayBag(metaclass=_ArrayBagMeta):
    """A storage mechanism for one project's configuration.

    Args:
        data: Initial mapping, stored by reference until the bag is
            frozen.  Defaults to a new dict.
    """

    def __init__(self, data: MutableMapping[str, Any] | None = None):
        if data is None:
            data = {}
        logger.debug("Setting the data to %r", data)
        self._frozen = False
        self._data: Mapping[str, Any] = data

    @property
    def data(self) -> Mapping[str, Any]:
        return self._data

    @data.setter
    def data(self, value: MutableMapping[str, Any]) -> None:
        if self._frozen:
            raise TypeError("Cannot replace the data of a frozen ArrayBag")
        self._data = value

    @property
    def frozen(self) -> bool:
        """True once ``freeze()`` has been called."""
        return self._frozen

    def get(self, key: str, default: Any = MISSING) -> Any:
        """Return the entry stored at ``key``, or ``default``.

        Raises:
            UndefinedKeyError: If there is no entry and no default.
        """
        value = self.data.get(key, MISSING)
        if value is MISSING:
            value = default
        if value is MISSING:
            raise UndefinedKeyError(
                f"Could not find an entry for {key} and no default was provided",
                key=key,
            )
        return value

    def set(self, key: str, value: Any = MISSING) -> Any:
        """Store ``value`` at ``key``, or delete ``key`` when ``value`` is omitted.

        Returns:
            The previous value, or ``MISSING`` if there was none.

        Raises:
            TypeError: If the bag is frozen.
        """
        previous = self.data.get(key, MISSING)
        if value is MISSING:
            if previous is not MISSING or self.frozen:
                del self.data[key]  # type: ignore[attr-defined]
        else:
            self.data[key] = value  # type: ignore[index]
        return previous

    def freeze(self) -> None:
        """Make ``data`` read-only.  Calling it again is a no-op.

        The bag keeps its own copy, so the mapping it was built from can no
        longer reach it.
        """
        if not self._frozen:
            self._data = types.MappingProxyType(dict(self._data))
            self._frozen = True

    def keys(self) -> list[str]:
        """Return the keys defined right now."""
        return list(self.data.keys())

    def has(self, key: str) -> bool:
        """True if ``key`` is a direct entry of ``data``.

        Defaults passed to ``get`` never count as entries.
        """
        return key in self.data

    def to_dict(self) -> dict[str, Any]:
        """Return a plain-dict copy of the data."""
        return dict(self.data)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        state = "frozen" if self.frozen else "mutable"
        return f"<ArrayBag {state} keys={self.keys()!r}>"

    # ── Registry facility (default store) ─────────────────────────

    @staticmethod
    def load(root: RootLike | None = None) -> ArrayBag:
        """Load ``<root>/FILENAME`` into a bag.  See ``BagStore.load``."""
        from arraybag.core import store

        return store.load(root)

    @staticmethod
    def registry(root: RootLike, freeze: bool = True) -> ArrayBag:
        """Return the cached bag for ``root``, loading it on first use."""
        from arraybag.core import store

        return store.registry(root, freeze=freeze)

    @staticmethod
    def invalidate(root: RootLike | None = None) -> None:
        """Drop the cached bag for ``root``, or every bag when omitted."""
        from arraybag.core import store

        store.invalidate(root)
