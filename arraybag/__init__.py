"""
arraybag — per-project configuration bags.

    from arraybag import bag

    bag.database_url                 # value from <your project>/arraybag.js
    "database_url" in bag

    from arraybag import ArrayBag, registry, invalidate

    config = registry("/path/to/project")       # cached, frozen
    config.get("timeout", 30)
"""

from arraybag.core import errors
from arraybag.core.bag import MISSING, ArrayBag
from arraybag.core.errors import (
    BagError,
    MalformedError,
    NotFoundError,
    RootNotFoundError,
    UndefinedKeyError,
)
from arraybag.core.proxy import BagProxy
from arraybag.core.store import BagStore, get_store, invalidate, load, registry

__version__ = "0.1.0"

bag = BagProxy()

__all__ = [
    "MISSING",
    "ArrayBag",
    "BagError",
    "BagProxy",
    "BagStore",
    "MalformedError",
    "NotFoundError",
    "RootNotFoundError",
    "UndefinedKeyError",
    "bag",
    "errors",
    "get_store",
    "invalidate",
    "load",
    "registry",
]
