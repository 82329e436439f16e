"""
Project root discovery and caller identification.

These answer the two questions the proxy needs before it can reach a
bag: "which file is asking?" and "which project does that file belong
to?".  Both are plain functions so applications can bypass them and
pass a root explicitly.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterable
from pathlib import Path

from arraybag.core.config.settings import get_filename
from arraybag.core.errors import RootNotFoundError

logger = logging.getLogger(__name__)

# Files or directories whose presence marks a project root
ROOT_MARKERS = ("pyproject.toml", "setup.py", "setup.cfg", ".git")

_MAX_DEPTH = 20  # safety limit when walking up


def find_project_root(start: str | os.PathLike[str] | None = None) -> Path:
    """Walk upwards from ``start`` to the nearest project root.

    A directory is a project root if it holds one of ``ROOT_MARKERS``
    or the current config file (``ARRAYBAG``, default ``arraybag.js``).

    Args:
        start: File or directory to start from (default: cwd).

    Returns:
        The resolved project root directory.

    Raises:
        RootNotFoundError: If no ancestor within the safety limit matches.
    """
    current = Path(start).resolve() if start is not None else Path.cwd().resolve()
    if current.is_file() or not current.exists():
        current = current.parent

    markers = (*ROOT_MARKERS, get_filename())
    origin = current

    for _ in range(_MAX_DEPTH):
        if any((current / marker).exists() for marker in markers):
            logger.debug("Project root for %s is %s", origin, current)
            return current
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    raise RootNotFoundError(f"No project root found above {origin}")


def caller_file(depth: int = 1, skip: Iterable[str | os.PathLike[str]] = ()) -> Path | None:
    """Return the source file of a calling frame.

    Args:
        depth: How many frames above the function calling
            ``caller_file`` to start at (1 = that function's caller).
        skip: Directories whose frames are passed over, so a library can
            ask for its first *external* caller.

    Returns:
        The caller's file, or None for frames without one
        (``<stdin>``, ``<string>``, REPL sessions).
    """
    skipped = tuple(str(Path(p).resolve()) + os.sep for p in skip)
    frame = sys._getframe(depth + 1)

    while frame is not None:
        filename = frame.f_code.co_filename
        if not os.path.realpath(filename).startswith(skipped):
            if filename.startswith("<"):
                return None
            return Path(filename)
        frame = frame.f_back

    return None
