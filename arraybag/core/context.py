"""
Project context — an optional process-wide project root.

Applications that know their root can register it once at startup:

    - CLI:    main.py   → context.set_project_root(root)
    - Apps:   entrypoint → context.set_project_root(root)
    - Tests:  conftest  → context.set_project_root(tmp_path)

When set, the proxy uses it instead of inspecting the call stack.
Module-level singleton, reads are plain reference lookups.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


_project_root: Optional[Path] = None


def set_project_root(root: Path | None) -> None:
    """Register the project root for the current process (None clears it)."""
    global _project_root
    _project_root = Path(root) if root is not None else None


def get_project_root() -> Optional[Path]:
    """Return the registered project root, or None if not set."""
    return _project_root
