"""
Shared test fixtures and configuration.
"""

import logging
import textwrap
from pathlib import Path

import pytest

from arraybag.core import context
from arraybag.core.store import BagStore, get_store


@pytest.fixture(autouse=True)
def _isolated_process_state(monkeypatch: pytest.MonkeyPatch):
    """Start every test with no ARRAYBAG override, no context root and an empty default store."""
    monkeypatch.delenv("ARRAYBAG", raising=False)
    monkeypatch.delenv("ARRAYBAG_LOG_LEVEL", raising=False)
    monkeypatch.delenv("ARRAYBAG_LOG_FILE", raising=False)
    monkeypatch.delenv("ARRAYBAG_LOG_FILE_LEVEL", raising=False)
    context.set_project_root(None)
    get_store().invalidate_all()
    yield
    context.set_project_root(None)
    get_store().invalidate_all()


@pytest.fixture(autouse=True)
def package_logger():
    """Drop handlers the CLI attaches to the arraybag logger."""
    pkg = logging.getLogger("arraybag")
    handlers, level, propagate = list(pkg.handlers), pkg.level, pkg.propagate
    yield pkg
    for handler in list(pkg.handlers):
        if handler not in handlers:
            pkg.removeHandler(handler)
            handler.close()
    pkg.setLevel(level)
    pkg.propagate = propagate


@pytest.fixture
def store() -> BagStore:
    """Return a fresh, isolated store."""
    return BagStore()


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Create a project with a pyproject.toml and a Python arraybag.js."""
    root = tmp_path / "myproject"
    root.mkdir()
    (root / "pyproject.toml").write_text('[project]\nname = "myproject"\n')
    (root / "arraybag.js").write_text(textwrap.dedent("""\
        import os

        foo = "bar"
        bar = "baz"
        baz = "foo"
        port = 8080
        debug = False
        _private = "hidden"
    """))
    return root


@pytest.fixture
def empty_project_dir(tmp_path: Path) -> Path:
    """Create a project with no config file."""
    root = tmp_path / "emptyproject"
    root.mkdir()
    (root / "pyproject.toml").write_text('[project]\nname = "emptyproject"\n')
    return root
