"""
Tests for the bag store — load, get-or-create caching and invalidation.
"""

import os
import textwrap
from pathlib import Path

import pytest

from arraybag.core.bag import ArrayBag
from arraybag.core.config.loader import Loader
from arraybag.core.errors import NotFoundError
from arraybag.core.store import (
    BagStore,
    config_path,
    get_store,
    invalidate,
    load,
    registry,
    root_key,
)


class TestLoad:
    """Tests for BagStore.load()."""

    def test_load_module_globals(self, store: BagStore, project_dir: Path):
        bag = store.load(project_dir)
        assert bag.get("foo") == "bar"
        assert bag.get("port") == 8080
        assert bag.get("debug") is False

    def test_private_and_module_names_skipped(self, store: BagStore, project_dir: Path):
        bag = store.load(project_dir)
        assert not bag.has("_private")
        assert not bag.has("os")

    def test_load_exported_bag(self, store: BagStore, tmp_path: Path):
        (tmp_path / "arraybag.js").write_text(textwrap.dedent("""\
            from arraybag import ArrayBag

            arraybag = ArrayBag({"foo": "bar"})
            arraybag.set("built", "by hand")
        """))
        bag = store.load(tmp_path)
        assert isinstance(bag, ArrayBag)
        assert bag.get("foo") == "bar"
        assert bag.get("built") == "by hand"
        assert not bag.frozen

    def test_load_dataclass_config(self, store: BagStore, tmp_path: Path):
        (tmp_path / "arraybag.js").write_text(textwrap.dedent("""\
            from __future__ import annotations

            from dataclasses import dataclass

            from arraybag import ArrayBag

            @dataclass
            class Db:
                host: str = "localhost"

            db = Db()
        """))
        bag = store.load(tmp_path)
        assert bag.get("db").host == "localhost"
        assert not bag.has("ArrayBag")

    def test_load_exported_mapping(self, store: BagStore, tmp_path: Path):
        (tmp_path / "arraybag.js").write_text('arraybag = {"foo": "bar"}\nignored = 1\n')
        bag = store.load(tmp_path)
        assert bag.keys() == ["foo"]

    def test_load_defaults_to_cwd(
        self, store: BagStore, project_dir: Path, monkeypatch: pytest.MonkeyPatch,
    ):
        monkeypatch.chdir(project_dir)
        assert store.load().get("foo") == "bar"

    def test_load_does_not_cache(self, store: BagStore, project_dir: Path):
        assert store.load(project_dir) is not store.load(project_dir)
        assert len(store) == 0

    def test_missing_file(self, store: BagStore, empty_project_dir: Path):
        with pytest.raises(NotFoundError, match="emptyproject") as excinfo:
            store.load(empty_project_dir)
        assert excinfo.value.path == empty_project_dir.resolve() / "arraybag.js"
        assert excinfo.value.root == empty_project_dir.resolve()

    def test_missing_file_names_root_segment(self, store: BagStore, tmp_path: Path):
        root = tmp_path / "some-package"
        root.mkdir()
        with pytest.raises(NotFoundError, match="some-package"):
            store.load(str(root))

    def test_env_filename(
        self, store: BagStore, project_dir: Path, monkeypatch: pytest.MonkeyPatch,
    ):
        (project_dir / "config.py").write_text('foo = "from config"\n')
        monkeypatch.setenv("ARRAYBAG", "config.py")
        assert store.load(project_dir).get("foo") == "from config"

    def test_env_filename_missing(
        self, store: BagStore, project_dir: Path, monkeypatch: pytest.MonkeyPatch,
    ):
        monkeypatch.setenv("ARRAYBAG", "config.js")
        with pytest.raises(NotFoundError):
            store.load(project_dir)

    def test_yaml_config(
        self, store: BagStore, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ):
        (tmp_path / "arraybag.yml").write_text("foo: bar\nports: [80, 443]\n")
        monkeypatch.setenv("ARRAYBAG", "arraybag.yml")
        bag = store.load(tmp_path)
        assert bag.get("ports") == [80, 443]


class TestLoadErrorsPropagate:
    """Failures other than a missing config file are never wrapped."""

    def test_syntax_error(self, store: BagStore, tmp_path: Path):
        (tmp_path / "arraybag.js").write_text("foo = = 'bar'\n")
        with pytest.raises(SyntaxError):
            store.load(tmp_path)

    def test_nested_import_error(self, store: BagStore, tmp_path: Path):
        (tmp_path / "arraybag.js").write_text("import nothere_arraybag_test\n")
        with pytest.raises(ModuleNotFoundError, match="nothere_arraybag_test"):
            store.load(tmp_path)

    def test_nested_missing_file(self, store: BagStore, tmp_path: Path):
        (tmp_path / "arraybag.js").write_text(
            "from pathlib import Path\n"
            "secret = (Path(__file__).parent / 'secret.txt').read_text()\n"
        )
        with pytest.raises(FileNotFoundError) as excinfo:
            store.load(tmp_path)
        assert not isinstance(excinfo.value, NotFoundError)
        assert excinfo.value.filename.endswith("secret.txt")

    def test_runtime_error(self, store: BagStore, tmp_path: Path):
        (tmp_path / "arraybag.js").write_text("raise RuntimeError('broken config')\n")
        with pytest.raises(RuntimeError, match="broken config"):
            store.load(tmp_path)


class TestGetOrCreate:
    """Tests for BagStore.get_or_create()."""

    def test_caches_instance(self, store: BagStore, project_dir: Path):
        bag = store.get_or_create(project_dir)
        assert bag.get("foo") == "bar"
        assert store.get_or_create(project_dir) is bag

    def test_frozen_by_default(self, store: BagStore, project_dir: Path):
        bag = store.get_or_create(project_dir)
        assert bag.frozen
        with pytest.raises(TypeError):
            bag.data["foo"] = "baz"
        with pytest.raises(TypeError):
            bag.data = {"foo": "hijacked"}
        assert bag.frozen

    def test_unfrozen_on_request(self, store: BagStore, project_dir: Path):
        bag = store.get_or_create(project_dir, freeze=False)
        assert not bag.frozen
        bag.data["foo"] = "baz"
        assert bag.set("bar", "qux") == "baz"

    def test_freeze_flag_ignored_once_cached(self, store: BagStore, project_dir: Path):
        bag = store.get_or_create(project_dir, freeze=False)
        assert store.get_or_create(project_dir) is bag
        assert not bag.frozen

    def test_roots_normalized(
        self, store: BagStore, project_dir: Path, monkeypatch: pytest.MonkeyPatch,
    ):
        monkeypatch.chdir(project_dir)
        bag = store.get_or_create("./")
        assert store.get_or_create(".") is bag
        assert store.get_or_create(project_dir) is bag
        assert store.roots() == [project_dir.resolve()]

    def test_distinct_roots(self, store: BagStore, project_dir: Path, tmp_path: Path):
        other = tmp_path / "other"
        other.mkdir()
        (other / "arraybag.js").write_text("foo = 'other'\n")
        assert store.get_or_create(project_dir).get("foo") == "bar"
        assert store.get_or_create(other).get("foo") == "other"
        assert len(store) == 2

    def test_not_found_is_not_cached(self, store: BagStore, empty_project_dir: Path):
        with pytest.raises(NotFoundError):
            store.get_or_create(empty_project_dir)
        assert empty_project_dir not in store

    def test_stores_are_isolated(self, project_dir: Path):
        a, b = BagStore(), BagStore()
        assert a.get_or_create(project_dir) is not b.get_or_create(project_dir)


class TestInvalidate:
    def test_invalidate_reloads(self, store: BagStore, project_dir: Path):
        bag = store.get_or_create(project_dir)
        store.invalidate(project_dir)
        assert project_dir not in store

        fresh = store.get_or_create(project_dir)
        assert fresh is not bag
        assert fresh.get("foo") == "bar"

    def test_invalidate_picks_up_changes(self, store: BagStore, project_dir: Path):
        assert store.get_or_create(project_dir).get("foo") == "bar"
        (project_dir / "arraybag.js").write_text("foo = 'changed'\n")
        assert store.get_or_create(project_dir).get("foo") == "bar"

        store.invalidate(project_dir)
        assert store.get_or_create(project_dir).get("foo") == "changed"

    def test_exported_bag_is_new_after_invalidate(self, store: BagStore, tmp_path: Path):
        (tmp_path / "arraybag.js").write_text(
            "from arraybag import ArrayBag\narraybag = ArrayBag({'foo': 'bar'})\n"
        )
        bag = store.get_or_create(tmp_path)
        store.invalidate(tmp_path)
        assert store.get_or_create(tmp_path) is not bag

    def test_invalidate_unknown_root(self, store: BagStore, tmp_path: Path):
        assert store.invalidate(tmp_path / "never-loaded") is None

    def test_invalidate_all(self, store: BagStore, project_dir: Path, tmp_path: Path):
        other = tmp_path / "other"
        other.mkdir()
        (other / "arraybag.js").write_text("foo = 'other'\n")
        store.get_or_create(project_dir)
        store.get_or_create(other)

        store.invalidate_all()
        assert len(store) == 0
        assert store.roots() == []


class TestCustomLoader:
    def test_loader_receives_absolute_path(self, tmp_path: Path):
        seen = []

        class RecordingLoader(Loader):
            def load(self, path: Path):
                seen.append(path)
                return {"loaded_from": str(path)}

        store = BagStore(loader=RecordingLoader())
        bag = store.get_or_create(tmp_path)
        assert seen == [tmp_path.resolve() / "arraybag.js"]
        assert bag.get("loaded_from").endswith("arraybag.js")
        assert isinstance(store.loader, RecordingLoader)


class TestDefaultStore:
    """Module-level functions and ArrayBag static methods share one store."""

    def test_registry_twice_same_instance(self, project_dir: Path):
        assert registry(project_dir) is registry(project_dir)
        assert ArrayBag.registry(project_dir) is registry(project_dir)
        assert project_dir in get_store()

    def test_registry_frozen_flag(self, project_dir: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.chdir(project_dir)
        bag = ArrayBag.registry("./")
        assert bag.frozen

        ArrayBag.invalidate("./")
        bag = ArrayBag.registry("./", False)
        assert not bag.frozen
        bag.set("foo", "baz")
        assert bag.get("foo") == "baz"

    def test_invalidate_everything(self, project_dir: Path):
        bag = registry(project_dir)
        invalidate()
        assert len(get_store()) == 0
        assert registry(project_dir) is not bag

    def test_static_load(self, project_dir: Path, empty_project_dir: Path):
        assert ArrayBag.load(project_dir).get("foo") == "bar"
        assert load(project_dir).get("baz") == "foo"
        with pytest.raises(NotFoundError):
            ArrayBag.load(empty_project_dir)


class TestPaths:
    def test_root_key_defaults_to_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.chdir(tmp_path)
        assert root_key(None) == Path(os.getcwd()).resolve()

    def test_config_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        assert config_path(tmp_path) == tmp_path.resolve() / "arraybag.js"
        monkeypatch.setenv("ARRAYBAG", "settings.yml")
        assert config_path(tmp_path).name == "settings.yml"
