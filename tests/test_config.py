"""Tests for contractgen.config -- data dir, atomic writes, project tree."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from contractgen.config import (
    ProjectTree,
    _atomic_write,
    get_data_dir,
    load_project_config,
    load_yaml_mapping,
)
from contractgen.exceptions import IoError, ProjectConfigError


# ---------------------------------------------------------------------------
# Data directory
# ---------------------------------------------------------------------------


class TestDataDir:
    def test_xdg_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("contractgen.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg"))
        path = get_data_dir()
        assert path == tmp_path / "xdg" / "contractgen"
        assert path.is_dir()

    def test_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("contractgen.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setattr(Path, "home", lambda: tmp_path)
        assert get_data_dir() == tmp_path / ".local" / "share" / "contractgen"

    def test_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("contractgen.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", lambda: tmp_path)
        assert get_data_dir() == tmp_path / ".contractgen" / "logs"


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_creates_parents_and_overwrites(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b" / "module.py"
        _atomic_write(target, "x = 1\n")
        _atomic_write(target, "x = 2\n")
        assert target.read_text(encoding="utf-8") == "x = 2\n"
        assert list(target.parent.iterdir()) == [target]

    def test_no_temp_files_left_on_error(self, tmp_path: Path) -> None:
        target = tmp_path / "module.py"
        with patch("contractgen.config.os.fsync", side_effect=OSError("disk error")):
            with pytest.raises(OSError, match="disk error"):
                _atomic_write(target, "lost")
        assert list(tmp_path.iterdir()) == []


# ---------------------------------------------------------------------------
# Project config
# ---------------------------------------------------------------------------


class TestProjectConfig:
    def test_reads_file(self, tmp_path: Path) -> None:
        (tmp_path / "contractgen.yaml").write_text(
            "project_name: Online Shop\ncontracts_dir: api\nendpoints_dir: lib/remote\n"
        )
        config = load_project_config(tmp_path)
        assert config.project_name == "Online Shop"
        assert config.contracts_dir == "api"
        assert config.endpoints_dir == "lib/remote"

    def test_name_key(self, tmp_path: Path) -> None:
        (tmp_path / "contractgen.yaml").write_text("name: shop\n")
        assert load_project_config(tmp_path).project_name == "shop"

    def test_defaults_to_directory_name(self, tmp_path: Path) -> None:
        root = tmp_path / "my_store"
        root.mkdir()
        config = load_project_config(root)
        assert config.project_name == "my_store"
        assert config.contracts_dir == "contracts"
        assert config.endpoints_dir == "core/data/remote"

    def test_leading_digit_project_name(self, tmp_path: Path) -> None:
        (tmp_path / "contractgen.yaml").write_text("project_name: 123shop\n")
        with pytest.raises(ProjectConfigError, match='"123shop" must start with a letter'):
            load_project_config(tmp_path)

    def test_leading_digit_directory_name(self, tmp_path: Path) -> None:
        root = tmp_path / "2024_store"
        root.mkdir()
        with pytest.raises(ProjectConfigError, match="set project_name in contractgen.yaml"):
            load_project_config(root)

    @pytest.mark.parametrize("content", ["project_name: [unclosed\n", "- a\n- b\n"])
    def test_invalid_file(self, tmp_path: Path, content: str) -> None:
        (tmp_path / "contractgen.yaml").write_text(content)
        with pytest.raises(ProjectConfigError):
            load_project_config(tmp_path)

    def test_empty_yaml_is_empty_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_yaml_mapping(path) == {}

    def test_unreadable_yaml(self, tmp_path: Path) -> None:
        with pytest.raises(IoError):
            load_yaml_mapping(tmp_path / "missing.yaml")

    def test_non_utf8_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "latin1.yaml"
        path.write_bytes(b"project_name: caf\xe9\n")
        with pytest.raises(IoError, match="latin1.yaml"):
            load_yaml_mapping(path)


# ---------------------------------------------------------------------------
# Project tree
# ---------------------------------------------------------------------------


class TestProjectTree:
    def test_layout(self, tree: ProjectTree) -> None:
        assert tree.project_name == "shop"
        assert tree.page_dir("auth", "login") == tree.root / "features" / "auth" / "pages" / "login"
        assert tree.test_dir("auth", "login") == tree.root / "features" / "auth" / "tests" / "login"
        assert tree.feature_dir("auth", "admin") == tree.root / "apps" / "admin" / "features" / "auth"
        assert tree.endpoints_file == tree.root / "core" / "data" / "remote" / "shop_endpoints.py"
        assert tree.contracts_dir == tree.root / "contracts"

    def test_project_name_is_snake_cased(self, tmp_path: Path) -> None:
        (tmp_path / "contractgen.yaml").write_text("project_name: OnlineShop\n")
        tree = ProjectTree.load(tmp_path)
        assert tree.project_name == "online_shop"
        assert tree.endpoints_file.name == "online_shop_endpoints.py"

    def test_resolve_and_relative(self, tree: ProjectTree, tmp_path: Path) -> None:
        assert tree.resolve("json/body.json") == tree.root / "json" / "body.json"
        outside = tmp_path / "elsewhere.json"
        assert tree.resolve(outside) == outside
        assert tree.relative(tree.root / "mapper.py") == Path("mapper.py")
        assert tree.relative(outside) == outside

    def test_read_errors(self, tree: ProjectTree) -> None:
        with pytest.raises(IoError, match="missing.py"):
            tree.read_text(tree.root / "missing.py")

    def test_non_utf8_read(self, tree: ProjectTree) -> None:
        path = tree.root / "resp.json"
        path.write_bytes(b'{"name": "caf\xe9"}')
        with pytest.raises(IoError, match="resp.json"):
            tree.read_text(path)

    def test_write_and_delete(self, tree: ProjectTree) -> None:
        path = tree.root / "core" / "x.py"
        tree.write_text(path, "x = 1\n")
        assert path.read_text() == "x = 1\n"
        tree.delete(path)
        tree.delete(path)
        assert not path.exists()
