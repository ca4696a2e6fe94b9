"""Tests for contractgen.contract.loader -- batch contract files."""

from __future__ import annotations

from pathlib import Path

import pytest

from contractgen.config import ProjectTree
from contractgen.contract import discover_contract_files, load_contract_file
from contractgen.contract.loader import apps_name_for
from contractgen.exceptions import ProjectConfigError


CONTRACT = """\
contractgen:
  environment_url: [BASE_URL, CDN_URL]
  unit_test: true

auth:
  login:
    login:
      method: post
      path: /login
    profile:
      method: get
      path: /users/:id
      cache-strategy: just_cache
      ttl: 60
      keep-expired-cache: true
      response-list: true
  signup:
    register:
      path: /register
"""


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


class TestDiscovery:
    def test_sorted_discovery(self, tree: ProjectTree) -> None:
        contracts = tree.contracts_dir
        _write(contracts / "shop_contract.yaml", "")
        _write(contracts / "nested" / "contract.yaml", "")
        _write(contracts / "admin_contract.yaml", "")
        _write(contracts / "notes.yaml", "")

        found = discover_contract_files(tree)
        assert [p.relative_to(contracts).as_posix() for p in found] == [
            "admin_contract.yaml",
            "nested/contract.yaml",
            "shop_contract.yaml",
        ]

    def test_missing_directory(self, tree: ProjectTree) -> None:
        assert discover_contract_files(tree) == []

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("contract.yaml", None),
            ("shop_contract.yaml", "shop"),
            ("my_shop_contract.yaml", "my_shop"),
        ],
    )
    def test_apps_name(self, name: str, expected: str) -> None:
        assert apps_name_for(Path(name)) == expected


class TestLoad:
    def test_settings_and_endpoints(self, tree: ProjectTree) -> None:
        contract_file = load_contract_file(_write(tree.contracts_dir / "contract.yaml", CONTRACT))

        assert contract_file.apps_name is None
        assert contract_file.settings.environment_url == ["BASE_URL", "CDN_URL"]
        assert contract_file.settings.unit_test is True
        assert contract_file.settings.api is True
        assert [e.api_name for e in contract_file.endpoints] == ["login", "profile", "register"]

    def test_scalars_become_text(self, tree: ProjectTree) -> None:
        contract_file = load_contract_file(_write(tree.contracts_dir / "contract.yaml", CONTRACT))
        profile = contract_file.endpoints[1]

        assert profile.feature_name == "auth"
        assert profile.page_name == "login"
        assert profile.cache_strategy == "just_cache"
        assert profile.ttl == "60"
        assert profile.keep_expired_cache == "true"
        assert profile.response_list is True
        assert profile.json2dart is True
        assert profile.unit_test is True

    def test_apps_name_from_file_name(self, tree: ProjectTree) -> None:
        contract_file = load_contract_file(
            _write(tree.contracts_dir / "admin_contract.yaml", CONTRACT)
        )
        assert contract_file.apps_name == "admin"
        assert all(e.apps_name == "admin" for e in contract_file.endpoints)

    def test_defaults_without_settings(self, tree: ProjectTree) -> None:
        contract_file = load_contract_file(
            _write(tree.contracts_dir / "contract.yaml", "auth:\n  login:\n    login: {}\n")
        )
        assert contract_file.settings.environment_url == ["BASE_URL"]
        assert contract_file.endpoints[0].method is None

    def test_select(self, tree: ProjectTree) -> None:
        contract_file = load_contract_file(_write(tree.contracts_dir / "contract.yaml", CONTRACT))
        assert [e.api_name for e in contract_file.select("auth", "signup")] == ["register"]
        assert len(contract_file.select("auth")) == 3
        assert contract_file.select("billing") == []

    def test_page_must_be_mapping(self, tree: ProjectTree) -> None:
        path = _write(tree.contracts_dir / "contract.yaml", "auth:\n  login: [a, b]\n")
        with pytest.raises(ProjectConfigError, match="Expected a mapping at auth.login"):
            load_contract_file(path)

    def test_invalid_yaml(self, tree: ProjectTree) -> None:
        path = _write(tree.contracts_dir / "contract.yaml", "auth: [unclosed\n")
        with pytest.raises(ProjectConfigError, match="Invalid YAML"):
            load_contract_file(path)

    def test_invalid_settings(self, tree: ProjectTree) -> None:
        path = _write(tree.contracts_dir / "contract.yaml", "contractgen:\n  api: maybe\n")
        with pytest.raises(ProjectConfigError, match="contractgen"):
            load_contract_file(path)
