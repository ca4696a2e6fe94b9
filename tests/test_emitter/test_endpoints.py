"""Tests for contractgen.emitter.endpoints -- the endpoints aggregator."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from contractgen.compiler.path_template import compile_path
from contractgen.config import ProjectTree
from contractgen.contract import validate_contract
from contractgen.contract.loader import load_contract_file
from contractgen.emitter.endpoints import (
    build_index,
    endpoint_name,
    endpoints_class_name,
    endpoints_module,
    plan_endpoint_upsert,
    regenerate_endpoints,
    render_endpoints_module,
)
from contractgen.emitter.index import EmissionIndex
from contractgen.models import EndpointArguments
from contractgen.output import OutputManager


def _load_module(text: str) -> dict[str, Any]:
    namespace: dict[str, Any] = {}
    exec(compile(text, "<endpoints>", "exec"), namespace)
    return namespace


def _write_contract(tree: ProjectTree, name: str, text: str) -> Path:
    path = tree.contracts_dir / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


class TestNames:
    def test_endpoint_name(self) -> None:
        assert endpoint_name("getUser") == "get_user"
        assert endpoint_name("getUser", "admin") == "get_user_admin"

    def test_class_and_module(self, tree: ProjectTree) -> None:
        assert endpoints_class_name(tree) == "ShopEndpoints"
        assert endpoints_module(tree) == "core.data.remote.shop_endpoints"


class TestRender:
    def test_empty_index(self) -> None:
        text = render_endpoints_module("ShopEndpoints", EmissionIndex())
        assert "class ShopEndpoints:\n    pass\n" in text
        _load_module(text)

    def test_generated_module_runs(self, monkeypatch: pytest.MonkeyPatch) -> None:
        index = EmissionIndex()
        index.add_endpoint("login", None, compile_path("login", "/login"))
        index.add_endpoint("get_order", None, compile_path("get_order", "/users/:id/orders/:orderId"))
        index.add_endpoint("image", None, compile_path("image", "https://cdn.example.com/:name"))
        index.add_endpoint("upload", None, compile_path("upload", "/upload", "UPLOAD_URL"))
        text = render_endpoints_module("ShopEndpoints", index)

        assert text.count("def _create_uri_base_url(") == 1
        assert "def _create_uri_upload_url(" in text

        monkeypatch.setenv("BASE_URL", "https://api.example.com")
        monkeypatch.setenv("UPLOAD_URL", "https://up.example.com")
        endpoints = _load_module(text)["ShopEndpoints"]
        assert endpoints.login() == "https://api.example.com/login"
        assert endpoints.get_order("7", "42") == "https://api.example.com/users/7/orders/42"
        assert endpoints.image("a.png") == "https://cdn.example.com/a.png"
        assert endpoints.upload() == "https://up.example.com/upload"

    def test_base_url_read_at_call_time(self, monkeypatch: pytest.MonkeyPatch) -> None:
        index = EmissionIndex()
        index.add_endpoint("login", None, compile_path("login", "/login"))
        endpoints = _load_module(render_endpoints_module("ShopEndpoints", index))["ShopEndpoints"]
        monkeypatch.setenv("BASE_URL", "http://one")
        assert endpoints.login() == "http://one/login"
        monkeypatch.setenv("BASE_URL", "http://two")
        assert endpoints.login() == "http://two/login"


class TestRegenerate:
    CONTRACT = """\
contractgen:
  environment_url: [BASE_URL, CDN_URL]
auth:
  login:
    login:
      path: /login
    profile:
      method: get
      path: /users/:id
    ping: {}
"""

    def test_build_index_order(self, tree: ProjectTree) -> None:
        files = [
            load_contract_file(_write_contract(tree, "contract.yaml", self.CONTRACT)),
            load_contract_file(
                _write_contract(tree, "admin_contract.yaml", "auth:\n  login:\n    login:\n      path: /a/login\n")
            ),
        ]
        index = build_index(files)
        assert [f.key for f in index.base_urls] == ["BASE_URL", "CDN_URL"]
        assert [f.name for f in index.endpoints] == ["login", "profile", "ping", "login_admin"]

    def test_pathless_endpoint_uses_bare_base_url(self, tree: ProjectTree) -> None:
        files = [load_contract_file(_write_contract(tree, "contract.yaml", self.CONTRACT))]
        ping = build_index(files).endpoints[2]
        assert ping.template == ""

    def test_replaces_stale_aggregators(self, tree: ProjectTree, plain_output: OutputManager) -> None:
        _write_contract(tree, "contract.yaml", self.CONTRACT)
        stale = tree.endpoints_dir / "old_endpoints.py"
        stale.parent.mkdir(parents=True)
        stale.write_text("# stale\n")

        path = regenerate_endpoints(tree)

        assert not stale.exists()
        assert path == tree.endpoints_file
        text = path.read_text()
        assert "class ShopEndpoints:" in text
        assert "def profile(id: str) -> str:" in text
        _load_module(text)

    def test_regeneration_is_deterministic(self, tree: ProjectTree, plain_output: OutputManager) -> None:
        _write_contract(tree, "contract.yaml", self.CONTRACT)
        first = regenerate_endpoints(tree).read_text()
        second = regenerate_endpoints(tree).read_text()
        assert first == second


class TestUpsert:
    def test_into_missing_file(self, tree: ProjectTree, login_args: EndpointArguments) -> None:
        contract = validate_contract(login_args, tree)
        artifact = plan_endpoint_upsert(tree, contract, compile_path("login", "/login"))
        assert artifact.exists is False
        text = artifact.content
        assert text.count("def _create_uri_base_url(") == 1
        assert "def login() -> str:" in text
        _load_module(text)

    def test_merges_into_existing_file(
        self, tree: ProjectTree, login_args: EndpointArguments
    ) -> None:
        contract = validate_contract(login_args, tree)
        first = plan_endpoint_upsert(tree, contract, compile_path("login", "/login"))
        tree.write_text(first.path, first.content)

        profile = validate_contract(
            login_args.model_copy(update={"api_name": "profile", "path": "/users/:id", "base_url": "CDN_URL"}),
            tree,
        )
        second = plan_endpoint_upsert(tree, profile, compile_path("profile", "/users/:id", "CDN_URL"))
        text = second.content

        assert second.exists is True
        assert "def login() -> str:" in text
        assert "def profile(id: str) -> str:" in text
        assert text.index("def _create_uri_cdn_url(") < text.index("class ShopEndpoints:")
        _load_module(text)

    def test_rerun_is_idempotent(self, tree: ProjectTree, login_args: EndpointArguments) -> None:
        contract = validate_contract(login_args, tree)
        factory = compile_path("login", "/login")
        first = plan_endpoint_upsert(tree, contract, factory)
        tree.write_text(first.path, first.content)
        assert plan_endpoint_upsert(tree, contract, factory).content == first.content
