"""Per-endpoint artifacts across the data and domain layers of a page.

For one validated contract, :class:`LayerPlanner` renders, in memory:

==========================  ==================================================
Artifact                    Path under the page directory
==========================  ==================================================
request body model          ``data/models/body/<api>_body.py``
response model              ``data/models/response/<api>_response.py``
domain entity               ``domain/entities/<api>_entity.py``
response to entity mapper   ``mapper.py`` (merged)
remote data source          ``data/datasources/<page>_remote_data_source.py`` (merged)
repository interface        ``domain/repositories/<page>_repository.py`` (merged)
repository implementation   ``data/repositories/<page>_repository_impl.py`` (merged)
use case                    ``domain/usecases/<api>_use_case.py``
==========================  ==================================================

The response model, entity and mapper exist only when the call returns a
model. Merged files collect every endpoint of the page and go through a
:class:`~contractgen.emitter.source_buffer.SourceBuffer`; the others are
rewritten on every run. An optional unit test for the data source call is
written under the feature's ``tests/<page>`` directory.

Nothing is written until :func:`write_artifacts` runs, so a contract that
fails to render leaves the project untouched.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

from contractgen import output
from contractgen.compiler.cache_binder import RenderMode, bind_contract, required_imports
from contractgen.compiler.model_schema import body_schema, response_schema
from contractgen.compiler.path_template import compile_path
from contractgen.compiler.type_matrix import resolve_types
from contractgen.config import ProjectTree
from contractgen.exceptions import IoError
from contractgen.emitter.endpoints import endpoints_class_name, endpoints_module
from contractgen.emitter.rendering import render
from contractgen.emitter.source_buffer import SourceBuffer
from contractgen.models import (
    CallMode,
    EndpointContract,
    GeneratedArtifact,
    ModelField,
    ModelSchema,
    UriFactory,
)
from contractgen.naming import snake_case

BODY_SUFFIX = "Body"
RESPONSE_SUFFIX = "Response"
ENTITY_SUFFIX = "Entity"


def load_extra_headers(path: Optional[Path], tree: ProjectTree) -> Optional[dict[str, str]]:
    """Read the JSON object of extra headers merged into every call.

    A missing or malformed file is reported as a warning and the call is
    generated without extra headers.
    """
    if path is None:
        return None
    if not path.is_file():
        output.warning(f"Header file not found: {tree.relative(path)}; skipping extra headers")
        return None
    try:
        data = json.loads(tree.read_text(path))
    except IoError as exc:
        output.warning(f"{exc}; skipping extra headers")
        return None
    except json.JSONDecodeError as exc:
        output.warning(f"Invalid JSON in header file {tree.relative(path)}: {exc}")
        return None
    if not isinstance(data, dict):
        output.warning(f"Header file {tree.relative(path)} must contain a JSON object")
        return None
    return {str(k): str(v) for k, v in data.items()}


def mapper_function_name(schema: ModelSchema) -> str:
    return f"to_{snake_case(schema.name)}_entity"


def with_path_fields(schema: ModelSchema, factory: UriFactory) -> ModelSchema:
    """Add a string field for every path parameter the body does not declare.

    The generated call reads path parameters from the request body.
    """
    declared = {f.name for f in schema.fields}
    missing = [
        ModelField(name=p.argument, wire_name=p.name)
        for p in factory.parameters
        if p.argument not in declared
    ]
    if not missing:
        return schema
    return schema.model_copy(update={"fields": (*schema.fields, *missing)})


class LayerPlanner:
    """Renders every artifact of one contract without touching the disk.

    Args:
        tree: The target project.
        contract: The validated contract.
        include_api: Render the call layers (data source, repositories, use
            case). When false only the models and the mapper are rendered.
    """

    def __init__(self, tree: ProjectTree, contract: EndpointContract, include_api: bool = True) -> None:
        self.tree = tree
        self.contract = contract
        self.include_api = include_api
        self.types = resolve_types(contract)
        self.factory: UriFactory = compile_path(
            contract.endpoint_name, contract.path_url, contract.base_url_key
        )
        self.page_dir = tree.page_dir(contract.feature_name, contract.page_name, contract.apps_name)
        self.body = with_path_fields(body_schema(contract, tree), self.factory)
        self.response = response_schema(contract, tree)
        self.extra_headers = load_extra_headers(contract.header_path, tree) if include_api else None

    # ------------------------------------------------------------------ #
    # Derived names
    # ------------------------------------------------------------------ #

    @property
    def streaming(self) -> bool:
        return self.types.call_mode is CallMode.STREAMING

    @property
    def cacheable(self) -> bool:
        return self.contract.method.applies_cache_strategy

    @property
    def api(self) -> str:
        return self.contract.api_name

    @property
    def page(self) -> str:
        return self.contract.page_name

    @property
    def api_class(self) -> str:
        return self.contract.api_class_name

    @property
    def page_class(self) -> str:
        return self.contract.page_class_name

    @property
    def result_type(self) -> str:
        either = f"Either[Failure, {self.types.entity_type}]"
        return f"AsyncIterator[{either}]" if self.streaming else either

    def _path(self, *parts: str) -> Path:
        return self.page_dir.joinpath(*parts)

    def _module(self, path: Path) -> str:
        return ".".join(self.tree.relative(path.with_suffix("")).parts)

    def _artifact(self, kind: str, path: Path, content: str) -> GeneratedArtifact:
        return GeneratedArtifact(kind=kind, path=path, content=content, exists=path.is_file())

    # ------------------------------------------------------------------ #
    # Call fragments
    # ------------------------------------------------------------------ #

    def parameters(self) -> list[str]:
        lines = [
            "self",
            f"body: {self.types.body_type}",
            "headers: dict[str, str] | None = None",
        ]
        if self.cacheable:
            lines.append("cache_strategy: CacheStrategy | None = None")
        return lines

    def forward_arguments(self) -> str:
        arguments = "body, headers=headers"
        if self.cacheable:
            arguments += ", cache_strategy=cache_strategy"
        return arguments

    def endpoint_call(self) -> str:
        owner = "body[0]" if self.contract.body_list else "body"
        arguments = ", ".join(f"{owner}.{p.argument}" for p in self.factory.parameters)
        return f"{endpoints_class_name(self.tree)}.{self.factory.name}({arguments})"

    def body_arguments(self) -> list[str]:
        if self.contract.body_list:
            return ["body=json.dumps([e.to_map() for e in body])"]
        if self.contract.method.is_multipart:
            return ["body={k: str(v) for k, v in body.to_map().items()}", "files=body.files"]
        return ["body=body.to_map()"]

    def headers_expression(self) -> str:
        if not self.extra_headers:
            return "headers"
        return f"{{**{json.dumps(self.extra_headers, ensure_ascii=False)}, **(headers or {{}})}}"

    def call_arguments(self, mode: RenderMode) -> list[str]:
        arguments = [self.endpoint_call(), *self.body_arguments(), f"headers={self.headers_expression()}"]
        fragment = bind_contract(self.contract, mode)
        if fragment:
            arguments.append(fragment)
        elif self.cacheable:
            # No declared strategy: forward the injected one as is.
            arguments.append("cache_strategy=cache_strategy" if mode is RenderMode.PRODUCTION else "cache_strategy=None")
        return arguments

    def _cache_imports(self) -> tuple[list[str], list[str]]:
        """Split the names the cache fragment needs into stdlib and core imports."""
        names = required_imports(self.contract.cache) if self.cacheable else []
        stdlib = ["from datetime import timedelta"] if "timedelta" in names else []
        return stdlib, [n for n in names if n != "timedelta"]

    def _core_import(self, names: list[str]) -> list[str]:
        unique = sorted(set(names))
        return [f"from core import {', '.join(unique)}"] if unique else []

    def _raw_response_import(self, type_name: str) -> list[str]:
        return ["Response"] if type_name in ("Response", "AsyncIterator[Response]") else []

    # ------------------------------------------------------------------ #
    # Planning
    # ------------------------------------------------------------------ #

    def plan(self) -> list[GeneratedArtifact]:
        """Render every artifact of the contract, in write order."""
        artifacts = [self.body_model()]
        if self.response is not None:
            artifacts.extend([self.response_model(), self.entity(), self.mapper()])
        if self.include_api:
            artifacts.extend(
                [self.data_source(), self.domain_repository(), self.repository_impl(), self.use_case()]
            )
            if self.contract.unit_test and not self.streaming:
                artifacts.append(self.unit_test())
        return artifacts

    # --- Models ---

    def body_model(self) -> GeneratedArtifact:
        multipart = self.contract.method.is_multipart
        models = self._model_blocks(self.body, BODY_SUFFIX, required=True)
        if multipart:
            models[-1]["declarations"].append(
                "files: dict[str, Path] = Field(default_factory=dict, exclude=True)"
            )
        content = self._render_model("body", self.body, models, extra_stdlib=["from pathlib import Path"] if multipart else [])
        return self._artifact("body", self._path("data", "models", "body", f"{self.api}_body.py"), content)

    def response_model(self) -> GeneratedArtifact:
        assert self.response is not None
        models = self._model_blocks(self.response, RESPONSE_SUFFIX, required=False)
        content = self._render_model("response", self.response, models)
        path = self._path("data", "models", "response", f"{self.api}_response.py")
        return self._artifact("response", path, content)

    def _render_model(
        self,
        kind: str,
        schema: ModelSchema,
        models: list[dict[str, Any]],
        extra_stdlib: Optional[list[str]] = None,
    ) -> str:
        stdlib: list[str] = []
        if schema.uses_datetime:
            stdlib.append("from datetime import datetime")
        stdlib.extend(extra_stdlib or [])
        stdlib.append("from typing import Any")
        uses_field = any("Field(" in line for m in models for line in m["declarations"])
        pydantic_names = "BaseModel, ConfigDict, Field" if uses_field else "BaseModel, ConfigDict"
        imports = [stdlib, [f"from pydantic import {pydantic_names}"]]
        if kind == "response":
            imports.insert(0, ["from __future__ import annotations"])
        return render("model.py.j2", imports=imports, models=models, kind=kind)

    def _model_blocks(self, schema: ModelSchema, suffix: str, required: bool) -> list[dict[str, Any]]:
        """Nested models first (deepest first), then the main model."""
        blocks = [
            {
                "class_name": nested.class_name(suffix),
                "declarations": [_model_declaration(f, suffix, required) for f in nested.fields],
                "is_main": False,
            }
            for nested in reversed(schema.nested)
        ]
        blocks.append(
            {
                "class_name": schema.class_name(suffix),
                "declarations": [_model_declaration(f, suffix, required) for f in schema.fields],
                "is_main": True,
            }
        )
        return blocks

    def entity(self) -> GeneratedArtifact:
        assert self.response is not None
        schemas = [*reversed(self.response.nested), self.response]
        models = [
            {
                "class_name": s.class_name(ENTITY_SUFFIX),
                "declarations": [_entity_declaration(f) for f in s.fields],
            }
            for s in schemas
        ]
        uses_field = any(f.is_list for s in schemas for f in s.fields)
        stdlib = ["from dataclasses import dataclass, field" if uses_field else "from dataclasses import dataclass"]
        if self.response.uses_datetime:
            stdlib.append("from datetime import datetime")
        if self.response.uses_any:
            stdlib.append("from typing import Any")
        content = render("entity.py.j2", imports=[["from __future__ import annotations"], stdlib], models=models)
        path = self._path("domain", "entities", f"{self.api}_entity.py")
        return self._artifact("entity", path, content)

    def mapper(self) -> GeneratedArtifact:
        assert self.response is not None
        path = self._path("mapper.py")
        schemas = [*reversed(self.response.nested), self.response]
        response_names = ", ".join(sorted(s.class_name(RESPONSE_SUFFIX) for s in schemas))
        entity_names = ", ".join(sorted(s.class_name(ENTITY_SUFFIX) for s in schemas))
        imports = [
            f"from .data.models.response.{self.api}_response import {response_names}",
            f"from .domain.entities.{self.api}_entity import {entity_names}",
        ]

        buffer = SourceBuffer.read(path, self.tree)
        if buffer.is_empty:
            buffer = SourceBuffer(render("mapper.py.j2", imports=[imports]))
        for line in imports:
            buffer.add_import(line)
        for schema in schemas:
            buffer.upsert_function(mapper_function_name(schema), _render_mapper_function(schema))
        return self._artifact("mapper", path, buffer.text)

    # --- Call layers ---

    def _member_context(self, mode: RenderMode = RenderMode.PRODUCTION) -> dict[str, Any]:
        return {
            "name": self.api,
            "types": self.types,
            "streaming": self.streaming,
            "parameters": self.parameters(),
            "result_type": self.result_type,
            "forward_arguments": self.forward_arguments(),
            "client_method": self.contract.method.client_method,
            "call_arguments": self.call_arguments(mode),
            "page_class": self.page_class,
            "api_class": self.api_class,
        }

    def data_source(self) -> GeneratedArtifact:
        path = self._path("data", "datasources", f"{self.page}_remote_data_source.py")
        cache_stdlib, cache_core = self._cache_imports()
        stdlib = []
        if self.types.needs_json or self.contract.body_list:
            stdlib.append("import json")
        stdlib.append("from abc import ABC, abstractmethod")
        if self.streaming:
            stdlib.append("from collections.abc import AsyncIterator")
        stdlib.extend(cache_stdlib)
        core = ["HttpClient", *cache_core, *self._raw_response_import(self.types.return_type)]
        if self.cacheable:
            core.append("CacheStrategy")
        local = [
            f"from {endpoints_module(self.tree)} import {endpoints_class_name(self.tree)}",
            f"from ..models.body.{self.api}_body import {self.api_class}{BODY_SUFFIX}",
        ]
        if self.response is not None:
            local.append(f"from ..models.response.{self.api}_response import {self.api_class}{RESPONSE_SUFFIX}")
        imports = [stdlib, self._core_import(core), local]

        context = self._member_context()
        buffer = self._merge_target(path, "datasource.py.j2", imports)
        buffer.upsert_member(
            f"{self.page_class}RemoteDataSource",
            self.api,
            render("datasource_abstract_member.py.j2", **context),
        )
        buffer.upsert_member(
            f"{self.page_class}RemoteDataSourceImpl",
            self.api,
            render("datasource_member.py.j2", **context),
        )
        return self._artifact("data source", path, buffer.text)

    def domain_repository(self) -> GeneratedArtifact:
        path = self._path("domain", "repositories", f"{self.page}_repository.py")
        imports = self._layer_imports(
            ["from abc import ABC, abstractmethod"],
            ["Either", "Failure"],
            [f"from ...data.models.body.{self.api}_body import {self.api_class}{BODY_SUFFIX}"],
            entity_import=f"from ..entities.{self.api}_entity import {self.api_class}{ENTITY_SUFFIX}",
        )
        buffer = self._merge_target(path, "repository.py.j2", imports)
        buffer.upsert_member(
            f"{self.page_class}Repository",
            self.api,
            render("repository_abstract_member.py.j2", **self._member_context()),
        )
        return self._artifact("repository", path, buffer.text)

    def repository_impl(self) -> GeneratedArtifact:
        path = self._path("data", "repositories", f"{self.page}_repository_impl.py")
        local = [
            f"from ...domain.repositories.{self.page}_repository import {self.page_class}Repository",
            f"from ..datasources.{self.page}_remote_data_source import {self.page_class}RemoteDataSource",
            f"from ..models.body.{self.api}_body import {self.api_class}{BODY_SUFFIX}",
        ]
        if self.response is not None:
            local.append(f"from ...mapper import {mapper_function_name(self.response)}")
        imports = self._layer_imports(
            [],
            ["ApiException", "Either", "Failure", "InternalFailure", "Left", "Right"],
            local,
            entity_import=f"from ...domain.entities.{self.api}_entity import {self.api_class}{ENTITY_SUFFIX}",
        )
        buffer = self._merge_target(path, "repository_impl.py.j2", imports)
        buffer.upsert_member(
            f"{self.page_class}RepositoryImpl",
            self.api,
            render("repository_member.py.j2", **self._member_context()),
        )
        return self._artifact("repository impl", path, buffer.text)

    def use_case(self) -> GeneratedArtifact:
        path = self._path("domain", "usecases", f"{self.api}_use_case.py")
        imports = self._layer_imports(
            [],
            ["Either", "Failure", "StreamUseCase" if self.streaming else "UseCase"],
            [
                f"from ...data.models.body.{self.api}_body import {self.api_class}{BODY_SUFFIX}",
                f"from ..repositories.{self.page}_repository import {self.page_class}Repository",
            ],
            entity_import=f"from ..entities.{self.api}_entity import {self.api_class}{ENTITY_SUFFIX}",
        )
        content = render("use_case.py.j2", imports=imports, **self._member_context())
        return self._artifact("use case", path, content)

    def _layer_imports(
        self,
        stdlib: list[str],
        core: list[str],
        local: list[str],
        entity_import: str,
    ) -> list[list[str]]:
        stdlib = list(stdlib)
        if self.streaming:
            stdlib.append("from collections.abc import AsyncIterator")
        core = [*core, *self._raw_response_import(self.types.entity_type)]
        if self.cacheable:
            core.append("CacheStrategy")
        local = list(local)
        if self.response is not None:
            local.append(entity_import)
        return [stdlib, self._core_import(core), local]

    def _merge_target(self, path: Path, skeleton: str, imports: list[list[str]]) -> SourceBuffer:
        buffer = SourceBuffer.read(path, self.tree)
        if buffer.is_empty:
            buffer = SourceBuffer(
                render(skeleton, imports=imports, page_class=self.page_class)
            )
        for group in imports:
            for line in group:
                buffer.add_import(line)
        return buffer

    # --- Tests ---

    def unit_test(self) -> GeneratedArtifact:
        test_dir = self.tree.test_dir(self.contract.feature_name, self.page, self.contract.apps_name)
        path = test_dir / f"test_{self.api}_remote_data_source.py"
        cache_stdlib, cache_core = self._cache_imports()
        stdlib = ["import asyncio"]
        if self.contract.body_list:
            stdlib.append("import json")
        stdlib.extend(cache_stdlib)
        stdlib.append("from unittest.mock import AsyncMock, MagicMock")
        data_source_module = self._module(
            self._path("data", "datasources", f"{self.page}_remote_data_source.py")
        )
        local = [
            f"from {data_source_module} import {self.page_class}RemoteDataSourceImpl",
            f"from {endpoints_module(self.tree)} import {endpoints_class_name(self.tree)}",
        ]
        imports = [stdlib, self._core_import(cache_core), local]
        response_text = '"[]"' if self.contract.response_list and self.response is not None else '"{}"'
        content = render(
            "unit_test.py.j2",
            imports=imports,
            response_text=response_text,
            body_list=self.contract.body_list,
            **self._member_context(RenderMode.TEST),
        )
        return self._artifact("unit test", path, content)


def _model_declaration(field: ModelField, suffix: str, required: bool) -> str:
    """One field line of a pydantic body or response model."""
    annotation = field.type_for(suffix)
    alias = f'alias="{field.wire_name}"' if field.has_alias else ""
    if field.is_list:
        arguments = ", ".join(a for a in ("default_factory=list", alias) if a)
        return f"{field.name}: {annotation} = Field({arguments})"
    if required:
        if alias:
            return f"{field.name}: {annotation} = Field({alias})"
        return f"{field.name}: {annotation}"
    if alias:
        return f"{field.name}: {annotation} | None = Field(default=None, {alias})"
    return f"{field.name}: {annotation} | None = None"


def _entity_declaration(field: ModelField) -> str:
    annotation = field.type_for(ENTITY_SUFFIX)
    if field.is_list:
        return f"{field.name}: {annotation} = field(default_factory=list)"
    return f"{field.name}: {annotation} | None = None"


def _render_mapper_function(schema: ModelSchema) -> str:
    assignments = []
    for f in schema.fields:
        value = f"response.{f.name}"
        if f.is_model:
            mapper = f"to_{snake_case(f.model_name or '')}_entity"
            if f.is_list:
                value = f"[{mapper}(e) for e in response.{f.name}]"
            else:
                value = f"{mapper}(response.{f.name}) if response.{f.name} is not None else None"
        elif f.is_list:
            value = f"list(response.{f.name})"
        assignments.append(f"{f.name}={value}")
    return render(
        "mapper_function.py.j2",
        function_name=mapper_function_name(schema),
        response_class=schema.class_name(RESPONSE_SUFFIX),
        entity_class=schema.class_name(ENTITY_SUFFIX),
        assignments=assignments,
    ).rstrip("\n")


def write_artifacts(tree: ProjectTree, artifacts: list[GeneratedArtifact]) -> None:
    """Write rendered artifacts in order, reporting each one."""
    for artifact in artifacts:
        tree.write_text(artifact.path, artifact.content)
        output.generated(str(tree.relative(artifact.path)))
