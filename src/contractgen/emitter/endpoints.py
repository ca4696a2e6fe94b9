"""The per-project endpoints aggregator.

One module, ``<project>_endpoints.py``, holds every URI factory of the
project::

    def _create_uri_base_url(path: str) -> str:
        return os.environ.get("BASE_URL", "") + path


    class ShopEndpoints:
        @staticmethod
        def get_user(id: str) -> str:
            return _create_uri_base_url(f"/users/{id}")

It is built two ways:

* :func:`regenerate_endpoints` deletes every ``*_endpoints.py`` in the
  endpoints directory and rebuilds the module from all batch contract files,
  in discovery order, through an :class:`~contractgen.emitter.index.EmissionIndex`.
  The result depends only on the contract files.
* :func:`plan_endpoint_upsert` merges a single endpoint into the existing
  module through a :class:`~contractgen.emitter.source_buffer.SourceBuffer`,
  for ``contractgen api`` runs outside a batch.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from contractgen import output
from contractgen.compiler.path_template import compile_path, substitute
from contractgen.config import ProjectTree
from contractgen.contract.loader import ContractFile, discover_contract_files, load_contract_file
from contractgen.emitter.index import EmissionIndex
from contractgen.emitter.rendering import render
from contractgen.emitter.source_buffer import SourceBuffer
from contractgen.models import BaseUrlFactory, EndpointContract, GeneratedArtifact, UriFactory
from contractgen.naming import pascal_case, sanitize_identifier, snake_case

ENDPOINTS_GLOB = "*_endpoints.py"


def endpoint_name(api_name: str, apps_name: Optional[str] = None) -> str:
    """Factory name of an endpoint, qualified by its apps namespace."""
    name = sanitize_identifier(api_name)
    if apps_name:
        return f"{name}_{snake_case(apps_name)}"
    return name


def endpoints_class_name(tree: ProjectTree) -> str:
    return f"{pascal_case(tree.project_name)}Endpoints"


def endpoints_module(tree: ProjectTree) -> str:
    """Dotted module path of the aggregator inside the target project."""
    relative = tree.relative(tree.endpoints_file).with_suffix("")
    return ".".join(relative.parts)


# --- Rendering ---


def render_base_url_factory(factory: BaseUrlFactory) -> str:
    return render("base_url_factory.py.j2", factory=factory).rstrip("\n")


def render_endpoint(factory: UriFactory) -> str:
    return render(
        "endpoint_member.py.j2",
        factory=factory,
        uri=substitute(factory),
        base_url_function=BaseUrlFactory(key=factory.base_url_key).function_name,
    ).rstrip("\n")


def render_endpoints_module(class_name: str, index: EmissionIndex) -> str:
    """Render the whole aggregator from *index*."""
    parts = [render("endpoints_header.py.j2").rstrip("\n")]
    parts.extend(render_base_url_factory(f) for f in index.base_urls)
    members = [render_endpoint(f) for f in index.endpoints] or ["    pass"]
    parts.append(f"class {class_name}:\n" + "\n\n".join(members))
    return "\n\n\n".join(parts) + "\n"


# --- Batch regeneration ---


def build_index(files: list[ContractFile]) -> EmissionIndex:
    """Collect the factories declared by *files*, in order.

    Every key of a file's ``environment_url`` gets a base-URL factory even
    when no endpoint uses it. An endpoint without a path resolves to
    the bare base URL.
    """
    index = EmissionIndex()
    for contract_file in files:
        for key in contract_file.settings.environment_url:
            index.add_base_url(key)
        for args in contract_file.endpoints:
            name = endpoint_name(args.api_name, contract_file.apps_name)
            factory = compile_path(name, args.path, args.base_url)
            index.add_endpoint(sanitize_identifier(args.api_name), contract_file.apps_name, factory)
    return index


def regenerate_endpoints(tree: ProjectTree, files: Optional[list[ContractFile]] = None) -> Path:
    """Delete old aggregators and write a fresh one from the contract files.

    Args:
        tree: The target project.
        files: Already loaded contract files; discovered and loaded when
            omitted.

    Returns:
        Path of the written aggregator.
    """
    if files is None:
        files = [load_contract_file(p) for p in discover_contract_files(tree)]

    if tree.endpoints_dir.is_dir():
        for old in sorted(tree.endpoints_dir.glob(ENDPOINTS_GLOB)):
            output.debug(f"Deleting {tree.relative(old)}")
            tree.delete(old)

    index = build_index(files)
    text = render_endpoints_module(endpoints_class_name(tree), index)
    tree.write_text(tree.endpoints_file, text)
    output.generated(str(tree.relative(tree.endpoints_file)))
    return tree.endpoints_file


# --- Single endpoint ---


def plan_endpoint_upsert(
    tree: ProjectTree, contract: EndpointContract, factory: UriFactory
) -> GeneratedArtifact:
    """Merge the factory of *contract* into the existing aggregator, in memory."""
    path = tree.endpoints_file
    exists = path.is_file()
    class_name = endpoints_class_name(tree)

    buffer = SourceBuffer.read(path, tree)
    if buffer.is_empty:
        buffer = SourceBuffer(render_endpoints_module(class_name, EmissionIndex()))
    buffer.add_import("import os")
    if not buffer.has_class(class_name):
        buffer.add_block(f"class {class_name}:\n    pass")

    if not factory.is_absolute:
        base = BaseUrlFactory(key=factory.base_url_key)
        buffer.upsert_function(
            base.function_name, render_base_url_factory(base), before=f"class {class_name}"
        )
    buffer.upsert_member(class_name, factory.name, render_endpoint(factory))

    output.debug(f"Endpoint factory {class_name}.{factory.name} for {contract.api_name}")
    return GeneratedArtifact(kind="endpoints", path=path, content=buffer.text, exists=exists)
