"""Run contracts end to end.

:func:`run_contract` takes one endpoint from raw arguments to files on disk:
validate, render every artifact in memory, then write. A contract that fails
anywhere before the write step leaves the project untouched.

:func:`run_batch` runs every endpoint of every batch contract file in
discovery order and stops at the first error. Contracts already written by
then stay written. When the run completes, the endpoints aggregator is
regenerated from all contract files.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from contractgen import output
from contractgen.compiler.path_template import compile_path
from contractgen.config import ProjectTree
from contractgen.contract import ContractFile, discover_contract_files, load_contract_file, validate_contract
from contractgen.emitter.endpoints import plan_endpoint_upsert, regenerate_endpoints
from contractgen.emitter.layers import LayerPlanner, write_artifacts
from contractgen.exceptions import ConfigurationError
from contractgen.models import EndpointArguments, EndpointContract, GeneratedArtifact


@dataclass
class BatchResult:
    """What a batch run processed."""

    files: int = 0
    contracts: int = 0
    artifacts: list[GeneratedArtifact] = field(default_factory=list)


def plan_contract(
    tree: ProjectTree,
    contract: EndpointContract,
    include_api: bool = True,
    upsert_endpoint: bool = False,
) -> list[GeneratedArtifact]:
    """Render every artifact of *contract* without writing anything.

    Args:
        tree: The target project.
        contract: The validated contract.
        include_api: Render the call layers, not only the models.
        upsert_endpoint: Also merge the endpoint factory into the
            aggregator. Batch runs regenerate the aggregator instead.
    """
    planner = LayerPlanner(tree, contract, include_api=include_api)
    artifacts: list[GeneratedArtifact] = []
    if upsert_endpoint and include_api:
        factory = compile_path(contract.endpoint_name, contract.path_url, contract.base_url_key)
        artifacts.append(plan_endpoint_upsert(tree, contract, factory))
    artifacts.extend(planner.plan())
    return artifacts


def run_contract(
    args: EndpointArguments,
    tree: ProjectTree,
    dry_run: bool = False,
    include_api: bool = True,
    upsert_endpoint: bool = True,
) -> list[GeneratedArtifact]:
    """Validate *args*, render its artifacts and write them.

    Returns:
        The rendered artifacts, written unless *dry_run* is set.

    Raises:
        ContractgenError: On the first validation, rendering or write
            failure.
    """
    contract = validate_contract(args, tree)
    output.debug(
        f"Contract {contract.api_name}: {contract.method.value} {contract.path_url or '/'}"
        f" -> {contract.return_data.value}"
    )
    artifacts = plan_contract(tree, contract, include_api=include_api, upsert_endpoint=upsert_endpoint)
    if not dry_run:
        write_artifacts(tree, artifacts)
    return artifacts


def print_plan(tree: ProjectTree, artifacts: list[GeneratedArtifact]) -> None:
    """Print the artifacts a run would write, as a table on stdout."""
    rows = [[a.action, a.kind, str(tree.relative(a.path))] for a in artifacts]
    output.print_table(["Action", "Kind", "Path"], rows, title=f"Planned files ({len(rows)})")


def run_batch(
    tree: ProjectTree,
    feature: Optional[str] = None,
    page: Optional[str] = None,
    unit_test: Optional[bool] = None,
    dry_run: bool = False,
) -> BatchResult:
    """Run every endpoint declared by the batch contract files.

    Args:
        tree: The target project.
        feature: Only run endpoints of this feature.
        page: Only run endpoints of this page; requires *feature*.
        unit_test: Override the ``unit_test`` setting of every file.
        dry_run: Render without writing; the aggregator is left alone.

    Raises:
        ConfigurationError: If *page* is given without *feature*.
        ContractgenError: On the first failing file or contract.
    """
    if page and not feature:
        raise ConfigurationError("--page-name requires --feature-name")

    paths = discover_contract_files(tree)
    if not paths:
        output.warning(f"No contract files found under {tree.relative(tree.contracts_dir)}")

    result = BatchResult()
    files: list[ContractFile] = []
    for path in paths:
        output.info(f"Processing {tree.relative(path)}")
        contract_file = load_contract_file(path)
        files.append(contract_file)
        result.files += 1

        for args in contract_file.select(feature, page):
            if unit_test is not None:
                args = args.model_copy(update={"unit_test": unit_test})
            result.artifacts.extend(
                run_contract(
                    args,
                    tree,
                    dry_run=dry_run,
                    include_api=contract_file.settings.api,
                    upsert_endpoint=False,
                )
            )
            result.contracts += 1

    if not dry_run:
        regenerate_endpoints(tree, files)
    return result
