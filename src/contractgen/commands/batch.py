"""Batch command -- generate every endpoint declared in the contract files."""

from __future__ import annotations

from typing import Optional

import typer

from contractgen.exceptions import ContractgenError
from contractgen.output import success


def batch_command(
    ctx: typer.Context,
    feature_name: Optional[str] = typer.Option(
        None, "--feature-name", "-f", help="Only generate endpoints of this feature."
    ),
    page_name: Optional[str] = typer.Option(
        None, "--page-name", "-p", help="Only generate endpoints of this page (needs --feature-name)."
    ),
    unit_test: Optional[bool] = typer.Option(
        None,
        "--unit-test/--no-unit-test",
        help="Override the unit_test setting of every contract file.",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="List the files without writing them."),
) -> None:
    """Generate every endpoint of every ``*contract.yaml`` file.

    Files are processed in path order and the run stops at the first
    error. The endpoints module is rebuilt once all files are done.

    Example::

        contractgen batch
        contractgen batch -f auth -p login --unit-test
    """
    from contractgen.commands import fail, project_tree
    from contractgen.orchestrator import print_plan, run_batch

    try:
        tree = project_tree(ctx)
        result = run_batch(
            tree,
            feature=feature_name,
            page=page_name,
            unit_test=unit_test,
            dry_run=dry_run,
        )
    except ContractgenError as exc:
        raise fail(exc) from None

    if dry_run:
        print_plan(tree, result.artifacts)
        return
    success(f"Generated {result.contracts} endpoints from {result.files} contract files")
