"""Endpoints command -- rebuild the endpoints aggregator."""

from __future__ import annotations

import typer

from contractgen.exceptions import ContractgenError
from contractgen.output import success


def endpoints_command(ctx: typer.Context) -> None:
    """Rebuild ``<project>_endpoints.py`` from all contract files.

    Every ``*_endpoints.py`` in the endpoints directory is deleted first,
    so the result depends on the contract files only.
    """
    from contractgen.commands import fail, project_tree
    from contractgen.emitter.endpoints import regenerate_endpoints

    try:
        tree = project_tree(ctx)
        path = regenerate_endpoints(tree)
    except ContractgenError as exc:
        raise fail(exc) from None

    success(f"Endpoints written to {tree.relative(path)}")
