"""CLI sub-commands for contractgen.

* :mod:`~contractgen.commands.api` -- generate one endpoint from flags.
* :mod:`~contractgen.commands.batch` -- generate every endpoint declared in
  the project's contract files.
* :mod:`~contractgen.commands.endpoints` -- rebuild the endpoints aggregator.
* :mod:`~contractgen.commands.inspect` -- show what a contract resolves to
  without touching the project.

Each module exports a plain callback function registered directly on the
root app. Commands report a
:class:`~contractgen.exceptions.ContractgenError` through
:func:`~contractgen.output.error` and exit with the error's code.
"""

from __future__ import annotations

from pathlib import Path

import typer

from contractgen.config import ProjectTree
from contractgen.exceptions import ContractgenError
from contractgen.output import error


def project_tree(ctx: typer.Context) -> ProjectTree:
    """Load the project rooted at the ``--root`` of the invocation."""
    root = ctx.obj.get("root") if ctx.obj else None
    return ProjectTree.load(Path(root) if root is not None else Path.cwd())


def fail(exc: ContractgenError) -> typer.Exit:
    """Report *exc* and return the exit to raise."""
    error(str(exc))
    return typer.Exit(code=exc.exit_code)
