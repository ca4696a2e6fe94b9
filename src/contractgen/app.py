"""The ``contractgen`` command line.

``contractgen api`` generates one endpoint from flags, ``contractgen batch``
every endpoint of the project's contract files, ``contractgen endpoints``
rebuilds the endpoints aggregator and ``contractgen inspect`` shows what a
contract resolves to.

The root callback installs the process-wide
:class:`~contractgen.output.OutputManager` and records the project root on
the context. :func:`main` is the console-script entry point: a
:class:`~contractgen.exceptions.ContractgenError` exits with its own code,
anything else leaves a traceback in the data directory and exits 1.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer

from contractgen import __version__
from contractgen.exceptions import ContractgenError
from contractgen.exit_codes import EXIT_GENERIC_FAILURE

EXIT_INTERRUPTED = 130

app = typer.Typer(
    name="contractgen",
    help="Generate layered API client code from endpoint contracts.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

from contractgen.commands.api import api_command  # noqa: E402
from contractgen.commands.batch import batch_command  # noqa: E402
from contractgen.commands.endpoints import endpoints_command  # noqa: E402
from contractgen.commands.inspect import inspect_command  # noqa: E402

app.command("api")(api_command)
app.command("batch")(batch_command)
app.command("endpoints")(endpoints_command)
app.command("inspect")(inspect_command)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"contractgen {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit."
    ),
    root: Optional[Path] = typer.Option(
        None,
        "--root",
        "-C",
        envvar="CONTRACTGEN_ROOT",
        help="Project root (defaults to the current directory).",
    ),
    json_output: bool = typer.Option(False, "--json", help="Print reports and plans as JSON."),
    plain_output: bool = typer.Option(False, "--plain", help="Print reports and plans as plain text."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print warnings and errors."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print debug traces."),
) -> None:
    """Set up output and the project root for the sub-command.

    ``--json`` wins over ``--plain``; without either the format follows
    the terminal.
    """
    from contractgen.output import OutputFormat, OutputManager, set_output

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = OutputFormat.AUTO
    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["root"] = root if root is not None else Path.cwd()


def _cancel() -> None:
    sys.stderr.write("\nCancelled.\n")
    sys.exit(EXIT_INTERRUPTED)


def _setup_signal_handlers() -> None:
    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        _cancel()

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> Path:
    """Save the traceback of *exc* under the data directory."""
    from contractgen.config import get_data_dir

    log_path = get_data_dir() / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    log_path.write_text("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    return log_path


def main() -> None:
    """Console-script entry point."""
    from contractgen.output import error

    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        _cancel()
    except ContractgenError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        error(f"Unexpected error. Debug log: {_write_crash_log(exc)}")
        sys.exit(EXIT_GENERIC_FAILURE)
