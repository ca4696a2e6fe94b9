"""Console output for contractgen.

Generated code never reaches the terminal, so stdout carries only what a
caller may want to pipe: dry-run plans and ``inspect`` reports. Everything
else (paths of written files, warnings, errors, next-step hints, debug
traces) goes to stderr.

Formatting depends on the destination. An interactive stdout gets Rich
tables and highlighted snippets; a pipe gets tab-separated text, or JSON
with ``--json``. ``NO_COLOR``, ``TERM=dumb`` and ``--no-color`` turn colour
off everywhere.

The root command builds one :class:`OutputManager` and installs it with
:func:`set_output`. Library code reports through the module-level helpers
(:func:`warning`, :func:`generated`, ...), which delegate to that instance.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """Output formats. ``AUTO`` becomes ``RICH`` on a colour TTY, else ``PLAIN``."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Routes data to stdout and diagnostics to stderr.

    Args:
        format: Requested format; ``AUTO`` is resolved against the terminal.
        no_color: Print diagnostics without Rich markup.
        quiet: Drop ``info``, ``success``, ``generated`` and ``suggest``.
            Warnings and errors are always printed.
        verbose: Print ``debug`` messages.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            interactive = _is_tty() and not self._no_color
            format = OutputFormat.RICH if interactive else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # --- stdout ---

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def print_json(self, data: Any) -> None:
        self.print_data(json.dumps(data, indent=2, ensure_ascii=False, default=str))

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows as a Rich table, a JSON array of objects, or TSV.

        The title is shown in Rich mode only.
        """
        if self._format == OutputFormat.JSON:
            self.print_json([dict(zip(headers, row)) for row in rows])
            return
        if self._format == OutputFormat.PLAIN:
            for line in [headers, *rows]:
                self.print_data("\t".join(line))
            return

        table = Table(title=title, show_header=True, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    def print_code(self, code: str, title: Optional[str] = None) -> None:
        """Print a Python snippet, highlighted in Rich mode.

        Outside Rich mode the title becomes a ``# title`` comment line.
        """
        if self._format != OutputFormat.RICH:
            if title:
                self.print_data(f"# {title}")
            self.print_data(code)
            return
        if title:
            self._stdout.print(f"[bold]{title}[/bold]")
        self._stdout.print(Syntax(code, "python", theme="monokai", word_wrap=True))

    # --- stderr ---

    def _diagnose(self, plain: str, markup: str, essential: bool = False, highlight: bool = True) -> None:
        if self._quiet and not essential:
            return
        if self._no_color:
            print(plain, file=sys.stderr, flush=True)
        else:
            self._stderr.print(markup, highlight=highlight)

    def info(self, message: str) -> None:
        self._diagnose(message, escape(message))

    def success(self, message: str) -> None:
        self._diagnose(message, f"[green]{escape(message)}[/green]")

    def generated(self, path: str) -> None:
        """Report a file written under the project root."""
        self._diagnose(f"generated {path}", f"[green]generated[/green] {escape(path)}", highlight=False)

    def suggest(self, message: str) -> None:
        self._diagnose(f"→ {message}", f"[dim]→ {escape(message)}[/dim]")

    def warning(self, message: str) -> None:
        self._diagnose(f"Warning: {message}", f"[yellow]Warning:[/yellow] {escape(message)}", essential=True)

    def error(self, message: str) -> None:
        self._diagnose(f"Error: {message}", f"[bold red]Error:[/bold red] {escape(message)}", essential=True)

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnose(f"[debug] {message}", f"[dim]\\[debug] {escape(message)}[/dim]", essential=True)


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (to anything) or ``TERM`` is ``dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# --- Process-wide instance ---

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed manager, creating a default one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager; tests call this between runs."""
    global _output
    _output = None


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def generated(path: str) -> None:
    get_output().generated(path)


def suggest(message: str) -> None:
    get_output().suggest(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
