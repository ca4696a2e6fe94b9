"""Shared test fixtures for contractgen.

Provides a temporary target project, output state management, and a CLI
runner. These fixtures are automatically discovered by pytest and available
to all test modules without explicit imports.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from contractgen.config import ProjectTree
from contractgen.models import EndpointArguments
from contractgen.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


@pytest.fixture
def plain_output(capsys: pytest.CaptureFixture[str]) -> OutputManager:
    """Install a plain-text, uncoloured output manager.

    Requests ``capsys`` first so the manager binds to the captured streams.
    """
    manager = OutputManager(format=OutputFormat.PLAIN, no_color=True)
    set_output(manager)
    return manager


# ---------------------------------------------------------------------------
# Target project
# ---------------------------------------------------------------------------


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """A target project named ``shop`` with the ``auth/login`` page."""
    root = tmp_path / "shop"
    (root / "features" / "auth" / "pages" / "login").mkdir(parents=True)
    (root / "contractgen.yaml").write_text("project_name: shop\n")
    return root


@pytest.fixture
def tree(project_root: Path) -> ProjectTree:
    return ProjectTree.load(project_root)


@pytest.fixture
def page_dir(tree: ProjectTree) -> Path:
    return tree.page_dir("auth", "login")


@pytest.fixture
def login_args() -> EndpointArguments:
    """Raw input for ``POST /login`` in ``auth/login``."""
    return EndpointArguments(
        api_name="login",
        feature_name="auth",
        page_name="login",
        method="post",
        path="/login",
    )


@pytest.fixture
def cli_runner():  # noqa: ANN201
    """Provide a Typer CliRunner for invoking CLI commands.

    Returns a CliRunner instance that captures stdout/stderr and
    exit codes.
    """
    from typer.testing import CliRunner

    return CliRunner()
