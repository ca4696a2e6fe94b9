"""Project configuration, explicit project tree, and atomic file writes.

This module handles every file-system concern of contractgen:

* **Project root** -- an explicit :class:`ProjectTree` value created once by
  the CLI and threaded through every component. Nothing in the package reads
  the process working directory on its own.
* **Project config** -- ``contractgen.yaml`` at the project root, parsed into
  a :class:`~contractgen.models.ProjectConfig` by :func:`load_project_config`.
* **Layout** -- where features, pages, generated tests and the endpoints
  aggregator live inside the target project.
* **Data directory** -- XDG compliant location for crash logs
  (:func:`get_data_dir`).

All writes into the target project use an atomic temp-file-then-rename
strategy (:func:`_atomic_write`) so an interrupted run never leaves a
half-written module behind.
"""

from __future__ import annotations

import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from contractgen.exceptions import IoError, ProjectConfigError
from contractgen.models import ProjectConfig
from contractgen.naming import snake_case

_APP_NAME = "contractgen"
PROJECT_CONFIG_FILENAME = "contractgen.yaml"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/contractgen/`` (default
    ``~/.local/share/contractgen/``). On macOS/Windows: ``~/.contractgen/logs/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}" / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    On success the temp file is renamed over *path*; on any failure the temp
    file is cleaned up.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- YAML ---


def load_yaml_mapping(path: Path) -> dict[str, Any]:
    """Load a YAML file whose top level must be a mapping.

    An empty file yields an empty dict.

    Raises:
        IoError: If the file cannot be read.
        ProjectConfigError: If the content is not valid YAML or not a mapping.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise IoError(f"Failed to read {path}: {exc}") from exc

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ProjectConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ProjectConfigError(
            f"{path} must contain a YAML mapping (got {type(data).__name__})"
        )
    return data


# --- Project config ---


def load_project_config(root: Path) -> ProjectConfig:
    """Load ``contractgen.yaml`` from *root*.

    The project name is taken from ``project_name``, then ``name``, then the
    root directory name, so a project without a config file still works.

    Raises:
        ProjectConfigError: If the file exists but is invalid, or the
            project name does not start with a letter.
    """
    path = root / PROJECT_CONFIG_FILENAME
    data: dict[str, Any] = load_yaml_mapping(path) if path.is_file() else {}

    if not data.get("project_name"):
        data["project_name"] = data.get("name") or root.resolve().name

    try:
        config = ProjectConfig.model_validate(data)
    except ValidationError as exc:
        raise ProjectConfigError(f"Invalid project config at {path}: {exc}") from exc

    name = snake_case(config.project_name)
    if not name or name[0].isdigit():
        raise ProjectConfigError(
            f'Project name "{config.project_name}" must start with a letter; '
            f"set project_name in {PROJECT_CONFIG_FILENAME}"
        )
    return config


class ProjectTree:
    """The target project, rooted at an explicit directory.

    Every path the generator reads or writes is derived from this object.

    Args:
        root: Project root directory.
        config: Parsed project configuration.

    Example::

        tree = ProjectTree.load(Path("~/work/shop").expanduser())
        tree.page_dir("auth", "login")   # .../features/auth/pages/login
    """

    def __init__(self, root: Path, config: ProjectConfig) -> None:
        self.root = root
        self.config = config

    @classmethod
    def load(cls, root: Path) -> ProjectTree:
        root = root.expanduser().resolve()
        return cls(root, load_project_config(root))

    @property
    def project_name(self) -> str:
        return snake_case(self.config.project_name)

    # --- Layout ---

    def feature_dir(self, feature: str, apps: Optional[str] = None) -> Path:
        if apps:
            return self.root / "apps" / apps / "features" / feature
        return self.root / "features" / feature

    def page_dir(self, feature: str, page: str, apps: Optional[str] = None) -> Path:
        return self.feature_dir(feature, apps) / "pages" / page

    def test_dir(self, feature: str, page: str, apps: Optional[str] = None) -> Path:
        return self.feature_dir(feature, apps) / "tests" / page

    @property
    def contracts_dir(self) -> Path:
        return self.root / self.config.contracts_dir

    @property
    def endpoints_dir(self) -> Path:
        return self.root / self.config.endpoints_dir

    @property
    def endpoints_file(self) -> Path:
        return self.endpoints_dir / f"{self.project_name}_endpoints.py"

    def resolve(self, path: str | Path) -> Path:
        """Resolve an operator-supplied path against the project root."""
        candidate = Path(path).expanduser()
        return candidate if candidate.is_absolute() else self.root / candidate

    def relative(self, path: Path) -> Path:
        """Return *path* relative to the root when it lies inside it."""
        try:
            return path.relative_to(self.root)
        except ValueError:
            return path

    # --- File access ---

    def read_text(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise IoError(f"Failed to read {self.relative(path)}: {exc}") from exc

    def write_text(self, path: Path, content: str) -> None:
        try:
            _atomic_write(path, content)
        except OSError as exc:
            raise IoError(f"Failed to write {self.relative(path)}: {exc}") from exc

    def delete(self, path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise IoError(f"Failed to delete {self.relative(path)}: {exc}") from exc
