"""Jinja2 environment for the generated-source templates.

Templates live in ``contractgen/templates/`` and render Python source, so
autoescaping is off and undefined variables fail loudly instead of rendering
as empty strings.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
"""Path to the Jinja2 template directory (``contractgen/templates/``)."""


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=False,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def render(template_name: str, **context: Any) -> str:
    """Render *template_name* with *context*."""
    return get_environment().get_template(template_name).render(**context)
