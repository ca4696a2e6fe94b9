"""Canonical case conversion for endpoint, feature, page and project names.

Operator input arrives in whatever case the operator typed (``getUser``,
``get-user``, ``Get User``). Every identifier that reaches a generated file
goes through one of the helpers below so that file names, function names and
class names derived from the same input always agree.
"""

from __future__ import annotations

import keyword
import re

# Matches any character that is not alphanumeric or underscore.
_INVALID_IDENT_RE = re.compile(r"[^a-zA-Z0-9_]")


def _words(name: str) -> list[str]:
    """Split *name* into lowercase words on case boundaries and separators."""
    result = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    result = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", result)
    result = _INVALID_IDENT_RE.sub("_", result.replace("-", "_").replace(".", "_"))
    return [w for w in result.lower().split("_") if w]


def snake_case(name: str) -> str:
    """Convert *name* to ``snake_case`` (``getUserById`` -> ``get_user_by_id``)."""
    return "_".join(_words(name))


def pascal_case(name: str) -> str:
    """Convert *name* to ``PascalCase`` (``get_user`` -> ``GetUser``)."""
    return "".join(w.capitalize() for w in _words(name))


def sanitize_identifier(name: str, fallback: str = "value") -> str:
    """Convert an arbitrary wire name to a valid Python identifier.

    Applies the following transformations in order:

    1. CamelCase boundaries are split with underscores and the result is
       lowercased (``orderId`` becomes ``order_id``).
    2. Separators and invalid characters become single underscores.
    3. An empty result defaults to *fallback*.
    4. A leading digit gets an underscore prefix.
    5. Python keywords get a trailing underscore per PEP 8 convention.

    Args:
        name: The raw name (a path parameter, a JSON key...).
        fallback: Identifier used when nothing usable remains.

    Returns:
        A valid Python identifier.

    Example::

        >>> sanitize_identifier("orderId")
        'order_id'
        >>> sanitize_identifier("class")
        'class_'
        >>> sanitize_identifier("2fa-code")
        '_2fa_code'
    """
    result = snake_case(name)
    if not result:
        result = fallback
    if result[0].isdigit():
        result = f"_{result}"
    if keyword.iskeyword(result):
        result = f"{result}_"
    return result
