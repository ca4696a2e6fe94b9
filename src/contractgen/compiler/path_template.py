"""Path template compilation.

A path template is either relative (``/users/:id/orders/:orderId``), resolved
against a base URL read from the environment at runtime, or absolute (any
``scheme://`` prefix such as ``https://cdn.example.com/x``), used as is.
``:name`` tokens become string arguments of the generated factory, in
first-occurrence order; a token that appears twice is one argument used at
both places.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

from contractgen.models import DEFAULT_BASE_URL_KEY, BaseUrlFactory, PathParameter, UriFactory
from contractgen.naming import sanitize_identifier

_PARAM_RE = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")
_ABSOLUTE_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")


def is_absolute(template: str) -> bool:
    return bool(_ABSOLUTE_RE.match(template))


def extract_parameters(template: str) -> list[str]:
    """Return the distinct ``:name`` tokens of *template* in first-occurrence order.

    Example::

        >>> extract_parameters("/users/:id/orders/:orderId/:id")
        ['id', 'orderId']
    """
    seen: dict[str, None] = {}
    for match in _PARAM_RE.finditer(template):
        seen.setdefault(match.group(1), None)
    return list(seen)


def compile_path(
    name: str,
    template: Optional[str],
    base_url_key: str = DEFAULT_BASE_URL_KEY,
) -> UriFactory:
    """Compile *template* into the URI factory named *name*.

    An empty template compiles to the bare base URL. Two tokens whose
    identifiers collide after sanitising (``:order_id`` and ``:orderId``)
    get distinct arguments.
    """
    template = template or ""
    parameters: list[PathParameter] = []
    taken: set[str] = set()
    for token in extract_parameters(template):
        argument = sanitize_identifier(token, fallback="param")
        while argument in taken:
            argument = f"{argument}_"
        taken.add(argument)
        parameters.append(PathParameter(name=token, argument=argument))

    return UriFactory(
        name=name,
        template=template,
        base_url_key=base_url_key,
        is_absolute=is_absolute(template),
        parameters=tuple(parameters),
    )


def substitute(factory: UriFactory) -> str:
    """Render the template as a Python string literal.

    Constant templates render as a plain literal; parameterised ones as an
    f-string with every occurrence of a token replaced by its argument.

    Example::

        >>> substitute(compile_path("order", "/users/:id/orders/:orderId"))
        'f"/users/{id}/orders/{order_id}"'
    """
    escaped = factory.template.replace("\\", "\\\\").replace('"', '\\"')
    if factory.is_constant:
        return f'"{escaped}"'

    arguments = {p.name: p.argument for p in factory.parameters}
    parts: list[str] = []
    position = 0
    for match in _PARAM_RE.finditer(escaped):
        parts.append(_escape_braces(escaped[position : match.start()]))
        parts.append(f"{{{arguments[match.group(1)]}}}")
        position = match.end()
    parts.append(_escape_braces(escaped[position:]))
    return 'f"' + "".join(parts) + '"'


def base_url_factories(keys: Iterable[str]) -> list[BaseUrlFactory]:
    """One factory per distinct key, in first-seen order."""
    seen: dict[str, BaseUrlFactory] = {}
    for key in keys:
        if key not in seen:
            seen[key] = BaseUrlFactory(key=key)
    return list(seen.values())


def _escape_braces(text: str) -> str:
    return text.replace("{", "{{").replace("}", "}}")
