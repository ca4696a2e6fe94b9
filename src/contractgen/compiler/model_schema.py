"""Model inference from JSON samples.

With ``--json2dart`` (the batch mode) the body and response models of an
endpoint are inferred from JSON sample files instead of being written as
placeholders. A sample object becomes one model; nested objects become nested
models named ``<Parent><Key>`` and lists take the type of their first element.

Example::

    {"id": 1, "name": "Ada", "joined": "2024-05-01T10:00:00Z",
     "address": {"city": "London"}, "tags": ["admin"]}

infers ``id: int``, ``name: str``, ``joined: datetime``,
``address: <Stem>Address<Suffix>`` and ``tags: list[str]``.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Optional

from contractgen.config import ProjectTree
from contractgen.exceptions import IoError, ProjectConfigError
from contractgen.models import EndpointContract, ModelField, ModelSchema
from contractgen.naming import pascal_case, sanitize_identifier

_ISO_DATETIME_RE = re.compile(
    r"\d{4}-\d{2}-\d{2}"
    r"([T ]\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?)?"
)


def infer_schema(name: str, sample: Any) -> ModelSchema:
    """Infer the model *name* from a decoded JSON *sample*.

    A top-level list is described by its first element.
    """
    if isinstance(sample, list):
        sample = sample[0] if sample else {}
    if not isinstance(sample, dict):
        return ModelSchema(name=name)
    fields, nested = _infer_fields(name, sample)
    return ModelSchema(name=name, fields=tuple(fields), nested=tuple(nested))


def _infer_fields(name: str, sample: dict[str, Any]) -> tuple[list[ModelField], list[ModelSchema]]:
    fields: list[ModelField] = []
    nested: list[ModelSchema] = []
    taken: set[str] = set()

    for key, value in sample.items():
        wire_name = str(key)
        field_name = sanitize_identifier(wire_name, fallback="field")
        while field_name in taken:
            field_name = f"{field_name}_"
        taken.add(field_name)

        is_list = isinstance(value, list)
        element = (value[0] if value else None) if is_list else value

        if isinstance(element, dict):
            child = infer_schema(f"{name}{pascal_case(wire_name)}", element)
            nested.append(ModelSchema(name=child.name, fields=child.fields))
            nested.extend(child.nested)
            fields.append(
                ModelField(
                    name=field_name,
                    wire_name=wire_name,
                    model_name=child.name,
                    is_list=is_list,
                )
            )
        else:
            fields.append(
                ModelField(
                    name=field_name,
                    wire_name=wire_name,
                    scalar_type=_scalar_type(element),
                    is_list=is_list,
                )
            )
    return fields, nested


def _scalar_type(value: Any) -> str:
    # bool is checked first: it is a subclass of int.
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "datetime" if _ISO_DATETIME_RE.fullmatch(value) else "str"
    return "Any"


def load_sample(path: Path, tree: ProjectTree) -> Any:
    """Read and decode a JSON sample file.

    Raises:
        IoError: If the file is missing or unreadable.
        ProjectConfigError: If the file is not valid JSON.
    """
    if not path.is_file():
        raise IoError(f"JSON sample not found: {tree.relative(path)}")
    try:
        return json.loads(tree.read_text(path))
    except json.JSONDecodeError as exc:
        raise ProjectConfigError(f"Invalid JSON in {tree.relative(path)}: {exc}") from exc


def placeholder_body(stem: str) -> ModelSchema:
    return ModelSchema(
        name=stem,
        fields=(
            ModelField(name="email", wire_name="email"),
            ModelField(name="password", wire_name="password"),
        ),
    )


def placeholder_response(stem: str) -> ModelSchema:
    return ModelSchema(name=stem, fields=(ModelField(name="token", wire_name="token"),))


def body_schema(contract: EndpointContract, tree: ProjectTree) -> ModelSchema:
    """Schema of the request body model of *contract*.

    Without JSON samples a placeholder with ``email`` and ``password`` is
    used. In sample mode an endpoint without a ``body`` sample gets an empty
    body model.
    """
    stem = contract.api_class_name
    if not contract.json2dart:
        return placeholder_body(stem)
    return _from_sample(stem, contract.body_sample, tree)


def response_schema(contract: EndpointContract, tree: ProjectTree) -> Optional[ModelSchema]:
    """Schema of the response model, or ``None`` unless the call returns a model."""
    if not contract.return_data.is_model:
        return None
    stem = contract.api_class_name
    if not contract.json2dart:
        return placeholder_response(stem)
    return _from_sample(stem, contract.response_sample, tree)


def _from_sample(stem: str, path: Optional[Path], tree: ProjectTree) -> ModelSchema:
    if path is None:
        return ModelSchema(name=stem)
    return infer_schema(stem, load_sample(path, tree))
