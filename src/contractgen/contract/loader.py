"""Discover batch contract files and convert them into validator input.

A batch contract file is a YAML document keyed by feature, then page, then
endpoint name::

    contractgen:
      environment_url: [BASE_URL, CDN_URL]
      unit_test: true

    auth:
      login:
        login:
          method: post
          path: /login
          body: contracts/json/login_body.json
          response: contracts/json/login_response.json
        profile:
          method: get
          path: /users/:id
          cache-strategy: just_cache
          ttl: 60

The ``contractgen`` key holds :class:`~contractgen.models.BatchSettings`;
every other top-level key is a feature. A file named ``<apps>_contract.yaml``
binds its endpoints to the apps namespace ``<apps>``.

The YAML maps are loosely typed (``ttl: 60`` is an int, ``keep-expired-cache:
true`` a bool). :func:`load_contract_file` converts them into
:class:`~contractgen.models.EndpointArguments` whose scalar fields are plain
strings, so the validator parses every value exactly once.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from contractgen.config import ProjectTree, load_yaml_mapping
from contractgen.exceptions import ProjectConfigError
from contractgen.models import BatchSettings, EndpointArguments

CONTRACT_GLOB = "*contract.yaml"
SETTINGS_KEY = "contractgen"

# Fields the validator parses itself; YAML scalars are handed over as text.
_TEXT_FIELDS = frozenset(
    {
        "method",
        "return_data",
        "path",
        "base_url",
        "header",
        "cache_strategy",
        "ttl",
        "keep_expired_cache",
        "body",
        "response",
    }
)


class ContractFile(BaseModel):
    """One parsed batch contract file."""

    model_config = ConfigDict(frozen=True)

    path: Path
    apps_name: Optional[str] = None
    settings: BatchSettings
    endpoints: tuple[EndpointArguments, ...] = ()

    def select(
        self, feature: Optional[str] = None, page: Optional[str] = None
    ) -> list[EndpointArguments]:
        """Return the endpoints of *feature* (and *page*), or all of them."""
        return [
            e
            for e in self.endpoints
            if (feature is None or e.feature_name == feature)
            and (page is None or e.page_name == page)
        ]


def discover_contract_files(tree: ProjectTree) -> list[Path]:
    """Return every ``*contract.yaml`` under the contracts directory.

    The order is sorted by path so repeated runs see the files in the same
    order.
    """
    directory = tree.contracts_dir
    if not directory.is_dir():
        return []
    return sorted(p for p in directory.rglob(CONTRACT_GLOB) if p.is_file())


def apps_name_for(path: Path) -> Optional[str]:
    """Return the apps namespace encoded in a contract file name, if any.

    ``shop_contract.yaml`` -> ``"shop"``; ``contract.yaml`` -> ``None``.
    """
    prefix = path.name[: -len("contract.yaml")]
    if prefix.endswith("_") and len(prefix) > 1:
        return prefix[:-1]
    return None


def load_contract_file(path: Path) -> ContractFile:
    """Parse a batch contract file.

    Raises:
        IoError: If the file cannot be read.
        ProjectConfigError: If the YAML does not have the feature, page,
            endpoint shape, or a field has the wrong type.
    """
    data = load_yaml_mapping(path)
    apps_name = apps_name_for(path)

    try:
        settings = BatchSettings.model_validate(data.get(SETTINGS_KEY) or {})
    except ValidationError as exc:
        raise ProjectConfigError(f"Invalid '{SETTINGS_KEY}' block in {path}: {exc}") from exc

    endpoints: list[EndpointArguments] = []
    for feature, pages in data.items():
        if feature == SETTINGS_KEY:
            continue
        for page, apis in _mapping(pages, path, str(feature)).items():
            for api, fields in _mapping(apis, path, f"{feature}.{page}").items():
                location = f"{feature}.{page}.{api}"
                raw = _normalise_fields(_mapping(fields, path, location))
                raw.update(
                    api_name=str(api),
                    feature_name=str(feature),
                    page_name=str(page),
                    apps_name=apps_name,
                    json2dart=True,
                    unit_test=settings.unit_test,
                )
                try:
                    endpoints.append(EndpointArguments.model_validate(raw))
                except ValidationError as exc:
                    raise ProjectConfigError(f"Invalid endpoint {location} in {path}: {exc}") from exc

    return ContractFile(
        path=path,
        apps_name=apps_name,
        settings=settings,
        endpoints=tuple(endpoints),
    )


def _mapping(value: Any, path: Path, location: str) -> dict[Any, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ProjectConfigError(
            f"Expected a mapping at {location} in {path}, got {type(value).__name__}"
        )
    return value


def _normalise_fields(fields: dict[Any, Any]) -> dict[str, Any]:
    """Map ``kebab-case`` keys to field names and YAML scalars to text."""
    result: dict[str, Any] = {}
    for key, value in fields.items():
        name = str(key).replace("-", "_")
        if name in _TEXT_FIELDS and value is not None:
            if isinstance(value, bool):
                value = "true" if value else "false"
            else:
                value = str(value)
        result[name] = value
    return result
