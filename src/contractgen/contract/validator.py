"""Contract validation: raw operator input in, immutable contract out.

:func:`validate_contract` is the single boundary where operator input is
parsed. It checks, in order:

1. the API name is non-empty and starts like an identifier;
2. the feature name is a non-empty identifier whose directory exists;
3. the page name is a non-empty identifier whose directory exists under
   the feature;
4. the method belongs to the 16-value method set;
5. the return data belongs to the 6-value set;
6. for cacheable methods only, the cache strategy, TTL and retention flag.

The first failing check raises; nothing downstream re-validates. For methods
that cannot be cached (multipart and streaming), the three cache fields are
never read, so an invalid value there is ignored rather than reported.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Optional, TypeVar

from contractgen.config import ProjectTree
from contractgen.exceptions import (
    InvalidBoolean,
    InvalidCacheStrategy,
    InvalidEnumError,
    InvalidMethod,
    InvalidName,
    InvalidReturnData,
    InvalidTtl,
    MissingName,
    UnknownFeature,
    UnknownPage,
)
from contractgen.models import (
    CachePolicy,
    CacheStrategyKind,
    EndpointArguments,
    EndpointContract,
    HttpMethod,
    ReturnData,
)
from contractgen.naming import sanitize_identifier, snake_case

_E = TypeVar("_E", bound=Enum)

_INTEGER_RE = re.compile(r"[+-]?\d+")


def validate_contract(args: EndpointArguments, tree: ProjectTree) -> EndpointContract:
    """Validate *args* against *tree* and build the endpoint contract.

    Args:
        args: Raw operator input for one endpoint.
        tree: The target project; feature and page directories are looked up
            in it.

    Returns:
        The validated, immutable contract.

    Raises:
        MissingName: If the API, feature or page name is empty.
        InvalidName: If the API, apps, feature or page name starts with a
            digit.
        UnknownFeature: If the feature directory does not exist.
        UnknownPage: If the page directory does not exist.
        InvalidMethod: If the method is outside the method set.
        InvalidReturnData: If the return data is outside its set.
        InvalidCacheStrategy: If a cacheable call names an unknown strategy.
        InvalidTtl: If a cacheable call has a non-integer or negative TTL.
        InvalidBoolean: If a cacheable call has a retention flag other than
            ``true`` or ``false``.
    """
    if not snake_case(args.api_name):
        raise MissingName(
            'Api name is empty, add a new api with "contractgen api <api-name> '
            '-f <feature-name> -p <page-name>"'
        )
    _require_identifier(snake_case(args.api_name), "Api")
    api_name = sanitize_identifier(args.api_name)

    apps_name = snake_case(args.apps_name) if args.apps_name else None
    if apps_name:
        _require_identifier(apps_name, "Apps")

    feature_name = snake_case(args.feature_name)
    if not feature_name:
        raise MissingName("Feature name is empty, pass one with --feature-name")
    _require_identifier(feature_name, "Feature")
    feature_dir = tree.feature_dir(feature_name, apps_name)
    if not feature_dir.is_dir():
        raise UnknownFeature(
            f'Feature with "{feature_name}" does not exist at '
            f"{tree.relative(feature_dir)}, create the feature first"
        )

    page_name = snake_case(args.page_name)
    if not page_name:
        raise MissingName("Page name is empty, pass one with --page-name")
    _require_identifier(page_name, "Page")
    page_dir = tree.page_dir(feature_name, page_name, apps_name)
    if not page_dir.is_dir():
        raise UnknownPage(
            f'Page with "{page_name}" does not exist at '
            f"{tree.relative(page_dir)}, create the page first"
        )

    method = _parse_enum(HttpMethod, args.method or HttpMethod.POST.value, InvalidMethod, "method")
    return_data = _parse_enum(
        ReturnData,
        _underscored(args.return_data or ReturnData.MODEL.value),
        InvalidReturnData,
        "return-data",
    )

    cache: Optional[CachePolicy] = None
    if method.applies_cache_strategy:
        cache = _parse_cache_policy(args)

    return EndpointContract(
        api_name=api_name,
        feature_name=feature_name,
        page_name=page_name,
        project_name=tree.project_name,
        apps_name=apps_name,
        method=method,
        return_data=return_data,
        path_url=args.path or None,
        base_url_key=args.base_url,
        header_path=tree.resolve(args.header) if args.header else None,
        body_list=args.body_list and not method.is_multipart,
        response_list=args.response_list,
        cache=cache,
        json2dart=args.json2dart,
        body_sample=tree.resolve(args.body) if args.body else None,
        response_sample=tree.resolve(args.response) if args.response else None,
        unit_test=args.unit_test,
    )


def _require_identifier(name: str, label: str) -> None:
    # Names become module paths and class-name prefixes in the generated code.
    if name[:1].isdigit():
        raise InvalidName(f'{label} name "{name}" must not start with a digit')


def _parse_cache_policy(args: EndpointArguments) -> Optional[CachePolicy]:
    """Parse the cache strategy fields. Only called for cacheable methods."""
    if args.cache_strategy is None:
        kind = None
    else:
        kind = _parse_enum(
            CacheStrategyKind,
            _underscored(args.cache_strategy),
            InvalidCacheStrategy,
            "cache-strategy",
        )
    ttl = _parse_ttl(args.ttl)
    keep_expired_cache = _parse_boolean(args.keep_expired_cache)

    if kind is None:
        return None
    return CachePolicy(kind=kind, ttl=ttl, keep_expired_cache=keep_expired_cache)


def _parse_enum(
    enum_cls: type[_E],
    raw: str,
    error_cls: type[InvalidEnumError],
    field: str,
) -> _E:
    try:
        return enum_cls(raw)
    except ValueError:
        raise error_cls(field, raw, [m.value for m in enum_cls]) from None


def _parse_ttl(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    if not _INTEGER_RE.fullmatch(raw.strip()):
        raise InvalidTtl(
            f'Invalid TTL value "{raw}". Must be a valid integer representing minutes.',
            value=raw,
        )
    ttl = int(raw.strip())
    if ttl < 0:
        raise InvalidTtl("TTL value must be non-negative.", value=raw)
    return ttl


def _parse_boolean(raw: Optional[str]) -> Optional[bool]:
    if raw is None:
        return None
    if raw not in ("true", "false"):
        raise InvalidBoolean(
            f'Invalid keep-expired-cache value "{raw}". Must be "true" or "false".',
            value=raw,
        )
    return raw == "true"


def _underscored(raw: str) -> str:
    """Accept ``body-bytes`` as well as ``body_bytes``."""
    return raw.replace("-", "_")
