"""Canonical Pydantic models shared across all contractgen modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Fixed enumerations** -- the closed value sets operator input is checked
against:
    :class:`HttpMethod`, :class:`ReturnData`, :class:`CacheStrategyKind`,
    and :class:`CallMode`.

**Contract models** -- raw operator input and the validated, immutable
contract built from it:
    :class:`EndpointArguments`, :class:`CachePolicy`, and
    :class:`EndpointContract`.

**Intermediate representation** -- what the compiler resolves from a contract
before anything is rendered:
    :class:`PathParameter`, :class:`UriFactory`, :class:`BaseUrlFactory`,
    :class:`ReturnDescriptor`, :class:`ResolvedTypes`, :class:`ModelField`,
    :class:`ModelSchema`, and :class:`GeneratedArtifact`.

Project-level settings (:class:`ProjectConfig`, :class:`BatchSettings`) are
loaded from YAML and are the only models that tolerate unknown keys.
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from contractgen.naming import pascal_case, snake_case

DEFAULT_BASE_URL_KEY = "BASE_URL"


# --- Enumerations ---


class CallMode(str, enum.Enum):
    """Whether a generated call completes once or yields results over time."""

    SINGLE = "single"
    STREAMING = "streaming"


class HttpMethod(str, enum.Enum):
    """The 16 call methods a contract may declare.

    The set is partitioned along two independent axes: transport mode
    (single-result or streaming) and payload mode (plain or multipart).
    No method is both multipart and streaming.
    """

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    DOWNLOAD = "download"
    MULTIPART = "multipart"
    POST_MULTIPART = "postMultipart"
    PUT_MULTIPART = "putMultipart"
    PATCH_MULTIPART = "patchMultipart"
    GET_SSE = "getSse"
    POST_SSE = "postSse"
    PUT_SSE = "putSse"
    PATCH_SSE = "patchSse"
    DELETE_SSE = "deleteSse"

    @property
    def is_multipart(self) -> bool:
        return "multipart" in self.value.lower()

    @property
    def is_streaming(self) -> bool:
        return self in _STREAMING_METHODS

    @property
    def applies_cache_strategy(self) -> bool:
        """Cache strategies only wrap plain, single-result calls."""
        return not self.is_multipart and not self.is_streaming

    @property
    def call_mode(self) -> CallMode:
        return CallMode.STREAMING if self.is_streaming else CallMode.SINGLE

    @property
    def client_method(self) -> str:
        """Name of the HTTP client coroutine the generated call delegates to.

        The bare ``multipart`` method is an alias of ``postMultipart``; every
        other method maps to its own snake-case name (``getSse`` ->
        ``get_sse``).
        """
        if self is HttpMethod.MULTIPART:
            return "post_multipart"
        return snake_case(self.value)


_STREAMING_METHODS = frozenset(
    {
        HttpMethod.GET_SSE,
        HttpMethod.POST_SSE,
        HttpMethod.PUT_SSE,
        HttpMethod.PATCH_SSE,
        HttpMethod.DELETE_SSE,
    }
)


class ReturnData(str, enum.Enum):
    """What part of the HTTP response a generated call hands back."""

    MODEL = "model"
    HEADER = "header"
    BODY_BYTES = "body_bytes"
    BODY_STRING = "body_string"
    STATUS_CODE = "status_code"
    RAW = "raw"

    @property
    def is_model(self) -> bool:
        return self is ReturnData.MODEL


class CacheStrategyKind(str, enum.Enum):
    """Cache policies understood by the target project's HTTP client.

    ``just_async`` always hits the network and takes no duration; the other
    kinds accept a time-to-live and an expired-entry retention flag.
    """

    ASYNC_OR_CACHE = "async_or_cache"
    CACHE_OR_ASYNC = "cache_or_async"
    JUST_ASYNC = "just_async"
    JUST_CACHE = "just_cache"

    @property
    def class_name(self) -> str:
        """Strategy class name in the generated code (``JustCacheStrategy``)."""
        return f"{pascal_case(self.value)}Strategy"


# --- Contract ---


class EndpointArguments(BaseModel):
    """Raw, unvalidated operator input for one endpoint.

    Built by the CLI from flags or by the batch loader from one YAML entry.
    Enumerations, the TTL and the retention flag stay plain strings here;
    :func:`contractgen.contract.validator.validate_contract` is the only
    place they are parsed.
    """

    api_name: str = ""
    feature_name: str = ""
    page_name: str = ""
    apps_name: Optional[str] = None
    method: Optional[str] = None
    return_data: Optional[str] = None
    path: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL_KEY
    header: Optional[str] = None
    body_list: bool = False
    response_list: bool = False
    cache_strategy: Optional[str] = None
    ttl: Optional[str] = None
    keep_expired_cache: Optional[str] = None
    body: Optional[str] = None
    response: Optional[str] = None
    json2dart: bool = False
    unit_test: bool = False


class CachePolicy(BaseModel):
    """Validated caching policy attached to a cacheable call.

    Example::

        CachePolicy(kind=CacheStrategyKind.JUST_CACHE, ttl=60, keep_expired_cache=True)
    """

    model_config = ConfigDict(frozen=True)

    kind: CacheStrategyKind
    ttl: Optional[int] = Field(default=None, ge=0, description="Time-to-live in minutes")
    keep_expired_cache: Optional[bool] = None


class EndpointContract(BaseModel):
    """The validated, immutable description of one client call to generate.

    Constructed once per endpoint by the contract validator and consumed
    read-only by the path template compiler, the type matrix, the cache
    binder and the emitter. All identifiers are stored in snake case.
    """

    model_config = ConfigDict(frozen=True)

    api_name: str
    feature_name: str
    page_name: str
    project_name: str
    apps_name: Optional[str] = None
    method: HttpMethod = HttpMethod.POST
    return_data: ReturnData = ReturnData.MODEL
    path_url: Optional[str] = None
    base_url_key: str = DEFAULT_BASE_URL_KEY
    header_path: Optional[Path] = None
    body_list: bool = False
    response_list: bool = False
    cache: Optional[CachePolicy] = None
    json2dart: bool = False
    body_sample: Optional[Path] = None
    response_sample: Optional[Path] = None
    unit_test: bool = False

    @property
    def api_class_name(self) -> str:
        return pascal_case(self.api_name)

    @property
    def page_class_name(self) -> str:
        return pascal_case(self.page_name)

    @property
    def project_class_name(self) -> str:
        return pascal_case(self.project_name)

    @property
    def endpoint_name(self) -> str:
        """Name of the endpoint factory, qualified by the apps namespace."""
        if self.apps_name:
            return f"{self.api_name}_{self.apps_name}"
        return self.api_name

    @property
    def call_mode(self) -> CallMode:
        return self.method.call_mode


# --- Intermediate representation ---


class PathParameter(BaseModel):
    """One ``:name`` token of a path template.

    ``name`` is the token as written in the template; ``argument`` is the
    Python identifier the generated factory takes it as.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    argument: str


class UriFactory(BaseModel):
    """Compiled form of one endpoint's path template."""

    model_config = ConfigDict(frozen=True)

    name: str
    template: str
    base_url_key: str = DEFAULT_BASE_URL_KEY
    is_absolute: bool = False
    parameters: tuple[PathParameter, ...] = ()

    @property
    def is_constant(self) -> bool:
        """True when the factory takes no arguments."""
        return not self.parameters

    @property
    def parameter_names(self) -> list[str]:
        return [p.name for p in self.parameters]


class BaseUrlFactory(BaseModel):
    """The shared factory resolving a path against one base-URL key."""

    model_config = ConfigDict(frozen=True)

    key: str

    @property
    def function_name(self) -> str:
        return f"_create_uri_{snake_case(self.key)}"


class ReturnDescriptor(BaseModel):
    """One cell of the type resolution table.

    ``type_name`` and ``render_expression`` are format strings over
    ``{model}`` (the model class name) and ``{value}`` (the expression
    holding the transport payload).
    """

    model_config = ConfigDict(frozen=True)

    type_name: str
    list_sensitive: bool = False
    render_expression: str = "{value}"
    payload_expression: str = "{value}"


class ResolvedTypes(BaseModel):
    """Every type name and statement the renderers need for one contract."""

    model_config = ConfigDict(frozen=True)

    call_mode: CallMode
    body_type: str
    response_type: str
    entity_type: str
    return_type: str
    return_statement: str
    entity_expression: str
    needs_json: bool = False


class ModelField(BaseModel):
    """A field of a generated body, response or entity model."""

    model_config = ConfigDict(frozen=True)

    name: str
    wire_name: str
    scalar_type: str = "str"
    model_name: Optional[str] = None
    is_list: bool = False

    @property
    def is_model(self) -> bool:
        return self.model_name is not None

    @property
    def has_alias(self) -> bool:
        return self.name != self.wire_name

    def type_for(self, suffix: str) -> str:
        """Annotation of this field in the model family named by *suffix*."""
        inner = f"{self.model_name}{suffix}" if self.model_name else self.scalar_type
        return f"list[{inner}]" if self.is_list else inner


class ModelSchema(BaseModel):
    """A model inferred from a JSON sample, with its nested models flattened."""

    model_config = ConfigDict(frozen=True)

    name: str
    fields: tuple[ModelField, ...] = ()
    nested: tuple[ModelSchema, ...] = ()

    def class_name(self, suffix: str) -> str:
        return f"{self.name}{suffix}"

    @property
    def uses_datetime(self) -> bool:
        schemas = (self, *self.nested)
        return any(f.scalar_type == "datetime" for s in schemas for f in s.fields)

    @property
    def uses_any(self) -> bool:
        schemas = (self, *self.nested)
        return any(f.scalar_type == "Any" for s in schemas for f in s.fields)


class GeneratedArtifact(BaseModel):
    """A fully rendered file, ready to be written under the project root."""

    model_config = ConfigDict(frozen=True)

    kind: str
    path: Path
    content: str
    exists: bool = False

    @property
    def action(self) -> str:
        return "update" if self.exists else "create"


# --- Project settings ---


class ProjectConfig(BaseModel):
    """Settings read from ``contractgen.yaml`` at the project root."""

    model_config = ConfigDict(extra="allow")

    project_name: str
    contracts_dir: str = "contracts"
    endpoints_dir: str = "core/data/remote"


class BatchSettings(BaseModel):
    """The ``contractgen:`` block of a batch contract file."""

    model_config = ConfigDict(extra="allow")

    environment_url: list[str] = Field(default_factory=lambda: [DEFAULT_BASE_URL_KEY])
    api: bool = True
    unit_test: bool = False
