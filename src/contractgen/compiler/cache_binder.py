"""Cache strategy binding for generated calls.

Renders the ``cache_strategy=...`` keyword argument a generated call passes
to the HTTP client, or nothing when the call is not cached.

Two render modes exist. Production code lets a strategy injected by the
caller win over the one declared in the contract::

    cache_strategy=cache_strategy or JustCacheStrategy(ttl=timedelta(minutes=60))

Test code always constructs the declared strategy, so the expectations of a
generated test do not depend on what the caller passes::

    cache_strategy=JustCacheStrategy(ttl=timedelta(minutes=60))
"""

from __future__ import annotations

import enum
from typing import Optional

from contractgen.models import CachePolicy, CacheStrategyKind, EndpointContract


class RenderMode(str, enum.Enum):
    PRODUCTION = "production"
    TEST = "test"


def strategy_construction(policy: CachePolicy) -> str:
    """Constructor call for *policy*.

    ``just_async`` never takes arguments. For the other kinds ``ttl`` is
    passed only when set, and ``keep_expired_cache`` only when ``ttl`` is set
    too; a retention flag without a TTL is dropped.
    """
    name = policy.kind.class_name
    if policy.kind is CacheStrategyKind.JUST_ASYNC:
        return f"{name}()"

    arguments: list[str] = []
    if policy.ttl is not None:
        arguments.append(f"ttl=timedelta(minutes={policy.ttl})")
        if policy.keep_expired_cache is not None:
            arguments.append(f"keep_expired_cache={policy.keep_expired_cache}")
    return f"{name}({', '.join(arguments)})"


def bind_cache_strategy(
    policy: Optional[CachePolicy],
    mode: RenderMode = RenderMode.PRODUCTION,
) -> str:
    """Render the keyword argument fragment for *policy*; ``""`` when absent."""
    if policy is None:
        return ""
    construction = strategy_construction(policy)
    if mode is RenderMode.PRODUCTION:
        return f"cache_strategy=cache_strategy or {construction}"
    return f"cache_strategy={construction}"


def bind_contract(contract: EndpointContract, mode: RenderMode = RenderMode.PRODUCTION) -> str:
    """Like :func:`bind_cache_strategy`, omitted for calls that cannot be cached."""
    if not contract.method.applies_cache_strategy:
        return ""
    return bind_cache_strategy(contract.cache, mode)


def required_imports(policy: Optional[CachePolicy]) -> list[str]:
    """Names the generated module must import for the fragment to resolve."""
    if policy is None:
        return []
    names = [policy.kind.class_name]
    if policy.kind is not CacheStrategyKind.JUST_ASYNC and policy.ttl is not None:
        names.append("timedelta")
    return names
