"""Tests for contractgen.compiler.cache_binder -- cache strategy fragments."""

from __future__ import annotations

import pytest

from contractgen.compiler.cache_binder import (
    RenderMode,
    bind_cache_strategy,
    bind_contract,
    required_imports,
    strategy_construction,
)
from contractgen.models import CachePolicy, CacheStrategyKind, EndpointContract, HttpMethod


def _contract(method: HttpMethod, policy: CachePolicy | None) -> EndpointContract:
    return EndpointContract(
        api_name="profile",
        feature_name="auth",
        page_name="login",
        project_name="shop",
        method=method,
        cache=policy,
    )


class TestConstruction:
    def test_ttl_and_retention(self) -> None:
        policy = CachePolicy(kind=CacheStrategyKind.JUST_CACHE, ttl=60, keep_expired_cache=True)
        assert strategy_construction(policy) == (
            "JustCacheStrategy(ttl=timedelta(minutes=60), keep_expired_cache=True)"
        )

    def test_ttl_only(self) -> None:
        policy = CachePolicy(kind=CacheStrategyKind.CACHE_OR_ASYNC, ttl=5)
        assert strategy_construction(policy) == "CacheOrAsyncStrategy(ttl=timedelta(minutes=5))"

    def test_retention_without_ttl_is_dropped(self) -> None:
        policy = CachePolicy(kind=CacheStrategyKind.ASYNC_OR_CACHE, keep_expired_cache=False)
        assert strategy_construction(policy) == "AsyncOrCacheStrategy()"

    def test_just_async_takes_no_arguments(self) -> None:
        policy = CachePolicy(kind=CacheStrategyKind.JUST_ASYNC, ttl=60, keep_expired_cache=True)
        assert strategy_construction(policy) == "JustAsyncStrategy()"

    def test_zero_ttl(self) -> None:
        policy = CachePolicy(kind=CacheStrategyKind.JUST_CACHE, ttl=0)
        assert strategy_construction(policy) == "JustCacheStrategy(ttl=timedelta(minutes=0))"


class TestBind:
    def test_absent_policy(self) -> None:
        assert bind_cache_strategy(None) == ""
        assert bind_cache_strategy(None, RenderMode.TEST) == ""

    def test_production_lets_injected_strategy_win(self) -> None:
        policy = CachePolicy(kind=CacheStrategyKind.JUST_ASYNC)
        assert bind_cache_strategy(policy) == "cache_strategy=cache_strategy or JustAsyncStrategy()"

    def test_test_mode_constructs_directly(self) -> None:
        policy = CachePolicy(kind=CacheStrategyKind.JUST_ASYNC)
        assert bind_cache_strategy(policy, RenderMode.TEST) == "cache_strategy=JustAsyncStrategy()"

    @pytest.mark.parametrize("method", list(HttpMethod))
    def test_applies_only_to_cacheable_methods(self, method: HttpMethod) -> None:
        policy = CachePolicy(kind=CacheStrategyKind.JUST_CACHE, ttl=1)
        fragment = bind_contract(_contract(method, policy))
        cacheable = not method.is_multipart and not method.is_streaming
        assert method.applies_cache_strategy is cacheable
        assert bool(fragment) is cacheable


class TestRequiredImports:
    def test_with_ttl(self) -> None:
        policy = CachePolicy(kind=CacheStrategyKind.JUST_CACHE, ttl=1)
        assert required_imports(policy) == ["JustCacheStrategy", "timedelta"]

    def test_just_async(self) -> None:
        policy = CachePolicy(kind=CacheStrategyKind.JUST_ASYNC, ttl=1)
        assert required_imports(policy) == ["JustAsyncStrategy"]

    def test_none(self) -> None:
        assert required_imports(None) == []
