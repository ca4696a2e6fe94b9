"""Minimal stand-in for the ``core`` package generated projects import.

Copied to ``<project>/core/__init__.py`` by the layer tests so generated
modules can be imported and executed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Generic, Optional, TypeVar

L = TypeVar("L")
R = TypeVar("R")
T = TypeVar("T")
B = TypeVar("B")


class Response:
    def __init__(self, text: str = "", status_code: int = 200, headers: Optional[dict[str, str]] = None) -> None:
        self.text = text
        self.content = text.encode()
        self.status_code = status_code
        self.headers = headers or {}


class HttpClient:
    pass


class CacheStrategy:
    pass


@dataclass(frozen=True)
class JustCacheStrategy(CacheStrategy):
    ttl: Optional[timedelta] = None
    keep_expired_cache: Optional[bool] = None


@dataclass(frozen=True)
class AsyncOrCacheStrategy(CacheStrategy):
    ttl: Optional[timedelta] = None
    keep_expired_cache: Optional[bool] = None


@dataclass(frozen=True)
class CacheOrAsyncStrategy(CacheStrategy):
    ttl: Optional[timedelta] = None
    keep_expired_cache: Optional[bool] = None


@dataclass(frozen=True)
class JustAsyncStrategy(CacheStrategy):
    pass


@dataclass(frozen=True)
class Failure:
    message: str


class InternalFailure(Failure):
    pass


class ApiException(Exception):
    def to_failure(self) -> Failure:
        return Failure(str(self))


class Either(Generic[L, R]):
    pass


@dataclass(frozen=True)
class Left(Either[Any, Any]):
    value: Any


@dataclass(frozen=True)
class Right(Either[Any, Any]):
    value: Any


class UseCase(Generic[T, B]):
    pass


class StreamUseCase(Generic[T, B]):
    pass
