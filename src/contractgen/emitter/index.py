"""Structured index of declarations already emitted into the endpoints aggregator.

Declarations are deduplicated by key, never by rendered text: one base-URL
factory per key, one endpoint factory per ``(endpoint, apps)`` pair. When a
later contract declares the same endpoint with a different path, the first
declaration wins and a warning names both.
"""

from __future__ import annotations

from typing import Optional

from contractgen import output
from contractgen.compiler.path_template import base_url_factories
from contractgen.models import BaseUrlFactory, UriFactory


class EmissionIndex:
    """Ordered record of factories emitted during one aggregator build."""

    def __init__(self) -> None:
        self._base_urls: dict[str, BaseUrlFactory] = {}
        self._endpoints: dict[tuple[str, Optional[str]], UriFactory] = {}

    def add_base_url(self, key: str) -> bool:
        """Record the base-URL factory for *key*; False if already present."""
        if key in self._base_urls:
            return False
        (factory,) = base_url_factories([key])
        self._base_urls[key] = factory
        return True

    def add_endpoint(self, api_name: str, apps_name: Optional[str], factory: UriFactory) -> bool:
        """Record an endpoint factory; False if the key was already taken."""
        key = (api_name, apps_name)
        existing = self._endpoints.get(key)
        if existing is not None:
            if existing != factory:
                output.warning(
                    f"Endpoint '{factory.name}' is declared twice with different paths "
                    f"('{existing.template}' and '{factory.template}'); keeping the first"
                )
            return False
        if not factory.is_absolute:
            self.add_base_url(factory.base_url_key)
        self._endpoints[key] = factory
        return True

    def __contains__(self, key: object) -> bool:
        return key in self._base_urls or key in self._endpoints

    @property
    def base_urls(self) -> list[BaseUrlFactory]:
        return list(self._base_urls.values())

    @property
    def endpoints(self) -> list[UriFactory]:
        return list(self._endpoints.values())
