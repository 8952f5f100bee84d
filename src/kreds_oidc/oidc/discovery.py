"""OpenID Connect discovery -- fetches and caches provider metadata.

This module provides :class:`DiscoveryClient`, which loads the provider's
discovery document from ``<server_url>/.well-known/openid-configuration``
and keeps the resulting :class:`~kreds_oidc.models.ProviderMetadata` for the
lifetime of the owning strategy. There is no expiry or invalidation.

Failures are not wrapped: an :class:`httpx.HTTPError`, a JSON decoding error
or a :class:`pydantic.ValidationError` reaches the caller unchanged, and the
cache stays empty so the next call retries from scratch.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional
from urllib.parse import urljoin

import httpx

from kreds_oidc.models import ProviderMetadata, StrategyConfig
from kreds_oidc.oidc.http import JSON_HEADERS, open_client

logger = logging.getLogger(__name__)

WELL_KNOWN_PATH = ".well-known/openid-configuration"


def discovery_url(server_url: str) -> str:
    """Return the discovery document URL for *server_url*.

    The well-known suffix is appended below the full base path, whether
    or not *server_url* ends with a slash::

        >>> discovery_url("https://idp.example.com/realms/main")
        'https://idp.example.com/realms/main/.well-known/openid-configuration'
    """
    return urljoin(server_url.rstrip("/") + "/", WELL_KNOWN_PATH)


class DiscoveryClient:
    """Lazy, cached loader for the provider's discovery document.

    Concurrent first calls are coalesced behind an :class:`asyncio.Lock`
    so only one of them performs the fetch.
    """

    def __init__(
        self,
        config: StrategyConfig,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._config = config
        self._http_client = http_client
        self._metadata = ProviderMetadata()
        self._lock = asyncio.Lock()

    @property
    def url(self) -> str:
        return discovery_url(self._config.server_url)

    @property
    def metadata(self) -> ProviderMetadata:
        """The cached metadata; empty until discovery succeeds."""
        return self._metadata

    async def discover(self) -> ProviderMetadata:
        """Fetch and parse the discovery document without touching the cache.

        Returns:
            The provider's metadata.

        Raises:
            httpx.HTTPError: On transport failure or a non-2xx status.
            ValueError: If the body is not JSON or not a JSON object.
        """
        logger.debug("Fetching OpenID configuration from %s", self.url)
        async with open_client(self._config, self._http_client) as client:
            response = await client.get(self.url, headers=JSON_HEADERS)
            response.raise_for_status()
            return ProviderMetadata.model_validate(response.json())

    async def ensure_configuration(self) -> ProviderMetadata:
        """Return the cached metadata, fetching it first if the cache is empty.

        Idempotent once discovery has succeeded: later calls perform no
        network access.
        """
        if not self._metadata.is_empty():
            return self._metadata

        async with self._lock:
            # Another task may have filled the cache while we waited.
            if self._metadata.is_empty():
                self._metadata = await self.discover()
                logger.debug(
                    "Cached OpenID configuration for %s", self._config.server_url
                )
        return self._metadata
