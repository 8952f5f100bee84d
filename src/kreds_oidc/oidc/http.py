"""HTTP client plumbing shared by the OIDC components."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

import httpx

from kreds_oidc.models import StrategyConfig

JSON_HEADERS = {"Accept": "application/json"}


@asynccontextmanager
async def open_client(
    config: StrategyConfig, http_client: Optional[httpx.AsyncClient] = None
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield *http_client* if given, else a short-lived client built from *config*.

    An injected client belongs to the caller and is left open.
    """
    if http_client is not None:
        yield http_client
        return

    async with httpx.AsyncClient(
        timeout=config.timeout,
        verify=config.verify_ssl,
        follow_redirects=True,
    ) as client:
        yield client
