"""Userinfo endpoint client."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from kreds_oidc.exceptions import ConfigurationMissingError, UserInfoError
from kreds_oidc.models import StrategyConfig, TokenRecord, UserInfo
from kreds_oidc.oidc.discovery import DiscoveryClient
from kreds_oidc.oidc.http import JSON_HEADERS, open_client

logger = logging.getLogger(__name__)


class UserInfoFetcher:
    """Fetch profile claims for an access token.

    Failures are collapsed the same way as in
    :class:`~kreds_oidc.oidc.token.TokenExchanger`: logged with traceback,
    re-raised as :class:`~kreds_oidc.exceptions.UserInfoError`.
    """

    def __init__(
        self,
        config: StrategyConfig,
        discovery: DiscoveryClient,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._config = config
        self._discovery = discovery
        self._http_client = http_client

    async def fetch_user_info(self, token: TokenRecord) -> UserInfo:
        """Return the claims the provider holds for *token*'s subject.

        Sends ``Authorization: <token_type> <access_token>``.

        Raises:
            ConfigurationMissingError: If no userinfo endpoint is known.
            UserInfoError: If the request fails in any way.
        """
        url = self._discovery.metadata.userinfo_endpoint
        if not url:
            raise ConfigurationMissingError(self._config.name, "userinfo_endpoint")

        headers = {
            **JSON_HEADERS,
            "Authorization": f"{token.token_type} {token.access_token}",
        }
        try:
            async with open_client(self._config, self._http_client) as client:
                response = await client.get(url, headers=headers)
                response.raise_for_status()
                return UserInfo.model_validate(response.json())
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(
                "UserInfo request for strategy '%s' failed", self._config.name, exc_info=True
            )
            raise UserInfoError(
                "UserInfo endpoint responded with a non-OK status code.", cause=exc
            ) from exc
