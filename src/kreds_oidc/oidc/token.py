"""Token endpoint client for the authorization-code and refresh-token grants.

This module provides :class:`TokenExchanger`, which POSTs a form-encoded
grant request to the provider's ``token_endpoint`` and decodes the answer
into a :class:`~kreds_oidc.models.TokenRecord`.

Every failure of the remote call (transport error, non-2xx status, body
that is not JSON or not a token response) is logged with its traceback and
re-raised as a single :class:`~kreds_oidc.exceptions.TokenExchangeError`.
The underlying exception is chained and kept on ``cause`` for diagnostics.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from kreds_oidc.exceptions import ConfigurationMissingError, TokenExchangeError
from kreds_oidc.models import GrantType, StrategyConfig, TokenRecord
from kreds_oidc.oidc.discovery import DiscoveryClient
from kreds_oidc.oidc.http import JSON_HEADERS, open_client

logger = logging.getLogger(__name__)


class TokenExchanger:
    """Perform OAuth2 grants against the discovered token endpoint."""

    def __init__(
        self,
        config: StrategyConfig,
        discovery: DiscoveryClient,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._config = config
        self._discovery = discovery
        self._http_client = http_client

    def build_form(self, grant_type: GrantType, code: str) -> dict[str, str]:
        """Return the form fields for *grant_type*, in wire order.

        *code* is sent as ``code`` for the authorization-code grant and as
        ``refresh_token`` for the refresh-token grant.
        """
        client = self._config.client
        grant_type = GrantType(grant_type)
        code_field = "code" if grant_type is GrantType.AUTHORIZATION_CODE else "refresh_token"
        return {
            "client_id": client.id,
            "client_secret": client.secret,
            "grant_type": grant_type.value,
            code_field: code,
            "redirect_uri": client.redirect_url,
            "scope": client.scope,
        }

    async def exchange(self, grant_type: GrantType, code: str) -> TokenRecord:
        """Exchange an authorization code or refresh token for tokens.

        Args:
            grant_type: Which grant to perform.
            code: The authorization code, or the refresh token.

        Returns:
            The decoded token response.

        Raises:
            ConfigurationMissingError: If no token endpoint is known. No
                request is made.
            TokenExchangeError: If the request fails in any way.
        """
        url = self._discovery.metadata.token_endpoint
        if not url:
            raise ConfigurationMissingError(self._config.name, "token_endpoint")

        grant_type = GrantType(grant_type)
        logger.debug("Requesting %s grant from %s", grant_type.value, url)
        try:
            async with open_client(self._config, self._http_client) as client:
                response = await client.post(
                    url, data=self.build_form(grant_type, code), headers=JSON_HEADERS
                )
                response.raise_for_status()
                return TokenRecord.model_validate(response.json())
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(
                "Token request for strategy '%s' failed", self._config.name, exc_info=True
            )
            raise TokenExchangeError(
                "Token endpoint responded with a non-OK status code.", cause=exc
            ) from exc
