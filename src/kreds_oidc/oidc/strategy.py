"""OpenID Connect authentication strategy -- the flow controller.

This module provides :class:`OIDCAuthenticationStrategy`, which decides for
each authentication attempt whether the client must first be redirected to
the provider or whether the attempt carries a grant that can be exchanged
for an identity:

1. No payload at all -- the strategy declines and returns ``None``.
2. An empty payload -- discovery runs (first time only) and a redirect
   outcome pointing at the authorization endpoint is returned.
3. A ``code`` or ``refresh_token`` payload -- discovery, token exchange and
   userinfo fetch run in sequence, and the result is handed to the host's
   ``verify`` callback, whose return value becomes the outcome.

Only the discovered provider metadata survives between calls.

See Also:
    :class:`kreds_oidc.auth.base.Strategy` for the interface this class
    satisfies.
"""

from __future__ import annotations

import inspect
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import httpx

from kreds_oidc.auth.base import AuthContext, AuthenticationOutcome, ClientAction, VerifyUserFunction
from kreds_oidc.exceptions import ConfigurationMissingError, UnsupportedPayloadError
from kreds_oidc.models import (
    AccessTokenPayload,
    CodePayload,
    EmptyPayload,
    GrantType,
    ProviderMetadata,
    StrategyConfig,
    TokenRecord,
    VerifyData,
    parse_payload,
)
from kreds_oidc.oidc.authorize import build_authorization_url
from kreds_oidc.oidc.discovery import DiscoveryClient
from kreds_oidc.oidc.token import TokenExchanger
from kreds_oidc.oidc.userinfo import UserInfoFetcher

logger = logging.getLogger(__name__)

REDIRECT_ACTION = "redirect"


def compute_expires_at(
    token: TokenRecord, now: Optional[datetime] = None
) -> Optional[datetime]:
    """Return when *token* expires, or ``None`` if the provider did not say."""
    if token.expires_in is None:
        return None
    now = now or datetime.now(timezone.utc)
    return now + timedelta(seconds=token.expires_in)


class OIDCAuthenticationStrategy:
    """Authenticate via OpenID Connect authorization code or refresh token.

    Args:
        config: Client registration and provider location.
        verify: Host callback ``verify(context, data)`` receiving a
            :class:`~kreds_oidc.models.VerifyData`. May be a plain function
            or a coroutine function.
        http_client: Optional client used for every provider request. It
            is never closed by the strategy. When omitted, each request
            uses a short-lived client built from *config*.

    Example::

        strategy = OIDCAuthenticationStrategy(config, verify=load_user)
        outcome = await strategy.authenticate(AuthContext(payload={}))
        # outcome.action.url -> provider's authorization endpoint
    """

    def __init__(
        self,
        config: StrategyConfig,
        verify: VerifyUserFunction,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._config = config
        self._verify = verify
        self._discovery = DiscoveryClient(config, http_client)
        self._tokens = TokenExchanger(config, self._discovery, http_client)
        self._userinfo = UserInfoFetcher(config, self._discovery, http_client)

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def config(self) -> StrategyConfig:
        return self._config

    @property
    def configuration(self) -> ProviderMetadata:
        """Provider metadata cached by the last successful discovery."""
        return self._discovery.metadata

    @property
    def redirect_url(self) -> Optional[str]:
        """The authorization URL, or ``None`` until an authorization endpoint is known."""
        return build_authorization_url(self._discovery.metadata, self._config.client)

    @property
    def action(self) -> ClientAction:
        """Redirect action to the provider's authorization endpoint.

        Uses cached metadata only; call :meth:`ensure_configuration` first
        to populate it.

        Raises:
            ConfigurationMissingError: If no authorization endpoint is known.
        """
        url = self.redirect_url
        if not url:
            raise ConfigurationMissingError(self.name, "authorization_endpoint")
        return ClientAction(type=REDIRECT_ACTION, url=url)

    async def ensure_configuration(self) -> ProviderMetadata:
        """Run discovery unless metadata is already cached."""
        return await self._discovery.ensure_configuration()

    async def authenticate(self, context: AuthContext) -> Any:
        """Advance authentication for *context*.

        Args:
            context: The host's view of the current attempt.

        Returns:
            ``None`` if ``context.payload`` is ``None``; an
            :class:`~kreds_oidc.auth.base.AuthenticationOutcome` with
            ``done=False`` and a redirect action if the payload is empty;
            otherwise the value returned by ``verify``.

        Raises:
            UnsupportedPayloadError: If the payload is neither empty nor
                carries a code or refresh token. Raised before any network
                access.
            ConfigurationMissingError: If a required endpoint is unknown
                after discovery.
            TokenExchangeError: If the token request fails.
            UserInfoError: If the userinfo request fails.
        """
        if context.payload is None:
            return None

        payload = parse_payload(context.payload)
        if isinstance(payload, AccessTokenPayload):
            raise UnsupportedPayloadError("Not supported yet.")

        await self.ensure_configuration()

        if isinstance(payload, EmptyPayload):
            return AuthenticationOutcome(done=False, action=self.action)

        if isinstance(payload, CodePayload):
            grant_type, code = GrantType.AUTHORIZATION_CODE, payload.code
        else:
            grant_type, code = GrantType.REFRESH_TOKEN, payload.refresh_token
        logger.debug("Strategy '%s' selected %s grant", self.name, grant_type.value)

        token = await self._tokens.exchange(grant_type, code)
        user_info = await self._userinfo.fetch_user_info(token)
        data = VerifyData(
            token=token, user_info=user_info, expires_at=compute_expires_at(token)
        )

        result = self._verify(context, data)
        if inspect.isawaitable(result):
            result = await result
        return result

    def validate_config(self) -> list[str]:
        """Report configuration problems without touching the network.

        Returns:
            A list of human-readable error strings. Empty if valid.
        """
        client = self._config.client
        errors: list[str] = []
        if not client.id:
            errors.append("OpenID Connect requires a non-empty client 'id'")
        if not client.redirect_url:
            errors.append("OpenID Connect requires a 'redirect_url'")
        if "openid" not in client.scopes:
            errors.append("OpenID Connect requires the 'openid' scope")
        return errors
