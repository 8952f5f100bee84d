"""OpenID Connect authentication strategy.

Implements discovery (``/.well-known/openid-configuration``), the
authorization redirect, the authorization-code and refresh-token grants,
and the userinfo fetch, and wires them together in
:class:`~kreds_oidc.oidc.strategy.OIDCAuthenticationStrategy`.

See Also:
    :mod:`kreds_oidc.auth.base` for the host interface contract.
"""

from kreds_oidc.oidc.authorize import build_authorization_url
from kreds_oidc.oidc.discovery import DiscoveryClient, discovery_url
from kreds_oidc.oidc.strategy import OIDCAuthenticationStrategy
from kreds_oidc.oidc.token import TokenExchanger
from kreds_oidc.oidc.userinfo import UserInfoFetcher

__all__ = [
    "DiscoveryClient",
    "OIDCAuthenticationStrategy",
    "TokenExchanger",
    "UserInfoFetcher",
    "build_authorization_url",
    "discovery_url",
]
